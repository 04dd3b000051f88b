"""
Database models package.

This package contains the SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .product import Product

__all__ = ["Base", "BaseModel", "Product"]
