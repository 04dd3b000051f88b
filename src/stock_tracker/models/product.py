"""
Product model for catalog items held in stock.

This module contains:
- Product: A named, quantified, priced item, unique by its folded key
"""

from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String

from stock_tracker.utils.constants import MAX_NAME_LENGTH, TABLE_PRODUCT

from .base import BaseModel


class Product(BaseModel):
    """
    Product model representing one catalog entry.

    Attributes:
        key: Trimmed, case-folded name; unique, never changes after insert
        display_name: Name as typed by the user (trimmed)
        quantity: Units in stock (>= 0)
        price: Unit price with two decimal places (>= 0)
    """

    __tablename__ = TABLE_PRODUCT

    key = Column(String(MAX_NAME_LENGTH), nullable=False, unique=True, index=True)
    display_name = Column(String(MAX_NAME_LENGTH), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(12, 2), nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_product_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
    )
