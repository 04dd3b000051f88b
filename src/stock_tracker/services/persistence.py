"""
Persistence backends for the inventory store.

The store talks to storage only through ProductBackend, using plain
dictionary documents:

    {"key": "bolt", "display_name": "Bolt", "quantity": 10, "price": Decimal("1.50")}

Two backends are provided:
- SqlAlchemyProductBackend: SQLite (or any SQLAlchemy URL) via a session factory
- InMemoryProductBackend: insertion-ordered dictionary, for tests and scratch use

Backends raise PersistenceError when the underlying storage fails.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from stock_tracker.models import Product
from stock_tracker.services.database import session_scope
from stock_tracker.services.exceptions import PersistenceError
from stock_tracker.utils.datetime_utils import utc_now

ProductDocument = Dict[str, Any]

DOCUMENT_FIELDS = ("key", "display_name", "quantity", "price")


class ProductBackend(ABC):
    """Storage contract used by InventoryStore."""

    @abstractmethod
    def insert(self, document: ProductDocument) -> None:
        """Store a new product document."""

    @abstractmethod
    def delete_by_key(self, key: str) -> int:
        """Delete the document with this key; return how many were deleted."""

    @abstractmethod
    def update_by_key(self, key: str, quantity: int, price: Decimal) -> int:
        """Set quantity and price for this key; return how many matched."""

    @abstractmethod
    def find_all(self) -> List[ProductDocument]:
        """Return every document in insertion order."""

    @abstractmethod
    def find_by_key(self, key: str) -> Optional[ProductDocument]:
        """Return the document with this key, or None."""


class SqlAlchemyProductBackend(ProductBackend):
    """
    Product backend on top of a SQLAlchemy session factory.

    Each call runs in its own transaction (see session_scope), so a failed
    call leaves the database untouched.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def insert(self, document: ProductDocument) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.add(
                    Product(
                        key=document["key"],
                        display_name=document["display_name"],
                        quantity=document["quantity"],
                        price=document["price"],
                    )
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to insert product '{document['key']}'", e) from e

    def delete_by_key(self, key: str) -> int:
        try:
            with session_scope(self._session_factory) as session:
                return session.query(Product).filter(Product.key == key).delete()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete product '{key}'", e) from e

    def update_by_key(self, key: str, quantity: int, price: Decimal) -> int:
        try:
            with session_scope(self._session_factory) as session:
                return (
                    session.query(Product)
                    .filter(Product.key == key)
                    .update(
                        {
                            Product.quantity: quantity,
                            Product.price: price,
                            Product.updated_at: utc_now(),
                        },
                        synchronize_session=False,
                    )
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update product '{key}'", e) from e

    def find_all(self) -> List[ProductDocument]:
        try:
            with session_scope(self._session_factory) as session:
                products = session.query(Product).order_by(Product.id).all()
                return [_to_document(product) for product in products]
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to list products", e) from e

    def find_by_key(self, key: str) -> Optional[ProductDocument]:
        try:
            with session_scope(self._session_factory) as session:
                product = session.query(Product).filter(Product.key == key).first()
                return _to_document(product) if product is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to find product '{key}'", e) from e


class InMemoryProductBackend(ProductBackend):
    """Dictionary-backed product storage. Callers only ever see copies of the stored documents."""

    def __init__(self):
        self._documents: Dict[str, ProductDocument] = {}

    def insert(self, document: ProductDocument) -> None:
        key = document["key"]
        if key in self._documents:
            raise PersistenceError(f"Duplicate key '{key}'")
        self._documents[key] = {field: document[field] for field in DOCUMENT_FIELDS}

    def delete_by_key(self, key: str) -> int:
        return 1 if self._documents.pop(key, None) is not None else 0

    def update_by_key(self, key: str, quantity: int, price: Decimal) -> int:
        document = self._documents.get(key)
        if document is None:
            return 0
        document["quantity"] = quantity
        document["price"] = price
        return 1

    def find_all(self) -> List[ProductDocument]:
        return [dict(document) for document in self._documents.values()]

    def find_by_key(self, key: str) -> Optional[ProductDocument]:
        document = self._documents.get(key)
        return dict(document) if document is not None else None


def _to_document(product: Product) -> ProductDocument:
    return {
        "key": product.key,
        "display_name": product.display_name,
        "quantity": product.quantity,
        "price": Decimal(str(product.price)),
    }
