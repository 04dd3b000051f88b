"""
Inventory Store - owns the product catalog and notifies listeners of changes.

This service provides:
- add / update / remove of products, unique by folded name
- find / list lookups returning immutable ProductRecord snapshots
- filter_products for the name-prefix / minimum-quantity list filter
- listener registration; every successful mutation fires exactly one
  notification pass, in registration order, after the backend call succeeded

All mutations run under one lock covering lookup, persist and notify.
Listeners run inside that critical section: they may read from the store,
but calling add/update/remove from a listener raises ReentrantMutation.

Usage:
    from stock_tracker.services.inventory_store import InventoryStore
    from stock_tracker.services.persistence import InMemoryProductBackend

    store = InventoryStore(InMemoryProductBackend())
    store.add_listener(lambda change: print(change.operation, change.key))
    store.add("Bolt", 10, Decimal("1.50"))
"""

import itertools
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from stock_tracker.services.exceptions import (
    InvalidProductName,
    PersistenceError,
    ProductAlreadyExists,
    ProductNotFound,
    ReentrantMutation,
    ValidationError,
)
from stock_tracker.services.logging_utils import get_service_logger, log_operation
from stock_tracker.services.persistence import ProductBackend, ProductDocument
from stock_tracker.utils.constants import CURRENCY_QUANTUM, MAX_PRICE, MAX_QUANTITY
from stock_tracker.utils.validators import normalize_key, sanitize_string

logger = get_service_logger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class ProductRecord:
    """
    Immutable snapshot of one stored product.

    Attributes:
        key: Trimmed, case-folded name used for lookups
        display_name: Name as originally typed (trimmed)
        quantity: Units in stock (>= 0)
        price: Unit price, two decimal places (>= 0)
    """

    key: str
    display_name: str
    quantity: int
    price: Decimal

    @property
    def total_value(self) -> Decimal:
        """Stock value of this product (quantity * price)."""
        return self.quantity * self.price

    def to_document(self) -> ProductDocument:
        return {
            "key": self.key,
            "display_name": self.display_name,
            "quantity": self.quantity,
            "price": self.price,
        }

    @classmethod
    def from_document(cls, document: ProductDocument) -> "ProductRecord":
        return cls(
            key=document["key"],
            display_name=document.get("display_name") or document["key"],
            quantity=int(document["quantity"]),
            price=Decimal(str(document["price"])),
        )


@dataclass(frozen=True)
class StoreChange:
    """
    Notification payload handed to store listeners.

    Attributes:
        operation: "add", "update" or "remove"
        key: Folded key of the affected product
        record: The product after the change ("remove": as it was before deletion)
    """

    operation: str
    key: str
    record: ProductRecord


StoreListener = Callable[[StoreChange], Any]


class InventoryStore:
    """
    Observable product catalog backed by an injected ProductBackend.

    Negative quantities and prices passed to add/update are clamped to zero;
    prices are rounded half-up to two decimal places. Values above
    MAX_QUANTITY or MAX_PRICE raise ValidationError.
    """

    def __init__(self, backend: ProductBackend):
        """
        Args:
            backend: Persistence collaborator. Its lifetime belongs to the caller.
        """
        self._backend = backend
        self._lock = threading.RLock()
        self._mutating = False
        self._listeners: Dict[int, StoreListener] = {}
        self._listener_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: StoreListener) -> int:
        """
        Register a change listener.

        Args:
            listener: Callable receiving a StoreChange after each successful mutation

        Returns:
            Listener id, usable with remove_listener()
        """
        with self._lock:
            listener_id = next(self._listener_ids)
            self._listeners[listener_id] = listener
            return listener_id

    def remove_listener(self, listener: Union[int, StoreListener]) -> bool:
        """
        Unregister a listener by id or by the callable itself.

        A listener removed during a notification pass is not invoked for the
        rest of that pass.

        Returns:
            True if something was removed
        """
        with self._lock:
            if isinstance(listener, int):
                return self._listeners.pop(listener, None) is not None

            matching = [lid for lid, cb in self._listeners.items() if cb == listener]
            for listener_id in matching:
                del self._listeners[listener_id]
            return bool(matching)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, name: str, quantity: int, price: Union[Decimal, int, float, str]) -> ProductRecord:
        """
        Add a new product.

        Args:
            name: Product name; stored folded as the key
            quantity: Units in stock (negative values become 0)
            price: Unit price (negative values become 0)

        Returns:
            The stored ProductRecord

        Raises:
            InvalidProductName: If the name is empty or blank
            ValidationError: If quantity or price is not a number
            ProductAlreadyExists: If the folded name is already stored
            PersistenceError: If the backend fails
            ReentrantMutation: If called from a store listener
        """
        display_name = sanitize_string(name)
        if display_name is None:
            raise InvalidProductName(name)

        record = ProductRecord(
            key=normalize_key(display_name),
            display_name=display_name,
            quantity=_clamp_quantity(quantity),
            price=_clamp_price(price),
        )

        with self._mutation("add"):
            if self._call_backend("add", self._backend.find_by_key, record.key) is not None:
                log_operation(
                    logger, operation="add_product", outcome="duplicate",
                    level=logging.WARNING, product_key=record.key,
                )
                raise ProductAlreadyExists(record.key)

            self._call_backend("add", self._backend.insert, record.to_document())
            log_operation(
                logger, operation="add_product", outcome="success",
                product_key=record.key, quantity=record.quantity, price=str(record.price),
            )
            self._notify(StoreChange("add", record.key, record))

        return record

    def update(self, name: str, quantity: int, price: Union[Decimal, int, float, str]) -> ProductRecord:
        """
        Replace quantity and price of an existing product.

        The key and display name never change.

        Returns:
            The updated ProductRecord

        Raises:
            ProductNotFound: If no product has this folded name
            ValidationError: If quantity or price is not a number
            PersistenceError: If the backend fails
            ReentrantMutation: If called from a store listener
        """
        key = normalize_key(name)
        new_quantity = _clamp_quantity(quantity)
        new_price = _clamp_price(price)

        with self._mutation("update"):
            existing = self._call_backend("update", self._backend.find_by_key, key) if key else None
            if existing is None:
                self._log_not_found("update_product", key)
                raise ProductNotFound(key)

            matched = self._call_backend(
                "update", self._backend.update_by_key, key, new_quantity, new_price
            )
            if not matched:
                self._log_not_found("update_product", key)
                raise ProductNotFound(key)

            record = ProductRecord(
                key=key,
                display_name=existing.get("display_name") or key,
                quantity=new_quantity,
                price=new_price,
            )
            log_operation(
                logger, operation="update_product", outcome="success",
                product_key=key, quantity=new_quantity, price=str(new_price),
            )
            self._notify(StoreChange("update", key, record))

        return record

    def remove(self, name: str) -> None:
        """
        Remove a product.

        Raises:
            ProductNotFound: If no product has this folded name
            PersistenceError: If the backend fails
            ReentrantMutation: If called from a store listener
        """
        key = normalize_key(name)

        with self._mutation("remove"):
            existing = self._call_backend("remove", self._backend.find_by_key, key) if key else None
            if existing is None:
                self._log_not_found("remove_product", key)
                raise ProductNotFound(key)

            deleted = self._call_backend("remove", self._backend.delete_by_key, key)
            if not deleted:
                self._log_not_found("remove_product", key)
                raise ProductNotFound(key)

            log_operation(logger, operation="remove_product", outcome="success", product_key=key)
            self._notify(StoreChange("remove", key, ProductRecord.from_document(existing)))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find(self, name: Optional[str]) -> Optional[ProductRecord]:
        """
        Case-insensitive lookup.

        Returns:
            The ProductRecord, or None if absent (or the name is blank)
        """
        key = normalize_key(name)
        if not key:
            return None

        with self._lock:
            document = self._call_backend("find", self._backend.find_by_key, key)
        return ProductRecord.from_document(document) if document is not None else None

    def contains(self, name: Optional[str]) -> bool:
        """True if a product with this folded name is stored."""
        return self.find(name) is not None

    def list(self) -> List[ProductRecord]:
        """
        Snapshot of every product, in insertion order.

        Repeated calls without an intervening mutation return equal lists.
        """
        with self._lock:
            documents = self._call_backend("list", self._backend.find_all)
        return [ProductRecord.from_document(document) for document in documents]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _mutation(self, operation: str) -> Iterator[None]:
        with self._lock:
            # Only the thread holding the lock can observe _mutating == True
            if self._mutating:
                raise ReentrantMutation(operation)
            self._mutating = True
            try:
                yield
            finally:
                self._mutating = False

    def _call_backend(self, operation: str, func: Callable, *args: Any) -> Any:
        try:
            return func(*args)
        except Exception as e:
            log_operation(
                logger, operation=operation, outcome="persistence_error",
                level=logging.ERROR, error=str(e),
            )
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Backend failed during {operation}", e) from e

    def _notify(self, change: StoreChange) -> None:
        for listener_id in list(self._listeners):
            listener = self._listeners.get(listener_id)
            if listener is None:
                continue
            listener(change)

    def _log_not_found(self, operation: str, key: str) -> None:
        log_operation(
            logger, operation=operation, outcome="not_found",
            level=logging.WARNING, product_key=key,
        )


def filter_products(
    records: Iterable[ProductRecord], name_prefix: Optional[str] = None, min_quantity: int = 0
) -> List[ProductRecord]:
    """
    Products whose name starts with name_prefix (ignoring case) and whose
    quantity is at least min_quantity, in their original order.

    Args:
        records: Products to filter, usually InventoryStore.list()
        name_prefix: Typed filter text; blank or None matches every name
        min_quantity: Smallest quantity kept

    Example:
        >>> filter_products(store.list(), "par", 5)
    """
    prefix = normalize_key(name_prefix)
    return [
        record
        for record in records
        if record.key.startswith(prefix) and record.quantity >= min_quantity
    ]


def _clamp_quantity(quantity: Any) -> int:
    try:
        value = int(quantity)
    except (TypeError, ValueError) as e:
        raise ValidationError([f"Quantity must be a whole number, got {quantity!r}"]) from e
    if value > MAX_QUANTITY:
        raise ValidationError([f"Quantity must not exceed {MAX_QUANTITY}"])
    return max(value, 0)


def _clamp_price(price: Any) -> Decimal:
    try:
        value = price if isinstance(price, Decimal) else Decimal(str(price))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError([f"Price must be a number, got {price!r}"]) from e

    if not value.is_finite():
        raise ValidationError([f"Price must be a finite number, got {price!r}"])

    if value <= 0:
        return ZERO.quantize(CURRENCY_QUANTUM)
    if value > MAX_PRICE:
        raise ValidationError([f"Price must not exceed {MAX_PRICE}"])
    return value.quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)
