"""Service layer exception classes for Stock Tracker.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── InvalidProductName
    ├── ProductAlreadyExists
    ├── ProductNotFound
    ├── PersistenceError
    └── ReentrantMutation
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions inherit from this class.
    """

    pass


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class InvalidProductName(ValidationError):
    """Raised when a product name is empty or only whitespace.

    Example:
        >>> raise InvalidProductName("   ")
        InvalidProductName: Validation failed: Product name cannot be empty
    """

    def __init__(self, name: Optional[str]):
        self.name = name
        super().__init__(["Product name cannot be empty"])


class ProductAlreadyExists(ServiceError):
    """Raised when adding a product whose folded key is already stored.

    Args:
        key: The folded product key that already exists
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Product '{key}' already exists")


class ProductNotFound(ServiceError):
    """Raised when a product cannot be found by its folded key.

    Args:
        key: The folded product key that was not found
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Product '{key}' not found")


class PersistenceError(ServiceError):
    """Raised when the storage backend fails.

    Args:
        message: What was being attempted
        original_error: The backend exception, if any
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Persistence error: {message}")


class ReentrantMutation(ServiceError):
    """Raised when a store listener calls a mutating store operation.

    Listeners run inside the store's critical section, so a nested
    add/update/remove would interleave with the mutation being notified.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Cannot {operation} a product from inside a store change listener"
        )
