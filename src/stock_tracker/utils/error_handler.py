"""Centralized error handler for the application shell.

Maps service exceptions to user-friendly (title, message) pairs while
preserving technical details in logs for debugging. The shell decides how to
show the pair (dialog, status line, stderr).
"""

import logging
from typing import Tuple

from stock_tracker.services.exceptions import (
    InvalidProductName,
    PersistenceError,
    ProductAlreadyExists,
    ProductNotFound,
    ReentrantMutation,
    ServiceError,
    ValidationError,
)
from stock_tracker.utils.constants import (
    ERROR_NAME_REQUIRED,
    ERROR_PRODUCT_EXISTS,
    ERROR_PRODUCT_NOT_FOUND,
)

logger = logging.getLogger(__name__)


def handle_error(exception: Exception, operation: str = "Operação") -> Tuple[str, str]:
    """Log an exception and return the message to show the user.

    Args:
        exception: The caught exception
        operation: What was being attempted (e.g., "Adicionar produto")

    Returns:
        Tuple of (title, user_message)

    Example:
        try:
            store.add(name, quantity, price)
        except ServiceError as e:
            title, message = handle_error(e, operation="Adicionar produto")
    """
    title, message = get_user_message(exception, operation)
    _log_error(exception, operation)
    return title, message


def get_user_message(exception: Exception, operation: str = "Operação") -> Tuple[str, str]:
    """Convert an exception to a user-facing title and message.

    Specific exception types are checked first, then the ServiceError base,
    then a generic fallback for unexpected exceptions.
    """
    if isinstance(exception, InvalidProductName):
        return "Dados Inválidos", ERROR_NAME_REQUIRED

    # After InvalidProductName, which is a ValidationError too
    if isinstance(exception, ValidationError):
        if exception.errors:
            return "Dados Inválidos", "; ".join(str(e) for e in exception.errors)
        return "Dados Inválidos", str(exception)

    if isinstance(exception, ProductAlreadyExists):
        return "Produto Duplicado", f"{ERROR_PRODUCT_EXISTS} ({exception.key})"

    if isinstance(exception, ProductNotFound):
        return "Não Encontrado", f"{ERROR_PRODUCT_NOT_FOUND} ({exception.key})"

    if isinstance(exception, PersistenceError):
        return "Erro no Banco de Dados", f"{operation} falhou: erro ao acessar o banco de dados."

    if isinstance(exception, ReentrantMutation):
        return "Operação Inválida", f"{operation} não pode ser executada durante uma atualização."

    if isinstance(exception, ServiceError):
        return "Erro", f"{operation} falhou: {exception}"

    if isinstance(exception, OSError):
        return "Erro na Exportação", f"{operation} falhou: {exception.strerror or exception}"

    return "Erro Inesperado", f"{operation} falhou com um erro inesperado."


def _log_error(exception: Exception, operation: str) -> None:
    """Log technical error details.

    Expected service errors are logged without a stack trace; anything else
    gets the full trace.
    """
    if isinstance(exception, (ServiceError, OSError)):
        logger.error(
            f"{operation} failed: {exception.__class__.__name__}: {exception}",
            extra={
                "error_data": {
                    "operation": operation,
                    "exception_type": exception.__class__.__name__,
                    "message": str(exception),
                }
            },
        )
        if isinstance(exception, PersistenceError) and exception.original_error is not None:
            logger.debug(f"Underlying backend error: {exception.original_error!r}")
    else:
        logger.exception(f"{operation} failed with unexpected error: {exception.__class__.__name__}")
