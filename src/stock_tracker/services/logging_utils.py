"""Structured log entries for store mutations and report exports.

Operations logged: add_product, update_product and remove_product (outcome
success, duplicate or not_found), backend failures as persistence_error
under the store call name, and export_csv / write_report_csv.
"""

import logging
from typing import Any

LOGGER_PREFIX = "stock_tracker.services"

# Context fields repeated in the message text; the rest stay in `extra`
MESSAGE_FIELDS = ("product_key", "path")


def get_service_logger(name: str) -> logging.Logger:
    """
    Logger named 'stock_tracker.services.<module>'.

    Example:
        >>> get_service_logger("stock_tracker.services.inventory_store").name
        'stock_tracker.services.inventory_store'
    """
    module = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{LOGGER_PREFIX}.{module}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log "<operation>: <outcome>" with the context attached as record attributes.

    Context keys must not clash with LogRecord attributes (use product_key,
    not name).

    Args:
        logger: Logger from get_service_logger
        operation: e.g. "add_product", "export_csv"
        outcome: e.g. "success", "not_found", "persistence_error"
        level: Log level (default: INFO)
        **context: product_key, price, row_count, path, error...
    """
    message = f"{operation}: {outcome}"
    shown = [f"{key}={context[key]}" for key in MESSAGE_FIELDS if key in context]
    if shown:
        message = f"{message} ({', '.join(shown)})"

    logger.log(level, message, extra={"operation": operation, "outcome": outcome, **context})
