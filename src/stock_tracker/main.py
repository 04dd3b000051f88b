"""
Main entry point for Stock Tracker.

Command-line shell around the core: it opens the database, builds the
inventory store, and runs one command. Commands mirror the buttons of the
stock window (add, update, remove, list, report, export).

Usage Examples:
    stock-tracker add "Parafuso M6" 10 1,50
    stock-tracker update "parafuso m6" 12 1,45
    stock-tracker remove "Parafuso M6"
    stock-tracker find "parafuso m6"
    stock-tracker list
    stock-tracker list --name par --min-quantity 5
    stock-tracker report
    stock-tracker export ~/estoque.csv

    # Use another database
    stock-tracker --db sqlite:///./scratch.db list
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from stock_tracker.forms import FormField, FormValidator
from stock_tracker.services.database import close_connections, initialize_app_database
from stock_tracker.services.exceptions import ServiceError
from stock_tracker.services.inventory_store import InventoryStore, StoreChange, filter_products
from stock_tracker.services.persistence import SqlAlchemyProductBackend
from stock_tracker.services.report_service import build_report, format_currency, write_report_csv
from stock_tracker.utils.config import get_config
from stock_tracker.utils.constants import (
    ERROR_PRODUCT_NOT_FOUND,
    REPORT_TITLE,
    SUCCESS_ADDED,
    SUCCESS_EXPORTED,
    SUCCESS_REMOVED,
    SUCCESS_UPDATED,
)
from stock_tracker.utils.error_handler import handle_error
from stock_tracker.utils.validators import parse_min_quantity

logger = logging.getLogger(__name__)

CHANGE_MESSAGES = {
    "add": SUCCESS_ADDED,
    "update": SUCCESS_UPDATED,
    "remove": SUCCESS_REMOVED,
}


def validate_form(
    store: InventoryStore, texts: Dict[FormField, str], name_must_exist: bool
) -> FormValidator:
    """
    Run command-line values through the same validator the forms use.

    Each value is typed into its field and the field is then left, exactly
    as a user tabbing through the form would.
    """
    validator = FormValidator(store, fields=texts.keys(), name_must_exist=name_must_exist)
    for field, text in texts.items():
        validator.focus_gained(field)
        validator.text_changed(field, text)
        validator.focus_lost(field)
    return validator


def print_form_errors(validator: FormValidator) -> None:
    for field in validator.fields:
        if validator.show_error(field):
            print(f"  {field.value}: {validator.field_error(field)}", file=sys.stderr)


def print_change(change: StoreChange) -> None:
    """Store listener: report each successful change."""
    print(f"{CHANGE_MESSAGES[change.operation]} ({change.record.display_name})")


def print_table(rows: List[Sequence], headers: Sequence[str]) -> None:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(str(value))) for w, value in zip(widths, row)]

    print("  ".join(str(h).ljust(w) for h, w in zip(headers, widths)))
    print("  ".join("-" * w for w in widths))
    for row in rows:
        print("  ".join(str(value).ljust(w) for value, w in zip(row, widths)))


def cmd_add(store: InventoryStore, args) -> int:
    validator = validate_form(
        store,
        {FormField.NAME: args.name, FormField.QUANTITY: args.quantity, FormField.PRICE: args.price},
        name_must_exist=False,
    )
    if not validator.submit_enabled:
        print(f"ERROR: {validator.message}", file=sys.stderr)
        print_form_errors(validator)
        return 1

    values = validator.submission()
    store.add(values.name, values.quantity, values.price)
    return 0


def cmd_update(store: InventoryStore, args) -> int:
    validator = validate_form(
        store,
        {FormField.NAME: args.name, FormField.QUANTITY: args.quantity, FormField.PRICE: args.price},
        name_must_exist=True,
    )
    if not validator.submit_enabled:
        print(f"ERROR: {validator.message}", file=sys.stderr)
        print_form_errors(validator)
        return 1

    values = validator.submission()
    store.update(values.name, values.quantity, values.price)
    return 0


def cmd_remove(store: InventoryStore, args) -> int:
    validator = validate_form(store, {FormField.NAME: args.name}, name_must_exist=True)
    if not validator.submit_enabled:
        print(f"ERROR: {validator.message}", file=sys.stderr)
        return 1

    store.remove(validator.submission().name)
    return 0


def cmd_find(store: InventoryStore, args) -> int:
    record = store.find(args.name)
    if record is None:
        print(ERROR_PRODUCT_NOT_FOUND, file=sys.stderr)
        return 1

    report = build_report([record])
    print_table(report.display_rows(), report.columns)
    return 0


def cmd_list(store: InventoryStore, args) -> int:
    records = filter_products(store.list(), args.name_prefix, parse_min_quantity(args.min_quantity))
    print_table(
        [(r.display_name, r.quantity, format_currency(r.price)) for r in records],
        ["Produto", "Quantidade", "Preço"],
    )
    return 0


def cmd_report(store: InventoryStore, args) -> int:
    report = build_report(store.list(), get_config().decimal_separator)
    print(REPORT_TITLE)
    print()
    print_table(report.display_rows(), report.columns)
    print()
    print(report.total_label)
    return 0


def cmd_export(store: InventoryStore, args) -> int:
    path = args.path or get_config().default_export_path
    written = write_report_csv(store.list(), path, get_config().decimal_separator)
    print(SUCCESS_EXPORTED.format(path=written.resolve()))
    return 0


COMMANDS = {
    "add": (cmd_add, "Adicionar produto"),
    "update": (cmd_update, "Atualizar produto"),
    "remove": (cmd_remove, "Remover produto"),
    "find": (cmd_find, "Buscar produto"),
    "list": (cmd_list, "Listar produtos"),
    "report": (cmd_report, "Relatório"),
    "export": (cmd_export, "Exportar para CSV"),
}


def initialize_store(database_url: Optional[str]) -> Optional[InventoryStore]:
    """
    Open the database and build the store the commands work on.

    Returns:
        The store, or None if the database could not be opened
    """
    try:
        session_factory = initialize_app_database(database_url)
    except (SQLAlchemyError, OSError) as e:
        print(f"ERROR: Failed to initialize database: {e}", file=sys.stderr)
        logger.debug("Database initialization failed", exc_info=True)
        return None

    store = InventoryStore(SqlAlchemyProductBackend(session_factory))
    store.add_listener(print_change)
    return store


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stock-tracker",
        description="Manage a product stock catalog and its value report",
    )
    parser.add_argument("--db", dest="database_url", help="SQLAlchemy database URL (default: from config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    config = get_config()
    parser.add_argument("--version", action="version", version=f"{config.app_name} {config.app_version}")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    for name, help_text in (("add", "Add a new product"), ("update", "Update quantity and price")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("name", help="Product name")
        sub.add_argument("quantity", help="Whole number of units")
        sub.add_argument("price", help="Unit price, e.g. 12,50")

    remove_parser = subparsers.add_parser("remove", help="Remove a product")
    remove_parser.add_argument("name", help="Product name")

    find_parser = subparsers.add_parser("find", help="Show one product")
    find_parser.add_argument("name", help="Product name")

    list_parser = subparsers.add_parser("list", help="List products")
    list_parser.add_argument("--name", dest="name_prefix", help="Only names starting with this text (any case)")
    list_parser.add_argument(
        "--min-quantity", help="Only products with at least this many units (non-numbers mean 0)"
    )
    subparsers.add_parser("report", help="Show the stock value report")

    export_parser = subparsers.add_parser("export", help="Export the report as CSV")
    export_parser.add_argument("path", nargs="?", help="Output file (default: estoque.csv in the data folder)")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main application entry point.

    Returns:
        Process exit code (0 on success, 1 on failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    handler, operation = COMMANDS[args.command]

    try:
        store = initialize_store(args.database_url)
        if store is None:
            return 1
        return handler(store, args)
    except (ServiceError, OSError) as e:
        title, message = handle_error(e, operation=operation)
        print(f"{title}: {message}", file=sys.stderr)
        return 1
    finally:
        close_connections()


if __name__ == "__main__":
    sys.exit(main())
