"""Tests for service layer structured logging.

These tests verify that store mutations and exports emit structured log
entries with appropriate context information.
"""

import logging
from decimal import Decimal

import pytest

from stock_tracker.services.exceptions import PersistenceError, ProductAlreadyExists, ProductNotFound
from stock_tracker.services.inventory_store import InventoryStore
from stock_tracker.services.logging_utils import get_service_logger, log_operation
from stock_tracker.services.persistence import InMemoryProductBackend
from stock_tracker.services.report_service import export_csv, write_report_csv


class TestLoggingUtilities:
    """Tests for logging utility functions."""

    def test_get_service_logger_returns_logger(self):
        """get_service_logger returns a configured Logger instance."""
        logger = get_service_logger("test_module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "stock_tracker.services.test_module"

    def test_get_service_logger_extracts_module_name(self):
        """get_service_logger extracts module name from full path."""
        logger = get_service_logger("stock_tracker.services.inventory_store")
        assert logger.name == "stock_tracker.services.inventory_store"

    def test_log_operation_logs_at_info_level(self, caplog):
        """log_operation logs at INFO level by default."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(logger, operation="test_op", outcome="success", product_key="bolt")

        assert "test_op: success" in caplog.text
        assert caplog.records[0].levelno == logging.INFO

    def test_log_operation_logs_at_custom_level(self, caplog):
        """log_operation respects custom log level."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.DEBUG):
            log_operation(logger, operation="debug_op", outcome="debug_outcome", level=logging.DEBUG)

        assert "debug_op: debug_outcome" in caplog.text
        assert caplog.records[0].levelno == logging.DEBUG

    def test_log_operation_includes_extra_context(self, caplog):
        """log_operation includes extra context in log records."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(logger, operation="context_test", outcome="success", product_key="bolt", quantity=4)

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.operation == "context_test"
        assert record.outcome == "success"
        assert record.product_key == "bolt"
        assert record.quantity == 4

    def test_log_operation_names_product_in_message(self, caplog):
        """The product key and path appear in the message text as well."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(logger, operation="remove_product", outcome="success", product_key="bolt", price="1.00")

        assert caplog.records[0].getMessage() == "remove_product: success (product_key=bolt)"


class TestInventoryStoreLogging:
    """Tests for inventory_store logging."""

    def test_add_logs_success(self, memory_store, caplog):
        with caplog.at_level(logging.INFO, logger="stock_tracker.services"):
            memory_store.add("Bolt", 10, Decimal("1.50"))

        record = caplog.records[-1]
        assert record.operation == "add_product"
        assert record.outcome == "success"
        assert record.product_key == "bolt"
        assert record.price == "1.50"

    def test_duplicate_logs_warning(self, memory_store, caplog):
        memory_store.add("Bolt", 10, Decimal("1.50"))

        with caplog.at_level(logging.INFO, logger="stock_tracker.services"):
            with pytest.raises(ProductAlreadyExists):
                memory_store.add("bolt", 1, Decimal("1.00"))

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert [r.outcome for r in warnings] == ["duplicate"]

    def test_not_found_logs_warning(self, memory_store, caplog):
        with caplog.at_level(logging.INFO, logger="stock_tracker.services"):
            with pytest.raises(ProductNotFound):
                memory_store.remove("bolt")

        assert "remove_product: not_found" in caplog.text

    def test_backend_failure_logs_error(self, caplog):
        class BrokenBackend(InMemoryProductBackend):
            def find_all(self):
                raise OSError("gone")

        store = InventoryStore(BrokenBackend())

        with caplog.at_level(logging.INFO, logger="stock_tracker.services"):
            with pytest.raises(PersistenceError):
                store.list()

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].operation == "list"
        assert errors[0].outcome == "persistence_error"


class TestReportLogging:
    """Tests for report_service logging."""

    def test_export_logs_counts(self, caplog):
        with caplog.at_level(logging.INFO, logger="stock_tracker.services"):
            data = export_csv([])

        record = caplog.records[-1]
        assert record.operation == "export_csv"
        assert record.row_count == 0
        assert record.byte_count == len(data)

    def test_write_logs_path(self, tmp_path, caplog):
        with caplog.at_level(logging.INFO, logger="stock_tracker.services"):
            written = write_report_csv([], tmp_path / "out")

        assert caplog.records[-1].path == str(written)
