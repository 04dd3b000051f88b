"""
Report Service - stock value report and CSV export.

This service provides:
- build_report: per-product line totals and the grand total of a snapshot
- export_csv: byte-reproducible CSV of a snapshot
- write_report_csv: export written to a file
- parse_report_csv: read an export back into (name, quantity, price) tuples

Currency is rendered with two decimals and a comma separator ("15,00"), no
thousands grouping. The CSV is UTF-8 with a byte-order mark, semicolon
delimited, with text fields quoted and quantities bare:

    "Produto";"Quantidade";"Preço Unitário";"Valor Total"
    "bolt";10;"1,50";"15,00"

All functions are pure over the records they receive; pass store.list().
"""

import csv
import io
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from stock_tracker.services.inventory_store import ProductRecord
from stock_tracker.services.logging_utils import get_service_logger, log_operation
from stock_tracker.utils.constants import (
    CURRENCY_QUANTUM,
    EXPORT_DECIMAL_SEPARATOR,
    EXPORT_DELIMITER,
    EXPORT_ENCODING,
    EXPORT_SUFFIX,
    REPORT_COLUMNS,
    REPORT_TOTAL_LABEL,
)

logger = get_service_logger(__name__)

DisplayRow = Tuple[str, int, str, str]


def format_currency(value: Decimal, decimal_separator: str = EXPORT_DECIMAL_SEPARATOR) -> str:
    """
    Render a money value with exactly two decimals.

    Args:
        value: Amount to render
        decimal_separator: Separator between units and cents

    Returns:
        e.g. "1234,50" (no thousands grouping)
    """
    rounded = Decimal(value).quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)
    return f"{rounded:.2f}".replace(".", decimal_separator)


def parse_currency(text: str, decimal_separator: str = EXPORT_DECIMAL_SEPARATOR) -> Decimal:
    """Inverse of format_currency."""
    return Decimal(text.strip().replace(decimal_separator, "."))


@dataclass(frozen=True)
class ReportRow:
    """One product line of the stock report."""

    name: str
    quantity: int
    price: Decimal
    line_total: Decimal

    def display(self, decimal_separator: str = EXPORT_DECIMAL_SEPARATOR) -> DisplayRow:
        return (
            self.name,
            self.quantity,
            format_currency(self.price, decimal_separator),
            format_currency(self.line_total, decimal_separator),
        )


@dataclass(frozen=True)
class InventoryReport:
    """
    Stock report of one store snapshot.

    Attributes:
        rows: One row per product, in snapshot order
        grand_total: Sum of every row's line total
        decimal_separator: Separator used when rendering currency
    """

    rows: Tuple[ReportRow, ...]
    grand_total: Decimal
    decimal_separator: str = EXPORT_DECIMAL_SEPARATOR

    @property
    def columns(self) -> List[str]:
        return list(REPORT_COLUMNS)

    def display_rows(self) -> List[DisplayRow]:
        """Rows as shown in the report table."""
        return [row.display(self.decimal_separator) for row in self.rows]

    @property
    def grand_total_text(self) -> str:
        return format_currency(self.grand_total, self.decimal_separator)

    @property
    def total_label(self) -> str:
        """Caption under the table, e.g. "Valor Total do Estoque: R$ 15,00"."""
        return REPORT_TOTAL_LABEL.format(total=self.grand_total_text)

    def to_csv_bytes(self) -> bytes:
        """
        Encode the report as CSV.

        Returns:
            UTF-8 bytes starting with a BOM, CRLF line endings
        """
        buffer = io.StringIO(newline="")
        writer = csv.writer(
            buffer,
            delimiter=EXPORT_DELIMITER,
            quoting=csv.QUOTE_NONNUMERIC,
            lineterminator="\r\n",
        )
        writer.writerow(REPORT_COLUMNS)
        for name, quantity, price, line_total in self.display_rows():
            writer.writerow([name, quantity, price, line_total])

        return buffer.getvalue().encode(EXPORT_ENCODING)


def build_report(
    records: Iterable[ProductRecord], decimal_separator: str = EXPORT_DECIMAL_SEPARATOR
) -> InventoryReport:
    """
    Compute line totals and the grand total of a snapshot.

    An empty snapshot gives an empty report with a zero total.

    Args:
        records: Store snapshot (e.g. store.list())
        decimal_separator: Separator used when rendering currency

    Returns:
        InventoryReport
    """
    rows = tuple(
        ReportRow(
            name=record.key,
            quantity=record.quantity,
            price=record.price,
            line_total=record.quantity * record.price,
        )
        for record in records
    )
    grand_total = sum((row.line_total for row in rows), Decimal("0"))
    return InventoryReport(rows=rows, grand_total=grand_total, decimal_separator=decimal_separator)


def export_csv(
    records: Iterable[ProductRecord], decimal_separator: str = EXPORT_DECIMAL_SEPARATOR
) -> bytes:
    """
    Export a snapshot as CSV bytes.

    The same snapshot and separator always produce the same bytes.
    """
    report = build_report(records, decimal_separator)
    data = report.to_csv_bytes()
    log_operation(
        logger, operation="export_csv", outcome="success",
        row_count=len(report.rows), byte_count=len(data),
    )
    return data


def write_report_csv(
    records: Iterable[ProductRecord],
    path: Union[str, Path],
    decimal_separator: str = EXPORT_DECIMAL_SEPARATOR,
) -> Path:
    """
    Write the CSV export of a snapshot to a file.

    A ".csv" suffix is appended when the file name lacks one.

    Args:
        records: Store snapshot
        path: Target file
        decimal_separator: Separator used when rendering currency

    Returns:
        The path actually written

    Raises:
        OSError: If the file cannot be written
    """
    target = Path(path)
    if target.suffix.lower() != EXPORT_SUFFIX:
        target = target.with_name(target.name + EXPORT_SUFFIX)

    data = export_csv(records, decimal_separator)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)

    log_operation(logger, operation="write_report_csv", outcome="success", path=str(target))
    return target


def parse_report_csv(
    data: bytes, decimal_separator: str = EXPORT_DECIMAL_SEPARATOR
) -> List[Tuple[str, int, Decimal]]:
    """
    Read a CSV export back into (name, quantity, price) tuples.

    Args:
        data: Bytes produced by export_csv

    Returns:
        One tuple per product row, in file order

    Raises:
        ValueError: If the header or a row is malformed
    """
    reader = csv.reader(io.StringIO(data.decode(EXPORT_ENCODING), newline=""), delimiter=EXPORT_DELIMITER)

    header = next(reader, None)
    if header != REPORT_COLUMNS:
        raise ValueError(f"Unexpected report header: {header!r}")

    products = []
    for line_number, row in enumerate(reader, start=2):
        if not row:
            continue
        if len(row) != len(REPORT_COLUMNS):
            raise ValueError(f"Line {line_number}: expected {len(REPORT_COLUMNS)} fields, got {len(row)}")
        name, quantity, price, _line_total = row
        products.append((name, int(quantity), parse_currency(price, decimal_separator)))

    return products
