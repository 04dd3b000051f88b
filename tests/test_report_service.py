"""Tests for the stock report and its CSV export.

Tests cover:
- Line and grand totals
- Currency rendering
- Exact bytes of the CSV export (BOM, delimiter, quoting, line endings)
- Writing the export to disk and reading it back
"""

import codecs
from decimal import Decimal

import pytest

from stock_tracker.services.inventory_store import ProductRecord
from stock_tracker.services.report_service import (
    build_report,
    export_csv,
    format_currency,
    parse_currency,
    parse_report_csv,
    write_report_csv,
)
from stock_tracker.utils.constants import MAX_PRICE

HEADER = '"Produto";"Quantidade";"Preço Unitário";"Valor Total"\r\n'


@pytest.fixture
def records():
    return [
        ProductRecord("bolt", "Bolt", 10, Decimal("1.50")),
        ProductRecord("nut", "Nut", 0, Decimal("0.25")),
    ]


class TestFormatCurrency:
    """Tests for format_currency / parse_currency."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("15"), "15,00"),
            (Decimal("1.5"), "1,50"),
            (Decimal("0"), "0,00"),
            (Decimal("2.345"), "2,35"),
            (Decimal("1234567.5"), "1234567,50"),
        ],
    )
    def test_format_currency(self, value, expected):
        assert format_currency(value) == expected

    def test_format_currency_custom_separator(self):
        assert format_currency(Decimal("1.5"), ".") == "1.50"

    def test_parse_currency(self):
        assert parse_currency("1,50") == Decimal("1.50")
        assert parse_currency("1.50", ".") == Decimal("1.50")


class TestBuildReport:
    """Tests for build_report."""

    def test_totals(self, records):
        """Line totals are quantity * price; the grand total is their sum."""
        report = build_report(records)

        assert [row.line_total for row in report.rows] == [Decimal("15.00"), Decimal("0.00")]
        assert report.grand_total == Decimal("15.00")
        assert report.grand_total_text == "15,00"

    def test_display_rows(self, records):
        report = build_report(records)

        assert report.display_rows() == [
            ("bolt", 10, "1,50", "15,00"),
            ("nut", 0, "0,25", "0,00"),
        ]

    def test_total_label(self, records):
        assert build_report(records).total_label == "Valor Total do Estoque: R$ 15,00"

    def test_columns(self, records):
        assert build_report(records).columns == [
            "Produto",
            "Quantidade",
            "Preço Unitário",
            "Valor Total",
        ]

    def test_empty_report(self):
        """An empty snapshot is a valid zero report."""
        report = build_report([])

        assert report.rows == ()
        assert report.grand_total == Decimal("0")
        assert report.total_label == "Valor Total do Estoque: R$ 0,00"

    def test_report_keeps_snapshot_order(self):
        records = [
            ProductRecord("zeta", "Zeta", 1, Decimal("1.00")),
            ProductRecord("alpha", "Alpha", 1, Decimal("1.00")),
        ]

        assert [row.name for row in build_report(records).rows] == ["zeta", "alpha"]

    def test_report_from_store(self, stocked_store):
        """The report works on a live store snapshot."""
        report = build_report(stocked_store.list())

        assert report.grand_total == Decimal("15.00")


class TestExportCsv:
    """Tests for the exact CSV bytes."""

    def test_starts_with_bom(self, records):
        assert export_csv(records).startswith(codecs.BOM_UTF8)

    def test_exact_bytes(self, records):
        """Text fields quoted, quantity bare, comma decimals, CRLF line ends."""
        expected = (
            HEADER
            + '"bolt";10;"1,50";"15,00"\r\n'
            + '"nut";0;"0,25";"0,00"\r\n'
        )

        assert export_csv(records) == codecs.BOM_UTF8 + expected.encode("utf-8")

    def test_second_line(self, records):
        lines = export_csv(records).decode("utf-8-sig").split("\r\n")

        assert lines[1] == '"bolt";10;"1,50";"15,00"'

    def test_empty_export_is_header_only(self):
        assert export_csv([]) == codecs.BOM_UTF8 + HEADER.encode("utf-8")

    def test_embedded_quotes_are_doubled(self):
        records = [ProductRecord('porca "m6"', 'Porca "M6"', 2, Decimal("1.00"))]

        lines = export_csv(records).decode("utf-8-sig").split("\r\n")

        assert lines[1] == '"porca ""m6""";2;"1,00";"2,00"'

    def test_delimiter_inside_name_is_quoted(self):
        records = [ProductRecord("a;b", "a;b", 1, Decimal("1.00"))]

        lines = export_csv(records).decode("utf-8-sig").split("\r\n")

        assert lines[1] == '"a;b";1;"1,00";"1,00"'

    def test_export_is_reproducible(self, records):
        assert export_csv(records) == export_csv(list(records))

    def test_dot_separator(self, records):
        lines = export_csv(records, ".").decode("utf-8-sig").split("\r\n")

        assert lines[1] == '"bolt";10;"1.50";"15.00"'


class TestReportFiles:
    """Tests for write_report_csv and parse_report_csv."""

    def test_write_appends_suffix(self, records, tmp_path):
        written = write_report_csv(records, tmp_path / "estoque")

        assert written == tmp_path / "estoque.csv"
        assert written.read_bytes() == export_csv(records)

    def test_write_keeps_existing_suffix(self, records, tmp_path):
        written = write_report_csv(records, tmp_path / "ESTOQUE.CSV")

        assert written == tmp_path / "ESTOQUE.CSV"

    def test_write_creates_parent_directories(self, records, tmp_path):
        written = write_report_csv(records, str(tmp_path / "a" / "b" / "report.csv"))

        assert written.exists()

    def test_parse_reads_back_export(self, records):
        parsed = parse_report_csv(export_csv(records))

        assert parsed == [("bolt", 10, Decimal("1.50")), ("nut", 0, Decimal("0.25"))]

    @pytest.mark.parametrize("name", ['porca "m6"', "a;b", '"; "'])
    def test_parse_reads_back_quoted_names(self, name):
        """Quotes and delimiters inside a name survive export and parsing."""
        records = [ProductRecord(name, name, 3, Decimal("1.25"))]

        assert parse_report_csv(export_csv(records)) == [(name, 3, Decimal("1.25"))]

    def test_parse_reads_back_file_at_price_limit(self, tmp_path):
        records = [ProductRecord("bolt", "bolt", 1, MAX_PRICE)]

        written = write_report_csv(records, tmp_path / "estoque.csv")

        assert parse_report_csv(written.read_bytes()) == [("bolt", 1, Decimal("9999999999.99"))]

    def test_parse_rejects_wrong_header(self):
        data = '"Nome";"Qtd"\r\n'.encode("utf-8-sig")

        with pytest.raises(ValueError, match="header"):
            parse_report_csv(data)

    def test_parse_rejects_short_row(self):
        data = (HEADER + '"bolt";10\r\n').encode("utf-8-sig")

        with pytest.raises(ValueError, match="Line 2"):
            parse_report_csv(data)
