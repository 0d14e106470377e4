"""Tests for the Scalable Capital CSV parser."""

import pytest

from scalable_converter.services.csv_parser import (
    RawTransaction,
    detect_delimiter,
    extract_unique_isins,
    parse_scalable_csv,
)
from tests.conftest import APPLE_ISIN, COPPER_ISIN, UNKNOWN_ISIN, make_transaction

HEADER = (
    "date;time;status;reference;description;assetType;type;isin;shares;price;amount;fee;tax;currency"
)


class TestDetectDelimiter:
    """Tests for delimiter detection."""

    def test_semicolon_header(self):
        """Test that a semicolon in the header selects ';'."""
        assert detect_delimiter(HEADER + "\n1;2") == ";"

    def test_comma_header(self):
        """Test that headers without semicolons fall back to ','."""
        assert detect_delimiter("date,time,status\n2024-01-15,10:00,Executed") == ","


class TestParseScalableCsv:
    """Tests for parse_scalable_csv."""

    def test_parses_sample_export(self, sample_csv_content: bytes):
        """Test parsing the full sample export."""
        result = parse_scalable_csv(sample_csv_content)

        assert result.errors == []
        assert len(result.transactions) == 10

        first = result.transactions[0]
        assert isinstance(first, RawTransaction)
        assert first.date == "2024-01-15"
        assert first.time == "10:30:00"
        assert first.type == "Buy"
        assert first.isin == COPPER_ISIN
        assert first.shares == "10"
        assert first.price == "25,50"
        assert first.fee == "0,99"
        assert first.asset_type == "Security"

    def test_quotes_stripped_from_reference_and_description(self, sample_csv_content: bytes):
        """Test that reference/description come back without quote characters."""
        result = parse_scalable_csv(sample_csv_content)

        storno = result.transactions[6]
        assert storno.reference == "CANCEL-52024004"
        assert storno.description == "STORNO KKT-Abschluss"

    def test_leftover_literal_quotes_stripped(self):
        """Test that quotes escaping standard CSV quoting are removed too."""
        row = '2024-01-15;10:00:00;Executed;"""REF""";"""Name""";Cash;Deposit;;;;10,00;;;EUR'
        content = f"{HEADER}\n{row}"
        result = parse_scalable_csv(content)

        assert result.transactions[0].reference == "REF"
        assert result.transactions[0].description == "Name"

    def test_comma_delimited_export(self):
        """Test that comma-delimited exports with US numbers are parsed."""
        content = (
            "Date,Time,Status,Reference,Description,AssetType,Type,ISIN,Shares,Price,"
            "Amount,Fee,Tax,Currency\n"
            '2024-01-15,10:00:00,Executed,R1,"Copper, ETC",Security,Buy,DE000A0KRJS4,'
            "10,25.50,-255.00,0.99,0.00,EUR"
        )
        result = parse_scalable_csv(content)

        assert result.errors == []
        transaction = result.transactions[0]
        assert transaction.description == "Copper, ETC"
        assert transaction.price == "25.50"
        assert transaction.currency == "EUR"

    def test_header_is_case_insensitive_and_order_independent(self):
        """Test that columns are matched by trimmed, lower-cased name."""
        content = " ISIN ;TYPE;Amount;Date\nDE000A0KRJS4;Buy;-255,00;2024-01-15"
        result = parse_scalable_csv(content)

        transaction = result.transactions[0]
        assert transaction.isin == "DE000A0KRJS4"
        assert transaction.type == "Buy"
        assert transaction.amount == "-255,00"
        assert transaction.date == "2024-01-15"
        assert transaction.status == ""

    def test_field_count_mismatch_is_non_fatal(self):
        """Test that short rows are reported but still parsed."""
        content = f"{HEADER}\n2024-01-15;10:00:00;Executed;R1;Deposit;Cash;Deposit"
        result = parse_scalable_csv(content)

        assert len(result.transactions) == 1
        assert result.transactions[0].type == "Deposit"
        assert result.transactions[0].amount == ""
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Row 2: Too few fields")

    def test_too_many_fields_reported(self):
        """Test that rows with extra fields are reported."""
        row = "2024-01-15;10:00:00;Executed;R1;D;Cash;Deposit;;;;10,00;;;EUR;extra"
        result = parse_scalable_csv(f"{HEADER}\n{row}")

        assert len(result.transactions) == 1
        assert "Too many fields" in result.errors[0]

    def test_blank_lines_ignored(self):
        """Test that empty lines do not become rows."""
        content = f"{HEADER}\n\n2024-01-15;10:00:00;Executed;R1;D;Cash;Deposit;;;;10,00;;;EUR\n\n"
        result = parse_scalable_csv(content)

        assert len(result.transactions) == 1
        assert result.errors == []

    @pytest.mark.parametrize("content", ["", "   \n", b""])
    def test_empty_content(self, content):
        """Test that empty input yields no rows and no errors."""
        result = parse_scalable_csv(content)
        assert result.transactions == []
        assert result.errors == []

    def test_utf8_bom_removed(self):
        """Test that a UTF-8 byte order mark does not break the first column."""
        content = f"\ufeff{HEADER}\n2024-01-15;10:00:00;Executed;R1;D;Cash;Deposit;;;;10,00;;;EUR"
        result = parse_scalable_csv(content.encode("utf-8"))

        assert result.transactions[0].date == "2024-01-15"

    def test_latin1_fallback(self):
        """Test that non-UTF-8 exports are decoded as Latin-1."""
        row = "2024-01-15;10:00:00;Executed;R1;Überweisung;Cash;Deposit;;;;10,00;;;EUR"
        content = f"{HEADER}\n{row}"
        result = parse_scalable_csv(content.encode("latin-1"))

        assert result.transactions[0].description == "Überweisung"


class TestExtractUniqueIsins:
    """Tests for extract_unique_isins."""

    def test_sample_isins_in_first_seen_order(self, sample_csv_content: bytes):
        """Test that security rows contribute their ISINs once each."""
        transactions = parse_scalable_csv(sample_csv_content).transactions
        assert extract_unique_isins(transactions) == [COPPER_ISIN, APPLE_ISIN, UNKNOWN_ISIN]

    def test_cash_rows_ignored(self):
        """Test that deposits with an ISIN are not looked up."""
        transactions = [
            make_transaction(type="Deposit", isin="DE0001"),
            make_transaction(type="Savings plan", isin="IE0002"),
            make_transaction(type="Distribution", isin="IE0003"),
            make_transaction(type="Buy", isin=""),
        ]
        assert extract_unique_isins(transactions) == ["IE0002", "IE0003"]
