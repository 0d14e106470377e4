"""Tests for the Wealthfolio activity converter."""

from decimal import Decimal

import pytest

from scalable_converter.constants import ConversionMode, TargetFormat
from scalable_converter.services.converters import WealthfolioConverter, WealthfolioRecord
from scalable_converter.services.csv_parser import parse_scalable_csv
from scalable_converter.services.symbol_resolver import with_validated_symbols
from scalable_converter.services.transaction_classifier import (
    ERROR_MISSING_ISIN,
    ERROR_UNRESOLVED_ISIN,
    REASON_DIVIDEND_WITHHELD,
    REASON_NO_SHARES,
    REASON_UNSUPPORTED,
    REASON_ZERO_SETTLEMENT,
)
from tests.conftest import APPLE_ISIN, COPPER_ISIN, UNKNOWN_ISIN, make_transaction


@pytest.fixture
def converter() -> WealthfolioConverter:
    return WealthfolioConverter()


def buy_row(**overrides):
    values = {
        "type": "Buy",
        "isin": COPPER_ISIN,
        "shares": "10",
        "price": "25,50",
        "amount": "-255,00",
        "fee": "0,99",
        "tax": "0,00",
    }
    values.update(overrides)
    return make_transaction(**values)


class TestWealthfolioConverterMetadata:
    """Test converter metadata."""

    def test_target_format(self, converter: WealthfolioConverter):
        """Test format identifier and name."""
        assert converter.target_format() == TargetFormat.WEALTHFOLIO
        assert converter.format_name() == "Wealthfolio"

    def test_columns(self, converter: WealthfolioConverter):
        """Test the fixed output column order."""
        assert converter.columns == (
            "date",
            "symbol",
            "quantity",
            "activityType",
            "unitPrice",
            "currency",
            "fee",
            "amount",
        )


class TestTrades:
    """Tests for buy and sell rows."""

    def test_buy_record(self, converter: WealthfolioConverter, symbol_map):
        """Test the canonical buy example."""
        result = converter.convert([buy_row()], symbol_map)

        assert result.errors == []
        assert result.skipped == []
        assert converter.to_row(result.records[0]) == {
            "date": "2024-01-15T10:30:00.000Z",
            "symbol": "4COP.DE",
            "quantity": "10",
            "activityType": "BUY",
            "unitPrice": "25.5",
            "currency": "EUR",
            "fee": "0.99",
            "amount": "255",
        }

    def test_buy_serialized_line(self, converter: WealthfolioConverter, symbol_map):
        """Test the CSV line written for the buy example."""
        result = converter.convert([buy_row()], symbol_map)
        lines = converter.serialize(result.records).split("\n")

        assert lines[0] == "date,symbol,quantity,activityType,unitPrice,currency,fee,amount"
        assert lines[1] == "2024-01-15T10:30:00.000Z,4COP.DE,10,BUY,25.5,EUR,0.99,255"

    def test_sell_with_negative_shares(self, converter: WealthfolioConverter, symbol_map):
        """Test that sell quantity is always positive."""
        row = buy_row(type="Sell", shares="-4", price="30,00", amount="120,00", fee="0")
        record = converter.convert([row], symbol_map).records[0]

        assert record.activity_type == "SELL"
        assert record.quantity == Decimal("4")
        assert record.amount == Decimal("120")

    def test_validated_yahoo_symbol_used(self, converter, symbol_map, copper_symbol):
        """Test that a validated symbol overrides the derived one."""
        symbol_map[COPPER_ISIN] = with_validated_symbols(copper_symbol, yahoo_symbol="4COP.F")
        record = converter.convert([buy_row()], symbol_map).records[0]
        assert record.symbol == "4COP.F"

    def test_missing_isin_is_error(self, converter: WealthfolioConverter, symbol_map):
        """Test that trades without ISIN land in errors, not skipped."""
        result = converter.convert([buy_row(isin="")], symbol_map)

        assert result.records == []
        assert result.skipped == []
        assert len(result.errors) == 1
        assert "Missing ISIN" in result.errors[0].error
        assert result.errors[0].error == ERROR_MISSING_ISIN
        assert result.errors[0].row == 2

    @pytest.mark.parametrize("isin", [UNKNOWN_ISIN, "DE000NOTLOOKEDUP"])
    def test_unresolved_isin_is_error(self, converter: WealthfolioConverter, symbol_map, isin):
        """Test that null and absent map entries give the same error."""
        result = converter.convert([buy_row(isin=isin)], symbol_map)

        assert result.errors[0].error == ERROR_UNRESOLVED_ISIN
        assert result.errors[0].isin == isin

    def test_zero_shares_skipped(self, converter: WealthfolioConverter, symbol_map):
        """Test the no-shares skip reason."""
        result = converter.convert([buy_row(shares="0")], symbol_map)
        assert result.skipped[0].reason == REASON_NO_SHARES


class TestCashLikeRows:
    """Tests for dividends, interest, deposits, withdrawals, fees and taxes."""

    def test_dividend_fee_is_withheld_tax(self, converter: WealthfolioConverter, symbol_map):
        """Test that a dividend carries fee+tax in the fee column."""
        row = make_transaction(type="Dividend", isin=APPLE_ISIN, amount="15,50", tax="3,87")
        record = converter.convert([row], symbol_map).records[0]

        assert record.activity_type == "DIVIDEND"
        assert record.symbol == "APC.DE"
        assert record.quantity == Decimal("1")
        assert record.unit_price == Decimal("15.5")
        assert converter.to_row(record)["fee"] == "3.87"

    def test_dividend_without_isin_uses_cash_symbol(self, converter, symbol_map):
        """Test that ISIN-less dividends are booked against cash."""
        row = make_transaction(type="Dividend", amount="5,00", currency="USD")
        record = converter.convert([row], symbol_map).records[0]

        assert record.symbol == "$CASH-USD"
        assert record.currency == "USD"

    def test_fully_withheld_dividend_skipped(self, converter, symbol_map):
        """Test the withholding skip reason."""
        row = make_transaction(type="Dividend", isin=APPLE_ISIN, amount="0", tax="3,87")
        result = converter.convert([row], symbol_map)
        assert result.skipped[0].reason == REASON_DIVIDEND_WITHHELD

    def test_plain_interest(self, converter: WealthfolioConverter):
        """Test that interest is an INTEREST activity on cash."""
        row = make_transaction(type="Interest", description="Zinsen", amount="12,34")
        record = converter.convert([row], {}).records[0]

        assert record.activity_type == "INTEREST"
        assert record.symbol == "$CASH-EUR"
        assert record.unit_price == Decimal("12.34")

    @pytest.mark.parametrize(
        ("transaction_type", "amount", "activity", "price"),
        [
            ("Deposit", "1.000,00", "DEPOSIT", Decimal("1000")),
            ("Withdrawal", "-500,00", "WITHDRAWAL", Decimal("500")),
        ],
    )
    def test_cash_movements(self, converter, transaction_type, amount, activity, price):
        """Test deposits and withdrawals priced at the absolute amount."""
        result = converter.convert([make_transaction(type=transaction_type, amount=amount)], {})

        assert result.records[0].activity_type == activity
        assert result.records[0].unit_price == price
        assert result.records[0].amount == price

    def test_kkt_settlement_gives_tax_then_fee(self, converter: WealthfolioConverter):
        """Test that a KKT-Abschluss becomes TAX 185.98 followed by FEE 155.04."""
        row = make_transaction(
            type="Interest", description="KKT-Abschluss", amount="-155,04", tax="185,98"
        )
        result = converter.convert([row], {})

        assert [(r.activity_type, r.amount) for r in result.records] == [
            ("TAX", Decimal("185.98")),
            ("FEE", Decimal("155.04")),
        ]
        assert all(r.symbol == "$CASH-EUR" for r in result.records)

    def test_settlement_with_tax_only(self, converter: WealthfolioConverter):
        """Test that a zero amount component is not emitted."""
        row = make_transaction(type="Interest", description="KKT-Abschluss", tax="2,00")
        result = converter.convert([row], {})
        assert [r.activity_type for r in result.records] == ["TAX"]

    def test_empty_settlement_skipped(self, converter: WealthfolioConverter):
        """Test the zero settlement reason."""
        row = make_transaction(type="Interest", description="KKT-Abschluss")
        assert converter.convert([row], {}).skipped[0].reason == REASON_ZERO_SETTLEMENT

    def test_storno_becomes_deposit(self, converter: WealthfolioConverter):
        """Test that a STORNO interest row is a cash DEPOSIT."""
        row = make_transaction(
            type="Interest",
            reference="CANCEL-52024004",
            description="STORNO KKT-Abschluss",
            amount="367,04",
        )
        record = converter.convert([row], {}).records[0]

        assert record.activity_type == "DEPOSIT"
        assert record.symbol == "$CASH-EUR"
        assert record.amount == Decimal("367.04")

    def test_standalone_tax(self, converter: WealthfolioConverter):
        """Test that a Taxes row becomes a TAX activity."""
        record = converter.convert([make_transaction(type="Taxes", amount="33,16")], {}).records[0]

        assert record.activity_type == "TAX"
        assert record.amount == Decimal("33.16")

    @pytest.mark.parametrize(
        ("amount", "activity", "value"),
        [("-4,99", "FEE", Decimal("4.99")), ("8,97", "DEPOSIT", Decimal("8.97"))],
    )
    def test_fee_row_direction(self, converter, amount, activity, value):
        """Test that negative fees are FEE and positive fees are refunds."""
        record = converter.convert([make_transaction(type="Fee", amount=amount)], {}).records[0]

        assert record.activity_type == activity
        assert record.amount == value

    def test_zero_values_rendering(self, converter: WealthfolioConverter):
        """Test that fee/unitPrice render 0 and amount renders empty when zero."""
        record = WealthfolioRecord(
            date="2024-01-15T10:30:00.000Z",
            symbol="4COP.DE",
            quantity=Decimal("1"),
            activity_type="BUY",
            unit_price=Decimal("0"),
            currency="EUR",
            fee=Decimal("0"),
            amount=Decimal("0"),
        )
        row = converter.to_row(record)

        assert row["unitPrice"] == "0"
        assert row["fee"] == "0"
        assert row["amount"] == ""


class TestSampleExport:
    """End-to-end tests on the sample export."""

    def test_detailed(self, converter: WealthfolioConverter, symbol_map, sample_csv_content):
        """Test that every row lands in exactly one outcome list."""
        transactions = parse_scalable_csv(sample_csv_content).transactions
        result = converter.convert(transactions, symbol_map)

        assert [r.activity_type for r in result.records] == [
            "BUY",
            "BUY",
            "DIVIDEND",
            "DEPOSIT",
            "TAX",
            "FEE",
            "DEPOSIT",
        ]
        assert [(e.row, e.error) for e in result.errors] == [
            (9, ERROR_UNRESOLVED_ISIN),
            (11, ERROR_MISSING_ISIN),
        ]
        assert [(s.row, s.reason) for s in result.skipped] == [
            (5, "Status: Cancelled"),
            (10, REASON_UNSUPPORTED),
        ]
        assert result.stats == {"records": 7, "errors": 2, "skipped": 2}

    def test_aggregated(self, converter: WealthfolioConverter, symbol_map, sample_csv_content):
        """Test that the two consecutive copper buys merge."""
        transactions = parse_scalable_csv(sample_csv_content).transactions
        result = converter.convert(transactions, symbol_map, ConversionMode.AGGREGATED)

        assert len(result.records) == 6
        merged = result.records[0]
        assert merged.quantity == Decimal("15")
        assert merged.fee == Decimal("0.99")
        assert merged.date == "2024-01-16T09:00:00.000Z"
        assert abs(merged.unit_price - Decimal("25.6667")) < Decimal("0.001")
