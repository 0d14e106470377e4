"""Wealthfolio activity import converter.

Output columns: date, symbol, quantity, activityType, unitPrice, currency, fee, amount

Wealthfolio quotes through Yahoo Finance, so symbols carry a Yahoo exchange
suffix (4COP.DE) and cash movements use the $CASH-{currency} pseudo-symbol.
Interest, tax and fee are separate activity types here, which lets an
interest settlement (KKT-Abschluss) be split into a TAX and a FEE activity.
"""

from dataclasses import dataclass
from decimal import Decimal

from scalable_converter.constants import ActivityType, TargetFormat, wealthfolio_cash_symbol
from scalable_converter.services.aggregator import RecordAdapter
from scalable_converter.services.converters.base_converter import BaseFormatConverter
from scalable_converter.services.csv_parser import RawTransaction
from scalable_converter.services.number_parsing import (
    ZERO,
    TimestampStyle,
    format_decimal,
    format_timestamp,
)
from scalable_converter.services.transaction_classifier import (
    ONE,
    Classification,
    Position,
    TransactionCategory,
    currency_of,
)

WEALTHFOLIO_COLUMNS = (
    "date",
    "symbol",
    "quantity",
    "activityType",
    "unitPrice",
    "currency",
    "fee",
    "amount",
)

ACTIVITY_BY_CATEGORY: dict[TransactionCategory, str] = {
    TransactionCategory.BUY: ActivityType.BUY,
    TransactionCategory.SELL: ActivityType.SELL,
    TransactionCategory.DIVIDEND: ActivityType.DIVIDEND,
    TransactionCategory.INTEREST: ActivityType.INTEREST,
    TransactionCategory.DEPOSIT: ActivityType.DEPOSIT,
    TransactionCategory.WITHDRAWAL: ActivityType.WITHDRAWAL,
}

TRADE_ACTIVITIES = frozenset({ActivityType.BUY, ActivityType.SELL})


@dataclass(frozen=True)
class WealthfolioRecord:
    """One row of a Wealthfolio import file."""

    date: str
    symbol: str
    quantity: Decimal
    activity_type: str
    unit_price: Decimal
    currency: str
    fee: Decimal
    amount: Decimal


class WealthfolioRecordAdapter(RecordAdapter[WealthfolioRecord]):
    """Aggregator access to Wealthfolio records."""

    def trade_key(self, record: WealthfolioRecord) -> tuple[str, str] | None:
        if record.activity_type in TRADE_ACTIVITIES:
            return record.symbol, record.activity_type
        return None

    def quantity(self, record: WealthfolioRecord) -> Decimal:
        return record.quantity

    def unit_price(self, record: WealthfolioRecord) -> Decimal:
        return record.unit_price

    def fee(self, record: WealthfolioRecord) -> Decimal:
        return record.fee

    def merged(
        self,
        first: WealthfolioRecord,
        last: WealthfolioRecord,
        quantity: Decimal,
        unit_price: Decimal,
        fee: Decimal,
    ) -> WealthfolioRecord:
        return WealthfolioRecord(
            date=last.date,
            symbol=first.symbol,
            quantity=quantity,
            activity_type=first.activity_type,
            unit_price=unit_price,
            currency=first.currency,
            fee=fee,
            amount=quantity * unit_price,
        )


class WealthfolioConverter(BaseFormatConverter[WealthfolioRecord]):
    """Converter to the Wealthfolio activity import format."""

    columns = WEALTHFOLIO_COLUMNS

    @classmethod
    def target_format(cls) -> TargetFormat:
        return TargetFormat.WEALTHFOLIO

    @classmethod
    def format_name(cls) -> str:
        return "Wealthfolio"

    def cash_symbol(self, currency: str) -> str:
        return wealthfolio_cash_symbol(currency)

    def record_adapter(self) -> WealthfolioRecordAdapter:
        return WealthfolioRecordAdapter()

    def to_row(self, record: WealthfolioRecord) -> dict[str, str]:
        return {
            "date": record.date,
            "symbol": record.symbol,
            "quantity": format_decimal(record.quantity),
            "activityType": record.activity_type,
            "unitPrice": format_decimal(record.unit_price) if record.unit_price > ZERO else "0",
            "currency": record.currency,
            "fee": format_decimal(record.fee) if record.fee > ZERO else "0",
            "amount": format_decimal(record.amount) if record.amount > ZERO else "",
        }

    def _cash_record(
        self, transaction: RawTransaction, activity_type: str, value: Decimal
    ) -> WealthfolioRecord:
        currency = currency_of(transaction)
        return WealthfolioRecord(
            date=self._date(transaction),
            symbol=wealthfolio_cash_symbol(currency),
            quantity=ONE,
            activity_type=activity_type,
            unit_price=value,
            currency=currency,
            fee=ZERO,
            amount=value,
        )

    @staticmethod
    def _date(transaction: RawTransaction) -> str:
        return format_timestamp(transaction.date, transaction.time, TimestampStyle.ISO_UTC)

    def position_record(
        self,
        transaction: RawTransaction,
        classification: Classification,
        symbol: str,
        position: Position,
    ) -> WealthfolioRecord:
        return WealthfolioRecord(
            date=self._date(transaction),
            symbol=symbol,
            quantity=position.quantity,
            activity_type=ACTIVITY_BY_CATEGORY[classification.category],
            unit_price=position.unit_price,
            currency=currency_of(transaction),
            fee=classification.amounts.commission,
            amount=position.gross,
        )

    def reversal_record(
        self, transaction: RawTransaction, classification: Classification
    ) -> WealthfolioRecord:
        amount = abs(classification.amounts.amount)
        return self._cash_record(transaction, ActivityType.DEPOSIT, amount)

    def fee_record(
        self, transaction: RawTransaction, classification: Classification
    ) -> WealthfolioRecord:
        amount = classification.amounts.amount
        activity_type = ActivityType.DEPOSIT if amount > ZERO else ActivityType.FEE
        return self._cash_record(transaction, activity_type, abs(amount))

    def settlement_records(
        self, transaction: RawTransaction, classification: Classification
    ) -> list[WealthfolioRecord]:
        """TAX for the withheld tax first, then FEE for the charged amount."""
        amounts = classification.amounts
        records = []
        if amounts.tax != ZERO:
            records.append(self._cash_record(transaction, ActivityType.TAX, abs(amounts.tax)))
        if amounts.amount != ZERO:
            records.append(self._cash_record(transaction, ActivityType.FEE, abs(amounts.amount)))
        return records

    def tax_record(
        self, transaction: RawTransaction, classification: Classification
    ) -> WealthfolioRecord:
        amount = abs(classification.amounts.amount)
        return self._cash_record(transaction, ActivityType.TAX, amount)
