"""TradingView portfolio import converter.

Output columns: Symbol, Side, Qty, Fill Price, Commission, Closing Time

Symbols are exchange-prefixed (XETR:4COP), cash movements use $CASH and
zero numbers are left empty. TradingView has no separate interest, tax or
fee sides, so interest is booked as a cash deposit and taxes/fees share
the "Taxes and fees" side.
"""

from dataclasses import dataclass
from decimal import Decimal

from scalable_converter.constants import TRADINGVIEW_CASH_SYMBOL, TargetFormat, TradingViewSide
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
)

TRADINGVIEW_COLUMNS = ("Symbol", "Side", "Qty", "Fill Price", "Commission", "Closing Time")

SIDE_BY_CATEGORY: dict[TransactionCategory, str] = {
    TransactionCategory.BUY: TradingViewSide.BUY,
    TransactionCategory.SELL: TradingViewSide.SELL,
    TransactionCategory.DIVIDEND: TradingViewSide.DIVIDEND,
    TransactionCategory.INTEREST: TradingViewSide.DEPOSIT,
    TransactionCategory.DEPOSIT: TradingViewSide.DEPOSIT,
    TransactionCategory.WITHDRAWAL: TradingViewSide.WITHDRAWAL,
}

TRADE_SIDES = frozenset({TradingViewSide.BUY, TradingViewSide.SELL})


@dataclass(frozen=True)
class TradingViewRecord:
    """One row of a TradingView import file."""

    symbol: str
    side: str
    qty: Decimal
    fill_price: Decimal
    commission: Decimal
    closing_time: str


def _optional_number(value: Decimal) -> str:
    return format_decimal(value) if value > ZERO else ""


class TradingViewRecordAdapter(RecordAdapter[TradingViewRecord]):
    """Aggregator access to TradingView records."""

    def trade_key(self, record: TradingViewRecord) -> tuple[str, str] | None:
        if record.side in TRADE_SIDES:
            return record.symbol, record.side
        return None

    def quantity(self, record: TradingViewRecord) -> Decimal:
        return record.qty

    def unit_price(self, record: TradingViewRecord) -> Decimal:
        return record.fill_price

    def fee(self, record: TradingViewRecord) -> Decimal:
        return record.commission

    def merged(
        self,
        first: TradingViewRecord,
        last: TradingViewRecord,
        quantity: Decimal,
        unit_price: Decimal,
        fee: Decimal,
    ) -> TradingViewRecord:
        return TradingViewRecord(
            symbol=first.symbol,
            side=first.side,
            qty=quantity,
            fill_price=unit_price,
            commission=fee,
            closing_time=last.closing_time,
        )


class TradingViewConverter(BaseFormatConverter[TradingViewRecord]):
    """Converter to the TradingView portfolio import format."""

    columns = TRADINGVIEW_COLUMNS

    @classmethod
    def target_format(cls) -> TargetFormat:
        return TargetFormat.TRADINGVIEW

    @classmethod
    def format_name(cls) -> str:
        return "TradingView"

    def cash_symbol(self, currency: str) -> str:
        return TRADINGVIEW_CASH_SYMBOL

    def record_adapter(self) -> TradingViewRecordAdapter:
        return TradingViewRecordAdapter()

    def to_row(self, record: TradingViewRecord) -> dict[str, str]:
        return {
            "Symbol": record.symbol,
            "Side": record.side,
            "Qty": _optional_number(record.qty),
            "Fill Price": _optional_number(record.fill_price),
            "Commission": _optional_number(record.commission),
            "Closing Time": record.closing_time,
        }

    def _cash_record(
        self, transaction: RawTransaction, side: str, value: Decimal
    ) -> TradingViewRecord:
        return TradingViewRecord(
            symbol=TRADINGVIEW_CASH_SYMBOL,
            side=side,
            qty=ONE,
            fill_price=value,
            commission=ZERO,
            closing_time=self._closing_time(transaction),
        )

    @staticmethod
    def _closing_time(transaction: RawTransaction) -> str:
        return format_timestamp(transaction.date, transaction.time, TimestampStyle.TRADINGVIEW)

    def position_record(
        self,
        transaction: RawTransaction,
        classification: Classification,
        symbol: str,
        position: Position,
    ) -> TradingViewRecord:
        return TradingViewRecord(
            symbol=symbol,
            side=SIDE_BY_CATEGORY[classification.category],
            qty=position.quantity,
            fill_price=position.unit_price,
            commission=classification.amounts.commission,
            closing_time=self._closing_time(transaction),
        )

    def reversal_record(
        self, transaction: RawTransaction, classification: Classification
    ) -> TradingViewRecord:
        amount = abs(classification.amounts.amount)
        return self._cash_record(transaction, TradingViewSide.DEPOSIT, amount)

    def fee_record(
        self, transaction: RawTransaction, classification: Classification
    ) -> TradingViewRecord:
        amount = classification.amounts.amount
        side = TradingViewSide.DEPOSIT if amount > ZERO else TradingViewSide.TAXES_AND_FEES
        return self._cash_record(transaction, side, abs(amount))

    def settlement_records(
        self, transaction: RawTransaction, classification: Classification
    ) -> list[TradingViewRecord]:
        amounts = classification.amounts
        total = abs(amounts.tax) + abs(amounts.amount)
        return [self._cash_record(transaction, TradingViewSide.TAXES_AND_FEES, total)]

    def tax_record(
        self, transaction: RawTransaction, classification: Classification
    ) -> TradingViewRecord:
        amount = abs(classification.amounts.amount)
        return self._cash_record(transaction, TradingViewSide.TAXES_AND_FEES, amount)
