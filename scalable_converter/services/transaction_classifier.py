"""Classification rules for Scalable Capital transaction rows.

Every row is first checked against its status, then its free-text type is
mapped to a ``TransactionCategory`` and finally a handful of special cases
(reversals, fee rows, interest settlements, standalone taxes) decide how
the row is routed. Converters only act on the resulting ``Classification``.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from scalable_converter.config import settings
from scalable_converter.constants import SKIP_STATUSES, VALID_STATUSES
from scalable_converter.services.csv_parser import RawTransaction
from scalable_converter.services.number_parsing import ZERO, parse_locale_number

logger = logging.getLogger(__name__)

ONE = Decimal("1")


class TransactionCategory(str, Enum):
    """Normalized meaning of a Scalable transaction type."""

    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"
    INTEREST = "interest"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TAX = "tax"
    FEE = "fee"
    TAX_AND_FEE = "tax_and_fee"
    UNSUPPORTED = "unsupported"


class Route(str, Enum):
    """How a converter has to handle a classified row."""

    SKIP_STATUS = "skip_status"
    SKIP_UNSUPPORTED = "skip_unsupported"
    TRADE = "trade"
    DIVIDEND = "dividend"
    INTEREST = "interest"
    CASH = "cash"
    TAX = "tax"
    FEE = "fee"
    REVERSAL = "reversal"
    INTEREST_SETTLEMENT = "interest_settlement"


# Ordered (label, category) rules. Exact matches are tried first, then
# substring containment in this order, so longer labels come before the
# shorter labels they contain.
TYPE_RULES: tuple[tuple[str, TransactionCategory], ...] = (
    ("buy", TransactionCategory.BUY),
    ("savings plan", TransactionCategory.BUY),
    ("sparplan", TransactionCategory.BUY),
    ("sell", TransactionCategory.SELL),
    ("dividend", TransactionCategory.DIVIDEND),
    ("distribution", TransactionCategory.DIVIDEND),
    ("interest", TransactionCategory.INTEREST),
    ("deposit", TransactionCategory.DEPOSIT),
    ("withdrawal", TransactionCategory.WITHDRAWAL),
    ("taxes and fees", TransactionCategory.TAX_AND_FEE),
    ("taxes", TransactionCategory.TAX),
    ("tax", TransactionCategory.TAX),
    ("fee", TransactionCategory.FEE),
    ("security transfer", TransactionCategory.UNSUPPORTED),
    ("transfer", TransactionCategory.UNSUPPORTED),
    ("corporate action", TransactionCategory.UNSUPPORTED),
    ("stock split", TransactionCategory.UNSUPPORTED),
    ("merger", TransactionCategory.UNSUPPORTED),
    ("spin-off", TransactionCategory.UNSUPPORTED),
    ("spin", TransactionCategory.UNSUPPORTED),
)

TRADE_CATEGORIES = frozenset({TransactionCategory.BUY, TransactionCategory.SELL})
SECURITY_CATEGORIES = TRADE_CATEGORIES | {TransactionCategory.DIVIDEND}

# Skip reasons shared by both output formats
REASON_UNSUPPORTED = "Transaction type not supported"
REASON_ZERO_STORNO = "Zero amount STORNO transaction"
REASON_ZERO_FEE = "Zero fee amount"
REASON_ZERO_SETTLEMENT = "Zero tax/fee amount in interest settlement"
REASON_ZERO_TAX = "Zero tax amount"
REASON_NO_SHARES = "No shares/quantity specified"
REASON_DIVIDEND_WITHHELD = "Dividend fully withheld for tax (zero net amount)"
REASON_INTEREST_WITHHELD = "Interest fully withheld for tax (zero net amount)"
REASON_ZERO_AMOUNT = "Zero quantity/amount"

# Resolution errors
ERROR_MISSING_ISIN = "Missing ISIN for trade transaction"
ERROR_UNRESOLVED_ISIN = "Could not resolve ISIN to ticker symbol"


@dataclass(frozen=True)
class Amounts:
    """Numeric columns of a row, parsed from locale-formatted strings."""

    shares: Decimal = ZERO
    price: Decimal = ZERO
    amount: Decimal = ZERO
    fee: Decimal = ZERO
    tax: Decimal = ZERO

    @property
    def commission(self) -> Decimal:
        """Fee and tax withheld on the row, always positive."""
        return abs(self.fee) + abs(self.tax)


@dataclass(frozen=True)
class Position:
    """Quantity, unit price and gross amount of an output record."""

    quantity: Decimal
    unit_price: Decimal
    gross: Decimal


@dataclass(frozen=True)
class Classification:
    """Result of classifying one row.

    ``skip_reason`` is set whenever the row must be skipped, whatever the
    route; the special-case routes carry their zero-amount reasons here too.
    """

    route: Route
    category: TransactionCategory | None = None
    amounts: Amounts | None = None
    skip_reason: str | None = None

    @property
    def is_skipped(self) -> bool:
        return self.skip_reason is not None


def parse_amounts(transaction: RawTransaction) -> Amounts:
    """Parse the numeric columns of a row."""
    return Amounts(
        shares=parse_locale_number(transaction.shares),
        price=parse_locale_number(transaction.price),
        amount=parse_locale_number(transaction.amount),
        fee=parse_locale_number(transaction.fee),
        tax=parse_locale_number(transaction.tax),
    )


def currency_of(transaction: RawTransaction) -> str:
    """Row currency, the configured default (EUR) when the export left it empty."""
    return transaction.currency or settings.default_currency


def status_skip_reason(status: str) -> str | None:
    """Return why a status disqualifies a row, or None when it may be processed.

    An empty status is accepted.
    """
    normalized = status.lower().strip()
    if any(marker in normalized for marker in SKIP_STATUSES):
        return f"Status: {status}"
    if normalized and not any(marker in normalized for marker in VALID_STATUSES):
        return f"Unknown status: {status}"
    return None


def map_transaction_type(transaction_type: str) -> TransactionCategory | None:
    """Map a free-text type to a category; None when nothing matches."""
    normalized = transaction_type.lower().strip()

    for label, category in TYPE_RULES:
        if normalized == label:
            return category

    for label, category in TYPE_RULES:
        if label in normalized:
            return category

    return None


def is_reversal(transaction: RawTransaction) -> bool:
    """True for STORNO rows, which reverse an earlier booking."""
    description = transaction.description.lower()
    reference = transaction.reference.lower()
    return "storno" in description or "cancel" in reference or "storno" in reference


def is_interest_settlement(transaction: RawTransaction, amounts: Amounts) -> bool:
    """True for the quarterly KKT-Abschluss booking of an interest row.

    Those rows carry the withheld tax and the account fees instead of
    interest income.
    """
    description = transaction.description.lower()
    return "kkt" in description or "abschluss" in description or amounts.amount < ZERO


def classify(transaction: RawTransaction) -> Classification:
    """Decide how a row is converted, or why it is skipped."""
    reason = status_skip_reason(transaction.status)
    if reason:
        return Classification(Route.SKIP_STATUS, skip_reason=reason)

    category = map_transaction_type(transaction.type)
    if category is None or category == TransactionCategory.UNSUPPORTED:
        return Classification(Route.SKIP_UNSUPPORTED, category, skip_reason=REASON_UNSUPPORTED)

    amounts = parse_amounts(transaction)

    if is_reversal(transaction):
        reason = REASON_ZERO_STORNO if amounts.amount == ZERO else None
        return Classification(Route.REVERSAL, category, amounts, reason)

    if category in (TransactionCategory.FEE, TransactionCategory.TAX_AND_FEE):
        reason = REASON_ZERO_FEE if amounts.amount == ZERO else None
        return Classification(Route.FEE, category, amounts, reason)

    if category == TransactionCategory.INTEREST:
        if is_interest_settlement(transaction, amounts):
            empty = amounts.tax == ZERO and amounts.amount == ZERO
            reason = REASON_ZERO_SETTLEMENT if empty else None
            return Classification(Route.INTEREST_SETTLEMENT, category, amounts, reason)
        return Classification(Route.INTEREST, category, amounts)

    if category == TransactionCategory.TAX:
        reason = REASON_ZERO_TAX if amounts.amount == ZERO else None
        return Classification(Route.TAX, category, amounts, reason)

    if category in TRADE_CATEGORIES:
        return Classification(Route.TRADE, category, amounts)
    if category == TransactionCategory.DIVIDEND:
        return Classification(Route.DIVIDEND, category, amounts)
    return Classification(Route.CASH, category, amounts)


def compute_position(category: TransactionCategory, amounts: Amounts) -> Position:
    """Quantity/price/gross for trades, dividends, interest and cash movements.

    Trades use the share count and execution price; every other category is
    booked as one unit priced at the absolute amount.
    """
    if category in TRADE_CATEGORIES:
        quantity = abs(amounts.shares)
        return Position(quantity, amounts.price, quantity * amounts.price)

    unit_price = abs(amounts.amount)
    return Position(ONE, unit_price, unit_price)


def position_skip_reason(
    category: TransactionCategory, amounts: Amounts, position: Position
) -> str | None:
    """Return why a computed position is empty, or None when it can be emitted."""
    is_trade = category in TRADE_CATEGORIES
    if position.quantity > ZERO and (is_trade or position.unit_price > ZERO):
        return None

    if amounts.commission > ZERO:
        if category == TransactionCategory.DIVIDEND:
            return REASON_DIVIDEND_WITHHELD
        if category == TransactionCategory.INTEREST:
            return REASON_INTEREST_WITHHELD

    if is_trade:
        return REASON_NO_SHARES
    return REASON_ZERO_AMOUNT
