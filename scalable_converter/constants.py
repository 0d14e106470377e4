"""Application constants to avoid magic strings."""

from enum import Enum


class TargetFormat(str, Enum):
    """Supported output formats."""

    TRADINGVIEW = "tradingview"  # exchange-prefixed symbols (XETR:SAP)
    WEALTHFOLIO = "wealthfolio"  # Yahoo Finance suffixed symbols (SAP.DE)


class ConversionMode(str, Enum):
    """Whether consecutive trades are merged into one record."""

    DETAILED = "detailed"
    AGGREGATED = "aggregated"


class TradingViewSide:
    """Side values accepted by the TradingView portfolio import."""

    BUY = "Buy"
    SELL = "Sell"
    DIVIDEND = "Dividend"
    WITHDRAWAL = "Withdrawal"
    DEPOSIT = "Deposit"
    TAXES_AND_FEES = "Taxes and fees"


class ActivityType:
    """Activity types accepted by the Wealthfolio import."""

    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"
    INTEREST = "INTEREST"
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    FEE = "FEE"
    TAX = "TAX"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"


# Cash pseudo-symbols
TRADINGVIEW_CASH_SYMBOL = "$CASH"


def wealthfolio_cash_symbol(currency: str) -> str:
    """Return the Wealthfolio cash pseudo-symbol for a currency."""
    return f"$CASH-{currency}"


# Transaction statuses
VALID_STATUSES = ("executed", "completed", "done")
SKIP_STATUSES = ("cancelled", "canceled", "rejected", "pending", "failed")

# OpenFIGI exchange code -> TradingView exchange prefix.
# Scalable Capital only trades on German venues in EUR.
EXCHANGE_CODES: dict[str, str] = {
    "GM": "GETTEX",  # Gettex (Munich)
    "GR": "XETR",  # XETRA
    "GT": "TRADEGATE",
    "GF": "FRA",  # Frankfurt floor
    "GS": "SWB",  # Stuttgart / EUWAX
    "GH": "XHAM",  # Hamburg
    "QT": "QUOTRIX",
}

# OpenFIGI exchange code -> Yahoo Finance suffix
YAHOO_FINANCE_SUFFIXES: dict[str, str] = {
    "GR": ".DE",
    "GF": ".F",
    "GM": ".MU",
    "GT": ".DE",  # Tradegate has no own suffix, XETRA is the most liquid fallback
    "GS": ".SG",
    "GH": ".HM",
    "QT": ".DE",
}
DEFAULT_YAHOO_SUFFIX = ".DE"

# Order in which OpenFIGI is queried per ISIN
EXCHANGE_PRIORITY: tuple[str, ...] = ("GM", "GR", "GT", "GS", "GF", "GH", "QT")

# Exchange codes used by the routing heuristic
DERIVATIVES_EXCHANGE_CODE = "GS"  # Stuttgart (EUWAX) lists ETPs and certificates
ETF_EXCHANGE_CODE = "GR"  # XETRA

# Fallback orders used by the symbol validators
YAHOO_SUFFIXES: tuple[str, ...] = (".DE", ".F", ".MU", ".SG", ".HM", ".DU", ".BE", ".HA", ".SW")
TRADINGVIEW_EXCHANGES: tuple[str, ...] = (
    "SWB",
    "GETTEX",
    "XETR",
    "MUN",
    "FRA",
    "DUS",
    "HAM",
    "BER",
    "TRADEGATE",
)
