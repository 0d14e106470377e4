"""Resolved-symbol model and per-format symbol derivation.

The resolver collaborator (OpenFIGI) produces a ``SymbolMap`` before any
conversion runs. Converters only read that finished map:

- key present, value ``ResolvedSymbol``: ISIN resolved
- key present, value ``None``: ISIN looked up but could not be resolved
- key absent: ISIN never looked up

Optional symbol fields treat ``None`` and ``""`` the same way: both mean
"not available, use the default" (see ``first_present``).
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from scalable_converter.constants import (
    DEFAULT_YAHOO_SUFFIX,
    DERIVATIVES_EXCHANGE_CODE,
    ETF_EXCHANGE_CODE,
    YAHOO_FINANCE_SUFFIXES,
    TargetFormat,
)

logger = logging.getLogger(__name__)

# Security types listed on the derivatives venue regardless of where OpenFIGI found them
DERIVATIVE_SECURITY_TYPES = ("ETP", "ETN", "ETC", "CERTIFICATE", "WARRANT")


@dataclass(frozen=True)
class ResolvedSymbol:
    """Ticker information for one ISIN."""

    ticker: str
    exchange: str  # TradingView exchange prefix, e.g. XETR
    exchange_code: str  # OpenFIGI exchange code, e.g. GR
    full_symbol: str  # EXCHANGE:TICKER
    yahoo_symbol: str | None = None  # validated on Yahoo Finance, e.g. SAP.DE
    tradingview_symbol: str | None = None  # validated on TradingView, e.g. XETR:SAP
    security_type: str | None = None
    security_type2: str | None = None
    market_sector: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used by the API."""
        return {
            "ticker": self.ticker,
            "exchange": self.exchange,
            "exchCode": self.exchange_code,
            "fullSymbol": self.full_symbol,
            "yahooSymbol": self.yahoo_symbol,
            "tradingViewSymbol": self.tradingview_symbol,
            "securityType": self.security_type,
            "securityType2": self.security_type2,
            "marketSector": self.market_sector,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResolvedSymbol":
        """Build from an API payload; ``exchCode``/``fullSymbol`` may be omitted."""
        ticker = data["ticker"]
        exchange = data.get("exchange") or ""
        return cls(
            ticker=ticker,
            exchange=exchange,
            exchange_code=data.get("exchCode") or "",
            full_symbol=data.get("fullSymbol") or f"{exchange}:{ticker}",
            yahoo_symbol=data.get("yahooSymbol"),
            tradingview_symbol=data.get("tradingViewSymbol"),
            security_type=data.get("securityType"),
            security_type2=data.get("securityType2"),
            market_sector=data.get("marketSector"),
        )


SymbolMap = dict[str, ResolvedSymbol | None]


class LookupStatus(str, Enum):
    """Outcome of looking an ISIN up in a SymbolMap."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    NOT_LOOKED_UP = "not_looked_up"


def lookup_status(symbol_map: SymbolMap, isin: str) -> LookupStatus:
    """Distinguish "looked up but unresolved" from "never looked up"."""
    if isin not in symbol_map:
        return LookupStatus.NOT_LOOKED_UP
    if symbol_map[isin] is None:
        return LookupStatus.UNRESOLVED
    return LookupStatus.RESOLVED


def first_present(*values: str | None) -> str | None:
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value:
            return value
    return None


def yahoo_suffix_for(exchange_code: str | None) -> str:
    """Yahoo Finance suffix for an OpenFIGI exchange code (.DE when unknown)."""
    return YAHOO_FINANCE_SUFFIXES.get(exchange_code or "", DEFAULT_YAHOO_SUFFIX)


def symbol_for(resolved: ResolvedSymbol, target_format: TargetFormat) -> str:
    """Derive the symbol a target platform expects for a resolved ISIN.

    A validated symbol always wins. Otherwise TradingView gets the
    exchange-prefixed symbol and Wealthfolio gets ticker + Yahoo suffix.
    """
    if target_format == TargetFormat.TRADINGVIEW:
        return first_present(resolved.tradingview_symbol) or resolved.full_symbol

    validated = first_present(resolved.yahoo_symbol)
    if validated:
        return validated
    return f"{resolved.ticker}{yahoo_suffix_for(resolved.exchange_code)}"


def symbol_map_from_payload(payload: dict[str, dict[str, Any] | None]) -> SymbolMap:
    """Build a SymbolMap from the JSON shape returned by the resolve endpoint."""
    return {
        isin: ResolvedSymbol.from_dict(data) if data else None for isin, data in payload.items()
    }


def route_exchange(
    found_code: str,
    security_type: str | None = None,
    security_type2: str | None = None,
    market_sector: str | None = None,
) -> str:
    """Pick the exchange code an instrument should be quoted on.

    Structured products (ETP/ETN/ETC, certificates, warrants, commodities)
    go to Stuttgart, ETFs go to XETRA, everything else keeps the exchange
    OpenFIGI returned data for.
    """
    types = " ".join(t.upper() for t in (security_type, security_type2) if t)
    sector = (market_sector or "").lower()

    if any(marker in types for marker in DERIVATIVE_SECURITY_TYPES) or "commodity" in sector:
        return DERIVATIVES_EXCHANGE_CODE
    if "ETF" in types:
        return ETF_EXCHANGE_CODE
    return found_code


def with_validated_symbols(
    resolved: ResolvedSymbol,
    yahoo_symbol: str | None = None,
    tradingview_symbol: str | None = None,
) -> ResolvedSymbol:
    """Return a copy carrying validator results, keeping existing ones when absent."""
    return replace(
        resolved,
        yahoo_symbol=first_present(yahoo_symbol, resolved.yahoo_symbol),
        tradingview_symbol=first_present(tradingview_symbol, resolved.tradingview_symbol),
    )
