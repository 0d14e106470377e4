"""Symbol validators for Yahoo Finance and TradingView.

OpenFIGI tickers do not always match what the target platforms quote, so
both validators probe a list of venues (preferred one first) and report the
first symbol that actually exists there.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from scalable_converter.config import settings
from scalable_converter.constants import TRADINGVIEW_EXCHANGES, YAHOO_SUFFIXES
from scalable_converter.services.shared.http_client import (
    BROWSER_USER_AGENT,
    HTTPClient,
    HTTPClientError,
)
from scalable_converter.services.symbol_resolver import (
    SymbolMap,
    with_validated_symbols,
    yahoo_suffix_for,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of validating one ticker."""

    ticker: str
    valid_symbol: str | None = None
    tested: list[str] = field(default_factory=list)


def _candidate_order(preferred: str | None, candidates: tuple[str, ...]) -> list[str]:
    """Preferred candidate first, then the rest in their default order."""
    if not preferred:
        return list(candidates)
    return [preferred] + [candidate for candidate in candidates if candidate != preferred]


class YahooSymbolValidator(HTTPClient):
    """Checks ticker + exchange suffix combinations against Yahoo's chart API."""

    def __init__(self, chart_url: str | None = None, delay: float | None = None):
        super().__init__(
            timeout=settings.http_timeout,
            headers={"User-Agent": BROWSER_USER_AGENT},
        )
        self.chart_url = (chart_url or settings.yahoo_chart_url).rstrip("/")
        self.delay = settings.validation_delay if delay is None else delay

    def symbol_exists(self, symbol: str) -> bool:
        """True when Yahoo returns price data for the symbol."""
        url = f"{self.chart_url}/{quote(symbol, safe='')}"
        try:
            data = self.get_json(url, params={"interval": "1d", "range": "1d"})
        except (HTTPClientError, ValueError) as e:
            logger.debug(f"Yahoo check failed for {symbol}: {e}")
            return False

        chart = (data or {}).get("chart") or {}
        if chart.get("error"):
            return False
        results = chart.get("result") or []
        if not results:
            return False
        meta = (results[0] or {}).get("meta") or {}
        return bool(meta.get("regularMarketPrice"))

    def validate(self, ticker: str, preferred_suffix: str | None = None) -> ValidationResult:
        """Find the first suffix under which Yahoo quotes the ticker."""
        result = ValidationResult(ticker=ticker)
        for suffix in _candidate_order(preferred_suffix, YAHOO_SUFFIXES):
            result.tested.append(suffix)
            symbol = f"{ticker}{suffix}"
            if self.symbol_exists(symbol):
                result.valid_symbol = symbol
                break
        return result

    def validate_batch(self, items: list[dict[str, Any]]) -> list[ValidationResult]:
        """Validate ``[{"ticker": ..., "preferred_suffix": ...}]`` sequentially."""
        results = []
        for item in items:
            results.append(self.validate(item["ticker"], item.get("preferred_suffix")))
            time.sleep(self.delay)
        return results


class TradingViewSymbolValidator(HTTPClient):
    """Checks exchange:ticker combinations against TradingView symbol search."""

    def __init__(self, search_url: str | None = None, delay: float | None = None):
        super().__init__(
            timeout=settings.http_timeout,
            headers={"User-Agent": BROWSER_USER_AGENT},
        )
        self.search_url = search_url or settings.tradingview_search_url
        self.delay = settings.validation_delay if delay is None else delay

    def symbol_exists(self, exchange: str, ticker: str) -> bool:
        """True when the search lists the ticker on exactly this exchange."""
        try:
            data = self.get_json(
                self.search_url,
                params={"text": ticker, "type": "stock", "exchange": exchange},
            )
        except (HTTPClientError, ValueError) as e:
            logger.warning(f"TradingView check failed for {exchange}:{ticker}: {e}")
            return False

        if not isinstance(data, list):
            return False
        return any(
            str(item.get("symbol", "")).upper() == ticker.upper()
            and str(item.get("exchange", "")).upper() == exchange.upper()
            for item in data
        )

    def validate(self, ticker: str, preferred_exchange: str | None = None) -> ValidationResult:
        """Find the first exchange on which TradingView lists the ticker."""
        result = ValidationResult(ticker=ticker)
        for exchange in _candidate_order(preferred_exchange, TRADINGVIEW_EXCHANGES):
            result.tested.append(exchange)
            if self.symbol_exists(exchange, ticker):
                result.valid_symbol = f"{exchange}:{ticker}"
                break
        return result

    def validate_batch(self, items: list[dict[str, Any]]) -> list[ValidationResult]:
        """Validate ``[{"ticker": ..., "preferred_exchange": ...}]`` sequentially."""
        results = []
        for item in items:
            results.append(self.validate(item["ticker"], item.get("preferred_exchange")))
            time.sleep(self.delay)
        return results


def enrich_symbol_map(
    symbol_map: SymbolMap,
    yahoo: YahooSymbolValidator | None = None,
    tradingview: TradingViewSymbolValidator | None = None,
) -> SymbolMap:
    """Return a new map whose resolved entries carry validated symbols.

    Unresolved entries are copied unchanged. A validator that finds nothing
    leaves the entry's existing symbol in place.
    """
    enriched: SymbolMap = {}
    for isin, resolved in symbol_map.items():
        if resolved is None:
            enriched[isin] = None
            continue

        yahoo_symbol = None
        if yahoo is not None:
            yahoo_symbol = yahoo.validate(
                resolved.ticker, yahoo_suffix_for(resolved.exchange_code)
            ).valid_symbol

        tradingview_symbol = None
        if tradingview is not None:
            tradingview_symbol = tradingview.validate(
                resolved.ticker, resolved.exchange or None
            ).valid_symbol

        enriched[isin] = with_validated_symbols(resolved, yahoo_symbol, tradingview_symbol)

    validated = sum(
        1
        for value in enriched.values()
        if value and (value.yahoo_symbol or value.tradingview_symbol)
    )
    logger.info(f"Validated symbols for {validated}/{len(enriched)} ISINs")
    return enriched
