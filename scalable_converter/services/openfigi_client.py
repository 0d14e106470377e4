"""OpenFIGI API client for resolving ISINs to ticker symbols.

Scalable Capital only trades on German venues in EUR, so every ISIN
(including US stocks such as Apple, quoted as XETR:APC) is looked up on
German exchange codes only, in EXCHANGE_PRIORITY order.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_fixed

from scalable_converter.config import settings
from scalable_converter.constants import EXCHANGE_CODES, EXCHANGE_PRIORITY
from scalable_converter.services.shared.http_client import HTTPClient, HTTPClientError
from scalable_converter.services.symbol_resolver import (
    ResolvedSymbol,
    SymbolMap,
    route_exchange,
)

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429
RATE_LIMIT_ATTEMPTS = 5


class OpenFigiError(Exception):
    """Exception raised when OpenFIGI keeps refusing requests."""

    def __init__(self, message: str, isin: str | None = None):
        super().__init__(message)
        self.isin = isin


def _is_rate_limited(error: BaseException) -> bool:
    return isinstance(error, HTTPClientError) and error.status_code == RATE_LIMIT_STATUS


class OpenFigiClient(HTTPClient):
    """Client for the OpenFIGI mapping API.

    Usage:
        with OpenFigiClient(api_key="...") as client:
            symbol_map = client.resolve_isins(["DE000A0WMPJ6", "US0378331005"])
    """

    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        delay: float | None = None,
        rate_limit_wait: float | None = None,
    ):
        """Initialize OpenFIGI client.

        Args:
            api_key: Optional API key for higher rate limits
            url: Mapping endpoint, defaults to settings.openfigi_url
            delay: Seconds to sleep between ISINs; derived from the key when omitted
            rate_limit_wait: Seconds to wait after an HTTP 429
        """
        self.api_key = api_key or settings.openfigi_api_key or None
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-OPENFIGI-APIKEY"] = self.api_key
        super().__init__(timeout=settings.http_timeout, headers=headers)

        self.url = url or settings.openfigi_url
        if delay is None:
            delay = (
                settings.openfigi_delay_with_key
                if self.api_key
                else settings.openfigi_delay_without_key
            )
        self.delay = delay
        self.rate_limit_wait = (
            settings.openfigi_rate_limit_wait if rate_limit_wait is None else rate_limit_wait
        )

    def _query(self, isin: str, exchange_code: str) -> list[dict[str, Any]]:
        """Return the instruments OpenFIGI lists for an ISIN on one exchange.

        Raises:
            OpenFigiError: If the API is still rate limiting after all retries
        """
        body = [{"idType": "ID_ISIN", "idValue": isin, "exchCode": exchange_code}]
        retrying = Retrying(
            retry=retry_if_exception(_is_rate_limited),
            wait=wait_fixed(self.rate_limit_wait),
            stop=stop_after_attempt(RATE_LIMIT_ATTEMPTS),
            before_sleep=lambda _: logger.warning(
                f"OpenFIGI rate limit hit for {isin}, waiting {self.rate_limit_wait}s"
            ),
            reraise=True,
        )
        try:
            response = retrying(self.post_json, self.url, json=body)
        except HTTPClientError as e:
            if _is_rate_limited(e):
                raise OpenFigiError("OpenFIGI rate limit exceeded", isin=isin) from e
            logger.warning(f"OpenFIGI lookup failed for {isin} on {exchange_code}: {e}")
            return []

        if not isinstance(response, list) or not response:
            return []
        item = response[0] or {}
        if "warning" in item:
            logger.debug(f"OpenFIGI {isin} on {exchange_code}: {item['warning']}")
        return item.get("data") or []

    def resolve_isin(self, isin: str) -> ResolvedSymbol | None:
        """Resolve one ISIN by trying German exchanges in priority order."""
        for exchange_code in EXCHANGE_PRIORITY:
            instruments = self._query(isin, exchange_code)
            if not instruments:
                continue

            instrument = instruments[0]
            ticker = instrument["ticker"]
            routed_code = route_exchange(
                exchange_code,
                instrument.get("securityType"),
                instrument.get("securityType2"),
                instrument.get("marketSector"),
            )
            exchange = EXCHANGE_CODES.get(routed_code, routed_code)
            if routed_code != exchange_code:
                logger.debug(f"Routed {isin} from {exchange_code} to {routed_code}")

            return ResolvedSymbol(
                ticker=ticker,
                exchange=exchange,
                exchange_code=routed_code,
                full_symbol=f"{exchange}:{ticker}",
                security_type=instrument.get("securityType"),
                security_type2=instrument.get("securityType2"),
                market_sector=instrument.get("marketSector"),
            )

        logger.info(f"No German listing found for ISIN {isin}")
        return None

    def resolve_isins(
        self,
        isins: list[str],
        on_progress: Callable[[int, int], None] | None = None,
    ) -> SymbolMap:
        """Resolve many ISINs sequentially, sleeping between requests.

        Args:
            isins: ISINs to resolve, duplicates allowed
            on_progress: Called with (done, total) after each ISIN

        Returns:
            SymbolMap with one entry per unique ISIN (None when unresolved)
        """
        unique_isins = list(dict.fromkeys(isins))
        results: SymbolMap = {}

        for index, isin in enumerate(unique_isins):
            if not isin or not isin.strip():
                results[isin] = None
                continue

            results[isin] = self.resolve_isin(isin)

            if on_progress is not None:
                on_progress(index + 1, len(unique_isins))

            if index < len(unique_isins) - 1:
                time.sleep(self.delay)

        resolved = sum(1 for value in results.values() if value is not None)
        logger.info(f"Resolved {resolved}/{len(unique_isins)} ISINs via OpenFIGI")
        return results
