"""Conversion pipeline: parse, resolve, validate, convert, serialize.

Network collaborators run before the pure conversion step; the converters
themselves never perform I/O and only read the finished SymbolMap.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from scalable_converter.constants import ConversionMode, TargetFormat
from scalable_converter.services.converter_registry import ConverterRegistry
from scalable_converter.services.converters.base_converter import ConversionResult
from scalable_converter.services.csv_parser import (
    RawTransaction,
    extract_unique_isins,
    parse_scalable_csv,
)
from scalable_converter.services.openfigi_client import OpenFigiClient
from scalable_converter.services.symbol_resolver import SymbolMap
from scalable_converter.services.symbol_validation import (
    TradingViewSymbolValidator,
    YahooSymbolValidator,
    enrich_symbol_map,
)

logger = logging.getLogger(__name__)


@dataclass
class ConversionOutcome:
    """Everything produced by one pipeline run."""

    target_format: TargetFormat
    mode: ConversionMode
    csv: str
    result: ConversionResult
    rows: list[dict[str, str]] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)
    symbol_map: SymbolMap = field(default_factory=dict)

    @property
    def stats(self) -> dict[str, int]:
        return {
            **self.result.stats,
            "parse_errors": len(self.parse_errors),
            "isins": len(self.symbol_map),
        }


class ConversionService:
    """Runs a Scalable Capital export through the full conversion pipeline.

    Example usage:
        service = ConversionService()
        outcome = service.convert(csv_bytes, TargetFormat.WEALTHFOLIO, api_key="...")
        Path("wealthfolio.csv").write_text(outcome.csv)
    """

    def __init__(
        self,
        resolver_factory: Callable[[str | None], OpenFigiClient] | None = None,
        yahoo_factory: Callable[[], YahooSymbolValidator] | None = None,
        tradingview_factory: Callable[[], TradingViewSymbolValidator] | None = None,
    ):
        self.resolver_factory = resolver_factory or (lambda api_key: OpenFigiClient(api_key))
        self.yahoo_factory = yahoo_factory or YahooSymbolValidator
        self.tradingview_factory = tradingview_factory or TradingViewSymbolValidator

    def resolve_symbols(
        self, transactions: list[RawTransaction], api_key: str | None = None
    ) -> SymbolMap:
        """Resolve the ISINs of all security rows via OpenFIGI."""
        isins = extract_unique_isins(transactions)
        if not isins:
            return {}
        with self.resolver_factory(api_key) as resolver:
            return resolver.resolve_isins(isins)

    def validate_symbols(self, symbol_map: SymbolMap, target_format: TargetFormat) -> SymbolMap:
        """Attach validated symbols for the platform being converted to."""
        if not any(symbol_map.values()):
            return symbol_map
        if target_format == TargetFormat.TRADINGVIEW:
            with self.tradingview_factory() as tradingview:
                return enrich_symbol_map(symbol_map, tradingview=tradingview)
        with self.yahoo_factory() as yahoo:
            return enrich_symbol_map(symbol_map, yahoo=yahoo)

    def convert(
        self,
        content: bytes | str,
        target_format: TargetFormat | str,
        mode: ConversionMode | str = ConversionMode.DETAILED,
        symbol_map: SymbolMap | None = None,
        api_key: str | None = None,
        validate_symbols: bool = False,
    ) -> ConversionOutcome:
        """Convert a Scalable Capital export into an import file.

        Args:
            content: Raw CSV export
            target_format: 'tradingview' or 'wealthfolio'
            mode: 'detailed' or 'aggregated'
            symbol_map: Pre-resolved symbols; skips OpenFIGI when given
            api_key: OpenFIGI API key
            validate_symbols: Probe the target platform for each resolved symbol

        Returns:
            ConversionOutcome with CSV text, records and diagnostics

        Raises:
            ValueError: If the target format or mode is unknown
        """
        converter = ConverterRegistry.get_converter(target_format)
        mode = ConversionMode(mode)
        target = converter.target_format()

        parsed = parse_scalable_csv(content)
        if symbol_map is None:
            symbol_map = self.resolve_symbols(parsed.transactions, api_key)
        if validate_symbols:
            symbol_map = self.validate_symbols(symbol_map, target)

        result = converter.convert(parsed.transactions, symbol_map, mode)
        outcome = ConversionOutcome(
            target_format=target,
            mode=mode,
            csv=converter.serialize(result.records),
            result=result,
            rows=[converter.to_row(record) for record in result.records],
            parse_errors=parsed.errors,
            symbol_map=symbol_map,
        )
        logger.info(f"Conversion to {target.value} ({mode.value}) finished: {outcome.stats}")
        return outcome
