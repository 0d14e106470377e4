"""Services layer - conversion engine and external integrations.

- csv_parser / transaction_classifier / number_parsing: reading Scalable exports
- converters/: TradingView and Wealthfolio output formats
- aggregator / csv_serializer: post-processing of converted records
- openfigi_client / symbol_validation: ISIN resolution and symbol checks
- shared/: Shared utilities

Common imports for convenience:
    from scalable_converter.services import ConversionService, ConverterRegistry
"""

from scalable_converter.services.conversion_service import ConversionOutcome, ConversionService
from scalable_converter.services.converter_registry import ConverterRegistry, FormatInfo

__all__ = [
    "ConversionOutcome",
    "ConversionService",
    "ConverterRegistry",
    "FormatInfo",
]
