"""Output format converters."""

from scalable_converter.services.converters.base_converter import (
    BaseFormatConverter,
    ConversionError,
    ConversionResult,
    SkippedTransaction,
)
from scalable_converter.services.converters.tradingview_converter import (
    TradingViewConverter,
    TradingViewRecord,
)
from scalable_converter.services.converters.wealthfolio_converter import (
    WealthfolioConverter,
    WealthfolioRecord,
)

__all__ = [
    "BaseFormatConverter",
    "ConversionError",
    "ConversionResult",
    "SkippedTransaction",
    "TradingViewConverter",
    "TradingViewRecord",
    "WealthfolioConverter",
    "WealthfolioRecord",
]
