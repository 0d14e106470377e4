"""Pydantic schemas for API validation."""

from scalable_converter.schemas.conversion import (
    ConversionErrorResponse,
    ConversionResponse,
    ConversionStats,
    FormatInfoResponse,
    SkippedTransactionResponse,
)
from scalable_converter.schemas.symbols import (
    ResolveIsinRequest,
    ResolveIsinResponse,
    ResolvedSymbolResponse,
    TradingViewBatchRequest,
    TradingViewBatchResponse,
    TradingViewValidationRequest,
    TradingViewValidationResponse,
    YahooBatchRequest,
    YahooBatchResponse,
    YahooValidationRequest,
    YahooValidationResponse,
)

__all__ = [
    # Conversion schemas
    "ConversionErrorResponse",
    "ConversionResponse",
    "ConversionStats",
    "FormatInfoResponse",
    "SkippedTransactionResponse",
    # Symbol schemas
    "ResolveIsinRequest",
    "ResolveIsinResponse",
    "ResolvedSymbolResponse",
    "TradingViewBatchRequest",
    "TradingViewBatchResponse",
    "TradingViewValidationRequest",
    "TradingViewValidationResponse",
    "YahooBatchRequest",
    "YahooBatchResponse",
    "YahooValidationRequest",
    "YahooValidationResponse",
]
