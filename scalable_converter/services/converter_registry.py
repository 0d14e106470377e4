"""Converter registry for output formats.

Maps target format identifiers to their converter implementations and
provides factory methods for getting converter instances.
"""

import logging
from dataclasses import dataclass

from scalable_converter.services.converters.base_converter import BaseFormatConverter

logger = logging.getLogger(__name__)


@dataclass
class FormatInfo:
    """Information about a supported output format."""

    type: str
    name: str
    columns: list[str]


class ConverterRegistry:
    """Registry for output format converters.

    Example usage:
        converter = ConverterRegistry.get_converter("wealthfolio")
        result = converter.convert(transactions, symbol_map)
    """

    _converters: dict[str, type[BaseFormatConverter]] = {}
    _initialized: bool = False

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Lazily initialize the converter registry."""
        if cls._initialized:
            return

        from scalable_converter.services.converters.tradingview_converter import (
            TradingViewConverter,
        )
        from scalable_converter.services.converters.wealthfolio_converter import (
            WealthfolioConverter,
        )

        cls._converters = {
            TradingViewConverter.target_format().value: TradingViewConverter,
            WealthfolioConverter.target_format().value: WealthfolioConverter,
        }
        cls._initialized = True
        logger.info("Converter registry initialized with %d formats", len(cls._converters))

    @classmethod
    def get_converter(cls, target_format: str) -> BaseFormatConverter:
        """Get a converter instance for the specified format.

        Args:
            target_format: Format identifier (e.g., 'tradingview')

        Returns:
            Converter instance for the format

        Raises:
            ValueError: If the format is not supported
        """
        cls._ensure_initialized()

        key = getattr(target_format, "value", target_format)
        if key not in cls._converters:
            supported = list(cls._converters.keys())
            raise ValueError(f"Unsupported target format '{key}'. Supported: {supported}")

        return cls._converters[key]()

    @classmethod
    def is_supported(cls, target_format: str) -> bool:
        """Check if a target format has a registered converter."""
        cls._ensure_initialized()
        return getattr(target_format, "value", target_format) in cls._converters

    @classmethod
    def get_supported_formats(cls) -> list[FormatInfo]:
        """Get information about all supported output formats."""
        cls._ensure_initialized()

        return [
            FormatInfo(
                type=converter_class.target_format().value,
                name=converter_class.format_name(),
                columns=list(converter_class.columns),
            )
            for converter_class in cls._converters.values()
        ]

    @classmethod
    def register_converter(
        cls, target_format: str, converter_class: type[BaseFormatConverter]
    ) -> None:
        """Register a new converter class at runtime.

        Args:
            target_format: Format identifier
            converter_class: Class that extends BaseFormatConverter
        """
        cls._ensure_initialized()

        if not issubclass(converter_class, BaseFormatConverter):
            raise TypeError(
                f"Converter class must extend BaseFormatConverter, got {converter_class}"
            )

        cls._converters[target_format] = converter_class
        logger.info("Registered converter for format: %s", target_format)
