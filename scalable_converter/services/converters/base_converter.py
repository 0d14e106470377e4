"""Base class for output format converters.

This module defines the row loop shared by all target formats: status and
type classification, ISIN resolution and diagnostics. Subclasses only
decide how a classified row becomes records of their own schema.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, Generic, TypeVar

from scalable_converter.constants import ConversionMode, TargetFormat
from scalable_converter.services.aggregator import RecordAdapter, TradeAggregator
from scalable_converter.services.csv_parser import RawTransaction
from scalable_converter.services.csv_serializer import serialize_rows
from scalable_converter.services.symbol_resolver import SymbolMap, lookup_status, symbol_for
from scalable_converter.services.transaction_classifier import (
    ERROR_MISSING_ISIN,
    ERROR_UNRESOLVED_ISIN,
    SECURITY_CATEGORIES,
    Classification,
    Position,
    Route,
    TransactionCategory,
    classify,
    compute_position,
    currency_of,
    position_skip_reason,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")

# Rows are reported 1-based and after the header line
ROW_OFFSET = 2


@dataclass
class ConversionError:
    """A row that could not be converted because its ISIN is missing or unresolved."""

    row: int
    isin: str
    description: str
    error: str


@dataclass
class SkippedTransaction:
    """A row intentionally left out of the output."""

    row: int
    type: str
    description: str
    reason: str


@dataclass
class ConversionResult(Generic[R]):
    """Records, errors and skipped rows of one conversion run."""

    records: list[R] = field(default_factory=list)
    errors: list[ConversionError] = field(default_factory=list)
    skipped: list[SkippedTransaction] = field(default_factory=list)

    @property
    def stats(self) -> dict[str, int]:
        return {
            "records": len(self.records),
            "errors": len(self.errors),
            "skipped": len(self.skipped),
        }


class SymbolResolutionError(Exception):
    """Raised when a security row has no usable ISIN."""

    def __init__(self, message: str, isin: str = ""):
        super().__init__(message)
        self.isin = isin


class BaseFormatConverter(ABC, Generic[R]):
    """Abstract base class for all output format converters.

    Example usage:
        converter = WealthfolioConverter()
        result = converter.convert(transactions, symbol_map, ConversionMode.AGGREGATED)
        csv_text = converter.serialize(result.records)
    """

    columns: ClassVar[tuple[str, ...]] = ()

    @classmethod
    @abstractmethod
    def target_format(cls) -> TargetFormat:
        """Return the format identifier."""
        pass

    @classmethod
    @abstractmethod
    def format_name(cls) -> str:
        """Return the human-readable name of the target tool."""
        pass

    @abstractmethod
    def cash_symbol(self, currency: str) -> str:
        """Pseudo-symbol used for cash movements."""
        pass

    @abstractmethod
    def record_adapter(self) -> RecordAdapter[R]:
        """Adapter used by the aggregator for this record type."""
        pass

    @abstractmethod
    def to_row(self, record: R) -> dict[str, str]:
        """Render a record as column -> text."""
        pass

    @abstractmethod
    def position_record(
        self,
        transaction: RawTransaction,
        classification: Classification,
        symbol: str,
        position: Position,
    ) -> R:
        """Record for trades, dividends, interest and deposits/withdrawals."""
        pass

    @abstractmethod
    def reversal_record(self, transaction: RawTransaction, classification: Classification) -> R:
        """Cash deposit booked for a STORNO row."""
        pass

    @abstractmethod
    def fee_record(self, transaction: RawTransaction, classification: Classification) -> R:
        """Fee charge, or refund when the amount is positive."""
        pass

    @abstractmethod
    def settlement_records(
        self, transaction: RawTransaction, classification: Classification
    ) -> list[R]:
        """Records for an interest settlement (KKT-Abschluss) row."""
        pass

    @abstractmethod
    def tax_record(self, transaction: RawTransaction, classification: Classification) -> R:
        """Standalone tax booking."""
        pass

    def convert(
        self,
        transactions: list[RawTransaction],
        symbol_map: SymbolMap,
        mode: ConversionMode = ConversionMode.DETAILED,
    ) -> ConversionResult[R]:
        """Convert rows in input order; never stops on a bad row."""
        result: ConversionResult[R] = ConversionResult()

        for index, transaction in enumerate(transactions):
            row_number = index + ROW_OFFSET
            classification = classify(transaction)

            if classification.is_skipped:
                result.skipped.append(
                    self._skipped(row_number, transaction, classification.skip_reason)
                )
                continue

            try:
                records = self._convert_row(transaction, classification, symbol_map)
            except SymbolResolutionError as e:
                result.errors.append(
                    ConversionError(
                        row=row_number,
                        isin=e.isin,
                        description=transaction.description,
                        error=str(e),
                    )
                )
                continue

            if isinstance(records, str):
                result.skipped.append(self._skipped(row_number, transaction, records))
                continue
            result.records.extend(records)

        if mode == ConversionMode.AGGREGATED:
            result.records = TradeAggregator(self.record_adapter()).aggregate(result.records)

        logger.info(
            f"{self.format_name()} conversion: {len(result.records)} records, "
            f"{len(result.errors)} errors, {len(result.skipped)} skipped "
            f"from {len(transactions)} rows"
        )
        return result

    def serialize(self, records: list[R]) -> str:
        """Render records as import CSV in this format's column order."""
        return serialize_rows((self.to_row(record) for record in records), self.columns)

    def _convert_row(
        self,
        transaction: RawTransaction,
        classification: Classification,
        symbol_map: SymbolMap,
    ) -> list[R] | str:
        """Return the records of one row, or a skip reason."""
        route = classification.route

        if route == Route.REVERSAL:
            return [self.reversal_record(transaction, classification)]
        if route == Route.FEE:
            return [self.fee_record(transaction, classification)]
        if route == Route.INTEREST_SETTLEMENT:
            return self.settlement_records(transaction, classification)
        if route == Route.TAX:
            return [self.tax_record(transaction, classification)]

        category = classification.category
        symbol = self.resolve_symbol(transaction, category, symbol_map)
        position = compute_position(category, classification.amounts)
        reason = position_skip_reason(category, classification.amounts, position)
        if reason:
            return reason
        return [self.position_record(transaction, classification, symbol, position)]

    def resolve_symbol(
        self,
        transaction: RawTransaction,
        category: TransactionCategory,
        symbol_map: SymbolMap,
    ) -> str:
        """Pick the output symbol of a row.

        Raises:
            SymbolResolutionError: If a trade has no ISIN or an ISIN is unresolved
        """
        currency = currency_of(transaction)
        if category not in SECURITY_CATEGORIES:
            return self.cash_symbol(currency)

        isin = transaction.isin
        if not isin:
            if category == TransactionCategory.DIVIDEND:
                return self.cash_symbol(currency)
            raise SymbolResolutionError(ERROR_MISSING_ISIN)

        resolved = symbol_map.get(isin)
        if resolved is None:
            logger.debug(f"ISIN {isin} not usable: {lookup_status(symbol_map, isin).value}")
            raise SymbolResolutionError(ERROR_UNRESOLVED_ISIN, isin=isin)
        return symbol_for(resolved, self.target_format())

    @staticmethod
    def _skipped(row: int, transaction: RawTransaction, reason: str) -> SkippedTransaction:
        return SkippedTransaction(
            row=row,
            type=transaction.type,
            description=transaction.description,
            reason=reason,
        )
