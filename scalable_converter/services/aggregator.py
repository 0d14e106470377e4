"""Weighted-average aggregation of consecutive trades.

Runs of consecutive records with the same symbol and the same trade
direction (buy or sell) collapse into one record whose price is the
quantity-weighted average of the run. Any non-trade record ends the
current run and passes through unchanged, so two runs of the same symbol
separated by another record are never merged.

The aggregator is a small explicit state machine:

    Empty --trade--> Accumulating(symbol, direction, items)
    Accumulating --same key trade--> Accumulating (item appended)
    Accumulating --other trade--> flush, Accumulating(new key)
    any --non-trade--> flush, emit record, Empty
    end of input --> flush
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, TypeVar

from scalable_converter.services.number_parsing import ZERO

logger = logging.getLogger(__name__)

R = TypeVar("R")


class AggregationError(Exception):
    """Raised when the merge step receives an empty group (programming error)."""


class RecordAdapter(ABC, Generic[R]):
    """Gives the aggregator uniform access to one output record type."""

    @abstractmethod
    def trade_key(self, record: R) -> tuple[str, str] | None:
        """Return (symbol, direction) for buy/sell records, None otherwise."""

    @abstractmethod
    def quantity(self, record: R) -> Decimal:
        pass

    @abstractmethod
    def unit_price(self, record: R) -> Decimal:
        pass

    @abstractmethod
    def fee(self, record: R) -> Decimal:
        pass

    @abstractmethod
    def merged(
        self, first: R, last: R, quantity: Decimal, unit_price: Decimal, fee: Decimal
    ) -> R:
        """Build the synthetic record of a group from its totals."""


@dataclass(frozen=True)
class Empty:
    """No group is open."""


@dataclass
class Accumulating(Generic[R]):
    """An open group of consecutive same-key trades."""

    symbol: str
    direction: str
    items: list[R] = field(default_factory=list)


class TradeAggregator(Generic[R]):
    """Merge consecutive same-symbol, same-direction trades.

    Example usage:
        aggregator = TradeAggregator(WealthfolioRecordAdapter())
        merged = aggregator.aggregate(records)
    """

    def __init__(self, adapter: RecordAdapter[R]):
        self.adapter = adapter
        self.state: Empty | Accumulating[R] = Empty()
        self.output: list[R] = []

    def aggregate(self, records: list[R]) -> list[R]:
        """Single ordered pass over ``records``; returns the merged list."""
        self.reset()
        for record in records:
            self.feed(record)
        result = self.finish()
        if len(result) != len(records):
            logger.info(f"Aggregated {len(records)} records into {len(result)}")
        return result

    def reset(self) -> None:
        self.state = Empty()
        self.output = []

    def feed(self, record: R) -> None:
        """Apply one transition of the state machine."""
        key = self.adapter.trade_key(record)

        if key is None:
            self._flush()
            self.output.append(record)
            return

        symbol, direction = key
        state = self.state
        if isinstance(state, Accumulating) and (state.symbol, state.direction) == key:
            state.items.append(record)
            return

        self._flush()
        self.state = Accumulating(symbol=symbol, direction=direction, items=[record])

    def finish(self) -> list[R]:
        """Flush the open group and return everything emitted so far."""
        self._flush()
        return self.output

    def _flush(self) -> None:
        state = self.state
        if isinstance(state, Accumulating):
            if len(state.items) == 1:
                self.output.append(state.items[0])
            else:
                self.output.append(self.merge_group(state.items))
        self.state = Empty()

    def merge_group(self, group: list[R]) -> R:
        """Collapse a group into one weighted-average record."""
        if not group:
            raise AggregationError("Cannot aggregate empty group")
        if len(group) == 1:
            return group[0]

        total_quantity = ZERO
        total_value = ZERO
        total_fee = ZERO
        for record in group:
            quantity = self.adapter.quantity(record)
            total_quantity += quantity
            total_value += quantity * self.adapter.unit_price(record)
            total_fee += self.adapter.fee(record)

        average_price = total_value / total_quantity if total_quantity > ZERO else ZERO
        return self.adapter.merged(group[0], group[-1], total_quantity, average_price, total_fee)
