"""
Domain entities for date-keyed time series (moving averages, daily closes).
Zero external dependencies: pure Python dataclasses only.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Generic, Iterator, Mapping, TypeVar

MAX_SERIES_LENGTH = 10

T = TypeVar("T")


@dataclass(frozen=True)
class MovingAverageMetadata:
    symbol: str
    average_type: str
    interval: str
    time_period: int


@dataclass(frozen=True)
class MovingAveragePoint:
    symbol: str
    average_type: str
    interval: str
    time_period: int
    date: date
    value: float
    last_updated: datetime

    @property
    def natural_key(self) -> tuple:
        return (self.symbol, self.date, self.interval, self.time_period, self.average_type)


@dataclass(frozen=True)
class HistoricalPricePoint:
    symbol: str
    date: date
    closing_price: float
    last_updated: datetime

    @property
    def natural_key(self) -> tuple:
        return (self.symbol, self.date)


@dataclass(frozen=True)
class MovingAverageResponse:
    """Raw moving-average payload: metadata plus the date-keyed points.

    ``series`` keeps the provider's document order (most recent date first).
    ``value_key`` names the field holding the average inside each point (e.g. "SMA").
    """

    metadata: MovingAverageMetadata
    value_key: str
    series: Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True)
class DailyPriceResponse:
    symbol: str
    series: Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True)
class EntryFailure:
    """Describes one entry that was skipped; ``stage`` is "mapping" or "persistence"."""

    key: str
    stage: str
    reason: str


@dataclass(frozen=True)
class BoundedSeries(Generic[T]):
    """Ordered sequence of at most ``cap`` records, plus the entries skipped building it.

    Only filled entries are held; ``len()`` is the filled count, never the cap.
    """

    items: tuple[T, ...] = ()
    cap: int = MAX_SERIES_LENGTH
    failures: tuple[EntryFailure, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.items) > self.cap:
            raise ValueError(f"series holds {len(self.items)} items, cap is {self.cap}")

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __getitem__(self, index: int) -> T:
        return self.items[index]

    @property
    def is_full(self) -> bool:
        return len(self.items) == self.cap
