"""
Application service: turns a provider's date-keyed JSON object into a BoundedSeries.

Providers return time series as an object whose keys are date strings, most
recent first.  The document order decides which entries survive the cap, so
the raw mapping must be the dict produced by the JSON decoder, untouched.

Business decisions owned here:
  - MAX_SERIES_LENGTH: how many of the most recent points are kept.
  - A bad entry is skipped and reported; it never aborts the batch.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping, Optional, TypeVar

from stock_updater.domain.entities.time_series import (
    MAX_SERIES_LENGTH,
    BoundedSeries,
    DailyPriceResponse,
    EntryFailure,
    HistoricalPricePoint,
    MovingAverageMetadata,
    MovingAveragePoint,
    MovingAverageResponse,
)
from stock_updater.domain.errors import EntryMappingFailure

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
CLOSE_FIELD = "4. close"

T = TypeVar("T")
M = TypeVar("M")

EntryBuilder = Callable[[date, Mapping[str, Any], M, datetime], T]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_series_date(key: str) -> date:
    """Parse a zero-padded ``YYYY-MM-DD`` key; anything else is an EntryMappingFailure."""
    try:
        parsed = datetime.strptime(key, DATE_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise EntryMappingFailure(str(key), f"unparseable date: {exc}") from exc
    # strptime also accepts unpadded fields such as "2024-1-5"
    if parsed.isoformat() != key:
        raise EntryMappingFailure(key, "date is not in YYYY-MM-DD form")
    return parsed


def parse_number(key: str, raw_point: Mapping[str, Any], field_name: str) -> float:
    if not isinstance(raw_point, Mapping) or field_name not in raw_point:
        raise EntryMappingFailure(key, f"missing field {field_name!r}")
    try:
        return float(raw_point[field_name])
    except (TypeError, ValueError) as exc:
        raise EntryMappingFailure(key, f"non-numeric {field_name!r}: {raw_point[field_name]!r}") from exc


class DateKeyedSeriesMapper:
    """Maps an ordered ``date -> raw point`` mapping to at most ``cap`` typed records."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or utc_now

    def map(
        self,
        raw_series: Mapping[str, Mapping[str, Any]],
        metadata: M,
        build_entry: EntryBuilder,
        cap: int = MAX_SERIES_LENGTH,
    ) -> BoundedSeries:
        """Build records in source order until *cap* of them succeeded.

        Args:
            raw_series:  Insertion-ordered mapping, most recent date first.
            metadata:    Shared metadata stamped onto every record.
            build_entry: ``(date, raw_point, metadata, last_updated) -> record``;
                         may raise EntryMappingFailure, KeyError, TypeError or ValueError.
            cap:         Maximum number of records kept. Failed entries do not count.

        Returns:
            BoundedSeries holding the records and one EntryFailure per skipped entry.
        """
        if cap < 0:
            raise ValueError("cap must be non-negative")

        items: list = []
        failures: list[EntryFailure] = []
        seen: set[date] = set()
        for key, raw_point in raw_series.items():
            if len(items) >= cap:
                break
            try:
                entry_date = parse_series_date(key)
                if entry_date in seen:
                    raise EntryMappingFailure(key, f"duplicate date {entry_date.isoformat()}")
                record = build_entry(entry_date, raw_point, metadata, self._clock())
            except EntryMappingFailure as exc:
                failures.append(EntryFailure(key=str(key), stage="mapping", reason=exc.reason))
                logger.warning("Skipping series entry %s: %s", key, exc.reason)
                continue
            except (KeyError, TypeError, ValueError) as exc:
                failures.append(EntryFailure(key=str(key), stage="mapping", reason=repr(exc)))
                logger.warning("Skipping series entry %s: %r", key, exc)
                continue
            logger.debug("Mapped series entry %s -> %s", key, record)
            seen.add(entry_date)
            items.append(record)

        return BoundedSeries(items=tuple(items), cap=cap, failures=tuple(failures))


def build_moving_average_point(value_key: str) -> EntryBuilder:
    """Return a builder reading the average from ``raw_point[value_key]``."""

    def build(
        entry_date: date,
        raw_point: Mapping[str, Any],
        metadata: MovingAverageMetadata,
        last_updated: datetime,
    ) -> MovingAveragePoint:
        return MovingAveragePoint(
            symbol=metadata.symbol,
            average_type=metadata.average_type,
            interval=metadata.interval,
            time_period=metadata.time_period,
            date=entry_date,
            value=parse_number(entry_date.isoformat(), raw_point, value_key),
            last_updated=last_updated,
        )

    return build


def build_historical_price_point(
    entry_date: date,
    raw_point: Mapping[str, Any],
    symbol: str,
    last_updated: datetime,
) -> HistoricalPricePoint:
    return HistoricalPricePoint(
        symbol=symbol,
        date=entry_date,
        closing_price=parse_number(entry_date.isoformat(), raw_point, CLOSE_FIELD),
        last_updated=last_updated,
    )


def map_moving_averages(
    response: MovingAverageResponse,
    mapper: Optional[DateKeyedSeriesMapper] = None,
    cap: int = MAX_SERIES_LENGTH,
) -> BoundedSeries:
    mapper = mapper or DateKeyedSeriesMapper()
    return mapper.map(
        response.series,
        response.metadata,
        build_moving_average_point(response.value_key),
        cap=cap,
    )


def map_historical_prices(
    response: DailyPriceResponse,
    mapper: Optional[DateKeyedSeriesMapper] = None,
    cap: int = MAX_SERIES_LENGTH,
) -> BoundedSeries:
    mapper = mapper or DateKeyedSeriesMapper()
    return mapper.map(response.series, response.symbol, build_historical_price_point, cap=cap)
