"""
Infrastructure adapter: Alpha Vantage query API -> ITimeSeriesProvider.

Alpha Vantage answers with a "Meta Data" object plus one date-keyed section
("Technical Analysis: SMA", "Time Series (Daily)", ...).  This adapter only
checks that top-level shape and hands the section over untouched; per-date
parsing belongs to the application-layer series mapper.
"""

from typing import Any, Mapping

from stock_updater.domain.entities.fetch_config import FetchConfig
from stock_updater.domain.entities.time_series import (
    DailyPriceResponse,
    MovingAverageMetadata,
    MovingAverageResponse,
)
from stock_updater.domain.errors import FetchFailure
from stock_updater.domain.ports.market_data_port import ITimeSeriesProvider
from stock_updater.infrastructure.market_data.http_client import JsonHttpClient

DEFAULT_BASE_URL = "https://www.alphavantage.co"

META_SECTION = "Meta Data"
INDICATOR_PREFIX = "Technical Analysis: "
TIME_SERIES_PREFIX = "Time Series"
ERROR_KEYS = ("Error Message", "Note", "Information")


def meta_value(meta: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Look up a metadata field ignoring its numbered prefix ("1: Symbol", "2. Symbol")."""
    for key, value in meta.items():
        label = key.split(":", 1)[-1] if ":" in key else key.split(".", 1)[-1]
        if label.strip().lower() == name.lower():
            return value
    return default


def find_section(payload: Mapping[str, Any], prefix: str) -> tuple[str, Mapping[str, Any]]:
    for key, value in payload.items():
        if key.startswith(prefix):
            if not isinstance(value, Mapping):
                raise FetchFailure(f"Section {key!r} is not a JSON object")
            return key, value
    raise FetchFailure(f"Response has no {prefix!r} section (keys: {sorted(payload)})")


def raise_for_provider_error(payload: Mapping[str, Any], symbol: str) -> None:
    for key in ERROR_KEYS:
        if key in payload:
            raise FetchFailure(f"Alpha Vantage refused request for {symbol!r}: {payload[key]}")


class AlphaVantageTimeSeriesProvider(ITimeSeriesProvider):
    """Fetches technical indicators and daily prices from Alpha Vantage."""

    def __init__(self, client: JsonHttpClient) -> None:
        self._client = client

    def get_moving_average(self, config: FetchConfig) -> MovingAverageResponse:
        payload = self._client.get_json(
            "/query",
            params={
                "function": config.function,
                "symbol": config.symbol,
                "interval": config.interval,
                "time_period": config.period,
                "series_type": config.series_type,
                "apikey": config.api_key,
            },
        )
        raise_for_provider_error(payload, config.symbol)

        section_key, series = find_section(payload, INDICATOR_PREFIX)
        value_key = section_key[len(INDICATOR_PREFIX):].strip() or config.function
        meta = payload.get(META_SECTION) or {}
        if not isinstance(meta, Mapping):
            raise FetchFailure(f"{META_SECTION!r} is not a JSON object")

        try:
            time_period = int(meta_value(meta, "Time Period", config.period))
        except (TypeError, ValueError) as exc:
            raise FetchFailure(f"Invalid time period in metadata: {exc}") from exc

        metadata = MovingAverageMetadata(
            symbol=meta_value(meta, "Symbol", config.symbol),
            average_type=value_key,
            interval=meta_value(meta, "Interval", config.interval),
            time_period=time_period,
        )
        return MovingAverageResponse(metadata=metadata, value_key=value_key, series=series)

    def get_daily_prices(self, config: FetchConfig) -> DailyPriceResponse:
        payload = self._client.get_json(
            "/query",
            params={
                "function": config.function,
                "symbol": config.symbol,
                "apikey": config.api_key,
            },
        )
        raise_for_provider_error(payload, config.symbol)
        _, series = find_section(payload, TIME_SERIES_PREFIX)
        return DailyPriceResponse(symbol=config.symbol, series=series)
