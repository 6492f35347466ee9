"""
Per-invocation fetch configuration.
A FetchConfig is built for each (symbol, pipeline) unit and passed down
explicitly, so concurrent units never share mutable settings.
"""

from dataclasses import dataclass
from enum import Enum


class PipelineKind(str, Enum):
    DETAILS = "details"
    MOVING_AVERAGE = "moving-average"
    HISTORICAL_PRICES = "historical-prices"


ALL_PIPELINES = (
    PipelineKind.DETAILS,
    PipelineKind.MOVING_AVERAGE,
    PipelineKind.HISTORICAL_PRICES,
)


@dataclass(frozen=True)
class FetchConfig:
    symbol: str
    function: str = ""
    interval: str = "daily"
    period: int = 10
    api_key: str = ""
    series_type: str = "open"


@dataclass(frozen=True)
class SweepProfile:
    """Provider parameters shared by every symbol of a sweep."""

    api_key: str
    moving_average_function: str = "SMA"
    moving_average_interval: str = "daily"
    moving_average_period: int = 10
    moving_average_series_type: str = "open"
    price_function: str = "TIME_SERIES_DAILY"

    def config_for(self, kind: PipelineKind, symbol: str) -> FetchConfig:
        """Build the FetchConfig for one pipeline run on *symbol*."""
        if kind is PipelineKind.MOVING_AVERAGE:
            return FetchConfig(
                symbol=symbol,
                function=self.moving_average_function,
                interval=self.moving_average_interval,
                period=self.moving_average_period,
                api_key=self.api_key,
                series_type=self.moving_average_series_type,
            )
        if kind is PipelineKind.HISTORICAL_PRICES:
            return FetchConfig(symbol=symbol, function=self.price_function, api_key=self.api_key)
        return FetchConfig(symbol=symbol, api_key=self.api_key)
