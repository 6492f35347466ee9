"""
Ports (interfaces) for external market-data providers.
Infrastructure adapters (e.g. IEXStockDetailsProvider, AlphaVantageTimeSeriesProvider)
must implement these interfaces and raise FetchFailure on any transport or
top-level shape problem.
"""

from abc import ABC, abstractmethod

from stock_updater.domain.entities.fetch_config import FetchConfig
from stock_updater.domain.entities.stock_details import StockDetails
from stock_updater.domain.entities.time_series import DailyPriceResponse, MovingAverageResponse


class IStockDetailsProvider(ABC):
    @abstractmethod
    def get_key_stats(self, symbol: str) -> StockDetails:
        """Return the statistics view of *symbol* (volume/price may be absent)."""
        ...

    @abstractmethod
    def get_quote(self, symbol: str) -> StockDetails:
        """Return the quote view of *symbol*; authoritative for volume and price."""
        ...


class ITimeSeriesProvider(ABC):
    @abstractmethod
    def get_moving_average(self, config: FetchConfig) -> MovingAverageResponse: ...

    @abstractmethod
    def get_daily_prices(self, config: FetchConfig) -> DailyPriceResponse: ...
