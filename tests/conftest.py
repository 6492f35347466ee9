from datetime import date, datetime, timedelta, timezone

import pytest

from stock_updater.application.services.pipeline_orchestrator import PipelineOrchestrator
from stock_updater.application.services.series_mapper import DateKeyedSeriesMapper
from stock_updater.application.use_cases.update_historical_prices import UpdateHistoricalPricesUseCase
from stock_updater.application.use_cases.update_moving_average import UpdateMovingAverageUseCase
from stock_updater.application.use_cases.update_stock_details import UpdateStockDetailsUseCase
from stock_updater.domain.entities.fetch_config import SweepProfile
from stock_updater.domain.entities.stock_details import StockDetails
from stock_updater.domain.entities.time_series import (
    DailyPriceResponse,
    MovingAverageMetadata,
    MovingAverageResponse,
)
from stock_updater.domain.errors import FetchFailure
from stock_updater.domain.ports.market_data_port import IStockDetailsProvider, ITimeSeriesProvider
from stock_updater.infrastructure.persistence.in_memory_repository import (
    InMemoryHistoricalPriceRepository,
    InMemoryMovingAverageRepository,
    InMemoryStockDetailsRepository,
)

FIXED_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def date_keys(newest: date, count: int) -> list[str]:
    """ISO dates from *newest* backwards, most recent first."""
    return [(newest - timedelta(days=i)).isoformat() for i in range(count)]


def ma_series(keys, value_key="SMA", start=100.0) -> dict:
    return {key: {value_key: f"{start + i:.4f}"} for i, key in enumerate(keys)}


def daily_series(keys, start=50.0) -> dict:
    return {
        key: {
            "1. open": "1.0",
            "2. high": "2.0",
            "3. low": "0.5",
            "4. close": f"{start + i:.4f}",
            "5. volume": "1000",
        }
        for i, key in enumerate(keys)
    }


class FakeDetailsProvider(IStockDetailsProvider):
    """Returns canned stats/quote views; a value that is an exception is raised."""

    def __init__(self, stats=None, quotes=None):
        self.stats = stats or {}
        self.quotes = quotes or {}
        self.calls = []

    def _answer(self, table, symbol):
        value = table.get(symbol)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise FetchFailure(f"unknown symbol {symbol}")
        return value

    def get_key_stats(self, symbol):
        self.calls.append(("stats", symbol))
        return self._answer(self.stats, symbol)

    def get_quote(self, symbol):
        self.calls.append(("quote", symbol))
        return self._answer(self.quotes, symbol)


class FakeSeriesProvider(ITimeSeriesProvider):
    def __init__(self, moving_averages=None, daily=None):
        self.moving_averages = moving_averages or {}
        self.daily = daily or {}
        self.configs = []

    @staticmethod
    def _answer(table, symbol):
        value = table.get(symbol)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise FetchFailure(f"unknown symbol {symbol}")
        return value

    def get_moving_average(self, config):
        self.configs.append(config)
        return self._answer(self.moving_averages, config.symbol)

    def get_daily_prices(self, config):
        self.configs.append(config)
        return self._answer(self.daily, config.symbol)


def ma_response(symbol, keys, value_key="SMA", interval="daily", time_period=10):
    return MovingAverageResponse(
        metadata=MovingAverageMetadata(
            symbol=symbol, average_type=value_key, interval=interval, time_period=time_period
        ),
        value_key=value_key,
        series=ma_series(keys, value_key),
    )


def daily_response(symbol, keys):
    return DailyPriceResponse(symbol=symbol, series=daily_series(keys))


@pytest.fixture
def profile():
    return SweepProfile(api_key="demo")


@pytest.fixture
def mapper():
    return DateKeyedSeriesMapper(clock=fixed_clock)


@pytest.fixture
def repositories():
    return {
        "details": InMemoryStockDetailsRepository(),
        "moving_average": InMemoryMovingAverageRepository(),
        "historical_prices": InMemoryHistoricalPriceRepository(),
    }


@pytest.fixture
def details_provider():
    return FakeDetailsProvider(
        stats={
            "AAPL": StockDetails(symbol="AAPL", company_name="Apple Inc.", pe_ratio=15.2, week52_high=100.0),
            "MSFT": StockDetails(symbol="MSFT", company_name="Microsoft", pe_ratio=30.1, week52_high=400.0),
        },
        quotes={
            "AAPL": StockDetails(symbol="AAPL", volume=5000, price=52.3),
            "MSFT": StockDetails(symbol="MSFT", volume=7000, price=390.5),
        },
    )


@pytest.fixture
def series_provider():
    keys = date_keys(date(2024, 1, 12), 12)
    return FakeSeriesProvider(
        moving_averages={
            "AAPL": ma_response("AAPL", keys),
            "MSFT": ma_response("MSFT", keys),
        },
        daily={
            "AAPL": daily_response("AAPL", keys),
            "MSFT": daily_response("MSFT", keys),
        },
    )


@pytest.fixture
def orchestrator(details_provider, series_provider, repositories, mapper):
    return PipelineOrchestrator(
        details=UpdateStockDetailsUseCase(details_provider, repositories["details"], clock=fixed_clock),
        moving_average=UpdateMovingAverageUseCase(
            series_provider, repositories["moving_average"], mapper=mapper
        ),
        historical_prices=UpdateHistoricalPricesUseCase(
            series_provider, repositories["historical_prices"], mapper=mapper
        ),
    )
