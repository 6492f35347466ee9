"""
Process configuration read from the environment (and a local .env file).

Settings are loaded once by the entry points and turned into a SweepProfile;
the application layer only ever sees per-invocation FetchConfig values.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from stock_updater.domain.entities.fetch_config import SweepProfile
from stock_updater.infrastructure.market_data import alpha_vantage_adapter, iex_adapter


@dataclass(frozen=True)
class Settings:
    alphavantage_api_key: str
    alphavantage_base_url: str = alpha_vantage_adapter.DEFAULT_BASE_URL
    iex_base_url: str = iex_adapter.DEFAULT_BASE_URL
    iex_token: Optional[str] = None
    ma_function: str = "SMA"
    ma_interval: str = "daily"
    ma_time_period: int = 10
    ma_series_type: str = "open"
    price_function: str = "TIME_SERIES_DAILY"
    options_indicator: str = "Y"
    database_url: str = "sqlite:///stock_updater.db"
    http_timeout: float = 10.0
    sweep_max_workers: int = 1
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build Settings from *environ* (defaults to os.environ after loading .env).

        Raises:
            KeyError: if ALPHAVANTAGE_API_KEY is not set.
            ValueError: if a numeric variable cannot be parsed.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ
        return cls(
            alphavantage_api_key=environ["ALPHAVANTAGE_API_KEY"],
            alphavantage_base_url=environ.get(
                "ALPHAVANTAGE_BASE_URL", alpha_vantage_adapter.DEFAULT_BASE_URL
            ),
            iex_base_url=environ.get("IEX_BASE_URL", iex_adapter.DEFAULT_BASE_URL),
            iex_token=environ.get("IEX_TOKEN") or None,
            ma_function=environ.get("MA_FUNCTION", "SMA"),
            ma_interval=environ.get("MA_INTERVAL", "daily"),
            ma_time_period=int(environ.get("MA_TIME_PERIOD", "10")),
            ma_series_type=environ.get("MA_SERIES_TYPE", "open"),
            price_function=environ.get("PRICE_FUNCTION", "TIME_SERIES_DAILY"),
            options_indicator=environ.get("OPTIONS_INDICATOR", "Y"),
            database_url=environ.get("DATABASE_URL", "sqlite:///stock_updater.db"),
            http_timeout=float(environ.get("HTTP_TIMEOUT", "10")),
            sweep_max_workers=int(environ.get("SWEEP_MAX_WORKERS", "1")),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            log_dir=environ.get("LOG_DIR") or None,
        )

    def profile(self) -> SweepProfile:
        return SweepProfile(
            api_key=self.alphavantage_api_key,
            moving_average_function=self.ma_function,
            moving_average_interval=self.ma_interval,
            moving_average_period=self.ma_time_period,
            moving_average_series_type=self.ma_series_type,
            price_function=self.price_function,
        )
