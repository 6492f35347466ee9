"""
Infrastructure adapter: IEX stats and quote endpoints -> IStockDetailsProvider.
All IEX-specific field names are confined here; pydantic models describe the
raw payloads and are converted to the StockDetails domain entity.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from stock_updater.domain.entities.stock_details import StockDetails
from stock_updater.domain.errors import FetchFailure
from stock_updater.domain.ports.market_data_port import IStockDetailsProvider
from stock_updater.infrastructure.market_data.http_client import JsonHttpClient

DEFAULT_BASE_URL = "https://api.iextrading.com/1.0"


class KeyStatsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbol: Optional[str] = None
    company_name: Optional[str] = Field(default=None, validation_alias="companyName")
    market_cap: Optional[float] = Field(default=None, validation_alias="marketcap")
    beta: Optional[float] = None
    week52_high: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("week52high", "week52High")
    )
    week52_low: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("week52low", "week52Low")
    )
    pe_ratio: Optional[float] = Field(default=None, validation_alias="peRatio")
    dividend_yield: Optional[float] = Field(default=None, validation_alias="dividendYield")
    eps: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("ttmEPS", "latestEPS")
    )


class QuotePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbol: Optional[str] = None
    volume: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("latestVolume", "volume")
    )
    price: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("latestPrice", "price")
    )


class IEXStockDetailsProvider(IStockDetailsProvider):
    """Fetches key statistics and quotes from the IEX REST API."""

    def __init__(self, client: JsonHttpClient, token: Optional[str] = None) -> None:
        self._client = client
        self._token = token

    def get_key_stats(self, symbol: str) -> StockDetails:
        payload = self._get(f"/stock/{symbol}/stats")
        try:
            stats = KeyStatsPayload.model_validate(payload)
        except ValidationError as exc:
            raise FetchFailure(f"Malformed stats response for {symbol!r}: {exc}") from exc
        return StockDetails(
            symbol=stats.symbol or symbol,
            company_name=stats.company_name,
            market_cap=stats.market_cap,
            beta=stats.beta,
            week52_high=stats.week52_high,
            week52_low=stats.week52_low,
            pe_ratio=stats.pe_ratio,
            dividend_yield=stats.dividend_yield,
            eps=stats.eps,
        )

    def get_quote(self, symbol: str) -> StockDetails:
        payload = self._get(f"/stock/{symbol}/quote")
        try:
            quote = QuotePayload.model_validate(payload)
        except ValidationError as exc:
            raise FetchFailure(f"Malformed quote response for {symbol!r}: {exc}") from exc
        return StockDetails(symbol=quote.symbol or symbol, volume=quote.volume, price=quote.price)

    def _get(self, path: str) -> dict:
        params = {"token": self._token} if self._token else None
        return self._client.get_json(path, params=params)
