import json

import httpx
import pytest

from stock_updater.domain.entities.fetch_config import FetchConfig
from stock_updater.domain.errors import FetchFailure
from stock_updater.infrastructure.market_data.alpha_vantage_adapter import (
    AlphaVantageTimeSeriesProvider,
    meta_value,
)
from stock_updater.infrastructure.market_data.http_client import JsonHttpClient
from stock_updater.infrastructure.market_data.iex_adapter import IEXStockDetailsProvider

MOVING_AVERAGE_BODY = """{
    "Meta Data": {
        "1: Symbol": "IBM",
        "2: Indicator": "Simple Moving Average (SMA)",
        "3: Last Refreshed": "2024-01-12",
        "4: Interval": "daily",
        "5: Time Period": 10,
        "6: Series Type": "open",
        "7: Time Zone": "US/Eastern"
    },
    "Technical Analysis: SMA": {
        "2024-01-12": {"SMA": "161.2350"},
        "2024-01-11": {"SMA": "160.9870"},
        "2024-01-10": {"SMA": "160.4410"}
    }
}"""

DAILY_BODY = """{
    "Meta Data": {"1. Information": "Daily Prices", "2. Symbol": "IBM"},
    "Time Series (Daily)": {
        "2018-12-14": {"1. open": "108.2500", "4. close": "106.0300", "5. volume": "46959680"},
        "2018-12-13": {"1. open": "109.5800", "4. close": "109.4500", "5. volume": "31333362"}
    }
}"""


def make_client(handler, base_url="https://provider.test") -> JsonHttpClient:
    return JsonHttpClient(base_url, transport=httpx.MockTransport(handler))


def json_handler(body, requests=None, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, content=body if isinstance(body, str) else json.dumps(body))

    return handler


def test_moving_average_request_and_response_shape():
    requests = []
    provider = AlphaVantageTimeSeriesProvider(make_client(json_handler(MOVING_AVERAGE_BODY, requests)))
    config = FetchConfig(symbol="IBM", function="SMA", interval="daily", period=10, api_key="k&y")

    response = provider.get_moving_average(config)

    (request,) = requests
    assert request.url.path == "/query"
    assert dict(request.url.params) == {
        "function": "SMA",
        "symbol": "IBM",
        "interval": "daily",
        "time_period": "10",
        "series_type": "open",
        "apikey": "k&y",
    }
    assert "apikey=k%26y" in str(request.url)
    assert response.value_key == "SMA"
    assert response.metadata.symbol == "IBM"
    assert response.metadata.average_type == "SMA"
    assert response.metadata.interval == "daily"
    assert response.metadata.time_period == 10
    assert list(response.series) == ["2024-01-12", "2024-01-11", "2024-01-10"]


def test_daily_prices_keep_document_order():
    requests = []
    provider = AlphaVantageTimeSeriesProvider(make_client(json_handler(DAILY_BODY, requests)))

    response = provider.get_daily_prices(FetchConfig(symbol="IBM", function="TIME_SERIES_DAILY", api_key="k"))

    assert dict(requests[0].url.params) == {"function": "TIME_SERIES_DAILY", "symbol": "IBM", "apikey": "k"}
    assert list(response.series) == ["2018-12-14", "2018-12-13"]
    assert response.series["2018-12-14"]["4. close"] == "106.0300"


@pytest.mark.parametrize(
    "body",
    [
        {"Error Message": "Invalid API call."},
        {"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."},
        {"Information": "The demo API key is for demo purposes only."},
        {"Meta Data": {}},
        {"Meta Data": {}, "Technical Analysis: SMA": ["not", "an", "object"]},
    ],
)
def test_malformed_moving_average_payloads_are_fetch_failures(body):
    provider = AlphaVantageTimeSeriesProvider(make_client(json_handler(body)))

    with pytest.raises(FetchFailure):
        provider.get_moving_average(FetchConfig(symbol="IBM", function="SMA"))


def test_daily_without_time_series_section_is_a_fetch_failure():
    provider = AlphaVantageTimeSeriesProvider(make_client(json_handler({"Meta Data": {}})))

    with pytest.raises(FetchFailure):
        provider.get_daily_prices(FetchConfig(symbol="IBM", function="TIME_SERIES_DAILY"))


def test_meta_value_ignores_numbering():
    meta = {"1: Symbol": "IBM", "2. Interval": "weekly"}
    assert meta_value(meta, "symbol") == "IBM"
    assert meta_value(meta, "Interval") == "weekly"
    assert meta_value(meta, "Time Period", 20) == 20


def test_iex_stats_and_quote_are_parsed():
    bodies = {
        "/1.0/stock/AAPL/stats": {
            "companyName": "Apple Inc.",
            "marketcap": 2500000000000,
            "beta": 1.2,
            "week52high": 199.62,
            "week52low": 124.17,
            "peRatio": 15.2,
            "dividendYield": 0.005,
            "ttmEPS": 6.1,
            "unusedField": "ignored",
        },
        "/1.0/stock/AAPL/quote": {"symbol": "AAPL", "latestPrice": 52.3, "latestVolume": 5000},
    }

    def handler(request):
        return httpx.Response(200, json=bodies[request.url.path])

    provider = IEXStockDetailsProvider(make_client(handler, "https://api.iextrading.com/1.0"))

    stats = provider.get_key_stats("AAPL")
    quote = provider.get_quote("AAPL")

    assert stats.symbol == "AAPL"
    assert stats.company_name == "Apple Inc."
    assert stats.week52_high == 199.62
    assert stats.pe_ratio == 15.2
    assert stats.eps == 6.1
    assert stats.volume is None and stats.price is None
    assert (quote.volume, quote.price) == (5000, 52.3)


def test_iex_token_is_sent_when_configured():
    requests = []
    provider = IEXStockDetailsProvider(
        make_client(json_handler({"volume": 1, "price": 2.0}, requests)), token="secret"
    )

    provider.get_quote("AAPL")

    assert requests[0].url.params["token"] == "secret"


def test_iex_type_mismatch_is_a_fetch_failure():
    provider = IEXStockDetailsProvider(make_client(json_handler({"peRatio": "not a number"})))

    with pytest.raises(FetchFailure):
        provider.get_key_stats("AAPL")


def test_http_error_status_is_a_fetch_failure():
    client = make_client(json_handler({"error": "nope"}, status_code=503))

    with pytest.raises(FetchFailure, match="503"):
        client.get_json("/query")


def test_non_json_body_is_a_fetch_failure():
    client = make_client(json_handler("<html>maintenance</html>"))

    with pytest.raises(FetchFailure):
        client.get_json("/query")


def test_json_array_is_a_fetch_failure():
    client = make_client(json_handler([1, 2, 3]))

    with pytest.raises(FetchFailure, match="expected a JSON object"):
        client.get_json("/query")


def test_transport_error_is_a_fetch_failure():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with make_client(handler) as client:
        with pytest.raises(FetchFailure):
            client.get_json("/query")
