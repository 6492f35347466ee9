import dataclasses

import pytest

from stock_updater.application.services.response_merger import merge_details
from stock_updater.domain.entities.stock_details import StockDetails
from stock_updater.domain.errors import DataUnavailable, FetchFailure


@pytest.fixture
def stats():
    return StockDetails(symbol="AAPL", pe_ratio=15.2, week52_high=100.0)


@pytest.fixture
def quote():
    return StockDetails(symbol="AAPL", volume=5000, price=52.3)


def test_quote_volume_and_price_are_overlaid_on_stats(stats, quote):
    merged = merge_details(stats, quote)

    assert merged.pe_ratio == 15.2
    assert merged.week52_high == 100
    assert merged.volume == 5000
    assert merged.price == 52.3


def test_overlay_replaces_stats_values_for_volume_and_price(quote):
    stale = StockDetails(symbol="AAPL", pe_ratio=15.2, volume=1, price=1.0)

    merged = merge_details(stale, quote)

    assert (merged.volume, merged.price) == (5000, 52.3)


def test_other_overlay_fields_are_ignored(stats):
    quote = StockDetails(symbol="AAPL", volume=5000, price=52.3, pe_ratio=99.0, company_name="Other")

    merged = merge_details(stats, quote)

    assert merged.pe_ratio == 15.2
    assert merged.company_name is None


def test_merge_is_idempotent(stats, quote):
    once = merge_details(stats, quote)
    twice = merge_details(once, quote)

    assert once == twice


def test_inputs_are_not_mutated(stats, quote):
    before = dataclasses.asdict(stats)
    merge_details(stats, quote)
    assert dataclasses.asdict(stats) == before


def test_symbols_are_not_cross_checked(stats):
    merged = merge_details(stats, StockDetails(symbol="MSFT", volume=1, price=2.0))
    assert merged.symbol == "AAPL"


@pytest.mark.parametrize(
    "primary, overlay",
    [
        (None, StockDetails(symbol="AAPL", volume=5000, price=52.3)),
        (StockDetails(symbol="AAPL"), None),
        (StockDetails(symbol="AAPL"), StockDetails(symbol="AAPL", price=52.3)),
        (StockDetails(symbol="AAPL"), StockDetails(symbol="AAPL", volume=5000)),
    ],
)
def test_absent_or_incomplete_sources_fail_fast(primary, overlay):
    with pytest.raises(DataUnavailable):
        merge_details(primary, overlay)


def test_data_unavailable_is_a_fetch_failure():
    assert issubclass(DataUnavailable, FetchFailure)
