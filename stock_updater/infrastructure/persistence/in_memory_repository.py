"""
Infrastructure adapter: process-local dict stores for every repository port.
Used for dry runs and tests. A lock guards each dict so concurrent sweeps
can upsert disjoint keys safely.
"""

import threading
from typing import Hashable, Iterable

from stock_updater.domain.entities.stock_details import Stock
from stock_updater.domain.ports.repository_port import (
    IHistoricalPriceRepository,
    IMovingAverageRepository,
    IStockDetailsRepository,
    IStockRepository,
)


class InMemoryUpsertRepository:
    def __init__(self) -> None:
        self._records: dict = {}
        self._lock = threading.Lock()

    def find_by_key(self, key: Hashable):
        with self._lock:
            return self._records.get(key)

    def save(self, record) -> None:
        with self._lock:
            self._records[record.natural_key] = record

    def all(self) -> list:
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryStockDetailsRepository(InMemoryUpsertRepository, IStockDetailsRepository):
    pass


class InMemoryMovingAverageRepository(InMemoryUpsertRepository, IMovingAverageRepository):
    pass


class InMemoryHistoricalPriceRepository(InMemoryUpsertRepository, IHistoricalPriceRepository):
    pass


class InMemoryStockRepository(IStockRepository):
    def __init__(self, stocks: Iterable[Stock] = ()) -> None:
        self._stocks = list(stocks)

    def find_by_options_offered(self, indicator: str) -> list[Stock]:
        return [stock for stock in self._stocks if stock.options_offered == indicator]
