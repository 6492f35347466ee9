"""
Ports (interfaces) for the persisted store.
Adapters (in-memory, SQLAlchemy) must implement these interfaces.
``save`` is insert-or-update keyed by the record's natural key and raises
PersistenceFailure when the write does not go through.
"""

from abc import ABC, abstractmethod
from typing import Generic, Hashable, Optional, TypeVar

from stock_updater.domain.entities.stock_details import Stock, StockDetails
from stock_updater.domain.entities.time_series import HistoricalPricePoint, MovingAveragePoint

R = TypeVar("R")


class IUpsertRepository(ABC, Generic[R]):
    @abstractmethod
    def find_by_key(self, key: Hashable) -> Optional[R]:
        """Return the stored record for *key*, or None."""
        ...

    @abstractmethod
    def save(self, record: R) -> None:
        """Create the record, or fully overwrite the one with the same natural key."""
        ...


class IStockDetailsRepository(IUpsertRepository[StockDetails]):
    pass


class IMovingAverageRepository(IUpsertRepository[MovingAveragePoint]):
    pass


class IHistoricalPriceRepository(IUpsertRepository[HistoricalPricePoint]):
    pass


class IStockRepository(ABC):
    @abstractmethod
    def find_by_options_offered(self, indicator: str) -> list[Stock]:
        """Return every stock whose options_offered field equals *indicator*."""
        ...
