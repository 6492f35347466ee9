"""
Infrastructure adapter: SQLAlchemy -> repository ports.

Rows are converted to and from the frozen domain entities here so the rest of
the codebase never imports sqlalchemy.  Every call uses its own short-lived
session, which keeps concurrent upserts on disjoint keys independent.
SQLAlchemyError is translated into PersistenceFailure.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Hashable, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from stock_updater.domain.entities.stock_details import Stock, StockDetails
from stock_updater.domain.entities.time_series import HistoricalPricePoint, MovingAveragePoint
from stock_updater.domain.errors import PersistenceFailure
from stock_updater.domain.ports.repository_port import (
    IHistoricalPriceRepository,
    IMovingAverageRepository,
    IStockDetailsRepository,
    IStockRepository,
)
from stock_updater.infrastructure.persistence.sqlalchemy_models import (
    Base,
    HistoricalPriceRow,
    MovingAverageRow,
    StockDetailsRow,
    StockRow,
)

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def create_session_factory(database_url: str, create_tables: bool = True) -> sessionmaker:
    """Build a sessionmaker for *database_url*, creating the tables if asked.

    In-memory SQLite URLs share one connection so every session sees the same data.
    """
    engine_kwargs = {}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs = {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    engine = create_engine(database_url, **engine_kwargs)
    if create_tables:
        Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; stored values are always UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAlchemyUpsertRepository:
    """Generic get-by-primary-key / merge repository; subclasses supply the row mapping."""

    model: type

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def _to_row(self, record):
        raise NotImplementedError

    def _to_entity(self, row):
        raise NotImplementedError

    def find_by_key(self, key: Hashable):
        try:
            with self._session_factory() as session:
                row = session.get(self.model, key)
                return self._to_entity(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"lookup of {key!r} in {self.model.__tablename__} failed: {exc}") from exc

    def save(self, record) -> None:
        try:
            with self._session_factory() as session:
                session.merge(self._to_row(record))
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(
                f"save of {record.natural_key!r} to {self.model.__tablename__} failed: {exc}"
            ) from exc


class SqlAlchemyStockDetailsRepository(SqlAlchemyUpsertRepository, IStockDetailsRepository):
    model = StockDetailsRow

    def _to_row(self, record: StockDetails) -> StockDetailsRow:
        return StockDetailsRow(
            symbol=record.symbol,
            company_name=record.company_name,
            market_cap=record.market_cap,
            beta=record.beta,
            week52_high=record.week52_high,
            week52_low=record.week52_low,
            pe_ratio=record.pe_ratio,
            dividend_yield=record.dividend_yield,
            eps=record.eps,
            volume=record.volume,
            price=record.price,
            last_updated=record.last_updated,
        )

    def _to_entity(self, row: StockDetailsRow) -> StockDetails:
        return StockDetails(
            symbol=row.symbol,
            company_name=row.company_name,
            market_cap=row.market_cap,
            beta=row.beta,
            week52_high=row.week52_high,
            week52_low=row.week52_low,
            pe_ratio=row.pe_ratio,
            dividend_yield=row.dividend_yield,
            eps=row.eps,
            volume=row.volume,
            price=row.price,
            last_updated=as_utc(row.last_updated),
        )


class SqlAlchemyMovingAverageRepository(SqlAlchemyUpsertRepository, IMovingAverageRepository):
    model = MovingAverageRow

    def _to_row(self, record: MovingAveragePoint) -> MovingAverageRow:
        return MovingAverageRow(
            symbol=record.symbol,
            date=record.date,
            interval=record.interval,
            time_period=record.time_period,
            average_type=record.average_type,
            value=record.value,
            last_updated=record.last_updated,
        )

    def _to_entity(self, row: MovingAverageRow) -> MovingAveragePoint:
        return MovingAveragePoint(
            symbol=row.symbol,
            average_type=row.average_type,
            interval=row.interval,
            time_period=row.time_period,
            date=row.date,
            value=row.value,
            last_updated=as_utc(row.last_updated),
        )


class SqlAlchemyHistoricalPriceRepository(SqlAlchemyUpsertRepository, IHistoricalPriceRepository):
    model = HistoricalPriceRow

    def _to_row(self, record: HistoricalPricePoint) -> HistoricalPriceRow:
        return HistoricalPriceRow(
            symbol=record.symbol,
            date=record.date,
            closing_price=record.closing_price,
            last_updated=record.last_updated,
        )

    def _to_entity(self, row: HistoricalPriceRow) -> HistoricalPricePoint:
        return HistoricalPricePoint(
            symbol=row.symbol,
            date=row.date,
            closing_price=row.closing_price,
            last_updated=as_utc(row.last_updated),
        )


class SqlAlchemyStockRepository(IStockRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def find_by_options_offered(self, indicator: str) -> list[Stock]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(
                    select(StockRow)
                    .where(StockRow.options_offered == indicator)
                    .order_by(StockRow.symbol)
                ).all()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"stock lookup failed: {exc}") from exc
        return [Stock(symbol=r.symbol, name=r.name, options_offered=r.options_offered) for r in rows]

    def add(self, stock: Stock) -> None:
        """Register a stock (used to seed the reference table)."""
        try:
            with self._session_factory() as session:
                session.merge(
                    StockRow(symbol=stock.symbol, name=stock.name, options_offered=stock.options_offered)
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"save of stock {stock.symbol!r} failed: {exc}") from exc
