"""
SQLAlchemy ORM models for the persisted store.
Each table's primary key is the natural key of its domain entity, so
``Session.merge`` gives insert-or-update semantics.
"""

import datetime as dt
from typing import Optional

from sqlalchemy import BigInteger, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class StockRow(Base):
    __tablename__ = "stock"

    symbol: Mapped[str] = mapped_column(String(16), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    options_offered: Mapped[str] = mapped_column(String(1), default="N", index=True)


class StockDetailsRow(Base):
    __tablename__ = "stock_details"

    symbol: Mapped[str] = mapped_column(String(16), ForeignKey("stock.symbol"), primary_key=True)
    company_name: Mapped[Optional[str]] = mapped_column(String(255))
    market_cap: Mapped[Optional[float]] = mapped_column(Float)
    beta: Mapped[Optional[float]] = mapped_column(Float)
    week52_high: Mapped[Optional[float]] = mapped_column(Float)
    week52_low: Mapped[Optional[float]] = mapped_column(Float)
    pe_ratio: Mapped[Optional[float]] = mapped_column(Float)
    dividend_yield: Mapped[Optional[float]] = mapped_column(Float)
    eps: Mapped[Optional[float]] = mapped_column(Float)
    volume: Mapped[Optional[int]] = mapped_column(BigInteger)
    price: Mapped[Optional[float]] = mapped_column(Float)
    last_updated: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))


class MovingAverageRow(Base):
    __tablename__ = "moving_average"

    symbol: Mapped[str] = mapped_column(String(16), primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)
    interval: Mapped[str] = mapped_column(String(16), primary_key=True)
    time_period: Mapped[int] = mapped_column(Integer, primary_key=True)
    average_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    last_updated: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class HistoricalPriceRow(Base):
    __tablename__ = "historical_price"

    symbol: Mapped[str] = mapped_column(String(16), primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)
    closing_price: Mapped[float] = mapped_column(Float, nullable=False)
    last_updated: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
