"""
Domain entities for per-symbol stock reference data and key statistics.
Zero external dependencies: pure Python dataclasses only.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Stock:
    symbol: str
    name: Optional[str] = None
    options_offered: str = "N"


@dataclass(frozen=True)
class StockDetails:
    """Key statistics for one symbol.

    ``volume`` and ``price`` are owned by the quote response; every other
    field comes from the statistics response.
    """

    symbol: str
    company_name: Optional[str] = None
    market_cap: Optional[float] = None
    beta: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    pe_ratio: Optional[float] = None
    dividend_yield: Optional[float] = None
    eps: Optional[float] = None
    volume: Optional[int] = None
    price: Optional[float] = None
    last_updated: Optional[datetime] = None

    @property
    def natural_key(self) -> str:
        return self.symbol
