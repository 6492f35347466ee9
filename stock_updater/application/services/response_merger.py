"""
Application service: overlays the quote view of a stock onto its statistics view.
The quote response owns ``volume`` and ``price``; everything else is taken
from the statistics response unchanged.
"""

import dataclasses
from typing import Optional

from stock_updater.domain.entities.stock_details import StockDetails
from stock_updater.domain.errors import DataUnavailable

OVERLAY_FIELDS = ("volume", "price")


def merge_details(
    primary: Optional[StockDetails],
    overlay: Optional[StockDetails],
) -> StockDetails:
    """Return *primary* with volume and price replaced by the overlay's.

    Both views are assumed to describe the same symbol; this is not checked.

    Raises:
        DataUnavailable: if either view is missing, or the overlay lacks
                         volume or price.
    """
    if primary is None:
        raise DataUnavailable("statistics response is missing")
    if overlay is None:
        raise DataUnavailable(f"quote response for {primary.symbol!r} is missing")

    missing = [name for name in OVERLAY_FIELDS if getattr(overlay, name) is None]
    if missing:
        raise DataUnavailable(
            f"quote response for {primary.symbol!r} lacks {', '.join(missing)}"
        )

    return dataclasses.replace(primary, volume=overlay.volume, price=overlay.price)
