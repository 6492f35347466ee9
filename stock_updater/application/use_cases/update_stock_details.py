"""
Use-case: refresh the StockDetails row of one symbol.
Two provider calls (statistics, quote) are merged into one record before the upsert.
Depends only on Domain ports and entities: no infrastructure imports.
"""

import dataclasses
import logging
from datetime import datetime
from typing import Callable, Optional

from stock_updater.application.services.response_merger import merge_details
from stock_updater.application.services.series_mapper import utc_now
from stock_updater.application.use_cases.base import PipelineUseCase
from stock_updater.domain.entities.fetch_config import FetchConfig, PipelineKind
from stock_updater.domain.entities.pipeline_report import PipelineReport
from stock_updater.domain.entities.stock_details import StockDetails
from stock_updater.domain.ports.market_data_port import IStockDetailsProvider
from stock_updater.domain.ports.repository_port import IStockDetailsRepository

logger = logging.getLogger(__name__)


class UpdateStockDetailsUseCase(PipelineUseCase):
    kind = PipelineKind.DETAILS

    def __init__(
        self,
        provider: IStockDetailsProvider,
        repository: IStockDetailsRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        super().__init__(repository)
        self._provider = provider
        self._clock = clock or utc_now

    def _fetch(self, config: FetchConfig) -> StockDetails:
        """Fetch both views and merge them; an absent view fails the whole run."""
        logger.info("Fetching key statistics for %s", config.symbol)
        key_stats = self._provider.get_key_stats(config.symbol)
        logger.info("Fetching quote for %s", config.symbol)
        quote = self._provider.get_quote(config.symbol)
        return merge_details(key_stats, quote)

    def _to_records(self, raw: StockDetails, report: PipelineReport) -> list[StockDetails]:
        return [dataclasses.replace(raw, symbol=report.symbol, last_updated=self._clock())]
