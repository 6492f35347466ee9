"""
Use-case: store the most recent daily closing prices of one symbol.
Depends only on Domain ports and entities: no infrastructure imports.
"""

import logging
from typing import Optional

from stock_updater.application.services.series_mapper import (
    DateKeyedSeriesMapper,
    map_historical_prices,
)
from stock_updater.application.use_cases.base import PipelineUseCase
from stock_updater.domain.entities.fetch_config import FetchConfig, PipelineKind
from stock_updater.domain.entities.pipeline_report import PipelineReport
from stock_updater.domain.entities.time_series import (
    MAX_SERIES_LENGTH,
    DailyPriceResponse,
    HistoricalPricePoint,
)
from stock_updater.domain.ports.market_data_port import ITimeSeriesProvider
from stock_updater.domain.ports.repository_port import IHistoricalPriceRepository

logger = logging.getLogger(__name__)


class UpdateHistoricalPricesUseCase(PipelineUseCase):
    kind = PipelineKind.HISTORICAL_PRICES

    def __init__(
        self,
        provider: ITimeSeriesProvider,
        repository: IHistoricalPriceRepository,
        mapper: Optional[DateKeyedSeriesMapper] = None,
        cap: int = MAX_SERIES_LENGTH,
    ) -> None:
        super().__init__(repository)
        self._provider = provider
        self._mapper = mapper or DateKeyedSeriesMapper()
        self._cap = cap

    def _fetch(self, config: FetchConfig) -> DailyPriceResponse:
        logger.info("Fetching %s for %s", config.function, config.symbol)
        return self._provider.get_daily_prices(config)

    def _to_records(
        self, raw: DailyPriceResponse, report: PipelineReport
    ) -> tuple[HistoricalPricePoint, ...]:
        # Points are stamped with the requested symbol, not the one echoed in the metadata.
        response = DailyPriceResponse(symbol=report.symbol, series=raw.series)
        series = map_historical_prices(response, self._mapper, cap=self._cap)
        report.failures.extend(series.failures)
        return series.items
