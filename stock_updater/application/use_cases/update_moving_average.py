"""
Use-case: store the most recent moving-average points of one symbol.
Depends only on Domain ports and entities: no infrastructure imports.
"""

import dataclasses
import logging
from typing import Optional

from stock_updater.application.services.series_mapper import (
    DateKeyedSeriesMapper,
    map_moving_averages,
)
from stock_updater.application.use_cases.base import PipelineUseCase
from stock_updater.domain.entities.fetch_config import FetchConfig, PipelineKind
from stock_updater.domain.entities.pipeline_report import PipelineReport
from stock_updater.domain.entities.time_series import (
    MAX_SERIES_LENGTH,
    MovingAveragePoint,
    MovingAverageResponse,
)
from stock_updater.domain.ports.market_data_port import ITimeSeriesProvider
from stock_updater.domain.ports.repository_port import IMovingAverageRepository

logger = logging.getLogger(__name__)


class UpdateMovingAverageUseCase(PipelineUseCase):
    kind = PipelineKind.MOVING_AVERAGE

    def __init__(
        self,
        provider: ITimeSeriesProvider,
        repository: IMovingAverageRepository,
        mapper: Optional[DateKeyedSeriesMapper] = None,
        cap: int = MAX_SERIES_LENGTH,
    ) -> None:
        super().__init__(repository)
        self._provider = provider
        self._mapper = mapper or DateKeyedSeriesMapper()
        self._cap = cap

    def _fetch(self, config: FetchConfig) -> MovingAverageResponse:
        logger.info(
            "Fetching %s(%s, %s) for %s",
            config.function,
            config.interval,
            config.period,
            config.symbol,
        )
        return self._provider.get_moving_average(config)

    def _to_records(
        self, raw: MovingAverageResponse, report: PipelineReport
    ) -> tuple[MovingAveragePoint, ...]:
        # Points are stamped with the requested symbol, not the one echoed in the metadata.
        metadata = dataclasses.replace(raw.metadata, symbol=report.symbol)
        response = dataclasses.replace(raw, metadata=metadata)
        series = map_moving_averages(response, self._mapper, cap=self._cap)
        report.failures.extend(series.failures)
        return series.items
