"""
Application service: runs the update pipelines across a set of symbols.

Every (symbol, pipeline) pair is an independent unit.  A fatal error in one
unit is turned into a FAILED report and the sweep carries on; nothing raised
by a unit escapes ``sweep``.  Symbols may be processed on a thread pool; the
units share no state besides the repositories.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Sequence

from stock_updater.application.use_cases.base import PipelineUseCase
from stock_updater.domain.entities.fetch_config import ALL_PIPELINES, PipelineKind, SweepProfile
from stock_updater.domain.entities.pipeline_report import PipelineReport, PipelineState, SweepReport
from stock_updater.domain.ports.repository_port import IStockRepository

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    def __init__(
        self,
        details: PipelineUseCase,
        moving_average: PipelineUseCase,
        historical_prices: PipelineUseCase,
        max_workers: int = 1,
    ) -> None:
        self._pipelines = {
            PipelineKind.DETAILS: details,
            PipelineKind.MOVING_AVERAGE: moving_average,
            PipelineKind.HISTORICAL_PRICES: historical_prices,
        }
        self._max_workers = max(1, max_workers)

    def run_unit(self, symbol: str, kind: PipelineKind, profile: SweepProfile) -> PipelineReport:
        """Run one pipeline for one symbol, never raising."""
        use_case = self._pipelines[kind]
        try:
            return use_case.execute(profile.config_for(kind, symbol))
        except Exception as exc:
            logger.exception("%s %s aborted", symbol, kind.value)
            return PipelineReport(
                symbol=symbol,
                kind=kind,
                state=PipelineState.FAILED,
                error=str(exc) or exc.__class__.__name__,
            )

    def run_symbol(
        self,
        symbol: str,
        profile: SweepProfile,
        kinds: Sequence[PipelineKind] = ALL_PIPELINES,
    ) -> list[PipelineReport]:
        return [self.run_unit(symbol, kind, profile) for kind in kinds]

    def sweep(
        self,
        symbols: Iterable[str],
        profile: SweepProfile,
        kinds: Sequence[PipelineKind] = ALL_PIPELINES,
        max_workers: Optional[int] = None,
    ) -> SweepReport:
        """Run *kinds* for every symbol and collect the reports in symbol order."""
        symbols = list(symbols)
        workers = max(1, max_workers or self._max_workers)
        logger.info("Sweeping %d symbol(s) with %d worker(s)", len(symbols), workers)

        if workers == 1 or len(symbols) <= 1:
            per_symbol = [self.run_symbol(symbol, profile, kinds) for symbol in symbols]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                per_symbol = list(
                    pool.map(lambda symbol: self.run_symbol(symbol, profile, kinds), symbols)
                )

        report = SweepReport(reports=[r for reports in per_symbol for r in reports])
        logger.info(
            "Sweep complete: %d unit(s) done, %d failed",
            len(report.succeeded),
            len(report.failed),
        )
        return report

    def sweep_optionable(
        self,
        stock_repository: IStockRepository,
        profile: SweepProfile,
        indicator: str = "Y",
        kinds: Sequence[PipelineKind] = ALL_PIPELINES,
        max_workers: Optional[int] = None,
    ) -> SweepReport:
        """Sweep every stock whose options_offered field equals *indicator*."""
        stocks = stock_repository.find_by_options_offered(indicator)
        return self.sweep([stock.symbol for stock in stocks], profile, kinds, max_workers)
