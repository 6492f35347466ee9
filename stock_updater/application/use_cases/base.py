"""
Shared fetch -> map -> reconcile sequence for the three update pipelines.
Depends only on Domain ports and entities: no infrastructure imports.

State machine per (symbol, pipeline) run:

    IDLE -> FETCHING -> MAPPING -> RECONCILING -> DONE
               |
               +-> FAILED   (FetchFailure / DataUnavailable)

Per-entry errors during MAPPING or RECONCILING are counted in the report and
never move the run to FAILED.
"""

import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

from stock_updater.application.services.upsert_reconciler import UpsertReconciler
from stock_updater.domain.entities.fetch_config import FetchConfig, PipelineKind
from stock_updater.domain.entities.pipeline_report import PipelineReport, PipelineState
from stock_updater.domain.errors import FetchFailure
from stock_updater.domain.ports.repository_port import IUpsertRepository

logger = logging.getLogger(__name__)


class PipelineUseCase(ABC):
    kind: PipelineKind

    def __init__(self, repository: IUpsertRepository) -> None:
        self._reconciler = UpsertReconciler(repository)

    @abstractmethod
    def _fetch(self, config: FetchConfig) -> Any:
        """Issue the external call(s); raise FetchFailure on a fatal problem."""
        ...

    @abstractmethod
    def _to_records(self, raw: Any, report: PipelineReport) -> Sequence:
        """Turn the raw payload into canonical records, appending skipped entries to *report*."""
        ...

    def execute(self, config: FetchConfig) -> PipelineReport:
        """Run the pipeline for ``config.symbol``.

        The symbol is upper-cased and stripped once here; the report and every
        record the pipeline produces carry that normalized value.

        Raises:
            ValueError: if the symbol is blank.
        """
        if not config.symbol or not config.symbol.strip():
            raise ValueError("symbol must be a non-empty string")

        symbol = config.symbol.upper().strip()
        config = dataclasses.replace(config, symbol=symbol)
        report = PipelineReport(symbol=symbol, kind=self.kind)

        self._advance(report, PipelineState.FETCHING)
        try:
            raw = self._fetch(config)
        except FetchFailure as exc:
            report.error = str(exc)
            self._advance(report, PipelineState.FAILED)
            logger.error("%s %s fetch failed: %s", symbol, self.kind.value, exc)
            return report

        self._advance(report, PipelineState.MAPPING)
        records = self._to_records(raw, report)
        report.produced = len(records)

        self._advance(report, PipelineState.RECONCILING)
        summary = self._reconciler.reconcile_all(records)
        report.created = summary.created
        report.updated = summary.updated
        report.failures.extend(summary.failures)

        self._advance(report, PipelineState.DONE)
        logger.info(
            "%s %s: %d saved (%d new), %d skipped",
            symbol,
            self.kind.value,
            report.saved,
            report.created,
            report.skipped,
        )
        return report

    @staticmethod
    def _advance(report: PipelineReport, state: PipelineState) -> None:
        logger.debug("%s %s: %s -> %s", report.symbol, report.kind.value, report.state.value, state.value)
        report.state = state
