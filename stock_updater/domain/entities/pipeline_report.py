"""
Outcome of one (symbol, pipeline) run and of a whole sweep.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from stock_updater.domain.entities.fetch_config import PipelineKind
from stock_updater.domain.entities.time_series import EntryFailure


class PipelineState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    MAPPING = "mapping"
    RECONCILING = "reconciling"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineReport:
    symbol: str
    kind: PipelineKind
    state: PipelineState = PipelineState.IDLE
    produced: int = 0
    created: int = 0
    updated: int = 0
    failures: list[EntryFailure] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def saved(self) -> int:
        return self.created + self.updated

    @property
    def skipped(self) -> int:
        return len(self.failures)

    @property
    def partial(self) -> bool:
        """True when the run finished but some entries were skipped."""
        return self.state is PipelineState.DONE and bool(self.failures)

    def as_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "kind": self.kind.value,
            "state": self.state.value,
            "produced": self.produced,
            "saved": self.saved,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failures": [
                {"key": f.key, "stage": f.stage, "reason": f.reason} for f in self.failures
            ],
            "error": self.error,
        }


@dataclass
class SweepReport:
    reports: list[PipelineReport] = field(default_factory=list)

    @property
    def failed(self) -> list[PipelineReport]:
        return [r for r in self.reports if r.state is PipelineState.FAILED]

    @property
    def succeeded(self) -> list[PipelineReport]:
        return [r for r in self.reports if r.state is PipelineState.DONE]

    def for_symbol(self, symbol: str) -> list[PipelineReport]:
        return [r for r in self.reports if r.symbol == symbol]
