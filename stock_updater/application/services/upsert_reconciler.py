"""
Application service: writes freshly computed records to an upsert-capable repository.

The repository decides between insert and update from the natural key; the
reconciler always hands it the full candidate, so a later fetch for the same
key replaces the earlier one entirely.  Entries are saved one by one; a
failed save is recorded and the remaining entries are still attempted.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from stock_updater.domain.entities.time_series import EntryFailure
from stock_updater.domain.errors import PersistenceFailure
from stock_updater.domain.ports.repository_port import IUpsertRepository

logger = logging.getLogger(__name__)


class UpsertOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass
class ReconcileSummary:
    created: int = 0
    updated: int = 0
    failures: list[EntryFailure] = field(default_factory=list)

    @property
    def saved(self) -> int:
        return self.created + self.updated


def describe_key(key) -> str:
    if isinstance(key, tuple):
        return "/".join(str(part) for part in key)
    return str(key)


class UpsertReconciler:
    def __init__(self, repository: IUpsertRepository) -> None:
        self._repository = repository

    def reconcile(self, candidate) -> UpsertOutcome:
        """Save *candidate* and report whether its natural key was new.

        Raises:
            PersistenceFailure: propagated from the repository.
        """
        key = candidate.natural_key
        existed = self._repository.find_by_key(key) is not None
        self._repository.save(candidate)
        outcome = UpsertOutcome.UPDATED if existed else UpsertOutcome.CREATED
        logger.debug("Upserted %s (%s)", describe_key(key), outcome.value)
        return outcome

    def reconcile_all(self, candidates: Iterable) -> ReconcileSummary:
        summary = ReconcileSummary()
        for candidate in candidates:
            try:
                outcome = self.reconcile(candidate)
            except PersistenceFailure as exc:
                key = describe_key(candidate.natural_key)
                logger.warning("Could not save %s: %s", key, exc)
                summary.failures.append(EntryFailure(key=key, stage="persistence", reason=str(exc)))
                continue
            except Exception as exc:
                key = describe_key(candidate.natural_key)
                logger.exception("Unexpected error saving %s", key)
                summary.failures.append(EntryFailure(key=key, stage="persistence", reason=repr(exc)))
                continue
            if outcome is UpsertOutcome.CREATED:
                summary.created += 1
            else:
                summary.updated += 1
        return summary
