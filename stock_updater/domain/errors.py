"""
Domain error hierarchy for the fetch-merge-reconcile pipeline.
Infrastructure adapters translate library exceptions (httpx, pydantic,
SQLAlchemy) into these types so the application layer never imports them.
"""


class StockUpdaterError(Exception):
    """Base class for every error raised by stock_updater."""


class FetchFailure(StockUpdaterError):
    """The external call did not complete or returned a malformed top-level structure.

    Fatal to the current (symbol, pipeline) unit.
    """


class DataUnavailable(FetchFailure):
    """One of the two details sources came back absent or incomplete."""


class EntryMappingFailure(StockUpdaterError):
    """A single date-keyed entry could not be turned into a record."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason


class PersistenceFailure(StockUpdaterError):
    """Saving one record to the store failed."""
