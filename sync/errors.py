"""Errors surfaced by a sync cycle."""

from sync.models import SyncStats


class SyncError(Exception):
    """Base class for errors returned to the caller of ``SyncService.sync``."""


class FetchError(SyncError):
    """The content source failed. Nothing was persisted."""


class FilterError(SyncError):
    """The batch existence query failed. Nothing was persisted."""


class ProgressUpdateError(SyncError):
    """Records were processed but the sync state could not be saved."""

    def __init__(self, message: str, stats: SyncStats) -> None:
        super().__init__(message)
        self.stats = stats


class SyncCancelled(Exception):
    """Raised by ``SyncContext.check`` once the context is cancelled or expired."""
