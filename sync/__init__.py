from sync.context import SyncContext
from sync.errors import FetchError, FilterError, ProgressUpdateError, SyncCancelled, SyncError
from sync.models import Article, SyncConfig, SyncState, SyncStats, Tag
from sync.scheduler import Scheduler
from sync.service import SyncService

__all__ = [
    "Article",
    "FetchError",
    "FilterError",
    "ProgressUpdateError",
    "Scheduler",
    "SyncCancelled",
    "SyncConfig",
    "SyncContext",
    "SyncError",
    "SyncService",
    "SyncState",
    "SyncStats",
    "Tag",
]
