"""Fixed-interval scheduler that runs one bounded sync cycle per tick."""

import logging
from typing import Protocol

from sync.context import SyncContext
from sync.errors import ProgressUpdateError, SyncError
from sync.models import SyncConfig, SyncStats

logger = logging.getLogger(__name__)


class Syncer(Protocol):
    def sync(self, ctx: SyncContext) -> SyncStats: ...


class Scheduler:
    """Serializes sync cycles: the next tick waits for the previous cycle."""

    def __init__(self, syncer: Syncer, sync_config: SyncConfig) -> None:
        self.syncer = syncer
        self.config = sync_config
        self._ctx = SyncContext.background()

    def start(self) -> None:
        """Run a cycle now and then every ``interval`` seconds until stopped."""
        logger.info(
            "Scheduler started (interval=%.0fs, timeout=%.0fs)",
            self.config.interval,
            self.config.timeout,
        )
        self.run_once()
        while not self._ctx.wait(self.config.interval):
            self.run_once()
        logger.info("Scheduler stopped")

    def stop(self) -> None:
        """Stop the loop and cancel the in-flight cycle, if any."""
        self._ctx.cancel()

    @property
    def stopped(self) -> bool:
        return self._ctx.cancelled

    def run_once(self) -> SyncStats | None:
        """Run one cycle bounded by ``timeout``. Errors are logged, not raised."""
        cycle_ctx = self._ctx.child(timeout=self.config.timeout)
        try:
            return self.syncer.sync(cycle_ctx)
        except ProgressUpdateError as e:
            logger.error("Sync finished but progress was not saved: %s", e)
            return e.stats
        except SyncError as e:
            logger.error("Sync failed: %s", e)
            return None
