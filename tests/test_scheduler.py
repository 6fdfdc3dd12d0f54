"""Tests for the sync scheduler and cancellation context."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from sync.context import SyncContext
from sync.errors import FetchError, ProgressUpdateError, SyncCancelled
from sync.models import SyncConfig, SyncStats
from sync.scheduler import Scheduler


def test_context_check_after_cancel():
    ctx = SyncContext.background()
    ctx.check()

    ctx.cancel()

    assert ctx.cancelled
    with pytest.raises(SyncCancelled, match="cancelled"):
        ctx.check()


def test_context_deadline():
    ctx = SyncContext.with_timeout(0.01)
    time.sleep(0.02)

    assert ctx.remaining() == 0.0
    with pytest.raises(SyncCancelled, match="deadline"):
        ctx.check()


def test_child_cancelled_with_parent():
    parent = SyncContext.background()
    child = parent.child(timeout=60)

    parent.cancel()

    assert child.cancelled
    with pytest.raises(SyncCancelled):
        child.check()


def test_child_keeps_tighter_deadline():
    parent = SyncContext.with_timeout(1)
    child = parent.child(timeout=60)

    assert child.deadline == parent.deadline
    assert SyncContext.background().child().remaining() is None


def test_wait_returns_early_on_cancel():
    ctx = SyncContext.background()
    threading.Timer(0.05, ctx.cancel).start()

    started = time.monotonic()
    assert ctx.wait(5) is True
    assert time.monotonic() - started < 2


def test_wait_full_duration():
    assert SyncContext.background().wait(0.01) is False


@pytest.fixture
def sync_config():
    return SyncConfig(interval=0.01, timeout=5, max_pages_per_sync=1, max_historical_days=1)


def test_run_once_passes_bounded_context(sync_config):
    syncer = MagicMock()
    syncer.sync.return_value = SyncStats(source_id="s", new=1)

    stats = Scheduler(syncer, sync_config).run_once()

    assert stats.new == 1
    ctx = syncer.sync.call_args.args[0]
    assert 0 < ctx.remaining() <= 5


def test_run_once_logs_sync_errors(sync_config):
    syncer = MagicMock()
    syncer.sync.side_effect = FetchError("fetch articles: api error")

    assert Scheduler(syncer, sync_config).run_once() is None


def test_run_once_returns_stats_of_partial_success(sync_config):
    syncer = MagicMock()
    stats = SyncStats(source_id="s", updated=2)
    syncer.sync.side_effect = ProgressUpdateError("update sync state: db down", stats)

    assert Scheduler(syncer, sync_config).run_once() is stats


def test_start_runs_until_stopped(sync_config):
    syncer = MagicMock()
    scheduler = Scheduler(syncer, sync_config)

    def sync(ctx):
        if syncer.sync.call_count >= 3:
            scheduler.stop()
        return SyncStats(source_id="s")

    syncer.sync.side_effect = sync

    scheduler.start()

    assert syncer.sync.call_count == 3
    assert scheduler.stopped


def test_stop_cancels_in_flight_cycle(sync_config):
    syncer = MagicMock()
    scheduler = Scheduler(syncer, sync_config)
    seen = {}

    def sync(ctx):
        scheduler.stop()
        seen["cancelled"] = ctx.cancelled
        return SyncStats(source_id="s")

    syncer.sync.side_effect = sync

    scheduler.start()

    assert seen["cancelled"] is True
    assert syncer.sync.call_count == 1
