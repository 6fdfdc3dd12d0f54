"""Sync orchestrator: one fetch-filter-persist-publish cycle per call."""

import logging
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from sync.context import SyncContext
from sync.errors import FetchError, FilterError, ProgressUpdateError
from sync.interfaces import (
    ChangePublisher,
    ContentSource,
    ProgressTracker,
    RecordStore,
    TagStore,
    UnitOfWork,
)
from sync.models import Article, SyncConfig, SyncStats, as_utc

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncService:
    """Synchronizes a single content source into the stores.

    The publisher is optional; without one records are persisted but no
    change notifications are emitted.
    """

    def __init__(
        self,
        source: ContentSource,
        articles: RecordStore,
        tags: TagStore,
        sync_state: ProgressTracker,
        unit_of_work: UnitOfWork,
        publisher: ChangePublisher | None,
        sync_config: SyncConfig,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.source = source
        self.articles = articles
        self.tags = tags
        self.sync_state = sync_state
        self.unit_of_work = unit_of_work
        self.publisher = publisher
        self.config = sync_config
        self._clock = clock

    @property
    def source_id(self) -> str:
        return self.source.source_id

    def sync(self, ctx: SyncContext) -> SyncStats:
        """Run one cycle and return its statistics.

        Raises FetchError or FilterError before anything is written, and
        ProgressUpdateError (carrying the stats) if only the final state
        update failed. Per-article failures are counted, never raised.
        """
        started = time.monotonic()
        logger.info(
            "[%s] Starting sync of %s (max_pages=%d, max_historical_days=%d)",
            self.source_id,
            self.source.name,
            self.config.max_pages_per_sync,
            self.config.max_historical_days,
        )

        try:
            fetched = self.source.fetch(ctx, self.config.max_pages_per_sync)
        except Exception as e:
            raise FetchError(f"fetch articles: {e}") from e
        logger.info("[%s] Fetched %d articles from source", self.source_id, len(fetched))

        cutoff = self._clock() - timedelta(days=self.config.max_historical_days)
        candidates = self.filter_by_date(fetched, cutoff)
        logger.debug("[%s] %d articles remain after date filter", self.source_id, len(candidates))

        try:
            to_sync = self.filter_for_sync(ctx, candidates)
        except Exception as e:
            raise FilterError(f"filter for sync: {e}") from e
        logger.info("[%s] %d articles to sync", self.source_id, len(to_sync))

        stats = SyncStats(
            source_id=self.source_id,
            fetched=len(candidates),
            skipped=len(candidates) - len(to_sync),
        )

        last_article_id = None
        for article in to_sync:
            try:
                is_new, article_id = self._save_article(ctx, article)
            except Exception:
                logger.exception(
                    "[%s] Error saving article %s", self.source_id, article.external_id
                )
                stats.errors += 1
                continue
            if article_id is not None:
                last_article_id = article_id

            if self.publisher is not None:
                try:
                    self.publisher.publish(ctx, article, is_new)
                except Exception:
                    logger.exception(
                        "[%s] Error publishing article %s", self.source_id, article.external_id
                    )
                    stats.errors += 1
                else:
                    stats.published += 1

            if is_new:
                stats.new += 1
            else:
                stats.updated += 1

        try:
            self._update_sync_state(ctx, stats, last_article_id)
        except Exception as e:
            stats.duration = timedelta(seconds=time.monotonic() - started)
            raise ProgressUpdateError(f"update sync state: {e}", stats) from e

        stats.duration = timedelta(seconds=time.monotonic() - started)
        logger.info(
            "[%s] Sync completed: new=%d updated=%d skipped=%d errors=%d published=%d in %.2fs",
            self.source_id,
            stats.new,
            stats.updated,
            stats.skipped,
            stats.errors,
            stats.published,
            stats.duration.total_seconds(),
        )
        return stats

    @staticmethod
    def filter_by_date(articles: list[Article], cutoff: datetime) -> list[Article]:
        """Keep articles published strictly after ``cutoff``."""
        cutoff = as_utc(cutoff)
        return [a for a in articles if as_utc(a.published_at) > cutoff]

    def filter_for_sync(self, ctx: SyncContext, articles: list[Article]) -> list[Article]:
        """Keep articles that are unknown or strictly newer than the stored copy.

        An external id seen more than once in the batch is reduced to its
        newest copy, in first-seen position, so each id is upserted at most once.
        """
        if not articles:
            return []

        latest = self.dedupe(articles)
        if len(latest) < len(articles):
            logger.debug(
                "[%s] Dropped %d duplicate articles from batch",
                self.source_id,
                len(articles) - len(latest),
            )

        existing = self.articles.get_existing_last_modified(
            ctx, self.source_id, [a.external_id for a in latest]
        )

        to_sync: list[Article] = []
        for article in latest:
            stored = existing.get(article.external_id)
            if stored is None or as_utc(article.last_modified) > as_utc(stored):
                to_sync.append(article)
        return to_sync

    @staticmethod
    def dedupe(articles: list[Article]) -> list[Article]:
        """One article per external id: the greatest last_modified, first one on ties."""
        by_id: dict[int, Article] = {}
        for article in articles:
            kept = by_id.get(article.external_id)
            if kept is None or as_utc(article.last_modified) > as_utc(kept.last_modified):
                by_id[article.external_id] = article
        return list(by_id.values())

    def _save_article(self, ctx: SyncContext, article: Article) -> tuple[bool, int | None]:
        """Persist one article atomically. Returns (is_new, stored id)."""
        # Second, per-article lookup decides create vs update
        existing = self.articles.get_existing_last_modified(
            ctx, self.source_id, [article.external_id]
        )
        is_new = len(existing) == 0
        result: dict[str, int | None] = {"id": None}

        def work(session) -> None:
            article_id = self.articles.upsert(ctx, article, session=session)
            result["id"] = article_id
            if article_id is None or not article.tags:
                return
            self.tags.upsert_batch(ctx, article.tags, session=session)
            self.tags.link_to_article(ctx, article_id, article.tag_ids(), session=session)

        self.unit_of_work.run(ctx, work)
        return is_new, result["id"]

    def _update_sync_state(
        self,
        ctx: SyncContext,
        stats: SyncStats,
        last_article_id: int | None,
    ) -> None:
        state = self.sync_state.get(ctx, self.source_id)
        state.source_id = self.source_id
        state.last_synced_at = self._clock()
        state.total_synced += stats.new + stats.updated
        if last_article_id is not None:
            state.last_article_id = last_article_id
        self.sync_state.update(ctx, state)
