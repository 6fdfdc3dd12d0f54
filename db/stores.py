"""SQLAlchemy implementations of the sync stores and unit of work.

Write methods take an explicit ``session``. Inside a unit of work that is the
session handed to the callback; otherwise the store opens, commits and closes
a session of its own.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session, sessionmaker

from db.database import get_session_factory
from db.models import ArticleRow, SyncStateRow, TagRow, article_tags
from sync import interfaces
from sync.context import SyncContext
from sync.models import EPOCH, Article, SyncState, Tag, as_utc

logger = logging.getLogger(__name__)


class _SessionStore:
    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory

    def _new_session(self) -> Session:
        factory = self._session_factory or get_session_factory()
        return factory()

    @contextmanager
    def _scope(self, session: Session | None) -> Iterator[Session]:
        if session is not None:
            yield session
            return
        own = self._new_session()
        try:
            yield own
            own.commit()
        except Exception:
            own.rollback()
            raise
        finally:
            own.close()


class ArticleStore(_SessionStore, interfaces.RecordStore):
    """Articles keyed by (source_id, external_id) with last-modified wins."""

    def upsert(
        self, ctx: SyncContext, article: Article, session: Session | None = None
    ) -> int | None:
        ctx.check()
        incoming = as_utc(article.last_modified)
        fields = {
            "title": article.title,
            "description": article.description,
            "summary": article.summary,
            "body": article.body,
            "author": article.author,
            "canonical_url": article.canonical_url,
            "image_url": article.image_url,
            "last_modified": incoming,
            "duration": article.duration,
        }

        with self._scope(session) as s:
            row = s.execute(
                select(ArticleRow).where(
                    ArticleRow.source_id == article.source_id,
                    ArticleRow.external_id == article.external_id,
                )
            ).scalar_one_or_none()

            if row is None:
                row = ArticleRow(
                    source_id=article.source_id,
                    external_id=article.external_id,
                    published_at=as_utc(article.published_at),
                    **fields,
                )
                s.add(row)
                s.flush()
                return row.id

            if incoming <= as_utc(row.last_modified):
                logger.debug(
                    "[%s] Stored article %s is newer or equal, not overwritten",
                    article.source_id,
                    article.external_id,
                )
                return None

            for name, value in fields.items():
                setattr(row, name, value)
            s.flush()
            return row.id

    def get_existing_last_modified(
        self,
        ctx: SyncContext,
        source_id: str,
        external_ids: Iterable[int],
    ) -> dict[int, datetime]:
        ctx.check()
        ids = list(dict.fromkeys(external_ids))
        if not ids:
            return {}

        with self._scope(None) as s:
            rows = s.execute(
                select(ArticleRow.external_id, ArticleRow.last_modified).where(
                    ArticleRow.source_id == source_id,
                    ArticleRow.external_id.in_(ids),
                )
            ).all()
        return {ext_id: as_utc(last_mod) for ext_id, last_mod in rows}


class TagStore(_SessionStore, interfaces.TagStore):
    """Shared tag vocabulary and article-tag links."""

    def upsert_batch(
        self, ctx: SyncContext, tags: list[Tag], session: Session | None = None
    ) -> None:
        ctx.check()
        labels = {tag.id: tag.label for tag in tags}  # last label per id wins
        if not labels:
            return

        with self._scope(session) as s:
            existing = {
                row.id: row
                for row in s.scalars(select(TagRow).where(TagRow.id.in_(list(labels))))
            }
            for tag_id, label in labels.items():
                row = existing.get(tag_id)
                if row is None:
                    s.add(TagRow(id=tag_id, label=label))
                elif row.label != label:
                    row.label = label
            s.flush()

    def link_to_article(
        self,
        ctx: SyncContext,
        article_id: int,
        tag_ids: list[int],
        session: Session | None = None,
    ) -> None:
        ctx.check()
        with self._scope(session) as s:
            s.execute(delete(article_tags).where(article_tags.c.article_id == article_id))
            unique_ids = list(dict.fromkeys(tag_ids))
            if unique_ids:
                s.execute(
                    insert(article_tags),
                    [{"article_id": article_id, "tag_id": tag_id} for tag_id in unique_ids],
                )

    def get_by_article_id(self, article_id: int) -> list[Tag]:
        with self._scope(None) as s:
            rows = s.execute(
                select(TagRow.id, TagRow.label)
                .join(article_tags, article_tags.c.tag_id == TagRow.id)
                .where(article_tags.c.article_id == article_id)
                .order_by(TagRow.id)
            ).all()
        return [Tag(id=tag_id, label=label) for tag_id, label in rows]


class SyncStateStore(_SessionStore, interfaces.ProgressTracker):
    """One progress row per source, created on first update."""

    def get(self, ctx: SyncContext, source_id: str) -> SyncState:
        ctx.check()
        with self._scope(None) as s:
            row = s.execute(
                select(SyncStateRow).where(SyncStateRow.source_id == source_id)
            ).scalar_one_or_none()
            if row is None:
                return SyncState(source_id=source_id)
            return _state_from_row(row)

    def update(self, ctx: SyncContext, state: SyncState) -> None:
        ctx.check()
        with self._scope(None) as s:
            row = s.execute(
                select(SyncStateRow).where(SyncStateRow.source_id == state.source_id)
            ).scalar_one_or_none()
            if row is None:
                row = SyncStateRow(source_id=state.source_id)
                s.add(row)
            row.last_synced_at = as_utc(state.last_synced_at)
            row.last_article_id = state.last_article_id
            row.total_synced = state.total_synced

    def list_all(self) -> list[SyncState]:
        with self._scope(None) as s:
            rows = s.scalars(select(SyncStateRow).order_by(SyncStateRow.source_id)).all()
            return [_state_from_row(row) for row in rows]


def _state_from_row(row: SyncStateRow) -> SyncState:
    return SyncState(
        source_id=row.source_id,
        last_synced_at=as_utc(row.last_synced_at) if row.last_synced_at else EPOCH,
        last_article_id=row.last_article_id or 0,
        total_synced=row.total_synced or 0,
    )


class SqlAlchemyUnitOfWork(interfaces.UnitOfWork):
    """Runs a callback inside one database transaction."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory

    def run(self, ctx: SyncContext, work: Callable[[Session], None]) -> None:
        ctx.check()
        factory = self._session_factory or get_session_factory()
        session = factory()
        try:
            work(session)
            ctx.check()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
