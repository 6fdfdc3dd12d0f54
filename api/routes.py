"""API routes for news-syncer."""

from typing import Any

from fastapi import APIRouter, Query

from db.database import get_session
from db.models import ArticleRow
from db.stores import SyncStateStore, TagStore
from sync.context import SyncContext
from sync.models import SyncState, Tag

router = APIRouter(prefix="/api")


@router.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok", "service": "news-syncer"}


@router.get("/sync-state")
def list_sync_states() -> list[dict[str, Any]]:
    """Progress of every source that has completed at least one cycle."""
    return [_serialize_state(s) for s in SyncStateStore().list_all()]


@router.get("/sync-state/{source_id}")
def get_sync_state(source_id: str) -> dict[str, Any]:
    """Progress of one source; zero values if it has never synced."""
    state = SyncStateStore().get(SyncContext.background(), source_id)
    return _serialize_state(state)


@router.get("/articles/latest")
def get_latest_articles(
    limit: int = Query(default=20, ge=1, le=200),
    source: str | None = Query(default=None),
) -> list[dict[str, Any]]:
    """Get latest articles by publish time, optionally filtered by source."""
    session = get_session()
    try:
        query = session.query(ArticleRow).order_by(ArticleRow.published_at.desc())
        if source:
            query = query.filter(ArticleRow.source_id == source)
        rows = query.limit(limit).all()
    finally:
        session.close()

    tag_store = TagStore()
    return [_serialize(a, tag_store.get_by_article_id(a.id)) for a in rows]


def _serialize_state(state: SyncState) -> dict[str, Any]:
    return {
        "source_id": state.source_id,
        "last_synced_at": state.last_synced_at.isoformat(),
        "last_article_id": state.last_article_id,
        "total_synced": state.total_synced,
    }


def _serialize(a: ArticleRow, tags: list[Tag]) -> dict[str, Any]:
    return {
        "id": a.id,
        "source_id": a.source_id,
        "external_id": a.external_id,
        "title": a.title,
        "description": a.description,
        "summary": a.summary,
        "author": a.author,
        "canonical_url": a.canonical_url,
        "image_url": a.image_url,
        "published_at": a.published_at.isoformat() if a.published_at else None,
        "last_modified": a.last_modified.isoformat() if a.last_modified else None,
        "duration": a.duration,
        "tags": [t.to_dict() for t in tags],
    }
