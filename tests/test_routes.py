"""Tests for the status API endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from db.database import init_db
from db.stores import ArticleStore, SyncStateStore, TagStore
from main import app
from sync.context import SyncContext
from sync.models import Article, SyncState, Tag


@pytest.fixture(autouse=True)
def setup_db(tmp_path, monkeypatch):
    """Use a temporary database for each test."""
    monkeypatch.setattr("config.DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")

    # Reset engine/session so they use the new URL
    import db.database as db_mod
    db_mod._engine = None
    db_mod._SessionFactory = None

    init_db()

    # Seed test data
    ctx = SyncContext.background()
    now = datetime.now(timezone.utc)
    articles = ArticleStore()
    tags = TagStore()
    for ext_id, source, hours in [(1, "ecb", 3), (2, "ecb", 1), (3, "other", 2)]:
        article_id = articles.upsert(ctx, Article(
            source_id=source,
            external_id=ext_id,
            title=f"Article {ext_id}",
            canonical_url=f"https://example.com/{ext_id}",
            published_at=now - timedelta(hours=hours),
            last_modified=now - timedelta(hours=hours),
        ))
        if ext_id == 2:
            tags.upsert_batch(ctx, [Tag(5, "ashes"), Tag(4, "england")])
            tags.link_to_article(ctx, article_id, [5, 4])
    SyncStateStore().update(ctx, SyncState("ecb", last_synced_at=now, last_article_id=2, total_synced=2))

    yield

    db_mod.dispose_engine()


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_list_sync_states(client):
    data = client.get("/api/sync-state").json()
    assert len(data) == 1
    assert data[0]["source_id"] == "ecb"
    assert data[0]["total_synced"] == 2


def test_sync_state_unknown_source_is_zero(client):
    resp = client.get("/api/sync-state/unknown")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_synced"] == 0
    assert data["last_synced_at"].startswith("1970-01-01")


def test_latest_ordered_by_published(client):
    data = client.get("/api/articles/latest").json()
    assert [a["external_id"] for a in data] == [2, 3, 1]


def test_latest_includes_tags(client):
    data = client.get("/api/articles/latest?limit=1").json()
    assert len(data) == 1
    assert data[0]["tags"] == [{"id": 4, "label": "england"}, {"id": 5, "label": "ashes"}]


def test_latest_source_filter(client):
    data = client.get("/api/articles/latest?source=other").json()
    assert [a["source_id"] for a in data] == ["other"]


def test_latest_untagged_article_has_empty_tags(client):
    data = client.get("/api/articles/latest?source=other").json()
    assert data[0]["tags"] == []


def test_api_is_read_only(client):
    resp = client.post("/api/sync-state")
    assert resp.status_code == 405
