"""Shared fixtures for news-syncer tests."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from db.database import create_db_engine
from db.models import Base
from sync.models import Article, Tag

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path):
    eng = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def make_article():
    def _make(
        external_id: int = 1,
        published_at: datetime = NOW - timedelta(hours=1),
        last_modified: datetime = NOW - timedelta(hours=1),
        tags: list[Tag] | None = None,
        source_id: str = "test-source",
        title: str = "Test Article",
    ) -> Article:
        return Article(
            source_id=source_id,
            external_id=external_id,
            title=title,
            canonical_url=f"https://example.com/articles/{external_id}",
            published_at=published_at,
            last_modified=last_modified,
            tags=tags or [],
        )

    return _make


@pytest.fixture
def now() -> datetime:
    return NOW
