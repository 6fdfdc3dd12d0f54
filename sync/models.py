"""Domain types shared by the sync core and its collaborators."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import config

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass
class Tag:
    """Taxonomy tag. The id is shared across sources, the label is mutable."""

    id: int
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label}


@dataclass
class Article:
    """Normalized record produced by a content source.

    Identity is ``(source_id, external_id)``; external ids are only unique
    within their source.
    """

    source_id: str
    external_id: int
    title: str
    canonical_url: str
    published_at: datetime
    last_modified: datetime
    description: str | None = None
    summary: str | None = None
    body: str | None = None
    author: str | None = None
    image_url: str | None = None
    duration: int = 0  # seconds
    tags: list[Tag] = field(default_factory=list)

    def tag_ids(self) -> list[int]:
        """Unique tag ids in first-seen order."""
        return list(dict.fromkeys(t.id for t in self.tags))

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "external_id": self.external_id,
            "title": self.title,
            "description": self.description,
            "summary": self.summary,
            "body": self.body,
            "author": self.author,
            "canonical_url": self.canonical_url,
            "image_url": self.image_url,
            "published_at": self.published_at.isoformat(),
            "last_modified": self.last_modified.isoformat(),
            "duration": self.duration,
            "tags": [t.to_dict() for t in self.tags],
        }


@dataclass
class SyncState:
    """Per-source progress. ``total_synced`` never decreases."""

    source_id: str
    last_synced_at: datetime = EPOCH
    last_article_id: int = 0
    total_synced: int = 0


@dataclass
class SyncStats:
    """Counters for one sync cycle. Not persisted."""

    source_id: str
    fetched: int = 0
    new: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    published: int = 0
    duration: timedelta = timedelta(0)


@dataclass
class SyncConfig:
    """Scheduling and filtering knobs for a sync service."""

    interval: float = 300.0  # seconds between cycles
    timeout: float = 300.0  # seconds a single cycle may take
    max_pages_per_sync: int = 5
    max_historical_days: int = 30

    def __post_init__(self) -> None:
        for name in ("interval", "timeout", "max_pages_per_sync", "max_historical_days"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")

    @classmethod
    def from_env(cls) -> "SyncConfig":
        return cls(
            interval=config.SYNC_INTERVAL,
            timeout=config.SYNC_TIMEOUT,
            max_pages_per_sync=config.SYNC_MAX_PAGES,
            max_historical_days=config.SYNC_MAX_HISTORICAL_DAYS,
        )


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
