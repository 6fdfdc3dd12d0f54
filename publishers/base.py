"""Shared publisher pieces: the error type and the change envelope."""

from datetime import datetime, timezone
from typing import Any

from sync.interfaces import ChangePublisher
from sync.models import Article

__all__ = ["ChangePublisher", "PublishError", "build_message"]


class PublishError(Exception):
    """A change notification could not be handed to the broker."""


def build_message(article: Article, is_new: bool, now: datetime | None = None) -> dict[str, Any]:
    """Envelope sent for every persisted article."""
    return {
        "action": "create" if is_new else "update",
        "record": article.to_dict(),
        "timestamp": (now or datetime.now(timezone.utc)).isoformat(),
    }
