"""ECB Cricket collector using the pulselive content API."""

import logging
from datetime import datetime, timezone
from typing import Any

from collectors.base import BaseCollector
from config import (
    ECB_API_BASE,
    ECB_PAGE_SIZE,
    ECB_REQUEST_TIMEOUT,
    ECB_RETRY_ATTEMPTS,
    ECB_RETRY_INITIAL_BACKOFF,
    ECB_RETRY_MAX_BACKOFF,
)
from sync.context import SyncContext
from sync.models import Article, Tag, as_utc

logger = logging.getLogger(__name__)


def _parse_date(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp such as ``2024-05-01T10:00:00Z``."""
    if not value:
        return None
    try:
        return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except (ValueError, TypeError):
        return None


def _ms_to_datetime(ms: int | None) -> datetime:
    """Convert a millisecond epoch timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp((ms or 0) / 1000, tz=timezone.utc)


class ECBCollector(BaseCollector):
    """Collect articles from the ECB content API, newest pages first."""

    source_id = "ecb"
    name = "ECB Cricket"

    def __init__(
        self,
        base_url: str = ECB_API_BASE,
        page_size: int = ECB_PAGE_SIZE,
        timeout: float = ECB_REQUEST_TIMEOUT,
        max_attempts: int = ECB_RETRY_ATTEMPTS,
        initial_backoff: float = ECB_RETRY_INITIAL_BACKOFF,
        max_backoff: float = ECB_RETRY_MAX_BACKOFF,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            timeout=timeout,
            max_attempts=max_attempts,
            initial_backoff=initial_backoff,
            max_backoff=max_backoff,
            **kwargs,
        )
        self.base_url = base_url
        self.page_size = page_size

    def _fetch_page(self, ctx: SyncContext, page: int) -> dict[str, Any]:
        return self._get_json(ctx, self.base_url, {"pageSize": self.page_size, "page": page})

    def fetch(self, ctx: SyncContext, max_pages: int) -> list[Article]:
        """Fetch pages 0..max_pages-1, stopping at the last page the API reports."""
        contents: list[dict[str, Any]] = []
        for page in range(max_pages):
            data = self._fetch_page(ctx, page)
            items = data.get("content") or []
            contents.extend(items)
            logger.debug(
                "[%s] Fetched page %d: %d articles (%d total)",
                self.source_id,
                page,
                len(items),
                len(contents),
            )

            num_pages = (data.get("pageInfo") or {}).get("numPages", 0)
            if page >= num_pages - 1:
                break

        return self.transform(contents)

    def transform(self, contents: list[dict[str, Any]]) -> list[Article]:
        """Normalize API items; items without a parsable date or id are dropped."""
        articles: list[Article] = []
        for item in contents:
            published_at = _parse_date(item.get("date"))
            if published_at is None:
                logger.warning(
                    "[%s] Failed to parse date %r for article %s",
                    self.source_id,
                    item.get("date"),
                    item.get("id"),
                )
                continue

            try:
                external_id = int(item["id"])
                tags = [
                    Tag(id=int(t["id"]), label=t.get("label") or "")
                    for t in item.get("tags") or []
                ]
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(
                    "[%s] Skipping malformed article %r: %s",
                    self.source_id,
                    item.get("id"),
                    e,
                )
                continue

            lead_media = item.get("leadMedia") or {}
            articles.append(Article(
                source_id=self.source_id,
                external_id=external_id,
                title=item.get("title") or "",
                description=item.get("description"),
                summary=item.get("summary"),
                body=item.get("body"),
                author=item.get("author"),
                canonical_url=item.get("canonicalUrl") or "",
                image_url=lead_media.get("imageUrl") or None,
                published_at=published_at,
                last_modified=_ms_to_datetime(item.get("lastModified")),
                duration=item.get("duration") or 0,
                tags=tags,
            ))
        return articles
