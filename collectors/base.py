"""Base collector with common HTTP fetch and retry logic."""

import logging
from abc import abstractmethod
from typing import Any

import requests

from sync.context import SyncContext
from sync.interfaces import ContentSource
from sync.models import Article

logger = logging.getLogger(__name__)


class CollectorError(Exception):
    """A source could not be fetched after all retry attempts."""


class BaseCollector(ContentSource):
    """Abstract base for all collectors.

    Subclasses set ``source_id`` and ``name`` and implement ``fetch``.
    """

    source_id: str  # Must be set by subclasses
    name: str

    def __init__(
        self,
        timeout: float = 30.0,
        max_attempts: int = 3,
        initial_backoff: float = 1.0,
        max_backoff: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "User-Agent": "NewsSyncer/1.0",
        })

    @abstractmethod
    def fetch(self, ctx: SyncContext, max_pages: int) -> list[Article]:
        """Fetch up to ``max_pages`` pages and return normalized articles."""
        ...

    def backoff(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based), doubling up to max_backoff."""
        return min(self.initial_backoff * (2 ** (attempt - 1)), self.max_backoff)

    def _get_json(self, ctx: SyncContext, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``url`` and decode JSON, retrying failures with backoff."""
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            ctx.check()
            try:
                return self._request(ctx, url, params)
            except (requests.RequestException, ValueError) as e:
                last_error = e

            if attempt == self.max_attempts:
                break

            delay = self.backoff(attempt)
            logger.warning(
                "[%s] Request failed (attempt %d/%d), retrying in %.1fs: %s",
                self.source_id,
                attempt,
                self.max_attempts,
                delay,
                last_error,
            )
            if ctx.wait(delay):
                ctx.check()

        raise CollectorError(
            f"{url} failed after {self.max_attempts} attempts: {last_error}"
        ) from last_error

    def _request(self, ctx: SyncContext, url: str, params: dict[str, Any] | None) -> Any:
        timeout = self.timeout
        remaining = ctx.remaining()
        if remaining is not None:
            timeout = min(timeout, max(remaining, 0.001))
        resp = self._session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
        return resp.json()

    def close(self) -> None:
        self._session.close()
