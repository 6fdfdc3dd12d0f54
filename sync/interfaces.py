"""Collaborator contracts consumed by ``SyncService``.

Every call takes the cycle's ``SyncContext`` first. Failures are raised as
exceptions. Write methods accept an optional ``session``: the scoped executor
handed to the ``UnitOfWork.run`` callback. Without one a store runs the write
on its own.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from sync.context import SyncContext
from sync.models import Article, SyncState, Tag


class ContentSource(ABC):
    """Produces a bounded batch of normalized articles per call."""

    source_id: str
    name: str

    @abstractmethod
    def fetch(self, ctx: SyncContext, max_pages: int) -> list[Article]:
        ...


class RecordStore(ABC):
    @abstractmethod
    def upsert(self, ctx: SyncContext, article: Article, session: Any = None) -> int | None:
        """Insert, or overwrite when the incoming last_modified is strictly newer.

        Returns the stored row id, or None when the stored row is newer or equal.
        """
        ...

    @abstractmethod
    def get_existing_last_modified(
        self,
        ctx: SyncContext,
        source_id: str,
        external_ids: Iterable[int],
    ) -> dict[int, datetime]:
        """Map external id -> stored last_modified for ids that exist in ``source_id``."""
        ...


class TagStore(ABC):
    @abstractmethod
    def upsert_batch(self, ctx: SyncContext, tags: list[Tag], session: Any = None) -> None:
        ...

    @abstractmethod
    def link_to_article(
        self,
        ctx: SyncContext,
        article_id: int,
        tag_ids: list[int],
        session: Any = None,
    ) -> None:
        """Replace the article's tag links with exactly ``tag_ids``."""
        ...


class ProgressTracker(ABC):
    @abstractmethod
    def get(self, ctx: SyncContext, source_id: str) -> SyncState:
        """Current state, or a zero-value state when the source has none yet."""
        ...

    @abstractmethod
    def update(self, ctx: SyncContext, state: SyncState) -> None:
        ...


class UnitOfWork(ABC):
    @abstractmethod
    def run(self, ctx: SyncContext, work: Callable[[Any], None]) -> None:
        """Call ``work(session)`` atomically: commit on return, roll back on raise."""
        ...


class ChangePublisher(ABC):
    @abstractmethod
    def publish(self, ctx: SyncContext, article: Article, is_new: bool) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...
