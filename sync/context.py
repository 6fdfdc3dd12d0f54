"""Cancellation and deadline propagation for sync cycles.

A ``SyncContext`` is passed explicitly to every collaborator call. Collaborators
call ``check()`` before doing work and may use ``remaining()`` to bound their
own I/O timeouts.
"""

from __future__ import annotations

import threading
import time

from sync.errors import SyncCancelled


class SyncContext:
    """A deadline plus a cancel flag, optionally chained to a parent."""

    def __init__(
        self,
        deadline: float | None = None,
        parent: SyncContext | None = None,
    ) -> None:
        # deadline is a time.monotonic() value
        self._deadline = deadline
        self._parent = parent
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> SyncContext:
        """A context that never expires unless cancelled."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> SyncContext:
        return cls(deadline=time.monotonic() + seconds)

    def child(self, timeout: float | None = None) -> SyncContext:
        """Derive a context cancelled with this one, with an optional tighter deadline."""
        deadline = self.deadline
        if timeout is not None:
            own = time.monotonic() + timeout
            deadline = own if deadline is None else min(deadline, own)
        return SyncContext(deadline=deadline, parent=self)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        if self._parent is not None and self._parent.cancelled:
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds until the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        if self._cancelled.is_set() or (self._parent is not None and self._parent.cancelled):
            raise SyncCancelled("context cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise SyncCancelled("context deadline exceeded")

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``, waking early on cancellation.

        Returns True if the context was cancelled while waiting.
        """
        end = time.monotonic() + seconds
        remaining = self.remaining()
        if remaining is not None:
            end = min(end, time.monotonic() + remaining)
        while not self.cancelled:
            left = end - time.monotonic()
            if left <= 0:
                break
            # poll so parent cancellation is noticed too
            self._cancelled.wait(min(left, 0.1))
        return self.cancelled
