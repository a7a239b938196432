"""Registry of active job identifiers.

The job action adds an identifier when a job starts and the host removes
it to request cancellation; the encoding loop polls membership on every
progress tick.
"""

from __future__ import annotations

import threading

from hbjob.jobs.models import JobIdentifier


class JobRegistry:
    """Thread-safe set of active job identifiers."""

    def __init__(self) -> None:
        self._ids: set[JobIdentifier] = set()
        self._lock = threading.Lock()

    def add(self, identifier: JobIdentifier) -> None:
        with self._lock:
            self._ids.add(identifier)

    def discard(self, identifier: JobIdentifier) -> bool:
        """Remove an identifier; absent identifiers are a no-op.

        Returns:
            True if the identifier was present.
        """
        with self._lock:
            if identifier not in self._ids:
                return False
            self._ids.remove(identifier)
            return True

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def snapshot(self) -> frozenset[JobIdentifier]:
        """Return a copy of the current identifiers."""
        with self._lock:
            return frozenset(self._ids)
