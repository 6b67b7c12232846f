from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from .models import LearnedLocation, normalize_alias


class LearnedStoreError(Exception):
    """Raised when the learned location backend cannot be read or written."""


class LearnedLocationStore(ABC):
    """Alias → location cache shared by every resolution.

    Writes that touch ``use_count`` are atomic per alias: implementations
    must never read, modify and write back in separate steps.
    """

    @abstractmethod
    def get(self, alias: str) -> LearnedLocation | None:
        ...

    @abstractmethod
    def record_hit(self, alias: str) -> LearnedLocation | None:
        """Increment ``use_count`` and stamp ``last_used``; ``None`` on miss."""

    @abstractmethod
    def upsert_increment(self, location: LearnedLocation) -> LearnedLocation:
        """Insert ``location``, or bump the existing alias' ``use_count`` by one.

        An existing mapping is never replaced by this call.
        """

    @abstractmethod
    def put(self, location: LearnedLocation) -> LearnedLocation:
        """Insert or replace the mapping for ``location.alias``."""

    @abstractmethod
    def delete(self, alias: str) -> bool:
        ...

    @abstractmethod
    def list_all(self) -> list[LearnedLocation]:
        ...

    def count(self) -> int:
        return len(self.list_all())


class InMemoryLearnedLocationStore(LearnedLocationStore):
    """Dict-backed store; a single lock serializes every mutation."""

    def __init__(self, seed: list[LearnedLocation] | None = None) -> None:
        self._entries: dict[str, LearnedLocation] = {}
        self._lock = threading.Lock()
        for location in seed or []:
            self._entries[location.alias] = location

    def get(self, alias: str) -> LearnedLocation | None:
        with self._lock:
            return self._entries.get(normalize_alias(alias))

    def record_hit(self, alias: str) -> LearnedLocation | None:
        key = normalize_alias(alias)
        with self._lock:
            current = self._entries.get(key)
            if current is None:
                return None
            updated = current.model_copy(
                update={
                    "use_count": current.use_count + 1,
                    "last_used": datetime.now(timezone.utc),
                }
            )
            self._entries[key] = updated
            return updated

    def upsert_increment(self, location: LearnedLocation) -> LearnedLocation:
        with self._lock:
            current = self._entries.get(location.alias)
            if current is None:
                self._entries[location.alias] = location
                return location
            updated = current.model_copy(
                update={
                    "use_count": current.use_count + 1,
                    "last_used": location.last_used,
                }
            )
            self._entries[location.alias] = updated
            return updated

    def put(self, location: LearnedLocation) -> LearnedLocation:
        with self._lock:
            self._entries[location.alias] = location
        return location

    def delete(self, alias: str) -> bool:
        with self._lock:
            return self._entries.pop(normalize_alias(alias), None) is not None

    def list_all(self) -> list[LearnedLocation]:
        with self._lock:
            entries = list(self._entries.values())
        return sorted(entries, key=lambda e: (-e.use_count, e.alias))

    def count(self) -> int:
        with self._lock:
            return len(self._entries)
