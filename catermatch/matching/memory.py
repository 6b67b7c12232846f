from __future__ import annotations

import threading

from .models import Caterer, EventRequest, Match, RequestStatus
from .ports import CatererRepository, MatchRepository, RequestRepository


class InMemoryRequestRepository(RequestRepository):
    def __init__(self, requests: list[EventRequest] | None = None) -> None:
        self._requests: dict[str, EventRequest] = {r.id: r for r in requests or []}
        self._lock = threading.Lock()

    def get(self, request_id: str) -> EventRequest | None:
        with self._lock:
            return self._requests.get(request_id)

    def update_status(self, request_id: str, status: RequestStatus) -> None:
        with self._lock:
            current = self._requests.get(request_id)
            if current is None:
                raise KeyError(request_id)
            self._requests[request_id] = current.model_copy(update={"status": status})


class InMemoryCatererRepository(CatererRepository):
    def __init__(self, caterers: list[Caterer] | None = None) -> None:
        self._caterers = list(caterers or [])

    def list_active(self) -> list[Caterer]:
        return [c for c in self._caterers if c.is_active]


class InMemoryMatchRepository(MatchRepository):
    def __init__(self) -> None:
        self._matches: list[Match] = []
        self._lock = threading.Lock()

    def insert_many(self, matches: list[Match]) -> None:
        with self._lock:
            self._matches.extend(matches)

    def replace_for_request(self, request_id: str, matches: list[Match]) -> None:
        if any(m.request_id != request_id for m in matches):
            raise ValueError("all matches must belong to the request being replaced")
        with self._lock:
            kept = [m for m in self._matches if m.request_id != request_id]
            self._matches = kept + list(matches)

    def list_for_request(self, request_id: str) -> list[Match]:
        with self._lock:
            rows = [m for m in self._matches if m.request_id == request_id]
        return sorted(rows, key=lambda m: m.rank)

    def list_all(self) -> list[Match]:
        with self._lock:
            return list(self._matches)
