"""Port interfaces for the stores the matching orchestrator reads and writes."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import Caterer, EventRequest, Match, RequestStatus


class RequestRepository(ABC):
    @abstractmethod
    def get(self, request_id: str) -> EventRequest | None:
        ...

    @abstractmethod
    def update_status(self, request_id: str, status: RequestStatus) -> None:
        ...


class CatererRepository(ABC):
    @abstractmethod
    def list_active(self) -> list[Caterer]:
        """Active caterers in a stable order; ranking ties keep this order."""


class MatchRepository(ABC):
    @abstractmethod
    def insert_many(self, matches: list[Match]) -> None:
        """Write all rows in one batch, or none of them."""

    @abstractmethod
    def replace_for_request(self, request_id: str, matches: list[Match]) -> None:
        """Drop any earlier matches for ``request_id`` and insert ``matches`` as one batch."""

    @abstractmethod
    def list_for_request(self, request_id: str) -> list[Match]:
        ...
