from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from .models import LocationEval, MatchingEval


class EvalSink(ABC):
    """Write-only destination for observability records."""

    @abstractmethod
    def record(self, eval_: LocationEval) -> None:
        ...

    @abstractmethod
    def record_matching(self, eval_: MatchingEval) -> None:
        ...


class InMemoryEvalStore(EvalSink):
    def __init__(self) -> None:
        self._location_evals: list[LocationEval] = []
        self._matching_evals: list[MatchingEval] = []
        self._corrections = 0
        self._lock = threading.Lock()

    def record(self, eval_: LocationEval) -> None:
        with self._lock:
            self._location_evals.append(eval_)

    def record_matching(self, eval_: MatchingEval) -> None:
        with self._lock:
            self._matching_evals.append(eval_)

    def get_location_evals(self, limit: int | None = None) -> list[LocationEval]:
        """Newest first."""
        with self._lock:
            evals = list(reversed(self._location_evals))
        return evals[:limit] if limit is not None else evals

    def get_matching_evals(self, limit: int | None = None) -> list[MatchingEval]:
        """Newest first."""
        with self._lock:
            evals = list(reversed(self._matching_evals))
        return evals[:limit] if limit is not None else evals

    def find_location_eval(self, eval_id: str) -> LocationEval | None:
        with self._lock:
            return next((e for e in self._location_evals if e.id == eval_id), None)

    def update_matching_outcome(
        self,
        eval_id: str,
        successful_booking: bool,
        customer_rating: float | None = None,
    ) -> MatchingEval | None:
        with self._lock:
            for index, eval_ in enumerate(self._matching_evals):
                if eval_.id != eval_id:
                    continue
                updated = MatchingEval.model_validate(
                    {
                        **eval_.model_dump(),
                        "successful_booking": successful_booking,
                        "customer_rating": customer_rating,
                    }
                )
                self._matching_evals[index] = updated
                return updated
        return None

    def increment_corrections(self) -> int:
        with self._lock:
            self._corrections += 1
            return self._corrections

    @property
    def corrections(self) -> int:
        return self._corrections

    def clear(self) -> None:
        with self._lock:
            self._location_evals.clear()
            self._matching_evals.clear()
            self._corrections = 0
