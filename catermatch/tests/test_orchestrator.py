from __future__ import annotations

import pytest

from catermatch.evals.store import InMemoryEvalStore
from catermatch.llm.ports import InferenceUnavailable, StructuredInferenceProvider
from catermatch.locations.models import Confidence
from catermatch.locations.resolver import LocationResolver
from catermatch.locations.store import InMemoryLearnedLocationStore
from catermatch.matching.memory import (
    InMemoryCatererRepository,
    InMemoryMatchRepository,
    InMemoryRequestRepository,
)
from catermatch.matching.models import Caterer, EventRequest, RequestStatus, Tier
from catermatch.matching.orchestrator import (
    InvalidBudgetError,
    MatchingOrchestrator,
    MatchPersistenceError,
    RequestNotFoundError,
    RequestNotMatchableError,
)


class OfflineInference(StructuredInferenceProvider):
    def infer(self, prompt, schema):
        raise InferenceUnavailable("offline")


class FailingMatchRepository(InMemoryMatchRepository):
    def replace_for_request(self, request_id, matches):
        raise RuntimeError("disk full")


def _caterers(count: int) -> list[Caterer]:
    return [
        Caterer(
            id=f"cat_{i:02d}",
            subscription_tier=Tier.business,
            cuisine_types=["Braai"],
            min_guests=10,
            max_guests=400,
            latitude=-26.2041,
            longitude=28.0473,
            city="Johannesburg",
        )
        for i in range(count)
    ]


def _build(requests, caterers=None, matches=None):
    evals = InMemoryEvalStore()
    learned = InMemoryLearnedLocationStore()
    resolver = LocationResolver(learned, OfflineInference(), evals)
    request_repo = InMemoryRequestRepository(requests)
    match_repo = matches if matches is not None else InMemoryMatchRepository()
    orchestrator = MatchingOrchestrator(
        requests=request_repo,
        caterers=InMemoryCatererRepository(caterers or []),
        matches=match_repo,
        resolver=resolver,
        eval_sink=evals,
    )
    return orchestrator, request_repo, match_repo, evals, learned


def _request(request_id: str = "req_1", **fields) -> EventRequest:
    fields.setdefault("guest_count", 100)
    fields.setdefault("city", "jozi")
    return EventRequest(id=request_id, **fields)


def test_run_persists_matches_and_marks_request_matched():
    orchestrator, requests, matches, evals, learned = _build(
        [_request(budget_per_person=600)], _caterers(3)
    )

    outcome = orchestrator.run("req_1")

    assert outcome.match_count == 3
    assert outcome.total_budget == 60000
    assert outcome.tier is Tier.business
    assert outcome.city == "Johannesburg"
    assert outcome.confidence == "high"
    assert requests.get("req_1").status is RequestStatus.matched
    assert [m.rank for m in matches.list_for_request("req_1")] == [1, 2, 3]
    assert learned.count() == 0


def test_run_records_matching_eval():
    orchestrator, _, _, evals, _ = _build([_request(total_budget=25000)], _caterers(2))

    orchestrator.run("req_1")

    [eval_] = evals.get_matching_evals()
    assert eval_.request_id == "req_1"
    assert eval_.assigned_tier is Tier.pro
    assert eval_.caterers_matched == 2
    assert eval_.successful_booking is False
    assert eval_.id.startswith("match_")


def test_empty_pool_still_marks_matched():
    orchestrator, requests, matches, _, _ = _build([_request()], [])

    outcome = orchestrator.run("req_1")

    assert outcome.match_count == 0
    assert matches.list_for_request("req_1") == []
    assert requests.get("req_1").status is RequestStatus.matched


def test_large_pool_is_capped_at_ten():
    orchestrator, _, matches, _, _ = _build([_request()], _caterers(15))

    outcome = orchestrator.run("req_1")

    assert outcome.match_count == 10
    assert [m.rank for m in matches.list_for_request("req_1")] == list(range(1, 11))


def test_unknown_request_raises():
    orchestrator, *_ = _build([])

    with pytest.raises(RequestNotFoundError):
        orchestrator.run("missing")


@pytest.mark.parametrize("status", [RequestStatus.booked, RequestStatus.completed, RequestStatus.cancelled])
def test_terminal_request_rejected(status):
    orchestrator, requests, matches, _, _ = _build([_request(status=status)], _caterers(2))

    with pytest.raises(RequestNotMatchableError):
        orchestrator.run("req_1")

    assert requests.get("req_1").status is status
    assert matches.list_for_request("req_1") == []


def test_rerun_replaces_previous_matches():
    orchestrator, requests, matches, _, _ = _build([_request()], _caterers(4))

    orchestrator.run("req_1")
    orchestrator.run("req_1")

    ranks = [m.rank for m in matches.list_for_request("req_1")]
    assert ranks == [1, 2, 3, 4]
    assert len(matches.list_all()) == 4


def test_rerun_leaves_other_requests_untouched():
    orchestrator, _, matches, _, _ = _build(
        [_request("req_1"), _request("req_2")], _caterers(2)
    )

    orchestrator.run("req_1")
    orchestrator.run("req_2")
    orchestrator.run("req_1")

    assert len(matches.list_for_request("req_2")) == 2
    assert len(matches.list_all()) == 4


def test_persistence_failure_leaves_request_matching():
    orchestrator, requests, _, evals, _ = _build(
        [_request()], _caterers(2), matches=FailingMatchRepository()
    )

    with pytest.raises(MatchPersistenceError):
        orchestrator.run("req_1")

    assert requests.get("req_1").status is RequestStatus.matching
    assert evals.get_matching_evals() == []


def test_unresolvable_city_uses_default_and_city_names():
    request = _request(city="Uncle Bob's Farm near Worcester", normalized_city="Worcester")
    worcester = Caterer(id="cat_wor", city="Worcester")
    orchestrator, _, matches, evals, _ = _build([request], [worcester])

    outcome = orchestrator.run("req_1")

    assert outcome.confidence == Confidence.low.value
    assert outcome.city == "Johannesburg"
    [match] = matches.list_for_request("req_1")
    assert match.match_reasons["location"] == "Same city"
    assert evals.get_location_evals()[0].confidence is Confidence.low


def test_request_without_city_resolves_to_default():
    orchestrator, requests, _, _, _ = _build([_request(city=None)], _caterers(1))

    outcome = orchestrator.run("req_1")

    assert outcome.city == "Johannesburg"
    assert outcome.confidence == "low"
    assert requests.get("req_1").status is RequestStatus.matched


def test_match_repository_insert_many_and_replace_guard():
    repo = InMemoryMatchRepository()
    orchestrator, _, matches, _, _ = _build([_request()], _caterers(2))
    orchestrator.run("req_1")
    batch = matches.list_for_request("req_1")

    repo.insert_many(batch)
    repo.insert_many(batch)

    assert len(repo.list_for_request("req_1")) == 4
    with pytest.raises(ValueError):
        repo.replace_for_request("req_other", batch)


def test_overflowing_budget_rejected_before_matching_starts():
    orchestrator, requests, matches, evals, _ = _build(
        [_request(budget_per_person=1e308, guest_count=10)], _caterers(2)
    )

    with pytest.raises(InvalidBudgetError):
        orchestrator.run("req_1")

    assert requests.get("req_1").status is RequestStatus.pending
    assert matches.list_for_request("req_1") == []
    assert evals.get_location_evals() == []


@pytest.mark.parametrize("field", ["total_budget", "budget_per_person", "budget_max"])
@pytest.mark.parametrize("value", [float("inf"), float("nan")])
def test_event_request_rejects_non_finite_budget(field, value):
    with pytest.raises(ValueError):
        _request(**{field: value})
