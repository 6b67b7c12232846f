from __future__ import annotations

import pytest

from catermatch.evals.aggregator import (
    compute_location_stats,
    compute_matching_stats,
    compute_system_health,
    correct_location_eval,
)
from catermatch.evals.models import LocationEval, MatchingEval
from catermatch.evals.store import InMemoryEvalStore
from catermatch.locations.models import AddedBy, Confidence, LocationSource
from catermatch.locations.store import InMemoryLearnedLocationStore
from catermatch.matching.models import Tier


def _location_eval(confidence=Confidence.high, source=LocationSource.alias, text="jozi") -> LocationEval:
    return LocationEval(
        input=text,
        normalized_city="Johannesburg",
        normalized_province="Gauteng",
        confidence=confidence,
        source=source,
    )


def _matching_eval(tier=Tier.basic, matched=3, **fields) -> MatchingEval:
    return MatchingEval(request_id="req_1", total_budget=10000, assigned_tier=tier, caterers_matched=matched, **fields)


def test_store_returns_newest_first_with_limit():
    store = InMemoryEvalStore()
    first = _location_eval(text="one")
    second = _location_eval(text="two")
    store.record(first)
    store.record(second)

    assert store.get_location_evals() == [second, first]
    assert store.get_location_evals(limit=1) == [second]


def test_update_matching_outcome():
    store = InMemoryEvalStore()
    eval_ = _matching_eval()
    store.record_matching(eval_)

    updated = store.update_matching_outcome(eval_.id, True, 4.5)

    assert updated.successful_booking is True
    assert updated.customer_rating == 4.5
    assert store.get_matching_evals()[0].successful_booking is True


def test_update_matching_outcome_validates_rating():
    store = InMemoryEvalStore()
    eval_ = _matching_eval()
    store.record_matching(eval_)

    with pytest.raises(ValueError):
        store.update_matching_outcome(eval_.id, True, 9)


def test_update_unknown_matching_eval():
    assert InMemoryEvalStore().update_matching_outcome("match_nope", True) is None


def test_clear_resets_everything():
    store = InMemoryEvalStore()
    store.record(_location_eval())
    store.record_matching(_matching_eval())
    store.increment_corrections()

    store.clear()

    assert store.get_location_evals() == []
    assert store.get_matching_evals() == []
    assert store.corrections == 0


def test_location_stats_counts():
    evals = [
        _location_eval(Confidence.high, LocationSource.alias),
        _location_eval(Confidence.high, LocationSource.learned),
        _location_eval(Confidence.low, LocationSource.ai),
    ]

    stats = compute_location_stats(evals, corrections=2)

    assert stats == {
        "total": 3,
        "confidence_high": 2,
        "confidence_medium": 0,
        "confidence_low": 1,
        "source_alias": 1,
        "source_learned": 1,
        "source_ai": 1,
        "corrections": 2,
    }


def test_matching_stats_counts():
    evals = [
        _matching_eval(Tier.basic, 3),
        _matching_eval(Tier.pro, 10, successful_booking=True, customer_rating=4.0),
        _matching_eval(Tier.pro, 0, customer_rating=2.0),
    ]

    stats = compute_matching_stats(evals)

    assert stats["total_matches"] == 3
    assert stats["tier_basic"] == 1
    assert stats["tier_pro"] == 2
    assert stats["tier_business"] == 0
    assert stats["total_caterers_matched"] == 13
    assert stats["successful_bookings"] == 1
    assert stats["total_rating"] == 6.0
    assert stats["rating_count"] == 2


def test_system_health_rates():
    location_evals = [_location_eval(Confidence.high)] * 2 + [_location_eval(Confidence.low)]
    matching_evals = [
        _matching_eval(successful_booking=True, customer_rating=5.0),
        _matching_eval(customer_rating=4.0),
        _matching_eval(),
    ]

    health = compute_system_health(location_evals, matching_evals, learned_count=7)

    assert health == {
        "location_accuracy": 66.67,
        "matching_success_rate": 33.33,
        "average_rating": 4.5,
        "learned_locations_count": 7,
    }


def test_system_health_without_data():
    health = compute_system_health([], [], 0)

    assert health["location_accuracy"] == 0.0
    assert health["matching_success_rate"] == 0.0
    assert health["average_rating"] == 0.0


def test_correct_location_eval_learns_mapping():
    evals = InMemoryEvalStore()
    learned = InMemoryLearnedLocationStore()
    wrong = _location_eval(Confidence.low, LocationSource.ai, text="Uncle Bob's Farm near Worcester")
    evals.record(wrong)

    corrected = correct_location_eval(
        evals, learned, wrong.id, city="Worcester", province="Western Cape",
        latitude=-33.6465, longitude=19.4485,
    )

    assert corrected.alias == "uncle bob's farm near worcester"
    assert corrected.added_by is AddedBy.user_correction
    assert corrected.use_count == 1
    assert learned.get("Uncle Bob's Farm near Worcester").city == "Worcester"
    assert evals.corrections == 1


def test_correct_unknown_eval_returns_none():
    evals = InMemoryEvalStore()
    learned = InMemoryLearnedLocationStore()

    assert correct_location_eval(evals, learned, "loc_missing", "Paarl", "Western Cape", -33.7, 18.9) is None
    assert learned.count() == 0
    assert evals.corrections == 0
