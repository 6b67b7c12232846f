from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from catermatch.app import app
from catermatch.llm.ports import InferenceUnavailable, StructuredInferenceProvider
from catermatch.matching.memory import InMemoryMatchRepository, InMemoryRequestRepository
from catermatch.matching.models import EventRequest, RequestStatus
from catermatch.services import build_services, get_services


class OfflineInference(StructuredInferenceProvider):
    def infer(self, prompt, schema):
        raise InferenceUnavailable("offline")


@pytest.fixture
def services():
    built = build_services(inference=OfflineInference())
    app.dependency_overrides[get_services] = lambda: built
    yield built
    app.dependency_overrides.clear()


@pytest.fixture
def client(services):
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_trigger_matching(client, services):
    resp = client.post("/matching/trigger", json={"request_id": "req_001"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["match_count"] > 0
    assert body["total_budget"] == 54000
    assert body["tier"] == "business"
    assert body["city"] == "Johannesburg"

    matches = client.get("/requests/req_001/matches").json()
    assert [m["rank"] for m in matches] == list(range(1, body["match_count"] + 1))
    assert all(m["caterer_id"] != "cat_012" for m in matches)


def test_trigger_matching_twice_keeps_unique_ranks(client):
    client.post("/matching/trigger", json={"request_id": "req_002"})
    client.post("/matching/trigger", json={"request_id": "req_002"})

    ranks = [m["rank"] for m in client.get("/requests/req_002/matches").json()]
    assert len(ranks) == len(set(ranks))


def test_trigger_unknown_request(client):
    resp = client.post("/matching/trigger", json={"request_id": "req_missing"})
    assert resp.status_code == 404


def test_trigger_booked_request(client):
    resp = client.post("/matching/trigger", json={"request_id": "req_006"})
    assert resp.status_code == 409


def test_trigger_persistence_failure(client, services):
    class Broken(InMemoryMatchRepository):
        def replace_for_request(self, request_id, matches):
            raise RuntimeError("disk full")

    services.orchestrator._matches = Broken()

    resp = client.post("/matching/trigger", json={"request_id": "req_001"})

    assert resp.status_code == 500


def test_trigger_with_ai_offline_still_succeeds(client):
    resp = client.post("/matching/trigger", json={"request_id": "req_005"})

    assert resp.status_code == 200
    assert resp.json()["city"] == "Johannesburg"


def test_matches_for_unknown_request(client):
    assert client.get("/requests/nope/matches").status_code == 404


def test_location_evals_and_stats(client):
    client.post("/matching/trigger", json={"request_id": "req_001"})
    client.post("/matching/trigger", json={"request_id": "req_005"})

    evals = client.get("/admin/evals/locations", params={"limit": 1}).json()
    assert len(evals) == 1
    assert evals[0]["input"] == "somewhere near the river"

    stats = client.get("/admin/evals/stats").json()
    assert stats["total"] == 2
    assert stats["confidence_high"] == 1
    assert stats["confidence_low"] == 1
    assert stats["source_alias"] == 1


def test_matching_stats_and_outcome(client, services):
    client.post("/matching/trigger", json={"request_id": "req_002"})
    [eval_] = services.evals.get_matching_evals()

    resp = client.post(
        f"/admin/evals/matching/{eval_.id}/outcome",
        json={"successful_booking": True, "customer_rating": 5},
    )
    assert resp.status_code == 200

    stats = client.get("/admin/evals/matching-stats").json()
    assert stats["total_matches"] == 1
    assert stats["tier_pro"] == 1
    assert stats["successful_bookings"] == 1

    health = client.get("/admin/evals/health").json()
    assert health["matching_success_rate"] == 100.0
    assert health["average_rating"] == 5.0


def test_outcome_for_unknown_eval(client):
    resp = client.post("/admin/evals/matching/match_nope/outcome", json={"successful_booking": False})
    assert resp.status_code == 404


def test_learned_locations_crud(client):
    resp = client.post(
        "/admin/evals/learned-locations",
        json={"alias": " The Bay ", "city": "Gqeberha", "province": "Eastern Cape",
              "latitude": -33.9608, "longitude": 25.6022},
    )
    assert resp.status_code == 200
    assert resp.json()["alias"] == "the bay"
    assert resp.json()["use_count"] == 0
    assert resp.json()["added_by"] == "admin"

    listed = client.get("/admin/evals/learned-locations").json()
    assert [loc["alias"] for loc in listed] == ["the bay"]
    assert client.get("/admin/evals/health").json()["learned_locations_count"] == 1

    resp = client.delete("/admin/evals/learned-locations", params={"alias": "the bay"})
    assert resp.json() == {"success": True, "deleted": True}
    assert client.get("/admin/evals/learned-locations").json() == []


def test_learned_location_blank_alias(client):
    resp = client.post(
        "/admin/evals/learned-locations",
        json={"alias": "   ", "city": "Gqeberha", "province": "Eastern Cape",
              "latitude": -33.9608, "longitude": 25.6022},
    )
    assert resp.status_code == 422


def test_correct_location(client, services):
    client.post("/matching/trigger", json={"request_id": "req_005"})
    [eval_] = services.evals.get_location_evals()

    resp = client.post(
        f"/admin/evals/locations/{eval_.id}/correct",
        json={"city": "Paarl", "province": "Western Cape", "latitude": -33.7342, "longitude": 18.9622},
    )

    assert resp.status_code == 200
    assert resp.json()["added_by"] == "user_correction"
    assert services.resolver.resolve("somewhere near the river").city == "Paarl"
    assert client.get("/admin/evals/stats").json()["corrections"] == 1


def test_correct_unknown_location(client):
    resp = client.post(
        "/admin/evals/locations/loc_nope/correct",
        json={"city": "Paarl", "province": "Western Cape", "latitude": -33.7, "longitude": 18.9},
    )
    assert resp.status_code == 404


def test_trigger_with_overflowing_budget(client, services):
    services.orchestrator._requests = InMemoryRequestRepository(
        [EventRequest(id="req_huge", guest_count=10, city="Jozi", budget_per_person=1e308)]
    )

    resp = client.post("/matching/trigger", json={"request_id": "req_huge"})

    assert resp.status_code == 422
    assert services.orchestrator._requests.get("req_huge").status is RequestStatus.pending


@pytest.mark.parametrize("limit", [0, -1])
def test_location_evals_rejects_non_positive_limit(client, limit):
    resp = client.get("/admin/evals/locations", params={"limit": limit})
    assert resp.status_code == 422
