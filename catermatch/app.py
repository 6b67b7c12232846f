from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import ValidationError

from .api_models import (
    LearnedLocationIn,
    LocationCorrection,
    MatchingOutcomeUpdate,
    TriggerMatchingRequest,
    TriggerMatchingResponse,
)
from .evals.aggregator import (
    compute_location_stats,
    compute_matching_stats,
    compute_system_health,
    correct_location_eval,
)
from .evals.models import LocationEval, MatchingEval
from .locations.models import AddedBy, LearnedLocation
from .locations.store import LearnedStoreError
from .matching.models import Match
from .matching.orchestrator import (
    InvalidBudgetError,
    MatchPersistenceError,
    RequestNotFoundError,
    RequestNotMatchableError,
)
from .services import Services, get_services

logger = logging.getLogger(__name__)

app = FastAPI(title="Caterer Matching API", version="1.0.0")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/matching/trigger", response_model=TriggerMatchingResponse)
def trigger_matching(
    body: TriggerMatchingRequest,
    services: Services = Depends(get_services),
) -> TriggerMatchingResponse:
    try:
        outcome = services.orchestrator.run(body.request_id)
    except RequestNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RequestNotMatchableError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InvalidBudgetError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except MatchPersistenceError as exc:
        raise HTTPException(status_code=500, detail="Failed to create matches") from exc

    return TriggerMatchingResponse(
        success=True,
        match_count=outcome.match_count,
        total_budget=outcome.total_budget,
        tier=outcome.tier,
        city=outcome.city,
    )


@app.get("/requests/{request_id}/matches", response_model=list[Match])
def request_matches(
    request_id: str,
    services: Services = Depends(get_services),
) -> list[Match]:
    if services.requests.get(request_id) is None:
        raise HTTPException(status_code=404, detail=f"Event request {request_id!r} not found")
    return services.matches.list_for_request(request_id)


# ── Admin: evals ─────────────────────────────────────────────────────────


@app.get("/admin/evals/locations", response_model=list[LocationEval])
def location_evals(
    limit: int = Query(100, ge=1),
    services: Services = Depends(get_services),
) -> list[LocationEval]:
    return services.evals.get_location_evals(limit)


@app.get("/admin/evals/stats")
def location_stats(services: Services = Depends(get_services)) -> dict:
    return compute_location_stats(
        services.evals.get_location_evals(),
        services.evals.corrections,
    )


@app.get("/admin/evals/matching-stats")
def matching_stats(services: Services = Depends(get_services)) -> dict:
    return compute_matching_stats(services.evals.get_matching_evals())


@app.get("/admin/evals/health")
def system_health(services: Services = Depends(get_services)) -> dict:
    try:
        learned_count = services.learned_store.count()
    except LearnedStoreError:
        logger.warning("Learned store unavailable while computing health", exc_info=True)
        learned_count = 0
    return compute_system_health(
        services.evals.get_location_evals(),
        services.evals.get_matching_evals(),
        learned_count,
    )


@app.post("/admin/evals/locations/{eval_id}/correct", response_model=LearnedLocation)
def correct_location(
    eval_id: str,
    body: LocationCorrection,
    services: Services = Depends(get_services),
) -> LearnedLocation:
    try:
        corrected = correct_location_eval(
            services.evals,
            services.learned_store,
            eval_id,
            city=body.city,
            province=body.province,
            latitude=body.latitude,
            longitude=body.longitude,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail="Eval input cannot be learned as an alias") from exc
    except LearnedStoreError as exc:
        raise HTTPException(status_code=500, detail="Failed to store correction") from exc
    if corrected is None:
        raise HTTPException(status_code=404, detail=f"Location eval {eval_id!r} not found")
    return corrected


@app.post("/admin/evals/matching/{eval_id}/outcome", response_model=MatchingEval)
def matching_outcome(
    eval_id: str,
    body: MatchingOutcomeUpdate,
    services: Services = Depends(get_services),
) -> MatchingEval:
    updated = services.evals.update_matching_outcome(
        eval_id, body.successful_booking, body.customer_rating
    )
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Matching eval {eval_id!r} not found")
    return updated


# ── Admin: learned locations ─────────────────────────────────────────────


@app.get("/admin/evals/learned-locations", response_model=list[LearnedLocation])
def learned_locations(services: Services = Depends(get_services)) -> list[LearnedLocation]:
    try:
        return services.learned_store.list_all()
    except LearnedStoreError as exc:
        raise HTTPException(status_code=500, detail="Failed to read learned locations") from exc


@app.post("/admin/evals/learned-locations", response_model=LearnedLocation)
def add_learned_location(
    body: LearnedLocationIn,
    services: Services = Depends(get_services),
) -> LearnedLocation:
    try:
        location = LearnedLocation(
            alias=body.alias,
            city=body.city,
            province=body.province,
            latitude=body.latitude,
            longitude=body.longitude,
            use_count=0,
            last_used=datetime.now(timezone.utc),
            added_by=AddedBy.admin,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail="Alias must not be blank") from exc
    try:
        return services.learned_store.put(location)
    except LearnedStoreError as exc:
        raise HTTPException(status_code=500, detail="Failed to add location") from exc


@app.delete("/admin/evals/learned-locations")
def delete_learned_location(
    alias: str,
    services: Services = Depends(get_services),
) -> dict:
    try:
        deleted = services.learned_store.delete(alias)
    except LearnedStoreError as exc:
        raise HTTPException(status_code=500, detail="Failed to delete location") from exc
    return {"success": True, "deleted": deleted}
