from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..evals.models import LocationEval
from ..evals.store import EvalSink
from ..llm.ports import StructuredInferenceProvider
from .aliases import PROMPT_ALIAS_EXAMPLES, lookup_alias
from .config import DEFAULT_RESOLVER_CONFIG, ResolverConfig
from .models import (
    AddedBy,
    Confidence,
    InferredLocation,
    LearnedLocation,
    LocationSource,
    ResolvedLocation,
    normalize_alias,
)
from .store import LearnedLocationStore, LearnedStoreError

logger = logging.getLogger(__name__)

LOCATION_PROMPT = """\
You are a South African location expert. Interpret the following location \
input and return the standardized city name, province, and approximate \
coordinates.

Common South African city aliases to recognize:
{examples}

If the input mentions a specific venue, suburb, or address, extract the main city.
If unsure, provide the best match with "low" confidence.

Location input: "{text}"
"""


def build_location_prompt(text: str) -> str:
    examples = "\n".join(f"- {line}" for line in PROMPT_ALIAS_EXAMPLES)
    return LOCATION_PROMPT.format(examples=examples, text=text)


class LocationResolver:
    """Resolve freeform location text: learned store, then alias table, then AI.

    ``resolve`` never raises for inference or eval-sink problems; the worst
    case is the configured default location at low confidence.
    """

    def __init__(
        self,
        store: LearnedLocationStore,
        inference: StructuredInferenceProvider,
        eval_sink: EvalSink,
        config: ResolverConfig = DEFAULT_RESOLVER_CONFIG,
    ) -> None:
        self._store = store
        self._inference = inference
        self._eval_sink = eval_sink
        self._config = config

    def resolve(self, text: str | None) -> ResolvedLocation:
        raw = text or ""
        key = normalize_alias(raw)

        result = self._from_learned(key, raw) or self._from_alias(key, raw)
        if result is None:
            result = self._from_ai(key, raw)

        self._log_eval(result)
        return result

    def _from_learned(self, key: str, raw: str) -> ResolvedLocation | None:
        if not key:
            return None
        try:
            learned = self._store.record_hit(key)
        except LearnedStoreError:
            logger.warning("Learned store unavailable, skipping learned tier", exc_info=True)
            return None
        if learned is None:
            return None
        logger.debug("Learned tier hit | alias=%s | use_count=%s", key, learned.use_count)
        return ResolvedLocation(
            city=learned.city,
            province=learned.province,
            latitude=learned.latitude,
            longitude=learned.longitude,
            confidence=Confidence.high,
            source=LocationSource.learned,
            original_input=raw,
        )

    def _from_alias(self, key: str, raw: str) -> ResolvedLocation | None:
        entry = lookup_alias(key)
        if entry is None:
            return None
        return ResolvedLocation(
            city=entry.city,
            province=entry.province,
            latitude=entry.latitude,
            longitude=entry.longitude,
            confidence=Confidence.high,
            source=LocationSource.alias,
            original_input=raw,
        )

    def _from_ai(self, key: str, raw: str) -> ResolvedLocation:
        try:
            inferred = self._inference.infer(build_location_prompt(raw), InferredLocation)
            # Re-validate whatever the provider hands back.
            inferred = InferredLocation.model_validate(
                inferred.model_dump() if isinstance(inferred, InferredLocation) else inferred
            )
        except Exception:
            logger.warning(
                "Location inference failed, using default location | input=%r",
                raw,
                exc_info=True,
            )
            return self._fallback(raw)

        result = ResolvedLocation(
            city=inferred.city,
            province=inferred.province,
            latitude=inferred.latitude,
            longitude=inferred.longitude,
            confidence=inferred.confidence,
            source=LocationSource.ai,
            original_input=raw,
        )
        if inferred.confidence is Confidence.high and len(key) > self._config.min_learnable_length:
            self._learn(key, inferred)
        return result

    def _learn(self, key: str, inferred: InferredLocation) -> None:
        try:
            self._store.upsert_increment(
                LearnedLocation(
                    alias=key,
                    city=inferred.city,
                    province=inferred.province,
                    latitude=inferred.latitude,
                    longitude=inferred.longitude,
                    use_count=1,
                    last_used=datetime.now(timezone.utc),
                    added_by=AddedBy.system,
                )
            )
            logger.info("Learned location alias | alias=%s | city=%s", key, inferred.city)
        except Exception:
            logger.warning("Failed to store learned alias %r", key, exc_info=True)

    def _fallback(self, raw: str) -> ResolvedLocation:
        config = self._config
        return ResolvedLocation(
            city=config.default_city,
            province=config.default_province,
            latitude=config.default_latitude,
            longitude=config.default_longitude,
            confidence=Confidence.low,
            source=LocationSource.ai,
            original_input=raw,
        )

    def _log_eval(self, result: ResolvedLocation) -> None:
        try:
            self._eval_sink.record(
                LocationEval(
                    input=result.original_input,
                    normalized_city=result.city,
                    normalized_province=result.province,
                    confidence=result.confidence,
                    source=result.source,
                )
            )
        except Exception:
            logger.warning("Location eval could not be recorded", exc_info=True)
