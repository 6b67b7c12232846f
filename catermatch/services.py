from __future__ import annotations

import logging
from dataclasses import dataclass

from .catalog.config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .catalog.data_store import load_caterers, load_event_requests
from .evals.store import InMemoryEvalStore
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .llm.groq_client import GroqStructuredInference
from .llm.ports import StructuredInferenceProvider
from .locations.config import DEFAULT_RESOLVER_CONFIG, ResolverConfig
from .locations.resolver import LocationResolver
from .locations.sqlite_store import SqliteLearnedLocationStore
from .locations.store import InMemoryLearnedLocationStore, LearnedLocationStore
from .matching.config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .matching.memory import (
    InMemoryCatererRepository,
    InMemoryMatchRepository,
    InMemoryRequestRepository,
)
from .matching.orchestrator import MatchingOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class Services:
    learned_store: LearnedLocationStore
    evals: InMemoryEvalStore
    resolver: LocationResolver
    requests: InMemoryRequestRepository
    caterers: InMemoryCatererRepository
    matches: InMemoryMatchRepository
    orchestrator: MatchingOrchestrator


def build_learned_store(config: ResolverConfig = DEFAULT_RESOLVER_CONFIG) -> LearnedLocationStore:
    if config.learned_db_path:
        logger.info("Using SQLite learned store | path=%s", config.learned_db_path)
        return SqliteLearnedLocationStore(config.learned_db_path)
    return InMemoryLearnedLocationStore()


def build_services(
    *,
    inference: StructuredInferenceProvider | None = None,
    learned_store: LearnedLocationStore | None = None,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    resolver_config: ResolverConfig = DEFAULT_RESOLVER_CONFIG,
    matching_config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    catalog_config: CatalogConfig | None = DEFAULT_CATALOG_CONFIG,
) -> Services:
    """Wire stores, resolver and orchestrator together.

    Pass ``catalog_config=None`` to start with empty repositories instead of
    the bundled seed data.
    """
    store = learned_store if learned_store is not None else build_learned_store(resolver_config)
    evals = InMemoryEvalStore()
    resolver = LocationResolver(
        store=store,
        inference=inference if inference is not None else GroqStructuredInference(llm_config),
        eval_sink=evals,
        config=resolver_config,
    )

    if catalog_config is not None:
        requests = InMemoryRequestRepository(load_event_requests(catalog_config))
        caterers = InMemoryCatererRepository(load_caterers(catalog_config))
    else:
        requests = InMemoryRequestRepository()
        caterers = InMemoryCatererRepository()
    matches = InMemoryMatchRepository()

    orchestrator = MatchingOrchestrator(
        requests=requests,
        caterers=caterers,
        matches=matches,
        resolver=resolver,
        eval_sink=evals,
        config=matching_config,
    )
    return Services(
        learned_store=store,
        evals=evals,
        resolver=resolver,
        requests=requests,
        caterers=caterers,
        matches=matches,
        orchestrator=orchestrator,
    )


_services: Services | None = None


def get_services() -> Services:
    """Return the process-wide services, building them on first call."""
    global _services
    if _services is None:
        _services = build_services()
    return _services
