from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from ..matching.models import Caterer, EventRequest
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig

logger = logging.getLogger(__name__)

_CATERER_LIST_COLUMNS = ("cuisine_types", "dietary_capabilities", "service_styles")
_CATERER_INT_COLUMNS = ("min_guests", "max_guests")
_CATERER_FLOAT_COLUMNS = ("latitude", "longitude")

_REQUEST_LIST_COLUMNS = ("cuisine_preferences", "dietary_requirements")
_REQUEST_FLOAT_COLUMNS = ("budget_per_person", "total_budget", "budget_max")
_REQUEST_TEXT_COLUMNS = (
    "event_date",
    "event_time",
    "city",
    "normalized_city",
    "service_style",
    "status",
)

_TRUE_VALUES = {"true", "1", "yes", "y", "t"}


def _split_list(value: Any, separator: str) -> list[str]:
    if not isinstance(value, str):
        return []
    return [item.strip() for item in value.split(separator) if item.strip()]


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return True
    return str(value).strip().lower() in _TRUE_VALUES


def _clean(record: dict[str, Any]) -> dict[str, Any]:
    """Drop NaN cells so model defaults apply."""
    return {key: value for key, value in record.items() if not _is_missing(value)}


def _is_missing(value: Any) -> bool:
    if isinstance(value, (list, dict)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _read(path: Path) -> pd.DataFrame:
    logger.info("Loading catalog file | path=%s", path)
    return pd.read_csv(path, dtype=str, keep_default_na=True)


def load_caterers(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[Caterer]:
    """Read the caterer CSV into models, preserving file order."""
    df = _read(config.caterers_csv)

    for column in _CATERER_LIST_COLUMNS:
        if column in df:
            df[column] = df[column].apply(lambda s: _split_list(s, config.list_separator))
    for column in _CATERER_INT_COLUMNS + _CATERER_FLOAT_COLUMNS:
        if column in df:
            df[column] = pd.to_numeric(df[column], errors="coerce")
    if "is_active" in df:
        df["is_active"] = df["is_active"].apply(_parse_bool)
    if "subscription_tier" in df:
        df["subscription_tier"] = df["subscription_tier"].fillna("basic").str.strip().str.lower()

    caterers = []
    for record in df.to_dict(orient="records"):
        row = _clean(record)
        for column in _CATERER_INT_COLUMNS:
            if column in row:
                row[column] = int(row[column])
        caterers.append(Caterer.model_validate(row))
    logger.info("Loaded caterers | count=%s", len(caterers))
    return caterers


def load_event_requests(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[EventRequest]:
    df = _read(config.requests_csv)

    for column in _REQUEST_LIST_COLUMNS:
        if column in df:
            df[column] = df[column].apply(lambda s: _split_list(s, config.list_separator))
    for column in _REQUEST_FLOAT_COLUMNS:
        if column in df:
            df[column] = pd.to_numeric(df[column], errors="coerce")
    if "guest_count" in df:
        df["guest_count"] = pd.to_numeric(df["guest_count"], errors="coerce")
    for column in _REQUEST_TEXT_COLUMNS:
        if column in df:
            df[column] = df[column].apply(lambda s: s.strip() if isinstance(s, str) else s)

    requests = []
    for record in df.to_dict(orient="records"):
        row = _clean(record)
        if "guest_count" in row:
            row["guest_count"] = int(row["guest_count"])
        requests.append(EventRequest.model_validate(row))
    logger.info("Loaded event requests | count=%s", len(requests))
    return requests
