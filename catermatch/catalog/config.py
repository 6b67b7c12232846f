from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class CatalogConfig:
    caterers_csv: Path = Path(os.getenv("CATERMATCH_CATERERS_CSV", str(_DATA_DIR / "caterers.csv")))
    requests_csv: Path = Path(
        os.getenv("CATERMATCH_REQUESTS_CSV", str(_DATA_DIR / "event_requests.csv"))
    )
    # Separator for list-valued columns such as cuisine_types
    list_separator: str = ","


DEFAULT_CATALOG_CONFIG = CatalogConfig()
