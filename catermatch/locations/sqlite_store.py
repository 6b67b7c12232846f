"""SQLite persistence for learned locations."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path

from .models import AddedBy, LearnedLocation, normalize_alias
from .store import LearnedLocationStore, LearnedStoreError

logger = logging.getLogger(__name__)

_COLUMNS = "alias, city, province, latitude, longitude, use_count, last_used, added_by"


class SqliteLearnedLocationStore(LearnedLocationStore):
    """Learned store backed by one SQLite table keyed by alias.

    Every use-count change is a single UPSERT/UPDATE statement so concurrent
    resolvers in different processes cannot lose increments.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self.initialize()

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path, timeout=10.0, isolation_level=None)
        connection.row_factory = sqlite3.Row
        return connection

    def initialize(self) -> None:
        try:
            with closing(self._connect()) as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS LearnedLocations (
                        alias TEXT PRIMARY KEY,
                        city TEXT NOT NULL,
                        province TEXT NOT NULL,
                        latitude REAL NOT NULL,
                        longitude REAL NOT NULL,
                        use_count INTEGER NOT NULL DEFAULT 0 CHECK (use_count >= 0),
                        last_used TEXT NOT NULL,
                        added_by TEXT NOT NULL DEFAULT 'system'
                    );
                    """
                )
            logger.info("Learned location store ready at %s", self._db_path)
        except sqlite3.Error as exc:
            raise LearnedStoreError(f"Learned store initialization failed: {exc}") from exc

    @staticmethod
    def _row_to_location(row: sqlite3.Row) -> LearnedLocation:
        return LearnedLocation(
            alias=row["alias"],
            city=row["city"],
            province=row["province"],
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            use_count=int(row["use_count"]),
            last_used=datetime.fromisoformat(row["last_used"]),
            added_by=AddedBy(row["added_by"]),
        )

    @staticmethod
    def _params(location: LearnedLocation) -> tuple:
        return (
            location.alias,
            location.city,
            location.province,
            location.latitude,
            location.longitude,
            location.use_count,
            location.last_used.isoformat(),
            location.added_by.value,
        )

    def _fetch(self, conn: sqlite3.Connection, alias: str) -> LearnedLocation | None:
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM LearnedLocations WHERE alias = ?;",
            (alias,),
        ).fetchone()
        return self._row_to_location(row) if row else None

    def get(self, alias: str) -> LearnedLocation | None:
        try:
            with closing(self._connect()) as conn:
                return self._fetch(conn, normalize_alias(alias))
        except sqlite3.Error as exc:
            raise LearnedStoreError(f"Learned store read failed: {exc}") from exc

    def record_hit(self, alias: str) -> LearnedLocation | None:
        key = normalize_alias(alias)
        now = datetime.now(timezone.utc).isoformat()
        try:
            with closing(self._connect()) as conn:
                conn.execute("BEGIN IMMEDIATE;")
                try:
                    cursor = conn.execute(
                        """
                        UPDATE LearnedLocations
                        SET use_count = use_count + 1, last_used = ?
                        WHERE alias = ?;
                        """,
                        (now, key),
                    )
                    location = self._fetch(conn, key) if cursor.rowcount else None
                    conn.execute("COMMIT;")
                except sqlite3.Error:
                    conn.execute("ROLLBACK;")
                    raise
                return location
        except sqlite3.Error as exc:
            raise LearnedStoreError(f"Learned store hit update failed: {exc}") from exc

    def upsert_increment(self, location: LearnedLocation) -> LearnedLocation:
        try:
            with closing(self._connect()) as conn:
                conn.execute("BEGIN IMMEDIATE;")
                try:
                    conn.execute(
                        f"""
                        INSERT INTO LearnedLocations ({_COLUMNS})
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT(alias) DO UPDATE SET
                            use_count = use_count + 1,
                            last_used = excluded.last_used;
                        """,
                        self._params(location),
                    )
                    stored = self._fetch(conn, location.alias)
                    conn.execute("COMMIT;")
                except sqlite3.Error:
                    conn.execute("ROLLBACK;")
                    raise
        except sqlite3.Error as exc:
            raise LearnedStoreError(f"Learned store upsert failed: {exc}") from exc
        if stored is None:
            raise LearnedStoreError(f"Learned alias {location.alias!r} vanished after upsert")
        return stored

    def put(self, location: LearnedLocation) -> LearnedLocation:
        try:
            with closing(self._connect()) as conn:
                conn.execute(
                    f"""
                    INSERT INTO LearnedLocations ({_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(alias) DO UPDATE SET
                        city = excluded.city,
                        province = excluded.province,
                        latitude = excluded.latitude,
                        longitude = excluded.longitude,
                        use_count = excluded.use_count,
                        last_used = excluded.last_used,
                        added_by = excluded.added_by;
                    """,
                    self._params(location),
                )
        except sqlite3.Error as exc:
            raise LearnedStoreError(f"Learned store write failed: {exc}") from exc
        return location

    def delete(self, alias: str) -> bool:
        try:
            with closing(self._connect()) as conn:
                cursor = conn.execute(
                    "DELETE FROM LearnedLocations WHERE alias = ?;",
                    (normalize_alias(alias),),
                )
                return cursor.rowcount > 0
        except sqlite3.Error as exc:
            raise LearnedStoreError(f"Learned store delete failed: {exc}") from exc

    def list_all(self) -> list[LearnedLocation]:
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM LearnedLocations ORDER BY use_count DESC, alias ASC;"
                ).fetchall()
        except sqlite3.Error as exc:
            raise LearnedStoreError(f"Learned store listing failed: {exc}") from exc
        return [self._row_to_location(row) for row in rows]

    def count(self) -> int:
        try:
            with closing(self._connect()) as conn:
                row = conn.execute("SELECT COUNT(*) AS count FROM LearnedLocations;").fetchone()
        except sqlite3.Error as exc:
            raise LearnedStoreError(f"Learned store count failed: {exc}") from exc
        return int(row["count"])
