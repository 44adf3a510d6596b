# src/storage/watch_db.py

"""SQLite-backed store for watches and their price snapshots."""

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.errors import StorageFailure
from src.models.price_snapshot import PriceSnapshot, PriceStatistics
from src.models.watch import Watch

logger = logging.getLogger("price_watch.storage")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS watches (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    url          TEXT    NOT NULL,
    target_price REAL    NOT NULL CHECK (target_price > 0),
    email        TEXT    NOT NULL,
    platform     TEXT    NOT NULL,
    last_price   REAL,
    last_checked TEXT,
    is_active    INTEGER NOT NULL DEFAULT 1,
    created_at   TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS price_snapshots (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    watch_id    INTEGER NOT NULL
                REFERENCES watches(id) ON DELETE CASCADE,
    price       REAL    NOT NULL CHECK (price >= 0),
    observed_at TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_watches_active
    ON watches(is_active);
CREATE INDEX IF NOT EXISTS idx_snapshots_watch
    ON price_snapshots(watch_id, id);
"""

_WATCH_COLUMNS = (
    "id, url, target_price, email, platform, last_price, "
    "last_checked, is_active, created_at"
)


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_watch(row: tuple[Any, ...]) -> Watch:
    return Watch(
        id=row[0],
        url=row[1],
        target_price=row[2],
        email=row[3],
        platform=row[4],
        last_price=row[5],
        last_checked=_parse_ts(row[6]),
        active=bool(row[7]),
        created_at=datetime.fromisoformat(row[8]),
    )


def _set_observation(
    cur: sqlite3.Cursor, watch_id: int, price: float, observed_at: datetime,
) -> None:
    cur.execute(
        "UPDATE watches SET last_price = ?, last_checked = ? WHERE id = ?",
        (price, observed_at.isoformat(), watch_id),
    )
    if cur.rowcount == 0:
        raise StorageFailure(f"Watch {watch_id} does not exist")


def _insert_snapshot(
    cur: sqlite3.Cursor, watch_id: int, price: float, observed_at: datetime,
) -> PriceSnapshot:
    cur.execute(
        "INSERT INTO price_snapshots (watch_id, price, observed_at) "
        "VALUES (?, ?, ?)",
        (watch_id, price, observed_at.isoformat()),
    )
    return PriceSnapshot(
        id=int(cur.lastrowid or 0),
        watch_id=watch_id,
        price=price,
        observed_at=observed_at,
    )


class WatchDB:
    """SQLite implementation of the ``WatchStore`` contract.

    Also carries the management operations (create, list, deactivate,
    purge) used by the CLI.  One connection is shared between the
    monitor worker and the caller thread, guarded by a lock.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        path = db_path or Settings.DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(
                str(path), check_same_thread=False,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StorageFailure(f"Cannot open {path}: {exc}") from exc
        logger.debug("WatchDB opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        """Serialized cursor; commits on success, wraps sqlite errors."""
        with self._lock:
            try:
                with self._conn:
                    yield self._conn.cursor()
            except sqlite3.Error as exc:
                logger.error("SQLite error: %s", exc, exc_info=True)
                raise StorageFailure(str(exc)) from exc

    # ── Watch management ─────────────────────────────────

    def add_watch(
        self,
        url: str,
        target_price: float,
        email: str,
        platform: str,
    ) -> Watch:
        """Create an active watch and return it."""
        if target_price <= 0:
            raise ValueError("target_price must be positive")
        now = datetime.now()
        with self._transaction() as cur:
            cur.execute(
                "INSERT INTO watches "
                "(url, target_price, email, platform, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (url, target_price, email, platform, now.isoformat()),
            )
            watch_id = cur.lastrowid
        logger.info("Created watch %s for %s", watch_id, url)
        return Watch(
            id=int(watch_id or 0),
            url=url,
            target_price=target_price,
            email=email,
            platform=platform,
            created_at=now,
        )

    def get_watch(self, watch_id: int) -> Watch | None:
        """Return a watch by id, active or not."""
        with self._transaction() as cur:
            row = cur.execute(
                f"SELECT {_WATCH_COLUMNS} FROM watches WHERE id = ?",
                (watch_id,),
            ).fetchone()
        return _row_to_watch(row) if row else None

    def list_watches(self, include_inactive: bool = False) -> list[Watch]:
        """Return watches ordered by id."""
        query = f"SELECT {_WATCH_COLUMNS} FROM watches"
        if not include_inactive:
            query += " WHERE is_active = 1"
        with self._transaction() as cur:
            rows = cur.execute(query + " ORDER BY id").fetchall()
        return [_row_to_watch(r) for r in rows]

    def deactivate_watch(self, watch_id: int) -> bool:
        """Soft-delete a watch; its history is kept."""
        with self._transaction() as cur:
            cur.execute(
                "UPDATE watches SET is_active = 0 WHERE id = ?",
                (watch_id,),
            )
            changed = cur.rowcount > 0
        if changed:
            logger.info("Deactivated watch %d", watch_id)
        return changed

    def purge_watch(self, watch_id: int) -> bool:
        """Permanently delete a watch and, by cascade, its snapshots."""
        with self._transaction() as cur:
            cur.execute("DELETE FROM watches WHERE id = ?", (watch_id,))
            changed = cur.rowcount > 0
        if changed:
            logger.info("Purged watch %d", watch_id)
        return changed

    # ── WatchStore contract ──────────────────────────────

    def load_active_watches(self) -> list[Watch]:
        """Return every active watch, oldest first."""
        return self.list_watches(include_inactive=False)

    def update_watch_observation(
        self, watch_id: int, price: float, observed_at: datetime,
    ) -> None:
        """Record the latest observed price and check time."""
        with self._transaction() as cur:
            _set_observation(cur, watch_id, price, observed_at)

    def append_snapshot(
        self, watch_id: int, price: float, observed_at: datetime,
    ) -> PriceSnapshot:
        """Insert one immutable price snapshot."""
        with self._transaction() as cur:
            return _insert_snapshot(cur, watch_id, price, observed_at)

    def record_observation(
        self, watch_id: int, price: float, observed_at: datetime,
    ) -> PriceSnapshot:
        """Update the watch and append its snapshot in one transaction.

        If either statement fails both are rolled back, so ``last_price``
        always matches the newest stored snapshot.
        """
        with self._transaction() as cur:
            _set_observation(cur, watch_id, price, observed_at)
            return _insert_snapshot(cur, watch_id, price, observed_at)

    def load_recent_snapshots(
        self, watch_id: int, limit: int,
    ) -> list[PriceSnapshot]:
        """Return up to *limit* snapshots for a watch, newest first."""
        with self._transaction() as cur:
            rows = cur.execute(
                "SELECT id, watch_id, price, observed_at "
                "FROM price_snapshots WHERE watch_id = ? "
                "ORDER BY id DESC LIMIT ?",
                (watch_id, limit),
            ).fetchall()
        return [
            PriceSnapshot(
                id=r[0],
                watch_id=r[1],
                price=r[2],
                observed_at=datetime.fromisoformat(r[3]),
            )
            for r in rows
        ]

    def load_aggregate(self, watch_id: int) -> PriceStatistics:
        """Recompute min / max / mean / count from the stored rows."""
        with self._transaction() as cur:
            row = cur.execute(
                "SELECT COUNT(id), MIN(price), MAX(price), AVG(price) "
                "FROM price_snapshots WHERE watch_id = ?",
                (watch_id,),
            ).fetchone()
        if row is None or row[0] == 0:
            return PriceStatistics()
        return PriceStatistics(
            count=row[0],
            minimum=row[1],
            maximum=row[2],
            mean=round(row[3], 2),
        )
