"""SQLite store for recently opened reports."""
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 8


@dataclass
class ScanHistoryEntry:
    """One remembered report."""
    slug: str
    domain: str
    score: Optional[float] = None
    label: Optional[str] = None
    scanned_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["ScanHistoryEntry"]:
        """Build an entry, or None when slug/domain are missing."""
        slug = data.get("slug")
        domain = data.get("domain")
        if not isinstance(slug, str) or not slug or not isinstance(domain, str) or not domain:
            return None
        score = data.get("score")
        label = data.get("label")
        scanned_at = data.get("scanned_at")
        return cls(
            slug=slug,
            domain=domain,
            score=score if isinstance(score, (int, float)) and not isinstance(score, bool) else None,
            label=label if isinstance(label, str) else None,
            scanned_at=scanned_at if isinstance(scanned_at, str) else datetime.now().isoformat(),
        )


class ScanHistory:
    """Most recent reports first, one row per slug, at most ``limit`` rows."""

    def __init__(self, db_path: str = "scan_history.db", limit: int = HISTORY_LIMIT):
        self.db_path = Path(db_path)
        self.limit = limit
        self._init_db()

    @contextmanager
    def _conn(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self):
        """Initialize database schema."""
        if self.db_path.parent and not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._conn() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS history (
                    slug TEXT PRIMARY KEY,
                    domain TEXT NOT NULL,
                    score REAL,
                    label TEXT,
                    scanned_at TEXT NOT NULL,
                    position INTEGER NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_history_position ON history(position);
            """)

    def add(self, entry: Dict[str, Any]) -> List[ScanHistoryEntry]:
        """Insert or move an entry to the front, then trim. Returns the new list."""
        normalized = ScanHistoryEntry.from_dict(entry)
        if normalized is None:
            logger.debug(f"Ignoring invalid history entry: {entry!r}")
            return self.read()

        with self._conn() as conn:
            row = conn.execute("SELECT MAX(position) AS top FROM history").fetchone()
            position = (row["top"] or 0) + 1
            conn.execute(
                """INSERT INTO history (slug, domain, score, label, scanned_at, position)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(slug) DO UPDATE SET
                       domain = excluded.domain, score = excluded.score,
                       label = excluded.label, scanned_at = excluded.scanned_at,
                       position = excluded.position""",
                (normalized.slug, normalized.domain, normalized.score,
                 normalized.label, normalized.scanned_at, position)
            )
            conn.execute(
                """DELETE FROM history WHERE slug NOT IN (
                       SELECT slug FROM history ORDER BY position DESC LIMIT ?
                   )""",
                (self.limit,)
            )
        return self.read()

    def read(self) -> List[ScanHistoryEntry]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM history ORDER BY position DESC LIMIT ?", (self.limit,)
            ).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def clear(self) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM history")

    def _row_to_entry(self, row) -> ScanHistoryEntry:
        return ScanHistoryEntry(
            slug=row["slug"], domain=row["domain"], score=row["score"],
            label=row["label"], scanned_at=row["scanned_at"]
        )
