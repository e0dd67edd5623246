"""
SQLite store for anonymous evaluation statistics.

Only scores, durations and proposal types are kept: no transcript, no audio
and nothing that identifies the speaker.
"""

import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path

from pitchtrainer.models import (
    DurationAverage,
    EvaluationRecord,
    ProposalTypeCount,
    RecentEvaluation,
    Statistics,
)

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"

_SCHEMA = (
    """CREATE TABLE IF NOT EXISTS evaluations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        duration INTEGER NOT NULL,
        kpi_scores TEXT NOT NULL,
        word_count INTEGER,
        overall_score REAL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS proposals (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        evaluation_id INTEGER,
        type TEXT NOT NULL,
        count INTEGER DEFAULT 1,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY(evaluation_id) REFERENCES evaluations(id)
    )""",
)


class StorageError(Exception):
    """Raised when the statistics database cannot be used."""


class StatisticsStore:
    """
    Thread-safe wrapper around a single SQLite connection.

    Call `initialize()` before use and `close()` when done.
    """

    def __init__(self, database_path: str | Path):
        self._path = str(database_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def initialize(self) -> None:
        """
        Open the database and create tables if needed.

        Raises:
            StorageError: If the database cannot be opened.
        """
        if self._conn is not None:
            return

        if self._path != IN_MEMORY:
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)

        try:
            conn = sqlite3.connect(self._path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            with conn:
                for statement in _SCHEMA:
                    conn.execute(statement)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open statistics database '{self._path}': {e}") from e

        self._conn = conn
        logger.info("Connected to SQLite database: %s", self._path)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Database connection closed")

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Statistics database is not initialized")
        return self._conn

    def store_evaluation(self, record: EvaluationRecord) -> int:
        """
        Persist one evaluation and its proposal-type counts.

        Returns:
            The new evaluation row id.
        """
        counts: dict[str, int] = {}
        for proposal in record.proposals:
            counts[proposal.type] = counts.get(proposal.type, 0) + 1

        with self._lock:
            conn = self._connection()
            with conn:
                cursor = conn.execute(
                    "INSERT INTO evaluations (timestamp, duration, kpi_scores, word_count, overall_score) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        record.timestamp.isoformat(),
                        record.duration,
                        json.dumps(record.kpi_scores),
                        record.word_count,
                        record.overall_score,
                    ),
                )
                evaluation_id = cursor.lastrowid
                conn.executemany(
                    "INSERT INTO proposals (evaluation_id, type, count) VALUES (?, ?, ?)",
                    [(evaluation_id, ptype, count) for ptype, count in counts.items()],
                )

        logger.info(
            "Stored evaluation %s with %d proposals", evaluation_id, len(record.proposals)
        )
        return int(evaluation_id)

    def get_statistics(self, recent_limit: int = 10) -> Statistics:
        """Aggregate all stored evaluations."""
        with self._lock:
            conn = self._connection()
            total = conn.execute("SELECT COUNT(*) AS count FROM evaluations").fetchone()["count"]
            averages = conn.execute(
                "SELECT duration, COUNT(*) AS count, AVG(overall_score) AS avg_overall, "
                "AVG(word_count) AS avg_words FROM evaluations GROUP BY duration ORDER BY duration"
            ).fetchall()
            recent = conn.execute(
                "SELECT duration, overall_score, word_count, timestamp FROM evaluations "
                "ORDER BY id DESC LIMIT ?",
                (recent_limit,),
            ).fetchall()
            proposal_stats = conn.execute(
                "SELECT type, SUM(count) AS total_count FROM proposals "
                "GROUP BY type ORDER BY total_count DESC, type"
            ).fetchall()

        return Statistics(
            total_evaluations=total,
            averages_by_duration=tuple(
                DurationAverage(
                    duration=row["duration"],
                    count=row["count"],
                    avg_overall=row["avg_overall"],
                    avg_words=row["avg_words"],
                )
                for row in averages
            ),
            recent_evaluations=tuple(RecentEvaluation(**dict(row)) for row in recent),
            proposal_stats=tuple(ProposalTypeCount(**dict(row)) for row in proposal_stats),
            last_updated=datetime.now(timezone.utc),
        )

    def ping(self) -> bool:
        """Check the database answers a trivial query."""
        try:
            with self._lock:
                self._connection().execute("SELECT 1").fetchone()
        except (sqlite3.Error, StorageError) as e:
            logger.error("Database health check failed: %s", e)
            return False
        return True
