from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path

from volunteer_match.models import MatchResult
from volunteer_match.utils.datetime_utils import parse_datetime_utc, to_utc

from .base import MatchRecord, MatchStore


class SQLiteMatchStore(MatchStore):
    def __init__(self, db_path: str) -> None:
        self.db_path = Path(db_path)

    def init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS matches (
                    volunteer_id TEXT NOT NULL,
                    opportunity_id TEXT NOT NULL,
                    computed_at TEXT NOT NULL,
                    score REAL NOT NULL,
                    reasons TEXT NOT NULL,
                    saved_at TEXT NOT NULL,
                    PRIMARY KEY (volunteer_id, opportunity_id, computed_at)
                )
                """
            )
            connection.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_matches_volunteer_saved_at
                ON matches (volunteer_id, saved_at)
                """
            )
            connection.commit()

    def save(self, result: MatchResult) -> None:
        now = datetime.now(timezone.utc).isoformat()
        reasons = json.dumps(result.to_dict()["reasons"], ensure_ascii=False)

        with closing(self._connect()) as connection:
            connection.execute(
                """
                INSERT INTO matches (
                    volunteer_id,
                    opportunity_id,
                    computed_at,
                    score,
                    reasons,
                    saved_at
                )
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(volunteer_id, opportunity_id, computed_at) DO UPDATE SET
                    score = excluded.score,
                    reasons = excluded.reasons,
                    saved_at = excluded.saved_at
                """,
                (
                    result.volunteer_id,
                    result.opportunity_id,
                    to_utc(result.computed_at).isoformat(),
                    result.score,
                    reasons,
                    now,
                ),
            )
            connection.commit()

    def history(self, volunteer_id: str, limit: int = 50) -> list[MatchRecord]:
        with closing(self._connect()) as connection:
            rows = connection.execute(
                """
                SELECT volunteer_id, opportunity_id, computed_at, score, reasons, saved_at
                FROM matches
                WHERE volunteer_id = ?
                ORDER BY saved_at DESC, score DESC, opportunity_id ASC
                LIMIT ?
                """,
                (volunteer_id, limit),
            ).fetchall()

        return [
            MatchRecord(
                volunteer_id=row["volunteer_id"],
                opportunity_id=row["opportunity_id"],
                score=row["score"],
                reasons=json.loads(row["reasons"]),
                computed_at=parse_datetime_utc(row["computed_at"]) or datetime.now(timezone.utc),
                saved_at=parse_datetime_utc(row["saved_at"]) or datetime.now(timezone.utc),
            )
            for row in rows
        ]

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.db_path)
        connection.row_factory = sqlite3.Row
        return connection
