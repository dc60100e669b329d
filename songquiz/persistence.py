from __future__ import annotations

import dataclasses
import json
import logging
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path

from .results import ScoreDetail, ScoreSubmission, validate_submission
from .scoring import ChallengeScore, Rank

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

DEFAULT_RANKING_LIMIT = 100
MAX_RANKING_LIMIT = 1000

# A finished challenge is kept for the result screen only briefly.
PENDING_RESULT_TTL_S = 5 * 60


@dataclass(frozen=True, slots=True)
class RankingEntry:
    id: int
    username: str
    score: int
    rank: Rank
    created_at_utc: str
    details: tuple[ScoreDetail, ...] = ()


@dataclass(frozen=True, slots=True)
class PendingResult:
    total_score: int
    scores: tuple[ChallengeScore, ...]
    saved_at_s: float
    is_registered: bool = False


def open_db(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    _migrate(conn)
    return conn


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS ranking (
                id INTEGER PRIMARY KEY,
                username TEXT NOT NULL,
                score INTEGER NOT NULL CHECK (score >= 0),
                rank TEXT NOT NULL,
                details TEXT,
                created_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_ranking_score ON ranking(score DESC, created_at_utc ASC);"
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS pending_result (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                total_score INTEGER NOT NULL,
                scores TEXT NOT NULL,
                saved_at_s REAL NOT NULL,
                is_registered INTEGER NOT NULL DEFAULT 0
            );
            """
        )
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")


def record_submission(*, db_path: Path, submission: ScoreSubmission) -> int:
    """Validate and insert a leaderboard entry. Returns the new row id."""

    sub = validate_submission(submission)
    details = json.dumps([d.to_dict() for d in sub.details], ensure_ascii=False) if sub.details else None

    conn = open_db(db_path)
    try:
        with conn:
            cur = conn.execute(
                "INSERT INTO ranking(username, score, rank, details, created_at_utc) VALUES (?, ?, ?, ?, ?)",
                (sub.username, int(sub.score), sub.rank.value, details, _utc_now_iso()),
            )
            entry_id = int(cur.lastrowid)
    finally:
        conn.close()

    logger.info("Recorded %s: %d (%s)", sub.username, sub.score, sub.rank.value)
    return entry_id


def list_rankings(*, db_path: Path, limit: int = DEFAULT_RANKING_LIMIT) -> list[RankingEntry]:
    """Leaderboard, best score first; equal scores keep registration order."""

    if not (1 <= limit <= MAX_RANKING_LIMIT):
        raise ValueError(f"limit must be in [1, {MAX_RANKING_LIMIT}]")

    conn = open_db(db_path)
    try:
        rows = conn.execute(
            """
            SELECT id, username, score, rank, created_at_utc, details
            FROM ranking
            ORDER BY score DESC, created_at_utc ASC, id ASC
            LIMIT ?
            """,
            (int(limit),),
        ).fetchall()
    finally:
        conn.close()

    return [
        RankingEntry(
            id=int(r[0]),
            username=str(r[1]),
            score=int(r[2]),
            rank=Rank(r[3]),
            created_at_utc=str(r[4]),
            details=tuple(ScoreDetail.from_dict(d) for d in json.loads(r[5])) if r[5] else (),
        )
        for r in rows
    ]


def save_pending_result(
    *,
    db_path: Path,
    total_score: int,
    scores: tuple[ChallengeScore, ...] | list[ChallengeScore],
    now_s: float | None = None,
) -> None:
    """Keep a finished challenge around for the result screen (one slot)."""

    saved_at = time.time() if now_s is None else float(now_s)
    payload = json.dumps([dataclasses.asdict(s) for s in scores])

    conn = open_db(db_path)
    try:
        with conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO pending_result(id, total_score, scores, saved_at_s, is_registered)
                VALUES (1, ?, ?, ?, 0)
                """,
                (int(total_score), payload, saved_at),
            )
    finally:
        conn.close()


def load_pending_result(*, db_path: Path, now_s: float | None = None) -> PendingResult | None:
    """Return the pending result, or None if there is none or it has expired."""

    now = time.time() if now_s is None else float(now_s)

    conn = open_db(db_path)
    try:
        row = conn.execute(
            "SELECT total_score, scores, saved_at_s, is_registered FROM pending_result WHERE id = 1"
        ).fetchone()
        if row is None:
            return None
        if float(row[2]) < now - PENDING_RESULT_TTL_S:
            logger.debug("Discarding expired pending result saved at %.0f", row[2])
            with conn:
                conn.execute("DELETE FROM pending_result")
            return None
    finally:
        conn.close()

    return PendingResult(
        total_score=int(row[0]),
        scores=tuple(ChallengeScore(**s) for s in json.loads(row[1])),
        saved_at_s=float(row[2]),
        is_registered=bool(row[3]),
    )


def mark_pending_registered(*, db_path: Path) -> None:
    conn = open_db(db_path)
    try:
        with conn:
            conn.execute("UPDATE pending_result SET is_registered = 1 WHERE id = 1")
    finally:
        conn.close()


def clear_pending_result(*, db_path: Path) -> None:
    conn = open_db(db_path)
    try:
        with conn:
            conn.execute("DELETE FROM pending_result")
    finally:
        conn.close()
