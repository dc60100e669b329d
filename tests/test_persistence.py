from __future__ import annotations

from pathlib import Path

import pytest

from songquiz.persistence import (
    PENDING_RESULT_TTL_S,
    SCHEMA_VERSION,
    clear_pending_result,
    list_rankings,
    load_pending_result,
    mark_pending_registered,
    open_db,
    record_submission,
    save_pending_result,
)
from songquiz.results import InvalidSubmission, ScoreDetail, ScoreSubmission
from songquiz.scoring import Rank, score_question


def test_schema_is_versioned(tmp_path: Path) -> None:
    conn = open_db(tmp_path / "q.db")
    try:
        assert conn.execute("PRAGMA user_version;").fetchone()[0] == SCHEMA_VERSION
    finally:
        conn.close()
    # Re-opening an up-to-date database is a no-op.
    open_db(tmp_path / "q.db").close()


def test_rankings_order_by_score_then_registration(tmp_path: Path) -> None:
    db = tmp_path / "q.db"
    record_submission(db_path=db, submission=ScoreSubmission("first", 9000, Rank.B))
    record_submission(db_path=db, submission=ScoreSubmission("top", 15600, Rank.SS))
    record_submission(db_path=db, submission=ScoreSubmission("second", 9000, Rank.B))
    record_submission(db_path=db, submission=ScoreSubmission("low", 100, Rank.F))

    entries = list_rankings(db_path=db)
    assert [e.username for e in entries] == ["top", "first", "second", "low"]
    assert entries[0].rank is Rank.SS
    assert [e.username for e in list_rankings(db_path=db, limit=2)] == ["top", "first"]


def test_details_round_trip_and_username_is_trimmed(tmp_path: Path) -> None:
    db = tmp_path / "q.db"
    detail = ScoreDetail("t1", 4.2, 1.5, False, "夜に駆ける", "THE BOOK", "YOASOBI")
    record_submission(db_path=db, submission=ScoreSubmission("  kana ", 1500, Rank.F, (detail,)))
    (entry,) = list_rankings(db_path=db)
    assert entry.username == "kana"
    assert entry.details == (detail,)
    assert entry.created_at_utc.endswith("Z")


def test_invalid_submission_is_not_stored(tmp_path: Path) -> None:
    db = tmp_path / "q.db"
    with pytest.raises(InvalidSubmission):
        record_submission(db_path=db, submission=ScoreSubmission("", 10, Rank.F))
    assert list_rankings(db_path=db) == []


@pytest.mark.parametrize("score", [9999.9, float("nan")])
def test_fractional_score_is_not_stored(tmp_path: Path, score: float) -> None:
    db = tmp_path / "q.db"
    with pytest.raises(InvalidSubmission):
        record_submission(db_path=db, submission=ScoreSubmission("ann", score, Rank.B))  # type: ignore[arg-type]
    assert list_rankings(db_path=db) == []


@pytest.mark.parametrize("limit", [0, 1001])
def test_limit_bounds(tmp_path: Path, limit: int) -> None:
    with pytest.raises(ValueError):
        list_rankings(db_path=tmp_path / "q.db", limit=limit)


def test_pending_result_lifecycle(tmp_path: Path) -> None:
    db = tmp_path / "q.db"
    assert load_pending_result(db_path=db, now_s=0.0) is None

    scores = (score_question(0, 5, 1, False, track_id="a"), score_question(1, 40, 5, True, track_id="b"))
    save_pending_result(db_path=db, total_score=1700, scores=scores, now_s=1000.0)

    pending = load_pending_result(db_path=db, now_s=1010.0)
    assert pending is not None
    assert pending.total_score == 1700
    assert pending.scores == scores
    assert not pending.is_registered

    mark_pending_registered(db_path=db)
    assert load_pending_result(db_path=db, now_s=1010.0).is_registered

    clear_pending_result(db_path=db)
    assert load_pending_result(db_path=db, now_s=1010.0) is None


def test_pending_result_expires(tmp_path: Path) -> None:
    db = tmp_path / "q.db"
    save_pending_result(db_path=db, total_score=5, scores=[], now_s=0.0)
    assert load_pending_result(db_path=db, now_s=PENDING_RESULT_TTL_S) is not None
    assert load_pending_result(db_path=db, now_s=PENDING_RESULT_TTL_S + 1) is None
    # Expired rows are dropped, not just hidden.
    assert load_pending_result(db_path=db, now_s=0.0) is None


def test_new_pending_result_replaces_old(tmp_path: Path) -> None:
    db = tmp_path / "q.db"
    save_pending_result(db_path=db, total_score=1, scores=[], now_s=10.0)
    mark_pending_registered(db_path=db)
    save_pending_result(db_path=db, total_score=2, scores=[], now_s=20.0)
    pending = load_pending_result(db_path=db, now_s=20.0)
    assert pending.total_score == 2
    assert not pending.is_registered
