"""Tests for the challenge scoring tables, aggregation and ranking."""

from __future__ import annotations

import pytest

from songquiz.clock import elapsed_seconds
from songquiz.scoring import (
    PERMITTED_CLIP_DURATIONS,
    Rank,
    RankingScheme,
    ScoringRules,
    aggregate_score,
    clip_duration_bonus,
    max_session_score,
    message_for,
    rank_for,
    score_question,
    time_bonus,
)


def test_plain_correct_answer() -> None:
    s = score_question(0, 20, 2, False)
    assert s.base_score == 1000
    assert s.time_bonus == 0
    assert s.clip_duration_bonus == 100
    assert s.reveal_penalty == 0
    assert s.total_score == 1100


def test_reveal_penalty() -> None:
    s = score_question(0, 20, 2, True)
    assert s.reveal_penalty == -1000
    assert s.total_score == 100


def test_total_is_clamped_at_zero() -> None:
    s = score_question(0, 90, 5, True)
    assert s.time_bonus == -300
    assert s.clip_duration_bonus == -100
    assert s.total_score == 0


def test_record_carries_inputs() -> None:
    s = score_question(3, 7.25, 1.5, False, track_id="t9")
    assert (s.question_index, s.track_id, s.elapsed_s, s.clip_duration_s, s.was_revealed) == (
        3,
        "t9",
        7.25,
        1.5,
        False,
    )
    assert s.total_score == 1000 + 200 + 300


@pytest.mark.parametrize(
    ("elapsed", "bonus"),
    [
        (0.0, 200),
        (10.0, 200),
        (10.001, 100),
        (15.0, 100),
        (15.5, 0),
        (20.0, 0),
        (20.01, -100),
        (30.0, -100),
        (30.01, -300),
        (600.0, -300),
    ],
)
def test_time_tiers_are_inclusive_upper_bounds(elapsed: float, bonus: int) -> None:
    assert time_bonus(elapsed) == bonus


@pytest.mark.parametrize(
    ("clip", "bonus"),
    [(1, 500), (1.0, 500), (1.5, 300), (2, 100), (3, 0), (5, -100), (4, 0), (0.5, 0), (10, 0), (-1, 0)],
)
def test_clip_bonus_by_exact_length(clip: float, bonus: int) -> None:
    assert clip_duration_bonus(clip) == bonus


def test_permitted_clip_lengths_all_have_table_entries() -> None:
    listed = {d for d, _ in ScoringRules().clip_duration_bonuses}
    assert listed == set(PERMITTED_CLIP_DURATIONS)


def test_custom_rules_flow_through() -> None:
    rules = ScoringRules(base_score=500, reveal_penalty=-200)
    s = score_question(0, 5, 3, True, rules=rules)
    assert s.base_score == 500
    assert s.total_score == 500 + 200 + 0 - 200


def test_aggregate() -> None:
    rows = [
        score_question(0, 5, 1, False),  # 1700
        score_question(1, 12, 1.5, False),  # 1400
        score_question(2, 20, 2, True),  # 100
    ]
    assert [r.total_score for r in rows] == [1700, 1400, 100]
    assert aggregate_score(rows) == 3200
    assert aggregate_score([]) == 0


@pytest.mark.parametrize(
    ("total", "rank"),
    [
        (17000, Rank.SS),
        (15500, Rank.SS),
        (15499, Rank.S),
        (14000, Rank.S),
        (13999, Rank.A),
        (12500, Rank.A),
        (12499, Rank.B),
        (9000, Rank.B),
        (8999, Rank.C),
        (7000, Rank.C),
        (6999, Rank.D),
        (5000, Rank.D),
        (4999, Rank.F),
        (0, Rank.F),
    ],
)
def test_fixed_rank_thresholds(total: int, rank: Rank) -> None:
    assert rank_for(total) is rank


@pytest.mark.parametrize(
    ("total", "rank"),
    [
        (9500, Rank.S),
        (9000, Rank.S),
        (8500, Rank.A),
        (8000, Rank.A),
        (7000, Rank.B),
        (6500, Rank.C),
        (6000, Rank.C),
        (5000, Rank.D),
        (4500, Rank.F),
    ],
)
def test_percentage_scheme(total: int, rank: Rank) -> None:
    assert rank_for(total, scheme=RankingScheme.PERCENTAGE, max_score=10000) is rank


def test_percentage_scheme_requires_max_score() -> None:
    with pytest.raises(ValueError):
        rank_for(5000, scheme=RankingScheme.PERCENTAGE)
    with pytest.raises(ValueError):
        rank_for(5000, scheme=RankingScheme.PERCENTAGE, max_score=0)


def test_max_session_score() -> None:
    assert max_session_score(10) == 10 * (1000 + 200 + 500)


def test_messages_are_distinct_and_non_empty() -> None:
    messages = [message_for(r) for r in Rank]
    assert all(messages)
    assert len(set(messages)) == len(messages)
    assert message_for("SS") == message_for(Rank.SS)


def test_elapsed_seconds_from_millisecond_marks() -> None:
    assert elapsed_seconds(1000, 3000) == 2
    assert elapsed_seconds(1000, 1000) == 0
    assert elapsed_seconds(0, 1500) == pytest.approx(1.5)
