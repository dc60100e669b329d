"""Challenge-mode scoring.

Each answered or revealed question is worth a fixed base score adjusted by how
quickly the title was found, how short a clip the player chose to hear and
whether they gave up and revealed the answer::

    total = max(0, base + time_bonus + clip_duration_bonus + reveal_penalty)

A 10-question session total is then mapped onto a rank. Two ranking schemes
exist; the fixed absolute thresholds are the current one. The older
percentage-of-maximum scheme is kept only as an explicitly selected
``RankingScheme.PERCENTAGE`` and is never inferred from the data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

PERMITTED_CLIP_DURATIONS: tuple[float, ...] = (1, 1.5, 2, 3, 5)


class Rank(StrEnum):
    SS = "SS"
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class RankingScheme(StrEnum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


@dataclass(frozen=True, slots=True)
class ScoringRules:
    base_score: int = 1000
    # (max elapsed seconds, bonus), checked in order; inclusive upper bounds.
    time_tiers: tuple[tuple[float, int], ...] = (
        (10.0, 200),
        (15.0, 100),
        (20.0, 0),
        (30.0, -100),
    )
    overtime_bonus: int = -300
    # Exact clip length -> bonus. Lengths not listed earn nothing.
    clip_duration_bonuses: tuple[tuple[float, int], ...] = (
        (1, 500),
        (1.5, 300),
        (2, 100),
        (3, 0),
        (5, -100),
    )
    reveal_penalty: int = -1000


DEFAULT_RULES = ScoringRules()

# Lower bounds, inclusive, highest tier first.
FIXED_RANK_THRESHOLDS: tuple[tuple[int, Rank], ...] = (
    (15500, Rank.SS),
    (14000, Rank.S),
    (12500, Rank.A),
    (9000, Rank.B),
    (7000, Rank.C),
    (5000, Rank.D),
)

PERCENTAGE_RANK_THRESHOLDS: tuple[tuple[float, Rank], ...] = (
    (0.9, Rank.S),
    (0.8, Rank.A),
    (0.7, Rank.B),
    (0.6, Rank.C),
    (0.5, Rank.D),
)

RANK_MESSAGES: dict[Rank, str] = {
    Rank.SS: "Perfect! You have reached the realm of the gods!",
    Rank.S: "Amazing! You really know your music.",
    Rank.A: "Well done! Aim even higher next time.",
    Rank.B: "Almost there! A little more practice will get you further.",
    Rank.C: "Close! Brush up on the basics and try again.",
    Rank.D: "Not yet! Don't give up.",
    Rank.F: "Thanks for playing!",
}


@dataclass(frozen=True, slots=True)
class ChallengeScore:
    question_index: int
    track_id: str
    elapsed_s: float
    clip_duration_s: float
    was_revealed: bool
    base_score: int
    time_bonus: int
    clip_duration_bonus: int
    reveal_penalty: int
    total_score: int


def time_bonus(elapsed_s: float, rules: ScoringRules = DEFAULT_RULES) -> int:
    for limit_s, bonus in rules.time_tiers:
        if elapsed_s <= limit_s:
            return bonus
    return rules.overtime_bonus


def clip_duration_bonus(clip_duration_s: float, rules: ScoringRules = DEFAULT_RULES) -> int:
    # Unknown lengths score zero instead of raising so replayed sessions still load.
    for duration_s, bonus in rules.clip_duration_bonuses:
        if clip_duration_s == duration_s:
            return bonus
    return 0


def score_question(
    index: int,
    elapsed_s: float,
    clip_duration_s: float,
    was_revealed: bool,
    *,
    track_id: str = "",
    rules: ScoringRules | None = None,
) -> ChallengeScore:
    r = rules or DEFAULT_RULES

    t_bonus = time_bonus(elapsed_s, r)
    c_bonus = clip_duration_bonus(clip_duration_s, r)
    penalty = r.reveal_penalty if was_revealed else 0
    total = max(0, r.base_score + t_bonus + c_bonus + penalty)

    return ChallengeScore(
        question_index=int(index),
        track_id=track_id,
        elapsed_s=float(elapsed_s),
        clip_duration_s=float(clip_duration_s),
        was_revealed=bool(was_revealed),
        base_score=r.base_score,
        time_bonus=t_bonus,
        clip_duration_bonus=c_bonus,
        reveal_penalty=penalty,
        total_score=total,
    )


def aggregate_score(scores: Iterable[ChallengeScore]) -> int:
    return sum(s.total_score for s in scores)


def max_session_score(question_count: int, rules: ScoringRules = DEFAULT_RULES) -> int:
    """Best possible total: fastest tier and best clip bonus on every question."""

    best_time = max([b for _, b in rules.time_tiers] + [rules.overtime_bonus])
    best_clip = max([b for _, b in rules.clip_duration_bonuses] + [0])
    return question_count * (rules.base_score + best_time + best_clip)


def rank_for(
    total_score: float,
    *,
    scheme: RankingScheme = RankingScheme.FIXED,
    max_score: float | None = None,
) -> Rank:
    if scheme is RankingScheme.PERCENTAGE:
        if max_score is None or max_score <= 0:
            raise ValueError("percentage ranking needs a positive max_score")
        ratio = total_score / max_score
        for threshold, rank in PERCENTAGE_RANK_THRESHOLDS:
            if ratio >= threshold:
                return rank
        return Rank.F

    for threshold, rank in FIXED_RANK_THRESHOLDS:
        if total_score >= threshold:
            return rank
    return Rank.F


def message_for(rank: Rank) -> str:
    return RANK_MESSAGES[Rank(rank)]
