from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .answers import is_title_match
from .catalog import Catalog
from .clock import Clock, elapsed_seconds
from .questions import QuizQuestion, generate_from_albums, generate_from_all
from .rng import RandomSource
from .scoring import (
    ChallengeScore,
    Rank,
    RankingScheme,
    ScoringRules,
    aggregate_score,
    max_session_score,
    message_for,
    rank_for,
    score_question,
)

logger = logging.getLogger(__name__)


class SessionStateError(RuntimeError):
    """An operation was attempted in a phase that does not allow it."""


class Phase(str, Enum):
    QUESTION = "question"
    ANSWERED = "answered"
    REVEALED = "revealed"
    RESULTS = "results"


@dataclass(frozen=True, slots=True)
class ChallengeConfig:
    question_count: int = 10
    default_clip_duration_s: float = 1.0
    rules: ScoringRules = field(default_factory=ScoringRules)
    ranking_scheme: RankingScheme = RankingScheme.FIXED


@dataclass(frozen=True, slots=True)
class ClipRequest:
    """What the player should play: ``duration_s`` seconds from ``start_s``."""

    media_url: str
    start_s: float
    duration_s: float


@dataclass(frozen=True, slots=True)
class ChallengeSnapshot:
    """View model for the UI (pure data)."""

    phase: Phase
    question_number: int  # 1-based
    question_count: int
    clip_duration_s: float
    elapsed_s: float | None
    total_score: int
    last_answer: str
    last_score: ChallengeScore | None
    correct_title: str | None  # only once answered or revealed


@dataclass(frozen=True, slots=True)
class ChallengeSummary:
    total_score: int
    rank: Rank
    message: str
    answered: int
    revealed: int
    question_count: int
    scores: tuple[ChallengeScore, ...]


class ChallengeSession:
    """Time-attack run: question -> answered|revealed -> next ... -> results.

    - Time is entirely via the injected Clock.
    - Scores are appended once per closed question and never edited.
    """

    def __init__(
        self,
        *,
        questions: Iterable[QuizQuestion],
        clock: Clock,
        config: ChallengeConfig | None = None,
    ) -> None:
        self._questions = tuple(questions)
        if not self._questions:
            raise ValueError("a challenge needs at least one question")

        self._cfg = config or ChallengeConfig()
        self._clock = clock

        self._phase = Phase.QUESTION
        self._index = 0
        self._opened_at = self._clock.now()
        self._clip_duration_s = float(self._cfg.default_clip_duration_s)
        self._scores: list[ChallengeScore] = []
        self._last_answer = ""

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def config(self) -> ChallengeConfig:
        return self._cfg

    @property
    def questions(self) -> tuple[QuizQuestion, ...]:
        return self._questions

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_question(self) -> QuizQuestion | None:
        if self._phase is Phase.RESULTS:
            return None
        return self._questions[self._index]

    @property
    def scores(self) -> tuple[ChallengeScore, ...]:
        return tuple(self._scores)

    @property
    def total_score(self) -> int:
        return aggregate_score(self._scores)

    @property
    def is_finished(self) -> bool:
        return self._phase is Phase.RESULTS

    @property
    def is_last_question(self) -> bool:
        return self._index == len(self._questions) - 1

    def current_elapsed_s(self) -> float | None:
        if self._phase is not Phase.QUESTION:
            return None
        return elapsed_seconds(self._opened_at, self._clock.now())

    def play_clip(self, duration_s: float | None = None) -> ClipRequest:
        """Choose (optionally) a clip length and get what to play.

        The length last requested here is the one the question is scored with.
        """

        if self._phase is not Phase.QUESTION:
            raise SessionStateError(f"cannot play a clip during {self._phase.value}")
        if duration_s is not None:
            self._clip_duration_s = float(duration_s)
        q = self._questions[self._index]
        return ClipRequest(
            media_url=q.track.media_url,
            start_s=q.start_time_s,
            duration_s=self._clip_duration_s,
        )

    def submit_answer(self, raw: str) -> bool:
        """Submit a typed title. Returns True if it was correct."""

        if self._phase is not Phase.QUESTION:
            return False
        if raw.strip() == "":
            return False

        self._last_answer = raw
        q = self._questions[self._index]
        if not is_title_match(raw, q.track.title):
            logger.debug("Q%d: wrong guess %r", self._index + 1, raw)
            return False

        self._close_question(was_revealed=False)
        self._phase = Phase.ANSWERED
        return True

    def reveal_answer(self) -> ChallengeScore:
        if self._phase is not Phase.QUESTION:
            raise SessionStateError(f"cannot reveal during {self._phase.value}")
        score = self._close_question(was_revealed=True)
        self._phase = Phase.REVEALED
        return score

    def next_question(self) -> None:
        if self._phase not in (Phase.ANSWERED, Phase.REVEALED):
            return
        if self.is_last_question:
            self._finish()
            return
        self._index += 1
        self._last_answer = ""
        self._opened_at = self._clock.now()
        self._phase = Phase.QUESTION

    def abandon(self) -> None:
        if self._phase is not Phase.RESULTS:
            logger.info("Challenge abandoned at question %d", self._index + 1)
            self._finish()

    def summary(self) -> ChallengeSummary:
        total = self.total_score
        if self._cfg.ranking_scheme is RankingScheme.PERCENTAGE:
            rank = rank_for(
                total,
                scheme=RankingScheme.PERCENTAGE,
                max_score=max_session_score(len(self._questions), self._cfg.rules),
            )
        else:
            rank = rank_for(total)
        return ChallengeSummary(
            total_score=total,
            rank=rank,
            message=message_for(rank),
            answered=sum(1 for s in self._scores if not s.was_revealed),
            revealed=sum(1 for s in self._scores if s.was_revealed),
            question_count=len(self._questions),
            scores=tuple(self._scores),
        )

    def snapshot(self) -> ChallengeSnapshot:
        q = self._questions[self._index]
        closed = self._phase in (Phase.ANSWERED, Phase.REVEALED)
        return ChallengeSnapshot(
            phase=self._phase,
            question_number=self._index + 1,
            question_count=len(self._questions),
            clip_duration_s=self._clip_duration_s,
            elapsed_s=self.current_elapsed_s(),
            total_score=self.total_score,
            last_answer=self._last_answer,
            last_score=self._scores[-1] if self._scores and closed else None,
            correct_title=q.track.title if closed else None,
        )

    def _close_question(self, *, was_revealed: bool) -> ChallengeScore:
        q = self._questions[self._index]
        elapsed = elapsed_seconds(self._opened_at, self._clock.now())
        score = score_question(
            self._index,
            elapsed,
            self._clip_duration_s,
            was_revealed,
            track_id=q.track.id,
            rules=self._cfg.rules,
        )
        self._scores.append(score)
        logger.debug(
            "Q%d scored %d (time %+d, clip %+d, reveal %+d) after %.2fs",
            self._index + 1,
            score.total_score,
            score.time_bonus,
            score.clip_duration_bonus,
            score.reveal_penalty,
            elapsed,
        )
        return score

    def _finish(self) -> None:
        self._phase = Phase.RESULTS
        logger.info("Challenge finished: %d points over %d questions", self.total_score, len(self._scores))


class FreeQuizSession:
    """Untimed, unscored run through a list of questions."""

    def __init__(self, questions: Iterable[QuizQuestion]) -> None:
        self._questions = tuple(questions)
        if not self._questions:
            raise ValueError("a quiz needs at least one question")
        self._index = 0
        self._revealed = False
        self._finished = False

    @property
    def questions(self) -> tuple[QuizQuestion, ...]:
        return self._questions

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_question(self) -> QuizQuestion | None:
        return None if self._finished else self._questions[self._index]

    @property
    def is_answer_revealed(self) -> bool:
        return self._revealed

    @property
    def is_last_question(self) -> bool:
        return self._index == len(self._questions) - 1

    @property
    def is_finished(self) -> bool:
        return self._finished

    def check_answer(self, raw: str) -> bool:
        q = self.current_question
        return q is not None and is_title_match(raw, q.track.title)

    def reveal_answer(self) -> str:
        q = self.current_question
        if q is None:
            raise SessionStateError("quiz is finished")
        self._revealed = True
        return q.track.title

    def next_question(self) -> None:
        if self._finished:
            return
        if self.is_last_question:
            self._finished = True
            return
        self._index += 1
        self._revealed = False


def generate_questions(
    catalog: Catalog,
    *,
    rng: RandomSource,
    count: int,
    album_ids: Iterable[str] | None = None,
) -> list[QuizQuestion]:
    if album_ids is None:
        return generate_from_all(catalog, count, rng=rng)
    return generate_from_albums(catalog, album_ids, count, rng=rng)


def build_challenge_session(
    catalog: Catalog,
    *,
    clock: Clock,
    rng: RandomSource,
    album_ids: Iterable[str] | None = None,
    config: ChallengeConfig | None = None,
) -> ChallengeSession:
    """Factory for a time-attack run over the whole catalog or some albums."""

    cfg = config or ChallengeConfig()
    questions = generate_questions(catalog, rng=rng, count=cfg.question_count, album_ids=album_ids)
    logger.info("Starting challenge with %d questions", len(questions))
    return ChallengeSession(questions=questions, clock=clock, config=cfg)


def build_free_session(
    catalog: Catalog,
    *,
    rng: RandomSource,
    album_ids: Iterable[str] | None = None,
    count: int = 10,
) -> FreeQuizSession:
    return FreeQuizSession(generate_questions(catalog, rng=rng, count=count, album_ids=album_ids))
