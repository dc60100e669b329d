from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .scoring import Rank
from .session import ChallengeSession

MAX_USERNAME_LENGTH = 20


class InvalidSubmission(ValueError):
    """A leaderboard submission failed validation."""


@dataclass(frozen=True, slots=True)
class ScoreDetail:
    """Per-question row stored alongside a leaderboard entry."""

    track_id: str
    answer_time_s: float
    playback_duration_s: float
    was_revealed: bool
    track_name: str = ""
    album_name: str = ""
    artist_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "trackId": self.track_id,
            "trackName": self.track_name,
            "albumName": self.album_name,
            "artistName": self.artist_name,
            "answerTime": self.answer_time_s,
            "playbackDuration": self.playback_duration_s,
            "wasRevealed": self.was_revealed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScoreDetail:
        return cls(
            track_id=str(data["trackId"]),
            answer_time_s=float(data["answerTime"]),
            playback_duration_s=float(data["playbackDuration"]),
            was_revealed=bool(data["wasRevealed"]),
            track_name=str(data.get("trackName", "")),
            album_name=str(data.get("albumName", "")),
            artist_name=str(data.get("artistName", "")),
        )


@dataclass(frozen=True, slots=True)
class ScoreSubmission:
    username: str
    score: int
    rank: Rank
    details: tuple[ScoreDetail, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "score": self.score,
            "rank": self.rank.value,
            "details": [d.to_dict() for d in self.details],
        }


def validate_submission(submission: ScoreSubmission) -> ScoreSubmission:
    """Return the submission with a trimmed username, or raise InvalidSubmission."""

    username = submission.username.strip()
    if not username:
        raise InvalidSubmission("username is empty")
    if len(username) > MAX_USERNAME_LENGTH:
        raise InvalidSubmission(f"username must be at most {MAX_USERNAME_LENGTH} characters")
    # Challenge totals are whole points; floats (including NaN) are rejected.
    if isinstance(submission.score, bool) or not isinstance(submission.score, int):
        raise InvalidSubmission(f"score must be a whole number, got {submission.score!r}")
    if submission.score < 0:
        raise InvalidSubmission("score must be >= 0")
    try:
        rank = Rank(submission.rank)
    except ValueError:
        raise InvalidSubmission(f"invalid rank {submission.rank!r}") from None

    return ScoreSubmission(username=username, score=submission.score, rank=rank, details=submission.details)


def score_details(session: ChallengeSession) -> tuple[ScoreDetail, ...]:
    questions = session.questions
    details = []
    for s in session.scores:
        q = questions[s.question_index]
        details.append(
            ScoreDetail(
                track_id=s.track_id,
                answer_time_s=s.elapsed_s,
                playback_duration_s=s.clip_duration_s,
                was_revealed=s.was_revealed,
                track_name=q.track.title,
                album_name=q.album.name,
                artist_name=q.artist.name,
            )
        )
    return tuple(details)


def submission_from_session(session: ChallengeSession, username: str) -> ScoreSubmission:
    """Build a validated leaderboard submission from a finished challenge."""

    if not session.is_finished:
        raise InvalidSubmission("challenge is not finished")
    summary = session.summary()
    return validate_submission(
        ScoreSubmission(
            username=username,
            score=summary.total_score,
            rank=summary.rank,
            details=score_details(session),
        )
    )
