from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .catalog import Album, Artist, Catalog, Track
from .rng import RandomSource, shuffle
from .start_time import select_start_time

logger = logging.getLogger(__name__)

DEFAULT_QUESTION_COUNT = 10


class NoTracksAvailable(LookupError):
    """The (possibly filtered) catalog has no tracks to build a quiz from."""


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    track: Track
    album: Album
    artist: Artist
    start_time_s: float


def generate_from_all(
    catalog: Catalog,
    count: int = DEFAULT_QUESTION_COUNT,
    *,
    rng: RandomSource,
) -> list[QuizQuestion]:
    """Build up to ``count`` questions from every track in the catalog."""

    sources = list(catalog.iter_sources())
    if not sources:
        raise NoTracksAvailable("No tracks found in catalog")
    return _build_questions(sources, count, rng)


def generate_from_albums(
    catalog: Catalog,
    album_ids: Iterable[str],
    count: int = DEFAULT_QUESTION_COUNT,
    *,
    rng: RandomSource,
) -> list[QuizQuestion]:
    """Build up to ``count`` questions from the tracks of the selected albums."""

    wanted = set(album_ids)
    sources = [src for src in catalog.iter_sources() if src[1].id in wanted]
    if not sources:
        raise NoTracksAvailable("No tracks found in selected albums")
    return _build_questions(sources, count, rng)


def _build_questions(
    sources: list[tuple[Track, Album, Artist]],
    count: int,
    rng: RandomSource,
) -> list[QuizQuestion]:
    if count < 1:
        raise ValueError("count must be >= 1")

    shuffle(sources, rng)
    picked = sources[: min(count, len(sources))]
    logger.debug("Picked %d of %d tracks (requested %d)", len(picked), len(sources), count)

    return [
        QuizQuestion(
            track=track,
            album=album,
            artist=artist,
            start_time_s=select_start_time(track, rng),
        )
        for track, album, artist in picked
    ]
