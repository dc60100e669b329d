from __future__ import annotations

import math

from .catalog import DurationWindow, MidpointStart, NoTiming, Track
from .rng import RandomSource

# Fallback window for tracks without timing metadata: most songs reach their
# first chorus or bridge somewhere in here.
FALLBACK_START_RANGE_S = (90, 150)

# The clip is drawn from the middle 20% of a track of known length.
MIDDLE_WINDOW = (0.4, 0.6)


def select_start_time(track: Track, rng: RandomSource) -> float:
    """Return the playback offset (seconds) at which the quiz clip begins."""

    hint = track.start_hint
    if isinstance(hint, MidpointStart):
        return hint.seconds
    if isinstance(hint, DurationWindow):
        lo = math.floor(hint.duration_s * MIDDLE_WINDOW[0])
        hi = math.floor(hint.duration_s * MIDDLE_WINDOW[1])
        return rng.randint(lo, hi)
    assert isinstance(hint, NoTiming)
    return rng.randint(*FALLBACK_START_RANGE_S)
