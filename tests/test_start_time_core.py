from __future__ import annotations

from songquiz.catalog import DurationWindow, MidpointStart, NoTiming, Track
from songquiz.rng import SeededRng
from songquiz.start_time import select_start_time


class _HighRng:
    """Always picks the upper bound."""

    def randint(self, a: int, b: int) -> int:
        return b


class _LowRng:
    def randint(self, a: int, b: int) -> int:
        return a


def _track(**kw: float) -> Track:
    return Track(id="t1", title="Song", media_url="https://youtu.be/abc", **kw)


def test_start_hint_priority() -> None:
    assert _track(midpoint_start_s=77, duration_s=300).start_hint == MidpointStart(77)
    assert _track(duration_s=300).start_hint == DurationWindow(300)
    assert _track().start_hint == NoTiming()


def test_midpoint_override_is_verbatim() -> None:
    rng = SeededRng(1)
    track = _track(midpoint_start_s=77, duration_s=300)
    assert all(select_start_time(track, rng) == 77 for _ in range(200))


def test_duration_window_bounds() -> None:
    rng = SeededRng(2024)
    track = _track(duration_s=300)
    samples = [select_start_time(track, rng) for _ in range(1000)]
    assert all(120 <= s <= 180 for s in samples)
    assert all(isinstance(s, int) for s in samples)


def test_duration_window_uses_floor_on_both_ends() -> None:
    track = _track(duration_s=251)  # 100.4 .. 150.6
    assert select_start_time(track, _LowRng()) == 100
    assert select_start_time(track, _HighRng()) == 150


def test_start_is_inside_short_tracks() -> None:
    rng = SeededRng(5)
    for duration in (1, 2, 3, 7, 10):
        track = _track(duration_s=duration)
        for _ in range(50):
            start = select_start_time(track, rng)
            assert 0 <= start < duration


def test_fallback_range_without_metadata() -> None:
    rng = SeededRng(9)
    samples = [select_start_time(_track(), rng) for _ in range(1000)]
    assert min(samples) >= 90
    assert max(samples) <= 150
    assert select_start_time(_track(), _LowRng()) == 90
    assert select_start_time(_track(), _HighRng()) == 150
