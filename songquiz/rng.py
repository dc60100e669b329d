from __future__ import annotations

import random
from typing import MutableSequence, Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Uniform random source used for shuffling and start offsets."""

    def randint(self, a: int, b: int) -> int:
        """Return an integer in ``[a, b]`` inclusive."""
        ...


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)


def shuffle(items: MutableSequence[T], rng: RandomSource) -> None:
    """Fisher-Yates shuffle in place, drawing only from ``rng.randint``."""

    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
