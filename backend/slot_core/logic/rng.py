"""
Uniform random sources for the engine.

Three consumers draw from these: the symbol sampler (target grids), the
random-walk payline family, and reel filler symbols. The session keeps the
outcome stream (grids, paylines) apart from the filler stream, so a seeded
session reproduces the same grids whatever the frame rate.
"""
import random
import secrets
from abc import ABC, abstractmethod
from collections.abc import Iterable


class RNGBase(ABC):
    """Source of uniform draws injected into samplers and generators."""

    @abstractmethod
    def random(self) -> float:
        """Uniform float in [0, 1)."""

    @abstractmethod
    def randint(self, a: int, b: int) -> int:
        """Uniform int in [a, b], both ends included."""


class ProductionRNG(RNGBase):
    """Live play: OS entropy, never seeded, so outcomes cannot be replayed."""

    _BITS = 53

    def random(self) -> float:
        return secrets.randbits(self._BITS) / (1 << self._BITS)

    def randint(self, a: int, b: int) -> int:
        return a + secrets.randbelow(b - a + 1)


class SeededRNG(RNGBase):
    """Mersenne Twister with a fixed seed, for tests, simulations and replays."""

    def __init__(self, seed: int):
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def __repr__(self) -> str:
        return f"SeededRNG(seed={self.seed})"


class SequenceRNG(RNGBase):
    """
    Replays a fixed list of floats in [0, 1), cycling when exhausted.

    randint maps the next float onto [a, b] the same way a uniform draw would.
    """

    def __init__(self, values: Iterable[float]):
        self._values = list(values)
        if not self._values:
            raise ValueError("SequenceRNG needs at least one value")
        self._pos = 0
        self.draws = 0

    def random(self) -> float:
        value = self._values[self._pos]
        self._pos = (self._pos + 1) % len(self._values)
        self.draws += 1
        return value

    def randint(self, a: int, b: int) -> int:
        return a + min(int(self.random() * (b - a + 1)), b - a)
