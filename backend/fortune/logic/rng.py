"""Random sources for glyph sampling."""
import random
import secrets
from abc import ABC, abstractmethod


class RNGBase(ABC):
    """Uniform float source used by the sampler and board generator."""

    @abstractmethod
    def random(self) -> float:
        """Return random float in [0, 1)."""
        pass

    def uniform(self, upper: float) -> float:
        """Return random float in [0, upper)."""
        return self.random() * upper


class ProductionRNG(RNGBase):
    """
    Default RNG for live play.

    Backed by the OS entropy source, never seeded.
    """

    def __init__(self):
        self._rng = secrets.SystemRandom()

    def random(self) -> float:
        return self._rng.random()


class SeededRNG(RNGBase):
    """
    Test/Simulation RNG.

    Deterministic, fully controlled by seed. Simulation reports carry the
    seed so a run can be replayed.
    """

    def __init__(self, seed: int):
        self._rng = random.Random(seed)
        self.seed = seed

    def random(self) -> float:
        return self._rng.random()
