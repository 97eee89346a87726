"""
Career Simulation Random & Math Utilities
==========================================

Every stochastic decision in the engine draws from a RandomSource so a
career can be replayed from a seed, and tests can swap in a source whose
probability gates are fixed.

Samplers:
- rand / rand_float / chance / roll      uniform draws and gates
- gauss / gauss_clamped                  normal draws
- poisson                                Knuth, normal approximation past 30
- bivariate / multivariate               correlated normal samples
- uncertainty                            layered meta-noise on a base value

Usage:
    from careersim.rng import RandomSource, clamp

    rng = RandomSource(seed=42)
    if rng.roll(0.15):
        boost = clamp(rng.gauss(1.8, 0.4), 1.0, 3.0)
"""

from __future__ import annotations

import math
import random
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

Roll = Callable[[float], bool]


# ──────────────────────────────────────────────
# NUMERIC SAFETY
# ──────────────────────────────────────────────

def _is_finite(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def midpoint(lo: float, hi: float) -> int:
    """Rounded midpoint of a range (half rounds up)."""
    return int(math.floor((lo + hi) / 2 + 0.5))


def clamp(value, lo: float, hi: float):
    """Clamp value into [lo, hi]. NaN, infinities and None become the midpoint."""
    if not _is_finite(value):
        return midpoint(lo, hi)
    return max(lo, min(value, hi))


def safe_number(value, fallback: float = 50):
    """Return value if it is a finite number, otherwise fallback."""
    if not _is_finite(value):
        return fallback
    return value


# ──────────────────────────────────────────────
# RANDOM SOURCE
# ──────────────────────────────────────────────

class RandomSource:
    """
    Seedable random source shared by every engine component.

    Wraps random.Random so all draws come from one stream.  Subclasses
    may override roll() to pin probability gates in tests without
    touching the eligibility logic that surrounds them.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random(seed)
        self.seed = seed

    # ── uniform ──

    def random(self) -> float:
        return self._rng.random()

    def rand(self, lo: int, hi: int) -> int:
        """Inclusive integer in [lo, hi]."""
        return int(math.floor(self._rng.random() * (hi - lo + 1))) + lo

    def rand_float(self, lo: float, hi: float) -> float:
        return self._rng.random() * (hi - lo) + lo

    def chance(self, pct: float) -> bool:
        """True with probability pct/100."""
        return self.roll(pct / 100.0)

    def roll(self, probability: float) -> bool:
        """Probability gate. Non-finite probabilities never pass."""
        if not _is_finite(probability):
            return False
        return self._rng.random() < probability

    def choice(self, items: Sequence[T]) -> T:
        return items[self.rand(0, len(items) - 1)]

    def weighted_pick(self, items: Sequence[T], weights: Sequence[float]) -> T:
        total = sum(max(0.0, w) for w in weights)
        if total <= 0:
            return self.choice(items)
        r = self._rng.random() * total
        upto = 0.0
        for item, w in zip(items, weights):
            upto += max(0.0, w)
            if r < upto:
                return item
        return items[-1]

    # ── normal family ──

    def gauss(self, mean: float = 0.0, std: float = 1.0) -> float:
        """Box-Muller normal draw."""
        u = 0.0
        v = 0.0
        while u == 0.0:
            u = self._rng.random()
        while v == 0.0:
            v = self._rng.random()
        z0 = math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
        return z0 * std + mean

    def gauss_clamped(self, mean: float, std: float, lo: float, hi: float,
                      retries: int = 10) -> float:
        """Resample until the draw lands in [lo, hi]; clamp after retries run out."""
        value = mean
        for _ in range(retries):
            value = self.gauss(mean, std)
            if lo <= value <= hi:
                return value
        return clamp(value, lo, hi)

    def triangular(self, lo: float, hi: float, mode: float) -> float:
        return self._rng.triangular(lo, hi, mode)

    def poisson(self, lam: float) -> int:
        if not _is_finite(lam) or lam <= 0:
            return 0
        if lam >= 30:
            return int(round(self.gauss(lam, math.sqrt(lam))))
        limit = math.exp(-lam)
        k = 0
        p = 1.0
        while True:
            k += 1
            p *= self._rng.random()
            if p <= limit:
                break
        return k - 1

    def bivariate(self, mean1: float, mean2: float, std1: float, std2: float,
                  correlation: float) -> Tuple[float, float]:
        """Correlated pair of normal draws."""
        z1 = self.gauss(0, 1)
        z2 = self.gauss(0, 1)
        x = mean1 + std1 * z1
        y = mean2 + std2 * (correlation * z1 + math.sqrt(max(0.0, 1 - correlation ** 2)) * z2)
        return x, y

    def multivariate(self, means: Sequence[float], stds: Sequence[float],
                     correlation: Sequence[Sequence[float]]) -> List[float]:
        """Correlated normal vector via a Cholesky factor of the correlation matrix."""
        n = len(means)
        lower = cholesky(correlation)
        z = [self.gauss(0, 1) for _ in range(n)]
        out = []
        for i in range(n):
            acc = 0.0
            for j in range(i + 1):
                acc += lower[i][j] * z[j]
            out.append(means[i] + stds[i] * acc)
        return out

    def uncertainty(self, base: float, u: float = 0.2) -> float:
        """
        Layered noise on a base value: the noise width is itself random,
        a micro-event layer fires 15% of the time, and 2% of draws are
        outliers scaled up or down hard.
        """
        actual = abs(self.gauss(u, u * 0.3))
        value = base * (1 + self.gauss(0, actual))
        if self._rng.random() < 0.15:
            value *= 1 + self.gauss(0, actual * 1.5)
        if self._rng.random() < 0.02:
            if self._rng.random() < 0.5:
                value *= self.rand_float(1.5, 2.5)
            else:
                value *= self.rand_float(0.3, 0.6)
        return value


def cholesky(matrix: Sequence[Sequence[float]]) -> List[List[float]]:
    """Lower-triangular factor with a small diagonal floor for near-singular input."""
    n = len(matrix)
    lower = [[0.0] * n for _ in range(n)]
    for i in range(n):
        for j in range(i + 1):
            s = 0.0
            if i == j:
                for k in range(j):
                    s += lower[j][k] ** 2
                lower[j][j] = math.sqrt(max(matrix[j][j] - s, 0.01))
            else:
                for k in range(j):
                    s += lower[i][k] * lower[j][k]
                lower[i][j] = (matrix[i][j] - s) / max(lower[j][j], 0.01)
    return lower


class FixedRollSource(RandomSource):
    """RandomSource whose probability gates always return the same answer."""

    def __init__(self, outcome: bool, seed: Optional[int] = 0):
        super().__init__(seed=seed)
        self.outcome = outcome

    def roll(self, probability: float) -> bool:
        return self.outcome


def ensure_source(rng) -> RandomSource:
    """Accept None, a random.Random, or a RandomSource."""
    if rng is None:
        return RandomSource()
    if isinstance(rng, RandomSource):
        return rng
    if isinstance(rng, random.Random):
        return RandomSource(rng=rng)
    raise ValueError(f"Unsupported random source: {type(rng).__name__}")
