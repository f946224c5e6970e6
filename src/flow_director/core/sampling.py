"""
Seeded stochastic samplers.

All samplers draw uniforms from an explicit generator (anything with a
``random() -> float`` method in [0, 1)), never from module-level state,
so that two sessions built with the same seed make identical choices.

Gamma sampling follows Marsaglia & Tsang (2000). The rejection loop is
capped; see `gamma_sample`.
"""

from __future__ import annotations

import math
from typing import Protocol

_MASK32 = 0xFFFFFFFF

# Rejection proposals tried before falling back to the shape mean.
# Acceptance rate is above 95% for every shape, so the cap is never
# reached in practice.
GAMMA_MAX_ITER = 1000


class UniformSource(Protocol):
    def random(self) -> float: ...


class Mulberry32:
    """
    mulberry32: a small 32-bit generator with full 2^32 period.

    The entire state is one unsigned 32-bit integer, exposed as `state`
    so a generator can be persisted and resumed mid-stream.
    """

    __slots__ = ("state",)

    def __init__(self, seed: int):
        self.state = int(seed) & _MASK32

    def random(self) -> float:
        self.state = (self.state + 0x6D2B79F5) & _MASK32
        a = self.state
        t = ((a ^ (a >> 15)) * (a | 1)) & _MASK32
        t = ((t + (((t ^ (t >> 7)) * (t | 61)) & _MASK32)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

    __call__ = random


def randrange(rng: UniformSource, n: int) -> int:
    """Uniform integer in [0, n)."""
    if n <= 0:
        raise ValueError("randrange() requires n > 0")
    # random() may round to 1.0 for some sources
    return min(int(rng.random() * n), n - 1)


def uniform_int(rng: UniformSource, lo: int, hi: int) -> int:
    """Uniform integer in [lo, hi] (inclusive)."""
    return lo + randrange(rng, hi - lo + 1)


def normal_sample(rng: UniformSource) -> float:
    """Standard normal via Box-Muller. Zero uniforms are redrawn (log(0))."""
    u = 0.0
    while u == 0.0:
        u = rng.random()
    v = 0.0
    while v == 0.0:
        v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def gamma_sample(k: float, rng: UniformSource, max_iter: int = GAMMA_MAX_ITER) -> float:
    """
    Draw from Gamma(k, 1).

    Shapes below 1 use the boost identity Gamma(k) = Gamma(k+1) * U^(1/k).
    If `max_iter` proposals are all rejected the shape mean `k` is
    returned instead of looping further.
    """
    if k <= 0:
        return 0.0
    if k < 1.0:
        u = rng.random()
        return gamma_sample(k + 1.0, rng, max_iter) * u ** (1.0 / k)

    d = k - 1.0 / 3.0
    c = 1.0 / math.sqrt(9.0 * d)
    for _ in range(max_iter):
        x = normal_sample(rng)
        v = 1.0 + c * x
        if v <= 0.0:
            continue
        v = v * v * v
        u = rng.random()
        if u < 1.0 - 0.0331 * (x * x) * (x * x):
            return d * v
        if u > 0.0 and math.log(u) < 0.5 * x * x + d * (1.0 - v + math.log(v)):
            return d * v
    return k


def beta_sample(a: float, b: float, rng: UniformSource) -> float:
    """Draw from Beta(a, b) as Ga / (Ga + Gb)."""
    ga = gamma_sample(a, rng)
    gb = gamma_sample(b, rng)
    den = ga + gb
    if den <= 1e-300:
        return 0.5
    return ga / den
