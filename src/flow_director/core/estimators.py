"""
Online estimators used by the player model and flow controller.

- EMA: exponential moving average, seeded by its first sample
- RunningStats: Welford mean/variance with min/max tracking
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping


class EMA:
    """Exponential moving average with first-sample seeding."""

    __slots__ = ("alpha", "value", "initialized")

    def __init__(self, alpha: float, initial: float = 0.0):
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"EMA alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self.value = float(initial)
        self.initialized = False

    def push(self, x: float) -> float:
        if not self.initialized:
            self.value = float(x)
            self.initialized = True
        else:
            self.value = self.value + self.alpha * (x - self.value)
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"alpha": self.alpha, "value": self.value, "initialized": self.initialized}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EMA":
        ema = cls(float(data["alpha"]), float(data["value"]))
        ema.initialized = bool(data.get("initialized", False))
        return ema

    def __repr__(self) -> str:
        return f"EMA(alpha={self.alpha}, value={self.value:.4f}, initialized={self.initialized})"


class RunningStats:
    """
    Welford online mean/variance.

    Non-finite samples are dropped without touching state, so a single
    corrupt timing observation cannot poison the z-scores downstream.
    """

    __slots__ = ("n", "mean", "m2", "min", "max")

    def __init__(self):
        self.n = 0
        self.mean = 0.0
        self.m2 = 0.0
        self.min = math.inf
        self.max = -math.inf

    def push(self, x: float) -> None:
        try:
            v = float(x)
        except (TypeError, ValueError, OverflowError):
            return
        if not math.isfinite(v):
            return

        self.n += 1
        self.min = min(self.min, v)
        self.max = max(self.max, v)
        delta = v - self.mean
        self.mean += delta / self.n
        self.m2 += delta * (v - self.mean)

    def variance(self) -> float:
        return self.m2 / (self.n - 1) if self.n > 1 else 0.0

    def std(self) -> float:
        return math.sqrt(self.variance())

    def z_score(self, x: float) -> float:
        s = self.std()
        if s <= 1e-9:
            return 0.0
        return (x - self.mean) / s

    def to_dict(self) -> Dict[str, Any]:
        # JSON has no infinities: an empty tracker stores None bounds
        return {
            "n": self.n,
            "mean": self.mean,
            "m2": self.m2,
            "min": self.min if self.n else None,
            "max": self.max if self.n else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunningStats":
        stats = cls()
        stats.n = int(data.get("n", 0))
        stats.mean = float(data.get("mean", 0.0))
        stats.m2 = float(data.get("m2", 0.0))
        if stats.n:
            stats.min = float(data["min"])
            stats.max = float(data["max"])
        return stats
