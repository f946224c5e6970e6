"""
Core module - fundamental types, estimators, and samplers.

This module provides the building blocks used throughout the director.
"""

from flow_director.core.types import (
    Beat,
    BEAT_ORDER,
    AssistMode,
    Plan,
    PlayerSnapshot,
    TurnSummary,
    GameResult,
    assist_mode_for,
    clamp,
)
from flow_director.core.estimators import EMA, RunningStats
from flow_director.core.sampling import (
    Mulberry32,
    randrange,
    uniform_int,
    normal_sample,
    gamma_sample,
    beta_sample,
)

__all__ = [
    # Types
    "Beat",
    "BEAT_ORDER",
    "AssistMode",
    "Plan",
    "PlayerSnapshot",
    "TurnSummary",
    "GameResult",
    # Estimators
    "EMA",
    "RunningStats",
    # Samplers
    "Mulberry32",
    "randrange",
    "uniform_int",
    "normal_sample",
    "gamma_sample",
    "beta_sample",
    # Functions
    "assist_mode_for",
    "clamp",
]
