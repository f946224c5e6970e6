"""
Core types, constants, and data structures.

This module contains the fundamental types used throughout the director:
- Beat / AssistMode enums
- Plan: the per-turn tuning snapshot consumed by opponents and UI
- PlayerSnapshot: read-only view of the player model
- TurnSummary / GameResult: observation payloads
- clamp and observation coercion helpers
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, NamedTuple


class Beat(str, Enum):
    """Coarse pacing mode governing the feel of the next match."""

    RECOVERY = "recovery"
    TRAINING = "training"
    CHALLENGE = "challenge"
    NOVELTY = "novelty"


# Fixed priority order. Also used as the tie-break order by the scheduler.
BEAT_ORDER = (Beat.RECOVERY, Beat.TRAINING, Beat.CHALLENGE, Beat.NOVELTY)


class AssistMode(str, Enum):
    OFF = "Off"
    LOW = "Low"
    AUTO = "Auto"
    HIGH = "High"


# Assist thresholds, highest first
ASSIST_HIGH = 0.78
ASSIST_AUTO = 0.55
ASSIST_LOW = 0.32


def assist_mode_for(assist: float) -> AssistMode:
    """Map a continuous assist level onto its discrete UI mode."""
    if assist >= ASSIST_HIGH:
        return AssistMode.HIGH
    if assist >= ASSIST_AUTO:
        return AssistMode.AUTO
    if assist >= ASSIST_LOW:
        return AssistMode.LOW
    return AssistMode.OFF


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


# =============================================================================
# Observation coercion
# =============================================================================

def coerce_number(value: Any, default: float) -> float:
    """
    Interpret an observation field as a finite float.

    Missing, None, non-numeric and non-finite values are treated as absent
    and replaced with `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return number


_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})


def coerce_flag(value: Any) -> bool:
    """
    Truthiness of an observation flag; None counts as False.

    Strings are parsed ("true"/"yes"/"on"/"1", any case) so "false" and
    "0" read as False; other strings are treated as absent.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


# =============================================================================
# Observation payloads
# =============================================================================

@dataclass(frozen=True)
class TurnSummary:
    """One completed player turn."""
    turn_ms: float | None = None
    actions_taken: int | None = None
    mistakes: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TurnSummary":
        """Accept both snake_case and the camelCase keys hosts tend to send."""
        return cls(
            turn_ms=data.get("turn_ms", data.get("turnMs")),
            actions_taken=data.get("actions_taken", data.get("actionsTaken")),
            mistakes=data.get("mistakes"),
        )


@dataclass(frozen=True)
class GameResult:
    """One completed match, from the player's point of view."""
    player_won: bool = False
    close_game: bool = False
    comeback: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GameResult":
        return cls(
            player_won=coerce_flag(data.get("player_won", data.get("playerWon"))),
            close_game=coerce_flag(data.get("close_game", data.get("closeGame"))),
            comeback=coerce_flag(data.get("comeback")),
        )


# =============================================================================
# Outputs
# =============================================================================

class PlayerSnapshot(NamedTuple):
    """Immutable view of every player-model estimate."""

    skill: float
    skill_trend: float
    skill_variance: float
    win_rate_ema: float
    error_rate_ema: float
    turn_time_ema: float
    hesitation: float
    volatility: float
    fatigue: float
    engagement: float
    flow: float
    streak: int
    games: int
    turns: int

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._asdict())


@dataclass(frozen=True)
class Plan:
    """
    Concrete tuning knobs for the current turn.

    Recomputed by the flow controller after every observation; consumers
    treat it as an immutable snapshot until the next recomputation.
    """
    difficulty: float
    search_depth: int
    randomness: float
    pacing_ms: int
    assist: float
    assist_mode: AssistMode
    show_highlights: bool
    show_attack_hints: bool
    beat: Beat

    def to_dict(self) -> Dict[str, Any]:
        return {
            "difficulty": self.difficulty,
            "search_depth": self.search_depth,
            "randomness": self.randomness,
            "pacing_ms": self.pacing_ms,
            "assist": self.assist,
            "assist_mode": self.assist_mode.value,
            "show_highlights": self.show_highlights,
            "show_attack_hints": self.show_attack_hints,
            "beat": self.beat.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Plan":
        return cls(
            difficulty=float(data["difficulty"]),
            search_depth=int(data["search_depth"]),
            randomness=float(data["randomness"]),
            pacing_ms=int(data["pacing_ms"]),
            assist=float(data["assist"]),
            assist_mode=AssistMode(data["assist_mode"]),
            show_highlights=bool(data["show_highlights"]),
            show_attack_hints=bool(data["show_attack_hints"]),
            beat=Beat(data["beat"]),
        )
