"""
FlowController - maps the player model and current beat to concrete knobs.

The Formula (per turn):
    base  = skill_trend                       clamp [0.10, 0.90]
          + 0.55 * win_rate_gap               (harder when overperforming)
          - 0.35 * fatigue
          - 0.30 * max(0, error_rate - 0.25)
          - 0.12 * max(0, hesitation)
    diff  = base + beat delta + bias          clamp [0.10, 0.95]

Difficulty, pacing and assist are smoothed through their own EMA before
being returned so the opponent does not lurch from turn to turn. Search
depth and randomness are derived from the smoothed difficulty.

`bias` is a slow integral term: every call it drifts by
clamp(0.03 * win_rate_gap, ±0.02), bounded to ±0.18, correcting long-run
win-rate error that the per-turn heuristics leave behind.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from flow_director.core.estimators import EMA
from flow_director.core.types import (
    ASSIST_AUTO,
    ASSIST_LOW,
    Beat,
    Plan,
    PlayerSnapshot,
    assist_mode_for,
    clamp,
)
from flow_director.utils.config import DirectorConfig


DIFF_MIN = 0.10
DIFF_MAX = 0.95
DEPTH_THRESHOLD = 0.62

# (delta, upper clamp) per beat
BEAT_DIFFICULTY = {
    Beat.RECOVERY: (-0.16, 0.90),
    Beat.TRAINING: (-0.08, 0.93),
    Beat.CHALLENGE: (+0.10, 0.95),
    Beat.NOVELTY: (+0.04, 0.95),
}

BEAT_PACING_MS = {
    Beat.RECOVERY: +120.0,
    Beat.CHALLENGE: -70.0,
}

PACING_MIN_MS = 260.0
PACING_MAX_MS = 1100.0

ASSIST_BASE = 0.45
ASSIST_MIN = 0.10
ASSIST_MAX = 0.95

BIAS_LIMIT = 0.18
BIAS_STEP = 0.02

# Improvement must beat the previous flow + engagement by this much
IMPROVEMENT_MARGIN = 0.02


def depth_for(difficulty: float) -> int:
    return 2 if difficulty >= DEPTH_THRESHOLD else 1


def randomness_for(difficulty: float) -> float:
    return clamp(0.60 - difficulty * 0.52, 0.10, 0.60)


class FlowController:
    """Per-session knob computation with output smoothing and slow bias."""

    def __init__(self, config: DirectorConfig):
        self.config = config

        self.bias = 0.0

        self.difficulty_ema = EMA(0.15, 0.5)
        self.pacing_ema = EMA(0.12, config.base_opponent_delay_ms)
        self.assist_ema = EMA(0.15, 0.5)

        self.last_flow = 0.70
        self.last_engagement = 0.70

    # -------------------------------------------------------------------------
    # Pre-smoothing components (pure)
    # -------------------------------------------------------------------------

    def _win_rate_gap(self, snap: PlayerSnapshot) -> float:
        return clamp(snap.win_rate_ema - self.config.target_win_rate, -0.5, 0.5)

    def raw_difficulty(self, snap: PlayerSnapshot, beat: Beat) -> float:
        gap = self._win_rate_gap(snap)
        fatigue = clamp(snap.fatigue, 0.0, 1.0)
        err = clamp(snap.error_rate_ema, 0.0, 1.0)
        hesitation = clamp(snap.hesitation, -1.0, 1.0)

        base = clamp(snap.skill_trend, 0.10, 0.90)
        base = clamp(base + gap * 0.55, DIFF_MIN, DIFF_MAX)
        base = clamp(base - 0.35 * fatigue - 0.30 * max(0.0, err - 0.25), DIFF_MIN, DIFF_MAX)
        base = clamp(base - 0.12 * max(0.0, hesitation), DIFF_MIN, DIFF_MAX)

        delta, ceiling = BEAT_DIFFICULTY[Beat(beat)]
        diff = clamp(base + delta, DIFF_MIN, ceiling)
        return clamp(diff + self.bias, DIFF_MIN, DIFF_MAX)

    def raw_pacing(self, snap: PlayerSnapshot, beat: Beat) -> float:
        fatigue = clamp(snap.fatigue, 0.0, 1.0)
        gap = self._win_rate_gap(snap)
        # Tired players get breathing room; a stomping player gets a brisker bot
        pacing = self.config.base_opponent_delay_ms + 250.0 * fatigue - 120.0 * max(0.0, gap)
        pacing += BEAT_PACING_MS.get(Beat(beat), 0.0)
        return clamp(pacing, PACING_MIN_MS, PACING_MAX_MS)

    def raw_assist(self, snap: PlayerSnapshot, beat: Beat) -> float:
        fatigue = clamp(snap.fatigue, 0.0, 1.0)
        err = clamp(snap.error_rate_ema, 0.0, 1.0)

        assist = ASSIST_BASE
        assist += 0.35 * fatigue + 0.45 * max(0.0, err - 0.20)
        assist -= 0.30 * max(0.0, snap.skill_trend - 0.65)
        assist = clamp(assist, ASSIST_MIN, ASSIST_MAX)

        beat = Beat(beat)
        if beat is Beat.TRAINING:
            assist = clamp(assist + 0.08, ASSIST_MIN, 0.98)
        elif beat is Beat.CHALLENGE:
            assist = clamp(assist - 0.06, ASSIST_MIN, ASSIST_MAX)
        return assist

    # -------------------------------------------------------------------------
    # Public
    # -------------------------------------------------------------------------

    def compute(self, snap: PlayerSnapshot, beat: Beat) -> Plan:
        beat = Beat(beat)

        difficulty = self.difficulty_ema.push(self.raw_difficulty(snap, beat))
        pacing = self.pacing_ema.push(self.raw_pacing(snap, beat))
        assist = self.assist_ema.push(self.raw_assist(snap, beat))

        drift = clamp(self._win_rate_gap(snap) * 0.03, -BIAS_STEP, BIAS_STEP)
        self.bias = clamp(self.bias + drift, -BIAS_LIMIT, BIAS_LIMIT)

        return Plan(
            difficulty=difficulty,
            search_depth=depth_for(difficulty),
            randomness=randomness_for(difficulty),
            pacing_ms=int(round(pacing)),
            assist=assist,
            assist_mode=assist_mode_for(assist),
            show_highlights=assist >= ASSIST_LOW,
            show_attack_hints=assist >= ASSIST_AUTO,
            beat=beat,
        )

    def note_outcome(self, snap: PlayerSnapshot) -> bool:
        """Did flow + engagement improve since the last call? Updates the reference."""
        improved = (snap.flow + snap.engagement) > (
            self.last_flow + self.last_engagement + IMPROVEMENT_MARGIN
        )
        self.last_flow = snap.flow
        self.last_engagement = snap.engagement
        return improved

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bias": self.bias,
            "difficulty_ema": self.difficulty_ema.to_dict(),
            "pacing_ema": self.pacing_ema.to_dict(),
            "assist_ema": self.assist_ema.to_dict(),
            "last_flow": self.last_flow,
            "last_engagement": self.last_engagement,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], config: DirectorConfig) -> "FlowController":
        controller = cls(config)
        controller.bias = clamp(float(data.get("bias", 0.0)), -BIAS_LIMIT, BIAS_LIMIT)
        for name in ("difficulty_ema", "pacing_ema", "assist_ema"):
            if name in data:
                setattr(controller, name, EMA.from_dict(data[name]))
        controller.last_flow = float(data.get("last_flow", 0.70))
        controller.last_engagement = float(data.get("last_engagement", 0.70))
        return controller
