"""
PlayerModel - running estimate of a player's skill, engagement and fatigue.

Two kinds of evidence feed the model:

    observe_turn()  after every player turn   (tempo, errors, hesitation)
    observe_game()  after every finished match (outcome, closeness, comeback)

Skill is a bounded scalar in [0.02, 0.98] read as "probability this player
beats a neutral opponent". Its update is a delta rule whose learning rate
scales with `skill_variance`, an uncertainty proxy that shrinks as games
accumulate and inflates when the player's pace becomes erratic.

Other components read the model only through `snapshot()`.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Union

from flow_director.core.estimators import EMA, RunningStats
from flow_director.core.types import (
    GameResult,
    PlayerSnapshot,
    TurnSummary,
    clamp,
    coerce_flag,
    coerce_number,
)
from flow_director.utils.config import DirectorConfig


# ─── Observation bounds ───────────────────────────────────────────────────────

TURN_MS_MIN = 200.0
TURN_MS_MAX = 60000.0
COUNT_MAX = 99

# ─── Skill bounds ─────────────────────────────────────────────────────────────

SKILL_MIN = 0.02
SKILL_MAX = 0.98
SKILL_VAR_MIN = 0.05
SKILL_VAR_MAX = 0.35

# ─── Smoothing rates (alpha, initial) ─────────────────────────────────────────

SKILL_TREND = (0.10, None)         # initial = skill_initial
WIN_RATE = (0.08, 0.50)
ERROR_RATE = (0.10, 0.20)
TURN_TIME = (0.08, None)           # initial = turn_time_target_ms
HESITATION = (0.12, 0.0)
VOLATILITY = (0.10, 0.20)
FATIGUE = (0.06, 0.0)
ENGAGEMENT = (0.08, 0.70)
FLOW = (0.08, 0.70)


TurnInput = Union[TurnSummary, Mapping[str, Any], None]
GameInput = Union[GameResult, Mapping[str, Any], None]


class PlayerModel:
    """Per-session aggregate of every player estimate."""

    def __init__(self, config: DirectorConfig):
        self.config = config

        # Skill estimate + uncertainty
        self.skill = config.skill_initial
        self.skill_variance = config.skill_variance_initial
        self.skill_ema = EMA(SKILL_TREND[0], config.skill_initial)

        # Performance
        self.win_rate_ema = EMA(*WIN_RATE)
        self.error_rate_ema = EMA(*ERROR_RATE)

        # Timing
        self.turn_time_stats = RunningStats()
        self.turn_time_ema = EMA(TURN_TIME[0], config.turn_time_target_ms)
        self.hesitation_ema = EMA(*HESITATION)

        # Fatigue / volatility
        self.volatility_ema = EMA(*VOLATILITY)
        self.fatigue_ema = EMA(*FATIGUE)

        # Engagement proxies
        self.engagement_ema = EMA(*ENGAGEMENT)
        self.flow_ema = EMA(*FLOW)

        self.streak = 0
        self.games = 0
        self.turns = 0

        # Last-turn diagnostics
        self.last_turn_ms = config.turn_time_target_ms
        self.last_mistakes = 0
        self.last_actions = 0

    # -------------------------------------------------------------------------
    # Observations
    # -------------------------------------------------------------------------

    def observe_turn(self, summary: TurnInput = None) -> None:
        """Fold one completed player turn into the tempo/error estimates."""
        if isinstance(summary, Mapping):
            summary = TurnSummary.from_mapping(summary)
        elif summary is None:
            summary = TurnSummary()

        cfg = self.config
        target = cfg.turn_time_target_ms
        turn_ms = clamp(coerce_number(summary.turn_ms, target), TURN_MS_MIN, TURN_MS_MAX)
        actions = int(clamp(coerce_number(summary.actions_taken, 0), 0, COUNT_MAX))
        mistakes = int(clamp(coerce_number(summary.mistakes, 0), 0, COUNT_MAX))

        self.turns += 1

        self.turn_time_stats.push(turn_ms)
        turn_time = self.turn_time_ema.push(turn_ms)

        # Hesitation: time per action relative to the per-action budget
        per_action = turn_ms / actions if actions > 0 else turn_ms
        budget = target / cfg.actions_per_turn_target
        self.hesitation_ema.push(clamp((per_action - budget) / 2000.0, -1.0, 1.0))

        if actions > 0:
            error_rate = mistakes / actions
        else:
            error_rate = 1.0 if mistakes > 0 else 0.0
        self.error_rate_ema.push(clamp(error_rate, 0.0, 1.0))

        # Volatility: how swingy the pace is relative to this player's own history
        z = abs(self.turn_time_stats.z_score(turn_ms))
        volatility = self.volatility_ema.push(clamp(z / 3.0, 0.0, 1.0))

        # Fatigue: sustained slowdown plus erratic pacing
        slowdown = clamp((turn_time - target) / target, -0.5, 1.5)
        lift = clamp(0.35 * max(0.0, slowdown) + 0.12 * max(0.0, volatility - 0.35), 0.0, 1.0)
        self.fatigue_ema.push(lift)

        self.last_turn_ms = turn_ms
        self.last_mistakes = mistakes
        self.last_actions = actions

    def observe_game(self, result: GameInput = None) -> None:
        """Fold one finished match into skill, streak, engagement and flow."""
        if isinstance(result, Mapping):
            result = GameResult.from_mapping(result)
        elif result is None:
            result = GameResult()

        cfg = self.config
        won = coerce_flag(result.player_won)
        close = 1.0 if coerce_flag(result.close_game) else 0.0
        comeback = 1.0 if coerce_flag(result.comeback) else 0.0

        self.games += 1
        reward = 1.0 if won else 0.0
        win_rate = self.win_rate_ema.push(reward)

        if won:
            self.streak = self.streak + 1 if self.streak >= 0 else 1
        else:
            self.streak = self.streak - 1 if self.streak <= 0 else -1

        # Skill: delta rule toward the outcome. A close game is evidence the
        # challenge was right, so it moves skill less.
        expected = clamp(self.skill, 0.05, 0.95)
        error = reward - expected
        lr = clamp(0.08 + self.skill_variance * 0.18, 0.06, 0.22)
        close_dampen = 1.0 - 0.35 * close
        comeback_boost = 1.0 + 0.20 * comeback
        self.skill = clamp(
            self.skill + lr * error * close_dampen * comeback_boost, SKILL_MIN, SKILL_MAX
        )

        shrink = 0.96 - 0.05 * min(1.0, self.games / 20.0)
        inflate = 1.0 + 0.10 * max(0.0, self.volatility_ema.value - 0.30)
        self.skill_variance = clamp(
            self.skill_variance * shrink * inflate, SKILL_VAR_MIN, SKILL_VAR_MAX
        )

        self.skill_ema.push(self.skill)

        fatigue = self.fatigue_ema.value
        tempo = clamp(self.turn_time_ema.value / cfg.turn_time_target_ms, 0.4, 1.8)
        tempo_score = 1.0 - abs(tempo - 1.0) * 0.75
        err_score = 1.0 - abs(self.error_rate_ema.value - cfg.error_rate_target) * 1.2
        wr_score = 1.0 - abs(win_rate - cfg.target_win_rate) * 1.6

        engagement = clamp(
            0.45 * tempo_score + 0.35 * err_score + 0.35 * wr_score - 0.55 * fatigue,
            0.0, 1.0,
        )
        self.engagement_ema.push(engagement)

        flow = clamp(
            0.30 * wr_score
            + 0.25 * tempo_score
            + 0.25 * (1.0 - abs(self.hesitation_ema.value))
            + 0.20 * close
            - 0.35 * fatigue,
            0.0, 1.0,
        )
        self.flow_ema.push(flow)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    def snapshot(self) -> PlayerSnapshot:
        return PlayerSnapshot(
            skill=self.skill,
            skill_trend=self.skill_ema.value,
            skill_variance=self.skill_variance,
            win_rate_ema=self.win_rate_ema.value,
            error_rate_ema=self.error_rate_ema.value,
            turn_time_ema=self.turn_time_ema.value,
            hesitation=self.hesitation_ema.value,
            volatility=self.volatility_ema.value,
            fatigue=self.fatigue_ema.value,
            engagement=self.engagement_ema.value,
            flow=self.flow_ema.value,
            streak=self.streak,
            games=self.games,
            turns=self.turns,
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    _EMA_FIELDS = (
        "skill_ema", "win_rate_ema", "error_rate_ema", "turn_time_ema",
        "hesitation_ema", "volatility_ema", "fatigue_ema", "engagement_ema", "flow_ema",
    )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "skill": self.skill,
            "skill_variance": self.skill_variance,
            "turn_time_stats": self.turn_time_stats.to_dict(),
            "streak": self.streak,
            "games": self.games,
            "turns": self.turns,
            "last_turn_ms": self.last_turn_ms,
            "last_mistakes": self.last_mistakes,
            "last_actions": self.last_actions,
        }
        for name in self._EMA_FIELDS:
            data[name] = getattr(self, name).to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], config: DirectorConfig) -> "PlayerModel":
        model = cls(config)
        model.skill = clamp(float(data["skill"]), SKILL_MIN, SKILL_MAX)
        model.skill_variance = clamp(float(data["skill_variance"]), SKILL_VAR_MIN, SKILL_VAR_MAX)
        model.turn_time_stats = RunningStats.from_dict(data["turn_time_stats"])
        model.streak = int(data.get("streak", 0))
        model.games = int(data.get("games", 0))
        model.turns = int(data.get("turns", 0))
        model.last_turn_ms = float(data.get("last_turn_ms", config.turn_time_target_ms))
        model.last_mistakes = int(data.get("last_mistakes", 0))
        model.last_actions = int(data.get("last_actions", 0))
        for name in cls._EMA_FIELDS:
            if name in data:
                setattr(model, name, EMA.from_dict(data[name]))
        return model
