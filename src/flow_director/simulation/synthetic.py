"""
SyntheticPlayer - a stand-in human for exercising the director offline.

The player picks the best-scored move with probability tied to its true
skill (nudged up when the plan shows move highlights) and otherwise plays
a uniformly random legal move. Turn times are log-normal around a base
tempo that slows as the session drags on.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

import numpy as np

from flow_director.core.types import Plan
from flow_director.games.game_base import GameBase

# Extra chance of the best move at full assist with highlights on
ASSIST_LIFT = 0.20
MAX_BEST_PROB = 0.98


class SyntheticPlayer:
    """Simulated human with a fixed true skill in [0, 1]."""

    def __init__(
        self,
        true_skill: float,
        seed: Optional[int] = None,
        turn_time_ms: float = 7000.0,
        fatigue_rate: float = 0.0,
        tempo_noise: float = 0.25,
    ):
        if not 0.0 <= true_skill <= 1.0:
            raise ValueError(f"true_skill must be in [0, 1], got {true_skill}")
        self.true_skill = true_skill
        self.turn_time_ms = turn_time_ms
        self.fatigue_rate = fatigue_rate
        self.tempo_noise = tempo_noise
        self.rng = np.random.default_rng(seed)
        self.turns_played = 0

    def best_move_probability(self, plan: Optional[Plan]) -> float:
        p = self.true_skill
        if plan is not None and plan.show_highlights:
            p += ASSIST_LIFT * plan.assist
        return float(np.clip(p, 0.0, MAX_BEST_PROB))

    def choose_move(self, game: GameBase, plan: Optional[Plan] = None) -> Tuple[Any, bool]:
        """
        Returns:
            (move, mistake) where mistake means a strictly better move existed.
        """
        moves = list(game.valid_moves())
        if not moves:
            raise ValueError("No legal moves for synthetic player")

        scores = np.array([game.score_move(m) for m in moves], dtype=np.float64)
        best = scores.max()

        if self.rng.random() < self.best_move_probability(plan):
            idx = int(self.rng.choice(np.flatnonzero(scores >= best - 1e-9)))
        else:
            idx = int(self.rng.integers(len(moves)))

        return moves[idx], bool(scores[idx] < best - 1e-9)

    def turn_ms(self) -> float:
        """Sample this turn's thinking time."""
        self.turns_played += 1
        slowdown = 1.0 + self.fatigue_rate * self.turns_played
        noise = self.rng.lognormal(mean=0.0, sigma=self.tempo_noise)
        return float(self.turn_time_ms * slowdown * noise)
