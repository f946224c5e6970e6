"""
Opponent move selection driven by the current Plan.

Scoring:
    score(a) = immediate(a)                                   depth 1
    score(a) = immediate(a) + gamma * min(after, best_reply)  depth 2

where `after` is the bot's evaluation once `a` is played and `best_reply`
is the bot's evaluation after the player's strongest answer. This equals
after - max(0, after - best_reply): a one-ply minimax discount, not a full
search. Positions with no reply (game over, or the player is stuck) keep
`after` unchanged.

Randomness:
    margin     = randomness * (best - worst)
    candidates = {a : score(a) >= best - margin}
    pick uniformly among candidates

Lower difficulty means more randomness, a wider window, and believable
sub-optimal moves without any scripted blunders.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

import numpy as np

from flow_director.core.sampling import UniformSource, randrange
from flow_director.core.types import Plan
from flow_director.games.game_base import GameBase

DEFAULT_GAMMA = 0.65

# Scores this close to the window edge count as inside it
WINDOW_TOLERANCE = 1e-9


def reply_value(game: GameBase, actor: int) -> float:
    """
    Actor's evaluation after the opponent's strongest reply.

    Falls back to the static evaluation when no reply exists.
    """
    after = game.evaluate(actor)
    if game.is_over():
        return after
    replies = game.valid_moves()
    if len(replies) == 0:
        return after

    worst = after
    for i, reply in enumerate(replies):
        child = game.deep_clone()
        child.apply_move(reply, validated=True)
        value = child.evaluate(actor)
        if i == 0 or value < worst:
            worst = value
    return worst


def lookahead_value(game: GameBase, move: Any, actor: int) -> float:
    """min(after, best_reply) for `move` played by `actor`."""
    child = game.deep_clone()
    child.apply_move(move, validated=True)
    after = child.evaluate(actor)
    best_reply = reply_value(child, actor)
    return after - max(0.0, after - best_reply)


def score_actions(
    game: GameBase,
    actions: Sequence[Any],
    search_depth: int,
    gamma: float = DEFAULT_GAMMA,
) -> np.ndarray:
    """Combined score for each action, in the order given."""
    actor = game.current_player()
    scores = np.empty(len(actions), dtype=np.float64)
    for i, move in enumerate(actions):
        score = game.score_move(move)
        if search_depth >= 2:
            score += gamma * lookahead_value(game, move, actor)
        scores[i] = score
    return scores


def window(scores: np.ndarray, randomness: float) -> np.ndarray:
    """Indices of the actions whose score lies within the randomness margin of the best."""
    if scores.size == 0:
        return np.empty(0, dtype=np.intp)
    best = float(scores.max())
    spread = best - float(scores.min())
    margin = max(0.0, randomness) * spread
    return np.flatnonzero(scores >= best - margin - WINDOW_TOLERANCE)


class OpponentSelector:
    """Plan-modulated move picker sharing the session's seeded generator."""

    def __init__(self, rng: UniformSource, gamma: float = DEFAULT_GAMMA):
        self.rng = rng
        self.gamma = gamma

    def score_actions(self, game: GameBase, plan: Plan, actions: Sequence[Any]) -> np.ndarray:
        return score_actions(game, actions, plan.search_depth, self.gamma)

    def pick_action(
        self,
        game: GameBase,
        plan: Plan,
        actions: Optional[Sequence[Any]] = None,
    ) -> Optional[Any]:
        """
        Pick the bot's move.

        Args:
            game: Live game; it is never mutated (lookahead uses clones).
            plan: Current plan (search_depth, randomness).
            actions: Legal actions; defaults to game.valid_moves().

        Returns:
            The chosen move, or None when there is no legal move.
        """
        if actions is None:
            actions = game.valid_moves()
        actions = list(actions)
        if not actions:
            return None

        scores = self.score_actions(game, plan, actions)
        candidates: List[int] = window(scores, plan.randomness).tolist()
        choice = candidates[randrange(self.rng, len(candidates))]
        return actions[choice]


def pick_action(
    actions: Sequence[Any],
    game: GameBase,
    plan: Plan,
    rng: UniformSource,
) -> Optional[Any]:
    """Functional interface: pick from `actions`, or None if there are none."""
    if len(actions) == 0:
        return None
    return OpponentSelector(rng).pick_action(game, plan, actions)
