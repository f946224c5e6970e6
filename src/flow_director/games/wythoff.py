"""
Wythoff's game ("corner the queen").

A queen sits at (x, y). Each turn the mover slides it any distance left,
down, or diagonally down-left. Whoever moves it to (0, 0) wins.

Positions are classified with a Grundy table:
    grundy == 0  cold  (player to move loses against perfect play)
    grundy  > 0  hot   (player to move can reach a cold square)

The table is computed once per board size with NumPy and cached.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Tuple

import numpy as np

from flow_director.core.sampling import UniformSource, uniform_int
from flow_director.games.game_base import GameBase

Move = Tuple[int, int]

# Skill bands -> (min size, max size, min start coordinate)
SKILL_BANDS = (
    (0.35, (8, 10, 2)),
    (0.70, (11, 15, 4)),
    (1.01, (16, 20, 6)),
)

START_ATTEMPTS = 100


@lru_cache(maxsize=32)
def grundy_table(size: int) -> np.ndarray:
    """
    Grundy numbers for every position 0..size on both axes.

    Returned array is read-only; shape (size + 1, size + 1).
    """
    table = np.zeros((size + 1, size + 1), dtype=np.int16)
    for x in range(size + 1):
        for y in range(size + 1):
            if x == 0 and y == 0:
                continue
            seen = set(table[:x, y].tolist())
            seen.update(table[x, :y].tolist())
            d = min(x, y)
            if d:
                seen.update(table[x - np.arange(1, d + 1), y - np.arange(1, d + 1)].tolist())
            mex = 0
            while mex in seen:
                mex += 1
            table[x, y] = mex
    table.setflags(write=False)
    return table


def legal_targets(x: int, y: int) -> List[Move]:
    moves: List[Move] = [(x - k, y) for k in range(1, x + 1)]
    moves += [(x, y - k) for k in range(1, y + 1)]
    moves += [(x - k, y - k) for k in range(1, min(x, y) + 1)]
    return moves


class Wythoff(GameBase):
    """Two-player Wythoff's game; player 1 moves first."""

    __slots__ = ("x", "y", "size", "player", "_winner", "_table")

    def __init__(self, x: int = 8, y: int = 5, size: int | None = None, current_player: int = 1):
        if x < 0 or y < 0:
            raise ValueError(f"Coordinates must be non-negative, got ({x},{y})")
        self.x = int(x)
        self.y = int(y)
        self.size = int(size) if size is not None else max(self.x, self.y)
        if self.size < max(self.x, self.y):
            raise ValueError(f"Board size {self.size} smaller than position ({x},{y})")
        self.player = current_player
        self._winner = 0
        self._table = grundy_table(self.size)

    @classmethod
    def for_skill(cls, skill: float, rng: UniformSource, current_player: int = 1) -> "Wythoff":
        """
        Start position matched to the player's skill.

        Weaker players get small boards and short games; stronger players
        get larger boards with the queen further from the corner. The start
        is always hot, so the side moving first can win with correct play.
        """
        size_lo, size_hi, min_coord = next(band for limit, band in SKILL_BANDS if skill < limit)
        size = uniform_int(rng, size_lo, size_hi)
        table = grundy_table(size)
        max_coord = max(min_coord, size - 1)

        lo = min_coord
        for attempt in range(START_ATTEMPTS * 10):
            if attempt == START_ATTEMPTS:
                lo = 1
            x = uniform_int(rng, lo, max_coord)
            y = uniform_int(rng, lo, max_coord)
            if table[x, y] != 0:
                return cls(x, y, size=size, current_player=current_player)

        # Every row above 0 holds a hot square; take the first one
        x, y = (int(v) for v in np.argwhere(table[1:, 1:] != 0)[0] + 1)
        return cls(x, y, size=size, current_player=current_player)

    # -------------------------------------------------------------------------
    # GameBase
    # -------------------------------------------------------------------------

    def game_id(self) -> str:
        return "wythoff"

    def num_players(self) -> int:
        return 2

    def deep_clone(self) -> "Wythoff":
        g = Wythoff.__new__(Wythoff)
        g.x, g.y, g.size = self.x, self.y, self.size
        g.player = self.player
        g._winner = self._winner
        g._table = self._table
        return g

    def current_player(self) -> int:
        return self.player

    def valid_moves(self) -> List[Move]:
        if self._winner:
            return []
        return legal_targets(self.x, self.y)

    def apply_move(self, move: Move, *, validated: bool = False) -> None:
        tx, ty = int(move[0]), int(move[1])
        if not validated:
            dx, dy = self.x - tx, self.y - ty
            straight = (dx > 0 and dy == 0) or (dx == 0 and dy > 0)
            diagonal = dx == dy and dx > 0
            if tx < 0 or ty < 0 or not (straight or diagonal):
                raise ValueError(f"Illegal move ({self.x},{self.y}) -> ({tx},{ty})")

        self.x, self.y = tx, ty
        if tx == 0 and ty == 0:
            self._winner = self.player
        self.player = 3 - self.player

    def is_over(self) -> bool:
        return self._winner != 0

    def winner(self) -> int:
        return self._winner

    def grundy(self, x: int | None = None, y: int | None = None) -> int:
        x = self.x if x is None else x
        y = self.y if y is None else y
        return int(self._table[x, y])

    def is_cold(self, x: int | None = None, y: int | None = None) -> bool:
        return self.grundy(x, y) == 0

    def score_move(self, move: Move) -> float:
        tx, ty = int(move[0]), int(move[1])
        if tx == 0 and ty == 0:
            return 2.0
        g = int(self._table[tx, ty])
        if g == 0:
            # Cold target; prefer ones that leave the opponent many (losing) options
            replies = tx + ty + min(tx, ty)
            return 1.0 + 0.1 * replies / max(1, 3 * self.size)
        max_g = max(1, int(self._table.max()))
        return -0.5 * g / max_g

    def evaluate(self, player: int) -> float:
        if self._winner:
            return 1.0 if self._winner == player else -1.0
        # Cold squares lose for the side to move
        to_move_value = -0.8 if self.is_cold() else 0.8
        return to_move_value if self.player == player else -to_move_value

    def state_string(self) -> str:
        mark = "cold" if self.is_cold() else "hot"
        return f"Queen at ({self.x},{self.y}) on {self.size}x{self.size} [{mark}], player {self.player} to move"
