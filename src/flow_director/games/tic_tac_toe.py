"""
TicTacToe game implementation with heuristic move scoring.

Uses int8 board:
    0 = empty
    1 = player 1 (X)
    2 = player 2 (O)
"""

from __future__ import annotations

from typing import List

import numpy as np

from flow_director.games.game_base import GameBase

# Cell strings: each cell value maps to its display string
CELL_STRINGS = {0: " ", 1: "X", 2: "O"}

# Pre-computed winning lines (indices into flattened 3x3 board)
_WIN_LINES = np.array([
    [0, 1, 2], [3, 4, 5], [6, 7, 8],  # rows
    [0, 3, 6], [1, 4, 7], [2, 5, 8],  # cols
    [0, 4, 8], [2, 4, 6],             # diagonals
], dtype=np.int8)

_CENTER = (1, 1)
_CORNERS = {(0, 0), (0, 2), (2, 0), (2, 2)}

# Heuristic weights
WIN_SCORE = 2.0
BLOCK_SCORE = 1.2
THREAT_SCORE = 0.15
CENTER_SCORE = 0.3
CORNER_SCORE = 0.2


def _open_twos(flat: np.ndarray, player: int) -> int:
    """Lines holding two of `player`'s marks and one empty cell."""
    lines = flat[_WIN_LINES]
    mine = (lines == player).sum(axis=1)
    empty = (lines == 0).sum(axis=1)
    return int(np.count_nonzero((mine == 2) & (empty == 1)))


def _completes_line(flat: np.ndarray, idx: int, player: int) -> bool:
    for line in _WIN_LINES:
        if idx in line:
            others = [int(i) for i in line if i != idx]
            if flat[others[0]] == player and flat[others[1]] == player:
                return True
    return False


class TicTacToe(GameBase):
    """TicTacToe with a scored action space."""

    __slots__ = ("board", "player", "_winner")

    def __init__(self):
        self.board = np.zeros((3, 3), dtype=np.int8)
        self.player = 1
        self._winner = 0  # 0=none, 1=player1, 2=player2

    def game_id(self) -> str:
        return "tic_tac_toe"

    def num_players(self) -> int:
        return 2

    def deep_clone(self) -> "TicTacToe":
        g = TicTacToe.__new__(TicTacToe)
        g.board = self.board.copy()
        g.player = self.player
        g._winner = self._winner
        return g

    def current_player(self) -> int:
        return self.player

    def valid_moves(self) -> List[np.ndarray]:
        """Empty cell positions as (row, col) arrays; none once decided."""
        if self._winner:
            return []
        return list(np.argwhere(self.board == 0))

    def apply_move(self, move: np.ndarray, *, validated: bool = False) -> None:
        r, c = int(move[0]), int(move[1])

        if not validated and self.board[r, c] != 0:
            raise ValueError(f"Cell ({r},{c}) is occupied")

        player = self.player
        self.board[r, c] = player

        flat = self.board.ravel()
        for line in _WIN_LINES:
            if flat[line[0]] == player and flat[line[1]] == player and flat[line[2]] == player:
                self._winner = player
                break

        self.player = 3 - player  # Toggle 1↔2

    def is_over(self) -> bool:
        return self._winner != 0 or not np.any(self.board == 0)

    def winner(self) -> int:
        return self._winner

    def score_move(self, move: np.ndarray) -> float:
        r, c = int(move[0]), int(move[1])
        idx = r * 3 + c
        flat = self.board.ravel()
        player = self.player
        opponent = 3 - player

        if _completes_line(flat, idx, player):
            return WIN_SCORE

        score = 0.0
        if _completes_line(flat, idx, opponent):
            score += BLOCK_SCORE

        after = flat.copy()
        after[idx] = player
        score += THREAT_SCORE * _open_twos(after, player)

        if (r, c) == _CENTER:
            score += CENTER_SCORE
        elif (r, c) in _CORNERS:
            score += CORNER_SCORE
        return score

    def evaluate(self, player: int) -> float:
        if self._winner:
            return 1.0 if self._winner == player else -1.0
        if not np.any(self.board == 0):
            return 0.0

        flat = self.board.ravel()
        mine = _open_twos(flat, player)
        theirs = _open_twos(flat, 3 - player)

        # Whoever is to move with an open two wins next turn
        if self.player == player and mine:
            return 0.8
        if self.player != player and theirs:
            return -0.8
        return float(np.clip(0.25 * (mine - theirs), -0.6, 0.6))

    def state_string(self) -> str:
        board = self.board
        lines = ["╭───┬───┬───╮"]
        for i in range(3):
            row = "│ " + " │ ".join(CELL_STRINGS[int(board[i, j])] for j in range(3)) + " │"
            lines.append(row)
            if i < 2:
                lines.append("├───┼───┼───┤")
        lines.append("╰───┴───┴───╯")
        return "\n".join(lines)
