"""
GameBase - abstract base class for games the opponent selector can play.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence


class GameBase(ABC):
    """
    Abstract base class for turn-based games.

    IMPORTANT ARCHITECTURE NOTE:
    -----------------------------
    - Games expose an enumerable, scored action space and nothing else.
    - The selector never inspects game internals; it only calls
      valid_moves(), score_move(), deep_clone(), apply_move() and evaluate().
    - evaluate() is from the given player's point of view, in [-1, 1].

    Do NOT put difficulty logic here.
    """

    @abstractmethod
    def game_id(self) -> str:
        """Return a stable identifier (e.g. 'wythoff')."""
        pass

    @abstractmethod
    def num_players(self) -> int:
        pass

    @abstractmethod
    def deep_clone(self) -> "GameBase":
        """
        Deep copy of game + state.
        Used for lookahead: the selector mutates clones, never the live game.
        """
        pass

    @abstractmethod
    def current_player(self) -> int:
        """Return ID of player to act."""
        pass

    @abstractmethod
    def valid_moves(self) -> Sequence[Any]:
        """
        Return all legal moves from the current state.
        An empty sequence means the player to act has no move.
        """
        pass

    @abstractmethod
    def apply_move(self, move: Any, *, validated: bool = False) -> None:
        """
        Apply a move to the game. Mutates internal state.

        Args:
            move: The move to apply.
            validated:  If True, skip validation (caller guarantees
                        the move came from valid_moves()).
        """
        pass

    @abstractmethod
    def is_over(self) -> bool:
        pass

    @abstractmethod
    def winner(self) -> int:
        """Winning player ID, or 0 while undecided / drawn."""
        pass

    @abstractmethod
    def score_move(self, move: Any) -> float:
        """
        Immediate heuristic value of `move` for the player to act.
        Higher is better. No lookahead.
        """
        pass

    @abstractmethod
    def evaluate(self, player: int) -> float:
        """
        Static value of the current position for `player`:
            +1 won, -1 lost, values in between are advantage estimates.
        """
        pass

    @abstractmethod
    def state_string(self) -> str:
        """Pretty string representation of the state."""
        pass

    def opponent_of(self, player: int) -> int:
        """Next player in seat order (two-player games: 1 <-> 2)."""
        return player % self.num_players() + 1
