"""
Games module - reference games exposing a scored, enumerable action space.
"""

from flow_director.games.game_base import GameBase
from flow_director.games.tic_tac_toe import TicTacToe
from flow_director.games.wythoff import Wythoff, grundy_table, legal_targets

__all__ = [
    "GameBase",
    "TicTacToe",
    "Wythoff",
    "grundy_table",
    "legal_targets",
]
