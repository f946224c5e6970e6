"""
Model module - the statistical player model.
"""

from flow_director.model.player_model import PlayerModel

__all__ = [
    "PlayerModel",
]
