"""
Factory functions for creating directors and games.
"""

from typing import Any, Optional

from flow_director.api import FlowDirector
from flow_director.core.sampling import UniformSource
from flow_director.games.game_base import GameBase
from flow_director.utils.config import GAMES, DirectorConfig


def create_director(config: Optional[DirectorConfig] = None, **overrides: Any) -> FlowDirector:
    """
    Create a director session.

    Args:
        config: Base configuration (defaults if omitted)
        **overrides: Individual DirectorConfig fields to override

    Returns:
        A fresh FlowDirector
    """
    return FlowDirector(config, **overrides)


def create_game(
    game_name: str,
    skill: Optional[float] = None,
    rng: Optional[UniformSource] = None,
) -> GameBase:
    """
    Create a game instance in its starting position.

    Args:
        game_name: Key from GAMES registry (e.g., "wythoff")
        skill: Player skill estimate; games that support it pick a
               start position to match (requires `rng`)
        rng: Uniform source used for skill-matched starts

    Returns:
        Configured game instance
    """
    if game_name not in GAMES:
        available = ", ".join(GAMES.keys())
        raise ValueError(f"Unknown game: {game_name}. Available: {available}")

    game_class = GAMES[game_name]
    if skill is not None and rng is not None and hasattr(game_class, "for_skill"):
        return game_class.for_skill(skill, rng)
    return game_class()
