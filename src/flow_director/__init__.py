"""
Flow Director - player-adaptive difficulty and pacing for mini-games.

Watches how a player plays (turn timing, mistakes, wins and losses),
keeps a running estimate of skill, engagement and fatigue, and turns it
into concrete knobs: opponent strength, think time and assist level,
aiming for a target win rate without wearing the player out.

Quick Start:
    from flow_director import FlowDirector

    director = FlowDirector(seed=42)
    director.observe_turn({"turn_ms": 5400, "actions_taken": 2, "mistakes": 0})
    plan = director.observe_game({"player_won": True})
    move = director.pick_action(game)

Modules:
    core       - Types (Plan, Beat), estimators (EMA, RunningStats), samplers
    model      - PlayerModel
    director   - BeatScheduler (Thompson bandit), FlowController
    selection  - Opponent move selection with one-ply lookahead
    games      - GameBase contract and reference games
    storage    - SQLite session persistence
    simulation - Synthetic player and offline sessions
"""

from flow_director.api import FlowDirector, Recommendation

from flow_director.core import (
    AssistMode,
    Beat,
    GameResult,
    Plan,
    PlayerSnapshot,
    TurnSummary,
)
from flow_director.selection import OpponentSelector, pick_action
from flow_director.utils.config import DirectorConfig

__version__ = "1.0.0"

__all__ = [
    # Main API
    "FlowDirector",
    "Recommendation",
    "DirectorConfig",
    "OpponentSelector",
    "pick_action",
    # Types
    "AssistMode",
    "Beat",
    "GameResult",
    "Plan",
    "PlayerSnapshot",
    "TurnSummary",
]
