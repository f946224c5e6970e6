"""
Simulation module - offline sessions against a synthetic player.

Provides the infrastructure for exercising the director end to end
without a UI: the synthetic player stands in for the human, the
director's opponent selector plays the other seat.
"""

from flow_director.simulation.synthetic import SyntheticPlayer
from flow_director.simulation.runner import MatchRecord, SessionReport, play_match, run_session

__all__ = [
    "SyntheticPlayer",
    "MatchRecord",
    "SessionReport",
    "play_match",
    "run_session",
]
