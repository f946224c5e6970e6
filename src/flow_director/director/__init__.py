"""
Director module - beat scheduling and knob computation.
"""

from flow_director.director.beats import BanditArm, BeatScheduler
from flow_director.director.flow import FlowController, depth_for, randomness_for

__all__ = [
    "BanditArm",
    "BeatScheduler",
    "FlowController",
    "depth_for",
    "randomness_for",
]
