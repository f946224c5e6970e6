"""
Public API: the FlowDirector session object.

Usage:
    from flow_director import FlowDirector

    director = FlowDirector(seed=42, target_win_rate=0.58)
    director.observe_turn({"turn_ms": 6200, "actions_taken": 2, "mistakes": 0})
    plan = director.observe_game({"player_won": True, "close_game": True})
    move = director.pick_action(game)      # None when the bot has no move

One director per player session. It owns every piece of adaptive state
(player model, beat scheduler, flow controller, seeded generator), so two
sessions never share anything and a session can be rebuilt exactly from
`to_dict()`.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Mapping, NamedTuple, Optional, Sequence

from flow_director.core.sampling import Mulberry32
from flow_director.core.types import Beat, Plan, PlayerSnapshot
from flow_director.director.beats import BeatScheduler
from flow_director.director.flow import FlowController
from flow_director.games.game_base import GameBase
from flow_director.model.player_model import GameInput, PlayerModel, TurnInput
from flow_director.selection.opponent import OpponentSelector
from flow_director.utils.config import DirectorConfig

logger = logging.getLogger(__name__)

STATE_VERSION = 1

# Mid-match fatigue level that switches the running beat to recovery
MID_MATCH_RECOVERY = 0.70


class Recommendation(NamedTuple):
    """Current plan plus the player snapshot it was computed from."""
    plan: Plan
    snapshot: PlayerSnapshot

    def to_dict(self) -> Dict[str, Any]:
        return {**self.plan.to_dict(), "snapshot": self.snapshot.to_dict()}


class FlowDirector:
    """Adaptive difficulty and pacing director for one player session."""

    def __init__(self, config: Optional[DirectorConfig] = None, **overrides: Any):
        if config is None:
            config = DirectorConfig(**overrides)
        elif overrides:
            config = DirectorConfig.from_dict({**config.to_dict(), **overrides})
        self.config = config.with_resolved_seed()

        self.rng = Mulberry32(self.config.seed)
        self.player = PlayerModel(self.config)
        self.beats = BeatScheduler(self.config, self.rng)
        self.flow = FlowController(self.config)
        self.selector = OpponentSelector(self.rng)

        self.current_beat = Beat.TRAINING
        self.current_plan = self.flow.compute(self.player.snapshot(), self.current_beat)

        self.session: Dict[str, Any] = {"started_at": time.time(), "turns": 0, "games": 0}

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def observe_turn(self, summary: TurnInput = None) -> Plan:
        """Record a completed player turn and refresh the plan."""
        self.player.observe_turn(summary)
        self.session["turns"] += 1

        snap = self.player.snapshot()
        # The beat holds for the whole match unless fatigue spikes
        if snap.fatigue > MID_MATCH_RECOVERY and self.current_beat is not Beat.RECOVERY:
            logger.debug("Fatigue %.3f mid-match, switching to recovery", snap.fatigue)
            self.current_beat = Beat.RECOVERY
        self.current_plan = self.flow.compute(snap, self.current_beat)
        return self.current_plan

    def observe_game(self, result: GameInput = None) -> Plan:
        """
        Record a finished match, pick the next beat and refresh the plan.

        The bandit is rewarded for the beat that was *running* during the
        match, not the one just chosen.
        """
        self.player.observe_game(result)
        self.session["games"] += 1

        snap = self.player.snapshot()
        next_beat = self.beats.choose_beat(snap)
        improved = self.flow.note_outcome(snap)
        self.beats.learn(self.current_beat, improved)

        logger.debug(
            "Game %d: beat %s -> %s (improved=%s, skill=%.3f)",
            snap.games, self.current_beat.value, next_beat.value, improved, snap.skill,
        )
        self.current_beat = next_beat
        self.current_plan = self.flow.compute(snap, self.current_beat)
        return self.current_plan

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def recommend(self) -> Recommendation:
        return Recommendation(self.current_plan, self.player.snapshot())

    def snapshot(self) -> Dict[str, Any]:
        """Full diagnostic state for debug/telemetry display."""
        return {
            "config": self.config.to_dict(),
            "player": self.player.snapshot().to_dict(),
            "beat": self.beats.snapshot(),
            "plan": self.current_plan.to_dict(),
            "session": dict(self.session),
        }

    def pick_action(self, game: GameBase, actions: Optional[Sequence[Any]] = None) -> Optional[Any]:
        """Opponent move under the current plan, or None if it has no legal move."""
        return self.selector.pick_action(game, self.current_plan, actions)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "config": self.config.to_dict(),
            "rng_state": self.rng.state,
            "player": self.player.to_dict(),
            "beats": self.beats.to_dict(),
            "flow": self.flow.to_dict(),
            "current_beat": self.current_beat.value,
            "current_plan": self.current_plan.to_dict(),
            "session": dict(self.session),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlowDirector":
        """Rebuild a session exactly as it was when `to_dict()` ran."""
        version = data.get("version", STATE_VERSION)
        if version > STATE_VERSION:
            raise ValueError(f"State version {version} is newer than supported {STATE_VERSION}")

        config = DirectorConfig.from_dict(data["config"])
        director = cls.__new__(cls)
        director.config = config.with_resolved_seed()
        director.rng = Mulberry32(director.config.seed)
        director.rng.state = int(data.get("rng_state", director.rng.state))
        director.player = PlayerModel.from_dict(data["player"], director.config)
        director.beats = BeatScheduler.from_dict(data.get("beats", {}), director.config, director.rng)
        director.flow = FlowController.from_dict(data.get("flow", {}), director.config)
        director.selector = OpponentSelector(director.rng)
        director.current_beat = Beat(data.get("current_beat", Beat.TRAINING.value))
        if "current_plan" in data:
            director.current_plan = Plan.from_dict(data["current_plan"])
        else:
            director.current_plan = director.flow.compute(director.player.snapshot(), director.current_beat)
        session = data.get("session") or {}
        director.session = {
            "started_at": float(session.get("started_at", time.time())),
            "turns": int(session.get("turns", 0)),
            "games": int(session.get("games", 0)),
        }
        return director


__all__ = [
    "FlowDirector",
    "Recommendation",
]
