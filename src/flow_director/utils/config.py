"""
Configuration and game registry.
"""

from __future__ import annotations

import dataclasses
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from flow_director.games import TicTacToe, Wythoff


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

PACKAGE_DIR = Path(__file__).parent.parent  # src/flow_director/
DATA_DIR = PACKAGE_DIR / "data"
SESSION_DB = DATA_DIR / "sessions.db"


# ---------------------------------------------------------------------------
# Game Registry
# ---------------------------------------------------------------------------

GAMES = {
    "wythoff": Wythoff,
    "tic_tac_toe": TicTacToe,
}


# ---------------------------------------------------------------------------
# Director Settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectorConfig:
    """
    Every option the director recognises, with its default.

    Validated once at construction; observation payloads are never
    validated, only clamped.
    """
    target_win_rate: float = 0.58
    error_rate_target: float = 0.22
    turn_time_target_ms: float = 7000.0
    actions_per_turn_target: float = 2.0
    base_opponent_delay_ms: float = 650.0
    skill_initial: float = 0.50
    skill_variance_initial: float = 0.22
    seed: Optional[int] = None

    def __post_init__(self):
        if not 0.0 < self.target_win_rate < 1.0:
            raise ValueError(f"target_win_rate must be in (0, 1), got {self.target_win_rate}")
        if not 0.0 <= self.error_rate_target <= 1.0:
            raise ValueError(f"error_rate_target must be in [0, 1], got {self.error_rate_target}")
        for name in ("turn_time_target_ms", "actions_per_turn_target", "base_opponent_delay_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if not 0.02 <= self.skill_initial <= 0.98:
            raise ValueError(f"skill_initial must be in [0.02, 0.98], got {self.skill_initial}")
        if not 0.05 <= self.skill_variance_initial <= 0.35:
            raise ValueError(
                f"skill_variance_initial must be in [0.05, 0.35], got {self.skill_variance_initial}"
            )

    def with_resolved_seed(self) -> "DirectorConfig":
        """Return a copy whose seed is concrete (time/pid derived if unset)."""
        if self.seed is not None:
            return self
        return dataclasses.replace(self, seed=_entropy_seed())

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DirectorConfig":
        """Build from a mapping, ignoring keys this version does not know."""
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def _entropy_seed() -> int:
    return (time.time_ns() ^ (os.getpid() << 16)) & 0xFFFFFFFF


# Default configuration
DEFAULT_CONFIG = DirectorConfig()
