"""
Beat scheduling with Thompson sampling.

Each beat (recovery / training / challenge / novelty) is a Beta-Bernoulli
bandit arm. Once per finished match the scheduler:

    1. notes which beats are on cooldown, then ticks cooldowns down
    2. forces RECOVERY when fatigue is high (no sampling at all)
    3. otherwise scores every beat as
           Beta(a, b) draw + heuristic bias - cooldown penalty
       and picks the argmax

The reward fed back through `learn()` is "did flow + engagement improve
since the previous match", judged by the flow controller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union

from flow_director.core.sampling import UniformSource, beta_sample
from flow_director.core.types import BEAT_ORDER, Beat, PlayerSnapshot
from flow_director.utils.config import DirectorConfig

logger = logging.getLogger(__name__)


FATIGUE_OVERRIDE = 0.62
COOLDOWN_PENALTY = 0.12

# Heuristic bias thresholds
LOW_ENGAGEMENT = 0.52
LOW_ERROR = 0.18
HIGH_ERROR = 0.30
FAST_TEMPO = 0.95
WIN_RATE_BAND = 0.08


class BanditArm:
    """Beta-distributed success rate for one beat, prior Beta(1, 1)."""

    __slots__ = ("name", "a", "b")

    def __init__(self, name: str, a: float = 1.0, b: float = 1.0):
        self.name = name
        self.a = a
        self.b = b

    def update(self, success: bool, weight: float = 1.0) -> None:
        # Non-positive weights would break a, b > 0
        if weight <= 0:
            return
        if success:
            self.a += weight
        else:
            self.b += weight

    def reset(self) -> None:
        self.a = 1.0
        self.b = 1.0

    def mean(self) -> float:
        return self.a / (self.a + self.b)

    def sample(self, rng: UniformSource) -> float:
        return beta_sample(self.a, self.b, rng)

    def __repr__(self) -> str:
        return f"BanditArm({self.name!r}, a={self.a}, b={self.b})"


class BeatScheduler:
    """Chooses the beat for the next match."""

    def __init__(self, config: DirectorConfig, rng: UniformSource):
        self.config = config
        self.rng = rng
        self.arms: Dict[Beat, BanditArm] = {beat: BanditArm(beat.value) for beat in BEAT_ORDER}
        self.last_beat = Beat.TRAINING
        self.cooldowns: Dict[Beat, int] = {beat: 0 for beat in BEAT_ORDER}

    def tick_cooldowns(self) -> None:
        for beat in self.cooldowns:
            self.cooldowns[beat] = max(0, self.cooldowns[beat] - 1)

    def heuristic_bias(self, snap: PlayerSnapshot) -> Dict[Beat, float]:
        """Additive per-beat bias from simple rules on the player snapshot."""
        target = self.config.target_win_rate
        tempo = snap.turn_time_ema / self.config.turn_time_target_ms
        bias = {beat: 0.0 for beat in BEAT_ORDER}

        # Disengaged but not struggling: probably bored
        if snap.engagement < LOW_ENGAGEMENT and snap.error_rate_ema < LOW_ERROR and tempo < FAST_TEMPO:
            bias[Beat.NOVELTY] += 0.20

        # Disengaged and making mistakes: overwhelmed
        if snap.engagement < LOW_ENGAGEMENT and snap.error_rate_ema > HIGH_ERROR:
            bias[Beat.TRAINING] += 0.16
            bias[Beat.RECOVERY] += 0.12

        if snap.win_rate_ema > target + WIN_RATE_BAND:
            bias[Beat.CHALLENGE] += 0.18
        if snap.win_rate_ema < target - WIN_RATE_BAND:
            bias[Beat.TRAINING] += 0.18

        return bias

    def choose_beat(self, snap: PlayerSnapshot) -> Beat:
        # Penalties are read before the tick, so a cooldown of 1 covers exactly this call
        penalties = {
            beat: COOLDOWN_PENALTY if self.cooldowns[beat] > 0 else 0.0 for beat in BEAT_ORDER
        }
        self.tick_cooldowns()

        if snap.fatigue > FATIGUE_OVERRIDE:
            self.cooldowns[Beat.RECOVERY] = 1
            self.last_beat = Beat.RECOVERY
            logger.debug("Fatigue %.3f above %.2f, forcing recovery", snap.fatigue, FATIGUE_OVERRIDE)
            return Beat.RECOVERY

        bias = self.heuristic_bias(snap)

        best: Optional[Beat] = None
        best_score = float("-inf")
        # Strict '>' keeps the earliest beat in BEAT_ORDER on ties
        for beat in BEAT_ORDER:
            score = self.arms[beat].sample(self.rng) + bias[beat] - penalties[beat]
            if score > best_score:
                best, best_score = beat, score

        assert best is not None
        self.cooldowns[best] = 1
        self.last_beat = best
        logger.debug("Chose beat %s (score %.3f)", best.value, best_score)
        return best

    def learn(self, beat: Union[Beat, str], improvement: bool) -> None:
        """Feed a Bernoulli reward back into `beat`'s arm; unknown beats are ignored."""
        try:
            key = Beat(beat)
        except ValueError:
            return
        self.arms[key].update(bool(improvement), 1.0)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "last_beat": self.last_beat.value,
            "arms": {
                beat.value: {"mean": arm.mean(), "a": arm.a, "b": arm.b}
                for beat, arm in self.arms.items()
            },
            "cooldowns": {beat.value: cd for beat, cd in self.cooldowns.items()},
        }

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_beat": self.last_beat.value,
            "arms": {beat.value: {"a": arm.a, "b": arm.b} for beat, arm in self.arms.items()},
            "cooldowns": {beat.value: cd for beat, cd in self.cooldowns.items()},
        }

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], config: DirectorConfig, rng: UniformSource
    ) -> "BeatScheduler":
        scheduler = cls(config, rng)
        scheduler.last_beat = Beat(data.get("last_beat", Beat.TRAINING.value))
        for name, arm in (data.get("arms") or {}).items():
            beat = Beat(name)
            scheduler.arms[beat] = BanditArm(beat.value, float(arm["a"]), float(arm["b"]))
        for name, cd in (data.get("cooldowns") or {}).items():
            scheduler.cooldowns[Beat(name)] = max(0, int(cd))
        return scheduler
