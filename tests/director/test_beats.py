"""
Tests for flow_director.director.beats

Thompson-sampling beat scheduler: overrides, bias rules, cooldowns,
tie-breaking, learning and determinism.
"""

import json

import pytest

from flow_director.core.sampling import Mulberry32
from flow_director.core.types import BEAT_ORDER, Beat
from flow_director.director.beats import (
    COOLDOWN_PENALTY,
    FATIGUE_OVERRIDE,
    BanditArm,
    BeatScheduler,
)


class TestBanditArm:
    """BanditArm pseudo-counts."""

    def test_prior(self):
        """Fresh arm is Beta(1, 1) with mean 0.5."""
        arm = BanditArm("training")
        assert (arm.a, arm.b) == (1.0, 1.0)
        assert arm.mean() == 0.5

    def test_update(self):
        """Success adds to a, failure to b."""
        arm = BanditArm("training")
        arm.update(True)
        arm.update(False, weight=2.0)
        assert (arm.a, arm.b) == (2.0, 3.0)

    @pytest.mark.parametrize("weight", [0.0, -1.0])
    def test_non_positive_weight_ignored(self, weight):
        """Non-positive weights leave the arm untouched."""
        arm = BanditArm("novelty")
        arm.update(True, weight)
        arm.update(False, weight)
        assert (arm.a, arm.b) == (1.0, 1.0)

    def test_reset(self):
        """reset() restores the prior."""
        arm = BanditArm("challenge", 7.0, 3.0)
        arm.reset()
        assert (arm.a, arm.b) == (1.0, 1.0)

    def test_sample_in_unit_interval(self, rng):
        """Thompson draws are probabilities."""
        arm = BanditArm("recovery", 3.0, 9.0)
        draws = [arm.sample(rng) for _ in range(500)]
        assert all(0.0 <= d <= 1.0 for d in draws)


class TestLearning:
    """learn() feeds rewards into arms."""

    @pytest.mark.parametrize("beat", list(BEAT_ORDER))
    def test_repeated_success_mean_to_one(self, config, rng, beat):
        """Only successes drive the arm mean toward 1."""
        scheduler = BeatScheduler(config, rng)
        for n in (10, 100, 1000):
            while scheduler.arms[beat].a < n + 1:
                scheduler.learn(beat, True)
            assert scheduler.arms[beat].mean() == pytest.approx(1 - 1 / (n + 2))
        assert scheduler.arms[beat].mean() > 0.99

    def test_learn_accepts_strings(self, config, rng):
        """Beat names are accepted as plain strings."""
        scheduler = BeatScheduler(config, rng)
        scheduler.learn("novelty", False)
        assert scheduler.arms[Beat.NOVELTY].b == 2.0

    def test_unknown_beat_ignored(self, config, rng):
        """Unknown beat names are a no-op."""
        scheduler = BeatScheduler(config, rng)
        before = scheduler.to_dict()
        scheduler.learn("boss_rush", True)
        assert scheduler.to_dict() == before


class TestHeuristicBias:
    """Rule-based per-beat bias."""

    def test_neutral_player_no_bias(self, config, rng, neutral_snapshot):
        """A player on every target gets no bias."""
        bias = BeatScheduler(config, rng).heuristic_bias(neutral_snapshot)
        assert all(v == 0.0 for v in bias.values())

    def test_bored_player_novelty(self, config, rng, make_snapshot):
        """Disengaged, accurate and fast suggests novelty."""
        snap = make_snapshot(engagement=0.4, error_rate_ema=0.1, turn_time_ema=5000.0)
        bias = BeatScheduler(config, rng).heuristic_bias(snap)
        assert bias[Beat.NOVELTY] == pytest.approx(0.20)

    def test_overwhelmed_player_training_recovery(self, config, rng, make_snapshot):
        """Disengaged and error-prone suggests training and recovery."""
        snap = make_snapshot(engagement=0.4, error_rate_ema=0.4)
        bias = BeatScheduler(config, rng).heuristic_bias(snap)
        assert bias[Beat.TRAINING] == pytest.approx(0.16)
        assert bias[Beat.RECOVERY] == pytest.approx(0.12)
        assert bias[Beat.NOVELTY] == 0.0

    def test_win_rate_bands(self, config, rng, make_snapshot):
        """Win rate well above target biases challenge, well below biases training."""
        scheduler = BeatScheduler(config, rng)
        high = scheduler.heuristic_bias(make_snapshot(win_rate_ema=config.target_win_rate + 0.1))
        low = scheduler.heuristic_bias(make_snapshot(win_rate_ema=config.target_win_rate - 0.1))
        assert high[Beat.CHALLENGE] == pytest.approx(0.18)
        assert low[Beat.TRAINING] == pytest.approx(0.18)


class TestChooseBeat:
    """choose_beat selection rules."""

    @pytest.mark.parametrize("fatigue", [FATIGUE_OVERRIDE + 1e-6, 0.7, 0.95, 1.0])
    def test_fatigue_forces_recovery(self, config, rng, make_snapshot, fatigue):
        """High fatigue always yields recovery, whatever the arms say."""
        scheduler = BeatScheduler(config, rng)
        scheduler.arms[Beat.NOVELTY] = BanditArm("novelty", 1000.0, 1.0)
        scheduler.arms[Beat.RECOVERY] = BanditArm("recovery", 1.0, 1000.0)
        snap = make_snapshot(
            fatigue=fatigue,
            win_rate_ema=0.95,
            engagement=0.1,
            error_rate_ema=0.05,
            turn_time_ema=3000.0,
        )
        for _ in range(25):
            assert scheduler.choose_beat(snap) is Beat.RECOVERY
        assert scheduler.last_beat is Beat.RECOVERY

    def test_forced_recovery_draws_nothing(self, config, make_snapshot):
        """The override bypasses sampling entirely."""
        rng = Mulberry32(3)
        scheduler = BeatScheduler(config, rng)
        state = rng.state
        scheduler.choose_beat(make_snapshot(fatigue=0.9))
        assert rng.state == state

    def test_ties_break_in_priority_order(self, config, constant_rng, neutral_snapshot):
        """Equal scores go to the earliest beat in priority order."""
        scheduler = BeatScheduler(config, constant_rng)
        assert scheduler.choose_beat(neutral_snapshot) is Beat.RECOVERY

    def test_cooldown_suppresses_immediate_repeat(self, config, constant_rng, neutral_snapshot):
        """The previous winner is penalised on exactly the next choice."""
        scheduler = BeatScheduler(config, constant_rng)
        assert scheduler.choose_beat(neutral_snapshot) is Beat.RECOVERY
        assert scheduler.choose_beat(neutral_snapshot) is Beat.TRAINING
        assert scheduler.choose_beat(neutral_snapshot) is Beat.RECOVERY

    def test_bias_outweighs_cooldown(self, config, constant_rng, make_snapshot):
        """A bias larger than the cooldown penalty can still repeat a beat."""
        scheduler = BeatScheduler(config, constant_rng)
        snap = make_snapshot(win_rate_ema=0.9)
        assert 0.18 > COOLDOWN_PENALTY
        assert scheduler.choose_beat(snap) is Beat.CHALLENGE
        assert scheduler.choose_beat(snap) is Beat.CHALLENGE

    def test_winner_gets_cooldown(self, config, rng, neutral_snapshot):
        """Only the chosen beat is on cooldown afterwards."""
        scheduler = BeatScheduler(config, rng)
        beat = scheduler.choose_beat(neutral_snapshot)
        assert scheduler.cooldowns[beat] == 1
        assert sum(scheduler.cooldowns.values()) == 1

    def test_same_seed_same_choices(self, config, make_snapshot):
        """Two schedulers seeded with 42 make identical choices."""
        a = BeatScheduler(config, Mulberry32(42))
        b = BeatScheduler(config, Mulberry32(42))
        snaps = [
            make_snapshot(engagement=e, win_rate_ema=w, error_rate_ema=r)
            for e, w, r in [(0.7, 0.58, 0.22), (0.4, 0.3, 0.4), (0.5, 0.8, 0.1), (0.9, 0.5, 0.2)]
        ]
        choices_a, choices_b = [], []
        for i in range(40):
            snap = snaps[i % len(snaps)]
            choices_a.append(a.choose_beat(snap))
            choices_b.append(b.choose_beat(snap))
            a.learn(choices_a[-1], i % 3 == 0)
            b.learn(choices_b[-1], i % 3 == 0)
        assert choices_a == choices_b
        assert len(set(choices_a)) > 1

    def test_snapshot_shape(self, config, rng):
        """snapshot() exposes last beat, arm means and cooldowns."""
        snap = BeatScheduler(config, rng).snapshot()
        assert snap["last_beat"] == "training"
        assert set(snap["arms"]) == {b.value for b in BEAT_ORDER}
        assert snap["arms"]["novelty"] == {"mean": 0.5, "a": 1.0, "b": 1.0}
        assert set(snap["cooldowns"].values()) == {0}


class TestPersistence:
    """to_dict / from_dict."""

    def test_round_trip_same_future(self, config, neutral_snapshot):
        """A restored scheduler with the same rng position makes the same choices."""
        rng = Mulberry32(11)
        original = BeatScheduler(config, rng)
        for i in range(6):
            original.learn(original.choose_beat(neutral_snapshot), i % 2 == 0)

        data = json.loads(json.dumps(original.to_dict()))
        restored_rng = Mulberry32(0)
        restored_rng.state = rng.state
        restored = BeatScheduler.from_dict(data, config, restored_rng)

        assert restored.to_dict() == original.to_dict()
        for _ in range(10):
            assert restored.choose_beat(neutral_snapshot) is original.choose_beat(neutral_snapshot)
