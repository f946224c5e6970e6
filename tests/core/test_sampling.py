"""
Tests for flow_director.core.sampling

Seeded PRNG determinism and sampler ranges/moments.
"""

import numpy as np
import pytest

from flow_director.core.sampling import (
    Mulberry32,
    beta_sample,
    gamma_sample,
    normal_sample,
    randrange,
    uniform_int,
)


class TestMulberry32:
    """Seeded generator behaviour."""

    def test_same_seed_same_stream(self):
        """Equal seeds yield equal streams."""
        a, b = Mulberry32(42), Mulberry32(42)
        assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]

    def test_different_seed_different_stream(self):
        """Different seeds diverge immediately."""
        a, b = Mulberry32(1), Mulberry32(2)
        assert [a.random() for _ in range(5)] != [b.random() for _ in range(5)]

    def test_unit_interval(self, rng):
        """Draws lie in [0, 1)."""
        draws = np.array([rng.random() for _ in range(5000)])
        assert draws.min() >= 0.0
        assert draws.max() < 1.0
        assert draws.mean() == pytest.approx(0.5, abs=0.03)

    def test_callable(self):
        """Calling the generator is the same as random()."""
        a, b = Mulberry32(7), Mulberry32(7)
        assert a() == b.random()

    def test_state_resume(self):
        """Restoring `state` resumes the stream mid-way."""
        a = Mulberry32(99)
        for _ in range(10):
            a.random()
        b = Mulberry32(0)
        b.state = a.state
        assert [a.random() for _ in range(10)] == [b.random() for _ in range(10)]

    def test_seed_masked_to_32_bits(self):
        """Seeds beyond 32 bits wrap."""
        assert Mulberry32(2**32 + 5).state == 5

    def test_randrange_bounds(self, rng):
        """randrange stays in [0, n) and uniform_int in [lo, hi]."""
        assert {randrange(rng, 3) for _ in range(300)} == {0, 1, 2}
        assert {uniform_int(rng, 8, 10) for _ in range(300)} == {8, 9, 10}

    def test_randrange_rejects_empty(self, rng):
        """randrange(0) is an error."""
        with pytest.raises(ValueError):
            randrange(rng, 0)

    def test_randrange_unit_draw_in_range(self):
        """A source returning exactly 1.0 still yields the last index."""
        class One:
            def random(self):
                return 1.0

        assert randrange(One(), 4) == 3
        assert uniform_int(One(), 8, 10) == 10


class TestNormal:
    """Box-Muller sampler."""

    def test_moments(self, rng):
        """Roughly zero mean, unit variance."""
        draws = np.array([normal_sample(rng) for _ in range(5000)])
        assert draws.mean() == pytest.approx(0.0, abs=0.06)
        assert draws.std() == pytest.approx(1.0, abs=0.06)


class TestGamma:
    """Marsaglia-Tsang gamma sampler."""

    @pytest.mark.parametrize("k", [0.3, 1.0, 2.5, 10.0])
    def test_mean_matches_shape(self, rng, k):
        """Sample mean approximates the shape parameter."""
        draws = np.array([gamma_sample(k, rng) for _ in range(4000)])
        assert (draws >= 0).all()
        assert draws.mean() == pytest.approx(k, rel=0.1)

    @pytest.mark.parametrize("k", [0.0, -1.0])
    def test_non_positive_shape(self, rng, k):
        """Non-positive shapes return 0."""
        assert gamma_sample(k, rng) == 0.0

    def test_terminates_with_shape_mean(self):
        """A source whose proposals never accept falls back to k."""

        class Rejecting:
            """Alternating uniforms give x ~ -5.7, so v = 1 + c*x is never positive."""

            def __init__(self):
                self.calls = 0

            def random(self):
                self.calls += 1
                return 1e-7 if self.calls % 2 else 0.5

        source = Rejecting()
        assert gamma_sample(3.0, source, max_iter=25) == 3.0
        assert source.calls == 50


class TestBeta:
    """Beta sampler."""

    def test_unit_interval(self, rng):
        """Draws lie in [0, 1]."""
        draws = [beta_sample(2.0, 5.0, rng) for _ in range(2000)]
        assert min(draws) >= 0.0
        assert max(draws) <= 1.0

    def test_mean(self, rng):
        """Mean approximates a / (a + b)."""
        draws = np.array([beta_sample(8.0, 2.0, rng) for _ in range(4000)])
        assert draws.mean() == pytest.approx(0.8, abs=0.02)

    def test_degenerate_returns_half(self, rng):
        """Both shapes zero gives 0.5."""
        assert beta_sample(0.0, 0.0, rng) == 0.5
