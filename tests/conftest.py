"""
Shared test fixtures for flow_director tests.

Design principles:
- Seeded everything: two runs of the suite see identical draws
- Clean imports at module level
- Minimal, focused fixtures
"""

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from flow_director.api import FlowDirector
from flow_director.core.sampling import Mulberry32
from flow_director.core.types import PlayerSnapshot
from flow_director.utils.config import DirectorConfig


# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def temp_db_path() -> Generator[Path, None, None]:
    """Temporary database file with cleanup."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    for suffix in ["", "-wal", "-shm"]:
        p = Path(str(path) + suffix)
        if p.exists():
            p.unlink()


# =============================================================================
# Config / Director Fixtures
# =============================================================================

@pytest.fixture
def config() -> DirectorConfig:
    return DirectorConfig(seed=42)


@pytest.fixture
def director(config: DirectorConfig) -> FlowDirector:
    return FlowDirector(config)


@pytest.fixture
def rng() -> Mulberry32:
    return Mulberry32(42)


class ConstantRng:
    """Uniform source that always returns the same value."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def constant_rng() -> ConstantRng:
    return ConstantRng(0.5)


# =============================================================================
# Snapshot Fixtures
# =============================================================================

NEUTRAL_SNAPSHOT = PlayerSnapshot(
    skill=0.5,
    skill_trend=0.5,
    skill_variance=0.22,
    win_rate_ema=0.58,
    error_rate_ema=0.22,
    turn_time_ema=7000.0,
    hesitation=0.0,
    volatility=0.2,
    fatigue=0.0,
    engagement=0.7,
    flow=0.7,
    streak=0,
    games=0,
    turns=0,
)


@pytest.fixture
def neutral_snapshot() -> PlayerSnapshot:
    """A player sitting exactly on every target."""
    return NEUTRAL_SNAPSHOT


@pytest.fixture
def make_snapshot() -> Callable[..., PlayerSnapshot]:
    """Neutral snapshot with selected fields overridden."""
    def _make(**fields) -> PlayerSnapshot:
        return NEUTRAL_SNAPSHOT._replace(**fields)
    return _make
