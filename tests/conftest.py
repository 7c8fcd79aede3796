"""
Shared pytest fixtures for the chordcraft test suite.
"""

import pytest

from chordcraft.config import CONFIG_ENV_VAR, reset_config
from chordcraft.data.schema import VoicingType
from chordcraft.engine.generator import ScoredFingering
from chordcraft.fingering import Fingering
from chordcraft.instruments import Guitar, Ukulele


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Every test starts from the built-in scoring weights."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def guitar():
    return Guitar()


@pytest.fixture
def ukulele():
    return Ukulele()


@pytest.fixture
def scored():
    """Build a ScoredFingering from tab text without running the generator."""

    def build(tab: str, score: int = 100, voicing: VoicingType = VoicingType.FULL) -> ScoredFingering:
        fingering = Fingering.parse(tab)
        return ScoredFingering(
            fingering=fingering,
            notes=(),
            score=score,
            voicing=voicing,
            has_root_in_bass=True,
            position=fingering.position,
        )

    return build
