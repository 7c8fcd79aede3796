"""
Scoring Configuration
=====================

All tunable scoring weights live here, grouped by the algorithm that uses
them. The search and matching code never hard-codes a weight; it reads the
active ScoringConfig instead, so the weights can be retuned without touching
the algorithms.

Only the relative ordering of the terms is a contract (e.g. root-in-bass is
worth more in Solo than in Band). The numbers themselves are defaults.

Overrides come from a YAML file. Any subset of keys may be given:

    # scoring.yaml
    generator:
      solo_root_in_bass_bonus: 40
    transition:
      anchor_weight: 25

Usage:
    from chordcraft.config import get_config, load_config, set_config

    set_config(load_config("scoring.yaml"))
    get_config().transition.anchor_weight    # 25

The environment variable CHORDCRAFT_CONFIG names a YAML file that is loaded
the first time get_config() is called.
"""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chordcraft.errors import ConfigError


CONFIG_ENV_VAR = "CHORDCRAFT_CONFIG"


# =============================================================================
# WEIGHT GROUPS
# =============================================================================

class _Weights(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class PlayabilityWeights(_Weights):
    """How physically comfortable a fingering is (0-100 before context terms)."""

    base: int = Field(default=100, ge=0, description="Starting score")
    span_penalty: int = Field(default=10, ge=0, description="Per fret of stretch")
    few_fingers_bonus: int = Field(default=15, ge=0, description="Uses <= 25% of fingers")
    some_fingers_bonus: int = Field(default=10, ge=0, description="Uses <= 50% of fingers")
    all_fingers_penalty: int = Field(default=5, ge=0, description="Uses > 75% of fingers")
    high_barre_penalty: int = Field(default=40, ge=0, description="Big barre above the lowest fret")
    interior_open_penalty: int = Field(default=15, ge=0, description="Per open string between fretted strings")
    open_position_bonus: int = Field(default=10, ge=0, description="Open strings, low frets, no interior opens")
    high_position_fret: int = Field(default=7, ge=0, description="Frets above this start costing")
    high_position_penalty: int = Field(default=2, ge=0, description="Per fret above high_position_fret")
    muted_string_penalty: int = Field(default=5, ge=0, description="Per muted string beyond the first")


class GeneratorWeights(_Weights):
    """Terms added on top of playability when ranking generated fingerings."""

    string_usage_bonus: int = Field(default=8, ge=0, description="Per sounding string")
    interior_mute_penalty: int = Field(default=30, ge=0, description="Per muted string between played strings")
    full_voicing_bonus: int = Field(default=10, ge=0, description="All required and optional tones")
    core_voicing_bonus: int = Field(default=5, ge=0, description="All required tones")
    incomplete_voicing_penalty: int = Field(default=20, ge=0, description="Missing a defining tone")
    position_distance_penalty: int = Field(default=3, ge=0, description="Per fret from preferred_position")

    solo_root_in_bass_bonus: int = Field(default=30, ge=0)
    solo_full_voicing_bonus: int = Field(default=20, ge=0)
    solo_core_voicing_bonus: int = Field(default=5, ge=0)
    solo_jazzy_without_root_penalty: int = Field(default=15, ge=0)
    solo_position_threshold: int = Field(default=5, ge=0, description="Solo voicings above this fret cost")
    solo_high_position_penalty: int = Field(default=5, ge=0)

    band_root_in_bass_bonus: int = Field(default=5, ge=0)
    band_compact_voicing_bonus: int = Field(default=20, ge=0, description="Core / jazzy voicings")
    band_full_voicing_bonus: int = Field(default=5, ge=0)
    band_avoid_low_strings_bonus: int = Field(default=10, ge=0, description="Leaves the two lowest strings free")
    band_mid_neck_min: int = Field(default=3, ge=0)
    band_mid_neck_max: int = Field(default=10, ge=0)
    band_position_penalty: int = Field(default=3, ge=0, description="Per fret outside the mid-neck window")


class AnalyzerWeights(_Weights):
    """Terms used to rank (root, quality) candidates for a fingering."""

    completeness_scale: int = Field(default=100, ge=0, description="Multiplied by the completeness ratio")
    root_in_bass_bonus: int = Field(default=20, ge=0)
    required_interval_bonus: int = Field(default=3, ge=0, description="Per interval in the formula")
    optional_interval_bonus: int = Field(default=5, ge=0, description="Per optional interval present")
    extra_note_penalty: int = Field(default=10, ge=0, description="Per played pitch class the formula lacks")
    simple_triad_bonus: int = Field(default=5, ge=0, description="Complete major / minor triad")
    min_required_present: int = Field(default=2, ge=2, description="Root plus at least one deciding tone")


class TransitionWeights(_Weights):
    """Terms used to score moving from one fingering to the next."""

    base: int = Field(default=100)
    max_movements: int = Field(default=4, ge=0, description="Movements above this cost more than the base")
    solo_movement_weight: int = Field(default=30, ge=0)
    band_movement_weight: int = Field(default=40, ge=0)
    anchor_weight: int = Field(default=20, ge=0, description="Per string left in place")
    barre_similarity_bonus: int = Field(default=15, ge=0)
    open_position_bonus: int = Field(default=10, ge=0)
    string_count_similarity_bonus: int = Field(default=5, ge=0)
    solo_distance_weight: int = Field(default=5, ge=0)
    band_distance_weight: int = Field(default=8, ge=0)


class ScoringConfig(_Weights):
    """The complete set of scoring weights."""

    playability: PlayabilityWeights = Field(default_factory=PlayabilityWeights)
    generator: GeneratorWeights = Field(default_factory=GeneratorWeights)
    analyzer: AnalyzerWeights = Field(default_factory=AnalyzerWeights)
    transition: TransitionWeights = Field(default_factory=TransitionWeights)


# =============================================================================
# LOADING
# =============================================================================

def load_config(path: Union[str, Path]) -> ScoringConfig:
    """
    Load weight overrides from a YAML file.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or holds
                     unknown keys / out-of-range values
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read scoring config '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in scoring config '{path}': {e}") from e

    return config_from_dict(data or {}, source=str(path))


def config_from_dict(data: dict, source: str = "<dict>") -> ScoringConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"Scoring config {source} must be a mapping, got {type(data).__name__}")
    try:
        return ScoringConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid scoring config {source}:\n{e}") from e


_active_config: Optional[ScoringConfig] = None


def get_config() -> ScoringConfig:
    """Return the active configuration, loading CHORDCRAFT_CONFIG on first use."""
    global _active_config
    if _active_config is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        _active_config = load_config(env_path) if env_path else ScoringConfig()
    return _active_config


def set_config(config: ScoringConfig) -> None:
    global _active_config
    _active_config = config


def reset_config() -> None:
    """Forget the active configuration (the next get_config() reloads it)."""
    global _active_config
    _active_config = None
