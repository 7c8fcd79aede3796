"""
Schema definitions for ChordCraft.

This module defines the Pydantic models that sit at the boundary of the
library:

    - Option models validate what callers ask for (GeneratorOptions,
      ProgressionOptions). Plain dicts are accepted everywhere an option
      model is, and are validated through these models.
    - Output models (FingeringOut, ChordMatchOut, ProgressionOut, ...) turn
      the engine's immutable result objects into JSON-ready structures.

The enums VoicingType and PlayingContext are shared by the engine and the
option models.
"""

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# SHARED ENUMS
# =============================================================================

class VoicingType(str, Enum):
    """
    How completely a fingering realises its chord.

    FULL        - every required and optional tone
    CORE        - every required tone (optional extensions missing)
    JAZZY       - required tones minus an omittable one (usually the 5th)
    INCOMPLETE  - missing a defining tone; only returned when asked for
    """

    FULL = "full"
    CORE = "core"
    JAZZY = "jazzy"
    INCOMPLETE = "incomplete"


class PlayingContext(str, Enum):
    """Who else is playing: SOLO wants complete, low voicings; BAND wants light ones."""

    SOLO = "solo"
    BAND = "band"


def _lower_enum_value(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


# =============================================================================
# OPTION MODELS
# =============================================================================

class GeneratorOptions(BaseModel):
    """
    Options for chord name → fingerings.

    Attributes:
        limit: Maximum number of fingerings returned
        preferred_position: Bias toward this fret (None = context default)
        voicing_filter: Only return this voicing type (None = full/core/jazzy)
        root_in_bass: Only return fingerings whose lowest note is the root
                      (or the slash bass)
        max_fret: Highest fret the search may use
        playing_context: Solo or band scoring
        capo: Capo fret applied by the public API (0 = none)
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    limit: int = Field(default=10, ge=1, le=200, description="Maximum results")
    preferred_position: Optional[int] = Field(
        default=None, ge=0, le=24, description="Preferred neck position (fret)", examples=[5]
    )
    voicing_filter: Optional[VoicingType] = Field(
        default=None,
        validation_alias=AliasChoices("voicing_filter", "voicing_type", "voicing"),
        description="Restrict to one voicing type",
        examples=["core"],
    )
    root_in_bass: bool = Field(default=False, description="Require the root as the lowest note")
    max_fret: int = Field(default=12, ge=0, le=36, description="Highest fret to search")
    playing_context: PlayingContext = Field(
        default=PlayingContext.SOLO,
        validation_alias=AliasChoices("playing_context", "context"),
    )
    capo: int = Field(default=0, ge=0, description="Capo fret (0 = no capo)")

    @field_validator("voicing_filter", "playing_context", mode="before")
    @classmethod
    def normalize_enum(cls, v):
        return _lower_enum_value(v)


class ProgressionOptions(BaseModel):
    """
    Options for chord sequence → fingering sequences.

    Attributes:
        limit: Number of alternative sequences (K)
        max_fret_distance: Largest allowed position jump between chords (D)
        candidates_per_chord: Fingerings considered per chord (C)
        generator_options: Options passed to the generator for every chord
        capo: Capo fret applied by the public API (0 = none)
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    limit: int = Field(default=3, ge=1, le=50, description="Alternative sequences (K)")
    max_fret_distance: int = Field(
        default=3, ge=0, le=24,
        validation_alias=AliasChoices("max_fret_distance", "max_distance"),
        description="Hard limit on position jumps (D)",
    )
    candidates_per_chord: int = Field(default=20, ge=1, le=200, description="Candidates per chord (C)")
    generator_options: GeneratorOptions = Field(default_factory=GeneratorOptions)
    capo: int = Field(default=0, ge=0, description="Capo fret (0 = no capo)")

    @field_validator("generator_options")
    @classmethod
    def reject_nested_capo(cls, v: GeneratorOptions) -> GeneratorOptions:
        # One capo per progression, set on the progression itself
        if v.capo:
            raise ValueError("set capo on the progression options, not on generator_options")
        return v


def coerce_generator_options(options: Union[GeneratorOptions, dict, None]) -> GeneratorOptions:
    if options is None:
        return GeneratorOptions()
    if isinstance(options, GeneratorOptions):
        return options
    return GeneratorOptions.model_validate(options)


def coerce_progression_options(options: Union[ProgressionOptions, dict, None]) -> ProgressionOptions:
    if options is None:
        return ProgressionOptions()
    if isinstance(options, ProgressionOptions):
        return options
    return ProgressionOptions.model_validate(options)


# =============================================================================
# OUTPUT MODELS
# =============================================================================

class InstrumentInfo(BaseModel):
    """Read-only instrument metadata for display."""

    id: Optional[str] = None
    name: str
    string_count: int = Field(..., ge=1)
    string_names: List[str]
    tuning: List[str] = Field(default_factory=list, description="Open notes, e.g. ['E2', 'A2', ...]")
    max_fret: int

    @classmethod
    def from_instrument(cls, instrument) -> "InstrumentInfo":
        return cls(
            id=instrument.instrument_id,
            name=instrument.name,
            string_count=instrument.string_count,
            string_names=instrument.string_names,
            tuning=[str(n) for n in instrument.tuning],
            max_fret=instrument.max_fret,
        )


class FingeringOut(BaseModel):
    """A scored fingering, ready for JSON."""

    tab: str = Field(..., examples=["x32010"])
    frets: List[Optional[int]] = Field(..., description="Per string; null = muted")
    notes: List[str]
    score: int
    voicing: VoicingType
    has_root_in_bass: bool
    position: int
    absolute_tab: Optional[str] = Field(default=None, description="Frets from the nut when a capo is on")
    shape: Optional[str] = Field(default=None, description="Standard shape name, e.g. 'E' or 'A@5'")

    @classmethod
    def from_scored(cls, scored, capo: int = 0, shape: Optional[str] = None) -> "FingeringOut":
        fingering = scored.fingering
        return cls(
            tab=fingering.to_tab(),
            frets=list(fingering.frets),
            notes=[str(n) for n in scored.notes],
            score=scored.score,
            voicing=scored.voicing,
            has_root_in_bass=scored.has_root_in_bass,
            position=scored.position,
            absolute_tab=fingering.shifted(capo).to_tab() if capo else None,
            shape=shape,
        )


class ChordMatchOut(BaseModel):
    """One chord interpretation of a fingering."""

    name: str = Field(..., examples=["Cmaj7"])
    root: str
    quality: str
    confidence: int = Field(..., ge=0, le=100)
    score: int
    root_in_bass: bool
    explanation: str
    missing: List[str] = Field(default_factory=list)

    @classmethod
    def from_match(cls, match) -> "ChordMatchOut":
        return cls(
            name=match.name,
            root=match.chord.root.spell(match.chord.prefer_flats),
            quality=match.chord.quality.key,
            confidence=match.confidence,
            score=match.score,
            root_in_bass=match.root_in_bass,
            explanation=match.explanation,
            missing=[p.spell(match.chord.prefer_flats) for p in match.missing],
        )


class TransitionOut(BaseModel):
    from_chord: str
    to_chord: str
    from_tab: str
    to_tab: str
    score: int
    finger_movements: int = Field(..., ge=0)
    common_anchors: int = Field(..., ge=0)
    position_distance: int = Field(..., ge=0)
    relaxed: bool = False

    @classmethod
    def from_transition(cls, transition) -> "TransitionOut":
        return cls(
            from_chord=transition.from_chord,
            to_chord=transition.to_chord,
            from_tab=transition.from_fingering.fingering.to_tab(),
            to_tab=transition.to_fingering.fingering.to_tab(),
            score=transition.score,
            finger_movements=transition.finger_movements,
            common_anchors=transition.common_anchors,
            position_distance=transition.position_distance,
            relaxed=transition.relaxed,
        )


class ProgressionOut(BaseModel):
    chords: List[str]
    fingerings: List[FingeringOut]
    transitions: List[TransitionOut]
    total_score: int
    avg_transition_score: float
    relaxed: bool = False

    @classmethod
    def from_sequence(cls, sequence, capo: int = 0) -> "ProgressionOut":
        return cls(
            chords=list(sequence.chords),
            fingerings=[FingeringOut.from_scored(f, capo=capo) for f in sequence.fingerings],
            transitions=[TransitionOut.from_transition(t) for t in sequence.transitions],
            total_score=sequence.total_score,
            avg_transition_score=sequence.avg_transition_score,
            relaxed=sequence.relaxed,
        )
