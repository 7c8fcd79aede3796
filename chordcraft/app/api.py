"""
Public API - the four operations, addressed by instrument id

This is the layer a UI, a web handler or a script talks to. It resolves
instrument ids, validates option dicts through the pydantic option models,
applies a capo, and hands off to the engine.

Usage:
    from chordcraft.app.api import find_fingerings, analyze_chord

    results = find_fingerings("Am7", "ukulele", {"limit": 3})
    matches = analyze_chord("x32010", "guitar")

    # Capo at 3: fingerings are relative to the capo
    results = find_fingerings("F", "guitar", {"capo": 3})
"""

from typing import List, Optional, Sequence, Union

from chordcraft.config import ScoringConfig
from chordcraft.data.schema import (
    GeneratorOptions, InstrumentInfo, ProgressionOptions,
    coerce_generator_options, coerce_progression_options,
)
from chordcraft.engine.analyzer import ChordMatch, analyze_fingering
from chordcraft.engine.generator import ScoredFingering, generate_fingerings
from chordcraft.engine import progression as progression_engine
from chordcraft.engine.progression import ProgressionSequence
from chordcraft.fingering.fingering import Fingering
from chordcraft.instruments.instrument import Instrument
from chordcraft.instruments.presets import custom_instrument, get_instrument
from chordcraft.logging_config import get_logger

logger = get_logger(__name__)

InstrumentRef = Union[str, Instrument]


def resolve_instrument(instrument: Optional[InstrumentRef] = "guitar",
                       tuning: Optional[str] = None, capo: int = 0) -> Instrument:
    """
    Turn an instrument reference into an Instrument.

    Args:
        instrument: Preset id, an Instrument, or None (guitar)
        tuning: Custom tuning string; overrides ``instrument`` when given
        capo: Capo fret (0 = none)

    Raises:
        InvalidInstrumentError: Unknown preset id
        ParseError: Unreadable tuning
        InvalidCapoError: Capo outside the instrument's range
    """
    if tuning:
        resolved = custom_instrument(tuning)
    elif isinstance(instrument, Instrument):
        resolved = instrument
    else:
        resolved = get_instrument(instrument or "guitar")

    if capo:
        resolved = resolved.with_capo(capo)
        logger.debug("Using %s", resolved.name)
    return resolved


def find_fingerings(
    chord_name: str,
    instrument: Optional[InstrumentRef] = "guitar",
    options: Union[GeneratorOptions, dict, None] = None,
    config: Optional[ScoringConfig] = None,
) -> List[ScoredFingering]:
    """Chord name → ranked fingerings (frets relative to the capo, if any)."""
    opts = coerce_generator_options(options)
    resolved = resolve_instrument(instrument, capo=opts.capo)
    return generate_fingerings(chord_name, resolved, opts, config)


def analyze_chord(
    tab: Union[str, Fingering],
    instrument: Optional[InstrumentRef] = "guitar",
    capo: int = 0,
    config: Optional[ScoringConfig] = None,
) -> List[ChordMatch]:
    """Fingering → ranked chord names (the chord that SOUNDS, capo included)."""
    resolved = resolve_instrument(instrument, capo=capo)
    return analyze_fingering(tab, resolved, config)


def generate_progression(
    chord_names: Sequence[str],
    instrument: Optional[InstrumentRef] = "guitar",
    options: Union[ProgressionOptions, dict, None] = None,
    config: Optional[ScoringConfig] = None,
) -> List[ProgressionSequence]:
    """Chord sequence → ranked fingering sequences."""
    opts = coerce_progression_options(options)
    resolved = resolve_instrument(instrument, capo=opts.capo)
    return progression_engine.generate_progression(chord_names, resolved, opts, config)


def get_instrument_info(instrument: Optional[InstrumentRef] = "guitar",
                        tuning: Optional[str] = None) -> InstrumentInfo:
    """Read-only metadata (string count, names, tuning) for display."""
    return InstrumentInfo.from_instrument(resolve_instrument(instrument, tuning=tuning))
