"""
Instrument Presets and Custom Tunings
=====================================

Maps instrument identifiers (the strings callers pass around) to concrete
instruments, and builds instruments from free-form tuning strings.

Known identifiers:
    guitar, ukulele, baritone-ukulele, bass, bass-5, mandolin, banjo,
    guitar-7, drop-d, open-g, dadgad

Usage:
    from chordcraft.instruments.presets import get_instrument, custom_instrument

    uke = get_instrument("ukulele")
    dadgad = custom_instrument("D2 A2 D3 G3 A3 D4")
    same = custom_instrument("DADGAD")
"""

import re
from typing import Callable, Dict, List, Tuple

from chordcraft.errors import InvalidInstrumentError, ParseError
from chordcraft.instruments.instrument import (
    ConfigurableInstrument, Guitar, Instrument, Ukulele,
)
from chordcraft.theory.note import Note


# =============================================================================
# PRESET TABLE
# =============================================================================

# id → (display name, tuning, constructor overrides)
PRESET_TUNINGS: Dict[str, Tuple[str, str, dict]] = {
    "baritone-ukulele": ("Baritone Ukulele", "D3 G3 B3 E4",
                         {"max_fret": 19, "max_stretch": 5, "open_position_threshold": 5,
                          "main_barre_threshold": 2, "min_played_strings": 2}),
    "bass": ("Bass (4-string)", "E1 A1 D2 G2",
             {"max_fret": 20, "max_stretch": 4, "min_played_strings": 1}),
    "bass-5": ("Bass (5-string)", "B0 E1 A1 D2 G2",
               {"max_fret": 24, "max_stretch": 4, "min_played_strings": 2}),
    "mandolin": ("Mandolin", "G3 D4 A4 E5",
                 {"max_fret": 20, "max_stretch": 5, "open_position_threshold": 5,
                  "min_played_strings": 2}),
    "banjo": ("Banjo (5-string)", "G4 D3 G3 B3 D4",
              {"max_fret": 22, "max_stretch": 4, "min_played_strings": 3}),
    "guitar-7": ("7-String Guitar", "B1 E2 A2 D3 G3 B3 E4",
                 {"max_fret": 24, "max_stretch": 4}),
    "drop-d": ("Drop D Guitar", "D2 A2 D3 G3 B3 E4",
               {"max_fret": 24, "max_stretch": 4}),
    "open-g": ("Open G Guitar", "D2 G2 D3 G3 B3 D4",
               {"max_fret": 24, "max_stretch": 4}),
    "dadgad": ("DADGAD Guitar", "D2 A2 D3 G3 A3 D4",
               {"max_fret": 24, "max_stretch": 4}),
}

# Defaults for custom tunings, chosen by string count:
# (max_stretch, max_fret, min_played_strings)
CUSTOM_DEFAULTS = [
    (range(2, 5), (5, 17, 1)),     # ukulele / mandolin sized
    (range(5, 9), (4, 24, 3)),     # guitar sized
]
CUSTOM_DEFAULTS_LARGE = (3, 22, 4)

MIN_CUSTOM_STRINGS = 2
MAX_CUSTOM_STRINGS = 12

TUNING_TOKEN = re.compile(r"[A-Ga-g][#♯sb♭]?(?:-?\d+)?")


def _preset_factory(instrument_id: str) -> Callable[[], Instrument]:
    name, tuning, overrides = PRESET_TUNINGS[instrument_id]

    def build() -> Instrument:
        return ConfigurableInstrument(
            name=name,
            tuning=[Note.parse(n) for n in tuning.split()],
            instrument_id=instrument_id,
            **overrides,
        )

    return build


INSTRUMENT_FACTORIES: Dict[str, Callable[[], Instrument]] = {
    "guitar": Guitar,
    "ukulele": Ukulele,
    **{key: _preset_factory(key) for key in PRESET_TUNINGS},
}

# Alternate spellings accepted for convenience
INSTRUMENT_ALIASES = {
    "uke": "ukulele",
    "bari-uke": "baritone-ukulele",
    "baritone": "baritone-ukulele",
    "bass-4": "bass",
    "guitar-6": "guitar",
}


def list_instruments() -> List[str]:
    """Known instrument identifiers, in display order."""
    return list(INSTRUMENT_FACTORIES)


def get_instrument(instrument_id: str) -> Instrument:
    """
    Build a fresh instrument for an identifier.

    Raises:
        InvalidInstrumentError: If the identifier is unknown
    """
    key = instrument_id.strip().lower()
    key = INSTRUMENT_ALIASES.get(key, key)
    if key not in INSTRUMENT_FACTORIES:
        raise InvalidInstrumentError(instrument_id, list_instruments())
    return INSTRUMENT_FACTORIES[key]()


# =============================================================================
# CUSTOM TUNINGS
# =============================================================================

def parse_tuning(text: str) -> List[Note]:
    """
    Parse a tuning string, lowest-index string first.

    Notes may be separated by spaces, commas or dashes, or written run
    together ("DADGAD"). Notes without an octave are placed at the lowest
    octave (starting from octave 2) that keeps each string at or above the
    previous one.

    Raises:
        ParseError: On anything that is not a note name
    """
    cleaned = text.strip()
    tokens = TUNING_TOKEN.findall(cleaned)
    leftover = TUNING_TOKEN.sub("", cleaned)
    leftover = re.sub(r"[\s,\-]", "", leftover)
    if leftover or not tokens:
        raise ParseError(f"Invalid tuning: '{text}'", text=leftover or text, source=text)

    notes: List[Note] = []
    for token in tokens:
        if token[-1].isdigit():
            notes.append(Note.parse(token))
            continue
        octave = 2
        note = Note.parse(token, default_octave=octave)
        if notes:
            while note.midi < notes[-1].midi:
                octave += 1
                note = Note.parse(token, default_octave=octave)
        notes.append(note)
    return notes


def custom_instrument(tuning_text: str, name: str = "Custom Tuning") -> Instrument:
    """
    Build an instrument from a tuning string with string-count-based defaults.

    Raises:
        ParseError: If the tuning is malformed or has fewer than 2 / more than 12 strings
    """
    tuning = parse_tuning(tuning_text)
    count = len(tuning)
    if not MIN_CUSTOM_STRINGS <= count <= MAX_CUSTOM_STRINGS:
        raise ParseError(
            f"Tuning must have {MIN_CUSTOM_STRINGS}-{MAX_CUSTOM_STRINGS} strings, got {count}",
            text=tuning_text,
        )

    max_stretch, max_fret, min_played = CUSTOM_DEFAULTS_LARGE
    for counts, defaults in CUSTOM_DEFAULTS:
        if count in counts:
            max_stretch, max_fret, min_played = defaults
            break

    return ConfigurableInstrument(
        name=name,
        tuning=tuning,
        max_fret=max_fret,
        max_stretch=max_stretch,
        min_played_strings=min_played,
    )
