"""
ChordCraft - chord fingerings for fretted instruments.

Three operations over one music-theory model:

    - chord name → ranked fingerings     (find_fingerings)
    - fingering → ranked chord names     (analyze_chord)
    - chord sequence → smooth fingerings (generate_progression)

Usage:
    import chordcraft

    for f in chordcraft.find_fingerings("Am7", "guitar", {"limit": 3}):
        print(f.fingering, f.voicing.value)
"""

__version__ = "0.1.0"
__author__ = "ChordCraft Contributors"

from chordcraft.errors import (
    ChordCraftError, ConfigError, InvalidCapoError, InvalidInstrumentError, ParseError,
)
from chordcraft.theory import Note, PitchClass, Interval, ChordSpec, parse_chord_name
from chordcraft.instruments import (
    Guitar, Instrument, Ukulele, custom_instrument, get_instrument, list_instruments,
)
from chordcraft.fingering import Fingering
from chordcraft.data.schema import GeneratorOptions, PlayingContext, ProgressionOptions, VoicingType
from chordcraft.app.api import (
    analyze_chord, find_fingerings, generate_progression, get_instrument_info,
)
