"""
Theory Subpackage - the shared music-theory data model

    - note.py: PitchClass and Note (absolute pitch, enharmonic equality)
    - interval.py: Interval (distance above a root, compared mod 12)
    - chord.py: ChordQuality table, ChordSpec and the chord-name parser

Usage:
    from chordcraft.theory import parse_chord_name

    chord = parse_chord_name("Abm7")
    print(chord.notes())
"""

from chordcraft.theory.note import Note, PitchClass
from chordcraft.theory.interval import Interval
from chordcraft.theory.chord import (
    CHORD_QUALITIES, ChordQuality, ChordSpec, get_quality, parse_chord_name,
)
