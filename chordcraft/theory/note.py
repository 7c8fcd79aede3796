"""
Notes and Pitch Classes
=======================

The lowest layer of the music-theory model:

    PitchClass  - one of the 12 semitone residues (C, C#/Db, ..., B)
    Note        - a PitchClass in a specific octave (scientific pitch, C4 = middle C)

Enharmonic equivalence is an EQUALITY relation: PitchClass.parse("C#") and
PitchClass.parse("Db") return the same member. The spelling is chosen only
when a name is rendered, via ``prefer_flats``.

Notes order by absolute pitch (MIDI number). This matters for re-entrant
tunings, where string order and pitch order disagree.

Usage:
    from chordcraft.theory.note import Note, PitchClass

    PitchClass.parse("Bb")            # PitchClass.A_SHARP
    PitchClass.A_SHARP.spell(True)    # 'Bb'
    Note.parse("E2").midi             # 40
"""

from dataclasses import dataclass
from enum import IntEnum
from functools import total_ordering
import re

from chordcraft.errors import ParseError


# =============================================================================
# CONSTANTS
# =============================================================================

SHARP_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NAMES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

NATURAL_SEMITONES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

# Accepted accidental spellings (ASCII, unicode and the "s" shorthand: Cs = C#)
ACCIDENTALS = {"#": 1, "♯": 1, "s": 1, "b": -1, "♭": -1}

# Conventional key-signature spelling of each black key
# (used to break ties between enharmonic readings of a chord)
CONVENTIONAL_FLATS = {1, 3, 8, 10}   # Db, Eb, Ab, Bb
CONVENTIONAL_SHARPS = {6}            # F#

NOTE_PATTERN = re.compile(r"^([A-Ga-g])([#♯sb♭]?)(-?\d+)?$")

# Notes below C3 (MIDI 48) sound in the bass register
BASS_REGISTER_MIDI = 48


# =============================================================================
# PITCH CLASS
# =============================================================================

class PitchClass(IntEnum):
    """The 12 pitch classes, valued by semitones above C."""

    C = 0
    C_SHARP = 1
    D = 2
    D_SHARP = 3
    E = 4
    F = 5
    F_SHARP = 6
    G = 7
    G_SHARP = 8
    A = 9
    A_SHARP = 10
    B = 11

    @classmethod
    def parse(cls, text: str) -> "PitchClass":
        """
        Parse a pitch-class name such as "C", "F#", "Bb", "Cs" or "E♭".

        Raises:
            ParseError: If the text is not a letter A-G with at most one accidental
        """
        name = text.strip()
        if not name or name[0].upper() not in NATURAL_SEMITONES:
            raise ParseError(f"Invalid note name: '{text}'", text=text)

        semitone = NATURAL_SEMITONES[name[0].upper()]
        rest = name[1:]
        if rest:
            if len(rest) > 1 or rest not in ACCIDENTALS:
                raise ParseError(f"Invalid accidental in note name: '{text}'", text=rest, source=text)
            semitone += ACCIDENTALS[rest]

        return cls(semitone % 12)

    @property
    def is_natural(self) -> bool:
        return SHARP_NAMES[self.value] in NATURAL_SEMITONES

    def spell(self, prefer_flats: bool = False) -> str:
        """Render the name with sharps (default) or flats."""
        return FLAT_NAMES[self.value] if prefer_flats else SHARP_NAMES[self.value]

    def conventional_spelling(self) -> str:
        """Spelling a key signature would normally use (Bb rather than A#)."""
        return self.spell(prefer_flats=self.value in CONVENTIONAL_FLATS)

    def transpose(self, semitones: int) -> "PitchClass":
        return PitchClass((self.value + semitones) % 12)

    def semitones_to(self, other: "PitchClass") -> int:
        """Upward distance in semitones from self to other (0-11)."""
        return (other.value - self.value) % 12

    def __str__(self) -> str:
        return self.spell()


# =============================================================================
# NOTE
# =============================================================================

@total_ordering
@dataclass(frozen=True)
class Note:
    """
    A pitch class in a specific octave.

    Attributes:
        pitch: The pitch class
        octave: Scientific octave number (C4 = middle C, MIDI 60)
    """

    pitch: PitchClass
    octave: int

    @classmethod
    def from_midi(cls, midi: int) -> "Note":
        return cls(PitchClass(midi % 12), midi // 12 - 1)

    @classmethod
    def parse(cls, text: str, default_octave: int = 4) -> "Note":
        """
        Parse a note such as "E2", "C#4" or "Bb3".

        A missing octave falls back to ``default_octave``. A flat or sharp that
        crosses the B/C boundary shifts the octave (Cb4 == B3).
        """
        match = NOTE_PATTERN.match(text.strip())
        if not match:
            raise ParseError(f"Invalid note: '{text}'", text=text)

        letter, accidental, octave = match.groups()
        octave_number = int(octave) if octave is not None else default_octave
        midi = (octave_number + 1) * 12 + NATURAL_SEMITONES[letter.upper()]
        if accidental:
            midi += ACCIDENTALS[accidental]
        return cls.from_midi(midi)

    @property
    def midi(self) -> int:
        return (self.octave + 1) * 12 + self.pitch.value

    def transpose(self, semitones: int) -> "Note":
        return Note.from_midi(self.midi + semitones)

    def is_bass_register(self) -> bool:
        return self.midi < BASS_REGISTER_MIDI

    def spell(self, prefer_flats: bool = False) -> str:
        return f"{self.pitch.spell(prefer_flats)}{self.octave}"

    def __lt__(self, other: "Note") -> bool:
        if not isinstance(other, Note):
            return NotImplemented
        return self.midi < other.midi

    def __str__(self) -> str:
        return self.spell()
