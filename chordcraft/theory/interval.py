"""
Intervals
=========

An Interval is a semitone distance above a root. Harmonic comparison uses the
distance reduced mod 12 (a 9th and a 2nd realise the same pitch class), so two
intervals are EQUAL when their reduced distances match. The quality label
(M3, P5, m7, M9, ...) is kept for display and parsing only.

Usage:
    from chordcraft.theory.interval import Interval, MAJOR_THIRD

    Interval.from_semitones(4)       # M3
    Interval.parse("M9").reduced     # 2
    MAJOR_THIRD.full_name            # 'Major 3rd'
"""

from dataclasses import dataclass, field

from chordcraft.errors import ParseError


# =============================================================================
# INTERVAL NAME TABLES
# =============================================================================

# Default simple-interval label for each reduced distance
SIMPLE_LABELS = ["P1", "m2", "M2", "m3", "M3", "P4", "A4", "P5", "m6", "M6", "m7", "M7"]

# Every label we accept, with its semitone distance
LABEL_SEMITONES = {
    "P1": 0, "m2": 1, "M2": 2, "A2": 3, "m3": 3, "M3": 4, "d4": 4,
    "P4": 5, "A4": 6, "d5": 6, "P5": 7, "A5": 8, "m6": 8, "M6": 9,
    "d7": 9, "m7": 10, "M7": 11, "P8": 12,
    # Compound intervals used by extended chords
    "m9": 13, "M9": 14, "A9": 15, "P11": 17, "A11": 18, "m13": 20, "M13": 21,
}

QUALITY_WORDS = {
    "P": "Perfect",
    "M": "Major",
    "m": "Minor",
    "A": "Augmented",
    "d": "Diminished",
}


def _ordinal(number: int) -> str:
    if number == 1:
        return "Unison"
    if number == 8:
        return "Octave"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10 if number not in (11, 12, 13) else 0, "th")
    return f"{number}{suffix}"


# =============================================================================
# INTERVAL
# =============================================================================

@dataclass(frozen=True)
class Interval:
    """
    A distance above a root.

    Attributes:
        semitones: Distance in semitones (may exceed 12 for compound intervals)
        label: Short quality label such as "M3" or "M9" (display only)
    """

    semitones: int = field(compare=False)
    label: str = field(compare=False)
    reduced: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "reduced", self.semitones % 12)

    @classmethod
    def from_semitones(cls, semitones: int) -> "Interval":
        """Build the conventional simple interval for a distance (reduced mod 12)."""
        reduced = semitones % 12
        return cls(reduced, SIMPLE_LABELS[reduced])

    @classmethod
    def parse(cls, text: str) -> "Interval":
        """Parse a short label such as "m3", "P5" or "M9"."""
        label = text.strip()
        if label not in LABEL_SEMITONES:
            raise ParseError(f"Invalid interval: '{text}'", text=text)
        return cls(LABEL_SEMITONES[label], label)

    @property
    def short_name(self) -> str:
        return self.label

    @property
    def full_name(self) -> str:
        quality = QUALITY_WORDS[self.label[0]]
        number = int(self.label[1:])
        if number in (1, 8):
            return _ordinal(number) if quality == "Perfect" else f"{quality} {_ordinal(number)}"
        return f"{quality} {_ordinal(number)}"

    def __str__(self) -> str:
        return self.label


# Named intervals the chord table is written with
UNISON = Interval.parse("P1")
MINOR_SECOND = Interval.parse("m2")
MAJOR_SECOND = Interval.parse("M2")
MINOR_THIRD = Interval.parse("m3")
MAJOR_THIRD = Interval.parse("M3")
PERFECT_FOURTH = Interval.parse("P4")
DIMINISHED_FIFTH = Interval.parse("d5")
PERFECT_FIFTH = Interval.parse("P5")
AUGMENTED_FIFTH = Interval.parse("A5")
MAJOR_SIXTH = Interval.parse("M6")
DIMINISHED_SEVENTH = Interval.parse("d7")
MINOR_SEVENTH = Interval.parse("m7")
MAJOR_SEVENTH = Interval.parse("M7")
MINOR_NINTH = Interval.parse("m9")
MAJOR_NINTH = Interval.parse("M9")
AUGMENTED_NINTH = Interval.parse("A9")
PERFECT_ELEVENTH = Interval.parse("P11")
AUGMENTED_ELEVENTH = Interval.parse("A11")
MINOR_THIRTEENTH = Interval.parse("m13")
MAJOR_THIRTEENTH = Interval.parse("M13")
