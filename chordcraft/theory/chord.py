"""
Chord Qualities and Chord Name Parsing
======================================

This module encodes the chord vocabulary:

    1. CHORD_QUALITIES - the formula table (required + optional intervals)
    2. QUALITY_ALIASES - every suffix spelling the parser accepts
    3. ChordSpec       - root + quality + alterations (+ slash bass)
    4. parse_chord_name - "Abm7", "Cmaj7#11", "G7/B" → ChordSpec

Grammar (left to right):
    root letter A-G
    optional accidental (# or b)
    optional quality suffix from the table (longest match wins)
    zero or more alterations: addN, bN, #N
    optional "/BASS" slash note

Unknown suffixes raise ParseError carrying the offending text. The parser
never guesses a close match.

Usage:
    from chordcraft.theory.chord import parse_chord_name

    chord = parse_chord_name("Dm7")
    chord.notes()        # [D, F, A, C]
    str(chord)           # 'Dm7'
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import re

from chordcraft.errors import ParseError
from chordcraft.theory.interval import (
    Interval, UNISON, MAJOR_SECOND, MINOR_THIRD, MAJOR_THIRD, PERFECT_FOURTH,
    DIMINISHED_FIFTH, PERFECT_FIFTH, AUGMENTED_FIFTH, MAJOR_SIXTH,
    DIMINISHED_SEVENTH, MINOR_SEVENTH, MAJOR_SEVENTH, MINOR_NINTH, MAJOR_NINTH,
    AUGMENTED_NINTH, PERFECT_ELEVENTH, AUGMENTED_ELEVENTH, MINOR_THIRTEENTH,
    MAJOR_THIRTEENTH,
)
from chordcraft.theory.note import PitchClass


# =============================================================================
# CHORD QUALITY
# =============================================================================

@dataclass(frozen=True)
class ChordQuality:
    """
    An immutable chord formula.

    Attributes:
        key: Stable identifier ("major", "dominant7", ...)
        symbol: Display suffix ("", "m", "7", "maj7", ...)
        required: Intervals that define the chord, root first
        optional: Extension intervals that may be present
        omit_fifth: Whether the perfect 5th may be dropped (7th/extended chords)
    """

    key: str
    symbol: str
    required: Tuple[Interval, ...]
    optional: Tuple[Interval, ...] = ()
    omit_fifth: bool = False

    def __post_init__(self):
        offsets = [i.reduced for i in self.required]
        if UNISON not in self.required:
            raise ValueError(f"Chord quality '{self.key}' must include the root")
        if len(set(offsets)) != len(offsets):
            raise ValueError(f"Chord quality '{self.key}' repeats an interval")

    def can_omit(self, interval: Interval) -> bool:
        """True if the interval may be missing without changing the chord's identity."""
        if interval in self.optional:
            return True
        return self.omit_fifth and interval == PERFECT_FIFTH

    @property
    def required_offsets(self) -> Tuple[int, ...]:
        return tuple(i.reduced for i in self.required)

    @property
    def optional_offsets(self) -> Tuple[int, ...]:
        return tuple(i.reduced for i in self.optional)

    def __str__(self) -> str:
        return self.symbol


def _quality(key, symbol, required, optional=(), omit_fifth=False) -> ChordQuality:
    return ChordQuality(key, symbol, tuple(required), tuple(optional), omit_fifth)


# Order matters: the analyzer iterates this table and keeps the first
# candidate on equal scores.
CHORD_QUALITIES: Dict[str, ChordQuality] = {q.key: q for q in [
    # Triads
    _quality("major", "", [UNISON, MAJOR_THIRD, PERFECT_FIFTH]),
    _quality("minor", "m", [UNISON, MINOR_THIRD, PERFECT_FIFTH]),
    _quality("diminished", "dim", [UNISON, MINOR_THIRD, DIMINISHED_FIFTH]),
    _quality("augmented", "aug", [UNISON, MAJOR_THIRD, AUGMENTED_FIFTH]),
    # Suspended
    _quality("sus2", "sus2", [UNISON, MAJOR_SECOND, PERFECT_FIFTH]),
    _quality("sus4", "sus4", [UNISON, PERFECT_FOURTH, PERFECT_FIFTH]),
    # 7th chords
    _quality("dominant7", "7", [UNISON, MAJOR_THIRD, PERFECT_FIFTH, MINOR_SEVENTH], omit_fifth=True),
    _quality("major7", "maj7", [UNISON, MAJOR_THIRD, PERFECT_FIFTH, MAJOR_SEVENTH], omit_fifth=True),
    _quality("minor7", "m7", [UNISON, MINOR_THIRD, PERFECT_FIFTH, MINOR_SEVENTH], omit_fifth=True),
    _quality("minor_major7", "m(maj7)", [UNISON, MINOR_THIRD, PERFECT_FIFTH, MAJOR_SEVENTH], omit_fifth=True),
    _quality("diminished7", "dim7", [UNISON, MINOR_THIRD, DIMINISHED_FIFTH, DIMINISHED_SEVENTH]),
    _quality("half_diminished7", "m7b5", [UNISON, MINOR_THIRD, DIMINISHED_FIFTH, MINOR_SEVENTH]),
    # Extended chords (the 5th is an optional extension)
    _quality("dominant9", "9", [UNISON, MAJOR_THIRD, MINOR_SEVENTH, MAJOR_NINTH], [PERFECT_FIFTH], True),
    _quality("major9", "maj9", [UNISON, MAJOR_THIRD, MAJOR_SEVENTH, MAJOR_NINTH], [PERFECT_FIFTH], True),
    _quality("minor9", "m9", [UNISON, MINOR_THIRD, MINOR_SEVENTH, MAJOR_NINTH], [PERFECT_FIFTH], True),
    _quality("dominant11", "11",
             [UNISON, MAJOR_THIRD, MINOR_SEVENTH, MAJOR_NINTH, PERFECT_ELEVENTH], [PERFECT_FIFTH], True),
    _quality("minor11", "m11",
             [UNISON, MINOR_THIRD, MINOR_SEVENTH, MAJOR_NINTH, PERFECT_ELEVENTH], [PERFECT_FIFTH], True),
    _quality("dominant13", "13", [UNISON, MAJOR_THIRD, MINOR_SEVENTH, MAJOR_NINTH, MAJOR_THIRTEENTH],
             [PERFECT_FIFTH, PERFECT_ELEVENTH], True),
    _quality("major13", "maj13", [UNISON, MAJOR_THIRD, MAJOR_SEVENTH, MAJOR_NINTH, MAJOR_THIRTEENTH],
             [PERFECT_FIFTH, PERFECT_ELEVENTH], True),
    _quality("minor13", "m13", [UNISON, MINOR_THIRD, MINOR_SEVENTH, MAJOR_NINTH, MAJOR_THIRTEENTH],
             [PERFECT_FIFTH, PERFECT_ELEVENTH], True),
    # Altered dominants
    _quality("dominant7b9", "7b9",
             [UNISON, MAJOR_THIRD, PERFECT_FIFTH, MINOR_SEVENTH, MINOR_NINTH], omit_fifth=True),
    _quality("dominant7sharp9", "7#9",
             [UNISON, MAJOR_THIRD, PERFECT_FIFTH, MINOR_SEVENTH, AUGMENTED_NINTH], omit_fifth=True),
    _quality("dominant7b5", "7b5", [UNISON, MAJOR_THIRD, DIMINISHED_FIFTH, MINOR_SEVENTH]),
    _quality("dominant7sharp5", "7#5", [UNISON, MAJOR_THIRD, AUGMENTED_FIFTH, MINOR_SEVENTH]),
    # Add chords
    _quality("add9", "add9", [UNISON, MAJOR_THIRD, PERFECT_FIFTH, MAJOR_NINTH]),
    _quality("minor_add9", "madd9", [UNISON, MINOR_THIRD, PERFECT_FIFTH, MAJOR_NINTH]),
    _quality("add11", "add11", [UNISON, MAJOR_THIRD, PERFECT_FIFTH, PERFECT_ELEVENTH]),
    # 6th chords
    _quality("major6", "6", [UNISON, MAJOR_THIRD, PERFECT_FIFTH, MAJOR_SIXTH]),
    _quality("minor6", "m6", [UNISON, MINOR_THIRD, PERFECT_FIFTH, MAJOR_SIXTH]),
]}

# Suffix spellings → quality key (case-sensitive: "M7" is major 7th, "m7" minor 7th)
QUALITY_ALIASES: Dict[str, str] = {
    "": "major", "maj": "major", "M": "major", "major": "major",
    "m": "minor", "min": "minor", "-": "minor", "minor": "minor",
    "dim": "diminished", "°": "diminished", "o": "diminished",
    "aug": "augmented", "+": "augmented",
    "sus2": "sus2", "sus4": "sus4", "sus": "sus4",
    "7": "dominant7", "dom7": "dominant7",
    "maj7": "major7", "M7": "major7", "Δ7": "major7", "Δ": "major7",
    "m7": "minor7", "min7": "minor7", "-7": "minor7",
    "m(maj7)": "minor_major7", "mmaj7": "minor_major7", "mM7": "minor_major7",
    "minmaj7": "minor_major7",
    "dim7": "diminished7", "°7": "diminished7", "o7": "diminished7",
    "m7b5": "half_diminished7", "ø": "half_diminished7", "ø7": "half_diminished7",
    "half-dim": "half_diminished7",
    "9": "dominant9", "maj9": "major9", "M9": "major9", "Δ9": "major9",
    "m9": "minor9", "min9": "minor9",
    "11": "dominant11", "m11": "minor11", "min11": "minor11",
    "13": "dominant13", "maj13": "major13", "M13": "major13", "Δ13": "major13",
    "m13": "minor13", "min13": "minor13",
    "7b9": "dominant7b9", "7#9": "dominant7sharp9",
    "7b5": "dominant7b5", "7#5": "dominant7sharp5", "7aug": "dominant7sharp5",
    "+7": "dominant7sharp5", "aug7": "dominant7sharp5",
    "add9": "add9", "add2": "add9",
    "madd9": "minor_add9", "m(add9)": "minor_add9",
    "add11": "add11", "add4": "add11",
    "6": "major6", "m6": "minor6", "min6": "minor6",
}

# Alteration tokens layered on top of a quality: token → (interval, replaces 5th?)
ALTERATIONS: Dict[str, Tuple[Interval, bool]] = {
    "b5": (DIMINISHED_FIFTH, True),
    "#5": (AUGMENTED_FIFTH, True),
    "b9": (MINOR_NINTH, False),
    "#9": (AUGMENTED_NINTH, False),
    "#11": (AUGMENTED_ELEVENTH, False),
    "b13": (MINOR_THIRTEENTH, False),
    "add2": (MAJOR_SECOND, False),
    "add4": (PERFECT_FOURTH, False),
    "add6": (MAJOR_SIXTH, False),
    "add9": (MAJOR_NINTH, False),
    "add11": (PERFECT_ELEVENTH, False),
    "add13": (MAJOR_THIRTEENTH, False),
}

ALTERATION_PATTERN = re.compile(r"add(?:13|11|9|6|4|2)|[b#](?:13|11|9|5)")

# Aliases tried longest first so "m7b5" wins over "m7" and "7b9" over "7"
_ALIASES_BY_LENGTH = sorted(QUALITY_ALIASES, key=len, reverse=True)

# Only word-like suffixes are matched case-insensitively ("MAJ7", "Min")
_CASE_INSENSITIVE_PREFIXES = ("maj", "min", "dim", "aug", "sus", "add", "dom", "half")


def get_quality(key: str) -> ChordQuality:
    """Look up a quality by key or by any accepted suffix spelling."""
    if key in CHORD_QUALITIES:
        return CHORD_QUALITIES[key]
    if key in QUALITY_ALIASES:
        return CHORD_QUALITIES[QUALITY_ALIASES[key]]
    raise ParseError(f"Unknown chord quality: '{key}'", text=key)


# =============================================================================
# CHORD SPEC
# =============================================================================

@dataclass(frozen=True)
class ChordSpec:
    """
    A parsed chord: root + quality + alterations, plus an optional slash bass.

    Attributes:
        root: Root pitch class
        quality: Base chord formula
        alterations: Alteration tokens in the order written ("b9", "#11", "add9")
        bass: Slash-chord bass note (None for root position)
        prefer_flats: Spelling of the root as written (Bb vs A#)
    """

    root: PitchClass
    quality: ChordQuality
    alterations: Tuple[str, ...] = ()
    bass: Optional[PitchClass] = None
    prefer_flats: bool = field(default=False, compare=False)

    # ---------------------------------------------------------------------
    # Interval views
    # ---------------------------------------------------------------------

    def required_intervals(self) -> List[Interval]:
        """Base required intervals with alterations applied."""
        required = list(self.quality.required)
        for token in self.alterations:
            interval, replaces_fifth = ALTERATIONS[token]
            if replaces_fifth:
                required = [i for i in required if i != PERFECT_FIFTH]
            if interval not in required:
                required.append(interval)
        return required

    def optional_intervals(self) -> List[Interval]:
        required = self.required_intervals()
        optional = []
        for interval in self.quality.optional:
            if interval in required:
                continue
            if interval == PERFECT_FIFTH and any(ALTERATIONS[t][1] for t in self.alterations):
                continue
            optional.append(interval)
        return optional

    def omittable_intervals(self) -> List[Interval]:
        """Required intervals a jazzy voicing may leave out."""
        return [i for i in self.required_intervals() if self.quality.can_omit(i)]

    # ---------------------------------------------------------------------
    # Pitch-class views
    # ---------------------------------------------------------------------

    def _pitches(self, intervals: List[Interval]) -> List[PitchClass]:
        return [self.root.transpose(i.semitones) for i in intervals]

    def required_notes(self) -> List[PitchClass]:
        return self._pitches(self.required_intervals())

    def optional_notes(self) -> List[PitchClass]:
        return self._pitches(self.optional_intervals())

    def notes(self) -> List[PitchClass]:
        """All chord tones: required then optional."""
        return self.required_notes() + self.optional_notes()

    def core_notes(self) -> List[PitchClass]:
        """Required tones minus those that may be omitted."""
        return self._pitches([i for i in self.required_intervals() if not self.quality.can_omit(i)])

    def bass_target(self) -> PitchClass:
        """Pitch class that should sound lowest: slash bass, else the root."""
        return self.bass if self.bass is not None else self.root

    # ---------------------------------------------------------------------
    # Transformations / display
    # ---------------------------------------------------------------------

    def transpose(self, semitones: int) -> "ChordSpec":
        bass = self.bass.transpose(semitones) if self.bass is not None else None
        return ChordSpec(self.root.transpose(semitones), self.quality,
                         self.alterations, bass, self.prefer_flats)

    def name(self, prefer_flats: Optional[bool] = None) -> str:
        flats = self.prefer_flats if prefer_flats is None else prefer_flats
        text = self.root.spell(flats) + self.quality.symbol + "".join(self.alterations)
        if self.bass is not None:
            text += "/" + self.bass.spell(flats)
        return text

    def __str__(self) -> str:
        return self.name()


# =============================================================================
# PARSER
# =============================================================================

def _match_quality(suffix: str) -> Tuple[str, str]:
    """Return (quality_key, remaining_text) for the longest known suffix prefix."""
    lowered = suffix.lower()
    for alias in _ALIASES_BY_LENGTH:
        if not alias:
            continue
        if suffix.startswith(alias):
            return QUALITY_ALIASES[alias], suffix[len(alias):]
        if alias.startswith(_CASE_INSENSITIVE_PREFIXES) and lowered.startswith(alias):
            return QUALITY_ALIASES[alias], suffix[len(alias):]
    return "major", suffix


def _parse_alterations(text: str, source: str) -> Tuple[str, ...]:
    tokens = []
    position = 0
    while position < len(text):
        if text[position] in "(),":
            position += 1
            continue
        match = ALTERATION_PATTERN.match(text, position)
        if not match:
            raise ParseError(
                f"Unrecognized chord suffix '{text[position:]}' in '{source}'",
                text=text[position:], source=source,
            )
        tokens.append(match.group(0))
        position = match.end()
    return tuple(tokens)


def parse_chord_name(text: str) -> ChordSpec:
    """
    Parse a chord name into a ChordSpec.

    Examples:
        parse_chord_name("C")          → C major
        parse_chord_name("Abm7")       → A♭ minor 7th (rendered "Abm7")
        parse_chord_name("Cmaj7#11")   → C major 7th with a raised 11th
        parse_chord_name("G/B")        → G major over B

    Raises:
        ParseError: On an empty name, a bad root, or any unknown suffix
    """
    source = text
    name = text.strip().replace("♯", "#").replace("♭", "b")
    if not name:
        raise ParseError("Empty chord name", text=text, source=source)

    bass = None
    if "/" in name:
        name, bass_text = name.split("/", 1)
        bass = PitchClass.parse(bass_text) if bass_text else None
        if bass is None:
            raise ParseError(f"Missing bass note after '/' in '{source}'", text="/", source=source)

    root_length = 2 if len(name) > 1 and name[1] in "#b" else 1
    root_text = name[:root_length]
    try:
        root = PitchClass.parse(root_text)
    except ParseError:
        raise ParseError(f"Invalid root note '{root_text}' in '{source}'", text=root_text, source=source)

    quality_key, rest = _match_quality(name[root_length:])
    alterations = _parse_alterations(rest, source)

    return ChordSpec(
        root=root,
        quality=CHORD_QUALITIES[quality_key],
        alterations=alterations,
        bass=bass,
        prefer_flats=root_text.endswith("b"),
    )
