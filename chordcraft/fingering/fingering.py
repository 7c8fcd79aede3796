"""
Fingering Model
===============

A Fingering is one StringState per string, index 0 first:

    None      muted (x)
    0         open
    n > 0     fretted at fret n

Fingerings are immutable and hashable, so structurally equal shapes
deduplicate naturally in sets and dict keys.

Every derived property (stretch, finger count, barres, playability, notes,
bass note) is computed from the fret tuple plus, where pitch matters, the
instrument. A Fingering never stores its instrument.

Usage:
    from chordcraft.fingering import Fingering
    from chordcraft.instruments import Guitar

    c = Fingering.parse("x32010")
    c.fret_span                        # 2
    c.pitch_classes(Guitar())          # [C, E, G]
    c.bass_note(Guitar())              # C3
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from chordcraft.config import PlayabilityWeights, get_config
from chordcraft.fingering import barres as barre_rules
from chordcraft.theory.note import Note, PitchClass

# A single string: None = muted, 0 = open, n = fretted
StringState = Optional[int]

MUTED: StringState = None
OPEN: StringState = 0


@dataclass(frozen=True)
class Fingering:
    """An immutable per-string fret pattern."""

    frets: Tuple[StringState, ...]

    def __post_init__(self):
        for fret in self.frets:
            if fret is not None and (not isinstance(fret, int) or fret < 0):
                raise ValueError(f"Invalid fret {fret!r} in fingering {self.frets!r}")

    @classmethod
    def of(cls, frets: Sequence[StringState]) -> "Fingering":
        return cls(tuple(frets))

    @classmethod
    def parse(cls, tab: str, string_count: Optional[int] = None) -> "Fingering":
        """Decode tab notation (see chordcraft.fingering.tab.decode)."""
        from chordcraft.fingering.tab import decode
        return decode(tab, string_count)

    def to_tab(self) -> str:
        """Encode as tab notation: x / digit / (NN)."""
        parts = []
        for fret in self.frets:
            if fret is None:
                parts.append("x")
            elif fret > 9:
                parts.append(f"({fret})")
            else:
                parts.append(str(fret))
        return "".join(parts)

    # =========================================================================
    # STRUCTURE
    # =========================================================================

    @property
    def string_count(self) -> int:
        return len(self.frets)

    @property
    def played_count(self) -> int:
        return sum(1 for f in self.frets if f is not None)

    @property
    def muted_count(self) -> int:
        return sum(1 for f in self.frets if f is None)

    @property
    def fretted_positions(self) -> List[Tuple[int, int]]:
        """(string_index, fret) for every fretted (non-open) string."""
        return [(i, f) for i, f in enumerate(self.frets) if f]

    @property
    def min_fret(self) -> Optional[int]:
        """Lowest fretted (non-open) fret."""
        return barre_rules.lowest_fretted(self.frets)

    @property
    def max_fret(self) -> Optional[int]:
        """Highest fret on any played string (open counts as 0)."""
        played = [f for f in self.frets if f is not None]
        return max(played) if played else None

    @property
    def position(self) -> int:
        """Neck position: the lowest fretted fret, or 0 if nothing is fretted."""
        return self.min_fret or 0

    @property
    def fret_span(self) -> int:
        fretted = [f for f in self.frets if f]
        return max(fretted) - min(fretted) if fretted else 0

    @property
    def interior_mute_count(self) -> int:
        """Muted strings strictly between the first and last played string."""
        played = [i for i, f in enumerate(self.frets) if f is not None]
        if len(played) < 2:
            return 0
        return sum(1 for f in self.frets[played[0]:played[-1] + 1] if f is None)

    @property
    def interior_open_count(self) -> int:
        """Open strings strictly between the first and last fretted string."""
        fretted = [i for i, f in enumerate(self.frets) if f]
        if len(fretted) < 2:
            return 0
        return sum(1 for f in self.frets[fretted[0]:fretted[-1] + 1] if f == 0)

    # =========================================================================
    # HAND SHAPE
    # =========================================================================

    def barres(self) -> List[barre_rules.Barre]:
        return barre_rules.detect_barres(self.frets)

    @property
    def has_barre(self) -> bool:
        return bool(self.barres())

    @property
    def min_fingers_required(self) -> int:
        return barre_rules.count_fingers(self.frets)

    def has_high_barre(self, threshold: int) -> bool:
        """
        True if the longest same-fret run covers >= threshold strings at a
        fret ABOVE the lowest one (a second, hard barre).
        """
        lowest = self.min_fret
        if lowest is None:
            return False
        longest, longest_fret = 0, 0
        for fret, strings in sorted(barre_rules.strings_by_fret(self.frets).items()):
            for run in barre_rules.consecutive_runs(strings):
                if len(run) > longest:
                    longest, longest_fret = len(run), fret
        return longest >= threshold and longest_fret > lowest

    def is_open_position(self, instrument) -> bool:
        """Uses an open string and stays at or below the open-position threshold."""
        return 0 in self.frets and (self.max_fret or 0) <= instrument.open_position_threshold

    def is_playable(self, instrument) -> bool:
        return (self.fret_span <= instrument.max_stretch
                and self.min_fingers_required <= instrument.max_fingers)

    def playability_score(self, instrument, weights: Optional[PlayabilityWeights] = None) -> int:
        """
        Physical comfort, 0-100.

        Starts at 100, then: minus span, a bonus for needing few fingers,
        minus a big second barre, minus open strings trapped between fretted
        ones, a bonus for clean open-position shapes, minus high positions,
        minus each muted string beyond the first. Unplayable shapes score 0.
        """
        w = weights or get_config().playability
        span = self.fret_span
        fingers = self.min_fingers_required
        if span > instrument.max_stretch or fingers > instrument.max_fingers:
            return 0

        score = w.base - span * w.span_penalty

        ratio = fingers / instrument.max_fingers
        if ratio <= 0.25:
            score += w.few_fingers_bonus
        elif ratio <= 0.5:
            score += w.some_fingers_bonus
        elif ratio > 0.75:
            score -= w.all_fingers_penalty

        if self.has_high_barre(instrument.main_barre_threshold):
            score -= w.high_barre_penalty

        interior_opens = self.interior_open_count
        score -= interior_opens * w.interior_open_penalty
        if interior_opens == 0 and self.is_open_position(instrument):
            score += w.open_position_bonus

        lowest = self.min_fret
        if lowest is not None and lowest > w.high_position_fret:
            score -= (lowest - w.high_position_fret) * w.high_position_penalty

        if self.muted_count > 1:
            score -= (self.muted_count - 1) * w.muted_string_penalty

        return max(0, min(100, score))

    # =========================================================================
    # PITCH
    # =========================================================================

    def notes(self, instrument) -> List[Note]:
        """Sounding note of each played string, in string order."""
        tuning = instrument.tuning
        return [tuning[i].transpose(f) for i, f in enumerate(self.frets[:len(tuning)])
                if f is not None]

    def pitch_classes(self, instrument) -> List[PitchClass]:
        """Distinct sounding pitch classes, ascending from C."""
        return sorted({note.pitch for note in self.notes(instrument)})

    def bass_note(self, instrument) -> Optional[Note]:
        """
        The lowest sounding note, by absolute pitch.

        On re-entrant tunings this is not tied to a string: ukulele 0x87
        sounds G4 C5 E5, so the open G string is the bass.
        """
        notes = self.notes(instrument)
        if not notes:
            return None
        return min(notes, key=lambda note: note.midi)

    # =========================================================================
    # TRANSFORMS
    # =========================================================================

    def shifted(self, frets: int) -> "Fingering":
        """Move every played string by ``frets`` (muted strings stay muted)."""
        return Fingering(tuple(None if f is None else f + frets for f in self.frets))

    def __str__(self) -> str:
        return self.to_tab()

    def __len__(self) -> int:
        return len(self.frets)

    def __iter__(self):
        return iter(self.frets)
