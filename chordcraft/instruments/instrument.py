"""
Instrument Model
================

Every fretted instrument answers the same nine capability questions:

    tuning                   open-string Notes in string order (index 0 first)
    fret_range               (0, max_fret)
    max_stretch              widest fret span a hand can cover
    max_fingers              fretting fingers available
    open_position_threshold  highest fret that still counts as "open position"
    main_barre_threshold     string count that makes a barre "big"
    min_played_strings       fewest sounding strings for a usable voicing
    bass_string_index        string with the LOWEST open pitch
    string_count             len(tuning)

The rest of the system only talks to this contract, so Guitar, Ukulele,
custom tunings and capoed instruments are interchangeable.

``bass_string_index`` is computed from absolute pitch, never assumed to be 0.
On a ukulele (G4 C4 E4 A4) it is 1, the C string.

Usage:
    from chordcraft.instruments.instrument import Guitar

    guitar = Guitar()
    capo3 = guitar.with_capo(3)
    capo3.tuning[0]       # G2
    capo3.max_fret        # 21
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from chordcraft.errors import InvalidCapoError
from chordcraft.theory.note import Note


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_MAX_FINGERS = 4
DEFAULT_OPEN_POSITION_THRESHOLD = 4


# =============================================================================
# INSTRUMENT CONTRACT
# =============================================================================

class Instrument(ABC):
    """Abstract capability set shared by every fretted instrument."""

    name: str = "Instrument"
    instrument_id: Optional[str] = None

    # ---------------------------------------------------------------------
    # Required capabilities
    # ---------------------------------------------------------------------

    @property
    @abstractmethod
    def tuning(self) -> Tuple[Note, ...]:
        """Open-string notes, string index 0 first."""

    @property
    @abstractmethod
    def fret_range(self) -> Tuple[int, int]:
        """Lowest and highest usable fret."""

    @property
    @abstractmethod
    def max_stretch(self) -> int:
        """Largest allowed distance between the lowest and highest fretted fret."""

    # ---------------------------------------------------------------------
    # Capabilities with sensible defaults
    # ---------------------------------------------------------------------

    @property
    def string_count(self) -> int:
        return len(self.tuning)

    @property
    def max_fret(self) -> int:
        return self.fret_range[1]

    @property
    def max_fingers(self) -> int:
        return DEFAULT_MAX_FINGERS

    @property
    def open_position_threshold(self) -> int:
        return DEFAULT_OPEN_POSITION_THRESHOLD

    @property
    def main_barre_threshold(self) -> int:
        return max(self.string_count // 2, 2)

    @property
    def min_played_strings(self) -> int:
        return max(self.string_count // 2, 2)

    @property
    def bass_string_index(self) -> int:
        """Index of the string whose open note sounds lowest."""
        tuning = self.tuning
        return min(range(len(tuning)), key=lambda i: tuning[i].midi)

    @property
    def string_names(self) -> List[str]:
        """
        Display names, index 0 first.

        The highest-pitched string is written lower-case when another
        string shares its letter (guitar: E A D G B e; banjo: g D G B D).
        """
        return derive_string_names(self.tuning)

    # ---------------------------------------------------------------------
    # Capo
    # ---------------------------------------------------------------------

    @property
    def capo_range(self) -> Tuple[int, int]:
        return (1, self.max_fret - 1)

    def with_capo(self, fret: int) -> "CapoedInstrument":
        """
        Clamp a capo at ``fret``.

        Raises:
            InvalidCapoError: If fret is outside [1, max_fret - 1]
        """
        low, high = self.capo_range
        if not low <= fret <= high:
            raise InvalidCapoError(fret, (low, high))
        return CapoedInstrument(self, fret)

    def describe(self) -> dict:
        """Read-only metadata for display."""
        return {"string_count": self.string_count, "string_names": self.string_names}

    def __repr__(self) -> str:
        tuning = " ".join(str(n) for n in self.tuning)
        return f"<{type(self).__name__} {self.name!r} [{tuning}] frets={self.max_fret}>"


def derive_string_names(tuning: Sequence[Note]) -> List[str]:
    names = [note.pitch.spell() for note in tuning]
    if len(tuning) > 1:
        highest = max(range(len(tuning)), key=lambda i: tuning[i].midi)
        if names.count(names[highest]) > 1:
            names[highest] = names[highest].lower()
    return names


# =============================================================================
# CONFIGURABLE INSTRUMENT
# =============================================================================

class ConfigurableInstrument(Instrument):
    """
    An instrument defined entirely by constructor arguments.

    Any capability left as None falls back to the contract default.
    """

    def __init__(
        self,
        name: str,
        tuning: Sequence[Note],
        max_fret: int = 24,
        max_stretch: int = 4,
        max_fingers: int = DEFAULT_MAX_FINGERS,
        open_position_threshold: int = DEFAULT_OPEN_POSITION_THRESHOLD,
        main_barre_threshold: Optional[int] = None,
        min_played_strings: Optional[int] = None,
        instrument_id: Optional[str] = None,
    ):
        if len(tuning) < 1:
            raise ValueError("An instrument needs at least one string")
        if max_fret < 1:
            raise ValueError(f"max_fret must be positive, got {max_fret}")

        self.name = name
        self.instrument_id = instrument_id
        self._tuning = tuple(tuning)
        self._max_fret = max_fret
        self._max_stretch = max_stretch
        self._max_fingers = max_fingers
        self._open_position_threshold = open_position_threshold
        self._main_barre_threshold = main_barre_threshold
        self._min_played_strings = min_played_strings

    @property
    def tuning(self) -> Tuple[Note, ...]:
        return self._tuning

    @property
    def fret_range(self) -> Tuple[int, int]:
        return (0, self._max_fret)

    @property
    def max_stretch(self) -> int:
        return self._max_stretch

    @property
    def max_fingers(self) -> int:
        return self._max_fingers

    @property
    def open_position_threshold(self) -> int:
        return self._open_position_threshold

    @property
    def main_barre_threshold(self) -> int:
        if self._main_barre_threshold is not None:
            return self._main_barre_threshold
        return super().main_barre_threshold

    @property
    def min_played_strings(self) -> int:
        if self._min_played_strings is not None:
            return self._min_played_strings
        return super().min_played_strings


class Guitar(ConfigurableInstrument):
    """Standard 6-string guitar, E2 A2 D3 G3 B3 E4, 24 frets."""

    def __init__(self):
        super().__init__(
            name="Guitar",
            tuning=[Note.parse(n) for n in ("E2", "A2", "D3", "G3", "B3", "E4")],
            max_fret=24,
            max_stretch=4,
            instrument_id="guitar",
        )


class Ukulele(ConfigurableInstrument):
    """
    Soprano ukulele, re-entrant G4 C4 E4 A4, 15 frets.

    The shorter scale allows a wider stretch and a higher open-position
    threshold. Single-note voicings are allowed ("0003" is a C chord).
    """

    def __init__(self):
        super().__init__(
            name="Ukulele",
            tuning=[Note.parse(n) for n in ("G4", "C4", "E4", "A4")],
            max_fret=15,
            max_stretch=5,
            open_position_threshold=5,
            main_barre_threshold=2,
            min_played_strings=1,
            instrument_id="ukulele",
        )


# =============================================================================
# CAPO DECORATOR
# =============================================================================

class CapoedInstrument(Instrument):
    """
    A base instrument with a capo at ``capo`` frets.

    Every open string sounds ``capo`` semitones higher and the usable range
    shrinks by the same amount. Frets in fingerings produced for this
    instrument are RELATIVE to the capo (0 = the capoed string).
    """

    def __init__(self, base: Instrument, capo: int):
        self.base = base
        self.capo = capo
        self.name = f"{base.name} (capo {capo})"
        self.instrument_id = base.instrument_id
        self._tuning = tuple(note.transpose(capo) for note in base.tuning)

    @property
    def tuning(self) -> Tuple[Note, ...]:
        return self._tuning

    @property
    def fret_range(self) -> Tuple[int, int]:
        return (0, self.base.max_fret - self.capo)

    @property
    def max_stretch(self) -> int:
        return self.base.max_stretch

    @property
    def max_fingers(self) -> int:
        return self.base.max_fingers

    @property
    def open_position_threshold(self) -> int:
        return self.base.open_position_threshold

    @property
    def main_barre_threshold(self) -> int:
        return self.base.main_barre_threshold

    @property
    def min_played_strings(self) -> int:
        return self.base.min_played_strings

    @property
    def string_names(self) -> List[str]:
        return self.base.string_names

    def to_absolute(self, fingering):
        """Convert a capo-relative fingering to absolute frets on the bare neck."""
        return fingering.shifted(self.capo)
