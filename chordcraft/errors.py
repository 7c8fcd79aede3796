"""
Error Taxonomy for ChordCraft
=============================

Every failure the library reports derives from ChordCraftError, so callers
can catch a single base class. The concrete errors also derive from the
closest builtin (ValueError / KeyError) so ordinary Python handling works.

Empty results are NOT errors:
    - no fingering satisfies the constraints  → []
    - no chord quality explains the notes     → []

Usage:
    from chordcraft.errors import ParseError

    try:
        parse_chord_name("Cxyz")
    except ParseError as e:
        print(e.text)   # 'xyz'
"""

from typing import Optional, Sequence, Tuple


class ChordCraftError(Exception):
    """Base class for all errors raised by chordcraft."""


class ParseError(ChordCraftError, ValueError):
    """
    A chord name, note, interval, tuning or tab could not be parsed.

    Attributes:
        text: The offending substring (what could not be understood)
        source: The full input that was being parsed
    """

    def __init__(self, message: str, text: str = "", source: Optional[str] = None):
        super().__init__(message)
        self.text = text
        self.source = source if source is not None else text


class InvalidCapoError(ChordCraftError, ValueError):
    """A capo was requested at a fret the instrument cannot take."""

    def __init__(self, fret: int, valid_range: Tuple[int, int]):
        low, high = valid_range
        super().__init__(
            f"Capo position {fret} is out of range (valid: {low}-{high})"
        )
        self.fret = fret
        self.valid_range = valid_range


class InvalidInstrumentError(ChordCraftError, KeyError):
    """An instrument identifier is not one of the known presets."""

    def __init__(self, instrument_id: str, known: Sequence[str] = ()):
        self.instrument_id = instrument_id
        self.known = list(known)
        message = f"Unknown instrument '{instrument_id}'"
        if self.known:
            message += f" (known: {', '.join(self.known)})"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class ConfigError(ChordCraftError, ValueError):
    """A scoring configuration file is unreadable or holds invalid values."""
