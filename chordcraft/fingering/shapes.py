"""
Standard Chord Shapes
=====================

Recognises the familiar open-position shapes (the CAGED family on guitar,
and the common first-position shapes on ukulele, mandolin and banjo),
including when they are moved up the neck behind a barre or a capo.

A shape is written as tab OFFSETS from a base fret. The strings marked 0
are the "nut" strings: in a moved shape they all sit at the base fret.
So the E shape "022100" matches 022100 (base 0) and 577655 (base 5, an A
barre chord).

Usage:
    from chordcraft.fingering.shapes import find_matching_shape

    find_matching_shape(Fingering.parse("x35553"), "guitar")   # ('A', 3)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from chordcraft.fingering.fingering import Fingering, StringState
from chordcraft.fingering.tab import decode


@dataclass(frozen=True)
class StandardShape:
    """A named shape: per-string offsets from a base fret (None = muted)."""

    name: str
    pattern: Tuple[StringState, ...]

    def matches(self, fingering: Fingering) -> Optional[int]:
        """Return the base fret if the fingering is this shape, else None."""
        frets = fingering.frets
        if len(frets) != len(self.pattern):
            return None

        base = None
        for fret, offset in zip(frets, self.pattern):
            if offset == 0 and fret is not None:
                if base is None:
                    base = fret
                elif base != fret:
                    return None
        if base is None:
            base = fingering.min_fret or 0

        for fret, offset in zip(frets, self.pattern):
            if (fret is None) != (offset is None):
                return None
            if fret is not None and fret != base + offset:
                return None
        return base


# Shape tables, in lookup order (first match wins)
SHAPE_LIBRARY: Dict[str, List[Tuple[str, str]]] = {
    "guitar": [
        ("Am", "x02210"), ("A", "x02220"), ("Em", "022000"), ("E", "022100"),
        ("C", "x32010"), ("G", "320003"), ("D", "xx0232"), ("Dm", "xx0231"),
    ],
    "ukulele": [
        ("A", "2100"), ("Am", "2000"), ("C", "0003"), ("F", "2010"), ("G", "0232"),
        ("D", "2220"), ("Dm", "2210"), ("E", "4442"), ("Em", "0432"), ("Bb", "3211"),
    ],
    "mandolin": [
        ("G", "0023"), ("C", "0230"), ("D", "2002"), ("A", "2245"), ("E", "0442"),
        ("F", "3553"), ("Am", "2200"), ("Em", "0402"), ("Dm", "2001"), ("Gm", "0021"),
    ],
    "banjo": [
        ("G", "00000"), ("C", "x2012"), ("C-alt", "02012"), ("D7", "x0020"),
        ("Em", "x0002"),
    ],
}

STANDARD_SHAPES: Dict[str, List[StandardShape]] = {
    instrument_id: [StandardShape(name, decode(tab).frets) for name, tab in shapes]
    for instrument_id, shapes in SHAPE_LIBRARY.items()
}


def find_matching_shape(fingering: Fingering, instrument_id: Optional[str]) -> Optional[Tuple[str, int]]:
    """
    Name the standard shape a fingering uses.

    Returns:
        (shape_name, base_fret), or None if no shape matches or the
        instrument has no shape table
    """
    for shape in STANDARD_SHAPES.get(instrument_id or "", []):
        base = shape.matches(fingering)
        if base is not None:
            return shape.name, base
    return None
