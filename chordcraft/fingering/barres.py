"""
Barre Detection
===============

A barre is one finger laid across several strings at the same fret.

Two kinds are recognised, and both may be present in one fingering:

    FULL  - the lowest fretted fret appears on BOTH the first and the last
            played string, and no string between them is open; the finger
            spans everything between them (133211 → fret 1, strings 0-5,
            but 103211 has no full barre)
    MINI  - any other run of >= 2 strictly consecutive strings sharing a
            fret (133211 → fret 3, strings 1-2)

Open strings are never barred: 022000 has a mini-barre at fret 2 but no
full barre, because the first and last played strings are open.

Functions here take the raw fret tuple (None = muted, 0 = open) so that the
generator's search can call them on partial fingerings.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

FULL = "full"
MINI = "mini"


@dataclass(frozen=True)
class Barre:
    """One finger across strings ``from_string``..``to_string`` at ``fret``."""

    fret: int
    from_string: int
    to_string: int
    kind: str = MINI

    @property
    def span(self) -> int:
        return self.to_string - self.from_string + 1

    def covers(self, string_index: int) -> bool:
        return self.from_string <= string_index <= self.to_string


def _played_bounds(frets: Sequence[Optional[int]]):
    played = [i for i, f in enumerate(frets) if f is not None]
    if not played:
        return None, None
    return played[0], played[-1]


def lowest_fretted(frets: Sequence[Optional[int]]) -> Optional[int]:
    fretted = [f for f in frets if f]
    return min(fretted) if fretted else None


def full_barre(frets: Sequence[Optional[int]]) -> Optional[Barre]:
    """The full barre, if the lowest fret reaches both outermost played strings."""
    lowest = lowest_fretted(frets)
    if lowest is None:
        return None
    first, last = _played_bounds(frets)
    if first == last:
        return None
    if frets[first] != lowest or frets[last] != lowest:
        return None
    # The finger stops every string it lies across
    if any(f == 0 for f in frets[first:last + 1]):
        return None
    return Barre(lowest, first, last, FULL)


def consecutive_runs(strings: Sequence[int]) -> List[List[int]]:
    """Split sorted string indexes into runs of consecutive indexes."""
    runs: List[List[int]] = []
    for index in strings:
        if runs and index == runs[-1][-1] + 1:
            runs[-1].append(index)
        else:
            runs.append([index])
    return runs


def strings_by_fret(frets: Sequence[Optional[int]]) -> Dict[int, List[int]]:
    """Fretted (non-open) string indexes grouped by fret, indexes ascending."""
    groups: Dict[int, List[int]] = {}
    for index, fret in enumerate(frets):
        if fret:
            groups.setdefault(fret, []).append(index)
    return groups


def detect_barres(frets: Sequence[Optional[int]]) -> List[Barre]:
    """
    Every barre in a fingering: the full barre first, then mini-barres by fret.

    Examples:
        detect_barres((5, 7, 7, 5, 5, 5))          → full@5 0-5, mini@7 1-2
        detect_barres((None, 2, 4, 4, None, None)) → mini@4 2-3
        detect_barres((None, 3, 2, 0, 1, 0))       → []
    """
    barres: List[Barre] = []
    full = full_barre(frets)
    if full is not None:
        barres.append(full)

    for fret, strings in sorted(strings_by_fret(frets).items()):
        if full is not None and fret == full.fret:
            continue
        for run in consecutive_runs(strings):
            if len(run) >= 2:
                barres.append(Barre(fret, run[0], run[-1], MINI))
    return barres


def count_fingers(frets: Sequence[Optional[int]]) -> int:
    """
    Fewest fretting fingers needed.

    A full barre costs one finger for every note at its fret. Otherwise each
    run of consecutive strings at one fret costs one finger.
    """
    full = full_barre(frets)
    total = 0
    for fret, strings in strings_by_fret(frets).items():
        if full is not None and fret == full.fret:
            total += 1
        else:
            total += len(consecutive_runs(strings))
    return total


def finger_lower_bound(frets: Sequence[Optional[int]]) -> int:
    """
    A count no completion of this partial fingering can go below.

    The lowest fret is treated as if it will become a full barre (one finger),
    which is the most optimistic outcome for the strings still to come.
    """
    groups = strings_by_fret(frets)
    if not groups:
        return 0
    lowest = min(groups)
    return 1 + sum(len(consecutive_runs(s)) for fret, s in groups.items() if fret != lowest)
