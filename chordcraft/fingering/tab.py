"""
Tab Notation Codec
==================

The wire format for fingerings, one token per string, index 0 first:

    x or X     muted
    0-9        that fret
    (NN)       a fret >= 10, e.g. (12)

Spaces, dashes and commas between tokens are ignored, so "x32010",
"x-3-2-0-1-0" and "x 3 2 0 1 0" are the same fingering.

decode() never raises. It consumes tokens greedily from the left, skips
anything it does not recognise, and stops once ``string_count`` strings have
been read. Half-typed input from a UI ("x3201", "x3(1") decodes to whatever
prefix makes sense.

Usage:
    from chordcraft.fingering.tab import decode, encode

    decode("x-5-7-7-5-x")     # Fingering((None, 5, 7, 7, 5, None))
    encode(decode("(10)(12)(12)"))   # '(10)(12)(12)'
"""

import re
from typing import List, Optional

from chordcraft.fingering.fingering import Fingering, StringState

TAB_TOKEN = re.compile(r"x|X|\((\d+)\)|\d")


def decode(tab: str, string_count: Optional[int] = None) -> Fingering:
    """
    Read tab notation into a Fingering.

    Args:
        tab: Tab text (may be partial or contain junk)
        string_count: Stop after this many strings (None = read everything)

    Returns:
        The decoded Fingering (possibly shorter than string_count, possibly empty)
    """
    states: List[StringState] = []
    for match in TAB_TOKEN.finditer(tab or ""):
        if string_count is not None and len(states) >= string_count:
            break
        token = match.group(0)
        if token in ("x", "X"):
            states.append(None)
        elif match.group(1) is not None:
            states.append(int(match.group(1)))
        else:
            states.append(int(token))
    return Fingering(tuple(states))


def encode(fingering: Fingering) -> str:
    """Write a Fingering as tab notation (the exact inverse of decode)."""
    return fingering.to_tab()
