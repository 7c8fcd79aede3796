"""
Fingering Subpackage

    - fingering.py: Fingering (per-string frets) and its derived properties
    - tab.py: tab-notation encode / decode
    - barres.py: full and mini barre detection, finger counting
    - shapes.py: standard (CAGED-style) shape recognition

Usage:
    from chordcraft.fingering import Fingering, decode

    f = decode("133211", string_count=6)
    f.barres()   # [Barre(fret=1, ...full), Barre(fret=3, ...mini)]
"""

from chordcraft.fingering.fingering import MUTED, OPEN, Fingering, StringState
from chordcraft.fingering.barres import Barre, detect_barres
from chordcraft.fingering.tab import decode, encode
from chordcraft.fingering.shapes import find_matching_shape
