"""
Engine Subpackage - the three search and ranking algorithms

    - generator.py: chord name → ranked fingerings (pruned depth-first search)
    - analyzer.py: fingering → ranked chord names
    - progression.py: chord sequence → smooth fingering sequences

Usage:
    from chordcraft.engine import generate_fingerings, analyze_fingering
"""

from chordcraft.engine.generator import (
    ScoredFingering, classify_voicing, format_fingering_diagram, generate_fingerings,
    search_fingerings,
)
from chordcraft.engine.analyzer import ChordMatch, analyze_fingering
from chordcraft.engine.progression import (
    ChordTransition, ProgressionSequence, count_movements, generate_progression,
    transition_score,
)
