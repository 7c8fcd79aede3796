"""
Progression Optimizer - chord sequence → smooth fingering sequences

For each chord, the generator supplies C candidate fingerings. Every
adjacent pair of chords gets a C×C matrix of transition scores and a
matching matrix of position distances. Sequences are then assembled
greedily:

    - start from each of the first K candidates for chord 1
    - at every step take the best-scoring next candidate whose position
      distance stays within D
    - if none fits, take the smallest overshoot (then fewest movements,
      then best score) and mark the transition as relaxed

The resulting sequences are sorted by total transition score and the best
K are returned.

A transition score rewards strings that stay put (anchors) and penalises
strings that move:

    score = base + (max_movements - movements) * movement_weight
                 + anchors * anchor_weight + shape_bonus
                 - position_distance * distance_weight

Strings held under a barre that stays at the same fret count as a single
anchor; a barre that slides counts as a single movement.

Usage:
    from chordcraft.engine.progression import generate_progression
    from chordcraft.instruments import Guitar

    for seq in generate_progression(["C", "Am", "F", "G"], Guitar()):
        print([f.tab for f in seq.fingerings], seq.total_score)
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from chordcraft.config import ScoringConfig, TransitionWeights, get_config
from chordcraft.data.schema import (
    PlayingContext, ProgressionOptions, coerce_progression_options,
)
from chordcraft.engine.generator import ScoredFingering, generate_fingerings
from chordcraft.fingering.fingering import Fingering
from chordcraft.logging_config import get_logger
from chordcraft.theory.chord import ChordSpec, parse_chord_name

logger = get_logger(__name__)


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class ChordTransition:
    """Moving from one fingering to the next."""

    from_chord: str
    to_chord: str
    from_fingering: ScoredFingering
    to_fingering: ScoredFingering
    score: int
    finger_movements: int
    common_anchors: int
    position_distance: int
    relaxed: bool = False


@dataclass(frozen=True)
class ProgressionSequence:
    """
    One complete fingering choice for a chord sequence.

    Attributes:
        chords: Chord names as given
        fingerings: One fingering per chord
        transitions: len(chords) - 1 transitions
        total_score: Sum of transition scores
        avg_transition_score: Mean transition score (0.0 for a single chord)
        relaxed: True if any transition had to exceed max_fret_distance
    """

    chords: Tuple[str, ...]
    fingerings: Tuple[ScoredFingering, ...]
    transitions: Tuple[ChordTransition, ...]
    total_score: int
    avg_transition_score: float
    relaxed: bool = False


# =============================================================================
# TRANSITION METRICS
# =============================================================================

def _barre_groups(fingering: Fingering):
    """Map string index → barre for every string held under a barre."""
    held = {}
    for barre in fingering.barres():
        for index in range(barre.from_string, barre.to_string + 1):
            if fingering.frets[index] == barre.fret:
                held.setdefault(index, barre)
    return held


def count_movements(a: Fingering, b: Fingering) -> Tuple[int, int]:
    """
    (movements, anchors) between two fingerings.

    An anchor is a played string whose state does not change. A movement is
    any other change, except a string muted in both. A barre that covers
    the same strings in both shapes counts once: one anchor if it stays at
    its fret, one movement if it slides.
    """
    held_a = _barre_groups(a)
    held_b = _barre_groups(b)

    movements = 0
    anchors = 0
    barre_pairs = {}
    for index, (fa, fb) in enumerate(zip(a.frets, b.frets)):
        if fa is None and fb is None:
            continue
        if index in held_a and index in held_b:
            key = (held_a[index], held_b[index])
            if key in barre_pairs:
                continue
            barre_pairs[key] = True
            if fa == fb:
                anchors += 1
            else:
                movements += 1
            continue
        if fa == fb:
            anchors += 1
        else:
            movements += 1

    # Strings beyond the shorter fingering
    longer = a.frets if len(a.frets) > len(b.frets) else b.frets
    movements += sum(1 for f in longer[min(len(a), len(b)):] if f is not None)
    return movements, anchors


def position_distance(a: ScoredFingering, b: ScoredFingering) -> int:
    return abs(a.position - b.position)


def transition_score(a: ScoredFingering, b: ScoredFingering, instrument,
                     context: PlayingContext = PlayingContext.SOLO,
                     weights: Optional[TransitionWeights] = None) -> int:
    """Score moving from ``a`` to ``b`` (higher is smoother)."""
    w = weights or get_config().transition
    movements, anchors = count_movements(a.fingering, b.fingering)

    if context is PlayingContext.BAND:
        movement_weight, distance_weight = w.band_movement_weight, w.band_distance_weight
    else:
        movement_weight, distance_weight = w.solo_movement_weight, w.solo_distance_weight

    shape_bonus = 0
    if a.fingering.has_barre and b.fingering.has_barre:
        shape_bonus += w.barre_similarity_bonus
    if a.fingering.is_open_position(instrument) and b.fingering.is_open_position(instrument):
        shape_bonus += w.open_position_bonus
    if abs(a.fingering.played_count - b.fingering.played_count) <= 1:
        shape_bonus += w.string_count_similarity_bonus

    return (w.base
            + (w.max_movements - movements) * movement_weight
            + anchors * w.anchor_weight
            + shape_bonus
            - position_distance(a, b) * distance_weight)


def transition_matrices(left: Sequence[ScoredFingering], right: Sequence[ScoredFingering],
                        instrument, context: PlayingContext,
                        weights: TransitionWeights) -> Tuple[np.ndarray, np.ndarray]:
    """(scores, distances) for every left→right candidate pair."""
    scores = np.zeros((len(left), len(right)), dtype=np.int64)
    distances = np.zeros((len(left), len(right)), dtype=np.int64)
    for i, a in enumerate(left):
        for j, b in enumerate(right):
            scores[i, j] = transition_score(a, b, instrument, context, weights)
            distances[i, j] = position_distance(a, b)
    return scores, distances


def _make_transition(names, step, a, b, score, instrument, relaxed) -> ChordTransition:
    movements, anchors = count_movements(a.fingering, b.fingering)
    return ChordTransition(
        from_chord=names[step],
        to_chord=names[step + 1],
        from_fingering=a,
        to_fingering=b,
        score=int(score),
        finger_movements=movements,
        common_anchors=anchors,
        position_distance=position_distance(a, b),
        relaxed=relaxed,
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def generate_progression(
    chords: Sequence[Union[str, ChordSpec]],
    instrument,
    options: Union[ProgressionOptions, dict, None] = None,
    config: Optional[ScoringConfig] = None,
) -> List[ProgressionSequence]:
    """
    Find up to K fingering sequences that move smoothly through ``chords``.

    Returns:
        Sequences, best total score first. Empty if ``chords`` is empty or
        any chord has no playable fingering.

    Raises:
        ParseError: If any chord name cannot be parsed
    """
    opts = coerce_progression_options(options)
    config = config or get_config()
    weights = config.transition
    context = opts.generator_options.playing_context

    if not chords:
        return []
    specs = [parse_chord_name(c) if isinstance(c, str) else c for c in chords]
    names = [c if isinstance(c, str) else c.name() for c in chords]

    generator_options = opts.generator_options.model_copy(
        update={"limit": opts.candidates_per_chord}
    )
    candidates: List[List[ScoredFingering]] = []
    for spec in specs:
        found = generate_fingerings(spec, instrument, generator_options, config)
        if not found:
            logger.debug("No fingerings for %s; progression is empty", spec)
            return []
        candidates.append(found)

    if len(candidates) == 1:
        return [
            ProgressionSequence(tuple(names), (f,), (), 0, 0.0, False)
            for f in candidates[0][:opts.limit]
        ]

    matrices = [
        transition_matrices(candidates[k], candidates[k + 1], instrument, context, weights)
        for k in range(len(candidates) - 1)
    ]

    sequences: List[ProgressionSequence] = []
    for start in range(min(opts.limit, len(candidates[0]))):
        current = start
        path = [candidates[0][start]]
        transitions: List[ChordTransition] = []

        for step, (scores, distances) in enumerate(matrices):
            row_scores = scores[current]
            row_distances = distances[current]
            allowed = np.flatnonzero(row_distances <= opts.max_fret_distance)

            if allowed.size:
                # argmax returns the first maximum, so ties keep generator order
                best = int(allowed[np.argmax(row_scores[allowed])])
                relaxed = False
            else:
                best = min(
                    range(len(row_scores)),
                    key=lambda j: (
                        row_distances[j] - opts.max_fret_distance,
                        count_movements(path[-1].fingering, candidates[step + 1][j].fingering)[0],
                        -row_scores[j],
                    ),
                )
                relaxed = True
                logger.debug(
                    "Relaxed %s → %s: nearest candidate is %d frets away (limit %d)",
                    names[step], names[step + 1], row_distances[best], opts.max_fret_distance,
                )

            nxt = candidates[step + 1][best]
            transitions.append(_make_transition(
                names, step, path[-1], nxt, row_scores[best], instrument, relaxed))
            path.append(nxt)
            current = best

        total = sum(t.score for t in transitions)
        sequences.append(ProgressionSequence(
            chords=tuple(names),
            fingerings=tuple(path),
            transitions=tuple(transitions),
            total_score=total,
            avg_transition_score=total / len(transitions),
            relaxed=any(t.relaxed for t in transitions),
        ))

    sequences.sort(key=lambda s: s.total_score, reverse=True)
    return sequences[:opts.limit]
