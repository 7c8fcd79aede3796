"""
Fingering Generator - chord name → ranked fingerings

Given a chord and an instrument, enumerate every physically playable
fingering that voices the chord, then rank them for the requested playing
context.

Pipeline:
    1. Per-string options: muted, or any fret whose pitch is a chord tone
    2. Depth-first search over strings with three prunes
         - too few strings left to reach the minimum played count
         - fretted stretch already wider than the hand allows
         - finger lower bound already above the available fingers
    3. Leaf checks: exact playability, played count, voicing classification
    4. Score: playability + string usage + voicing + context terms
    5. Stable sort by score, optional voicing filter, truncate to limit

The search is exhaustive within the pruned space, so the same input always
yields the same ranked list.

Usage:
    from chordcraft.engine.generator import generate_fingerings
    from chordcraft.instruments import Guitar

    for f in generate_fingerings("Cmaj7", Guitar(), {"limit": 5}):
        print(f.fingering, f.score, f.voicing.value)
"""

import itertools
from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Iterator, List, Optional, Sequence, Set, Tuple, Union

from chordcraft.config import ScoringConfig, get_config
from chordcraft.data.schema import (
    GeneratorOptions, PlayingContext, VoicingType, coerce_generator_options,
)
from chordcraft.fingering import barres as barre_rules
from chordcraft.fingering.fingering import Fingering, StringState
from chordcraft.logging_config import get_logger
from chordcraft.theory.chord import ChordSpec, parse_chord_name
from chordcraft.theory.note import Note, PitchClass

logger = get_logger(__name__)


# =============================================================================
# RESULT TYPE
# =============================================================================

@dataclass(frozen=True)
class ScoredFingering:
    """
    A generated fingering with its ranking information.

    Attributes:
        fingering: The fret pattern
        notes: Sounding notes, string order
        score: Ranking score (higher is better)
        voicing: How completely the chord is voiced
        has_root_in_bass: The lowest sounding note is the chord root
        position: Lowest fretted fret (0 for all-open shapes)
        chord: The chord this fingering was generated for
    """

    fingering: Fingering
    notes: Tuple[Note, ...]
    score: int
    voicing: VoicingType
    has_root_in_bass: bool
    position: int
    chord: Optional[ChordSpec] = field(default=None, compare=False)

    @property
    def tab(self) -> str:
        return self.fingering.to_tab()

    def __str__(self) -> str:
        return f"{self.fingering} ({self.voicing.value}, score {self.score})"


# =============================================================================
# VOICING CLASSIFICATION
# =============================================================================

@dataclass(frozen=True)
class ChordTones:
    """The pitch-class sets a voicing is judged against, resolved once per chord."""

    root: PitchClass
    bass_target: PitchClass
    required: FrozenSet[PitchClass]
    optional: FrozenSet[PitchClass]
    omittable: FrozenSet[PitchClass]

    @classmethod
    def of(cls, chord: ChordSpec) -> "ChordTones":
        return cls(
            root=chord.root,
            bass_target=chord.bass_target(),
            required=frozenset(chord.required_notes()),
            optional=frozenset(chord.optional_notes()),
            omittable=frozenset(chord.root.transpose(i.semitones) for i in chord.omittable_intervals()),
        )

    def classify(self, covered: AbstractSet[PitchClass]) -> VoicingType:
        missing = self.required - covered
        if not missing:
            return VoicingType.FULL if self.optional <= covered else VoicingType.CORE
        if missing <= self.omittable:
            return VoicingType.JAZZY
        return VoicingType.INCOMPLETE

    def is_recognisable(self, covered: AbstractSet[PitchClass]) -> bool:
        """Root plus at least one other required tone."""
        return self.root in covered and len(self.required & covered) >= 2


def classify_voicing(pitches: AbstractSet[PitchClass], chord: ChordSpec) -> VoicingType:
    """
    Classify how completely ``pitches`` voice ``chord``.

    Example (C7 = C E G Bb, 5th omittable):
        {C, E, G, Bb} → FULL
        {C, E, Bb}    → JAZZY
        {C, G, Bb}    → INCOMPLETE (no 3rd)
    """
    return ChordTones.of(chord).classify(pitches)


# =============================================================================
# SEARCH
# =============================================================================

def target_pitches(chord: ChordSpec) -> Set[PitchClass]:
    """Every pitch class a string may sound: chord tones plus the slash bass."""
    targets = set(chord.notes())
    if chord.bass is not None:
        targets.add(chord.bass)
    return targets


def string_options(chord: ChordSpec, instrument, max_fret: int) -> List[List[StringState]]:
    """Candidate states per string: muted first, then chord-tone frets ascending."""
    targets = target_pitches(chord)
    top = min(max_fret, instrument.max_fret)
    options = []
    for open_note in instrument.tuning:
        frets: List[StringState] = [None]
        frets.extend(f for f in range(top + 1) if open_note.pitch.transpose(f) in targets)
        options.append(frets)
    return options


# One choice on one string: (state, pitch class, MIDI number). Muted is (None, None, None).
Candidate = Tuple[StringState, Optional[PitchClass], Optional[int]]

# A finished leaf: frets, pitch classes covered, and the bass as (midi, pitch)
Leaf = Tuple[Tuple[StringState, ...], FrozenSet[PitchClass], Optional[Tuple[int, PitchClass]]]

MUTED_CANDIDATE: Candidate = (None, None, None)


def tagged_options(chord: ChordSpec, instrument, max_fret: int) -> List[List[Candidate]]:
    """string_options with every fret tagged by the pitch class and MIDI number it sounds."""
    tagged = []
    for open_note, frets in zip(instrument.tuning, string_options(chord, instrument, max_fret)):
        choices = [MUTED_CANDIDATE]
        choices.extend((f, open_note.pitch.transpose(f), open_note.midi + f) for f in frets if f is not None)
        tagged.append(choices)
    return tagged


class _SearchStats:
    def __init__(self):
        self.leaves = 0
        self.pruned = 0


def _pruned_search(options: Sequence[Sequence[Candidate]], instrument,
                   stats: _SearchStats) -> Iterator[Leaf]:
    n = len(options)
    min_played = instrument.min_played_strings
    max_stretch = instrument.max_stretch
    max_fingers = instrument.max_fingers

    def descend(index: int, partial: Tuple[StringState, ...], played: int,
                low: Optional[int], high: Optional[int],
                covered: FrozenSet[PitchClass], bass: Optional[Tuple[int, PitchClass]]):
        if index == n:
            stats.leaves += 1
            yield partial, covered, bass
            return
        remaining = n - index - 1
        for state, pitch, midi in options[index]:
            now_played = played + (state is not None)
            if now_played + remaining < min_played:
                stats.pruned += 1
                continue
            new_low, new_high = low, high
            if state:
                new_low = state if low is None else min(low, state)
                new_high = state if high is None else max(high, state)
                if new_high - new_low > max_stretch:
                    stats.pruned += 1
                    continue
            candidate = partial + (state,)
            if state and barre_rules.finger_lower_bound(candidate) > max_fingers:
                stats.pruned += 1
                continue
            if state is None:
                yield from descend(index + 1, candidate, now_played, new_low, new_high, covered, bass)
            else:
                lowest = (midi, pitch) if bass is None or midi < bass[0] else bass
                yield from descend(index + 1, candidate, now_played, new_low, new_high,
                                   covered | {pitch}, lowest)

    yield from descend(0, (), 0, None, None, frozenset(), None)


def _exhaustive_search(options: Sequence[Sequence[Candidate]],
                       stats: _SearchStats) -> Iterator[Leaf]:
    for combo in itertools.product(*options):
        stats.leaves += 1
        sounding = [(midi, pitch) for state, pitch, midi in combo if state is not None]
        bass = min(sounding, key=lambda s: s[0]) if sounding else None
        yield tuple(c[0] for c in combo), frozenset(p for _, p in sounding), bass


def _accept(frets: Tuple[StringState, ...], covered: FrozenSet[PitchClass],
            bass: Optional[Tuple[int, PitchClass]], tones: ChordTones, instrument,
            opts: GeneratorOptions) -> Optional[VoicingType]:
    """Exact leaf checks on the raw frets. Returns the voicing type, or None to reject."""
    played = sum(1 for f in frets if f is not None)
    if played < max(instrument.min_played_strings, 1):
        return None
    fretted = [f for f in frets if f]
    if fretted and max(fretted) - min(fretted) > instrument.max_stretch:
        return None

    voicing = tones.classify(covered)
    if voicing is VoicingType.INCOMPLETE:
        if opts.voicing_filter is not VoicingType.INCOMPLETE or not tones.is_recognisable(covered):
            return None
    if opts.root_in_bass and (bass is None or bass[1] != tones.bass_target):
        return None

    if barre_rules.count_fingers(frets) > instrument.max_fingers:
        return None
    return voicing


def search_fingerings(chord: Union[str, ChordSpec], instrument,
                      options: Union[GeneratorOptions, dict, None] = None,
                      prune: bool = True) -> List[Tuple[Fingering, VoicingType]]:
    """
    Every valid (fingering, voicing) pair, unranked, in search order.

    Leaves carry the pitch classes they cover and their lowest note, so
    rejected leaves never build Notes or a Fingering.

    ``prune=False`` walks the full cartesian product of string options and
    applies only the leaf checks. It returns the same set and exists for
    verifying the pruned search.
    """
    spec = parse_chord_name(chord) if isinstance(chord, str) else chord
    opts = coerce_generator_options(options)
    tones = ChordTones.of(spec)
    options_per_string = tagged_options(spec, instrument, opts.max_fret)

    stats = _SearchStats()
    leaves = (_pruned_search(options_per_string, instrument, stats) if prune
              else _exhaustive_search(options_per_string, stats))

    seen: Set[Tuple[StringState, ...]] = set()
    found: List[Tuple[Fingering, VoicingType]] = []
    for frets, covered, bass in leaves:
        if frets in seen:
            continue
        seen.add(frets)
        voicing = _accept(frets, covered, bass, tones, instrument, opts)
        if voicing is not None:
            found.append((Fingering(frets), voicing))

    logger.debug(
        "Search %s on %s: %d leaves, %d pruned branches, %d valid fingerings",
        spec, instrument.name, stats.leaves, stats.pruned, len(found),
    )
    return found


# =============================================================================
# SCORING
# =============================================================================

def _low_strings(instrument, count: int = 2) -> List[int]:
    order = sorted(range(instrument.string_count), key=lambda i: instrument.tuning[i].midi)
    return order[:count]


def score_fingering(fingering: Fingering, voicing: VoicingType, chord: ChordSpec,
                    instrument, opts: GeneratorOptions,
                    config: Optional[ScoringConfig] = None) -> int:
    """
    Rank a valid fingering.

    Base terms apply in every context. SOLO then rewards a bass root and
    complete voicings kept low on the neck; BAND rewards compact voicings
    in the middle of the neck that leave the lowest strings to the bass.
    """
    config = config or get_config()
    w = config.generator

    score = fingering.playability_score(instrument, config.playability)
    score += fingering.played_count * w.string_usage_bonus
    score -= fingering.interior_mute_count * w.interior_mute_penalty

    if voicing is VoicingType.FULL:
        score += w.full_voicing_bonus
    elif voicing is VoicingType.CORE:
        score += w.core_voicing_bonus
    elif voicing is VoicingType.INCOMPLETE:
        score -= w.incomplete_voicing_penalty

    bass = fingering.bass_note(instrument)
    bass_on_target = bass is not None and bass.pitch == chord.bass_target()
    root_in_bass = bass is not None and bass.pitch == chord.root
    position = fingering.position

    if opts.playing_context is PlayingContext.SOLO:
        if bass_on_target:
            score += w.solo_root_in_bass_bonus
        if voicing is VoicingType.FULL:
            score += w.solo_full_voicing_bonus
        elif voicing is VoicingType.CORE:
            score += w.solo_core_voicing_bonus
        elif voicing is VoicingType.JAZZY and not root_in_bass:
            score -= w.solo_jazzy_without_root_penalty

        if opts.preferred_position is not None:
            score -= abs(position - opts.preferred_position) * w.position_distance_penalty
        elif position > w.solo_position_threshold:
            score -= (position - w.solo_position_threshold) * w.solo_high_position_penalty
    else:
        if bass_on_target:
            score += w.band_root_in_bass_bonus
        if voicing in (VoicingType.CORE, VoicingType.JAZZY):
            score += w.band_compact_voicing_bonus
        elif voicing is VoicingType.FULL:
            score += w.band_full_voicing_bonus

        # Only meaningful on instruments with a real bass register
        if instrument.string_count >= 5:
            if all(fingering.frets[i] is None for i in _low_strings(instrument)):
                score += w.band_avoid_low_strings_bonus

        if opts.preferred_position is not None:
            score -= abs(position - opts.preferred_position) * w.position_distance_penalty
        elif position < w.band_mid_neck_min:
            score -= (w.band_mid_neck_min - position) * w.band_position_penalty
        elif position > w.band_mid_neck_max:
            score -= (position - w.band_mid_neck_max) * w.band_position_penalty

    return max(0, score)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def generate_fingerings(
    chord: Union[str, ChordSpec],
    instrument,
    options: Union[GeneratorOptions, dict, None] = None,
    config: Optional[ScoringConfig] = None,
) -> List[ScoredFingering]:
    """
    Generate ranked fingerings for a chord.

    Args:
        chord: Chord name ("Cmaj7", "G/B") or a parsed ChordSpec
        instrument: Any Instrument (frets are relative to a capo, if any)
        options: GeneratorOptions or an equivalent dict
        config: Scoring weights (defaults to the active config)

    Returns:
        Up to ``options.limit`` fingerings, best first. Empty if nothing is
        playable under the constraints.

    Raises:
        ParseError: If the chord name cannot be parsed
    """
    spec = parse_chord_name(chord) if isinstance(chord, str) else chord
    opts = coerce_generator_options(options)
    config = config or get_config()

    scored: List[ScoredFingering] = []
    for fingering, voicing in search_fingerings(spec, instrument, opts):
        bass = fingering.bass_note(instrument)
        scored.append(ScoredFingering(
            fingering=fingering,
            notes=tuple(fingering.notes(instrument)),
            score=score_fingering(fingering, voicing, spec, instrument, opts, config),
            voicing=voicing,
            has_root_in_bass=bass is not None and bass.pitch == spec.root,
            position=fingering.position,
            chord=spec,
        ))

    scored.sort(key=lambda s: s.score, reverse=True)
    if opts.voicing_filter is not None:
        scored = [s for s in scored if s.voicing is opts.voicing_filter]
    return scored[:opts.limit]


# =============================================================================
# DISPLAY
# =============================================================================

def format_fingering_diagram(scored: Union[ScoredFingering, Fingering], instrument) -> str:
    """
    Render a fingering as a text fretboard, highest string on top. A
    ScoredFingering also gets its ranking details underneath.

    Example (C on guitar):
        e |-0-
        B |-1-
        G |-0-
        D |-2-
        A |-3-
        E |-x-
        Score: 165  Position: 1  Voicing: full
        Root in bass: yes
        Notes: C3 E3 G3 C4 E4
    """
    fingering = scored.fingering if isinstance(scored, ScoredFingering) else scored
    names = instrument.string_names
    width = max(len(name) for name in names) if names else 1
    cells = ["x" if f is None else str(f) for f in fingering.frets]
    cell_width = max(len(c) for c in cells) if cells else 1

    lines = []
    for index in reversed(range(len(cells))):
        name = names[index] if index < len(names) else "?"
        lines.append(f"{name:<{width}} |-{cells[index]:-<{cell_width}}-")

    if isinstance(scored, ScoredFingering):
        lines.append(f"Score: {scored.score}  Position: {scored.position}  "
                     f"Voicing: {scored.voicing.value}")
        lines.append(f"Root in bass: {'yes' if scored.has_root_in_bass else 'no'}")
        lines.append("Notes: " + " ".join(str(n) for n in scored.notes))
    return "\n".join(lines)
