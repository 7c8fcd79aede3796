"""
Chord Analyzer - fingering → chord names

Works backwards from what a fingering sounds: every distinct pitch class is
tried as a root against every chord quality, and each (root, quality) pair
that explains at least the root plus one deciding tone becomes a candidate.

Candidates are ranked by:
    - completeness (fraction of required tones present), the dominant term
    - root in the bass
    - optional tones present, extra notes the formula does not explain
    - richer formulas, and complete plain triads

Ties go to the spelling the fingering's own notes suggest (flats vs sharps),
then to the first quality in table order.

Usage:
    from chordcraft.engine.analyzer import analyze_fingering
    from chordcraft.instruments import Guitar

    matches = analyze_fingering("x32010", Guitar())
    matches[0].name          # 'C'
    matches[0].confidence    # 100
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from chordcraft.config import ScoringConfig, get_config
from chordcraft.fingering.fingering import Fingering
from chordcraft.logging_config import get_logger
from chordcraft.theory.chord import CHORD_QUALITIES, ChordQuality, ChordSpec
from chordcraft.theory.note import CONVENTIONAL_FLATS, CONVENTIONAL_SHARPS, PitchClass

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChordMatch:
    """
    One interpretation of a fingering.

    Attributes:
        name: Display name ("Am7", "Bb")
        chord: The matched chord
        confidence: Completeness as a percentage (0-100)
        score: Ranking score (higher is better)
        root_in_bass: The lowest sounding note is the root
        missing: Required tones the fingering does not sound
        extra: Sounding pitch classes the chord does not contain
        explanation: One-line human-readable summary
    """

    name: str
    chord: ChordSpec
    confidence: int
    score: int
    root_in_bass: bool
    missing: Tuple[PitchClass, ...] = ()
    extra: Tuple[PitchClass, ...] = ()
    explanation: str = field(default="", compare=False)

    @property
    def completeness(self) -> float:
        return self.confidence / 100.0

    def __str__(self) -> str:
        return f"{self.name} ({self.confidence}%)"


def _majority_prefers_flats(pitches: List[PitchClass]) -> bool:
    """Black keys vote: Db Eb Ab Bb for flats, F# for sharps. Ties go to sharps."""
    flats = sum(1 for p in pitches if p in CONVENTIONAL_FLATS)
    sharps = sum(1 for p in pitches if p in CONVENTIONAL_SHARPS)
    return flats > sharps


def _spelling_penalty(root: PitchClass, prefer_flats: bool) -> int:
    """0 if the root reads naturally under the majority spelling, else 1."""
    if root.is_natural:
        return 0
    if prefer_flats:
        return 0 if root in CONVENTIONAL_FLATS else 1
    return 0 if root in CONVENTIONAL_SHARPS else 1


def _explain(chord: ChordSpec, present: List[PitchClass], missing: List[PitchClass],
             confidence: int, root_in_bass: bool) -> str:
    flats = chord.prefer_flats
    text = " ".join(p.spell(flats) for p in present)
    text += f"; {confidence}% complete"
    if root_in_bass:
        text += " with root in bass"
    if missing:
        text += "; missing " + " ".join(p.spell(flats) for p in missing)
    return text


def _evaluate(root: PitchClass, quality: ChordQuality, pitches: List[PitchClass],
              bass: Optional[PitchClass], prefer_flats: bool,
              config: ScoringConfig) -> Optional[ChordMatch]:
    w = config.analyzer
    chord = ChordSpec(root=root, quality=quality, prefer_flats=prefer_flats)
    required = chord.required_notes()
    optional = chord.optional_notes()
    played = set(pitches)

    present_required = [p for p in required if p in played]
    if len(present_required) < w.min_required_present:
        return None

    missing = [p for p in required if p not in played]
    present_optional = [p for p in optional if p in played]
    extra = [p for p in pitches if p not in required and p not in optional]

    completeness = len(present_required) / len(required)
    confidence = int(completeness * 100)
    root_in_bass = bass == root

    score = int(completeness * w.completeness_scale)
    if root_in_bass:
        score += w.root_in_bass_bonus
    score += len(present_optional) * w.optional_interval_bonus
    score -= len(extra) * w.extra_note_penalty
    score += len(required) * w.required_interval_bonus
    if not missing and quality.key in ("major", "minor"):
        score += w.simple_triad_bonus
    score = max(0, score)

    present = [p for p in required + optional if p in played]
    return ChordMatch(
        name=chord.name(),
        chord=chord,
        confidence=confidence,
        score=score,
        root_in_bass=root_in_bass,
        missing=tuple(missing),
        extra=tuple(extra),
        explanation=_explain(chord, present, missing, confidence, root_in_bass),
    )


def analyze_fingering(
    fingering: Union[str, Fingering],
    instrument,
    config: Optional[ScoringConfig] = None,
) -> List[ChordMatch]:
    """
    Name the chord(s) a fingering plays.

    Args:
        fingering: Tab notation ("x32010") or a Fingering
        instrument: The instrument the fingering is played on

    Returns:
        Matches, best first, one per display name. Empty if no string is
        played or no quality explains the notes.
    """
    if isinstance(fingering, str):
        fingering = Fingering.parse(fingering, instrument.string_count)
    config = config or get_config()

    pitches = fingering.pitch_classes(instrument)
    if not pitches:
        return []

    bass_note = fingering.bass_note(instrument)
    bass = bass_note.pitch if bass_note is not None else None
    prefer_flats = _majority_prefers_flats(pitches)

    ranked = []
    order = 0
    for root in pitches:
        for quality in CHORD_QUALITIES.values():
            match = _evaluate(root, quality, pitches, bass, prefer_flats, config)
            if match is not None:
                ranked.append((-match.score, _spelling_penalty(root, prefer_flats), order, match))
            order += 1
    ranked.sort(key=lambda item: item[:3])

    seen = set()
    matches: List[ChordMatch] = []
    for _, _, _, match in ranked:
        if match.name in seen:
            continue
        seen.add(match.name)
        matches.append(match)

    logger.debug("Analyzed %s: %d candidate chords", fingering, len(matches))
    return matches
