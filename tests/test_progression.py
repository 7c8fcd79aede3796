"""
Tests for the progression optimizer.

Run with: pytest tests/test_progression.py -v
"""

import pytest

from chordcraft.data.schema import PlayingContext
from chordcraft.engine import progression
from chordcraft.engine.progression import (
    count_movements, generate_progression, transition_matrices, transition_score,
)
from chordcraft.errors import ParseError
from chordcraft.fingering import Fingering
from chordcraft.theory import parse_chord_name


def shape(tab):
    return Fingering.parse(tab)


class TestMovements:
    """Test finger movement and anchor counting."""

    def test_same_shape(self):
        """Test that an unchanged shape is all anchors."""
        assert count_movements(shape("x32010"), shape("x32010")) == (0, 5)

    def test_c_to_am(self):
        """Test the classic two-finger change."""
        assert count_movements(shape("x32010"), shape("x02210")) == (2, 3)

    def test_sliding_barre_counts_once(self):
        """Test that a barre moving up the neck is one movement, not six."""
        assert count_movements(shape("133211"), shape("355433")) == (3, 0)

    def test_held_barre_is_one_anchor(self):
        """Test that a barre at the same fret counts as a single anchor."""
        assert count_movements(shape("133211"), shape("133111")) == (1, 2)

    def test_muted_in_both_is_ignored(self):
        """Test that a string muted in both shapes neither moves nor anchors."""
        movements, anchors = count_movements(shape("xx0232"), shape("xx0212"))
        assert (movements, anchors) == (1, 3)


class TestTransitionScore:
    """Test the transition formula."""

    def test_identical_open_shape(self, guitar, scored):
        """Test the maximum-smoothness case in both contexts."""
        c = scored("x32010")
        assert transition_score(c, c, guitar) == 335
        assert transition_score(c, c, guitar, PlayingContext.BAND) == 375

    def test_distance_penalised(self, guitar, scored):
        """Test that a far jump scores lower than a near one."""
        c = scored("x32010")
        near = transition_score(c, scored("x02210"), guitar)
        far = transition_score(c, scored("x(12)(14)(14)(13)x"), guitar)
        assert near > far

    def test_matrices(self, guitar, scored):
        """Test matrix shape and agreement with the pairwise score."""
        left = [scored("x32010"), scored("x35553")]
        right = [scored("x02210"), scored("577555"), scored("x02210")]
        from chordcraft.config import get_config
        scores, distances = transition_matrices(left, right, guitar, PlayingContext.SOLO,
                                                get_config().transition)
        assert scores.shape == (2, 3)
        assert distances[1, 1] == 2
        assert scores[0, 0] == transition_score(left[0], right[0], guitar)
        assert scores[0, 0] == scores[0, 2]


class TestGenerateProgression:
    """Test assembling fingering sequences."""

    def test_pop_progression(self, guitar):
        """Test C-Am-F-G: shape, totals and ordering."""
        chords = ["C", "Am", "F", "G"]
        sequences = generate_progression(chords, guitar)
        assert 0 < len(sequences) <= 3
        for sequence in sequences:
            assert sequence.chords == tuple(chords)
            assert len(sequence.fingerings) == 4
            assert len(sequence.transitions) == 3
            assert sequence.total_score == sum(t.score for t in sequence.transitions)
            assert sequence.avg_transition_score == pytest.approx(sequence.total_score / 3)
            for transition in sequence.transitions:
                assert transition.relaxed or transition.position_distance <= 3
        totals = [s.total_score for s in sequences]
        assert totals == sorted(totals, reverse=True)

    def test_fingerings_voice_their_chords(self, guitar):
        """Test that each chosen fingering contains its chord's root."""
        sequence = generate_progression(["G", "D", "Em"], guitar, {"limit": 1})[0]
        for name, fingering in zip(sequence.chords, sequence.fingerings):
            root = parse_chord_name(name).root
            assert root in fingering.fingering.pitch_classes(guitar)

    def test_transitions_link_the_path(self, guitar):
        """Test that each transition starts where the previous one ended."""
        sequence = generate_progression(["C", "G"], guitar, {"limit": 1})[0]
        transition = sequence.transitions[0]
        assert transition.from_chord == "C"
        assert transition.to_chord == "G"
        assert transition.from_fingering == sequence.fingerings[0]
        assert transition.to_fingering == sequence.fingerings[1]

    def test_single_chord(self, guitar):
        """Test that one chord yields sequences with no transitions."""
        sequences = generate_progression(["C"], guitar, {"limit": 2})
        assert len(sequences) == 2
        for sequence in sequences:
            assert sequence.transitions == ()
            assert sequence.total_score == 0
            assert sequence.avg_transition_score == 0.0

    def test_empty_input(self, guitar):
        """Test that no chords means no sequences."""
        assert generate_progression([], guitar) == []

    def test_accepts_chord_specs(self, guitar):
        """Test parsed chords are accepted alongside names."""
        sequences = generate_progression([parse_chord_name("A"), "D"], guitar, {"limit": 1})
        assert sequences[0].chords == ("A", "D")

    def test_invalid_chord(self, guitar):
        """Test that a bad name anywhere raises ParseError."""
        with pytest.raises(ParseError):
            generate_progression(["C", "Hmaj7"], guitar)


class TestRelaxation:
    """Test the distance limit with stubbed candidates."""

    @pytest.fixture
    def stub_candidates(self, monkeypatch, scored):
        table = {
            "C": [scored("x32010")],
            "F": [scored("8(10)(10)988", score=200), scored("577655", score=150)],
        }

        def fake_generate(chord, instrument, options=None, config=None):
            return table.get(chord.name(), [])

        monkeypatch.setattr(progression, "generate_fingerings", fake_generate)
        return table

    def test_relaxes_to_nearest_when_nothing_fits(self, guitar, stub_candidates):
        """Test that the smallest overshoot wins and is flagged."""
        sequence = generate_progression(["C", "F"], guitar, {"max_fret_distance": 3})[0]
        assert sequence.fingerings[1].fingering.to_tab() == "577655"
        assert sequence.relaxed
        assert sequence.transitions[0].relaxed
        assert sequence.transitions[0].position_distance == 4

    def test_within_limit_is_not_relaxed(self, guitar, stub_candidates):
        """Test a normal step when a candidate fits."""
        sequence = generate_progression(["C", "F"], guitar, {"max_fret_distance": 5})[0]
        assert sequence.fingerings[1].fingering.to_tab() == "577655"
        assert not sequence.relaxed

    def test_chord_without_candidates(self, guitar, stub_candidates):
        """Test that an unplayable chord empties the result."""
        assert generate_progression(["C", "G"], guitar) == []
