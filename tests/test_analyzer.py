"""
Tests for the chord analyzer (fingering → chord names).

Run with: pytest tests/test_analyzer.py -v
"""

from chordcraft.engine.analyzer import analyze_fingering
from chordcraft.fingering import Fingering
from chordcraft.theory import PitchClass as P


def names(matches):
    return [m.name for m in matches]


class TestAnalyzeFingering:
    """Test naming common shapes."""

    def test_open_c(self, guitar):
        """Test that x32010 is C, complete, with the root in the bass."""
        matches = analyze_fingering("x32010", guitar)
        best = matches[0]
        assert best.name == "C"
        assert best.confidence == 100
        assert best.root_in_bass
        assert best.missing == ()
        assert best.explanation == "C E G; 100% complete with root in bass"

    def test_accepts_fingering_object(self, guitar):
        """Test that a Fingering works as well as tab text."""
        assert names(analyze_fingering(Fingering.parse("x02210"), guitar))[0] == "Am"

    def test_ambiguous_shape(self, guitar):
        """Test that x-5-7-7-5-x reads as both Dsus2 and Asus4."""
        matches = analyze_fingering("x-5-7-7-5-x", guitar)
        by_name = {m.name: m for m in matches}
        assert by_name["Dsus2"].confidence == 100
        assert by_name["Asus4"].confidence == 100
        # The D in the bass decides the order
        assert matches[0].name == "Dsus2"

    def test_partial_triad(self, guitar):
        """Test a power-chord-like dyad: C and G only."""
        matches = analyze_fingering("x3x0xx", guitar)
        best = matches[0]
        assert best.name == "C"
        assert best.confidence == 66
        assert best.missing == (P.E,)
        assert "missing E" in best.explanation

    def test_flat_spelling(self, guitar):
        """Test that a Bb barre is spelled with a flat."""
        assert analyze_fingering("x13331", guitar)[0].name == "Bb"

    def test_seventh_chord(self, guitar):
        """Test an open G7."""
        best = analyze_fingering("320001", guitar)[0]
        assert best.name == "G7"
        assert best.confidence == 100

    def test_names_are_unique(self, guitar):
        """Test deduplication by display name."""
        result = names(analyze_fingering("x02010", guitar))
        assert len(result) == len(set(result))

    def test_sorted_by_score(self, guitar):
        """Test descending scores."""
        scores = [m.score for m in analyze_fingering("xx0212", guitar)]
        assert scores == sorted(scores, reverse=True)

    def test_every_match_has_root_plus_one_tone(self, guitar):
        """Test the minimum evidence for a candidate."""
        for match in analyze_fingering("x02210", guitar):
            assert match.confidence > 0
            assert len(match.chord.required_notes()) - len(match.missing) >= 2

    def test_silent_fingering(self, guitar):
        """Test that nothing played means no matches."""
        assert analyze_fingering("xxxxxx", guitar) == []

    def test_single_note(self, guitar):
        """Test that one pitch class cannot name a chord."""
        assert analyze_fingering("x3xxxx", guitar) == []

    def test_ukulele(self, ukulele):
        """Test the ukulele C shape."""
        assert analyze_fingering("0003", ukulele)[0].name == "C"

    def test_ukulele_reentrant_bass(self, ukulele):
        """Test that 0x87 is a C with the open G, not the C string, in the bass."""
        matches = analyze_fingering("0x87", ukulele)
        c = next(m for m in matches if m.name == "C")
        assert not c.root_in_bass
        assert c.confidence == 100

    def test_capo_changes_sounding_chord(self, guitar):
        """Test that a C shape behind capo 2 sounds as D."""
        assert analyze_fingering("x32010", guitar.with_capo(2))[0].name == "D"
