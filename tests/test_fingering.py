"""
Tests for fingerings: tab notation, barres, finger counting, playability, pitch.

Run with: pytest tests/test_fingering.py -v
"""

import pytest

from chordcraft.fingering import Barre, Fingering, decode, detect_barres, encode, find_matching_shape
from chordcraft.fingering.barres import FULL, MINI, count_fingers, finger_lower_bound, full_barre
from chordcraft.theory import Note, PitchClass as P


class TestTabNotation:
    """Test the tab codec."""

    def test_decode_basic(self):
        """Test muted, open and fretted tokens."""
        assert decode("x32010").frets == (None, 3, 2, 0, 1, 0)

    def test_separators_ignored(self):
        """Test that dashes and spaces do not matter."""
        assert decode("x-3-2-0-1-0") == decode("x32010")
        assert decode("X 3 2 0 1 0") == decode("x32010")

    def test_two_digit_frets(self):
        """Test parenthesised frets and their encoding."""
        fingering = decode("(10)(12)(12)x")
        assert fingering.frets == (10, 12, 12, None)
        assert encode(fingering) == "(10)(12)(12)x"

    def test_round_trip(self):
        """Test that encode inverts decode."""
        for tab in ["x32010", "133211", "xx0232", "x(10)(12)(12)(12)x", "0003"]:
            assert encode(decode(tab)) == tab

    @pytest.mark.parametrize("frets", [
        (None, 10, 12, 12, 11, None),
        (15, 17, 17, 16, 15, 15),
        (9, 10, 0, None),
        (None,) * 6,
        (0, 0, 0, 3),
        (),
    ])
    def test_decode_inverts_encode(self, frets):
        """Test that decoding an encoded fingering gives it back, two-digit frets included."""
        fingering = Fingering(frets)
        assert decode(encode(fingering)) == fingering

    def test_string_count_truncates(self):
        """Test reading only the first N strings."""
        assert decode("x32010", string_count=3).frets == (None, 3, 2)

    def test_partial_and_junk_never_raise(self):
        """Test lenient decoding of half-typed input."""
        assert decode("x3201").frets == (None, 3, 2, 0, 1)
        assert decode("zz").frets == ()
        assert decode("").frets == ()

    def test_parse_classmethod(self):
        """Test Fingering.parse delegates to the codec."""
        assert Fingering.parse("xx0232") == Fingering.of([None, None, 0, 2, 3, 2])

    def test_negative_fret_rejected(self):
        """Test constructor validation."""
        with pytest.raises(ValueError):
            Fingering((0, -1))


class TestBarres:
    """Test barre detection and finger counting."""

    def test_full_and_mini_barre(self):
        """Test an E-shape barre chord."""
        assert detect_barres((1, 3, 3, 2, 1, 1)) == [
            Barre(1, 0, 5, FULL),
            Barre(3, 1, 2, MINI),
        ]

    def test_open_strings_never_barred(self):
        """Test that 022000 has only a mini barre."""
        assert detect_barres((0, 2, 2, 0, 0, 0)) == [Barre(2, 1, 2, MINI)]

    def test_open_string_breaks_full_barre(self):
        """Test that an open string between the outer frets rules out a full barre."""
        assert full_barre((1, 0, 3, 2, 1, 1)) is None
        assert detect_barres((1, 0, 3, 2, 1, 1)) == [Barre(1, 4, 5, MINI)]
        assert decode("103211").min_fingers_required == 4

    def test_muted_string_keeps_full_barre(self):
        """Test that a muted string inside the barre still leaves it full."""
        assert full_barre((3, None, 3, 5, 3, 3)) == Barre(3, 0, 5, FULL)

    def test_no_barre(self):
        """Test an open C."""
        assert detect_barres((None, 3, 2, 0, 1, 0)) == []

    def test_barre_properties(self):
        """Test span and coverage."""
        barre = Barre(5, 1, 4, MINI)
        assert barre.span == 4
        assert barre.covers(2) and not barre.covers(5)

    @pytest.mark.parametrize("tab,fingers", [
        ("x32010", 3),
        ("133211", 3),
        ("022000", 1),
        ("x02210", 2),
        ("x35553", 2),
        ("xx0232", 3),
        ("000000", 0),
        ("103211", 4),
    ])
    def test_count_fingers(self, tab, fingers):
        """Test barre-aware finger counts."""
        assert count_fingers(decode(tab).frets) == fingers

    @pytest.mark.parametrize("tab", ["x32010", "133211", "x35553", "3x0003", "1x3421", "103211",
                                     "x(10)(12)(12)(11)x"])
    def test_lower_bound_never_exceeds_final_count(self, tab):
        """Test that every prefix's bound stays at or below the completed count."""
        frets = decode(tab).frets
        final = count_fingers(frets)
        previous = 0
        for length in range(1, len(frets) + 1):
            bound = finger_lower_bound(frets[:length])
            assert previous <= bound <= final
            previous = bound


class TestFingeringStructure:
    """Test derived structural properties."""

    def test_open_c(self):
        """Test counts, span and position of an open C."""
        c = decode("x32010")
        assert c.played_count == 5
        assert c.muted_count == 1
        assert c.fret_span == 2
        assert c.min_fret == 1
        assert c.max_fret == 3
        assert c.position == 1
        assert c.min_fingers_required == 3
        assert c.fretted_positions == [(1, 3), (2, 2), (4, 1)]

    def test_all_open_position_is_zero(self):
        """Test that an all-open shape sits at position 0."""
        assert decode("000000").position == 0
        assert decode("000000").fret_span == 0

    def test_interior_counts(self):
        """Test muted and open strings trapped inside the shape."""
        assert decode("x3x010").interior_mute_count == 1
        assert decode("x32010").interior_mute_count == 0
        assert decode("x32010").interior_open_count == 1
        assert decode("133211").interior_open_count == 0

    def test_shifted(self):
        """Test moving a shape up the neck."""
        assert decode("x32010").shifted(2).to_tab() == "x54232"

    def test_dunder_helpers(self):
        """Test str, len and iteration."""
        c = decode("x32010")
        assert str(c) == "x32010"
        assert len(c) == 6
        assert list(c) == [None, 3, 2, 0, 1, 0]


class TestPlayability:
    """Test hand-shape checks and the playability score."""

    def test_open_c_score(self, guitar):
        """Test the open C: stretch 2 and one open string between fretted ones."""
        assert decode("x32010").playability_score(guitar) == 65

    def test_barre_f_score(self, guitar):
        """Test the F barre: stretch 2, three fingers, no open strings."""
        assert decode("133211").playability_score(guitar) == 80

    def test_unplayable_scores_zero(self, guitar):
        """Test that a stretch beyond the hand scores zero."""
        wide = decode("1x5xx9")
        assert not wide.is_playable(guitar)
        assert wide.playability_score(guitar) == 0

    def test_too_many_fingers(self, guitar):
        """Test the finger limit: five distinct frets need five fingers."""
        shape = decode("1x2345")
        assert shape.fret_span == 4
        assert shape.min_fingers_required == 5
        assert not shape.is_playable(guitar)

    def test_open_position(self, guitar):
        """Test the open-position rule."""
        assert decode("x32010").is_open_position(guitar)
        assert not decode("133211").is_open_position(guitar)
        assert not decode("x7x090").is_open_position(guitar)

    def test_high_barre(self):
        """Test detection of a long run above the lowest fret."""
        assert decode("x35553").has_high_barre(3)
        assert not decode("133211").has_high_barre(3)


class TestPitch:
    """Test sounding notes and the bass note."""

    def test_open_c_notes(self, guitar):
        """Test notes, pitch classes and bass of an open C."""
        c = decode("x32010")
        assert c.notes(guitar) == [Note.parse(n) for n in ("C3", "E3", "G3", "C4", "E4")]
        assert c.pitch_classes(guitar) == [P.C, P.E, P.G]
        assert c.bass_note(guitar) == Note.parse("C3")

    def test_ukulele_bass_is_c_string(self, ukulele):
        """Test that re-entrant tuning puts the bass on the C string."""
        assert decode("0003").bass_note(ukulele) == Note.parse("C4")

    def test_ukulele_bass_on_g_string(self, ukulele):
        """Test a lone note on the re-entrant G string is the bass."""
        assert decode("2xxx").bass_note(ukulele) == Note.parse("A4")

    def test_ukulele_bass_is_lowest_pitch(self, ukulele):
        """Test that 0x87 (G4 C5 E5) has the open G as its bass, not the muted C string."""
        fingering = decode("0x87")
        assert [str(n) for n in fingering.notes(ukulele)] == ["G4", "C5", "E5"]
        assert fingering.bass_note(ukulele) == Note.parse("G4")

    def test_all_muted(self, guitar):
        """Test a silent fingering."""
        silent = decode("xxxxxx")
        assert silent.bass_note(guitar) is None
        assert silent.pitch_classes(guitar) == []


class TestShapes:
    """Test standard shape recognition."""

    @pytest.mark.parametrize("tab,expected", [
        ("022100", ("E", 0)),
        ("577655", ("E", 5)),
        ("x35553", ("A", 3)),
        ("x32010", ("C", 0)),
        ("xx0232", ("D", 0)),
    ])
    def test_guitar_shapes(self, tab, expected):
        """Test open and moved CAGED shapes."""
        assert find_matching_shape(decode(tab), "guitar") == expected

    def test_ukulele_shape(self):
        """Test a ukulele shape."""
        assert find_matching_shape(decode("0003"), "ukulele") == ("C", 0)

    def test_no_match(self):
        """Test unknown shapes and instruments without a table."""
        assert find_matching_shape(decode("x3x010"), "guitar") is None
        assert find_matching_shape(decode("0003"), "bass") is None
        assert find_matching_shape(decode("0003"), None) is None
