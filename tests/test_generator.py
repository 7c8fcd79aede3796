"""
Tests for the fingering generator (chord name → ranked fingerings).

Run with: pytest tests/test_generator.py -v
"""

import time

import pytest

from chordcraft.data.schema import GeneratorOptions, PlayingContext, VoicingType
from chordcraft.engine.generator import (
    ChordTones, classify_voicing, format_fingering_diagram, generate_fingerings, score_fingering,
    search_fingerings, string_options, tagged_options,
)
from chordcraft.errors import ParseError
from chordcraft.fingering import Fingering
from chordcraft.instruments import Guitar, Ukulele, custom_instrument
from chordcraft.theory import PitchClass as P, parse_chord_name


def tabs(results):
    return [r.fingering.to_tab() for r in results]


class TestVoicingClassification:
    """Test full / core / jazzy / incomplete."""

    def test_dominant_seventh(self):
        """Test C7 with and without its 5th and 3rd."""
        c7 = parse_chord_name("C7")
        assert classify_voicing({P.C, P.E, P.G, P.A_SHARP}, c7) is VoicingType.FULL
        assert classify_voicing({P.C, P.E, P.A_SHARP}, c7) is VoicingType.JAZZY
        assert classify_voicing({P.C, P.G, P.A_SHARP}, c7) is VoicingType.INCOMPLETE

    def test_optional_extension(self):
        """Test C9 with and without the optional 5th."""
        c9 = parse_chord_name("C9")
        assert classify_voicing({P.C, P.E, P.A_SHARP, P.D, P.G}, c9) is VoicingType.FULL
        assert classify_voicing({P.C, P.E, P.A_SHARP, P.D}, c9) is VoicingType.CORE

    def test_triad_cannot_be_jazzy(self):
        """Test that a triad missing its 5th is incomplete."""
        assert classify_voicing({P.C, P.E}, parse_chord_name("C")) is VoicingType.INCOMPLETE


class TestSearch:
    """Test the pruned search against exhaustive enumeration."""

    def test_string_options_are_chord_tones(self, guitar):
        """Test per-string candidates on the low E string for C major."""
        options = string_options(parse_chord_name("C"), guitar, max_fret=12)
        assert options[0] == [None, 0, 3, 8, 12]

    @pytest.mark.parametrize("chord", ["C", "Am7", "G7", "D/F#"])
    @pytest.mark.parametrize("make_instrument", [
        Guitar,
        Ukulele,
        lambda: Guitar().with_capo(2),
    ], ids=["guitar", "ukulele", "guitar-capo2"])
    def test_pruning_finds_exactly_the_exhaustive_set(self, make_instrument, chord):
        """Test that pruning never discards a valid fingering."""
        instrument = make_instrument()
        options = {"max_fret": 5}
        pruned = set(search_fingerings(chord, instrument, options, prune=True))
        exhaustive = set(search_fingerings(chord, instrument, options, prune=False))
        assert pruned == exhaustive
        assert pruned

    def test_pruning_agrees_on_bass_filter(self, ukulele):
        """Test pruned and exhaustive search agree when the root must be lowest."""
        options = {"max_fret": 8, "root_in_bass": True}
        pruned = set(search_fingerings("C", ukulele, options, prune=True))
        assert pruned == set(search_fingerings("C", ukulele, options, prune=False))
        assert all(f.bass_note(ukulele).pitch == P.C for f, _ in pruned)

    def test_tagged_options(self, guitar):
        """Test that each candidate fret carries its pitch class and MIDI number."""
        options = tagged_options(parse_chord_name("C"), guitar, max_fret=12)
        assert options[0] == [(None, None, None), (0, P.E, 40), (3, P.G, 43), (8, P.C, 48), (12, P.E, 52)]
        assert [state for state, _, _ in options[1]] == string_options(parse_chord_name("C"), guitar, 12)[1]

    def test_chord_tones(self):
        """Test the resolved tone sets agree with classify_voicing."""
        c7 = parse_chord_name("C7")
        tones = ChordTones.of(c7)
        assert tones.required == {P.C, P.E, P.G, P.A_SHARP}
        assert tones.omittable == {P.G}
        assert tones.classify(frozenset({P.C, P.E, P.A_SHARP})) is VoicingType.JAZZY
        assert tones.is_recognisable({P.C, P.G})
        assert not tones.is_recognisable({P.E, P.G, P.A_SHARP})
        assert ChordTones.of(parse_chord_name("C/G")).bass_target == P.G

    def test_every_result_is_playable(self, guitar):
        """Test the physical constraints on every valid fingering."""
        for fingering, _ in search_fingerings("Cmaj7", guitar):
            assert fingering.fret_span <= guitar.max_stretch
            assert fingering.min_fingers_required <= guitar.max_fingers
            assert fingering.played_count >= guitar.min_played_strings

    def test_no_duplicates(self, guitar):
        """Test that each fret pattern appears once."""
        found = [f for f, _ in search_fingerings("G", guitar)]
        assert len(found) == len(set(found))


class TestGenerateFingerings:
    """Test ranking and options."""

    def test_open_c_is_found(self, guitar):
        """Test the textbook open C appears in the default results."""
        results = generate_fingerings("C", guitar)
        assert 0 < len(results) <= 10
        assert "x32010" in tabs(results)

    def test_sorted_and_deterministic(self, guitar):
        """Test descending scores and identical repeated output."""
        first = generate_fingerings("Am7", guitar)
        second = generate_fingerings("Am7", guitar)
        assert tabs(first) == tabs(second)
        scores = [r.score for r in first]
        assert scores == sorted(scores, reverse=True)

    def test_limit(self, guitar):
        """Test truncation."""
        assert len(generate_fingerings("G", guitar, {"limit": 3})) <= 3

    @pytest.mark.parametrize("chord", ["C", "G7", "Dm7", "Cmaj9", "E7#9"])
    def test_completeness_invariant(self, guitar, chord):
        """Test that each result voices its chord as its voicing type claims."""
        spec = parse_chord_name(chord)
        required = set(spec.required_notes())
        omittable = {spec.root.transpose(i.semitones) for i in spec.omittable_intervals()}
        for result in generate_fingerings(chord, guitar):
            pitches = set(result.fingering.pitch_classes(guitar))
            assert result.voicing is not VoicingType.INCOMPLETE
            if result.voicing in (VoicingType.FULL, VoicingType.CORE):
                assert required <= pitches
            else:
                assert (required - pitches) <= omittable

    def test_result_fields(self, guitar):
        """Test notes, position and the root-in-bass flag."""
        for result in generate_fingerings("C", guitar):
            fingering = result.fingering
            assert list(result.notes) == fingering.notes(guitar)
            assert result.position == fingering.position
            assert result.has_root_in_bass == (fingering.bass_note(guitar).pitch == P.C)

    def test_root_in_bass_filter(self, guitar):
        """Test that the filter keeps only root-bass voicings."""
        results = generate_fingerings("C", guitar, {"root_in_bass": True})
        assert results
        assert all(r.has_root_in_bass for r in results)

    def test_slash_chord_bass(self, guitar):
        """Test that the bass filter targets the slash note."""
        results = generate_fingerings("C/G", guitar, {"root_in_bass": True})
        assert results
        for result in results:
            assert result.fingering.bass_note(guitar).pitch == P.G

    def test_voicing_filter(self, guitar):
        """Test restricting to core voicings."""
        results = generate_fingerings("C9", guitar, {"voicing_filter": "core"})
        assert results
        assert all(r.voicing is VoicingType.CORE for r in results)

    def test_incomplete_only_on_request(self, guitar):
        """Test incomplete voicings: root plus another required tone, never by default."""
        spec = parse_chord_name("C")
        assert all(r.voicing is not VoicingType.INCOMPLETE for r in generate_fingerings(spec, guitar))
        results = generate_fingerings(spec, guitar, {"voicing_filter": "incomplete"})
        assert results
        for result in results:
            pitches = set(result.fingering.pitch_classes(guitar))
            assert result.voicing is VoicingType.INCOMPLETE
            assert P.C in pitches
            assert len(pitches & {P.C, P.E, P.G}) >= 2

    def test_ukulele_c(self, ukulele):
        """Test the one-finger ukulele C ranks first with the root in the bass."""
        results = generate_fingerings("C", ukulele, {"root_in_bass": True})
        assert results[0].fingering.to_tab() == "0003"
        assert results[0].has_root_in_bass

    def test_ukulele_reentrant_bass(self, ukulele):
        """Test that 0x87 (G4 C5 E5) is reported without the root in the bass."""
        options = {"limit": 200, "max_fret": 8}
        found = {r.fingering.to_tab(): r for r in generate_fingerings("C", ukulele, options)}
        assert "0x87" in found
        assert not found["0x87"].has_root_in_bass

        rooted = generate_fingerings("C", ukulele, dict(options, root_in_bass=True))
        assert "0x87" not in tabs(rooted)
        assert all(r.fingering.bass_note(ukulele).pitch == P.C for r in rooted)

    def test_search_time(self, guitar):
        """Test that a default seventh-chord search on guitar stays interactive."""
        start = time.perf_counter()
        results = generate_fingerings("Cmaj7", guitar)
        assert results
        assert time.perf_counter() - start < 5.0

    def test_capo_equivalence(self, guitar):
        """Test that F with capo 3 fingers exactly like D without one."""
        capoed = guitar.with_capo(3)
        with_capo = generate_fingerings("F", capoed, {"limit": 5})
        plain = generate_fingerings("D", guitar, {"limit": 5})
        assert tabs(with_capo) == tabs(plain)
        assert [capoed.to_absolute(r.fingering) for r in with_capo] == \
               [r.fingering.shifted(3) for r in plain]

    def test_impossible_chord_is_empty(self):
        """Test that an unplayable request returns an empty list."""
        two_strings = custom_instrument("C4 E4")
        assert generate_fingerings("C13", two_strings) == []

    def test_invalid_chord_name(self, guitar):
        """Test that a bad name raises ParseError."""
        with pytest.raises(ParseError):
            generate_fingerings("Cxyz", guitar)


class TestScoring:
    """Test context-dependent scoring terms."""

    def test_solo_prefers_complete_root_voicings(self, guitar):
        """Test that an open G full voicing scores higher solo than in a band."""
        g = parse_chord_name("G")
        shape = Fingering.parse("320003")
        solo = score_fingering(shape, VoicingType.FULL, g, guitar, GeneratorOptions())
        band = score_fingering(shape, VoicingType.FULL, g, guitar,
                               GeneratorOptions(playing_context=PlayingContext.BAND))
        assert solo > band

    def test_band_rewards_leaving_low_strings_free(self, guitar):
        """Test the band bonus for upper-string voicings."""
        g = parse_chord_name("G")
        band = GeneratorOptions(playing_context="band", preferred_position=3)
        upper = score_fingering(Fingering.parse("xx5433"), VoicingType.FULL, g, guitar, band)
        solo = score_fingering(Fingering.parse("xx5433"), VoicingType.FULL, g, guitar,
                               GeneratorOptions(preferred_position=3))
        # Band loses 25 on root/full bonuses but gains 10 for the free low strings
        assert solo - upper == 30 + 20 - 5 - 5 - 10

    def test_preferred_position(self, guitar):
        """Test the distance penalty from the preferred position."""
        a = parse_chord_name("A")
        shape = Fingering.parse("577655")
        near = score_fingering(shape, VoicingType.FULL, a, guitar, GeneratorOptions(preferred_position=5))
        far = score_fingering(shape, VoicingType.FULL, a, guitar, GeneratorOptions(preferred_position=0))
        assert near - far == 15

    def test_score_never_negative(self, guitar):
        """Test the lower clamp."""
        c = parse_chord_name("C")
        options = GeneratorOptions(preferred_position=24)
        assert score_fingering(Fingering.parse("x3x0x0"), VoicingType.INCOMPLETE, c, guitar, options) >= 0


class TestDiagram:
    """Test the text diagram."""

    def test_scored_diagram(self, guitar):
        """Test string lines high to low plus ranking details."""
        result = next(r for r in generate_fingerings("C", guitar) if r.fingering.to_tab() == "x32010")
        lines = format_fingering_diagram(result, guitar).splitlines()
        assert lines[0] == "e |-0-"
        assert lines[5] == "E |-x-"
        assert "Voicing: full" in lines[6]
        assert lines[7] == "Root in bass: yes"
        assert lines[8] == "Notes: C3 E3 G3 C4 E4"

    def test_bare_fingering_diagram(self, guitar):
        """Test a plain Fingering renders only the strings."""
        lines = format_fingering_diagram(Fingering.parse("x(10)(12)(12)(12)x"), guitar).splitlines()
        assert len(lines) == 6
        assert lines[1] == "B |-12-"
        assert lines[4] == "A |-10-"
        assert lines[0] == "e |-x--"
