"""
Command Line Interface for ChordCraft
=====================================

Usage Examples:
    # Fingerings for a chord
    chordcraft find Cmaj7
    chordcraft find Am7 --instrument ukulele --limit 3

    # Band voicings near the 5th fret
    chordcraft find G7 --context band --position 5

    # With a capo: shows the relative shape you finger
    chordcraft find F --capo 3

    # Name a fingering
    chordcraft name x32010
    chordcraft name 577655 --json

    # Smooth fingerings for a progression
    chordcraft progression C Am F G --max-distance 2

    # Custom tuning / known instruments
    chordcraft find D --tuning "D2 A2 D3 G3 A3 D4"
    chordcraft instruments
"""

import argparse
import json
import sys
from typing import List, Optional

from pydantic import ValidationError

from chordcraft.app import api
from chordcraft.data.schema import (
    ChordMatchOut, FingeringOut, GeneratorOptions, InstrumentInfo, ProgressionOptions,
    ProgressionOut,
)
from chordcraft.engine.generator import format_fingering_diagram
from chordcraft.errors import ChordCraftError
from chordcraft.fingering.fingering import Fingering
from chordcraft.fingering.shapes import find_matching_shape
from chordcraft.instruments.presets import get_instrument, list_instruments
from chordcraft.logging_config import setup_logging
from chordcraft.theory.chord import parse_chord_name


# =============================================================================
# PART 1: ARGUMENT PARSER SETUP
# =============================================================================

def create_argument_parser() -> argparse.ArgumentParser:
    """Build the parser: one subcommand per operation, shared instrument options."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-I", "--instrument",
        default="guitar",
        help="Instrument id (default: guitar). See 'chordcraft instruments'"
    )
    common.add_argument(
        "--tuning",
        help='Custom tuning, low string first, e.g. "D2 A2 D3 G3 B3 E4" or "DADGAD"'
    )
    common.add_argument(
        "--json",
        action="store_true",
        help="Output result as JSON (useful for scripting)"
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show search details (debug logging on stderr)"
    )

    parser = argparse.ArgumentParser(
        prog="chordcraft",
        description="🎸 ChordCraft - chord fingerings for fretted instruments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # ─────────────────────────────────────────────────────────────────────────
    # find: chord name → fingerings
    # ─────────────────────────────────────────────────────────────────────────
    find = subparsers.add_parser("find", parents=[common], help="Fingerings for a chord name")
    find.add_argument("chord", help="Chord name, e.g. Cmaj7, F#m7b5, G/B")
    find.add_argument("-n", "--limit", type=int, default=10, help="Number of fingerings (default: 10)")
    find.add_argument("-p", "--position", type=int, default=None, help="Preferred fret position")
    find.add_argument("--voicing", choices=["full", "core", "jazzy", "incomplete"],
                      help="Only show this voicing type")
    find.add_argument("--context", choices=["solo", "band"], default="solo",
                      help="Playing context (default: solo)")
    find.add_argument("--root-in-bass", action="store_true", help="Only voicings with the root lowest")
    find.add_argument("--max-fret", type=int, default=12, help="Highest fret to search (default: 12)")
    find.add_argument("--capo", type=int, default=0, help="Capo fret (default: none)")

    # ─────────────────────────────────────────────────────────────────────────
    # name: fingering → chord names
    # ─────────────────────────────────────────────────────────────────────────
    name = subparsers.add_parser("name", parents=[common], help="Name the chord a fingering plays")
    name.add_argument("tab", help="Tab notation, e.g. x32010 or x-5-7-7-5-x or (10)(12)(12)")
    name.add_argument("-n", "--limit", type=int, default=5, help="Number of candidates (default: 5)")
    name.add_argument("--capo", type=int, default=0, help="Capo fret (default: none)")

    # ─────────────────────────────────────────────────────────────────────────
    # progression: chord names → fingering sequences
    # ─────────────────────────────────────────────────────────────────────────
    prog = subparsers.add_parser("progression", parents=[common],
                                 help="Smooth fingerings for a chord sequence")
    prog.add_argument("chords", nargs="+", help="Chord names, e.g. C Am F G")
    prog.add_argument("-n", "--limit", type=int, default=3, help="Alternative sequences (default: 3)")
    prog.add_argument("-d", "--max-distance", type=int, default=3,
                      help="Largest position jump between chords (default: 3)")
    prog.add_argument("--context", choices=["solo", "band"], default="solo",
                      help="Playing context (default: solo)")
    prog.add_argument("--capo", type=int, default=0, help="Capo fret (default: none)")

    subparsers.add_parser("instruments", parents=[common], help="List known instruments")
    return parser


# =============================================================================
# PART 2: OUTPUT FORMATTING FUNCTIONS
# =============================================================================

def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def format_shape(fingering: Fingering, instrument_id: Optional[str]) -> Optional[str]:
    """'E' for an open E shape, 'E@5' for the same shape moved to fret 5."""
    match = find_matching_shape(fingering, instrument_id)
    if match is None:
        return None
    shape, base = match
    return shape if base == 0 else f"{shape}@{base}"


def run_find(args, instrument) -> None:
    options = GeneratorOptions(
        limit=args.limit,
        preferred_position=args.position,
        voicing_filter=args.voicing,
        root_in_bass=args.root_in_bass,
        max_fret=args.max_fret,
        playing_context=args.context,
        capo=args.capo,
    )
    results = api.find_fingerings(args.chord, instrument, options)
    shape_chord = parse_chord_name(args.chord).transpose(-args.capo).name() if args.capo else None

    if args.json:
        print_json({
            "chord": args.chord,
            "instrument": instrument.name,
            "capo": args.capo,
            "shape_chord": shape_chord,
            "fingerings": [
                FingeringOut.from_scored(
                    r, capo=args.capo,
                    shape=format_shape(r.fingering, instrument.instrument_id),
                ).model_dump(mode="json")
                for r in results
            ],
        })
        return

    print(f"🎸 {args.chord} on {instrument.name}")
    if shape_chord:
        print(f"   Capo {args.capo}: play {shape_chord} shapes")
    print("─" * 40)
    if not results:
        print("No playable fingerings found.")
        return

    displayed = api.resolve_instrument(instrument, capo=args.capo)
    for rank, result in enumerate(results, start=1):
        shape = format_shape(result.fingering, instrument.instrument_id)
        header = f"#{rank}  {result.fingering}"
        if shape:
            header += f"   ({shape} shape)"
        if args.capo:
            header += f"   absolute: {displayed.to_absolute(result.fingering)}"
        print(header)
        print(format_fingering_diagram(result, displayed))
        print()


def run_name(args, instrument) -> None:
    resolved = api.resolve_instrument(instrument, capo=args.capo)
    fingering = Fingering.parse(args.tab, resolved.string_count)
    matches = api.analyze_chord(fingering, instrument, capo=args.capo)[:args.limit]
    shape = format_shape(fingering, instrument.instrument_id)

    if args.json:
        print_json({
            "tab": fingering.to_tab(),
            "instrument": instrument.name,
            "capo": args.capo,
            "shape": shape,
            "notes": [str(n) for n in fingering.notes(resolved)],
            "matches": [ChordMatchOut.from_match(m).model_dump(mode="json") for m in matches],
        })
        return

    print(f"🎸 {fingering.to_tab()} on {resolved.name}")
    print(f"   Notes: {' '.join(str(n) for n in fingering.notes(resolved)) or '(none)'}")
    if shape:
        print(f"   Shape: {shape}")
    print("─" * 40)
    if not matches:
        print("No chord matches these notes.")
        return
    for match in matches:
        print(f"  {match.name:<10} {match.confidence:>3}%   {match.explanation}")


def run_progression(args, instrument) -> None:
    options = ProgressionOptions(
        limit=args.limit,
        max_fret_distance=args.max_distance,
        generator_options=GeneratorOptions(playing_context=args.context),
        capo=args.capo,
    )
    sequences = api.generate_progression(args.chords, instrument, options)

    if args.json:
        print_json({
            "chords": args.chords,
            "instrument": instrument.name,
            "capo": args.capo,
            "sequences": [ProgressionOut.from_sequence(s, capo=args.capo).model_dump(mode="json")
                          for s in sequences],
        })
        return

    print(f"🎸 {' → '.join(args.chords)} on {instrument.name}")
    print("─" * 40)
    if not sequences:
        print("No playable progression found.")
        return
    for rank, sequence in enumerate(sequences, start=1):
        flag = "  (some jumps exceed the distance limit)" if sequence.relaxed else ""
        print(f"#{rank}  total {sequence.total_score}, "
              f"avg {sequence.avg_transition_score:.1f}{flag}")
        for chord, fingering in zip(sequence.chords, sequence.fingerings):
            print(f"    {chord:<8} {fingering.fingering}")
        print()


def run_instruments(args) -> None:
    infos = [InstrumentInfo.from_instrument(get_instrument(i)) for i in list_instruments()]
    if args.json:
        print_json([info.model_dump(mode="json") for info in infos])
        return
    for info in infos:
        print(f"  {info.id:<18} {info.name:<22} {' '.join(info.tuning)}")


# =============================================================================
# PART 3: MAIN ENTRY POINT
# =============================================================================

def report_error(error: Exception, as_json: bool) -> None:
    if as_json:
        print_json({"error": str(error), "type": type(error).__name__})
    else:
        print(f"❌ {error}", file=sys.stderr)


def main(argv: Optional[List[str]] = None):
    """Parse arguments and dispatch to the subcommand. Exits 1 on any error."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging("DEBUG" if args.verbose else None)

    try:
        if args.command == "instruments":
            run_instruments(args)
            return
        instrument = api.resolve_instrument(args.instrument, tuning=args.tuning)
        if args.command == "find":
            run_find(args, instrument)
        elif args.command == "name":
            run_name(args, instrument)
        elif args.command == "progression":
            run_progression(args, instrument)
    except (ChordCraftError, ValidationError) as e:
        report_error(e, args.json)
        sys.exit(1)


if __name__ == "__main__":
    main()
