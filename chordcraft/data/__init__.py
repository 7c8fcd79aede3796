"""
Data Subpackage

    - schema.py: option models, output models and the shared enums
"""

from chordcraft.data.schema import (
    ChordMatchOut, FingeringOut, GeneratorOptions, InstrumentInfo, PlayingContext,
    ProgressionOptions, ProgressionOut, TransitionOut, VoicingType,
)
