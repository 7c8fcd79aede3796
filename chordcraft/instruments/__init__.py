"""
Instruments Subpackage

    - instrument.py: the Instrument contract, Guitar, Ukulele,
                     ConfigurableInstrument and the CapoedInstrument decorator
    - presets.py: instrument identifiers, custom tunings

Usage:
    from chordcraft.instruments import get_instrument

    guitar = get_instrument("guitar").with_capo(2)
"""

from chordcraft.instruments.instrument import (
    CapoedInstrument, ConfigurableInstrument, Guitar, Instrument, Ukulele,
)
from chordcraft.instruments.presets import (
    custom_instrument, get_instrument, list_instruments, parse_tuning,
)
