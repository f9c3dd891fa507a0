#!/usr/bin/env python
"""
Command-line interface for the veremin.

This script provides a CLI wrapper around the run_veremin function, allowing all
parameters to be controlled via command-line arguments.

Examples:
    # Run with default settings (multi-pose, theremin synth, minor0 chords)
    veremin

    # Play a MIDI output instead of the synth
    veremin --output-device "IAC Driver Bus 1"

    # Violin preset, pentatonic notes, a lighter pose model
    veremin --synth-preset violin --chord-intervals pentatonic --architecture 0.50

    # Print each note event
    veremin --log-note-events

    # See what's available
    veremin --list-synths
    veremin --list-chords
    veremin --list-midi-outputs
"""

import argh

from veremin.script_utils import veremin_cli


def dispatched_veremin_cli():
    argh.dispatch_command(veremin_cli)


if __name__ == "__main__":
    dispatched_veremin_cli()
