#!/usr/bin/env python
"""
Command-line interface for the veremin, runnable without installing the package
entry point.

Examples:
    python veremin_cli.py
    python veremin_cli.py --algorithm single-pose --synth-preset organ
    python veremin_cli.py --output-device "IAC Driver Bus 1" --note-duration 500
"""

import argh

from veremin.script_utils import veremin_cli

if __name__ == "__main__":
    argh.dispatch_command(veremin_cli)
