"""MIDI output of notes."""

import logging
from typing import List

import mido

from veremin.notes import NoteOutput

logger = logging.getLogger(__name__)

DFLT_MIDI_CHANNEL = 0


class MidiUnavailableError(RuntimeError):
    """Raised when a MIDI output port can't be opened."""


def list_midi_outputs() -> List[str]:
    """
    The names of the available MIDI output ports.

    Returns an empty list (and logs a warning) if no MIDI backend is usable.
    """
    try:
        return list(mido.get_output_names())
    except (ImportError, OSError, RuntimeError) as e:
        logger.warning("No MIDI backend available: %s", e)
        return []


def open_midi_port(port_name: str = None):
    """
    Open the output port named ``port_name``, or the first port whose name
    contains it. Without a name, open the first port.
    """
    names = list_midi_outputs()
    if port_name is None:
        target = next(iter(names), None)
    else:
        target = next((n for n in names if n == port_name), None)
    if target is None and port_name is not None:
        target = next((n for n in names if port_name in n), None)
    if target is None:
        raise MidiUnavailableError(
            f"MIDI output not found: {port_name!r}. Found: {names}"
        )
    try:
        port = mido.open_output(target)
    except OSError as e:
        raise MidiUnavailableError(f"Could not open MIDI output {target!r}") from e
    logger.info("MIDI output: %s", target)
    return port


class MidiOutput(NoteOutput):
    """
    Sends notes to a MIDI output port.

    Pass ``port`` to use an already opened ``mido`` port instead of looking up
    ``port_name``.
    """

    def __init__(
        self, port_name: str = None, *, channel=DFLT_MIDI_CHANNEL, port=None, **kwargs
    ):
        super().__init__(**kwargs)
        self.channel = channel
        self.port = port if port is not None else open_midi_port(port_name)
        self.port_name = getattr(self.port, 'name', port_name)

    def _note_on(self, note, velocity):
        self.port.send(
            mido.Message('note_on', note=note, velocity=velocity, channel=self.channel)
        )

    def _note_off(self, note):
        self.port.send(
            mido.Message('note_off', note=note, velocity=0, channel=self.channel)
        )

    def close(self):
        super().close()
        self.port.close()
