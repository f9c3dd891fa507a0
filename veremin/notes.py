"""Note events and the bookkeeping shared by every note output."""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Sequence, Tuple

import numpy as np

from veremin.chords import (
    midi_to_freq,
    note_from_selector,
    note_name,
    velocity_from_selector,
)

DFLT_NOTE_DURATION = 300  # milliseconds
DFLT_WAVEFORM_SIZE = 1024
DFLT_WAVEFORM_SAMPLE_RATE = 44100


@dataclass(frozen=True)
class NoteEvent:
    """
    What to play for a frame: pitch and velocity selectors (0 to 1), a duration
    in milliseconds, and the chord intervals the pitch is quantized with.
    """

    note: float = 0.0
    velocity: float = 0.0
    duration: float = DFLT_NOTE_DURATION
    chord_intervals: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_mute(self) -> bool:
        return self.note <= 0 or self.velocity <= 0

    def to_dict(self):
        return {
            'note': self.note,
            'velocity': self.velocity,
            'duration': self.duration,
            'chord_intervals': list(self.chord_intervals),
        }

    def describe(self):
        """The note (and velocity) this event plays, for display."""
        if self.is_mute:
            return {'note': 'mute'}
        midi_note = note_from_selector(self.note, self.chord_intervals)
        return {
            'note': f"{note_name(midi_note)} ({midi_note})",
            'velocity': velocity_from_selector(self.velocity),
        }


MUTE = NoteEvent(0.0, 0.0, 0)


class NoteOutput:
    """
    Base for note outputs.

    Keeps track of the sounding notes and releases them ``duration``
    milliseconds after they were (last) asked for. Subclasses implement
    ``_note_on`` and ``_note_off``.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        # note -> (velocity, release time in clock seconds)
        self.active_notes: Dict[int, Tuple[int, float]] = {}

    def _note_on(self, note: int, velocity: int):
        raise NotImplementedError

    def _note_off(self, note: int):
        raise NotImplementedError

    def play_note(
        self,
        note: float,
        velocity: float,
        duration: float = DFLT_NOTE_DURATION,
        chord_intervals: Sequence[int] = (),
    ):
        """
        Play the note picked by the ``note`` and ``velocity`` selectors.

        A non-positive selector mutes the output. A note that is already
        sounding is held longer rather than retriggered.

        Returns the MIDI note played, or None when muting.
        """
        self.release_expired()
        if note <= 0 or velocity <= 0:
            self.mute()
            return None

        midi_note = note_from_selector(note, chord_intervals)
        midi_velocity = velocity_from_selector(velocity)
        release_time = self.clock() + duration / 1000

        if midi_note not in self.active_notes:
            self._note_on(midi_note, midi_velocity)
        self.active_notes[midi_note] = (midi_velocity, release_time)
        return midi_note

    def play_event(self, event: NoteEvent):
        return self.play_note(
            event.note, event.velocity, event.duration, event.chord_intervals
        )

    def release_expired(self):
        now = self.clock()
        for note, (_, release_time) in list(self.active_notes.items()):
            if now >= release_time:
                self._note_off(note)
                del self.active_notes[note]

    def mute(self):
        for note in list(self.active_notes):
            self._note_off(note)
        self.active_notes.clear()

    def waveform(
        self,
        n_samples: int = DFLT_WAVEFORM_SIZE,
        *,
        sample_rate: int = DFLT_WAVEFORM_SAMPLE_RATE,
    ) -> np.ndarray:
        """
        Amplitude samples (in [-1, 1]) of the notes currently sounding, for
        visualization.
        """
        t = np.arange(n_samples) / sample_rate
        wave = np.zeros(n_samples)
        for note, (velocity, _) in self.active_notes.items():
            wave += (velocity / 127) * np.sin(2 * np.pi * midi_to_freq(note) * t)
        if self.active_notes:
            wave /= len(self.active_notes)
        return wave

    def close(self):
        self.mute()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
