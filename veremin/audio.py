"""Software synthesizer output: synth presets and the note output playing them."""

import logging
from contextlib import ExitStack
from functools import partial
from typing import Callable, Union

from hum.pyo_util import Synth, add_default_dials
from pyo import *

from veremin.chords import midi_to_freq
from veremin.notes import DFLT_NOTE_DURATION, NoteOutput
from veremin.util import resolve_object

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------
# Synth presets
# -------------------------------------------------------------------------------

DFLT_OSC = Sine


@add_default_dials('freq volume')
def theremin_synth(
    freq=440,
    volume=0.0,
    attack=0.01,
    release=0.1,
    vibrato_rate=5,
    vibrato_depth=5,
):
    """
    Classic theremin: sine with vibrato and a soft envelope.

    Parameters:
    - freq (float): Base frequency in Hz.
    - volume (float): Output volume (0 to 1).
    - attack (float): Attack time in seconds.
    - release (float): Release time in seconds.
    - vibrato_rate (float): Vibrato frequency in Hz.
    - vibrato_depth (float): Vibrato depth in Hz.
    """
    vibrato = Sine(freq=vibrato_rate, mul=vibrato_depth)
    env = Adsr(
        attack=attack, decay=0.1, sustain=0.8, release=release, dur=0, mul=volume
    )
    env.play()
    return Sine(freq=freq + vibrato, mul=env)


@add_default_dials('freq volume')
def sine_synth(freq=440, volume=0.0):
    """A basic sine wave synthesizer."""
    return DFLT_OSC(freq=freq, mul=volume)


@add_default_dials('freq volume')
def square_synth(freq=440, volume=0.0):
    """Simple square wave synthesizer."""
    return LFO(freq=freq, type=2, mul=volume)


@add_default_dials('freq volume')
def fm_synth(freq=440, volume=0.0, carrier_ratio=1.0, mod_index=2.0, mod_freq_ratio=2.0):
    """Frequency modulation synthesizer."""
    mod = DFLT_OSC(freq=freq * mod_freq_ratio, mul=freq * mod_index)
    return DFLT_OSC(freq=freq * carrier_ratio + mod, mul=volume)


@add_default_dials('freq volume')
def supersaw_synth(freq=440, volume=0.0, detune=0.01, n_voices=7):
    """Supersaw synthesizer with multiple detuned sawtooth waves."""
    voices = [
        LFO(
            freq=freq * (1 + detune * (i - n_voices // 2)),
            type=5,
            mul=volume / n_voices,
        )
        for i in range(n_voices)
    ]
    return sum(voices)


@add_default_dials('freq volume')
def chorused_sine_synth(freq=440, volume=0.0, depth=5, speed=0.3):
    """Chorused sine wave with LFO modulation."""
    lfo = Sine(freq=speed, mul=depth)
    return Sine(freq=freq + lfo, mul=volume)


def _instrument_synth(
    freq=440,
    volume=0.0,
    *,
    instrument='violin',
    vibrato_rate=5,
    vibrato_depth=5,
    reverb_mix=0.3,
    ramp_time=0.05,
):
    """
    Harmonically rich, instrument-like timbres, with portamento, a low-pass
    filter and reverb.
    """
    instrument_oscillators = {
        'violin': lambda freq, mul: Blit(freq=freq, harms=10, mul=mul),
        'organ': lambda freq, mul: SuperSaw(freq=freq, detune=0.1, bal=0.4, mul=mul),
        'flute': lambda freq, mul: LFO(freq=freq, type=3, mul=mul * 0.5),
    }
    osc_factory = instrument_oscillators.get(
        instrument, instrument_oscillators['violin']
    )
    vibrato = Sine(freq=vibrato_rate, mul=vibrato_depth)
    smooth_freq = Port(freq + vibrato, risetime=ramp_time, falltime=ramp_time)
    env = Adsr(attack=0.05, decay=0.1, sustain=0.8, release=0.4, dur=0, mul=volume)
    env.play()
    osc = osc_factory(freq=smooth_freq, mul=env)
    filtered = ButLP(osc, freq=3000)
    return Freeverb(filtered, size=0.8, damp=0.5, bal=reverb_mix)


@add_default_dials('freq volume')
def violin_synth(freq=440, volume=0.0):
    """Bowed-string like preset."""
    return _instrument_synth(freq, volume, instrument='violin')


@add_default_dials('freq volume')
def organ_synth(freq=440, volume=0.0):
    """Organ like preset."""
    return _instrument_synth(freq, volume, instrument='organ', reverb_mix=0.4)


@add_default_dials('freq volume')
def flute_synth(freq=440, volume=0.0):
    """Flute like preset."""
    return _instrument_synth(freq, volume, instrument='flute', vibrato_depth=3)


synth_presets = {
    "theremin": theremin_synth,
    "sine": sine_synth,
    "square": square_synth,
    "fm": fm_synth,
    "supersaw": supersaw_synth,
    "chorused_sine": chorused_sine_synth,
    "violin": violin_synth,
    "organ": organ_synth,
    "flute": flute_synth,
}
DFLT_SYNTH_PRESET = "theremin"


resolve_synth_preset = partial(
    resolve_object, object_map=synth_presets, expected_type=Callable
)

# -------------------------------------------------------------------------------
# Synth output
# -------------------------------------------------------------------------------

DFLT_MAX_VOLUME = 0.8


class SynthOutput(NoteOutput):
    """
    Plays notes on a (monophonic) pyo synth.

    The synth runs from construction until ``close``. It sounds the note (and
    velocity) last asked for, even when that note is already held, and goes
    silent when that note is released or the output is muted.
    """

    def __init__(
        self,
        preset: Union[str, Callable] = DFLT_SYNTH_PRESET,
        *,
        max_volume: float = DFLT_MAX_VOLUME,
        nchnls: int = 2,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.max_volume = max_volume
        self.nchnls = nchnls
        # (note, velocity) the synth is playing, or None when silent
        self.sounding = None
        self._stack = ExitStack()
        self._start(preset)

    def _start(self, preset):
        self.preset = preset
        self.synth = Synth(resolve_synth_preset(preset), nchnls=self.nchnls)
        self._stack.enter_context(self.synth)
        logger.info("Synth preset: %s", preset)

    def set_preset(self, preset: Union[str, Callable]):
        """Restart the synth with another preset."""
        resolve_synth_preset(preset)
        self.mute()
        self._stack.close()
        self._start(preset)

    def _sound(self, note, velocity):
        self.synth(freq=midi_to_freq(note), volume=self.max_volume * velocity / 127)
        self.sounding = (note, velocity)

    def play_note(
        self,
        note,
        velocity,
        duration=DFLT_NOTE_DURATION,
        chord_intervals=(),
    ):
        midi_note = super().play_note(note, velocity, duration, chord_intervals)
        if midi_note is not None:
            midi_velocity, _ = self.active_notes[midi_note]
            if (midi_note, midi_velocity) != self.sounding:
                self._sound(midi_note, midi_velocity)
        return midi_note

    def _note_on(self, note, velocity):
        self._sound(note, velocity)

    def _note_off(self, note):
        if self.sounding is not None and self.sounding[0] == note:
            self.synth(volume=0.0)
            self.sounding = None

    def close(self):
        super().close()
        self._stack.close()
