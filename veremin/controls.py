"""Keyboard controls: the control panel of the instrument.

Each key of ``KEY_BINDINGS`` changes the settings through one of their setters.

>>> from veremin.config import Settings
>>> settings = Settings()
>>> apply_key_command(settings, ord('m'))
'algorithm'
>>> settings.algorithm
'single-pose'
>>> apply_key_command(settings, ord('#')) is None
True
"""

import time
from typing import Any, Dict, Optional, Sequence

from veremin.config import SYNTH_OUTPUT, Settings, next_choice
from veremin.loop import KeyboardBreakSignal

ESCAPE_KEY_ASCII = 27
BREAK_KEYS = {ESCAPE_KEY_ASCII, ord('q')}

NOTE_DURATION_STEP = 50
NOTES_RANGE_SCALE_STEP = 0.05
NOTES_RANGE_OFFSET_STEP = 0.01
IMAGE_SCALE_FACTOR_STEP = 0.05

# key -> (description, settings command, name of the setting it changes)
KEY_BINDINGS = {
    'm': ("toggle single/multi pose", lambda s: s.toggle_algorithm(), 'algorithm'),
    'a': ("next model architecture", lambda s: s.cycle_architecture(), 'architecture'),
    't': ("next output stride", lambda s: s.cycle_output_stride(), 'output_stride'),
    'i': (
        "increase image scale factor",
        lambda s: s.set_image_scale_factor(
            s.input.image_scale_factor + IMAGE_SCALE_FACTOR_STEP
        ),
        'image_scale_factor',
    ),
    'k': (
        "decrease image scale factor",
        lambda s: s.set_image_scale_factor(
            s.input.image_scale_factor - IMAGE_SCALE_FACTOR_STEP
        ),
        'image_scale_factor',
    ),
    'c': ("next chord intervals", lambda s: s.cycle_chord_intervals(), 'chord_intervals'),
    'x': (
        "previous chord intervals",
        lambda s: s.cycle_chord_intervals(-1),
        'chord_intervals',
    ),
    'd': (
        "longer notes",
        lambda s: s.set_note_duration(s.note_duration + NOTE_DURATION_STEP),
        'note_duration',
    ),
    'f': (
        "shorter notes",
        lambda s: s.set_note_duration(s.note_duration - NOTE_DURATION_STEP),
        'note_duration',
    ),
    '+': (
        "widen notes range",
        lambda s: s.set_notes_range_scale(s.notes_range_scale + NOTES_RANGE_SCALE_STEP),
        'notes_range_scale',
    ),
    '-': (
        "narrow notes range",
        lambda s: s.set_notes_range_scale(s.notes_range_scale - NOTES_RANGE_SCALE_STEP),
        'notes_range_scale',
    ),
    ']': (
        "move notes range down",
        lambda s: s.set_notes_range_offset(
            s.notes_range_offset + NOTES_RANGE_OFFSET_STEP
        ),
        'notes_range_offset',
    ),
    '[': (
        "move notes range up",
        lambda s: s.set_notes_range_offset(
            s.notes_range_offset - NOTES_RANGE_OFFSET_STEP
        ),
        'notes_range_offset',
    ),
    'v': ("show/hide video", lambda s: s.toggle_layer('show_video'), 'show_video'),
    'z': ("show/hide zones", lambda s: s.toggle_layer('show_zones'), 'show_zones'),
    'p': ("show/hide points", lambda s: s.toggle_layer('show_points'), 'show_points'),
    's': (
        "show/hide skeleton",
        lambda s: s.toggle_layer('show_skeleton'),
        'show_skeleton',
    ),
    'w': (
        "show/hide waveform",
        lambda s: s.toggle_layer('show_waveform'),
        'show_waveform',
    ),
}

OUTPUT_DEVICE_KEY = 'o'
SYNTH_PRESET_KEY = 'b'


def apply_key_command(settings: Settings, key_code: int) -> Optional[str]:
    """
    Apply the command bound to ``key_code``.

    Returns the name of the setting that changed, or None if the key isn't bound.
    """
    if key_code <= 0 or key_code > 0x10FFFF:
        return None
    binding = KEY_BINDINGS.get(chr(key_code))
    if binding is None:
        return None
    _, command, setting_name = binding
    command(settings)
    return setting_name


def cycle_output_device(settings: Settings, midi_outputs: Sequence[str]):
    """Switch to the next output device: the synth, then each MIDI output."""
    devices = [SYNTH_OUTPUT] + list(midi_outputs)
    settings.set_output_device(next_choice(settings.output_device, devices))


def cycle_synth_preset(settings: Settings, presets: Sequence[str]):
    settings.set_synth_preset(next_choice(settings.synth_preset, presets))


# -------------------------------------------------------------------------------
# Keyboard feature vectors
# -------------------------------------------------------------------------------


def keyboard_feature_vector(key_code: int) -> Dict[str, Any]:
    """
    Convert a key code into a feature vector with keyboard information.

    Raises:
        KeyboardBreakSignal: If a key that signals program termination is pressed
    """
    keyboard_fv = {
        'key_code': key_code,
        'key_pressed': 0 < key_code < 255,
        'is_escape': key_code == ESCAPE_KEY_ASCII,
        'timestamp': time.time(),
    }
    if keyboard_fv['key_code'] in BREAK_KEYS:
        raise KeyboardBreakSignal(f"Break key pressed: {key_code}")
    return keyboard_fv


# -------------------------------------------------------------------------------
# Panel text
# -------------------------------------------------------------------------------


def describe_settings(settings: Settings) -> Dict[str, Any]:
    """The settings to show on screen, as ``{label: value}``."""
    min_pose_confidence, min_part_confidence = settings.detection_thresholds()
    return {
        'algorithm': settings.algorithm,
        'output': settings.output_device,
        'preset': settings.synth_preset,
        'chords': settings.chord_intervals,
        'duration': settings.note_duration,
        'range scale': float(settings.notes_range_scale),
        'range offset': float(settings.notes_range_offset),
        'architecture': settings.input.architecture,
        'stride': settings.input.output_stride,
        'image scale': float(settings.input.image_scale_factor),
        'min pose conf': float(min_pose_confidence),
        'min part conf': float(min_part_confidence),
    }


def key_help() -> str:
    """One line per key binding."""
    lines = [f"  {key}: {description}" for key, (description, _, _) in KEY_BINDINGS.items()]
    lines.append(f"  {OUTPUT_DEVICE_KEY}: next output device")
    lines.append(f"  {SYNTH_PRESET_KEY}: next synth preset")
    lines.append("  Esc/q: quit")
    return "\n".join(lines)
