"""Utility functions for running the veremin scripts."""

import logging
from typing import Any, Callable, Iterator, Optional, Sequence

import cv2

from veremin.audio import SynthOutput, synth_presets
from veremin.config import SYNTH_OUTPUT, Settings
from veremin.controls import (
    OUTPUT_DEVICE_KEY,
    SYNTH_PRESET_KEY,
    apply_key_command,
    cycle_output_device,
    cycle_synth_preset,
    describe_settings,
    key_help,
    keyboard_feature_vector,
)
from veremin.display import Overlay
from veremin.loop import FrameLoop, KeyboardBreakSignal
from veremin.midi import MidiOutput, MidiUnavailableError, list_midi_outputs
from veremin.notes import NoteEvent, NoteOutput
from veremin.pose_model import load_pose_model
from veremin.poses import ModelLoadError
from veremin.util import print_json_if_possible

logger = logging.getLogger(__name__)

DFLT_WINDOW_NAME = 'Veremin'
DFLT_FRAME_SIZE = (800, 600)

# -------------------------------------------------------------------------------
# Keyboard handling functions
# -------------------------------------------------------------------------------


def read_keyboard(wait_time: int = 5) -> int:
    """
    Read keyboard input with the specified wait time.

    Args:
        wait_time: Time to wait for keyboard input in milliseconds

    Returns:
        The key code or 0 if no key was pressed
    """
    return cv2.waitKey(wait_time) & 0xFF


def handle_key(settings: Settings, key_code: int):
    """
    Apply the command of ``key_code`` to the settings.

    Raises:
        KeyboardBreakSignal: If a key that signals program termination is pressed
    """
    keyboard_feature_vector(key_code)
    if key_code == ord(OUTPUT_DEVICE_KEY):
        cycle_output_device(settings, list_midi_outputs())
        return 'output_device'
    elif key_code == ord(SYNTH_PRESET_KEY):
        cycle_synth_preset(settings, list(synth_presets))
        return 'synth_preset'
    return apply_key_command(settings, key_code)


# -------------------------------------------------------------------------------
# Camera handling functions
# -------------------------------------------------------------------------------


class CameraUnavailableError(RuntimeError):
    """Exception raised when the camera can't be opened."""


class CameraReadError(Exception):
    """Exception raised when camera read fails."""


def open_camera(index: int = 0, frame_size=DFLT_FRAME_SIZE) -> cv2.VideoCapture:
    """
    Open the camera number ``index``, asking for frames of ``frame_size``.

    Raises:
        CameraUnavailableError: If the camera can't be opened (missing, or
            access denied)
    """
    cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        cap.release()
        raise CameraUnavailableError(
            f"Could not open camera {index}. Is it connected, and is access allowed?"
        )
    width, height = frame_size
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    return cap


def read_camera(cap: cv2.VideoCapture) -> Any:
    """
    Read a frame from the camera.

    The frame is returned as captured: poses are estimated, and the video drawn,
    mirrored.

    Raises:
        CameraReadError: If the camera read operation fails
    """
    success, img = cap.read()
    if not success:
        raise CameraReadError("Failed to read from camera")
    return img


def camera_frames(cap: cv2.VideoCapture) -> Iterator:
    """Yield camera frames until the camera can't be read anymore."""
    while cap.isOpened():
        try:
            yield read_camera(cap)
        except CameraReadError as e:
            logger.warning("%s: stopping", e)
            return


# -------------------------------------------------------------------------------
# Note outputs
# -------------------------------------------------------------------------------


def default_output_device(midi_outputs: Sequence[str]) -> str:
    """
    The output to start with: the first MIDI output if there is one, the synth
    otherwise.

    >>> default_output_device(['IAC Driver Bus 1', 'Other'])
    'IAC Driver Bus 1'
    >>> default_output_device([])
    'synth'
    """
    return midi_outputs[0] if midi_outputs else SYNTH_OUTPUT


def make_note_output(settings: Settings) -> NoteOutput:
    """
    The note output selected by the settings: the synth, or a MIDI output.

    If the MIDI output can't be opened, fall back to the synth (and say so in the
    settings).
    """
    if settings.output_device != SYNTH_OUTPUT:
        try:
            return MidiOutput(settings.output_device)
        except MidiUnavailableError as e:
            logger.error("%s: using the synth instead", e)
            settings.set_output_device(SYNTH_OUTPUT)
    return SynthOutput(settings.synth_preset)


class NoteOutputs:
    """
    The note output in use, kept in sync with the output settings.

    ``sync`` replaces the output when the output device changed, and switches
    the synth preset when that changed.
    """

    def __init__(self, settings: Settings, *, make_output: Callable = make_note_output):
        self.settings = settings
        self.make_output = make_output
        self.output = make_output(settings)
        self._device = settings.output_device
        self._preset = settings.synth_preset

    def play_event(self, event: NoteEvent):
        return self.output.play_event(event)

    def waveform(self):
        return self.output.waveform()

    def sync(self):
        settings = self.settings
        if settings.output_device != self._device:
            logger.info("Output device: %s", settings.output_device)
            self.output.close()
            self.output = self.make_output(settings)
        elif settings.synth_preset != self._preset and isinstance(
            self.output, SynthOutput
        ):
            self.output.set_preset(settings.synth_preset)
        self._device = settings.output_device
        self._preset = settings.synth_preset

    def close(self):
        self.output.close()


# -------------------------------------------------------------------------------
# Main run function
# -------------------------------------------------------------------------------


def run_veremin(
    *,
    settings: Optional[Settings] = None,
    camera_index: int = 0,
    frame_size=DFLT_FRAME_SIZE,
    window_name: str = DFLT_WINDOW_NAME,
    log_note_events: Optional[Callable] = None,
    show_settings: bool = True,
) -> bool:
    """
    Run the pose-controlled theremin.

    Args:
        settings: Initial settings (changed at runtime with the keyboard)
        camera_index: Which camera to read from
        frame_size: The (width, height) asked of the camera
        window_name: Title for the display window
        log_note_events: Function to log note events (or None to disable)
        show_settings: Whether to show the current settings on screen

    Returns:
        False if the camera or the pose model couldn't be started, True otherwise
    """
    settings = settings or Settings()

    try:
        cap = open_camera(camera_index, frame_size)
    except CameraUnavailableError as e:
        logger.error("%s", e)
        print(f"\n{e}\n")
        return False

    overlay = Overlay()
    outputs = NoteOutputs(settings)
    loop = FrameLoop(
        settings,
        load_model=load_pose_model,
        play_event=outputs.play_event,
        waveform=outputs.waveform,
        overlay=overlay,
        log_note_events=log_note_events,
    )

    def after_step(frame, event):
        # frames consumed by a model reload leave the previous image on screen
        if event is not None:
            panel = event.describe()
            if show_settings:
                panel.update(describe_settings(settings))
            overlay.draw_panel(panel)
            cv2.imshow(window_name, overlay.image)
        handle_key(settings, read_keyboard())
        outputs.sync()
        if overlay.image is not None and (
            cv2.getWindowProperty(window_name, cv2.WND_PROP_VISIBLE) < 1
        ):
            raise KeyboardBreakSignal("Window closed")

    try:
        try:
            loop.start()
        except ModelLoadError as e:
            logger.error("%s", e)
            print(f"\nCould not load the pose model: {e}\n")
            return False
        print(f"\nKeys:\n{key_help()}\n")
        loop.run(camera_frames(cap), after_step=after_step)
    finally:
        loop.close()
        outputs.close()
        cap.release()
        cv2.destroyAllWindows()
    return True


def veremin_cli(
    # Instrument
    output_device: Optional[str] = None,
    synth_preset: str = 'theremin',
    chord_intervals: str = 'minor0',
    note_duration: int = 300,
    # Pose estimation
    algorithm: str = 'multi-pose',
    architecture: str = '0.75',
    output_stride: int = 16,
    image_scale_factor: float = 0.5,
    # Camera and display
    camera_index: int = 0,
    width: int = DFLT_FRAME_SIZE[0],
    height: int = DFLT_FRAME_SIZE[1],
    window_name: str = DFLT_WINDOW_NAME,
    hide_settings: bool = False,
    # Logging options
    log_note_events: bool = False,
    debug: bool = False,
    # List available components
    list_synths: bool = False,
    list_chords: bool = False,
    list_midi_outputs: bool = False,
):
    """
    Run the veremin with the specified parameters.

    Args:
        output_device: 'synth', or the name of a MIDI output (defaults to the
            first MIDI output, or the synth if there is none)
        synth_preset: Name of the synth preset
        chord_intervals: Name of the chord intervals notes are snapped to
        note_duration: How long notes sound, in milliseconds
        algorithm: 'single-pose' or 'multi-pose'
        architecture: Pose model architecture (1.01, 1.00, 0.75 or 0.50)
        output_stride: Output stride of the pose model (8, 16 or 32)
        image_scale_factor: Scale of the image given to the pose model
        camera_index: Which camera to read from
        width: Width of the camera frames
        height: Height of the camera frames
        window_name: Title for the display window
        hide_settings: Don't show the settings on screen
        log_note_events: Whether to print note events
        debug: Log debug information
        list_synths: List available synth presets and exit
        list_chords: List available chord intervals and exit
        list_midi_outputs: List available MIDI outputs and exit
    """
    from veremin.chords import chords
    from veremin.midi import list_midi_outputs as _list_midi_outputs

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    # Handle listing available components
    if list_synths:
        print("Available synth presets:")
        for name in sorted(synth_presets):
            print(f"  - {name}")
        return

    if list_chords:
        print("Available chord intervals:")
        for name, intervals in chords.items():
            print(f"  - {name}: {list(intervals)}")
        return

    if list_midi_outputs:
        print("Available MIDI outputs:")
        for name in _list_midi_outputs():
            print(f"  - {name}")
        return

    if output_device is None:
        output_device = default_output_device(_list_midi_outputs())

    settings = Settings()
    settings.set_algorithm(algorithm)
    settings.set_architecture(architecture)
    settings.set_output_stride(output_stride)
    settings.set_image_scale_factor(image_scale_factor)
    settings.set_output_device(output_device)
    settings.set_synth_preset(synth_preset)
    settings.set_chord_intervals(chord_intervals)
    settings.set_note_duration(note_duration)

    started = run_veremin(
        settings=settings,
        camera_index=camera_index,
        frame_size=(width, height),
        window_name=window_name,
        log_note_events=print_json_if_possible if log_note_events else None,
        show_settings=not hide_settings,
    )
    if not started:
        raise SystemExit(1)
