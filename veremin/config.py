"""Runtime settings of the instrument.

A single ``Settings`` object is created at startup, handed to the frame loop,
and changed only through its setters (called by the keyboard controls).

>>> settings = Settings()
>>> settings.detection_thresholds()
(0.15, 0.1)
>>> settings.set_architecture('0.50')
>>> settings.take_architecture_change()
'0.50'
>>> settings.take_architecture_change() is None
True
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from veremin.chords import DFLT_CHORD_INTERVALS, NO_CHORD_INTERVALS, chords
from veremin.notes import DFLT_NOTE_DURATION
from veremin.zones import DFLT_NOTES_RANGE_OFFSET, DFLT_NOTES_RANGE_SCALE

SINGLE_POSE = 'single-pose'
MULTI_POSE = 'multi-pose'
ALGORITHMS = (MULTI_POSE, SINGLE_POSE)

ARCHITECTURES = ('1.01', '1.00', '0.75', '0.50')
DFLT_ARCHITECTURE = '0.75'

OUTPUT_STRIDES = (8, 16, 32)

SYNTH_OUTPUT = 'synth'
DFLT_SYNTH_PRESET = 'theremin'

CANVAS_LAYERS = ('show_video', 'show_skeleton', 'show_points', 'show_zones', 'show_waveform')

# (min, max) of the numeric settings
NOTE_DURATION_RANGE = (100, 2000)
NOTES_RANGE_SCALE_RANGE = (0.6, 8.0)
NOTES_RANGE_OFFSET_RANGE = (0.0, 1.0)
IMAGE_SCALE_FACTOR_RANGE = (0.2, 1.0)
CONFIDENCE_RANGE = (0.0, 1.0)
MAX_POSE_DETECTIONS_RANGE = (1, 20)
NMS_RADIUS_RANGE = (0.0, 40.0)


def clamp(value, value_range):
    lo, hi = value_range
    return type(lo)(min(max(value, lo), hi))


def choose(value, choices, what):
    if value not in choices:
        raise ValueError(f"Unknown {what}: {value!r}. Choose from {list(choices)}")
    return value


def next_choice(current, choices: Sequence, step=1):
    choices = list(choices)
    idx = choices.index(current) if current in choices else -step
    return choices[(idx + step) % len(choices)]


@dataclass
class InputSettings:
    architecture: str = DFLT_ARCHITECTURE
    output_stride: int = 16
    image_scale_factor: float = 0.5


@dataclass
class SinglePoseDetection:
    min_pose_confidence: float = 0.1
    min_part_confidence: float = 0.5


@dataclass
class MultiPoseDetection:
    max_pose_detections: int = 5
    min_pose_confidence: float = 0.15
    min_part_confidence: float = 0.1
    nms_radius: float = 30.0


@dataclass
class CanvasSettings:
    show_video: bool = True
    show_skeleton: bool = True
    show_points: bool = True
    show_zones: bool = True
    show_waveform: bool = True


@dataclass
class Settings:
    algorithm: str = MULTI_POSE
    output_device: str = SYNTH_OUTPUT
    synth_preset: str = DFLT_SYNTH_PRESET
    chord_intervals: str = DFLT_CHORD_INTERVALS
    note_duration: int = DFLT_NOTE_DURATION
    notes_range_scale: float = DFLT_NOTES_RANGE_SCALE
    notes_range_offset: float = DFLT_NOTES_RANGE_OFFSET
    input: InputSettings = field(default_factory=InputSettings)
    single_pose_detection: SinglePoseDetection = field(
        default_factory=SinglePoseDetection
    )
    multi_pose_detection: MultiPoseDetection = field(
        default_factory=MultiPoseDetection
    )
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    change_to_architecture: Optional[str] = None

    # ---------------------------------------------------------------------------
    # Pose detection

    def set_algorithm(self, algorithm: str):
        self.algorithm = choose(algorithm, ALGORITHMS, 'algorithm')

    def toggle_algorithm(self):
        self.set_algorithm(next_choice(self.algorithm, ALGORITHMS))

    @property
    def is_multi_pose(self) -> bool:
        return self.algorithm == MULTI_POSE

    def detection_thresholds(self) -> Tuple[float, float]:
        """``(min_pose_confidence, min_part_confidence)`` of the active algorithm."""
        detection = (
            self.multi_pose_detection if self.is_multi_pose else self.single_pose_detection
        )
        return detection.min_pose_confidence, detection.min_part_confidence

    def set_architecture(self, architecture: str):
        """Select the model architecture. The frame loop picks up the change."""
        self.input.architecture = choose(architecture, ARCHITECTURES, 'architecture')
        self.change_to_architecture = architecture

    def cycle_architecture(self, step=1):
        self.set_architecture(next_choice(self.input.architecture, ARCHITECTURES, step))

    def take_architecture_change(self) -> Optional[str]:
        """Return the pending architecture change (if any), clearing it."""
        architecture, self.change_to_architecture = self.change_to_architecture, None
        return architecture

    def set_output_stride(self, output_stride: int):
        self.input.output_stride = choose(
            int(output_stride), OUTPUT_STRIDES, 'output stride'
        )

    def cycle_output_stride(self, step=1):
        self.set_output_stride(next_choice(self.input.output_stride, OUTPUT_STRIDES, step))

    def set_image_scale_factor(self, image_scale_factor: float):
        self.input.image_scale_factor = clamp(
            image_scale_factor, IMAGE_SCALE_FACTOR_RANGE
        )

    def set_min_pose_confidence(self, value: float):
        detection = (
            self.multi_pose_detection if self.is_multi_pose else self.single_pose_detection
        )
        detection.min_pose_confidence = clamp(value, CONFIDENCE_RANGE)

    def set_min_part_confidence(self, value: float):
        detection = (
            self.multi_pose_detection if self.is_multi_pose else self.single_pose_detection
        )
        detection.min_part_confidence = clamp(value, CONFIDENCE_RANGE)

    def set_max_pose_detections(self, value: int):
        self.multi_pose_detection.max_pose_detections = clamp(
            int(value), MAX_POSE_DETECTIONS_RANGE
        )

    def set_nms_radius(self, value: float):
        self.multi_pose_detection.nms_radius = clamp(value, NMS_RADIUS_RANGE)

    # ---------------------------------------------------------------------------
    # Notes

    def set_chord_intervals(self, name: str):
        """Any name is accepted; names that aren't chords mean no quantization."""
        self.chord_intervals = name

    def cycle_chord_intervals(self, step=1):
        names = [NO_CHORD_INTERVALS] + list(chords)
        self.set_chord_intervals(next_choice(self.chord_intervals, names, step))

    def set_note_duration(self, note_duration: float):
        self.note_duration = clamp(int(note_duration), NOTE_DURATION_RANGE)

    def set_notes_range_scale(self, scale: float):
        self.notes_range_scale = clamp(scale, NOTES_RANGE_SCALE_RANGE)

    def set_notes_range_offset(self, offset: float):
        self.notes_range_offset = clamp(offset, NOTES_RANGE_OFFSET_RANGE)

    # ---------------------------------------------------------------------------
    # Output

    def set_output_device(self, output_device: str):
        self.output_device = output_device or SYNTH_OUTPUT

    def set_synth_preset(self, preset: str):
        self.synth_preset = preset

    # ---------------------------------------------------------------------------
    # Canvas

    def toggle_layer(self, layer: str):
        choose(layer, CANVAS_LAYERS, 'canvas layer')
        setattr(self.canvas, layer, not getattr(self.canvas, layer))
