"""The frame loop: camera frame -> poses -> zone readings -> note event.

The loop owns the pose model. It moves through these states::

    idle -> loading-model -> ready <-> reloading-model

and processes frames only when ``ready``. Each call to ``step`` is one bounded
unit of work; ``run`` drives ``step`` over a frame source until the source is
exhausted or ``stop`` is called.
"""

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional

from veremin.chords import n_scale_steps, resolve_chord_intervals
from veremin.config import Settings
from veremin.notes import MUTE, NoteEvent
from veremin.poses import ModelLoadError, Pose
from veremin.util import return_none
from veremin.zones import ZoneLayout, normalize_positions

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    IDLE = 'idle'
    LOADING_MODEL = 'loading-model'
    READY = 'ready'
    RELOADING_MODEL = 'reloading-model'


class KeyboardBreakSignal(Exception):
    """Exception raised when a break key is pressed."""


def note_event_for_pose(
    pose: Pose,
    left_zone,
    right_zone,
    *,
    min_part_confidence: float,
    duration: float,
    chord_intervals=(),
) -> NoteEvent:
    """
    The note event of one pose: the right zone reading picks the pitch, the
    left zone reading the velocity. Mute if either wrist isn't confident enough
    or reads 0.
    """
    left_wrist, right_wrist = pose.left_wrist, pose.right_wrist
    if not (
        left_wrist.score > min_part_confidence
        and right_wrist.score > min_part_confidence
    ):
        return MUTE
    position = normalize_positions(left_wrist, right_wrist, left_zone, right_zone)
    if position.right.vertical > 0 and position.left.horizontal > 0:
        return NoteEvent(
            note=position.right.vertical,
            velocity=position.left.horizontal,
            duration=duration,
            chord_intervals=tuple(chord_intervals),
        )
    return MUTE


def first_sounding_event(events: Iterable[NoteEvent]) -> NoteEvent:
    """The first event that isn't a mute, or ``MUTE``."""
    return next((event for event in events if not event.is_mute), MUTE)


class FrameLoop:
    """
    Sequence pose inference, drawing and note playing, frame by frame.

    Args:
        settings: The (shared) runtime settings. The loop only reads them,
            except for clearing the pending architecture change.
        load_model: ``architecture -> model``. Models have
            ``estimate_single_pose``, ``estimate_multiple_poses`` and ``release``.
        play_event: Called with the ``NoteEvent`` of each processed frame.
        waveform: Returns the amplitude samples to draw (if drawing is on).
        overlay: Drawing surface (see ``veremin.display.Overlay``), or None to
            skip drawing.
        log_note_events: Called with the dict of each dispatched event.
        flip_horizontal: Whether poses are estimated on the mirrored image.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        load_model: Callable,
        play_event: Callable[[NoteEvent], object],
        waveform: Optional[Callable] = None,
        overlay=None,
        log_note_events: Optional[Callable] = None,
        flip_horizontal: bool = True,
    ):
        self.settings = settings
        self.load_model = load_model
        self.play_event = play_event
        self.waveform = waveform
        self.overlay = overlay
        self.log_note_events = log_note_events or return_none
        self.flip_horizontal = flip_horizontal

        self.state = LoopState.IDLE
        self.model = None
        self.architecture = None
        self.layout = None
        self.last_event = None
        self._stopped = False

    # ---------------------------------------------------------------------------
    # Model lifecycle

    def start(self):
        """Load the configured model. Called by the first ``step`` if needed."""
        if self.state is not LoopState.IDLE:
            return
        self.settings.take_architecture_change()
        architecture = self.settings.input.architecture
        self.state = LoopState.LOADING_MODEL
        try:
            self.model = self.load_model(architecture)
        except (RuntimeError, OSError):
            self.state = LoopState.IDLE
            raise
        self.architecture = architecture
        self.state = LoopState.READY

    def reload_model(self, architecture: str):
        """
        Replace the model by one of ``architecture``.

        The current model is released first. If the new one fails to load, the
        previous architecture is loaded back (and restored in the settings).
        """
        previous = self.architecture
        self.state = LoopState.RELOADING_MODEL
        if self.model is not None:
            self.model.release()
            self.model = None
        try:
            self.model = self.load_model(architecture)
            self.architecture = architecture
        except (RuntimeError, OSError) as e:
            logger.error(
                "Could not load the %s pose model (%s), going back to %s",
                architecture,
                e,
                previous,
            )
            try:
                self.model = self.load_model(previous)
            except (RuntimeError, OSError) as fallback_error:
                raise ModelLoadError(
                    f"Could not load the {architecture} pose model, "
                    f"nor go back to {previous}"
                ) from fallback_error
            self.settings.input.architecture = previous
        self.state = LoopState.READY

    # ---------------------------------------------------------------------------
    # Frames

    def zone_layout(self, width: int, height: int) -> ZoneLayout:
        if self.layout is None or (self.layout.width, self.layout.height) != (
            width,
            height,
        ):
            self.layout = ZoneLayout(width, height)
        return self.layout

    def estimate_poses(self, frame) -> List[Pose]:
        settings = self.settings
        if settings.is_multi_pose:
            detection = settings.multi_pose_detection
            poses = self.model.estimate_multiple_poses(
                frame,
                settings.input.image_scale_factor,
                self.flip_horizontal,
                settings.input.output_stride,
                detection.max_pose_detections,
                detection.min_part_confidence,
                detection.nms_radius,
            )
        else:
            pose = self.model.estimate_single_pose(
                frame,
                settings.input.image_scale_factor,
                self.flip_horizontal,
                settings.input.output_stride,
            )
            poses = [pose]
        poses = [pose for pose in poses if pose.keypoints]
        return sorted(poses, key=lambda pose: pose.score, reverse=True)

    def step(self, frame) -> Optional[NoteEvent]:
        """
        Process one frame.

        Returns the dispatched ``NoteEvent``, or None if the frame was skipped
        (stopped, or the model was being replaced).
        """
        if self._stopped:
            return None
        if self.state is LoopState.IDLE:
            self.start()

        architecture = self.settings.take_architecture_change()
        if architecture is not None:
            self.reload_model(architecture)
            return None
        if self.state is not LoopState.READY:
            return None

        poses = self.estimate_poses(frame)
        if self.settings.change_to_architecture is not None:
            logger.debug("Discarding poses of a model being replaced")
            return None

        settings = self.settings
        canvas = settings.canvas
        min_pose_confidence, min_part_confidence = settings.detection_thresholds()

        height, width = frame.shape[:2]
        left_zone, right_zone = self.zone_layout(width, height).zones(
            settings.notes_range_scale, settings.notes_range_offset
        )
        chord_intervals = resolve_chord_intervals(settings.chord_intervals)

        overlay = self.overlay
        if overlay is not None:
            overlay.begin(frame)
            if canvas.show_video:
                overlay.draw_video(frame)
            if canvas.show_zones:
                overlay.draw_zones(left_zone, right_zone)
                overlay.draw_scale(right_zone, n_scale_steps(chord_intervals))

        events = []
        for pose in poses:
            if pose.score < min_pose_confidence:
                continue
            events.append(
                note_event_for_pose(
                    pose,
                    left_zone,
                    right_zone,
                    min_part_confidence=min_part_confidence,
                    duration=settings.note_duration,
                    chord_intervals=chord_intervals,
                )
            )
            if overlay is not None:
                if canvas.show_points:
                    overlay.draw_keypoints(pose.keypoints, min_part_confidence)
                if canvas.show_skeleton:
                    overlay.draw_skeleton(pose.keypoints, min_part_confidence)

        event = first_sounding_event(events)
        self.play_event(event)
        self.log_note_events(event.to_dict())
        self.last_event = event

        if overlay is not None and canvas.show_waveform and self.waveform is not None:
            overlay.draw_waveform(self.waveform())

        return event

    def run(self, frames: Iterable, *, after_step: Optional[Callable] = None):
        """
        Step through ``frames`` until they run out or the loop is stopped.

        ``after_step(frame, event)`` is called after each step, and may raise
        ``KeyboardBreakSignal`` to stop the loop.
        """
        for frame in frames:
            if self._stopped:
                break
            event = self.step(frame)
            if after_step is not None:
                try:
                    after_step(frame, event)
                except KeyboardBreakSignal:
                    self.stop()

    def stop(self):
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    def close(self):
        self.stop()
        if self.model is not None:
            self.model.release()
            self.model = None
