"""Display utilities for veremin visualization."""

import cv2
import numpy as np
from typing import Iterable, Optional, Sequence, Tuple, Union

from veremin.poses import CONNECTED_PART_IDS, Keypoint

# -------------------------------------------------------------------------------
# Types
# -------------------------------------------------------------------------------

Color = Union[Tuple[int, int, int], Tuple[int, int, int, int]]  # BGR or BGRA

KEYPOINT_COLOR: Color = (0, 255, 255)
SKELETON_COLOR: Color = (255, 255, 0)
ZONE_COLOR: Color = (0, 255, 0)
SCALE_COLOR: Color = (0, 0, 255)
WAVE_COLOR: Color = (255, 128, 0)
TEXT_COLOR: Color = (0, 255, 0)

DFLT_WAVE_HEIGHT = 80

# -------------------------------------------------------------------------------
# Screen drawing functions
# -------------------------------------------------------------------------------


def _point(x, y):
    return int(round(x)), int(round(y))


def draw_keypoints(
    img: np.ndarray,
    keypoints: Iterable[Keypoint],
    min_confidence: float,
    *,
    color: Color = KEYPOINT_COLOR,
    radius: int = 4,
):
    """Draw the keypoints scoring at least ``min_confidence``."""
    for kp in keypoints:
        if kp.score >= min_confidence:
            cv2.circle(img, _point(kp.x, kp.y), radius, color, cv2.FILLED)
    return img


def draw_skeleton(
    img: np.ndarray,
    keypoints: Sequence[Keypoint],
    min_confidence: float,
    *,
    color: Color = SKELETON_COLOR,
    thickness: int = 2,
):
    """Draw the segments between connected keypoints that both score enough."""
    for a, b in CONNECTED_PART_IDS:
        kp_a, kp_b = keypoints[a], keypoints[b]
        if kp_a.score >= min_confidence and kp_b.score >= min_confidence:
            cv2.line(img, _point(kp_a.x, kp_a.y), _point(kp_b.x, kp_b.y), color, thickness)
    return img


def draw_box(
    img: np.ndarray, x1, y1, x2, y2, *, color: Color = ZONE_COLOR, thickness: int = 1
):
    """Draw the outline of the ``(x1, y1)``, ``(x2, y2)`` rectangle."""
    cv2.rectangle(img, _point(x1, y1), _point(x2, y2), color, thickness)
    return img


def draw_scale(
    img: np.ndarray,
    x,
    top,
    bottom,
    n_steps: int,
    *,
    bounds: Optional[Tuple[float, float]] = None,
    color: Color = SCALE_COLOR,
    tick_length: int = 6,
):
    """
    Draw a vertical scale marker on column ``x`` going from ``top`` to
    ``bottom``, with a tick for each of the ``n_steps`` notes.

    If ``bounds`` (a ``(top, bottom)`` pair) is given, ticks outside of it are
    not drawn.
    """
    lo, hi = bounds if bounds else (top, bottom)
    cv2.line(
        img, _point(x, max(top, lo)), _point(x, min(bottom, hi)), color, 1
    )
    n_steps = max(int(n_steps), 1)
    step = (bottom - top) / n_steps
    for i in range(n_steps + 1):
        y = bottom - i * step
        if lo <= y <= hi:
            cv2.line(img, _point(x - tick_length, y), _point(x, y), color, 1)
    return img


def draw_waveform(
    img: np.ndarray,
    samples: Sequence[float],
    *,
    height: int = DFLT_WAVE_HEIGHT,
    color: Color = WAVE_COLOR,
    thickness: int = 1,
):
    """Draw ``samples`` (amplitudes in [-1, 1]) as a line along the bottom of ``img``."""
    samples = np.asarray(samples, dtype=float)
    h, w = img.shape[:2]
    if samples.size < 2:
        y = h - height // 2
        cv2.line(img, (0, y), (w - 1, y), color, thickness)
        return img
    xs = np.linspace(0, w - 1, samples.size)
    ys = h - height / 2 - np.clip(samples, -1, 1) * (height / 2 - 1)
    points = np.stack([xs, ys], axis=1).round().astype(np.int32)
    cv2.polylines(img, [points], False, color, thickness)
    return img


def display_fields_on_image(
    img: np.ndarray,
    fields: dict,
    *,
    font=cv2.FONT_HERSHEY_SIMPLEX,
    font_scale: float = 0.6,
    color: Color = TEXT_COLOR,
    thickness: int = 1,
    float_format: str = ".2f",
    x_pos=10,
    y_pos=30,
    y_increment=22,
    bg_color: Color = (
        150,
        150,
        150,
        128,
    ),  # Light grey, semi-transparent (BGR + alpha)
):
    """
    Display ``fields`` as "key: value" lines on a semi-transparent background.

    Args:
        img: The image to draw on
        fields: Dictionary of the fields to show
        bg_color: Background color (BGR + alpha) where alpha is 0-255
    """
    if not fields:
        return img

    overlay = img.copy()
    if len(bg_color) == 4:
        bg_rgb = bg_color[:3]
        alpha = bg_color[3] / 255.0
    else:
        bg_rgb = bg_color
        alpha = 0.5

    lines = []
    for key, value in fields.items():
        if isinstance(value, float):
            formatted_value = f"{value:{float_format}}"
        else:
            formatted_value = str(value)
        lines.append(f"{key}: {formatted_value}")

    padding = 5
    for idx, text in enumerate(lines):
        (text_width, text_height), _ = cv2.getTextSize(
            text, font, font_scale, thickness
        )
        cv2.rectangle(
            overlay,
            (x_pos - padding, y_pos + idx * y_increment - text_height - padding),
            (x_pos + text_width + padding, y_pos + idx * y_increment + padding),
            bg_rgb,
            -1,
        )
    cv2.addWeighted(overlay, alpha, img, 1 - alpha, 0, img)

    for idx, text in enumerate(lines):
        cv2.putText(
            img, text, (x_pos, y_pos + idx * y_increment), font, font_scale, color, thickness
        )
    return img


# -------------------------------------------------------------------------------
# Overlay
# -------------------------------------------------------------------------------


class Overlay:
    """
    The image shown each frame. ``begin`` starts a blank canvas the size of the
    frame, the ``draw_*`` methods paint on it, and ``image`` is the result.
    """

    def __init__(self, *, wave_height: int = DFLT_WAVE_HEIGHT):
        self.wave_height = wave_height
        self.image = None

    def begin(self, frame: np.ndarray):
        self.image = np.zeros_like(frame)

    def draw_video(self, frame: np.ndarray):
        self.image[:] = cv2.flip(frame, 1)

    def draw_zones(self, left_zone, right_zone):
        draw_box(
            self.image, left_zone.outer_x, left_zone.top, left_zone.inner_x, left_zone.bottom
        )
        draw_box(
            self.image,
            right_zone.inner_x,
            right_zone.top,
            right_zone.outer_x,
            right_zone.bottom,
        )

    def draw_scale(self, zone, n_steps: int):
        draw_scale(
            self.image,
            zone.outer_x,
            zone.range_top,
            zone.range_bottom,
            n_steps,
            bounds=(zone.top, zone.bottom),
        )

    def draw_keypoints(self, keypoints, min_confidence):
        draw_keypoints(self.image, keypoints, min_confidence)

    def draw_skeleton(self, keypoints, min_confidence):
        draw_skeleton(self.image, keypoints, min_confidence)

    def draw_waveform(self, samples):
        draw_waveform(self.image, samples, height=self.wave_height)

    def draw_panel(self, fields: dict):
        display_fields_on_image(self.image, fields)
