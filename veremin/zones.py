"""Zone geometry and the mapping of wrist positions onto zone-relative values.

The screen is split in two zones. The left zone reads the horizontal position of
the hand that lands in it (velocity), the right zone reads the vertical position
(pitch), restricted to a configurable sub-range of the zone's height.

>>> layout = ZoneLayout(800, 600)
>>> left_zone, right_zone = layout.zones()
>>> left_zone.inner_x, left_zone.outer_x, right_zone.inner_x, right_zone.outer_x
(400.0, 10, 400.0, 790)
>>> round(right_zone.range_top, 6), round(right_zone.range_bottom, 6)
(10.0, 420.0)

"""

import math
from collections import namedtuple
from dataclasses import dataclass
from typing import Tuple

ZONE_OFFSET = 10
ZONE_FACTOR = 0.7

DFLT_NOTES_RANGE_SCALE = 1.0
DFLT_NOTES_RANGE_OFFSET = 0.0

HandReading = namedtuple('HandReading', 'vertical horizontal')
NormalizedPosition = namedtuple('NormalizedPosition', 'right left')


def compute_percentage(value, low, high):
    """
    Position of ``value`` in the ``low`` (0) to ``high`` (1) range.

    A non-finite ``value`` or ``low`` gives 0. A non-finite ``high`` counts as
    ``value + 1``. A zero-length range gives 0.

    >>> compute_percentage(15, 10, 20)
    0.5
    >>> compute_percentage(15, 20, 10)
    0.5
    >>> compute_percentage(float('nan'), 10, 20)
    0.0
    >>> compute_percentage(5, float('-inf'), 10)
    0.0
    >>> compute_percentage(3, 3, float('inf'))
    0.0
    >>> compute_percentage(5, 5, 5)
    0.0
    """
    if not (math.isfinite(value) and math.isfinite(low)):
        return 0.0
    if not math.isfinite(high):
        high = value + 1

    span = high - low
    if span == 0:
        return 0.0
    return (value - low) / span


def _clip(value, lo=0.0, hi=1.0):
    if value <= lo:
        return lo
    if value >= hi:
        return hi
    return float(value)


@dataclass(frozen=True)
class Zone:
    """
    A rectangle of the frame mapped to a control axis.

    ``inner_x`` is the edge shared with the other zone (reads 0 horizontally),
    ``outer_x`` the far edge (reads 1). ``top``/``bottom`` bound the zone,
    ``range_top``/``range_bottom`` are the part of it that reads 1/0 vertically.
    """

    inner_x: float
    outer_x: float
    top: float
    bottom: float
    range_top: float
    range_bottom: float

    def contains_x(self, x) -> bool:
        return min(self.inner_x, self.outer_x) <= x <= max(self.inner_x, self.outer_x)

    def contains_y(self, y) -> bool:
        return self.top <= y <= self.bottom

    def horizontal(self, x) -> float:
        if not self.contains_x(x):
            return 0.0
        return _clip(compute_percentage(x, self.inner_x, self.outer_x))

    def vertical(self, y) -> float:
        if not self.contains_y(y):
            return 0.0
        return _clip(compute_percentage(y, self.range_bottom, self.range_top))

    def read(self, x, y) -> HandReading:
        return HandReading(vertical=self.vertical(y), horizontal=self.horizontal(x))


@dataclass(frozen=True)
class ZoneLayout:
    """Zone geometry of a ``width`` x ``height`` frame."""

    width: int
    height: int
    zone_offset: float = ZONE_OFFSET
    zone_factor: float = ZONE_FACTOR

    @property
    def zone_width(self) -> float:
        return self.width * 0.5

    @property
    def zone_height(self) -> float:
        return self.height * self.zone_factor

    def notes_range(
        self,
        scale: float = DFLT_NOTES_RANGE_SCALE,
        offset: float = DFLT_NOTES_RANGE_OFFSET,
    ) -> Tuple[float, float]:
        """
        The ``(top, bottom)`` pixel rows of the pitch sub-range.

        ``scale`` stretches the range upwards from the bottom of the zone and
        ``offset`` (0 to 1) slides it down.

        >>> ZoneLayout(800, 600).notes_range(0.5, 0.0)
        (220.0, 420.0)
        >>> ZoneLayout(800, 600).notes_range(0.5, 0.5)
        (320.0, 520.0)
        """
        top = self.zone_height - (self.zone_height * scale) + self.zone_offset
        shift = (self.zone_height - top) * offset
        return top + shift, self.zone_height + shift

    def zones(
        self,
        scale: float = DFLT_NOTES_RANGE_SCALE,
        offset: float = DFLT_NOTES_RANGE_OFFSET,
    ) -> Tuple[Zone, Zone]:
        """The ``(left_zone, right_zone)`` pair; only the right zone uses the range."""
        range_top, range_bottom = self.notes_range(scale, offset)
        left_zone = Zone(
            inner_x=self.zone_width,
            outer_x=self.zone_offset,
            top=self.zone_offset,
            bottom=self.zone_height,
            range_top=self.zone_offset,
            range_bottom=self.zone_height,
        )
        right_zone = Zone(
            inner_x=self.zone_width,
            outer_x=self.width - self.zone_offset,
            top=self.zone_offset,
            bottom=self.zone_height,
            range_top=range_top,
            range_bottom=range_bottom,
        )
        return left_zone, right_zone


def normalize_positions(left_wrist, right_wrist, left_zone, right_zone):
    """
    Read the two wrists against their zones.

    The camera image is mirrored, so the ``left_wrist`` keypoint (the user's
    left hand, seen on the right of the screen) is read by the right zone and
    the ``right_wrist`` keypoint by the left zone. Keypoints need ``x`` and
    ``y`` attributes.

    Returns a ``NormalizedPosition`` whose ``right`` reading comes from the right
    zone and ``left`` reading from the left zone. Axes where a wrist is outside
    its zone read 0.

    >>> from veremin.poses import Keypoint
    >>> left_zone, right_zone = ZoneLayout(800, 600).zones()
    >>> position = normalize_positions(
    ...     Keypoint('left_wrist', 790, 10, 0.9),
    ...     Keypoint('right_wrist', 10, 420, 0.9),
    ...     left_zone,
    ...     right_zone,
    ... )
    >>> position.right
    HandReading(vertical=1.0, horizontal=1.0)
    >>> position.left
    HandReading(vertical=0.0, horizontal=1.0)
    """
    return NormalizedPosition(
        right=right_zone.read(left_wrist.x, left_wrist.y),
        left=left_zone.read(right_wrist.x, right_wrist.y),
    )
