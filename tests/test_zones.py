import math

import pytest

from veremin.poses import Keypoint
from veremin.zones import (
    HandReading,
    Zone,
    ZoneLayout,
    compute_percentage,
    normalize_positions,
)


@pytest.mark.parametrize(
    'value, low, high, expected',
    [
        (10, 10, 20, 0.0),
        (20, 10, 20, 1.0),
        (12.5, 10, 20, 0.25),
        (15, 20, 10, 0.5),
        (30, 10, 20, 2.0),
        (0, 10, 20, -1.0),
    ],
)
def test_compute_percentage_is_linear(value, low, high, expected):
    assert compute_percentage(value, low, high) == pytest.approx(expected)


def test_compute_percentage_non_finite_value_or_low_gives_zero():
    assert compute_percentage(math.nan, 10, 20) == 0.0
    assert compute_percentage(math.inf, 10, 20) == 0.0
    assert compute_percentage(5, -math.inf, 10) == 0.0
    assert compute_percentage(5, math.nan, 10) == 0.0


def test_compute_percentage_non_finite_high():
    # a non-finite high becomes value + 1
    assert compute_percentage(5, 5, math.inf) == 0.0
    assert compute_percentage(5, 4, math.nan) == 0.5


def test_compute_percentage_is_monotonic_with_fixed_ends():
    values = [compute_percentage(v, 10, 20) for v in range(10, 21)]
    assert values == sorted(values)
    assert (values[0], values[-1]) == (0.0, 1.0)


def test_compute_percentage_zero_span():
    assert compute_percentage(7, 7, 7) == 0.0
    assert compute_percentage(3, 7, 7) == 0.0


def test_layout_geometry():
    layout = ZoneLayout(800, 600)
    left_zone, right_zone = layout.zones()
    assert layout.zone_width == 400
    assert layout.zone_height == pytest.approx(420)
    assert (left_zone.inner_x, left_zone.outer_x) == (400, 10)
    assert (right_zone.inner_x, right_zone.outer_x) == (400, 790)
    assert left_zone.top == right_zone.top == 10
    assert right_zone.range_top == pytest.approx(10)
    assert right_zone.range_bottom == pytest.approx(420)


def test_notes_range_scale_and_offset():
    layout = ZoneLayout(800, 600)
    top, bottom = layout.notes_range(0.5, 0.0)
    assert (top, bottom) == (pytest.approx(220), pytest.approx(420))
    top, bottom = layout.notes_range(0.5, 1.0)
    # a full offset slides the range down by its own extent
    assert (top, bottom) == (pytest.approx(420), pytest.approx(620))


def test_only_the_right_zone_uses_the_sub_range():
    left_zone, right_zone = ZoneLayout(800, 600).zones(0.5, 0.0)
    assert left_zone.range_top == 10
    assert right_zone.range_top == pytest.approx(220)


def test_zone_readings_are_clamped_to_unit_interval():
    zone = Zone(
        inner_x=400, outer_x=790, top=10, bottom=420, range_top=220, range_bottom=420
    )
    # inside the zone but above the sub-range
    assert zone.vertical(100) == 1.0
    assert zone.vertical(320) == pytest.approx(0.5)
    assert zone.horizontal(595) == pytest.approx(0.5)


def test_zone_readings_are_zero_outside_the_zone():
    left_zone, right_zone = ZoneLayout(800, 600).zones()
    assert right_zone.read(200, 500) == HandReading(vertical=0.0, horizontal=0.0)
    assert right_zone.vertical(500) == 0.0
    # each axis is bounded on its own
    assert right_zone.read(200, 215).vertical == pytest.approx(0.5)
    assert left_zone.horizontal(5) == 0.0
    assert left_zone.horizontal(600) == 0.0


def test_normalize_positions_cross_maps_the_wrists():
    left_zone, right_zone = ZoneLayout(800, 600).zones()
    left_wrist = Keypoint('left_wrist', 600, 215, 0.9)
    right_wrist = Keypoint('right_wrist', 205, 500, 0.9)
    position = normalize_positions(left_wrist, right_wrist, left_zone, right_zone)
    # left_wrist is read by the right zone, right_wrist by the left zone
    assert position.right.vertical == pytest.approx(0.5)
    assert position.left.horizontal == pytest.approx(0.5)

    swapped = normalize_positions(right_wrist, left_wrist, left_zone, right_zone)
    assert swapped.right == HandReading(vertical=0.0, horizontal=0.0)
    assert swapped.left.horizontal == 0.0


def test_inner_edge_and_bottom_of_range_read_zero():
    left_zone, right_zone = ZoneLayout(800, 600).zones()
    position = normalize_positions(
        Keypoint('left_wrist', 600, right_zone.range_bottom, 0.9),
        Keypoint('right_wrist', left_zone.inner_x, 200, 0.9),
        left_zone,
        right_zone,
    )
    assert position.right.vertical == 0.0
    assert position.left.horizontal == 0.0


def test_top_of_range_and_outer_edge_read_one():
    left_zone, right_zone = ZoneLayout(800, 600).zones()
    position = normalize_positions(
        Keypoint('left_wrist', 600, right_zone.range_top, 0.9),
        Keypoint('right_wrist', left_zone.outer_x, 200, 0.9),
        left_zone,
        right_zone,
    )
    assert position.right.vertical == 1.0
    assert position.left.horizontal == 1.0
