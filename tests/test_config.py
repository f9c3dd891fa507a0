import pytest

from veremin.chords import NO_CHORD_INTERVALS, chords
from veremin.config import (
    ARCHITECTURES,
    CANVAS_LAYERS,
    NOTE_DURATION_RANGE,
    Settings,
    next_choice,
)


def test_defaults():
    settings = Settings()
    assert settings.algorithm == 'multi-pose'
    assert settings.input.architecture == '0.75'
    assert settings.output_device == 'synth'
    assert settings.chord_intervals == 'minor0'
    assert settings.change_to_architecture is None
    assert all(getattr(settings.canvas, layer) for layer in CANVAS_LAYERS)


def test_next_choice_wraps_around():
    assert next_choice('b', 'abc') == 'c'
    assert next_choice('c', 'abc') == 'a'
    assert next_choice('a', 'abc', -1) == 'c'
    assert next_choice('z', 'abc') == 'a'


def test_algorithm_selects_the_detection_thresholds():
    settings = Settings()
    assert settings.detection_thresholds() == (0.15, 0.1)
    settings.toggle_algorithm()
    assert not settings.is_multi_pose
    assert settings.detection_thresholds() == (0.1, 0.5)
    settings.set_min_part_confidence(0.7)
    assert settings.single_pose_detection.min_part_confidence == 0.7
    assert settings.multi_pose_detection.min_part_confidence == 0.1
    with pytest.raises(ValueError):
        settings.set_algorithm('many-pose')


def test_architecture_change_is_a_one_shot_flag():
    settings = Settings()
    settings.cycle_architecture()
    assert settings.input.architecture == ARCHITECTURES[3]
    assert settings.change_to_architecture == ARCHITECTURES[3]
    assert settings.take_architecture_change() == ARCHITECTURES[3]
    assert settings.change_to_architecture is None
    with pytest.raises(ValueError):
        settings.set_architecture('2.00')
    assert settings.change_to_architecture is None


def test_numeric_settings_are_clamped():
    settings = Settings()
    settings.set_note_duration(10)
    assert settings.note_duration == NOTE_DURATION_RANGE[0]
    settings.set_note_duration(10_000)
    assert settings.note_duration == NOTE_DURATION_RANGE[1]
    settings.set_notes_range_offset(-0.5)
    assert settings.notes_range_offset == 0.0
    settings.set_image_scale_factor(3)
    assert settings.input.image_scale_factor == 1.0
    settings.set_max_pose_detections(0)
    assert settings.multi_pose_detection.max_pose_detections == 1
    settings.set_min_pose_confidence(1.5)
    assert settings.multi_pose_detection.min_pose_confidence == 1.0


def test_output_stride_choices():
    settings = Settings()
    settings.cycle_output_stride()
    assert settings.input.output_stride == 32
    settings.set_output_stride('8')
    assert settings.input.output_stride == 8
    with pytest.raises(ValueError):
        settings.set_output_stride(12)


def test_chord_intervals_cycle_through_no_chord_and_every_chord():
    settings = Settings()
    seen = set()
    for _ in range(len(chords) + 1):
        settings.cycle_chord_intervals()
        seen.add(settings.chord_intervals)
    assert seen == {NO_CHORD_INTERVALS, *chords}
    assert settings.chord_intervals == 'minor0'


def test_output_settings():
    settings = Settings()
    settings.set_output_device('IAC Driver Bus 1')
    assert settings.output_device == 'IAC Driver Bus 1'
    settings.set_output_device(None)
    assert settings.output_device == 'synth'


def test_toggle_layer():
    settings = Settings()
    settings.toggle_layer('show_video')
    assert settings.canvas.show_video is False
    settings.toggle_layer('show_video')
    assert settings.canvas.show_video is True
    with pytest.raises(ValueError):
        settings.toggle_layer('show_everything')
