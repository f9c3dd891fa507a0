import pytest

from veremin.chords import (
    CHROMATIC_INTERVALS,
    DFLT_BASE_NOTE,
    chords,
    midi_to_freq,
    n_scale_steps,
    note_from_selector,
    note_name,
    resolve_chord_intervals,
    velocity_from_selector,
)


@pytest.mark.parametrize('name', sorted(chords))
def test_chords_are_increasing_from_the_root(name):
    intervals = chords[name]
    assert intervals[0] == 0
    assert list(intervals) == sorted(set(intervals))


def test_unknown_and_default_chords_mean_no_quantization():
    assert resolve_chord_intervals('default') == ()
    assert resolve_chord_intervals('') == ()
    assert resolve_chord_intervals(None) == ()
    assert resolve_chord_intervals('lydian_dominant') == ()
    assert resolve_chord_intervals('minor0') == chords['minor0']


def test_note_from_selector_uses_the_chromatic_set_by_default():
    assert note_from_selector(0.0) == DFLT_BASE_NOTE
    assert note_from_selector(0.5) == DFLT_BASE_NOTE + int(0.5 * len(CHROMATIC_INTERVALS))
    assert note_from_selector(1.0) == DFLT_BASE_NOTE + CHROMATIC_INTERVALS[-1]


def test_note_from_selector_snaps_to_chord_intervals():
    minor0 = chords['minor0']
    notes = {note_from_selector(i / 100, minor0) for i in range(101)}
    assert notes == {DFLT_BASE_NOTE + interval for interval in minor0}
    assert note_from_selector(1.0, minor0) == DFLT_BASE_NOTE + minor0[-1]


def test_note_from_selector_clamps_the_selector():
    assert note_from_selector(-1.0, (0, 7)) == DFLT_BASE_NOTE
    assert note_from_selector(3.0, (0, 7)) == DFLT_BASE_NOTE + 7
    assert note_from_selector(0.5, (0, 7), base_note=60) == 67


def test_velocity_from_selector_stays_in_midi_range():
    assert velocity_from_selector(0.0) == 1
    assert velocity_from_selector(1.0) == 127
    assert velocity_from_selector(2.0) == 127
    assert velocity_from_selector(0.25) == 32


def test_midi_to_freq_doubles_every_octave():
    assert midi_to_freq(69) == 440.0
    assert midi_to_freq(57) == pytest.approx(220.0)
    assert midi_to_freq(60) == pytest.approx(261.6256, rel=1e-6)


def test_n_scale_steps():
    assert n_scale_steps(()) == len(CHROMATIC_INTERVALS)
    assert n_scale_steps(chords['major0']) == len(chords['major0'])


@pytest.mark.parametrize(
    'note, name', [(DFLT_BASE_NOTE, 'C2'), (60, 'C4'), (69, 'A4'), (61, 'C#4'), (96, 'C7')]
)
def test_note_name(note, name):
    assert note_name(note) == name
