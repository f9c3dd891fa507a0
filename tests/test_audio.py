import pytest

pytest.importorskip('pyo')
pytest.importorskip('hum.pyo_util')

from veremin import audio
from veremin.audio import SynthOutput, resolve_synth_preset, sine_synth, synth_presets
from veremin.chords import midi_to_freq, note_from_selector
from veremin.notes import MUTE, NoteEvent


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeSynth:
    """Stands in for hum's Synth: records the knob updates it gets."""

    instances = []

    def __init__(self, synth_func, nchnls=2):
        self.synth_func = synth_func
        self.nchnls = nchnls
        self.calls = []
        self.entered = False
        self.exited = False
        FakeSynth.instances.append(self)

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, *exc):
        self.exited = True

    def __call__(self, **knobs):
        self.calls.append(knobs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def output(monkeypatch, clock):
    FakeSynth.instances = []
    monkeypatch.setattr(audio, 'Synth', FakeSynth)
    return SynthOutput('theremin', clock=clock)


A, B = 0.2, 0.5


def freq_of(selector):
    return midi_to_freq(note_from_selector(selector))


def test_synth_starts_with_the_preset(output):
    (synth,) = FakeSynth.instances
    assert synth.entered and not synth.exited
    assert synth.synth_func is synth_presets['theremin']
    assert output.sounding is None


def test_going_back_to_a_held_note_sounds_it_again(output, clock):
    output.play_note(A, 1.0)
    clock.now = 0.05
    output.play_note(B, 1.0)
    clock.now = 0.1
    output.play_note(A, 1.0)

    synth = output.synth
    assert synth.calls[-1]['freq'] == pytest.approx(freq_of(A))
    assert synth.calls[-1]['volume'] > 0
    assert output.sounding[0] == note_from_selector(A)


def test_releasing_another_held_note_does_not_silence_the_synth(output, clock):
    for i, selector in enumerate([A, B, A]):
        clock.now = i * 0.05
        output.play_note(selector, 1.0, duration=300)
    # B (asked for at 0.05) expires at 0.35, A is held until 0.4
    clock.now = 0.36
    output.play_note(A, 1.0, duration=300)

    assert note_from_selector(B) not in output.active_notes
    assert all(call.get('volume', 1) > 0 for call in output.synth.calls)
    assert output.sounding == (note_from_selector(A), 127)


def test_alternating_notes_keep_sounding(output, clock):
    selectors = [A, B] * 6 + [A]
    for i, selector in enumerate(selectors):
        clock.now = i * 0.05
        output.play_note(selector, 1.0)
    assert output.synth.calls[-1]['freq'] == pytest.approx(freq_of(A))
    assert output.sounding[0] == note_from_selector(A)


def test_velocity_change_on_a_held_note_updates_the_volume(output, clock):
    output.play_note(A, 1.0)
    n_calls = len(output.synth.calls)
    clock.now = 0.05
    output.play_note(A, 0.5)

    assert len(output.synth.calls) == n_calls + 1
    assert output.synth.calls[-1]['volume'] == pytest.approx(0.8 * 64 / 127)
    assert output.sounding == (note_from_selector(A), 64)


def test_same_note_and_velocity_is_not_resent(output, clock):
    output.play_note(A, 1.0)
    clock.now = 0.05
    output.play_note(A, 1.0)
    assert len(output.synth.calls) == 1


def test_expired_note_silences_the_synth(output, clock):
    output.play_note(A, 1.0, duration=300)
    clock.now = 0.31
    output.release_expired()

    assert output.synth.calls[-1] == {'volume': 0.0}
    assert output.sounding is None
    assert output.active_notes == {}


def test_mute_silences_the_synth(output):
    output.play_event(NoteEvent(A, 1.0))
    assert output.play_event(MUTE) is None
    assert output.synth.calls[-1] == {'volume': 0.0}
    assert output.sounding is None


def test_set_preset_restarts_the_synth(output):
    output.play_note(A, 1.0)
    first = output.synth
    output.set_preset('sine')

    assert first.exited
    assert first.calls[-1] == {'volume': 0.0}
    second = output.synth
    assert second is not first
    assert second.entered and not second.exited
    assert second.synth_func is sine_synth
    assert output.preset == 'sine'


def test_set_preset_to_an_unknown_preset_keeps_the_synth(output):
    synth = output.synth
    with pytest.raises(ValueError):
        output.set_preset('no_such_preset')
    assert output.synth is synth
    assert not synth.exited


def test_close_exits_the_synth(output):
    output.play_note(A, 1.0)
    output.close()
    assert output.synth.exited
    assert output.active_notes == {}


def test_resolve_synth_preset():
    assert resolve_synth_preset('sine') is sine_synth
    assert resolve_synth_preset(sine_synth) is sine_synth
    with pytest.raises(ValueError):
        resolve_synth_preset('no_such_preset')
    with pytest.raises(TypeError):
        resolve_synth_preset(3)
