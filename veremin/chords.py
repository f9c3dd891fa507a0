"""Chord interval sets, used to quantize a continuous pitch selector into notes.

Intervals are semitone offsets from ``DFLT_BASE_NOTE``.

>>> note_from_selector(0.0)
36
>>> note_from_selector(1.0)
96
>>> note_from_selector(1.0, chords['major0'])
84
"""

from typing import Iterable, Sequence, Tuple

DFLT_BASE_NOTE = 36  # C2
N_OCTAVES = 5

CHROMATIC_INTERVALS = tuple(range(12 * N_OCTAVES + 1))

DFLT_CHORD_INTERVALS = 'minor0'
NO_CHORD_INTERVALS = 'default'


def spread_over_octaves(intervals: Iterable[int], n_octaves: int = N_OCTAVES):
    """
    Repeat an octave's worth of ``intervals`` over ``n_octaves`` octaves,
    closing on the root of the top octave.

    >>> spread_over_octaves((0, 4, 7), 2)
    (0, 4, 7, 12, 16, 19, 24)
    """
    intervals = tuple(intervals)
    spread = tuple(
        12 * octave + interval for octave in range(n_octaves) for interval in intervals
    )
    return spread + (12 * n_octaves,)


chords = {
    'major0': spread_over_octaves((0, 4, 7), 4),
    'major1': spread_over_octaves((0, 4, 7, 11), 4),
    'minor0': spread_over_octaves((0, 3, 7), 4),
    'minor1': spread_over_octaves((0, 3, 7, 10), 4),
    'dominant7': spread_over_octaves((0, 4, 7, 10), 4),
    'diminished': spread_over_octaves((0, 3, 6, 9), 4),
    'augmented': spread_over_octaves((0, 4, 8), 4),
    'sus4': spread_over_octaves((0, 5, 7), 4),
    'major_scale': spread_over_octaves((0, 2, 4, 5, 7, 9, 11), 3),
    'minor_scale': spread_over_octaves((0, 2, 3, 5, 7, 8, 10), 3),
    'pentatonic': spread_over_octaves((0, 2, 4, 7, 9), 3),
    'blues': spread_over_octaves((0, 3, 5, 6, 7, 10), 3),
}


def resolve_chord_intervals(name) -> Tuple[int, ...]:
    """
    The intervals registered under ``name``.

    ``'default'``, empty or unknown names mean "no chord quantization", which is
    signaled by an empty tuple.

    >>> resolve_chord_intervals('sus4')[:4]
    (0, 5, 7, 12)
    >>> resolve_chord_intervals('default')
    ()
    >>> resolve_chord_intervals('no_such_chord')
    ()
    """
    if not name or name == NO_CHORD_INTERVALS:
        return ()
    return tuple(chords.get(name, ()))


def note_from_selector(
    selector: float,
    intervals: Sequence[int] = (),
    *,
    base_note: int = DFLT_BASE_NOTE,
) -> int:
    """
    The MIDI note picked by a ``selector`` in [0, 1].

    The selector indexes ``intervals`` (falling back to the chromatic set when
    empty); 1 picks the last interval.
    """
    intervals = tuple(intervals) or CHROMATIC_INTERVALS
    n = len(intervals)
    idx = int(min(max(selector, 0.0), 1.0) * n)
    return base_note + intervals[min(idx, n - 1)]


def velocity_from_selector(selector: float) -> int:
    """
    A MIDI velocity (1 to 127) for a ``selector`` in [0, 1].

    >>> velocity_from_selector(1.0), velocity_from_selector(0.5), velocity_from_selector(0.0)
    (127, 64, 1)
    """
    return int(min(max(round(selector * 127), 1), 127))


def midi_to_freq(note) -> float:
    """
    The frequency, in Hz, of a MIDI note (A4 = 69 = 440Hz).

    >>> midi_to_freq(69), midi_to_freq(81)
    (440.0, 880.0)
    """
    return 440.0 * 2 ** ((note - 69) / 12)


def n_scale_steps(intervals: Sequence[int]) -> int:
    """Number of distinct notes the pitch range is divided into."""
    return len(intervals) or len(CHROMATIC_INTERVALS)


NOTE_NAMES = ('C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B')


def note_name(note: int) -> str:
    """
    Scientific pitch name of a MIDI note.

    >>> note_name(60), note_name(36), note_name(70)
    ('C4', 'C2', 'A#4')
    """
    octave, pitch_class = divmod(note, 12)
    return f"{NOTE_NAMES[pitch_class]}{octave - 1}"
