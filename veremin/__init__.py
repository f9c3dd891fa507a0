"""

A theremin you play with your body, through a webcam.

The camera stream is run through a pose estimation model. The wrists of the
players are looked up in two zones drawn on each side of the screen: the height
of one wrist in the right zone picks the note (snapped to the chosen chord
intervals), and how far the other wrist reaches into the left zone sets the
velocity. Notes are played on a synth, or sent to a MIDI output.

Run it with the ``veremin`` command (see ``veremin --help``), or from python:

>>> from veremin import run_veremin  # doctest: +SKIP
>>> run_veremin()  # doctest: +SKIP

Here's a bit about what's in here:

* zones: Where the play zones are, and how wrist positions are read in them.
* chords: Chord intervals, and how zone readings become MIDI notes and velocities.
* notes: Note events, and the base of the note outputs (polyphony, note durations).
* audio: The pyo synth presets and the synth note output.
* midi: The MIDI note output.
* poses, pose_model: Poses, and their estimation with MediaPipe.
* loop: The frame loop, from frame to poses to note event.
* config, controls: The runtime settings, and the keys that change them.
* display: What's drawn on screen.

"""

from veremin.config import Settings
from veremin.loop import FrameLoop
from veremin.notes import MUTE, NoteEvent


def run_veremin(**kwargs):
    """Run the veremin (see ``veremin.script_utils.run_veremin``)."""
    from veremin.script_utils import run_veremin as _run_veremin

    return _run_veremin(**kwargs)
