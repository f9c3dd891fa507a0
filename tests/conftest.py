import numpy as np
import pytest

from veremin.poses import PART_NAMES, Keypoint, make_pose

FRAME_WIDTH, FRAME_HEIGHT = 800, 600


def _pose_with_wrists(left_wrist, right_wrist, *, score=0.9):
    """A pose whose parts all score ``score``, wrists at the given ``(x, y[, score])``."""

    def keypoint(name):
        position = {'left_wrist': left_wrist, 'right_wrist': right_wrist}.get(name)
        if position is None:
            return Keypoint(name, 400.0, 300.0, score)
        x, y, *part_score = position
        return Keypoint(name, x, y, part_score[0] if part_score else score)

    return make_pose(keypoint(name) for name in PART_NAMES)


@pytest.fixture
def pose_with_wrists():
    return _pose_with_wrists


@pytest.fixture
def frame():
    return np.zeros((FRAME_HEIGHT, FRAME_WIDTH, 3), dtype=np.uint8)
