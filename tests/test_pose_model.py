from types import SimpleNamespace

import pytest

pytest.importorskip('cv2')
pytest.importorskip('mediapipe')

from veremin.pose_model import (
    ARCHITECTURES,
    MEDIAPIPE_LANDMARK_IDS,
    landmarks_to_keypoints,
    model_path,
)
from veremin.poses import PART_NAMES, ModelLoadError


def test_every_architecture_has_weights():
    assert set(ARCHITECTURES) == {'1.01', '1.00', '0.75', '0.50'}
    assert set(ARCHITECTURES.values()) == {'heavy', 'full', 'lite'}


def test_unknown_architecture():
    with pytest.raises(ModelLoadError):
        model_path('2.00')


def test_cached_weights_are_not_downloaded_again(tmp_path):
    cached = tmp_path / 'pose_landmarker_lite.task'
    cached.write_bytes(b'weights')
    assert model_path('0.50', model_dir=tmp_path) == cached


def test_landmarks_to_keypoints():
    landmarks = [
        SimpleNamespace(x=i / 40, y=0.5, visibility=0.9) for i in range(33)
    ]
    keypoints = landmarks_to_keypoints(landmarks, 800, 600)
    assert [kp.part for kp in keypoints] == list(PART_NAMES)
    left_wrist = keypoints[PART_NAMES.index('left_wrist')]
    assert left_wrist.x == pytest.approx(MEDIAPIPE_LANDMARK_IDS['left_wrist'] / 40 * 800)
    assert left_wrist.y == pytest.approx(300)
    assert left_wrist.score == 0.9
