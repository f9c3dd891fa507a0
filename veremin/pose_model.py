"""Pose estimation with MediaPipe's Pose Landmarker.

The model weights are fetched from MediaPipe's model storage the first time an
architecture is used, and cached in ``veremin.util.model_dir``.

For information on the pose landmarks, see:
* https://ai.google.dev/edge/mediapipe/solutions/vision/pose_landmarker
"""

import logging
import urllib.request
from pathlib import Path
from typing import Dict, List

import cv2
import mediapipe as mp

from veremin.poses import (
    PART_NAMES,
    Keypoint,
    ModelLoadError,
    Pose,
    make_pose,
    mirror_keypoints,
    suppress_overlapping_poses,
    valid_input_resolution,
)
from veremin.util import model_dir

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------
# Model weights
# -------------------------------------------------------------------------------

MODEL_URL_TEMPLATE = (
    "https://storage.googleapis.com/mediapipe-models/pose_landmarker/"
    "pose_landmarker_{variant}/float16/latest/pose_landmarker_{variant}.task"
)

# architecture (model size/quality selector) -> landmarker weights
ARCHITECTURES = {
    '1.01': 'heavy',
    '1.00': 'heavy',
    '0.75': 'full',
    '0.50': 'lite',
}

# MediaPipe's 33 pose landmarks, indexed by the names of the 17 keypoints we use
MEDIAPIPE_LANDMARK_IDS = {
    "nose": 0,
    "left_eye": 2,
    "right_eye": 5,
    "left_ear": 7,
    "right_ear": 8,
    "left_shoulder": 11,
    "right_shoulder": 12,
    "left_elbow": 13,
    "right_elbow": 14,
    "left_wrist": 15,
    "right_wrist": 16,
    "left_hip": 23,
    "right_hip": 24,
    "left_knee": 25,
    "right_knee": 26,
    "left_ankle": 27,
    "right_ankle": 28,
}


def model_path(architecture: str, *, model_dir: Path = model_dir) -> Path:
    """The local path of the weights of ``architecture``, downloading them if needed."""
    if architecture not in ARCHITECTURES:
        raise ModelLoadError(
            f"Unknown architecture: {architecture!r}. Choose from {list(ARCHITECTURES)}"
        )
    variant = ARCHITECTURES[architecture]
    path = Path(model_dir) / f"pose_landmarker_{variant}.task"
    if not path.exists():
        url = MODEL_URL_TEMPLATE.format(variant=variant)
        logger.info("Downloading pose model %s to %s", url, path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix('.part')
        try:
            urllib.request.urlretrieve(url, tmp_path)
        except OSError as e:
            raise ModelLoadError(f"Could not download {url}") from e
        tmp_path.replace(path)
    return path


# -------------------------------------------------------------------------------
# Landmarks to keypoints
# -------------------------------------------------------------------------------


def landmarks_to_keypoints(landmarks, width: int, height: int) -> List[Keypoint]:
    """
    Convert MediaPipe normalized landmarks to our keypoints, in pixel space of a
    ``width`` x ``height`` frame. The landmark ``visibility`` is used as score.
    """
    keypoints = []
    for name in PART_NAMES:
        lm = landmarks[MEDIAPIPE_LANDMARK_IDS[name]]
        keypoints.append(
            Keypoint(
                part=name,
                x=float(lm.x) * width,
                y=float(lm.y) * height,
                score=float(getattr(lm, 'visibility', 0.0) or 0.0),
            )
        )
    return keypoints


# -------------------------------------------------------------------------------
# Pose model
# -------------------------------------------------------------------------------


class PoseModel:
    """
    Pose estimator for one architecture.

    Landmarkers are created lazily, one per number of poses asked for, and are
    all closed by ``release``.
    """

    def __init__(self, architecture: str, *, model_dir: Path = model_dir):
        self.architecture = architecture
        self.model_path = str(model_path(architecture, model_dir=model_dir))
        self._landmarkers: Dict[int, object] = {}
        self._landmarker(1)

    def _landmarker(self, num_poses: int):
        if num_poses not in self._landmarkers:
            options = mp.tasks.vision.PoseLandmarkerOptions(
                base_options=mp.tasks.BaseOptions(model_asset_path=self.model_path),
                running_mode=mp.tasks.vision.RunningMode.IMAGE,
                num_poses=num_poses,
            )
            try:
                landmarker = mp.tasks.vision.PoseLandmarker.create_from_options(
                    options
                )
            except (RuntimeError, ValueError) as e:
                raise ModelLoadError(
                    f"Could not initialize the {self.architecture} pose model"
                ) from e
            self._landmarkers[num_poses] = landmarker
        return self._landmarkers[num_poses]

    def _estimate(
        self, frame, image_scale_factor, flip_horizontal, output_stride, num_poses
    ) -> List[Pose]:
        height, width = frame.shape[:2]
        input_size = (
            valid_input_resolution(width, image_scale_factor, output_stride),
            valid_input_resolution(height, image_scale_factor, output_stride),
        )
        img_rgb = cv2.cvtColor(cv2.resize(frame, input_size), cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=img_rgb)
        result = self._landmarker(num_poses).detect(image)

        poses = []
        for landmarks in result.pose_landmarks:
            keypoints = landmarks_to_keypoints(landmarks, width, height)
            if flip_horizontal:
                keypoints = mirror_keypoints(keypoints, width)
            poses.append(make_pose(keypoints))
        return poses

    def estimate_single_pose(
        self, frame, image_scale_factor=0.5, flip_horizontal=True, output_stride=16
    ) -> Pose:
        """The most prominent pose in ``frame`` (an empty pose if there's none)."""
        poses = self._estimate(
            frame, image_scale_factor, flip_horizontal, output_stride, num_poses=1
        )
        if not poses:
            return Pose()
        return poses[0]

    def estimate_multiple_poses(
        self,
        frame,
        image_scale_factor=0.5,
        flip_horizontal=True,
        output_stride=16,
        max_pose_detections=5,
        min_part_confidence=0.1,
        nms_radius=30.0,
    ) -> List[Pose]:
        """Up to ``max_pose_detections`` poses of ``frame``, by descending score."""
        poses = self._estimate(
            frame,
            image_scale_factor,
            flip_horizontal,
            output_stride,
            num_poses=max_pose_detections,
        )
        return suppress_overlapping_poses(
            poses,
            nms_radius=nms_radius,
            min_part_confidence=min_part_confidence,
            max_detections=max_pose_detections,
        )

    def release(self):
        """Close the landmarkers and free the resources they hold."""
        for landmarker in self._landmarkers.values():
            landmarker.close()
        self._landmarkers.clear()


def load_pose_model(architecture: str) -> PoseModel:
    logger.info("Loading pose model %s (%s)", architecture, ARCHITECTURES.get(architecture))
    return PoseModel(architecture)
