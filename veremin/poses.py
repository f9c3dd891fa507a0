"""Pose data model: keypoints, poses and the geometry helpers around them."""

from collections import namedtuple
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

# -------------------------------------------------------------------------------
# Constants
# -------------------------------------------------------------------------------

PART_NAMES = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)
PART_IDS = {name: idx for idx, name in enumerate(PART_NAMES)}

LEFT_WRIST = PART_IDS["left_wrist"]
RIGHT_WRIST = PART_IDS["right_wrist"]

CONNECTED_PART_NAMES = (
    ("left_hip", "left_shoulder"),
    ("left_elbow", "left_shoulder"),
    ("left_elbow", "left_wrist"),
    ("left_hip", "left_knee"),
    ("left_knee", "left_ankle"),
    ("right_hip", "right_shoulder"),
    ("right_elbow", "right_shoulder"),
    ("right_elbow", "right_wrist"),
    ("right_hip", "right_knee"),
    ("right_knee", "right_ankle"),
    ("left_shoulder", "right_shoulder"),
    ("left_hip", "right_hip"),
)
CONNECTED_PART_IDS = tuple(
    (PART_IDS[a], PART_IDS[b]) for a, b in CONNECTED_PART_NAMES
)

# -------------------------------------------------------------------------------
# Types
# -------------------------------------------------------------------------------

Keypoint = namedtuple('Keypoint', 'part x y score')
Keypoint.__doc__ = "A body landmark in pixel space of the source frame."


class ModelLoadError(RuntimeError):
    """Raised when the pose model can't be fetched or initialized."""


@dataclass(frozen=True)
class Pose:
    """The keypoints (in ``PART_NAMES`` order) of one detected person."""

    keypoints: Tuple[Keypoint, ...] = field(default_factory=tuple)
    score: float = 0.0

    def __getitem__(self, part_id):
        return self.keypoints[part_id]

    @property
    def left_wrist(self) -> Keypoint:
        return self.keypoints[LEFT_WRIST]

    @property
    def right_wrist(self) -> Keypoint:
        return self.keypoints[RIGHT_WRIST]


def pose_score(keypoints: Sequence[Keypoint]) -> float:
    """
    The mean of the keypoint scores.

    >>> pose_score([Keypoint('nose', 0, 0, 0.25), Keypoint('left_eye', 0, 0, 0.75)])
    0.5
    """
    if not keypoints:
        return 0.0
    return sum(kp.score for kp in keypoints) / len(keypoints)


def make_pose(keypoints: Iterable[Keypoint]) -> Pose:
    keypoints = tuple(keypoints)
    return Pose(keypoints=keypoints, score=pose_score(keypoints))


# -------------------------------------------------------------------------------
# Geometry helpers
# -------------------------------------------------------------------------------


def valid_input_resolution(size: int, scale_factor: float, output_stride: int) -> int:
    """
    The model input size for a ``size`` pixel side scaled by ``scale_factor``,
    snapped to ``output_stride`` (a multiple of the stride, plus one).

    >>> valid_input_resolution(600, 0.5, 16)
    289
    >>> valid_input_resolution(800, 1.0, 32)
    801
    """
    scaled = int(size * scale_factor)
    return max(scaled // output_stride, 1) * output_stride + 1


def mirror_keypoints(keypoints: Iterable[Keypoint], width: int) -> List[Keypoint]:
    """
    Flip keypoints horizontally in a frame ``width`` pixels wide.

    >>> mirror_keypoints([Keypoint('nose', 0, 5, 1.0)], 100)
    [Keypoint(part='nose', x=99, y=5, score=1.0)]
    """
    return [kp._replace(x=width - 1 - kp.x) for kp in keypoints]


def squared_distance(a: Keypoint, b: Keypoint) -> float:
    return (a.x - b.x) ** 2 + (a.y - b.y) ** 2


def suppress_overlapping_poses(
    poses: Iterable[Pose],
    *,
    nms_radius: float,
    min_part_confidence: float = 0.0,
    max_detections: int = None,
) -> List[Pose]:
    """
    Greedy non-maximum suppression of poses.

    Poses are visited by descending score. A pose is anchored on its most
    confident part; it is dropped if that part scores below
    ``min_part_confidence`` or lies within ``nms_radius`` pixels of the same part
    of an already kept pose.
    """
    kept = []
    radius_sq = nms_radius**2
    for pose in sorted(poses, key=lambda p: p.score, reverse=True):
        if max_detections is not None and len(kept) >= max_detections:
            break
        if not pose.keypoints:
            continue
        root_id = max(range(len(pose.keypoints)), key=lambda i: pose[i].score)
        root = pose[root_id]
        if root.score < min_part_confidence:
            continue
        if any(squared_distance(root, other[root_id]) <= radius_sq for other in kept):
            continue
        kept.append(pose)
    return kept
