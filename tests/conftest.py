"""
Shared fixtures: pose builders and a scripted pose detector.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from matchpose.config import Config
from matchpose.data_structures import FrameRef, Keypoint, Pose
from matchpose.pose_detection import SetupError

FRAME_W = 1000
FRAME_H = 600


def make_pose(
    nose: Tuple[float, float] = (500.0, 100.0),
    scores: Optional[Dict[str, float]] = None,
    **points: Tuple[float, float],
) -> Pose:
    """
    Build a pose; nose is always first so it is the reference keypoint.

    Extra keypoints are passed as ``left_ankle=(x, y)`` etc. Every keypoint
    gets score 0.9 unless overridden in ``scores``.
    """
    scores = scores or {}
    kps = [Keypoint("nose", nose[0], nose[1], scores.get("nose", 0.9))]
    for name, (x, y) in points.items():
        kps.append(Keypoint(name, x, y, scores.get(name, 0.9)))
    return Pose(keypoints=kps)


def standing_pose(x: float = 500.0, y: float = 100.0) -> Pose:
    """
    Upright pose that triggers neither the kick nor the dribble rule.
    """
    return make_pose(
        nose=(x, y),
        left_knee=(x - 10, y + 80),
        right_knee=(x + 10, y + 80),
        left_ankle=(x - 10, y + 120),
        right_ankle=(x + 10, y + 120),
    )


def frame(idx: int = 0, fps: float = 25.0) -> FrameRef:
    return FrameRef(image=None, width=FRAME_W, height=FRAME_H, timestamp_s=idx / fps, frame_index=idx)


class FakePoseDetector:
    """
    Deterministic stand-in for the pose model.

    ``script`` items are returned in order, one per ``estimate`` call; an
    Exception instance is raised instead of returned.
    """

    def __init__(
        self,
        script: Sequence[object] = (),
        default: Optional[Pose] = None,
        fail_setup: bool = False,
    ) -> None:
        self.script: List[object] = list(script)
        self.default = default
        self.fail_setup = fail_setup
        self.calls = 0
        self.initialized = False
        self.disposed = 0

    def initialize(self) -> None:
        if self.fail_setup:
            raise SetupError("model weights missing")
        self.initialized = True

    def estimate(self, frame: FrameRef) -> Optional[Pose]:
        self.calls += 1
        item = self.script.pop(0) if self.script else self.default
        if isinstance(item, Exception):
            raise item
        return item  # type: ignore[return-value]

    def dispose(self) -> None:
        self.disposed += 1


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def fake_detector() -> FakePoseDetector:
    return FakePoseDetector()
