"""
Core data structures for pose-based match statistics.

Player identity is purely slot based: detected poses are assigned to a fixed
roster of slots in rotation, so a ``TrackedPlayer`` stands for "whoever was
written into that slot", not for a re-identified person. Positions are pixel
coordinates with a top-left origin; no calibration to pitch meters is done.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

# COCO-17 keypoint order as produced by YOLO pose models.
COCO_KEYPOINT_NAMES = (
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


@dataclass(frozen=True)
class Point:
    """
    Image coordinate in pixels (origin at top-left of the video frame).
    """

    x: float
    y: float


@dataclass(frozen=True)
class Keypoint:
    """
    Named anatomical landmark.

    Attributes:
        name: Landmark name, e.g. "left_ankle".
        x: Horizontal pixel position.
        y: Vertical pixel position.
        score: Detection confidence in [0, 1], or None when not reported.
    """

    name: str
    x: float
    y: float
    score: Optional[float] = None

    @property
    def is_scored(self) -> bool:
        """
        True when a non-zero confidence was reported for this keypoint.
        """
        return bool(self.score)

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass
class Pose:
    """
    Keypoints for one detected body in one frame.

    Look-ups return ``None`` for missing landmarks; callers treat that as
    "signal unavailable".
    """

    keypoints: List[Keypoint] = field(default_factory=list)

    def keypoint(self, name: str) -> Optional[Keypoint]:
        for kp in self.keypoints:
            if kp.name == name:
                return kp
        return None

    def scored(self, name: str) -> Optional[Keypoint]:
        """
        Like :meth:`keypoint`, but only returns landmarks with a non-zero score.
        """
        kp = self.keypoint(name)
        if kp is None or not kp.is_scored:
            return None
        return kp

    @property
    def reference(self) -> Optional[Keypoint]:
        """
        First keypoint of the pose; used as the player's position.
        """
        return self.keypoints[0] if self.keypoints else None

    @classmethod
    def from_arrays(
        cls,
        xy: np.ndarray,
        conf: Optional[np.ndarray] = None,
        names: Sequence[str] = COCO_KEYPOINT_NAMES,
    ) -> "Pose":
        """
        Build a pose from a (K, 2) coordinate array and optional (K,) scores.
        """
        keypoints: List[Keypoint] = []
        for idx, name in enumerate(names[: len(xy)]):
            score = float(conf[idx]) if conf is not None else None
            keypoints.append(
                Keypoint(name=name, x=float(xy[idx][0]), y=float(xy[idx][1]), score=score)
            )
        return cls(keypoints=keypoints)


@dataclass
class FrameRef:
    """
    Frame handed to the analyzer.

    Attributes:
        image: Decoded BGR raster (may be None for synthetic input).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp_s: Playback time in seconds.
        frame_index: Zero-based index within the source video.
    """

    image: Optional[np.ndarray]
    width: int
    height: int
    timestamp_s: float
    frame_index: int = 0


@dataclass
class TrackedPlayer:
    """
    Running statistics for one roster slot.

    Distances and counters only ever grow during a session.
    """

    slot_id: int
    position: Point
    distance_covered: float = 0.0
    possession_frames: int = 0
    passes: int = 0
    ball_lost: int = 0
    ball_recovered: int = 0

    def to_dict(self) -> Dict[str, Any]:
        row = asdict(self)
        row["position"] = {"x": self.position.x, "y": self.position.y}
        return row


@dataclass
class PossessionSplit:
    """
    Possession percentages per team; sum to 100 once possession is observed.
    """

    team1: int = 50
    team2: int = 50


@dataclass
class GameStats:
    """
    Snapshot of the match statistics after one analyzed frame.
    """

    players: List[TrackedPlayer] = field(default_factory=list)
    goals: int = 0
    total_passes: int = 0
    possession: PossessionSplit = field(default_factory=PossessionSplit)
    timestamp_s: float = 0.0

    @classmethod
    def reset(cls) -> "GameStats":
        """
        Neutral snapshot returned when a frame could not be analyzed.
        """
        return cls(possession=PossessionSplit(team1=0, team2=0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "players": [p.to_dict() for p in self.players],
            "goals": self.goals,
            "total_passes": self.total_passes,
            "possession": asdict(self.possession),
            "timestamp_s": self.timestamp_s,
        }
