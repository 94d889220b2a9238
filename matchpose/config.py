"""
Configuration utilities for the pose-based match statistics pipeline.

This module centralizes configurable parameters such as:
- Paths to input videos, pose model weights, and output directories.
- Roster size and pose sampling cadence.
- Heuristic thresholds for ball estimation and event detection.

The heuristic thresholds are tuned empirically and are kept at their
historical values so statistics stay comparable between runs. The default
`Config` dataclass can be overridden from ``config.yaml`` (see
:mod:`matchpose.main`).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional

# Two teams need at least one slot each.
MIN_ROSTER_SIZE = 2


@dataclass
class Config:
    """
    High-level configuration for a single analysis session.

    Attributes:
        input_video: Path to the input match video.
        output_dir: Directory where exported stats are stored.
        pose_model_path: Path to YOLO pose weights.
        pose_conf_threshold: Minimum person confidence for the pose detector.
        roster_size: Number of tracked player slots (N).
        sample_every: Run the pose detector on every K-th frame.
        kick_separation_px: Knee-to-ankle vertical gap that marks a kicking leg.
        kick_offset_x_px: Lateral ball offset from a kicking ankle.
        ball_offset_y_px: Vertical ball offset below a kicking/dribbling ankle.
        dribble_drop_px: Ankle drop below the reference keypoint for dribbling.
        keypoint_confidence: Minimum keypoint score for ball placement.
        goalkeeper_margin_px: Nose distance from a frame edge that marks a goalkeeper.
        possession_radius_px: Player-to-ball distance for possession.
        pass_speed_px: Ball displacement per frame that marks a pass.
        goal_width_ratio: Goal-mouth width as a fraction of frame width.
        goal_height_ratio: Goal-mouth height as a fraction of frame height.
        edge_triggered_goals: Count a goal only when the ball enters the goal mouth.
        frame_stride: Analyze every N-th decoded frame.
        max_frames: Stop after this many decoded frames (None = whole video).
        log_level: Logging level name used by the CLI.
    """

    input_video: Path = Path("data") / "sample_match.mp4"
    output_dir: Path = Path("outputs")
    pose_model_path: Path = Path("models") / "yolo11n-pose.pt"
    pose_conf_threshold: float = 0.4

    roster_size: int = 22
    sample_every: int = 10

    # Ball estimation heuristics (pixels / keypoint scores).
    kick_separation_px: float = 50.0
    kick_offset_x_px: float = 20.0
    ball_offset_y_px: float = 10.0
    dribble_drop_px: float = 150.0
    keypoint_confidence: float = 0.7
    goalkeeper_margin_px: float = 100.0

    # Event detection.
    possession_radius_px: float = 30.0
    pass_speed_px: float = 50.0
    goal_width_ratio: float = 0.05
    goal_height_ratio: float = 0.25
    edge_triggered_goals: bool = False

    frame_stride: int = 1
    max_frames: Optional[int] = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.roster_size < MIN_ROSTER_SIZE:
            raise ValueError(f"roster_size must be >= {MIN_ROSTER_SIZE}")
        if self.sample_every < 1:
            raise ValueError("sample_every must be >= 1")
        if self.frame_stride < 1:
            raise ValueError("frame_stride must be >= 1")

    def ensure_output_dirs(self) -> None:
        """
        Create output directories if they do not exist.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def stats_dir(self) -> Path:
        """
        Directory for saving per-player statistics in JSON/CSV format.
        """
        path = self.output_dir / "stats"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def team_split(self) -> float:
        """
        Slots with an id below this value belong to team 1.
        """
        return self.roster_size / 2

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """
        Build a config from a flat mapping, ignoring unknown keys.

        Values are coerced to the field types so quoted YAML scalars work;
        values that cannot be converted raise ``ValueError``.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if value is not None:
                value = _coerce(key, value)
            kwargs[key] = value
        return cls(**kwargs)


def _to_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _coerce(key: str, value: Any) -> Any:
    converter = _FIELD_TYPES.get(key)
    if converter is None:
        return value
    try:
        return converter(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for config field '{key}': {value!r}") from exc


_FIELD_TYPES: Dict[str, Callable[[Any], Any]] = {
    "input_video": Path,
    "output_dir": Path,
    "pose_model_path": Path,
    "pose_conf_threshold": float,
    "roster_size": int,
    "sample_every": int,
    "kick_separation_px": float,
    "kick_offset_x_px": float,
    "ball_offset_y_px": float,
    "dribble_drop_px": float,
    "keypoint_confidence": float,
    "goalkeeper_margin_px": float,
    "possession_radius_px": float,
    "pass_speed_px": float,
    "goal_width_ratio": float,
    "goal_height_ratio": float,
    "edge_triggered_goals": _to_bool,
    "frame_stride": int,
    "max_frames": int,
    "log_level": str,
}


DEFAULT_CONFIG = Config()
