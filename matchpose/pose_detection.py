"""
Pose detection utilities using YOLO pose models.

This module wraps an underlying pose backend (ultralytics YOLO pose) behind
a small capability interface: ``initialize()``, ``estimate(frame)`` and
``dispose()``. The analyzer only depends on :class:`PoseDetector`, so tests
can drive the whole pipeline with a deterministic fake.

The main entrypoint is :func:`create_pose_detector`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

import numpy as np

from .config import Config
from .data_structures import FrameRef, Pose

try:
    from ultralytics import YOLO  # type: ignore[import-not-found]
except ImportError:  # pragma: no cover - optional dependency
    YOLO = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class SetupError(RuntimeError):
    """
    Raised when the pose model or its resources cannot be initialized.
    """


class PoseDetector(Protocol):
    """
    Protocol for pose detector implementations.
    """

    def initialize(self) -> None:
        """
        Load models/resources. Raises :class:`SetupError` on failure.
        """
        ...

    def estimate(self, frame: FrameRef) -> Optional[Pose]:
        """
        Detect at most one pose in the frame.

        Returns:
            The detected pose, or None when nobody was found.
        """
        ...

    def dispose(self) -> None:
        """
        Release models/resources held by the detector.
        """
        ...


@dataclass
class YoloPoseDetector:
    """
    Single-person pose detector backed by an ultralytics YOLO pose model.

    Attributes:
        model_path: Path to the YOLO pose weights file.
        conf_threshold: Minimum person confidence.

    Note:
        When several people are found, the one with the highest box
        confidence is returned.
    """

    model_path: str
    conf_threshold: float = 0.4

    def __post_init__(self) -> None:
        self._model: Any = None

    @property
    def is_ready(self) -> bool:
        return self._model is not None

    def initialize(self) -> None:
        if YOLO is None:
            raise SetupError(
                "ultralytics is not installed. Install it with `pip install ultralytics`."
            )
        try:
            self._model = YOLO(self.model_path)
        except Exception as exc:
            raise SetupError(
                f"Failed to load pose weights '{Path(self.model_path).name}': {exc}"
            ) from exc
        logger.info("Loaded pose model %s", self.model_path)

    def estimate(self, frame: FrameRef) -> Optional[Pose]:
        if self._model is None:
            raise RuntimeError("YoloPoseDetector.estimate called before initialize().")
        if frame.image is None:
            raise ValueError("YoloPoseDetector.estimate requires a decoded frame image.")

        results = self._model(frame.image, conf=self.conf_threshold, verbose=False)
        if not results:
            return None
        result = results[0]
        keypoints = result.keypoints
        if keypoints is None or keypoints.xy is None:
            return None

        xy = keypoints.xy.cpu().numpy()
        if xy.size == 0:
            return None
        conf = keypoints.conf.cpu().numpy() if keypoints.conf is not None else None

        idx = 0
        boxes = result.boxes
        if xy.shape[0] > 1 and boxes is not None and boxes.conf is not None:
            idx = int(np.argmax(boxes.conf.cpu().numpy()))

        return Pose.from_arrays(xy[idx], conf[idx] if conf is not None else None)

    def dispose(self) -> None:
        self._model = None


def create_pose_detector(config: Config) -> PoseDetector:
    """
    Factory for creating the configured pose detector.

    The detector is returned uninitialized; call ``initialize()`` (or let
    :class:`matchpose.analyzer.MatchAnalyzer` do it) before use.
    """
    return YoloPoseDetector(
        model_path=str(config.pose_model_path),
        conf_threshold=config.pose_conf_threshold,
    )
