"""
Analysis session: wires the pose detector, slot buffer, and aggregator.

A :class:`MatchAnalyzer` lives for one analysis session. ``setup()`` must
succeed before frames are analyzed; ``dispose()`` releases the detector.
Frames are processed one at a time, fully, in the order they are given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Optional

from .aggregator import StatsAggregator
from .config import DEFAULT_CONFIG, Config
from .data_structures import FrameRef, GameStats, Pose
from .pose_buffer import PoseAssignmentBuffer
from .pose_detection import PoseDetector

logger = logging.getLogger(__name__)


@dataclass
class MatchAnalyzer:
    """
    Per-session pipeline: detector -> slot buffer -> ball/events -> stats.

    Attributes:
        detector: Pose detection capability (real model or a fake in tests).
        config: Thresholds, roster size, and sampling cadence.
    """

    detector: PoseDetector
    config: Config = field(default_factory=lambda: DEFAULT_CONFIG)

    buffer: PoseAssignmentBuffer = field(init=False)
    aggregator: StatsAggregator = field(init=False)
    _ready: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self._new_session_state()

    def _new_session_state(self) -> None:
        self.buffer = PoseAssignmentBuffer(
            roster_size=self.config.roster_size,
            sample_every=self.config.sample_every,
        )
        self.aggregator = StatsAggregator.from_config(self.config)

    @property
    def is_ready(self) -> bool:
        return self._ready

    def setup(self) -> None:
        """
        Initialize the detector. A :class:`SetupError` propagates to the caller.
        """
        self.detector.initialize()
        self._ready = True
        logger.info(
            "Analyzer ready (roster=%d, sample_every=%d)",
            self.config.roster_size,
            self.config.sample_every,
        )

    def analyze_frame(self, frame: FrameRef) -> GameStats:
        """
        Analyze one frame and return the updated statistics.

        Any failure while analyzing the frame is logged and answered with
        :meth:`GameStats.reset`; accumulated totals are left as they were.
        """
        if not self._ready:
            raise RuntimeError("MatchAnalyzer.setup() must complete before analyzing frames.")
        try:
            detection: Optional[Pose] = None
            if self.buffer.should_sample():
                detection = self.detector.estimate(frame)
                logger.debug(
                    "Frame %d sampled: %s",
                    frame.frame_index,
                    "pose found" if detection is not None else "no pose",
                )
            poses = self.buffer.update(detection)
        except Exception:
            logger.exception("Pose detection failed on frame %d", frame.frame_index)
            return GameStats.reset()
        return self.aggregator.fold(poses, frame.width, frame.height, frame.timestamp_s)

    def snapshot(self) -> GameStats:
        return self.aggregator.snapshot()

    def restart(self) -> None:
        """
        Drop accumulated statistics and slot assignments; keep the detector.
        """
        self._new_session_state()
        logger.info("Analysis restarted")

    def dispose(self) -> None:
        """
        Release the detector. No-op if setup never completed or already disposed.
        """
        if not self._ready:
            return
        self._ready = False
        self.detector.dispose()
        logger.info("Analyzer disposed")

    def __enter__(self) -> "MatchAnalyzer":
        self.setup()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.dispose()
