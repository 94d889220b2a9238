"""
Thin OpenCV wrapper that turns a match video into analyzer frames.

This class exposes only the essentials (fps, resolution, frame count) and an
iterator of :class:`FrameRef` objects so the rest of the codebase stays free
of OpenCV specifics. Use ``stride`` to subsample frames and ``max_frames`` to
stop early when experimenting.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Generator, Optional

import cv2

from .data_structures import FrameRef


@dataclass
class VideoReader:
    """
    Read video frames with optional subsampling.

    Attributes:
        path: Path to the input video.
        stride: Keep every N-th frame (1 = keep all).
        max_frames: Stop after this many decoded frames (None = no limit).
    """

    path: Path
    stride: int = 1
    max_frames: Optional[int] = None

    def __post_init__(self) -> None:
        if self.stride < 1:
            raise ValueError("stride must be >= 1")
        self._cap = cv2.VideoCapture(str(self.path))
        if not self._cap.isOpened():
            raise FileNotFoundError(f"Could not open video: {self.path}")

    @property
    def fps(self) -> float:
        """
        Frames per second reported by the video container (defaults to 25 if missing).
        """
        return float(self._cap.get(cv2.CAP_PROP_FPS) or 25.0)

    @property
    def frame_count(self) -> int:
        """
        Total number of frames (0 if unknown).
        """
        return int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)

    def __iter__(self) -> Generator[FrameRef, None, None]:
        """
        Iterate over frames; timestamps are derived from the frame index and fps.
        """
        fps = self.fps
        idx = 0
        while self.max_frames is None or idx < self.max_frames:
            ret, image = self._cap.read()
            if not ret:
                break
            if idx % self.stride == 0:
                height, width = image.shape[:2]
                yield FrameRef(
                    image=image,
                    width=int(width),
                    height=int(height),
                    timestamp_s=idx / fps,
                    frame_index=idx,
                )
            idx += 1

    def release(self) -> None:
        """
        Release the underlying OpenCV handle.
        """
        self._cap.release()

    def __enter__(self) -> "VideoReader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()
