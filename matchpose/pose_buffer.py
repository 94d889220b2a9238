"""
Round-robin assignment of detected poses to roster slots.

There is no appearance or motion matching here: each sampled detection is
written into the next slot of a fixed-size ring, and every slot keeps its
last pose until the ring comes back around. Stale poses are reused as-is.
Replacing this with a real tracker changes what a "player" means in the
statistics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import MIN_ROSTER_SIZE
from .data_structures import Pose

logger = logging.getLogger(__name__)

SlotPose = Tuple[int, Pose]


@dataclass
class PoseAssignmentBuffer:
    """
    Cache of the most recent pose per roster slot.

    Attributes:
        roster_size: Number of slots (N).
        sample_every: Only every K-th frame is sampled.
    """

    roster_size: int = 22
    sample_every: int = 10

    frame_count: int = field(default=0, init=False)
    next_slot: int = field(default=0, init=False)
    _slots: List[Optional[Pose]] = field(default_factory=list, init=False)  # type: ignore[misc]

    def __post_init__(self) -> None:
        if self.roster_size < MIN_ROSTER_SIZE:
            raise ValueError(f"roster_size must be >= {MIN_ROSTER_SIZE}")
        if self.sample_every < 1:
            raise ValueError("sample_every must be >= 1")
        self._slots = [None] * self.roster_size

    def should_sample(self) -> bool:
        """
        True when the upcoming :meth:`update` call is a sampling frame.
        """
        return self.frame_count % self.sample_every == 0

    def update(self, detection: Optional[Pose]) -> List[SlotPose]:
        """
        Advance one frame, storing ``detection`` when this is a sampling frame.

        Detections passed on non-sampling frames are ignored. Returns every
        cached pose as ``(slot_id, pose)`` in slot order.
        """
        if self.should_sample() and detection is not None:
            slot = self.next_slot
            self._slots[slot] = detection
            self.next_slot = (slot + 1) % self.roster_size
            logger.debug("Frame %d: pose assigned to slot %d", self.frame_count, slot)
        self.frame_count += 1
        return self.poses()

    def poses(self) -> List[SlotPose]:
        return [(slot, pose) for slot, pose in enumerate(self._slots) if pose is not None]
