"""
Ball position estimation from body kinematics.

The ball itself is never detected. Its position is inferred from player
poses with three ordered rules, evaluated pose by pose; the first rule that
fires wins:

1. Kick: one leg shows a large vertical knee-to-ankle separation, and the
   ball sits just beside that ankle.
2. Dribble: an ankle is well below the pose's reference keypoint, and the
   ball sits just under the more confident ankle.
3. Goalkeeper: if no pose fired above, a pose whose nose is near a frame edge
   is treated as the keeper and the ball is placed at the more confident wrist.

When nothing fires, the previous ball position is returned unchanged, which
gives "last known position" semantics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import Config
from .data_structures import Keypoint, Point, Pose

logger = logging.getLogger(__name__)


def _more_confident(a: Keypoint, b: Keypoint) -> Keypoint:
    # Ties go to the second keypoint.
    return a if (a.score or 0.0) > (b.score or 0.0) else b


@dataclass
class BallEstimator:
    """
    Heuristic ball locator.

    Attributes:
        kick_separation_px: Knee-to-ankle vertical gap that marks a kicking leg.
        kick_offset_x_px: Lateral ball offset from the kicking ankle.
        ball_offset_y_px: Vertical ball offset below the ankle.
        dribble_drop_px: Ankle drop below the reference keypoint for dribbling.
        keypoint_confidence: Minimum keypoint score for placing the ball.
        goalkeeper_margin_px: Nose distance from a frame edge for goalkeepers.
    """

    kick_separation_px: float = 50.0
    kick_offset_x_px: float = 20.0
    ball_offset_y_px: float = 10.0
    dribble_drop_px: float = 150.0
    keypoint_confidence: float = 0.7
    goalkeeper_margin_px: float = 100.0

    @classmethod
    def from_config(cls, config: Config) -> "BallEstimator":
        return cls(
            kick_separation_px=config.kick_separation_px,
            kick_offset_x_px=config.kick_offset_x_px,
            ball_offset_y_px=config.ball_offset_y_px,
            dribble_drop_px=config.dribble_drop_px,
            keypoint_confidence=config.keypoint_confidence,
            goalkeeper_margin_px=config.goalkeeper_margin_px,
        )

    def estimate(
        self,
        poses: Sequence[Pose],
        previous: Optional[Point],
        frame_width: float,
    ) -> Optional[Point]:
        """
        Estimate the ball position for the current frame.

        Args:
            poses: Cached poses in slot order; order decides ties between poses.
            previous: Last known ball position (None if never observed).
            frame_width: Frame width in pixels, used for goalkeeper detection.

        Returns:
            A new position, or ``previous`` itself when no rule applies.
        """
        for pose in poses:
            ball = self._from_legs(pose)
            if ball is not None:
                return ball

        keeper = self.find_goalkeeper(poses, frame_width)
        if keeper is not None:
            ball = self._from_hands(keeper)
            if ball is not None:
                logger.debug("Ball placed at goalkeeper hands: %s", ball)
                return ball

        return previous

    def _from_legs(self, pose: Pose) -> Optional[Point]:
        left_ankle = pose.scored("left_ankle")
        right_ankle = pose.scored("right_ankle")
        left_knee = pose.scored("left_knee")
        right_knee = pose.scored("right_knee")
        if left_ankle is None or right_ankle is None or left_knee is None or right_knee is None:
            return None

        ball = self._kick(left_knee, left_ankle, right_knee, right_ankle)
        if ball is not None:
            logger.debug("Kick detected, ball at %s", ball)
            return ball

        reference = pose.reference
        if reference is None:
            return None
        return self._dribble(reference, left_ankle, right_ankle)

    def _kick(
        self,
        left_knee: Keypoint,
        left_ankle: Keypoint,
        right_knee: Keypoint,
        right_ankle: Keypoint,
    ) -> Optional[Point]:
        left_gap = abs(left_knee.y - left_ankle.y)
        right_gap = abs(right_knee.y - right_ankle.y)
        if left_gap <= self.kick_separation_px and right_gap <= self.kick_separation_px:
            return None

        if left_gap > right_gap:
            ankle, direction = left_ankle, -1.0
        else:
            ankle, direction = right_ankle, 1.0
        if (ankle.score or 0.0) <= self.keypoint_confidence:
            return None
        return Point(
            ankle.x + direction * self.kick_offset_x_px,
            ankle.y + self.ball_offset_y_px,
        )

    def _dribble(
        self, reference: Keypoint, left_ankle: Keypoint, right_ankle: Keypoint
    ) -> Optional[Point]:
        floor = reference.y + self.dribble_drop_px
        low_and_confident = any(
            ankle.y > floor and (ankle.score or 0.0) > self.keypoint_confidence
            for ankle in (left_ankle, right_ankle)
        )
        if not low_and_confident:
            return None
        best = _more_confident(left_ankle, right_ankle)
        return Point(best.x, best.y + self.ball_offset_y_px)

    def find_goalkeeper(self, poses: Sequence[Pose], frame_width: float) -> Optional[Pose]:
        """
        First pose whose nose lies within the edge margin on either side.
        """
        for pose in poses:
            nose = pose.keypoint("nose")
            if nose is None:
                continue
            if nose.x < self.goalkeeper_margin_px or nose.x > frame_width - self.goalkeeper_margin_px:
                return pose
        return None

    def _from_hands(self, keeper: Pose) -> Optional[Point]:
        left_wrist = keeper.scored("left_wrist")
        right_wrist = keeper.scored("right_wrist")
        if left_wrist is None or right_wrist is None:
            return None
        if max(left_wrist.score or 0.0, right_wrist.score or 0.0) <= self.keypoint_confidence:
            return None
        best = _more_confident(left_wrist, right_wrist)
        return Point(best.x, best.y)
