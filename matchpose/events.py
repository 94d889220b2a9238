"""
Discrete match events derived from ball positions and player positions.

Possession: a player holds the ball when within ``possession_radius_px`` of
it. Whether the player *had* the ball is judged from the player's current
position against the previous ball position, not from the player's previous
position.

Pass: the ball moved more than ``pass_speed_px`` since the previous frame,
regardless of who holds it.

Goal: the ball lies inside a goal mouth at either horizontal edge of the
frame. Counting is level-triggered by default (every frame inside the mouth
counts); ``edge_triggered=True`` counts only the frame the ball enters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

from .config import Config
from .data_structures import Point
from .utils.geometry import Rect, euclidean_distance


class PossessionChange(NamedTuple):
    had: bool
    has: bool

    @property
    def recovered(self) -> bool:
        return not self.had and self.has

    @property
    def lost(self) -> bool:
        return self.had and not self.has


@dataclass
class EventDetector:
    """
    Stateless event classifier.

    Attributes:
        possession_radius_px: Player-to-ball distance for possession.
        pass_speed_px: Ball displacement per frame that marks a pass.
        goal_width_ratio: Goal-mouth width as a fraction of frame width.
        goal_height_ratio: Goal-mouth height as a fraction of frame height.
        edge_triggered: Count goals only on entry into the goal mouth.
    """

    possession_radius_px: float = 30.0
    pass_speed_px: float = 50.0
    goal_width_ratio: float = 0.05
    goal_height_ratio: float = 0.25
    edge_triggered: bool = False

    @classmethod
    def from_config(cls, config: Config) -> "EventDetector":
        return cls(
            possession_radius_px=config.possession_radius_px,
            pass_speed_px=config.pass_speed_px,
            goal_width_ratio=config.goal_width_ratio,
            goal_height_ratio=config.goal_height_ratio,
            edge_triggered=config.edge_triggered_goals,
        )

    def in_possession(self, player: Point, ball: Optional[Point]) -> bool:
        if ball is None:
            return False
        return euclidean_distance(player, ball) < self.possession_radius_px

    def possession_change(
        self, player: Point, ball: Point, previous_ball: Optional[Point]
    ) -> PossessionChange:
        return PossessionChange(
            had=self.in_possession(player, previous_ball),
            has=self.in_possession(player, ball),
        )

    def is_pass(self, ball: Optional[Point], previous_ball: Optional[Point]) -> bool:
        if ball is None or previous_ball is None:
            return False
        return euclidean_distance(previous_ball, ball) > self.pass_speed_px

    def goal_mouths(self, width: float, height: float) -> Tuple[Rect, Rect]:
        mouth_w = width * self.goal_width_ratio
        mouth_h = height * self.goal_height_ratio
        top = (height - mouth_h) / 2
        bottom = (height + mouth_h) / 2
        return (
            Rect(float("-inf"), top, mouth_w, bottom),
            Rect(width - mouth_w, top, float("inf"), bottom),
        )

    def is_goal(self, ball: Optional[Point], width: float, height: float) -> bool:
        """
        True when the ball lies strictly inside either goal mouth.
        """
        if ball is None:
            return False
        return any(mouth.contains(ball) for mouth in self.goal_mouths(width, height))

    def count_goal(self, in_goal: bool, was_in_goal: bool) -> bool:
        """
        Whether a frame with the ball ``in_goal`` adds to the goal count.
        """
        if not in_goal:
            return False
        if self.edge_triggered:
            return not was_in_goal
        return True
