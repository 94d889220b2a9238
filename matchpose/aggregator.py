"""
Running match statistics for one analysis session.

The aggregator is the single owner of session state. Each frame is folded
into a copy of the current state and the copy is committed only if the whole
fold succeeds, so a fault on one frame never leaves totals half-updated.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Sequence

from .ball_estimator import BallEstimator
from .config import Config
from .data_structures import GameStats, Point, PossessionSplit, TrackedPlayer
from .events import EventDetector
from .metrics import compute_possession_split, step_distance
from .pose_buffer import SlotPose

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """
    Mutable totals carried from frame to frame.
    """

    players: Dict[int, TrackedPlayer] = field(default_factory=dict)  # type: ignore[misc]
    goals: int = 0
    total_passes: int = 0
    possession: PossessionSplit = field(default_factory=PossessionSplit)
    timestamp_s: float = 0.0
    previous_ball: Optional[Point] = None
    ball_in_goal: bool = False


@dataclass
class StatsAggregator:
    """
    Folds per-frame poses and ball estimates into cumulative statistics.

    Attributes:
        estimator: Ball position heuristics.
        detector: Possession/pass/goal classifier.
        team_split: Slots with an id below this value belong to team 1.
    """

    estimator: BallEstimator = field(default_factory=BallEstimator)
    detector: EventDetector = field(default_factory=EventDetector)
    team_split: float = 11.0

    state: SessionState = field(default_factory=SessionState, init=False)

    @classmethod
    def from_config(cls, config: Config) -> "StatsAggregator":
        return cls(
            estimator=BallEstimator.from_config(config),
            detector=EventDetector.from_config(config),
            team_split=config.team_split,
        )

    @property
    def previous_ball(self) -> Optional[Point]:
        return self.state.previous_ball

    def fold(
        self,
        poses: Sequence[SlotPose],
        frame_width: float,
        frame_height: float,
        timestamp_s: float,
    ) -> GameStats:
        """
        Fold one frame into the running totals and return a snapshot.

        On any exception the committed state is left untouched and a reset
        snapshot is returned.
        """
        try:
            work = copy.deepcopy(self.state)
            self._apply(work, poses, frame_width, frame_height, timestamp_s)
        except Exception:
            logger.exception("Failed to fold frame at t=%.3fs; returning reset stats", timestamp_s)
            return GameStats.reset()
        self.state = work
        return self.snapshot()

    def _apply(
        self,
        work: SessionState,
        poses: Sequence[SlotPose],
        frame_width: float,
        frame_height: float,
        timestamp_s: float,
    ) -> None:
        previous_ball = work.previous_ball
        ball = self.estimator.estimate([pose for _, pose in poses], previous_ball, frame_width)
        passing = self.detector.is_pass(ball, previous_ball)

        for slot_id, pose in poses:
            reference = pose.reference
            if reference is None:
                continue
            position = reference.point

            player = work.players.get(slot_id)
            if player is None:
                player = TrackedPlayer(slot_id=slot_id, position=position)
                work.players[slot_id] = player
            player.distance_covered += step_distance(player.position, position)
            player.position = position

            if ball is None:
                continue
            change = self.detector.possession_change(position, ball, previous_ball)
            if change.has:
                player.possession_frames += 1
                if passing:
                    player.passes += 1
                    work.total_passes += 1
                    logger.debug("Pass credited to slot %d", slot_id)
            if change.lost:
                player.ball_lost += 1
            elif change.recovered:
                player.ball_recovered += 1

        if ball is not None:
            in_goal = self.detector.is_goal(ball, frame_width, frame_height)
            if self.detector.count_goal(in_goal, work.ball_in_goal):
                work.goals += 1
                logger.debug("Goal counted at t=%.3fs (ball %s)", timestamp_s, ball)
            work.ball_in_goal = in_goal
            work.previous_ball = ball

        work.possession = compute_possession_split(
            work.players.values(), self.team_split, work.possession
        )
        work.timestamp_s = timestamp_s

    def snapshot(self) -> GameStats:
        """
        Copy of the current totals; mutating it does not affect the session.
        """
        state = self.state
        return GameStats(
            players=[replace(state.players[slot]) for slot in sorted(state.players)],
            goals=state.goals,
            total_passes=state.total_passes,
            possession=replace(state.possession),
            timestamp_s=state.timestamp_s,
        )
