"""
Demonstration of the data flow: poses -> slots -> ball estimate -> events -> stats.

No video or pose model is needed: a scripted detector replays a short
sequence (a player dribbling, then kicking, then a goalkeeper holding the
ball at the goal mouth) on a 1280x720 canvas. Real runs use
``python -m matchpose.main`` with a YOLO pose model instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from matchpose.analyzer import MatchAnalyzer
from matchpose.config import Config
from matchpose.data_structures import FrameRef, Keypoint, Pose
from matchpose.stats_export import StatsHistory

WIDTH, HEIGHT, FPS = 1280, 720, 25.0


def _pose(nose_x: float, nose_y: float, left_ankle_y: float, right_ankle_y: float) -> Pose:
    return Pose(
        keypoints=[
            Keypoint("nose", nose_x, nose_y, 0.95),
            Keypoint("left_wrist", nose_x - 25, nose_y + 60, 0.9),
            Keypoint("right_wrist", nose_x + 25, nose_y + 60, 0.85),
            Keypoint("left_knee", nose_x - 10, nose_y + 110, 0.9),
            Keypoint("right_knee", nose_x + 10, nose_y + 110, 0.9),
            Keypoint("left_ankle", nose_x - 10, left_ankle_y, 0.9),
            Keypoint("right_ankle", nose_x + 10, right_ankle_y, 0.8),
        ]
    )


class ScriptedDetector:
    """
    Replays a fixed list of poses, one per sampled frame.
    """

    def __init__(self, poses: List[Optional[Pose]]) -> None:
        self._poses = list(poses)

    def initialize(self) -> None:
        pass

    def estimate(self, frame: FrameRef) -> Optional[Pose]:
        return self._poses.pop(0) if self._poses else None

    def dispose(self) -> None:
        self._poses.clear()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")

    script: List[Optional[Pose]] = [
        # Dribbling: ankles far below the head, legs nearly straight.
        _pose(600.0, 300.0, 460.0, 455.0),
        # Kick with the right leg.
        _pose(640.0, 300.0, 440.0, 480.0),
        None,
        # Goalkeeper at the left edge.
        _pose(60.0, 330.0, 450.0, 450.0),
    ]
    config = Config(output_dir=Path("outputs") / "demo")
    history = StatsHistory(fps=FPS, team_split=config.team_split)

    with MatchAnalyzer(detector=ScriptedDetector(script), config=config) as analyzer:
        for idx in range(60):
            frame = FrameRef(image=None, width=WIDTH, height=HEIGHT, timestamp_s=idx / FPS, frame_index=idx)
            history.record(analyzer.analyze_frame(frame))

    history.to_json(config.stats_dir / "game_stats.json")
    history.timeline_to_csv(config.stats_dir / "timeline.csv")

    final = history.final
    if final is not None:
        print("Goals:", final.goals, "Passes:", final.total_passes)
        print("Possession:", final.possession)
        for row in history.player_rows():
            print(row)


if __name__ == "__main__":
    main()
