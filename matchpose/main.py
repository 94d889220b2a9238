"""
Entry point for the pose-based match statistics pipeline.

This script wires together:
- Video decoding (OpenCV)
- Single-person pose detection (YOLO pose), sampled every K-th frame
- Round-robin slot assignment, ball estimation, and event detection
- Export of per-player statistics and a per-frame timeline

It can be run from the command line, for example:

    python -m matchpose.main \\
        --video_path data/sample_match.mp4 \\
        --model_path models/yolo11n-pose.pt \\
        --output_dir outputs/

Defaults can also be set in ``config.yaml``; CLI flags take precedence.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, cast

import yaml

from .analyzer import MatchAnalyzer
from .config import DEFAULT_CONFIG, Config
from .pose_detection import PoseDetector, create_pose_detector
from .stats_export import StatsHistory
from .video_io import VideoReader

logger = logging.getLogger(__name__)


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file if it exists.

    The file is optional; when missing, an empty dict is returned.
    """
    if not config_path.exists():
        return {}
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("config.yaml must contain a top-level mapping.")
    return cast(Dict[str, Any], data)


def build_config_from_args(args: argparse.Namespace) -> Config:
    """
    Construct a :class:`Config` from optional YAML plus CLI overrides.
    """
    default_config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(args.config) if args.config is not None else default_config_path
    values = _load_yaml_config(config_path)

    overrides = {
        "input_video": args.video_path,
        "output_dir": args.output_dir,
        "pose_model_path": args.model_path,
        "frame_stride": args.frame_stride,
        "max_frames": args.max_frames,
        "sample_every": args.sample_every,
        "log_level": args.log_level,
    }
    for key, value in overrides.items():
        if value is not None:
            values[key] = value
    if args.edge_triggered_goals:
        values["edge_triggered_goals"] = True

    return Config.from_dict(values)


def run_pipeline(
    config: Config = DEFAULT_CONFIG,
    detector: Optional[PoseDetector] = None,
) -> StatsHistory:
    """
    Analyze a whole video and export the statistics.

    Raises:
        SetupError: If the pose detector cannot be initialized.
        FileNotFoundError: If the video cannot be opened.
    """
    config.ensure_output_dirs()
    detector = detector if detector is not None else create_pose_detector(config)

    with VideoReader(
        config.input_video, stride=config.frame_stride, max_frames=config.max_frames
    ) as video:
        history = StatsHistory(
            fps=video.fps,
            video_path=str(config.input_video),
            team_split=config.team_split,
        )
        with MatchAnalyzer(detector=detector, config=config) as analyzer:
            for frame in video:
                history.record(analyzer.analyze_frame(frame))

    stats_dir = config.stats_dir
    history.to_json(stats_dir / "game_stats.json")
    history.to_csv(stats_dir / "player_stats.csv")
    history.timeline_to_csv(stats_dir / "timeline.csv")
    logger.info("Exported %d frame snapshots to %s", len(history.snapshots), stats_dir)
    return history


def print_summary(history: StatsHistory) -> None:
    final = history.final
    if final is None:
        print("No frames produced statistics; nothing to summarize.")
        return
    print(
        f"Goals: {final.goals}  Passes: {final.total_passes}  "
        f"Possession: {final.possession.team1}% / {final.possession.team2}%"
    )
    print("Per-player summary:")
    for row in history.player_rows():
        print(
            f"  Slot {row['slot_id']} (team {row['team']}): "
            f"{row['distance_covered_px']:.1f} px, "
            f"possession {row['possession_frames']} frames, "
            f"passes {row['passes']}, lost {row['ball_lost']}, "
            f"recovered {row['ball_recovered']}"
        )


def main() -> None:
    """
    CLI entrypoint for running the full pipeline.

    Use ``python -m matchpose.main --help`` for available options.
    """
    parser = argparse.ArgumentParser(
        description="Pose-based match statistics (distance, possession, passes, goals).",
    )
    parser.add_argument("--video_path", type=str, help="Path to input video file.")
    parser.add_argument(
        "--output_dir",
        type=str,
        help="Directory for exported stats.",
    )
    parser.add_argument(
        "--model_path",
        type=str,
        help="Path to YOLO pose weights file.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help=(
            "Optional path to YAML config file "
            "(defaults to config.yaml in the project root)."
        ),
    )
    parser.add_argument(
        "--frame_stride",
        type=int,
        help="Analyze every N-th decoded frame.",
    )
    parser.add_argument(
        "--max_frames",
        type=int,
        help="Process only the first N frames (useful for quick tests).",
    )
    parser.add_argument(
        "--sample_every",
        type=int,
        help="Run the pose detector on every K-th analyzed frame.",
    )
    parser.add_argument(
        "--edge_triggered_goals",
        action="store_true",
        help="Count a goal only when the ball enters the goal mouth.",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )

    args = parser.parse_args()
    config = build_config_from_args(args)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s: %(message)s",
    )
    history = run_pipeline(config)
    print_summary(history)


if __name__ == "__main__":
    main()
