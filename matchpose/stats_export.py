"""
Utilities for recording and serializing match statistics snapshots.

A :class:`StatsHistory` keeps one :class:`GameStats` per analyzed frame so a
session can be exported as a final per-player table (JSON/CSV) and as a
frame-by-frame timeline (CSV). Reset snapshots from faulted frames are kept
in the timeline but never replace the final table.
"""

from __future__ import annotations

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, cast

from .data_structures import GameStats, Point, PossessionSplit, TrackedPlayer
from .metrics import possession_share

PLAYER_FIELDS = [
    "slot_id",
    "team",
    "x",
    "y",
    "distance_covered_px",
    "possession_frames",
    "possession_share",
    "passes",
    "ball_lost",
    "ball_recovered",
]
TIMELINE_FIELDS = [
    "analyzed_frame",
    "timestamp_s",
    "players",
    "goals",
    "total_passes",
    "team1_pct",
    "team2_pct",
]


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _is_reset(stats: GameStats) -> bool:
    return (
        not stats.players
        and stats.possession.team1 == 0
        and stats.possession.team2 == 0
    )


@dataclass
class StatsHistory:
    """
    Container for per-frame statistics snapshots.

    Attributes:
        fps: Video frame rate of the analyzed source.
        video_path: Optional video path reference.
        team_split: Slots with an id below this value belong to team 1.
        snapshots: Recorded snapshots in analysis order.
    """

    fps: float
    video_path: str | Path | None = None
    team_split: float = 11.0
    snapshots: List[GameStats] = field(default_factory=list)  # type: ignore[misc]

    def record(self, stats: GameStats) -> None:
        self.snapshots.append(stats)

    @property
    def final(self) -> Optional[GameStats]:
        """
        Latest snapshot that is not a reset placeholder.
        """
        for stats in reversed(self.snapshots):
            if not _is_reset(stats):
                return stats
        return None

    def team_of(self, slot_id: int) -> int:
        return 1 if slot_id < self.team_split else 2

    def player_rows(self) -> List[Dict[str, Any]]:
        final = self.final
        if final is None:
            return []
        shares = possession_share({p.slot_id: p for p in final.players})
        return [
            {
                "slot_id": p.slot_id,
                "team": self.team_of(p.slot_id),
                "x": p.position.x,
                "y": p.position.y,
                "distance_covered_px": p.distance_covered,
                "possession_frames": p.possession_frames,
                "possession_share": shares[p.slot_id],
                "passes": p.passes,
                "ball_lost": p.ball_lost,
                "ball_recovered": p.ball_recovered,
            }
            for p in final.players
        ]

    def to_json(self, path: Path) -> None:
        """
        Serialize the final snapshot plus session metadata to JSON.
        """
        _ensure_parent(path)
        final = self.final
        payload: Dict[str, Any] = {
            "fps": self.fps,
            "video_path": str(self.video_path) if self.video_path is not None else None,
            "team_split": self.team_split,
            "frames_analyzed": len(self.snapshots),
            "final": final.to_dict() if final is not None else None,
        }
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    @classmethod
    def from_json(cls, path: Path) -> "StatsHistory":
        """
        Load a history holding only the final snapshot written by :meth:`to_json`.
        """
        with path.open("r", encoding="utf-8") as f:
            data: Mapping[str, object] = json.load(f)

        history = cls(
            fps=float(cast(float, data.get("fps", 0.0))),
            video_path=cast(Optional[str], data.get("video_path")),
            team_split=float(cast(float, data.get("team_split", 11.0))),
        )
        final_raw = data.get("final")
        if isinstance(final_raw, dict):
            history.record(_stats_from_dict(cast(Dict[str, Any], final_raw)))
        return history

    def to_csv(self, path: Path) -> None:
        """
        Serialize the final per-player table to CSV.
        """
        _ensure_parent(path)
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=PLAYER_FIELDS)
            writer.writeheader()
            writer.writerows(self.player_rows())

    def timeline_to_csv(self, path: Path) -> None:
        """
        Serialize one row per analyzed frame with the match-level totals.
        """
        _ensure_parent(path)
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=TIMELINE_FIELDS)
            writer.writeheader()
            for idx, stats in enumerate(self.snapshots):
                writer.writerow(
                    {
                        "analyzed_frame": idx,
                        "timestamp_s": stats.timestamp_s,
                        "players": len(stats.players),
                        "goals": stats.goals,
                        "total_passes": stats.total_passes,
                        "team1_pct": stats.possession.team1,
                        "team2_pct": stats.possession.team2,
                    }
                )


def _stats_from_dict(data: Dict[str, Any]) -> GameStats:
    players: List[TrackedPlayer] = []
    for entry in data.get("players", []):
        pos = entry["position"]
        players.append(
            TrackedPlayer(
                slot_id=int(entry["slot_id"]),
                position=Point(float(pos["x"]), float(pos["y"])),
                distance_covered=float(entry["distance_covered"]),
                possession_frames=int(entry["possession_frames"]),
                passes=int(entry["passes"]),
                ball_lost=int(entry["ball_lost"]),
                ball_recovered=int(entry["ball_recovered"]),
            )
        )
    possession = data.get("possession", {})
    return GameStats(
        players=players,
        goals=int(data.get("goals", 0)),
        total_passes=int(data.get("total_passes", 0)),
        possession=PossessionSplit(
            team1=int(possession.get("team1", 50)),
            team2=int(possession.get("team2", 50)),
        ),
        timestamp_s=float(data.get("timestamp_s", 0.0)),
    )
