"""
Movement and possession metrics computed in pixel coordinates.

Distances are raw image-space path lengths; no pitch calibration is applied,
so values are only comparable within one video.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, Optional

from .data_structures import Point, PossessionSplit, TrackedPlayer
from .utils.geometry import euclidean_distance


def step_distance(previous: Optional[Point], current: Point) -> float:
    """
    Displacement since the previous observation; zero on the first one.
    """
    if previous is None:
        return 0.0
    return euclidean_distance(previous, current)


def compute_possession_split(
    players: Iterable[TrackedPlayer],
    team_split: float,
    previous: PossessionSplit,
) -> PossessionSplit:
    """
    Recompute team possession percentages from per-slot possession frames.

    Slots with ``slot_id < team_split`` belong to team 1. When no possession
    has been observed yet, ``previous`` is returned unchanged. Halves round up
    and team 2 takes the remainder so the split always sums to 100.
    """
    team1_frames = 0
    total = 0
    for player in players:
        total += player.possession_frames
        if player.slot_id < team_split:
            team1_frames += player.possession_frames
    if total == 0:
        return previous
    team1 = int(math.floor(100.0 * team1_frames / total + 0.5))
    return PossessionSplit(team1=team1, team2=100 - team1)


def possession_share(players: Mapping[int, TrackedPlayer]) -> Dict[int, float]:
    """
    Fraction of all possession frames credited to each slot.
    """
    total = sum(p.possession_frames for p in players.values())
    if total == 0:
        return {slot_id: 0.0 for slot_id in players}
    return {slot_id: p.possession_frames / total for slot_id, p in players.items()}
