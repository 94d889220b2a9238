"""
Unit tests for distance and possession-split helpers.
"""

import pytest

from matchpose.data_structures import Point, PossessionSplit, TrackedPlayer
from matchpose.metrics import (
    compute_possession_split,
    possession_share,
    step_distance,
)
from matchpose.utils.geometry import Rect, euclidean_distance


def player(slot_id, possession_frames=0):
    return TrackedPlayer(
        slot_id=slot_id,
        position=Point(0.0, 0.0),
        possession_frames=possession_frames,
    )


class TestGeometry:

    def test_euclidean_distance(self):
        assert euclidean_distance(Point(0.0, 0.0), Point(3.0, 4.0)) == 5.0

    def test_possession_scenario_distance(self):
        assert euclidean_distance(Point(110.0, 205.0), Point(100.0, 200.0)) == pytest.approx(11.18, abs=0.01)

    def test_rect_is_strict(self):
        rect = Rect(0.0, 0.0, 10.0, 10.0)
        assert rect.contains(Point(5.0, 5.0))
        assert not rect.contains(Point(10.0, 5.0))
        assert not rect.contains(Point(5.0, 0.0))


class TestStepDistance:

    def test_first_observation_is_zero(self):
        assert step_distance(None, Point(10.0, 10.0)) == 0.0

    def test_delta(self):
        assert step_distance(Point(1.0, 1.0), Point(4.0, 5.0)) == 5.0


class TestPossessionSplit:

    def test_no_possession_keeps_previous(self):
        previous = PossessionSplit(50, 50)
        result = compute_possession_split([player(0), player(12)], 11, previous)
        assert result is previous

    def test_split_sums_to_hundred_with_rounding(self):
        players = [player(0, 1), player(12, 2)]
        result = compute_possession_split(players, 11, PossessionSplit())
        assert result == PossessionSplit(33, 67)

    def test_half_rounds_and_still_sums(self):
        players = [player(0, 1), player(1, 0), player(13, 1)]
        result = compute_possession_split(players, 11, PossessionSplit())
        assert result.team1 + result.team2 == 100

    def test_halves_round_up(self):
        players = [player(0, 1), player(12, 7)]
        assert compute_possession_split(players, 11, PossessionSplit()) == PossessionSplit(13, 87)
        players = [player(0, 1), player(12, 39)]
        assert compute_possession_split(players, 11, PossessionSplit()) == PossessionSplit(3, 97)

    def test_team_boundary_is_half_roster(self):
        players = [player(10, 1), player(11, 1)]
        assert compute_possession_split(players, 11, PossessionSplit()) == PossessionSplit(50, 50)
        players = [player(11, 4)]
        assert compute_possession_split(players, 11, PossessionSplit()) == PossessionSplit(0, 100)


class TestSummaries:

    def test_possession_share(self):
        shares = possession_share({0: player(0, 3), 1: player(1, 1)})
        assert shares == {0: 0.75, 1: 0.25}

    def test_possession_share_without_possession(self):
        assert possession_share({4: player(4)}) == {4: 0.0}
