"""
Unit tests for round-robin pose slot assignment.
"""

import pytest

from matchpose.pose_buffer import PoseAssignmentBuffer
from tests.conftest import standing_pose


class TestSamplingCadence:
    """Only every K-th frame writes a slot."""

    def test_thirty_frames_give_three_updates(self):
        buffer = PoseAssignmentBuffer(roster_size=22, sample_every=10)
        for _ in range(30):
            buffer.update(standing_pose())
        assert buffer.frame_count == 30
        assert [slot for slot, _ in buffer.poses()] == [0, 1, 2]
        assert buffer.next_slot == 3

    def test_should_sample_on_multiples_of_k(self):
        buffer = PoseAssignmentBuffer(sample_every=10)
        sampled = []
        for idx in range(21):
            sampled.append(buffer.should_sample())
            buffer.update(None)
        assert [i for i, s in enumerate(sampled) if s] == [0, 10, 20]

    def test_empty_detection_does_not_advance_slot(self):
        buffer = PoseAssignmentBuffer(sample_every=1)
        buffer.update(None)
        buffer.update(standing_pose())
        assert buffer.next_slot == 1
        assert [slot for slot, _ in buffer.poses()] == [0]
        assert buffer.frame_count == 2

    def test_detection_on_non_sampling_frame_is_ignored(self):
        buffer = PoseAssignmentBuffer(sample_every=10)
        buffer.update(None)
        poses = buffer.update(standing_pose())
        assert poses == []


class TestRing:
    """Slots wrap around and keep stale poses."""

    def test_slot_pointer_wraps(self):
        buffer = PoseAssignmentBuffer(roster_size=3, sample_every=1)
        poses = [standing_pose(x=100.0 * i) for i in range(4)]
        for pose in poses:
            buffer.update(pose)
        cached = dict(buffer.poses())
        assert cached[0] is poses[3]
        assert cached[1] is poses[1]
        assert cached[2] is poses[2]
        assert buffer.next_slot == 1

    def test_stale_poses_are_reused(self):
        buffer = PoseAssignmentBuffer(roster_size=22, sample_every=10)
        pose = standing_pose()
        buffer.update(pose)
        for _ in range(50):
            result = buffer.update(None)
        assert result == [(0, pose)]

    def test_invalid_sizes_rejected(self):
        with pytest.raises(ValueError):
            PoseAssignmentBuffer(roster_size=0)
        with pytest.raises(ValueError):
            PoseAssignmentBuffer(roster_size=1)
        with pytest.raises(ValueError):
            PoseAssignmentBuffer(sample_every=0)
