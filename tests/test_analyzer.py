"""
Session-level tests driving MatchAnalyzer with a scripted pose detector.
"""

import pytest

from matchpose.analyzer import MatchAnalyzer
from matchpose.config import Config
from matchpose.data_structures import PossessionSplit
from matchpose.pose_detection import SetupError
from tests.conftest import FakePoseDetector, frame, make_pose, standing_pose


def keeper_holding_ball_in_goal():
    return make_pose(
        nose=(40.0, 260.0),
        scores={"left_wrist": 0.9, "right_wrist": 0.8},
        left_wrist=(30.0, 300.0),
        right_wrist=(45.0, 310.0),
    )


class TestLifecycle:

    def test_setup_failure_propagates(self):
        detector = FakePoseDetector(fail_setup=True)
        analyzer = MatchAnalyzer(detector=detector)
        with pytest.raises(SetupError):
            analyzer.setup()
        assert not analyzer.is_ready
        with pytest.raises(RuntimeError):
            analyzer.analyze_frame(frame(0))
        analyzer.dispose()
        assert detector.disposed == 0

    def test_context_manager_disposes_once(self, fake_detector):
        with MatchAnalyzer(detector=fake_detector) as analyzer:
            assert fake_detector.initialized
            analyzer.analyze_frame(frame(0))
        analyzer.dispose()
        assert fake_detector.disposed == 1

    def test_restart_clears_stats_but_keeps_detector(self, fake_detector):
        fake_detector.default = standing_pose()
        with MatchAnalyzer(detector=fake_detector) as analyzer:
            analyzer.analyze_frame(frame(0))
            assert len(analyzer.snapshot().players) == 1
            analyzer.restart()
            assert analyzer.snapshot().players == []
            assert analyzer.buffer.frame_count == 0
            stats = analyzer.analyze_frame(frame(1))
        assert [p.slot_id for p in stats.players] == [0]


class TestFramePipeline:

    def test_detector_called_on_cadence(self, fake_detector):
        fake_detector.default = standing_pose()
        with MatchAnalyzer(detector=fake_detector) as analyzer:
            for idx in range(30):
                stats = analyzer.analyze_frame(frame(idx))
        assert fake_detector.calls == 3
        assert [p.slot_id for p in stats.players] == [0, 1, 2]

    def test_timestamp_follows_frames(self, fake_detector):
        with MatchAnalyzer(detector=fake_detector) as analyzer:
            stamps = [analyzer.analyze_frame(frame(idx)).timestamp_s for idx in range(5)]
        assert stamps == sorted(stamps)
        assert stamps[-1] == pytest.approx(4 / 25.0)

    def test_frames_without_pose_leave_counters_unchanged(self):
        detector = FakePoseDetector(script=[standing_pose()])
        with MatchAnalyzer(detector=detector) as analyzer:
            first = analyzer.analyze_frame(frame(0))
            for idx in range(1, 25):
                stats = analyzer.analyze_frame(frame(idx))
            assert analyzer.buffer.frame_count == 25
        assert stats.players == first.players
        assert (stats.goals, stats.total_passes) == (0, 0)
        assert stats.possession == PossessionSplit(50, 50)

    def test_detector_fault_returns_reset_snapshot(self):
        detector = FakePoseDetector(
            script=[standing_pose(), RuntimeError("inference crashed"), standing_pose(x=200.0)]
        )
        config = Config(sample_every=1)
        with MatchAnalyzer(detector=detector, config=config) as analyzer:
            analyzer.analyze_frame(frame(0))
            faulted = analyzer.analyze_frame(frame(1))
            recovered = analyzer.analyze_frame(frame(2))

        assert faulted.players == []
        assert (faulted.goals, faulted.total_passes) == (0, 0)
        assert faulted.possession == PossessionSplit(0, 0)
        assert [p.slot_id for p in recovered.players] == [0, 1]

    def test_keeper_holding_ball_in_goal_counts_every_frame(self, fake_detector):
        fake_detector.default = keeper_holding_ball_in_goal()
        with MatchAnalyzer(detector=fake_detector) as analyzer:
            for idx in range(5):
                stats = analyzer.analyze_frame(frame(idx))
        assert stats.goals == 5

    def test_edge_triggered_goals_count_once(self, fake_detector):
        fake_detector.default = keeper_holding_ball_in_goal()
        config = Config(edge_triggered_goals=True)
        with MatchAnalyzer(detector=fake_detector, config=config) as analyzer:
            for idx in range(5):
                stats = analyzer.analyze_frame(frame(idx))
        assert stats.goals == 1

    def test_counters_never_decrease(self):
        script = [
            make_pose(
                nose=(100.0 + 40 * i, 100.0),
                left_knee=(90.0 + 40 * i, 180.0),
                right_knee=(110.0 + 40 * i, 180.0),
                left_ankle=(90.0 + 40 * i, 250.0 if i % 2 else 220.0),
                right_ankle=(110.0 + 40 * i, 220.0 if i % 2 else 250.0),
            )
            for i in range(12)
        ]
        detector = FakePoseDetector(script=script)
        with MatchAnalyzer(detector=detector, config=Config(sample_every=1)) as analyzer:
            history = [analyzer.analyze_frame(frame(idx)) for idx in range(12)]

        for before, after in zip(history, history[1:]):
            assert after.goals >= before.goals
            assert after.total_passes >= before.total_passes
            prior = {p.slot_id: p for p in before.players}
            for p in after.players:
                if p.slot_id not in prior:
                    continue
                q = prior[p.slot_id]
                assert p.distance_covered >= q.distance_covered
                assert p.possession_frames >= q.possession_frames
                assert p.passes >= q.passes
                assert p.ball_lost >= q.ball_lost
                assert p.ball_recovered >= q.ball_recovered
