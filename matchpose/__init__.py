"""
Top-level package for pose-based match statistics.

This package provides a frame-by-frame pipeline for:
- Detecting a single player pose per sampled frame.
- Assigning poses to a fixed roster of player slots in rotation.
- Estimating the ball position from body kinematics.
- Detecting possession changes, passes, and goals.
- Aggregating per-player and per-team statistics.

See :class:`matchpose.analyzer.MatchAnalyzer` for the session entry point.
"""
