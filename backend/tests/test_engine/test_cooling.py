"""Tests for path cooling (stability tracking)."""

from __future__ import annotations

import numpy as np

from livewire.engine.config import ScissorsConfig
from livewire.engine.cooling import PathStabilityTracker
from livewire.engine.features import extract_features
from livewire.engine.image_source import ArrayIntensitySource
from livewire.engine.pixel import Pixel


def _flat_row_tracker(length: int = 30, config: ScissorsConfig | None = None) -> PathStabilityTracker:
    features = extract_features(ArrayIntensitySource(np.full((1, length), 100)))
    return PathStabilityTracker(features, config)


def test_candidate_at_exact_thresholds():
    tracker = _flat_row_tracker()
    path = [Pixel(i, 0) for i in range(25)]

    # 199 ticks over the whole path: count 199, score 99.5 everywhere
    for _ in range(199):
        tracker.update(path, 0.5)
    # Index 10 reaches the redraw threshold but stays below the time threshold
    tracker.update([path[10]], 0.0)
    # Index 11 onwards reach exactly 200 redraws and a score of exactly 100
    tracker.update(path[11:], 0.5)

    assert tracker.redraw_count[0, 10] == 200
    assert tracker.score[0, 10] == 99.5
    assert tracker.redraw_count[0, 11] == 200
    assert tracker.score[0, 11] == 100.0
    assert tracker.find_candidate(path) == Pixel(11, 0)


def test_candidate_requires_both_thresholds():
    tracker = _flat_row_tracker()
    path = [Pixel(i, 0) for i in range(25)]

    # Plenty of score, one redraw short
    for _ in range(199):
        tracker.update(path, 5.0)
    assert tracker.find_candidate(path) is None

    # Plenty of redraws, no score at all
    tracker.reset()
    for _ in range(300):
        tracker.update(path, 0.0)
    assert tracker.find_candidate(path) is None


def test_candidate_ignores_path_ends():
    tracker = _flat_row_tracker()
    path = [Pixel(i, 0) for i in range(25)]
    ends = path[:10] + path[15:]
    for _ in range(250):
        tracker.update(ends, 1.0)

    # Only indices 10..14 are eligible and none of them cooled
    assert tracker.find_candidate(path) is None

    tracker.update(path, 0.0)
    for _ in range(250):
        tracker.update(path[14:15], 1.0)
    assert tracker.find_candidate(path) == Pixel(14, 0)


def test_short_paths_have_no_candidate():
    tracker = _flat_row_tracker()
    path = [Pixel(i, 0) for i in range(20)]
    for _ in range(300):
        tracker.update(path, 1.0)

    # 20 pixels: no index is at least 10 away from both ends
    assert tracker.find_candidate(path) is None
    assert tracker.find_candidate(path + [Pixel(20, 0)]) == Pixel(10, 0)
    assert tracker.find_candidate(None) is None
    assert tracker.find_candidate([]) is None


def test_score_includes_scaled_gradient(edge_source):
    tracker = PathStabilityTracker(extract_features(edge_source))

    tracker.update([Pixel(3, 1), Pixel(0, 1)], 0.25)

    # G / gMax is 1 on the edge and 0 in the flat region
    assert tracker.score[1, 3] == 1.25
    assert tracker.score[1, 0] == 0.25
    assert tracker.redraw_count[1, 3] == 1


def test_reset_clears_history():
    tracker = _flat_row_tracker()
    tracker.update([Pixel(1, 0), Pixel(2, 0)], 3.0)
    tracker.reset()

    assert not tracker.redraw_count.any()
    assert not tracker.score.any()


def test_custom_thresholds():
    cfg = ScissorsConfig(redraw_lower_threshold=2, time_lower_threshold=0.0, min_cooled_segment_length=1)
    tracker = _flat_row_tracker(5, cfg)
    path = [Pixel(i, 0) for i in range(5)]

    tracker.update(path, 0.0)
    assert tracker.find_candidate(path) is None
    tracker.update(path, 0.0)
    assert tracker.find_candidate(path) == Pixel(1, 0)
