"""Path cooling — detect live-wire pixels that have stayed put long enough to commit."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from livewire.engine.config import ScissorsConfig
from livewire.engine.features import FeatureMaps
from livewire.engine.pixel import Pixel


class PathStabilityTracker:
    """Per-pixel redraw counts and dwell scores for one tracing session.

    Each tick, every pixel of the previous live path gains one redraw and
    ``elapsed + G / gMax`` of score. A pixel far enough from both path ends
    that clears both lower thresholds is a cooled seed candidate.
    """

    def __init__(self, features: FeatureMaps, config: ScissorsConfig | None = None) -> None:
        self.features = features
        self.config = config or ScissorsConfig()
        shape = (features.height, features.width)
        self.redraw_count = np.zeros(shape, dtype=np.int32)
        self.score = np.zeros(shape, dtype=np.float64)

    def reset(self) -> None:
        self.redraw_count.fill(0)
        self.score.fill(0.0)

    def update(self, previous_path: Sequence[Pixel], elapsed: float) -> None:
        if not previous_path:
            return
        xs = np.fromiter((p.x for p in previous_path), dtype=np.intp, count=len(previous_path))
        ys = np.fromiter((p.y for p in previous_path), dtype=np.intp, count=len(previous_path))
        np.add.at(self.redraw_count, (ys, xs), 1)
        gain = elapsed + self.features.magnitude[ys, xs] / self.features.g_max
        np.add.at(self.score, (ys, xs), gain)

    def find_candidate(self, path: Sequence[Pixel] | None) -> Pixel | None:
        """First cooled pixel in seed → free order, or None."""
        if not path:
            return None
        margin = self.config.min_cooled_segment_length
        for p in path[margin : len(path) - margin]:
            if (
                self.redraw_count[p.y, p.x] >= self.config.redraw_lower_threshold
                and self.score[p.y, p.x] >= self.config.time_lower_threshold
            ):
                return p
        return None
