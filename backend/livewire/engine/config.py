"""Engine configuration — fixed cost weights and interaction tunables."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScissorsConfig:
    """Constants shared by the cost model, search and cooling controller."""

    # Number of discrete link costs; link costs live in [0, m - 1]
    m: int = 256

    # Feature weights (pixel-value and training terms are reserved at 0)
    w_zero_crossing: float = 0.3
    w_gradient_magnitude: float = 0.3
    w_gradient_direction: float = 0.1

    # Path cooling
    redraw_lower_threshold: int = 200
    time_lower_threshold: float = 100.0
    min_cooled_segment_length: int = 10

    # Interaction
    snap_radius: int = 7
    steps_per_tick: int = 1000

    @property
    def max_weighted_cost(self) -> float:
        """Largest weighted cost: every feature term at 1.0."""
        return self.w_zero_crossing + self.w_gradient_magnitude + self.w_gradient_direction
