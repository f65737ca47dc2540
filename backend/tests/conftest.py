"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from livewire.engine.config import ScissorsConfig
from livewire.engine.image_source import ArrayIntensitySource


# Synthetic images (rows = y, columns = x)

FLAT_5X5 = np.full((5, 5), 128, dtype=np.uint8)

# Dark left half (x <= 3), bright right half (x >= 4)
VERTICAL_EDGE_8X8 = np.array([[20] * 4 + [220] * 4 for _ in range(8)], dtype=np.uint8)

# Soft step: Laplacian changes sign between x=2 and x=3 with unequal magnitudes
RAMP_ROWS = np.array([[0, 0, 60, 200, 200] for _ in range(3)], dtype=np.uint8)

RANDOM_7X6 = np.random.default_rng(7).integers(0, 256, size=(6, 7)).astype(np.uint8)

# Red is flat; the only edge is a vertical step in the blue channel
COLOR_BLUE_EDGE = np.zeros((6, 6, 3), dtype=np.uint8)
COLOR_BLUE_EDGE[:, :, 0] = 90
COLOR_BLUE_EDGE[:, :, 1] = np.array([[10, 20, 30, 40, 50, 60] for _ in range(6)])
COLOR_BLUE_EDGE[:, 3:, 2] = 250


@pytest.fixture
def flat_source() -> ArrayIntensitySource:
    return ArrayIntensitySource(FLAT_5X5)


@pytest.fixture
def edge_source() -> ArrayIntensitySource:
    return ArrayIntensitySource(VERTICAL_EDGE_8X8)


@pytest.fixture
def random_source() -> ArrayIntensitySource:
    return ArrayIntensitySource(RANDOM_7X6)


@pytest.fixture
def color_source() -> ArrayIntensitySource:
    return ArrayIntensitySource(COLOR_BLUE_EDGE)


@pytest.fixture
def exact_config() -> ScissorsConfig:
    """No cursor snapping and a step budget large enough to converge in one tick."""
    return ScissorsConfig(snap_radius=0, steps_per_tick=100_000)
