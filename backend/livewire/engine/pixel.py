"""Pixel coordinates and the 8-neighbourhood."""

from __future__ import annotations

from typing import NamedTuple


class Pixel(NamedTuple):
    x: int
    y: int


# (dx, dy) in row-major order around the centre pixel
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)

ORTHOGONAL_OFFSETS: tuple[tuple[int, int], ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))


def neighbor_index(dx: int, dy: int) -> int | None:
    """Position of an offset in NEIGHBOR_OFFSETS, or None for a non-neighbour step."""
    try:
        return NEIGHBOR_OFFSETS.index((dx, dy))
    except ValueError:
        return None


def clamp_pixel(pixel: Pixel, width: int, height: int) -> Pixel:
    return Pixel(max(0, min(pixel.x, width - 1)), max(0, min(pixel.y, height - 1)))
