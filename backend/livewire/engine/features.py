"""Edge feature extraction — Laplacian, gradient vector, magnitude, direction.

Every image is reduced once, on load, to a set of dense H×W feature maps that
the link cost model reads afterwards. Nothing here mutates after construction.

Colour images are processed per channel and combined:
- Laplacian: max over channels of |IL|
- Gradient (Ix, Iy, G, D'): winner-take-all from the channel with largest G,
  never blended across channels
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.ndimage import correlate

from livewire.engine.image_source import ArrayIntensitySource
from livewire.engine.pixel import Pixel, clamp_pixel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Kernels (applied as correlation, replicate padding at the border)
# ---------------------------------------------------------------------------

LAPLACIAN_KERNEL = np.array(
    [[0, 1, 0],
     [1, -4, 1],
     [0, 1, 0]],
    dtype=np.float64,
)

SOBEL_X_KERNEL = np.array(
    [[-1, 0, 1],
     [-2, 0, 2],
     [-1, 0, 1]],
    dtype=np.float64,
)

SOBEL_Y_KERNEL = np.array(
    [[-1, -2, -1],
     [0, 0, 0],
     [1, 2, 1]],
    dtype=np.float64,
)

# Magnitudes at or below this are treated as "no gradient"
GRADIENT_EPSILON = 1e-6


@dataclass(frozen=True)
class ChannelFeatures:
    """Raw filter responses for a single channel."""

    laplacian: NDArray[np.float64]
    ix: NDArray[np.float64]
    iy: NDArray[np.float64]
    magnitude: NDArray[np.float64]


@dataclass(frozen=True)
class FeatureMaps:
    """Combined per-pixel edge features of one image.

    ``direction[y, x]`` is the unit tangent (Iy, -Ix) / G, i.e. the gradient
    rotated by 90 degrees, or (0, 0) where there is no gradient.
    """

    laplacian: NDArray[np.float64]
    ix: NDArray[np.float64]
    iy: NDArray[np.float64]
    magnitude: NDArray[np.float64]
    direction: NDArray[np.float64]
    g_max: float

    @property
    def width(self) -> int:
        return int(self.magnitude.shape[1])

    @property
    def height(self) -> int:
        return int(self.magnitude.shape[0])

    def in_bounds(self, pixel: Pixel) -> bool:
        return 0 <= pixel.x < self.width and 0 <= pixel.y < self.height

    def snap(self, center: Pixel, radius: int) -> Pixel:
        """Strongest-gradient pixel in the (2r+1)² window around ``center``.

        Every window position is clamped onto the image, so a centre off the
        image searches the border strip nearest to it. Ties resolve to the
        first pixel in row-major order.
        """
        lo = clamp_pixel(Pixel(center.x - radius, center.y - radius), self.width, self.height)
        hi = clamp_pixel(Pixel(center.x + radius, center.y + radius), self.width, self.height)
        x0, x1, y0, y1 = lo.x, hi.x, lo.y, hi.y
        window = self.magnitude[y0 : y1 + 1, x0 : x1 + 1]
        row, col = np.unravel_index(int(np.argmax(window)), window.shape)
        return Pixel(x0 + int(col), y0 + int(row))


def channel_features(plane: NDArray[np.float64]) -> ChannelFeatures:
    """Filter a single channel plane against its own data."""
    il = correlate(plane, LAPLACIAN_KERNEL, mode="nearest")
    ix = correlate(plane, SOBEL_X_KERNEL, mode="nearest")
    iy = correlate(plane, SOBEL_Y_KERNEL, mode="nearest")
    return ChannelFeatures(laplacian=il, ix=ix, iy=iy, magnitude=np.hypot(ix, iy))


def tangent_direction(
    ix: NDArray[np.float64],
    iy: NDArray[np.float64],
    magnitude: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Unit vectors (Iy, -Ix) / G, zero where G <= GRADIENT_EPSILON."""
    direction = np.zeros(magnitude.shape + (2,), dtype=np.float64)
    strong = magnitude > GRADIENT_EPSILON
    direction[strong, 0] = iy[strong] / magnitude[strong]
    direction[strong, 1] = -ix[strong] / magnitude[strong]
    return direction


def combine_channels(channels: list[ChannelFeatures]) -> tuple[NDArray[np.float64], ...]:
    """Merge per-channel responses into (laplacian, ix, iy, magnitude)."""
    if len(channels) == 1:
        ch = channels[0]
        return ch.laplacian, ch.ix, ch.iy, ch.magnitude

    laplacian = np.max(np.abs(np.stack([ch.laplacian for ch in channels])), axis=0)

    magnitudes = np.stack([ch.magnitude for ch in channels])
    # argmax picks the lowest channel index on ties
    best = np.argmax(magnitudes, axis=0)[np.newaxis]
    ix = np.take_along_axis(np.stack([ch.ix for ch in channels]), best, axis=0)[0]
    iy = np.take_along_axis(np.stack([ch.iy for ch in channels]), best, axis=0)[0]
    magnitude = np.take_along_axis(magnitudes, best, axis=0)[0]
    return laplacian, ix, iy, magnitude


def extract_features(source: ArrayIntensitySource) -> FeatureMaps:
    """Compute the feature maps of an intensity source."""
    t0 = time.perf_counter()

    channels = [channel_features(plane) for plane in source.channel_planes()]
    laplacian, ix, iy, magnitude = combine_channels(channels)
    direction = tangent_direction(ix, iy, magnitude)

    g_max = float(np.max(magnitude))
    if g_max < GRADIENT_EPSILON:
        # Flat image: keep the magnitude ramp defined
        g_max = 1.0

    for arr in (laplacian, ix, iy, magnitude, direction):
        arr.setflags(write=False)

    elapsed = (time.perf_counter() - t0) * 1000
    logger.info(
        "Extracted features for %dx%d image (%d channel%s, gMax=%.2f) in %.1fms",
        source.width,
        source.height,
        len(channels),
        "" if len(channels) == 1 else "s",
        g_max,
        elapsed,
    )
    return FeatureMaps(
        laplacian=laplacian,
        ix=ix,
        iy=iy,
        magnitude=magnitude,
        direction=direction,
        g_max=g_max,
    )
