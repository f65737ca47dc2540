"""Read-only intensity sources for feature extraction.

A source is an H×W (single channel) or H×W×3 (RGB) grid of 0-255 values that
stays immutable for the lifetime of a tracing session.
"""

from __future__ import annotations

import io
import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray
from PIL import Image, UnidentifiedImageError

from livewire.engine.errors import ImageTooLargeError, InvalidImageError

logger = logging.getLogger(__name__)

# ITU-R BT.709 luma coefficients
_LUMA = (0.2126, 0.7152, 0.0722)


class ArrayIntensitySource:
    """Intensity source backed by a numpy array."""

    def __init__(self, pixels: ArrayLike) -> None:
        try:
            data = np.asarray(pixels, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidImageError(f"Pixel data is not a numeric grid: {e}") from e

        if data.ndim == 3 and data.shape[2] == 1:
            data = data[:, :, 0]
        if not (data.ndim == 2 or (data.ndim == 3 and data.shape[2] == 3)):
            raise InvalidImageError(f"Expected HxW or HxWx3 pixels, got shape {data.shape}")
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise InvalidImageError("Image has no pixels")
        if not np.all(np.isfinite(data)) or data.min() < 0 or data.max() > 255:
            raise InvalidImageError("Pixel values must lie in 0..255")

        self._pixels = data.astype(np.uint8)
        self._pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def is_multichannel(self) -> bool:
        return self._pixels.ndim == 3

    @property
    def channel_count(self) -> int:
        return 3 if self.is_multichannel else 1

    def intensity(self, x: int, y: int) -> int:
        """Grayscale intensity; luma-weighted (truncated) for RGB sources."""
        if self.is_multichannel:
            r, g, b = (int(v) for v in self._pixels[y, x])
            return int(_LUMA[0] * r + _LUMA[1] * g + _LUMA[2] * b)
        return int(self._pixels[y, x])

    def channels(self, x: int, y: int) -> tuple[int, ...]:
        if self.is_multichannel:
            return tuple(int(v) for v in self._pixels[y, x])
        return (int(self._pixels[y, x]),)

    def channel_planes(self) -> list[NDArray[np.float64]]:
        """One float H×W plane per channel, in channel order."""
        if self.is_multichannel:
            return [self._pixels[:, :, c].astype(np.float64) for c in range(3)]
        return [self._pixels.astype(np.float64)]


def load_intensity_source(data: bytes, max_pixels: int | None = None) -> ArrayIntensitySource:
    """Decode PNG/JPEG/... bytes into a source.

    Images whose pixels all satisfy R = G = B are treated as single channel.
    With ``max_pixels`` set, the size is checked from the header before any
    pixel data is decoded.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            if max_pixels is not None and width * height > max_pixels:
                raise ImageTooLargeError(width, height, max_pixels)
            rgb = np.array(img.convert("RGB"))
    except Image.DecompressionBombError as e:
        raise InvalidImageError(f"Image rejected as a decompression bomb: {e}") from e
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"Could not decode image: {e}") from e

    is_gray = bool(np.all(rgb[:, :, 0] == rgb[:, :, 1]) and np.all(rgb[:, :, 1] == rgb[:, :, 2]))
    logger.info(
        "Decoded %dx%d image (%s)",
        rgb.shape[1],
        rgb.shape[0],
        "grayscale" if is_gray else "color",
    )
    if is_gray:
        return ArrayIntensitySource(rgb[:, :, 0])
    return ArrayIntensitySource(rgb)
