"""Domain exceptions for the live-wire engine.

Numeric anomalies (flat images, unreachable pixels, out-of-range links) are
not exceptions; they resolve to substitutions or ``None`` results. These
classes cover caller mistakes only.
"""

from __future__ import annotations


class LiveWireError(Exception):
    """Base class for all live-wire errors."""


class InvalidImageError(LiveWireError, ValueError):
    """Intensity data that cannot be used as an image source."""


class PixelOutOfBoundsError(LiveWireError, IndexError):
    """A pixel that must lie inside the image does not."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"Pixel ({x}, {y}) outside {width}x{height} image")
        self.x = x
        self.y = y


class ImageTooLargeError(LiveWireError, ValueError):
    """An image with more pixels than the caller allows."""

    def __init__(self, width: int, height: int, max_pixels: int) -> None:
        super().__init__(f"Image has {width * height} pixels ({width}x{height}); limit is {max_pixels}")
        self.width = width
        self.height = height
        self.max_pixels = max_pixels
