"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    image_base64: str | None = Field(
        default=None,
        description="Base64-encoded image file (PNG, JPEG, ...)",
    )
    pixels: list[list[int]] | list[list[list[int]]] | None = Field(
        default=None,
        description="Raw intensities: rows of gray values or rows of [r, g, b]",
    )


class PointRequest(BaseModel):
    x: int = Field(..., description="Pixel column")
    y: int = Field(..., description="Pixel row")


class SeedRequest(BaseModel):
    x: int | None = Field(default=None, description="Seed column (default: current free point)")
    y: int | None = Field(default=None, description="Seed row (default: current free point)")


class TickRequest(BaseModel):
    elapsed: float | None = Field(
        default=None,
        ge=0.0,
        description="Seconds since the previous tick (measured server-side if omitted)",
    )
