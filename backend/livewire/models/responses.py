"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from livewire.engine.pixel import Pixel
from livewire.engine.session import TickSnapshot


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    sessions_active: int = 0


class PointResponse(BaseModel):
    x: int
    y: int

    @classmethod
    def from_pixel(cls, pixel: Pixel) -> PointResponse:
        return cls(x=pixel.x, y=pixel.y)


class SessionCreatedResponse(BaseModel):
    session_id: str
    width: int
    height: int
    channels: int
    g_max: float


class SnapshotResponse(BaseModel):
    segments: list[list[tuple[int, int]]] = Field(default_factory=list)
    live_path: list[tuple[int, int]] | None = None
    seed: PointResponse | None = None
    free_point: PointResponse | None = None
    converging: bool = False
    auto_committed: bool = False

    @classmethod
    def from_snapshot(cls, snap: TickSnapshot) -> SnapshotResponse:
        return cls(
            segments=[[(p.x, p.y) for p in seg] for seg in snap.segments],
            live_path=[(p.x, p.y) for p in snap.live_path] if snap.live_path is not None else None,
            seed=PointResponse.from_pixel(snap.seed) if snap.seed is not None else None,
            free_point=PointResponse.from_pixel(snap.free_point) if snap.free_point is not None else None,
            converging=snap.converging,
            auto_committed=snap.auto_committed,
        )


class SeedResponse(BaseModel):
    placed: bool
    snapshot: SnapshotResponse


class CommitResponse(BaseModel):
    committed: bool
    snapshot: SnapshotResponse
