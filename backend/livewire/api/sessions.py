"""/api/sessions — live-wire tracing sessions driven by a remote UI.

The UI uploads an image once, then per frame sends cursor moves and ticks and
renders the returned snapshot. Endpoints are plain ``def`` so FastAPI runs the
CPU-bound work in its thread pool.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException

from livewire.api.store import SessionLimitError, SessionNotFoundError, SessionStore
from livewire.config import Settings
from livewire.dependencies import get_settings, get_store
from livewire.engine.errors import ImageTooLargeError, InvalidImageError
from livewire.engine.image_source import ArrayIntensitySource, load_intensity_source
from livewire.engine.pixel import Pixel
from livewire.engine.session import BoundarySession
from livewire.models.requests import CreateSessionRequest, PointRequest, SeedRequest, TickRequest
from livewire.models.responses import (
    CommitResponse,
    PointResponse,
    SeedResponse,
    SessionCreatedResponse,
    SnapshotResponse,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _decode_source(req: CreateSessionRequest, max_pixels: int) -> ArrayIntensitySource:
    if (req.image_base64 is None) == (req.pixels is None):
        raise HTTPException(status_code=422, detail="Provide exactly one of image_base64 or pixels")
    try:
        if req.image_base64 is not None:
            try:
                data = base64.b64decode(req.image_base64, validate=True)
            except (binascii.Error, ValueError) as e:
                raise InvalidImageError(f"Invalid base64 payload: {e}") from e
            return load_intensity_source(data, max_pixels=max_pixels)
        source = ArrayIntensitySource(req.pixels)
        if source.width * source.height > max_pixels:
            raise ImageTooLargeError(source.width, source.height, max_pixels)
        return source
    except ImageTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e)) from e
    except InvalidImageError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@contextmanager
def _session(store: SessionStore, session_id: str) -> Iterator[BoundarySession]:
    try:
        with store.acquire(session_id) as session:
            yield session
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found") from None


@router.post("", response_model=SessionCreatedResponse, status_code=201)
def create_session(
    req: CreateSessionRequest,
    store: SessionStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SessionCreatedResponse:
    source = _decode_source(req, settings.max_image_pixels)
    session = BoundarySession(source)
    try:
        session_id = store.add(session)
    except SessionLimitError as e:
        raise HTTPException(status_code=429, detail=str(e)) from e
    return SessionCreatedResponse(
        session_id=session_id,
        width=session.width,
        height=session.height,
        channels=source.channel_count,
        g_max=session.features.g_max,
    )


@router.get("/{session_id}", response_model=SnapshotResponse)
def get_session(session_id: str, store: SessionStore = Depends(get_store)) -> SnapshotResponse:
    with _session(store, session_id) as session:
        return SnapshotResponse.from_snapshot(session.snapshot())


@router.delete("/{session_id}", status_code=204)
def delete_session(session_id: str, store: SessionStore = Depends(get_store)) -> None:
    try:
        store.remove(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found") from None


@router.post("/{session_id}/cursor", response_model=PointResponse)
def update_cursor(
    session_id: str,
    req: PointRequest,
    store: SessionStore = Depends(get_store),
) -> PointResponse:
    with _session(store, session_id) as session:
        snapped = session.update_cursor(Pixel(req.x, req.y))
        return PointResponse.from_pixel(snapped)


@router.post("/{session_id}/seed", response_model=SeedResponse)
def place_seed(
    session_id: str,
    req: SeedRequest,
    store: SessionStore = Depends(get_store),
) -> SeedResponse:
    if (req.x is None) != (req.y is None):
        raise HTTPException(status_code=422, detail="Provide both x and y, or neither")
    pixel = Pixel(req.x, req.y) if req.x is not None and req.y is not None else None
    with _session(store, session_id) as session:
        placed = session.place_first_seed(pixel)
        return SeedResponse(placed=placed, snapshot=SnapshotResponse.from_snapshot(session.snapshot()))


@router.post("/{session_id}/tick", response_model=SnapshotResponse)
def tick(
    session_id: str,
    req: TickRequest,
    store: SessionStore = Depends(get_store),
) -> SnapshotResponse:
    with _session(store, session_id) as session:
        return SnapshotResponse.from_snapshot(session.tick(req.elapsed))


@router.post("/{session_id}/commit", response_model=CommitResponse)
def commit(session_id: str, store: SessionStore = Depends(get_store)) -> CommitResponse:
    with _session(store, session_id) as session:
        committed = session.commit_current_path()
        return CommitResponse(committed=committed, snapshot=SnapshotResponse.from_snapshot(session.snapshot()))


@router.post("/{session_id}/clear", response_model=SnapshotResponse)
def clear(session_id: str, store: SessionStore = Depends(get_store)) -> SnapshotResponse:
    with _session(store, session_id) as session:
        session.clear_boundary()
        return SnapshotResponse.from_snapshot(session.snapshot())
