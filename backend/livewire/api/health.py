"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from livewire import __version__
from livewire.api.store import SessionStore
from livewire.dependencies import get_store
from livewire.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(store: SessionStore = Depends(get_store)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        sessions_active=len(store),
    )
