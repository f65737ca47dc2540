"""FastAPI dependency injection."""

from __future__ import annotations

from livewire.api.store import SessionStore, session_store
from livewire.config import Settings, settings


def get_settings() -> Settings:
    return settings


def get_store() -> SessionStore:
    return session_store
