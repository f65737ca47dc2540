"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    livewire_env: str = "development"
    livewire_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # A session holds roughly 90 bytes per pixel (feature maps, link cost
    # table, search and cooling state); 4 MP is about 380 MB
    max_image_pixels: int = 2048 * 2048
    max_sessions: int = 8

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
