"""
Central configuration for the FastAPI backend.

Loads environment variables via Pydantic Settings.
Keeps the app local-first by default: SQLite for rows and a folder
on disk standing in for the object-storage bucket.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./labeler.db"
    JWT_SECRET: str = "change-me-local-labeler-secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120

    # Root folder for local state (uploaded rasters, previews)
    LABELER_HOME: str = str(Path(__file__).resolve().parents[3] / "labeler-data")

    # Object storage: one sub-folder per bucket, served under /storage
    STORAGE_ROOT: str = ""
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    IMAGE_BUCKET: str = "images"

    # Used for CORS; locked to localhost by default
    FRONTEND_ORIGIN: str = "http://localhost:3000"

    # Completing a substation requires a substation type when enabled
    STRICT_COMPLETION: bool = True

    # Basemap shown under the annotations
    TILE_URL: str = (
        "https://server.arcgisonline.com/ArcGIS/rest/services/"
        "World_Imagery/MapServer/tile/{z}/{y}/{x}"
    )

    LOG_LEVEL: str = "INFO"

    # Third-party chat widget injected by the frontend
    CHAT_WIDGET_SCRIPT_URL: str = "https://cdn.voiceflow.com/widget-next/bundle.mjs"
    CHAT_WIDGET_PROJECT_ID: str = "67c698291971d22cda97e102"
    CHAT_WIDGET_VERSION_ID: str = "production"
    CHAT_WIDGET_RUNTIME_URL: str = "https://general-runtime.voiceflow.com"

    @property
    def storage_root(self) -> str:
        return self.STORAGE_ROOT or str(Path(self.LABELER_HOME) / "storage")


settings = Settings()
