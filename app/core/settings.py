"""
Core settings and environment variables for Transit Incident Desk.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Transit Incident Desk"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API (comma separated)
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    FIREBASE_STORAGE_BUCKET: Optional[str] = None
    FIRESTORE_TIMEOUT_SECONDS: float = 10.0  # Applied to every Firestore call

    # Mock DB mode for local development without Firebase credentials.
    # MOCK_DB_PATH empty means purely in-memory.
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: str = "./mock_db.json"

    # Geocoding (coordinates -> address when the reporter sends GPS only)
    # - GEOCODING_PROVIDER: "nominatim" (default, no API key) or "google"
    # - GOOGLE_MAPS_API_KEY: optional; only used when provider is "google"
    GEOCODING_PROVIDER: str = "nominatim"
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    GEOCODING_TIMEOUT_SECONDS: float = 3.0
    GEOCODING_USER_AGENT: str = "transit-incident-desk/0.1"

    # Photo storage. Firebase Storage is used when FIREBASE_STORAGE_BUCKET is set,
    # otherwise photos land in UPLOAD_DIR and are served under /uploads.
    UPLOAD_DIR: str = "./uploads"
    MAX_PHOTO_BYTES: int = 5 * 1024 * 1024
    STORAGE_TIMEOUT_SECONDS: float = 15.0

    # Incident listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # One legacy creation path accepted "rejected" as a status; the general
    # status-update path does not. Off until product owners settle it.
    ALLOW_REJECTED_STATUS: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


# Global settings instance
settings = Settings()
