#config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import List, Literal
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")
    # Application Settings
    APP_NAME: str = "Restaurant Admin Media API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True  # Can disable in production

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # CORS Settings (comma-separated to avoid JSON parsing in env)
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Middleware settings
    GZIP_MIN_SIZE: int = 500  # bytes
    MAX_REQUEST_SIZE: int = 12 * 1024 * 1024  # base64 bodies are ~4/3 of the image

    # Base URL for image serving
    BASE_URL: str = os.environ.get("BASE_URL", "http://localhost:8000")
    UPLOAD_DIR: str = "uploads"

    # Validation
    MAX_FILE_SIZE: int = 2 * 1024 * 1024  # 2MB
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/jpg", "image/png", "image/webp"]

    # Persistence: "inline" (data URL), "remote" (image store) or "auto"
    PERSISTENCE_MODE: Literal["inline", "remote", "auto"] = "inline"
    INLINE_MAX_BASE64_SIZE: int = 600000  # chars, leaves room in a 1MB document

    # Compression
    COMPRESSION_MAX_DIMENSION: int = 800
    COMPRESSION_QUALITY: int = 80
    COMPRESSION_THRESHOLD: int = 500 * 1024
    COMPRESSION_TARGET_BYTES: int = 450000
    MAX_COMPRESSION_ATTEMPTS: int = 5
    ADAPTIVE_COMPRESSION: bool = True
    PREVIEW_MAX_DIMENSION: int = 400
    PREVIEW_QUALITY: int = 90

    # Metadata cache
    UPLOAD_CACHE_MAX_ENTRIES: int = 50

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)


@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    # Normalize ALLOWED_ORIGINS if provided as comma-separated string env var CORS_ORIGINS
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s

settings: Settings = get_settings()
