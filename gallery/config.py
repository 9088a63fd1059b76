# gallery/config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

from .validation import MAX_FILE_SIZE, MAX_FILES_PER_UPLOAD


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    APP_NAME: str = "Image Gallery API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # Storage Settings
    DATABASE_URL: str = "sqlite:///./gallery.db"
    STORAGE_BACKEND: str = "database"  # "database" or "memory"

    # CORS Settings (comma-separated)
    ALLOWED_ORIGINS: str = "*"

    # Upload limits
    MAX_FILE_SIZE: int = MAX_FILE_SIZE
    MAX_FILES_PER_UPLOAD: int = MAX_FILES_PER_UPLOAD
    # Whole multipart body; a full batch plus form overhead
    MAX_REQUEST_SIZE: int = MAX_FILES_PER_UPLOAD * MAX_FILE_SIZE + 1024 * 1024

    # Middleware settings
    GZIP_MIN_SIZE: int = 500

    # AI Settings
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_IMAGE_MODEL: str = "dall-e-3"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

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

    @property
    def uses_memory_store(self) -> bool:
        return self.STORAGE_BACKEND.strip().lower() == "memory"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings: Settings = get_settings()
