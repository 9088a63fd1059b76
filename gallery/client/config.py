from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from ..validation import MAX_FILE_SIZE


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GALLERY_", env_file=".env", extra="ignore")

    API_URL: str = "http://localhost:8000"
    REQUEST_TIMEOUT_S: float = 30.0

    # Must match the server's MAX_FILE_SIZE
    MAX_FILE_SIZE: int = MAX_FILE_SIZE

    # Simulated upload progress
    PROGRESS_TICK_S: float = 0.2
    PROGRESS_STEP: int = 5
    PROGRESS_CAP: int = 95

    SUCCESS_REMOVAL_DELAY_S: float = 2.0
    NOTIFICATION_DISMISS_S: float = 5.0


@lru_cache()
def get_client_settings() -> ClientSettings:
    return ClientSettings()
