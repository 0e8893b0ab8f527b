# drive_index/config.py
"""
Configuration management using Pydantic Settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", env_parse_none_str="None")
    LOG_LEVEL: str = "INFO"
    # OAuth2 client registered in the Google Cloud console
    GDRIVE_CLIENT_ID: Optional[str] = None
    GDRIVE_CLIENT_SECRET: Optional[str] = None
    GDRIVE_REFRESH_TOKEN: Optional[str] = None
    GDRIVE_REDIRECT_URI: Optional[str] = None
    GDRIVE_SCOPES: str = "https://www.googleapis.com/auth/drive.readonly"
    # Folder served as "/"; 'root' is the user's My Drive
    GDRIVE_ROOT_ID: str = "root"
    # Optional pre-seeded access token; expiry as epoch seconds
    GDRIVE_ACCESS_TOKEN: Optional[str] = None
    GDRIVE_EXPIRES_ON: Optional[float] = None
    GDRIVE_TOKEN_URL: str = "https://www.googleapis.com/oauth2/v4/token"
    GDRIVE_FILES_URL: str = "https://www.googleapis.com/drive/v3/files"
    GDRIVE_PAGE_SIZE: int = 1000
    # Marker file hidden from folder listings
    GDRIVE_PASSWORD_FILENAME: str = ".password"
    # None retries rate-limited queries forever
    GDRIVE_RATE_LIMIT_RETRIES: Optional[int] = 8
    GDRIVE_RATE_LIMIT_BACKOFF: float = 0.5
    GDRIVE_TIMING_LOGS: bool = False


settings = Settings()
