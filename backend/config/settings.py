from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "PixelPerfect AI"
    VERSION: str = "1.0.0"

    # Server Settings
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # External APIs
    # Not required at startup: a missing key is reported when an edit is submitted
    API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash-image"

    # Upload Limits
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173"
    ]

# Global settings instance
settings = Settings()
