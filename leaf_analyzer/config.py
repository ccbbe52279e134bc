# leaf_analyzer/config.py
import os
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


class Settings(BaseSettings):
    """Application configuration based on environment variables"""

    # API configuration (empty prefix keeps the paths the mobile client calls)
    API_PREFIX: str = ""
    PORT: int = 3000

    # CORS configuration (Frontend URLs)
    CORS_ORIGINS: List[str] = ["*"]

    # Debug mode
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = "INFO"

    # Maximum file size for uploads (in bytes)
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10 MB

    # Number of provider labels echoed back under rawData
    RAW_LABEL_LIMIT: int = 10

    # Google Cloud Vision REST endpoint
    VISION_API_URL: str = "https://vision.googleapis.com/v1/images:annotate"
    VISION_API_KEY: str = ""
    VISION_MAX_RESULTS: int = 10
    VISION_TIMEOUT_SECONDS: float = 30.0

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Return settings with caching"""
    return Settings()
