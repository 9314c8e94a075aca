from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional

DEFAULT_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4_1) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4.1 Safari/605.1.15",
]

class Settings(BaseSettings):
    # Transcript Defaults
    DEFAULT_LANGUAGE: str = "en"
    DEFAULT_KIND: str = "asr"

    # System Settings
    LOG_LEVEL: str = "INFO"
    MAX_ATTEMPTS: int = 4
    INITIAL_DELAY_MS: int = 1000
    HTTP_TIMEOUT: Optional[float] = None

    # Cache
    CACHE_BACKEND: Literal["file", "memory"] = "file"
    CACHE_DIR: str = ".cache"
    CACHE_TTL: int = 3600
    CACHE_WRITE_WORKERS: int = 2

    # Upstream
    WATCH_URL: str = "https://www.youtube.com/watch"
    TRANSCRIPT_API_URL: str = "https://www.youtube.com/youtubei/v1/get_transcript"
    CLIENT_NAME: str = "WEB"
    CLIENT_VERSION_WINDOW_DAYS: int = 30
    USER_AGENTS: List[str] = DEFAULT_USER_AGENTS

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
