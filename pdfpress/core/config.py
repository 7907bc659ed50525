from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    debug: bool = False
    api_prefix: str = "/api"

    # Database
    database_url: str = "sqlite:///./pdfpress.db"

    # File store
    work_dir: str = "uploads"
    max_upload_size_mb: int = 50

    # Ghostscript
    gs_binary: str = "gs"
    gs_pdf_settings: str = "/ebook"
    compression_timeout_seconds: int = 300

    # Webhooks
    webhook_timeout_seconds: float = 30.0
    webhook_user_agent: str = "pdfpress-webhook/1.0"
    require_https_callback: bool = True

    # Worker pool
    worker_concurrency: int = 4

    # CORS
    cors_origins: List[str] = ["*"]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
