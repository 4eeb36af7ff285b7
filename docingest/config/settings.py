from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docingest"
    db_username: str = "docingest"
    db_password: str = "secret"

    storage_backend: str = "local"
    storage_root: str = "/app/files"
    storage_base_url: str = ""
    storage_timeout_seconds: int = 30

    ocr_api_url: str = "http://localhost:8000/api/v1/ocr/extract"
    ocr_api_timeout_seconds: int = 120
    ocr_language: str = "en"

    extraction_workers: int = 2
    max_upload_size_bytes: int = 10 * 1024 * 1024
