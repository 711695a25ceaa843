from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "planting"
    db_username: str = "planting"
    db_password: str = "secret"

    storage_backend: str = "local"
    storage_files_root: str = "/app/files"
    storage_public_base_url: str = "http://localhost:8000/files"
    storage_bucket: str = "planting-verifications"
    storage_timeout_seconds: int = 30
    supabase_url: str = ""
    supabase_service_key: str = ""

    upload_max_bytes: int = 5 * 1024 * 1024
    compression_max_bytes: int = 2 * 1024 * 1024
    compression_max_dimension: int = 1920
    compression_quality: int = 85

    preview_dir: str = ""

    image_cache_backend: str = "postgres"
    image_cache_file: str = "tree_image_cache.json"
    image_cache_ttl_days: int = 7

    unsplash_access_key: str = ""
    unsplash_api_url: str = "https://api.unsplash.com"
    unsplash_orientation: str = "portrait"
    unsplash_timeout_seconds: int = 10
    unsplash_rate_limit_per_hour: int = 50
    unsplash_min_interval_seconds: float = 1.0

    @field_validator("storage_backend", "image_cache_backend")
    @classmethod
    def normalize_backend(cls, value: str) -> str:
        return value.strip().lower()
