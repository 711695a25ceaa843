from pathlib import Path

from app.config.settings import Settings
from app.storage.base import BaseObjectStore
from app.storage.local_adapter import LocalObjectStore
from app.storage.supabase_adapter import SupabaseStorageAdapter


class ObjectStoreFactory:
    """Creates the configured binary object store adapter."""

    BACKENDS = ("local", "supabase")

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStore:
        backend = settings.storage_backend
        if backend == "local":
            return LocalObjectStore(
                files_root=Path(settings.storage_files_root),
                public_base_url=settings.storage_public_base_url,
            )
        if backend == "supabase":
            if not settings.supabase_url.strip():
                raise ValueError("supabase_url is required for storage_backend=supabase")
            return SupabaseStorageAdapter(
                base_url=settings.supabase_url,
                service_key=settings.supabase_service_key,
                bucket=settings.storage_bucket,
                timeout_seconds=settings.storage_timeout_seconds,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
