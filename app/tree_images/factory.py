from datetime import timedelta
from pathlib import Path

from app.config.settings import Settings
from app.database.repositories.image_cache_repository import ImageCacheRepository
from app.tree_images.base import BaseImageProvider, DisabledImageProvider
from app.tree_images.cache import ResolvedImageCache
from app.tree_images.cache_store import BaseImageCacheStore, JsonFileImageCacheStore
from app.tree_images.rate_limiter import RateLimitedImageProvider
from app.tree_images.unsplash_client_adapter import UnsplashClientAdapter


class ImageProviderFactory:
    """Creates the image provider, rate limited, or a disabled one without a key."""

    @classmethod
    def create(cls, settings: Settings) -> BaseImageProvider:
        access_key = settings.unsplash_access_key.strip()
        if not access_key or access_key == "demo":
            return DisabledImageProvider()
        client = UnsplashClientAdapter(
            access_key=access_key,
            api_url=settings.unsplash_api_url,
            timeout_seconds=settings.unsplash_timeout_seconds,
            orientation=settings.unsplash_orientation,
        )
        return RateLimitedImageProvider(
            client,
            max_per_hour=settings.unsplash_rate_limit_per_hour,
            min_interval_seconds=settings.unsplash_min_interval_seconds,
        )


class ImageCacheStoreFactory:
    """Creates the configured persistent store for resolved images."""

    BACKENDS = ("postgres", "file")

    @classmethod
    def create(cls, settings: Settings) -> BaseImageCacheStore:
        backend = settings.image_cache_backend
        if backend == "postgres":
            return ImageCacheRepository()
        if backend == "file":
            return JsonFileImageCacheStore(Path(settings.image_cache_file))
        raise ValueError(
            f"Unknown image cache backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )


def build_image_cache(settings: Settings) -> ResolvedImageCache:
    """Build a ResolvedImageCache with the configured store and provider."""
    return ResolvedImageCache(
        store=ImageCacheStoreFactory.create(settings),
        provider=ImageProviderFactory.create(settings),
        ttl=timedelta(days=settings.image_cache_ttl_days),
    )
