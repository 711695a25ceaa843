"""Read-through cache resolving a tree's display image."""

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

from app.common.cancellation import CancellationToken
from app.database.models import ImageCacheEntry
from app.logging.logger import Log
from app.tree_images.base import BaseImageProvider
from app.tree_images.cache_store import BaseImageCacheStore
from app.tree_images.exceptions import ProviderError
from app.tree_images.placeholder import placeholder_image_url

DEFAULT_TTL = timedelta(days=7)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ResolvedImageCache:
    """Maps tree names to image URLs through a persistent store and a provider.

    Never raises to its caller: any failure degrades to a placeholder URL,
    which is not cached so that the provider is retried on the next call.
    """

    def __init__(
        self,
        store: BaseImageCacheStore,
        provider: BaseImageProvider,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._provider = provider
        self._ttl = ttl
        self._clock = clock

    def resolve(self, tree_name: str) -> str:
        cached = self._lookup(tree_name)
        if cached is not None:
            Log.debug(f"Image cache hit for {tree_name}")
            return cached

        try:
            url = self._provider.search(tree_name)
        except ProviderError as exc:
            Log.warning(f"Image provider failed for {tree_name}: {exc}")
            return placeholder_image_url(tree_name)
        except Exception as exc:
            Log.error(f"Unexpected image provider error for {tree_name}: {exc}")
            return placeholder_image_url(tree_name)

        self._remember(ImageCacheEntry(tree_name=tree_name, image_url=url, fetched_at=self._clock()))
        Log.info(f"Resolved image for {tree_name}", image_url=url)
        return url

    def resolve_all(
        self,
        tree_names: Iterable[str],
        cancel_token: CancellationToken | None = None,
        on_update: Callable[[dict[str, str]], None] | None = None,
    ) -> dict[str, str]:
        """Resolve names one after another, publishing each result as it arrives.

        Lookups stop as soon as the token is cancelled; entries resolved
        before that point are kept and returned.
        """
        results: dict[str, str] = {}
        for tree_name in tree_names:
            if cancel_token is not None and cancel_token.cancelled:
                Log.info(f"Image batch cancelled after {len(results)} entries")
                break
            if tree_name in results:
                continue
            results[tree_name] = self.resolve(tree_name)
            if on_update is not None:
                on_update(dict(results))
        return results

    def is_fresh(self, entry: ImageCacheEntry) -> bool:
        return self._clock() - entry.fetched_at <= self._ttl

    def _lookup(self, tree_name: str) -> str | None:
        try:
            entry = self._store.get(tree_name)
            if entry is None:
                return None
            if self.is_fresh(entry):
                return entry.image_url
            Log.debug(f"Evicting expired image cache entry for {tree_name}")
            self._store.delete(tree_name)
        except Exception as exc:
            Log.warning(f"Image cache read failed for {tree_name}: {exc}")
        return None

    def _remember(self, entry: ImageCacheEntry) -> None:
        try:
            self._store.put(entry)
        except Exception as exc:
            Log.warning(f"Image cache write failed for {entry.tree_name}: {exc}")
