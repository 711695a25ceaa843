from typing import Any

import httpx

from app.tree_images.base import BaseImageProvider
from app.tree_images.exceptions import ProviderError, RateLimitError


class UnsplashClientAdapter(BaseImageProvider):
    """Image provider built on the Unsplash photo search API."""

    def __init__(
        self,
        *,
        access_key: str,
        api_url: str,
        timeout_seconds: int,
        orientation: str = "portrait",
        client: httpx.Client | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._orientation = orientation
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._headers = {
            "Authorization": f"Client-ID {access_key}",
            "Accept-Version": "v1",
        }

    def search(self, tree_name: str) -> str:
        try:
            response = self._client.get(
                f"{self._api_url}/search/photos",
                params={
                    "query": f"{tree_name} tree nature",
                    "orientation": self._orientation,
                    "per_page": 1,
                },
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            raise ProviderError(f"Image provider network error: {exc}") from exc

        if _is_rate_limited(response):
            raise RateLimitError(
                f"Image provider rate limit reached (HTTP {response.status_code})"
            )
        if response.is_error:
            raise ProviderError(
                f"Image provider API error: HTTP {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(f"Invalid JSON response: {exc}") from exc
        return parse_search_response(payload, tree_name)


def parse_search_response(payload: Any, tree_name: str) -> str:
    """Pull ``results[0].urls.regular`` out of a search response.

    Raises:
        ProviderError: if the payload does not have the expected shape or is empty.
    """
    if not isinstance(payload, dict):
        raise ProviderError("Search response must be an object")
    results = payload.get("results")
    if not isinstance(results, list):
        raise ProviderError("Search response 'results' must be a list")
    if not results:
        raise ProviderError(f"No images found for '{tree_name}'")
    first = results[0]
    urls = first.get("urls") if isinstance(first, dict) else None
    if not isinstance(urls, dict):
        raise ProviderError("Search result 'urls' must be an object")
    regular = urls.get("regular")
    if not regular or not isinstance(regular, str):
        raise ProviderError("Search result 'urls.regular' must be a non-empty string")
    return regular


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return (
        response.status_code == 403
        and response.headers.get("X-Ratelimit-Remaining") == "0"
    )
