from urllib.parse import quote

import httpx

from app.logging.logger import Log
from app.storage.base import BaseObjectStore
from app.storage.exceptions import StoreError


class SupabaseStorageAdapter(BaseObjectStore):
    """Object store adapter built on the Supabase Storage REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout_seconds: int,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._bucket = bucket
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        }

    def put(self, key: str, data: bytes, content_type: str) -> str:
        url = f"{self._base_url}/storage/v1/object/{self._bucket}/{quote(key)}"
        try:
            response = self._client.post(
                url,
                content=data,
                headers={
                    **self._headers,
                    "Content-Type": content_type,
                    "x-upsert": "false",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StoreError(
                f"Storage rejected {key}: HTTP {exc.response.status_code} {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"Storage network error for {key}: {exc}") from exc
        Log.info(f"Uploaded {len(data)} bytes to bucket {self._bucket}", key=key)
        return self.public_url(key)

    def public_url(self, key: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/{quote(key)}"

    def exists(self, key: str) -> bool:
        url = f"{self._base_url}/storage/v1/object/info/{self._bucket}/{quote(key)}"
        try:
            response = self._client.get(url, headers=self._headers)
        except httpx.HTTPError as exc:
            raise StoreError(f"Storage network error for {key}: {exc}") from exc
        return response.status_code == 200
