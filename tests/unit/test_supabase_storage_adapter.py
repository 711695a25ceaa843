import httpx
import pytest

from app.storage.exceptions import StoreError
from app.storage.supabase_adapter import SupabaseStorageAdapter


def _adapter(handler) -> SupabaseStorageAdapter:
    return SupabaseStorageAdapter(
        base_url="https://project.supabase.co/",
        service_key="service-key",
        bucket="planting-verifications",
        timeout_seconds=5,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class TestPut:
    def test_posts_bytes_and_returns_public_url(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"Key": "planting-verifications/u1/1-a.jpg"})

        url = _adapter(handler).put("u1/1-a.jpg", b"jpeg-bytes", "image/jpeg")

        assert url == (
            "https://project.supabase.co/storage/v1/object/public/"
            "planting-verifications/u1/1-a.jpg"
        )
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/storage/v1/object/planting-verifications/u1/1-a.jpg"
        assert request.headers["Authorization"] == "Bearer service-key"
        assert request.headers["Content-Type"] == "image/jpeg"
        assert request.content == b"jpeg-bytes"

    def test_http_error_raises_store_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(409, text="Duplicate")

        with pytest.raises(StoreError, match="HTTP 409"):
            _adapter(handler).put("u1/1-a.jpg", b"x", "image/jpeg")

    def test_network_error_raises_store_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(StoreError, match="network error"):
            _adapter(handler).put("u1/1-a.jpg", b"x", "image/jpeg")


class TestExists:
    def test_true_on_200(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(200, json={}))

        assert adapter.exists("u1/1-a.jpg") is True

    def test_false_on_404(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(404, json={}))

        assert adapter.exists("u1/1-a.jpg") is False
