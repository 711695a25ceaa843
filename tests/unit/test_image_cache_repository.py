from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from app.database.models import ImageCacheEntry
from app.database.repositories.image_cache_repository import ImageCacheRepository

FETCHED_AT = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestGet:
    @patch("app.database.repositories.image_cache_repository.get_connection")
    def test_returns_entry(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {
            "tree_name": "Baobab",
            "image_url": "https://images.unsplash.com/baobab",
            "fetched_at": FETCHED_AT,
        }

        entry = ImageCacheRepository().get("Baobab")

        assert entry == ImageCacheEntry("Baobab", "https://images.unsplash.com/baobab", FETCHED_AT)

    @patch("app.database.repositories.image_cache_repository.get_connection")
    def test_returns_none_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert ImageCacheRepository().get("Baobab") is None


class TestPut:
    @patch("app.database.repositories.image_cache_repository.get_connection")
    def test_upserts_and_commits(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        ImageCacheRepository().put(
            ImageCacheEntry("Baobab", "https://images.unsplash.com/baobab", FETCHED_AT)
        )

        sql, params = mock_conn.execute.call_args[0]
        assert "ON CONFLICT (tree_name)" in sql
        assert params == ("Baobab", "https://images.unsplash.com/baobab", FETCHED_AT)
        mock_conn.commit.assert_called_once()


class TestDelete:
    @patch("app.database.repositories.image_cache_repository.get_connection")
    def test_deletes_by_name(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        ImageCacheRepository().delete("Baobab")

        assert mock_conn.execute.call_args[0][1] == ("Baobab",)
        mock_conn.commit.assert_called_once()
