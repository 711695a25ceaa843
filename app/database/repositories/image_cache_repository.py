from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.models import ImageCacheEntry
from app.tree_images.cache_store import BaseImageCacheStore


class ImageCacheRepository(BaseImageCacheStore):
    """Database operations for the tree_image_cache table."""

    def get(self, tree_name: str) -> ImageCacheEntry | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT tree_name, image_url, fetched_at
                    FROM tree_image_cache
                    WHERE tree_name = %s
                    """,
                    (tree_name,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return ImageCacheEntry(
            tree_name=row["tree_name"],
            image_url=row["image_url"],
            fetched_at=row["fetched_at"],
        )

    def put(self, entry: ImageCacheEntry) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO tree_image_cache (tree_name, image_url, fetched_at)
                VALUES (%s, %s, %s)
                ON CONFLICT (tree_name)
                DO UPDATE SET image_url = EXCLUDED.image_url,
                              fetched_at = EXCLUDED.fetched_at
                """,
                (entry.tree_name, entry.image_url, entry.fetched_at),
            )
            conn.commit()

    def delete(self, tree_name: str) -> None:
        with get_connection() as conn:
            conn.execute(
                "DELETE FROM tree_image_cache WHERE tree_name = %s",
                (tree_name,),
            )
            conn.commit()
