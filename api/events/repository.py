"""
Event persistence (raw SQL).
"""

from __future__ import annotations

from core import db


async def get_event_by_slug(database: db.Database, slug: str) -> dict | None:
    """
    Exact match on the unique `events.slug` column.

    The document is returned as JSON text; decoding happens in the service.
    """
    return await database.fetch_one(
        """
        SELECT slug, document::text AS document
        FROM events
        WHERE slug = $1
        LIMIT 1
        """,
        slug,
    )
