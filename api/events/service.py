"""
Event lookup business logic.

Scope:
- slug validation (runs before any database work)
- single-document lookup by slug
- decoding the stored document into a plain snapshot
"""

from __future__ import annotations

import json
import re
from typing import Any

from core import db

from . import repository

SLUG_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")

MISSING_SLUG_MESSAGE = "Invalid or missing slug parameter"
MALFORMED_SLUG_MESSAGE = "Invalid slug format. Slug must be lowercase alphanumeric with hyphens."
NOT_FOUND_MESSAGE = "Event not found"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while fetching the event"


class InvalidSlugError(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def validate_slug(slug: object) -> str:
    if not isinstance(slug, str) or not slug.strip():
        raise InvalidSlugError(MISSING_SLUG_MESSAGE)

    # fullmatch, not match + "$": "$" also accepts a trailing newline.
    if SLUG_PATTERN.fullmatch(slug) is None:
        raise InvalidSlugError(MALFORMED_SLUG_MESSAGE)
    return slug


def _to_event(row: dict) -> dict[str, Any]:
    try:
        document = json.loads(row["document"])
    except (TypeError, ValueError) as exc:
        raise db.QueryFailedError("Stored event document is not valid JSON.") from exc

    if not isinstance(document, dict):
        raise db.QueryFailedError("Stored event document is not an object.")

    # The indexed column is authoritative for the slug.
    document["slug"] = str(row["slug"])
    return document


async def get_event(slug: str, *, database: db.Database) -> dict[str, Any] | None:
    """
    Return the event for a validated slug, or None when it does not exist.

    Raises `db.DatabaseError` subclasses for configuration, connection and
    query failures.
    """
    row = await repository.get_event_by_slug(database, slug)
    if row is None:
        return None
    return _to_event(row)
