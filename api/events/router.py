"""
Event API endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from core import db

from . import schemas, service
from .dependencies import get_database

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": schemas.ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": schemas.ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": schemas.ErrorResponse},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=schemas.ErrorResponse(error=message).model_dump(),
    )


@router.get("/events/", include_in_schema=False)
async def get_event_without_slug() -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, service.MISSING_SLUG_MESSAGE)


@router.get(
    "/events/{slug}",
    response_model=schemas.EventResponse,
    responses=_ERROR_RESPONSES,
)
async def get_event(
    slug: str,
    database: db.Database = Depends(get_database),
):
    """
    Fetch a single event by its slug.
    """
    try:
        slug = service.validate_slug(slug)
    except service.InvalidSlugError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    try:
        event = await service.get_event(slug, database=database)
    except db.DatabaseError as exc:
        logger.exception("event_lookup_failed kind=%s slug=%s", exc.kind, slug)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, service.UNEXPECTED_ERROR_MESSAGE)
    except Exception:
        logger.exception("event_lookup_failed kind=unexpected slug=%s", slug)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, service.UNEXPECTED_ERROR_MESSAGE)

    if event is None:
        return _error(status.HTTP_404_NOT_FOUND, service.NOT_FOUND_MESSAGE)

    return schemas.EventResponse(event=event)
