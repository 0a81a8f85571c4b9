"""
Response envelopes for event endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class EventResponse(BaseModel):
    success: bool = True
    # Schema-less at this boundary; stored fields pass through verbatim.
    event: dict[str, Any]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
