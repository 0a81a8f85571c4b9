"""
Dependencies for event routes.
"""

from __future__ import annotations

from core import db


def get_database() -> db.Database:
    # Tests swap this out via `app.dependency_overrides`.
    return db.database
