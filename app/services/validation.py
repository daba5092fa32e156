"""
TechNotes Backend - Input Validation Helpers
=============================================

What:  Small predicates shared by NoteService and UserService: input checks
       and classification of constraint violations raised on flush.
Why:   Both services check "present and not just whitespace" and parse ids
       that arrive as strings in request bodies; keeping the rules here keeps
       the two services consistent.
"""

import uuid
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError


def is_blank(value: Any) -> bool:
    """True for None, non-strings, and strings that are empty after trimming."""
    return not isinstance(value, str) or not value.strip()


def parse_id(value: Any) -> Optional[uuid.UUID]:
    """
    Parse a record id received from a client.

    Returns None for anything that is not a UUID. A malformed id can never
    match a stored record, so callers treat None the same as "not found".
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def valid_roles(roles: Any) -> bool:
    """Roles must be a non-empty list whose entries are all non-blank strings."""
    return isinstance(roles, list) and len(roles) > 0 and not any(is_blank(r) for r in roles)


# ── Store constraint violations ───────────────────────────────────────────

def violates_unique(exc: IntegrityError, constraint: str, column: str) -> bool:
    """
    True when the IntegrityError was raised by one particular unique rule.

    PostgreSQL names the constraint ("uq_notes_title"); SQLite names the
    column ("UNIQUE constraint failed: notes.title").
    """
    message = str(exc.orig)
    return constraint in message or f"UNIQUE constraint failed: {column}" in message


def violates_foreign_key(exc: IntegrityError) -> bool:
    """True when the IntegrityError was raised by a foreign key (a dangling or in-use user id)."""
    return "foreign key" in str(exc.orig).lower()
