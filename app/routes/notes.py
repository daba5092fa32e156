"""
TechNotes Backend - Notes Route Handlers
=========================================

What:  GET/POST/PATCH/DELETE on /notes.
How:   Each handler unpacks the JSON body, delegates to NoteService, and
       returns its result. Errors are raised by the service and formatted by
       the global exception handlers in main.py.

Note that PATCH and DELETE take the note id in the body, not in the path.
A request without a body is handled as an empty one, so the service reports
which fields are required.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.note import NoteCreate, NoteDelete, NoteResponse, NoteUpdate
from app.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["Notes"])


@router.get(
    "",
    response_model=List[NoteResponse],
    responses={
        400: {"description": "No notes found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List all notes",
    description="Returns every note with the owner's username attached.",
)
async def list_notes(db: AsyncSession = Depends(get_db_session)) -> List[NoteResponse]:
    return await note_service.list_notes(db=db)


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing fields or unknown user", "model": ErrorResponse},
        409: {"description": "Duplicate title", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a note",
)
async def create_note(
    payload: Optional[NoteCreate] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """
    Create a note and assign it the next ticket number.

    Example request body:
        {"user": "<user id>", "title": "Task A", "text": "do it"}
    """
    payload = payload or NoteCreate()
    return await note_service.create_note(
        db=db,
        user=payload.user,
        title=payload.title,
        text=payload.text,
    )


@router.patch(
    "",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing fields, unknown note or user", "model": ErrorResponse},
        409: {"description": "Duplicate title", "model": ErrorResponse},
    },
    summary="Update a note",
)
async def update_note(
    payload: Optional[NoteUpdate] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    payload = payload or NoteUpdate()
    return await note_service.update_note(
        db=db,
        note_id=payload.id,
        user=payload.user,
        title=payload.title,
        text=payload.text,
        completed=payload.completed,
    )


@router.delete(
    "",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing id or unknown note", "model": ErrorResponse},
    },
    summary="Delete a note",
)
async def delete_note(
    payload: Optional[NoteDelete] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    payload = payload or NoteDelete()
    return await note_service.delete_note(db=db, note_id=payload.id)
