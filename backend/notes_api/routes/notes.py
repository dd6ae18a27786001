"""
Notes API — Notes Route Handlers
==================================

What:  The five CRUD endpoints under /api/notes.
How:   Each handler extracts path/query/body input, calls NoteRepository and
       shapes the success envelope. Failures are raised as exceptions and
       turned into {status, message} responses by the global handlers.

Endpoints:
    GET    /api/notes           list (page, limit)       → 200
    POST   /api/notes           create                   → 201
    GET    /api/notes/{id}      read                     → 200
    PATCH  /api/notes/{id}      partial update           → 200
    DELETE /api/notes/{id}      delete                   → 204
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.config import Settings
from notes_api.database import get_db_session
from notes_api.exceptions import ValidationError
from notes_api.repositories.note_repository import NoteRepository
from notes_api.schemas.note import (
    ErrorResponse,
    NoteCreate,
    NoteData,
    NoteEnvelope,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])


def get_note_repository(db: AsyncSession = Depends(get_db_session)) -> NoteRepository:
    """Build a repository around this request's session."""
    return NoteRepository(db)


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


def _envelope(note) -> NoteEnvelope:
    return NoteEnvelope(data=NoteData(note=NoteResponse.model_validate(note)))


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={
        422: {"description": "Invalid page or limit", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List notes with offset pagination",
)
async def list_notes(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(default=10, ge=1, description="Notes per page"),
    repo: NoteRepository = Depends(get_note_repository),
    settings: Settings = Depends(get_app_settings),
) -> NoteListResponse:
    """
    Return one page of notes ordered by id.

    offset = (page - 1) * limit
    """
    if limit > settings.max_page_size:
        raise ValidationError(
            message=f"limit must be at most {settings.max_page_size}",
            field="limit",
        )

    notes = await repo.list_notes(limit=limit, offset=(page - 1) * limit)
    return NoteListResponse(
        results=len(notes),
        notes=[NoteResponse.model_validate(note) for note in notes],
    )


@router.post(
    "/notes",
    response_model=NoteEnvelope,
    status_code=201,
    responses={
        409: {"description": "Title already taken", "model": ErrorResponse},
        422: {"description": "Malformed body", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a note",
)
async def create_note(
    body: NoteCreate,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteEnvelope:
    note = await repo.create_note(
        title=body.title,
        content=body.content,
        category=body.category,
    )
    return _envelope(note)


@router.get(
    "/notes/{note_id}",
    response_model=NoteEnvelope,
    responses={
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single note by ID",
)
async def get_note(
    note_id: UUID,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteEnvelope:
    note = await repo.get_note(note_id)
    return _envelope(note)


@router.patch(
    "/notes/{note_id}",
    response_model=NoteEnvelope,
    responses={
        404: {"description": "Note not found", "model": ErrorResponse},
        409: {"description": "Title already taken", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update some fields of a note",
)
async def edit_note(
    note_id: UUID,
    body: NoteUpdate,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteEnvelope:
    """
    Fields missing from the body keep their current value; updated_at is
    always refreshed, even for an empty body.
    """
    note = await repo.update_note(note_id, body.changes())
    return _envelope(note)


@router.delete(
    "/notes/{note_id}",
    status_code=204,
    response_class=Response,
    responses={
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a note",
)
async def delete_note(
    note_id: UUID,
    repo: NoteRepository = Depends(get_note_repository),
) -> Response:
    await repo.delete_note(note_id)
    return Response(status_code=204)
