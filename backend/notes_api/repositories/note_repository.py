"""
Notes API — Note Repository (Data Access)
===========================================

What:  Translates note CRUD intents into SQL against the notes table and maps
       rows back to Note objects.
How:   Wraps one AsyncSession per request. Every store failure is converted
       into a typed exception: NotFoundError, DuplicateKeyError or StoreError.
Who:   Constructed by the route dependency get_note_repository(); called by
       the notes route handlers.

Transaction boundaries:
    Every write commits before returning, so a note handed back to the route
    is already durable and a failed commit surfaces as StoreError (HTTP 500).
    The session dependency rolls back when anything raised and closes the
    session; it does not commit.

Update is read-then-write:
    update_note() loads the row, merges the supplied fields over it and commits
    an UPDATE. The two statements are not isolated from concurrent writers, so
    two simultaneous PATCHes to one note resolve as last-write-wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.exceptions import DuplicateKeyError, NotFoundError, StoreError
from notes_api.models.note import Note

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for unique_violation
_UNIQUE_VIOLATION_SQLSTATE = "23505"

# Fallback for drivers without a SQLSTATE attribute (SQLite)
_UNIQUE_VIOLATION_MARKERS = ("duplicate key value violates unique constraint", "unique constraint failed")


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == _UNIQUE_VIOLATION_SQLSTATE
    message = str(orig if orig is not None else exc).lower()
    return any(marker in message for marker in _UNIQUE_VIOLATION_MARKERS)


class NoteRepository:
    """
    Data access for the notes table.

    Responsibilities:
        - list_notes(): Offset/limit page ordered by id
        - create_note(): Insert with generated id and timestamps
        - get_note(): Single row lookup with not-found handling
        - update_note(): Partial-field merge over an existing row
        - delete_note(): Hard delete with not-found handling
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_notes(self, limit: int = 10, offset: int = 0) -> List[Note]:
        """
        Return at most `limit` notes ordered by ascending id, skipping `offset`.

        Raises:
            StoreError: Query execution failed
        """
        try:
            result = await self.session.execute(
                select(Note).order_by(Note.id).limit(limit).offset(offset)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise StoreError(
                message="Something bad happened while fetching all note items",
                context={"error_type": type(e).__name__, "limit": limit, "offset": offset},
            )

    async def create_note(
        self,
        title: str,
        content: str,
        category: Optional[str] = None,
    ) -> Note:
        """
        Insert a note and return it with its generated fields.

        Raises:
            DuplicateKeyError: A note with this title already exists
            StoreError: Any other persistence failure
        """
        now = datetime.now(timezone.utc)
        note = Note(
            title=title,
            content=content,
            category=category or "",
            published=False,
            created_at=now,
            updated_at=now,
        )
        self.session.add(note)
        await self._save(note, action="create")
        logger.info("Note created: %s", note.id)
        return note

    async def get_note(self, note_id: UUID) -> Note:
        """
        Fetch one note by id.

        Raises:
            NotFoundError: No row has this id
            StoreError: Query execution failed
        """
        try:
            result = await self.session.execute(select(Note).where(Note.id == note_id))
            note = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise StoreError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": str(note_id), "error_type": type(e).__name__},
            )

        if note is None:
            raise NotFoundError(resource="Note", resource_id=str(note_id))
        return note

    async def update_note(self, note_id: UUID, changes: Dict[str, Any]) -> Note:
        """
        Apply `changes` over the stored note and refresh updated_at.

        Keys absent from `changes` keep their stored value, so an empty dict
        only advances updated_at.

        Raises:
            NotFoundError: No row has this id
            DuplicateKeyError: The new title belongs to another note
            StoreError: Persistence failure
        """
        note = await self.get_note(note_id)

        for field, value in changes.items():
            if field in {"title", "content", "category", "published"}:
                setattr(note, field, value)
        note.updated_at = datetime.now(timezone.utc)

        await self._save(note, action="update")
        logger.info("Note updated: %s (%s)", note_id, ", ".join(sorted(changes)) or "no fields")
        return note

    async def delete_note(self, note_id: UUID) -> None:
        """
        Remove the note with this id.

        Raises:
            NotFoundError: Zero rows were affected
            StoreError: The DELETE itself failed
        """
        try:
            result = await self.session.execute(
                delete(Note)
                .where(Note.id == note_id)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise StoreError(
                message="Could not delete the note. Please try again.",
                context={"note_id": str(note_id), "error_type": type(e).__name__},
            )

        if result.rowcount == 0:
            raise NotFoundError(resource="Note", resource_id=str(note_id))

        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error("Database error committing delete of note %s: %s", note_id, str(e))
            raise StoreError(
                message="Could not delete the note. Please try again.",
                context={"note_id": str(note_id), "error_type": type(e).__name__},
            )
        logger.info("Note deleted: %s", note_id)

    async def _save(self, note: Note, action: str) -> None:
        """Flush and commit pending writes, then reload stored values into `note`."""
        title = note.title
        try:
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(note)
        except IntegrityError as e:
            if _is_unique_violation(e):
                logger.warning("Duplicate title on %s: %r", action, title)
                raise DuplicateKeyError(context={"title": title})
            logger.error("Integrity error on %s: %s", action, str(e))
            raise StoreError(context={"action": action, "error_type": type(e).__name__})
        except SQLAlchemyError as e:
            logger.error("Database error on %s: %s", action, str(e), exc_info=True)
            raise StoreError(context={"action": action, "error_type": type(e).__name__})
