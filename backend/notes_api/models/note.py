"""
Notes API — Note SQLAlchemy Model
===================================

What:  ORM model representing the `notes` table.
How:   Inherits from the shared DeclarativeBase; create_tables() builds the
       table from this definition when DB_CREATE_TABLES is on.
Who:   Used by NoteRepository for every CRUD operation.

Table Design:
    - UUID primary key generated on insert, never changed afterwards
    - title: UNIQUE, so the store rejects a second note with the same title
    - category: short optional label, stored as '' rather than NULL
    - created_at / updated_at: UTC with time zone; the repository writes one
      timestamp to both on insert and refreshes updated_at on every update
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Text, Uuid, false, text
from sqlalchemy.orm import Mapped, mapped_column

from notes_api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A single note.

    Lifecycle:
        1. Created by POST /api/notes (store assigns id and timestamps)
        2. Partially updated by PATCH /api/notes/{id} (updated_at refreshed)
        3. Hard-deleted by DELETE /api/notes/{id} (no tombstone)
    """

    __tablename__ = "notes"

    # ── Primary Key ───────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Data Fields ───────────────────────────────────────────────────────
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    category: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        default="",
        server_default=text("''"),
    )

    published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', published={self.published})>"
