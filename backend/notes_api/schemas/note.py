"""
Notes API — Pydantic Request/Response Schemas
===============================================

What:  Pydantic models defining the JSON contract of the notes endpoints.
How:   FastAPI validates request bodies against the *Create/*Update models and
       serializes responses through the envelope models below.
Who:   Used by route handlers; NoteUpdate is also handed to the repository.

Envelopes:
    List:    {"status": "success", "results": 2, "notes": [...]}
    Single:  {"status": "success", "data": {"note": {...}}}
    Health:  {"status": "success", "message": "..."}
    Error:   {"status": "fail" | "error", "message": "..."}
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """Body of POST /api/notes. A missing category is stored as ''."""
    title: str = Field(description="Unique note title")
    content: str = Field(description="Note body")
    category: Optional[str] = Field(default=None, description="Optional short label")


class NoteUpdate(BaseModel):
    """
    Body of PATCH /api/notes/{id}. Every field is optional.

    Only keys present in the JSON body are applied (see changes()). An explicit
    null clears `category` to ''; for the non-nullable columns an explicit null
    is ignored, the same as leaving the key out.
    """
    title: Optional[str] = Field(default=None, description="New title")
    content: Optional[str] = Field(default=None, description="New body")
    category: Optional[str] = Field(default=None, description="New label; null clears it")
    published: Optional[bool] = Field(default=None, description="New published flag")

    def changes(self) -> Dict[str, Any]:
        """Column → value for every field the client actually sent."""
        sent = self.model_dump(exclude_unset=True)
        if "category" in sent and sent["category"] is None:
            sent["category"] = ""
        return {key: value for key, value in sent.items() if value is not None}


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """Full representation of a note."""
    id: uuid.UUID
    title: str
    content: str
    category: str = ""
    published: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("category", mode="before")
    @classmethod
    def empty_category(cls, v: Optional[str]) -> str:
        """Rows written outside the API may hold NULL; render it as ''."""
        return v or ""


class NoteData(BaseModel):
    note: NoteResponse


class NoteEnvelope(BaseModel):
    """Returned by create, get and update."""
    status: str = Field(default="success")
    data: NoteData


class NoteListResponse(BaseModel):
    """Returned by GET /api/notes; `results` is the length of `notes`."""
    status: str = Field(default="success")
    results: int = Field(description="Number of notes in this page")
    notes: List[NoteResponse]


class HealthResponse(BaseModel):
    status: str = Field(default="success")
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error body for every API error.

    status: "fail" for client errors (4xx), "error" for server errors (5xx)
    """
    status: str = Field(description="'fail' or 'error'")
    message: str = Field(description="Human-readable error description")
