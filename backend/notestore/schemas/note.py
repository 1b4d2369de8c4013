"""
NoteStore Backend - Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract of the note service.
Why:   Type checking of request bodies, serialization of responses, and the
       OpenAPI document FastAPI generates at /docs.
How:   Request bodies arrive as JSON, urlencoded or multipart forms; the
       routes collect the fields into a dict and validate it with these
       models. Responses are serialized from NoteItem / HealthResponse.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteItem(BaseModel):
    """
    What:  One note as returned by GET /notes.
    How:   `name` is the file stem, `text` the full file contents.
    """
    name: str = Field(description="Note name (file stem without .txt)")
    text: str = Field(description="Full note content")


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every endpoint.

    Example:
        {"error": "Note not found"}
    """
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and container health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    storage: str = Field(description="Storage directory status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since the app was created")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    Body of POST /write.

    Both fields are optional at the schema level so that a missing field
    produces the service's own 400 message instead of FastAPI's 422.
    """
    note_name: Optional[str] = Field(default=None, description="Name of the new note")
    note: Optional[str] = Field(default=None, description="Text of the new note")


class NoteUpdate(BaseModel):
    """Body of PUT /notes/{name}."""
    text: Optional[str] = Field(default=None, description="Replacement note text")
