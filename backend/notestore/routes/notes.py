"""
NoteStore Backend - Notes Route Handlers
==========================================

What:  CRUD endpoints over the note files.
How:   Collect the request fields, delegate to NoteStore, format the response.
       Errors are raised as NoteStoreError subclasses and rendered by the
       global handlers in main.py.

Endpoints:
    GET    /notes          → 200 JSON [{name, text}, ...]
    GET    /notes/{name}   → 200 text/plain note content
    PUT    /notes/{name}   → 200 text/plain "Note updated"
    DELETE /notes/{name}   → 200 text/plain "Note deleted"
    POST   /write          → 201 JSON "Note created"

Request bodies:
    PUT and POST accept JSON objects, urlencoded forms and multipart forms
    (the upload form posts urlencoded). PUT also accepts a raw text/plain
    body, which is used as the new note text.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from notestore.dependencies import get_note_store
from notestore.exceptions import ValidationError
from notestore.schemas.note import ErrorResponse, NoteCreate, NoteItem, NoteUpdate
from notestore.services.note_store import NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

FORM_CONTENT_TYPES = {"application/x-www-form-urlencoded", "multipart/form-data"}

ModelT = TypeVar("ModelT", bound=BaseModel)


# ══════════════════════════════════════════════════════════════════════════
# Body parsing
# ══════════════════════════════════════════════════════════════════════════

def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError(message="Request body must be UTF-8 text")


async def read_body_fields(
    request: Request,
    plain_text_field: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Collect the fields of a request body into a dict.

    How:
        - Form content types: every form field; uploaded files are read and
          decoded as UTF-8 text.
        - text/plain: the whole body becomes `plain_text_field`, when given.
        - Anything else with a body: parsed as a JSON object.
        - Empty body: no fields.

    Raises:
        ValidationError if the body is not decodable or not a JSON object.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        fields: Dict[str, Any] = {}
        for key, value in form.items():
            if isinstance(value, UploadFile):
                fields[key] = _decode(await value.read())
            else:
                fields[key] = value
        return fields

    raw = await request.body()
    if content_type == "text/plain":
        if plain_text_field is None:
            return {}
        return {plain_text_field: _decode(raw)}

    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise ValidationError(message="Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError(message="Request body must be a JSON object")
    return data


def _require_utf8(fields: Dict[str, Any]) -> None:
    # JSON escapes can carry lone surrogates, which no file can store
    for key, value in fields.items():
        if isinstance(value, str):
            try:
                value.encode("utf-8")
            except UnicodeEncodeError:
                raise ValidationError(message="Text must be valid UTF-8", field=key)


def parse_fields(model: Type[ModelT], fields: Dict[str, Any]) -> ModelT:
    """Validate collected fields against a request schema."""
    _require_utf8(fields)
    try:
        return model.model_validate(fields)
    except PydanticValidationError as e:
        raise ValidationError(
            message="Invalid request body",
            context={"errors": e.errors(include_url=False)},
        )


# ══════════════════════════════════════════════════════════════════════════
# Routes
# ══════════════════════════════════════════════════════════════════════════

@router.get(
    "/notes",
    response_model=List[NoteItem],
    responses={500: {"description": "Storage directory unreadable", "model": ErrorResponse}},
    summary="List all notes",
    description=(
        "Returns every readable note as {name, text}, sorted by name. "
        "Files that cannot be read are skipped."
    ),
)
async def list_notes(store: NoteStore = Depends(get_note_store)) -> List[NoteItem]:
    return await store.list_notes()


@router.get(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Note content", "content": {"text/plain": {}}},
        400: {"description": "Invalid note name", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Read a note",
)
async def get_note(name: str, store: NoteStore = Depends(get_note_store)) -> PlainTextResponse:
    text = await store.get_note(name)
    return PlainTextResponse(text)


@router.put(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Note updated", "content": {"text/plain": {}}},
        400: {"description": "Text missing or invalid note name", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Replace the text of an existing note",
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": NoteUpdate.model_json_schema()},
                "text/plain": {"schema": {"type": "string"}},
            },
        },
    },
)
async def update_note(
    name: str,
    request: Request,
    store: NoteStore = Depends(get_note_store),
) -> PlainTextResponse:
    """
    Replace a note's text.

    An update never creates a note: a missing note is a 404 and no file is
    written. Use POST /write to create.
    """
    fields = await read_body_fields(request, plain_text_field="text")
    payload = parse_fields(NoteUpdate, fields)
    if payload.text is None:
        raise ValidationError(message="Text is required", field="text")

    await store.update_note(name, payload.text)
    return PlainTextResponse("Note updated")


@router.delete(
    "/notes/{name}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Note deleted", "content": {"text/plain": {}}},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Delete a note",
)
async def delete_note(name: str, store: NoteStore = Depends(get_note_store)) -> PlainTextResponse:
    await store.delete_note(name)
    return PlainTextResponse("Note deleted")


@router.post(
    "/write",
    status_code=201,
    responses={
        201: {"description": "Note created"},
        400: {"description": "Missing fields or note already exists", "model": ErrorResponse},
        500: {"description": "Note could not be written", "model": ErrorResponse},
    },
    summary="Create a note",
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": NoteCreate.model_json_schema()},
                "application/x-www-form-urlencoded": {"schema": NoteCreate.model_json_schema()},
            },
        },
    },
)
async def create_note(
    request: Request,
    store: NoteStore = Depends(get_note_store),
) -> JSONResponse:
    """
    Create a note from `note_name` and `note`.

    Both fields must be present and non-empty. An existing note of the same
    name is never overwritten.
    """
    fields = await read_body_fields(request)
    payload = parse_fields(NoteCreate, fields)
    if not payload.note_name or not payload.note:
        raise ValidationError(message="Note name and text are required")

    await store.create_note(payload.note_name, payload.note)
    return JSONResponse(status_code=201, content="Note created")
