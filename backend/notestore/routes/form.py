"""
NoteStore Backend - Upload Form Route
=======================================

What:  Serves the static HTML form that posts new notes to /write.
How:   Reads the file on every request (packaged copy, or the path set in
       NOTESTORE_UPLOAD_FORM_PATH) so edits show up without a restart.
"""

import logging
from pathlib import Path

import aiofiles
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from notestore.config import Settings
from notestore.dependencies import get_settings
from notestore.exceptions import FileStorageError
from notestore.schemas.note import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Form"])

PACKAGED_FORM_PATH = Path(__file__).resolve().parent.parent / "static" / "UploadForm.html"


def resolve_form_path(settings: Settings) -> Path:
    if settings.upload_form_path:
        return Path(settings.upload_form_path)
    return PACKAGED_FORM_PATH


@router.get(
    "/UploadForm.html",
    response_class=HTMLResponse,
    responses={500: {"description": "Form could not be read", "model": ErrorResponse}},
    summary="HTML form for creating a note",
)
async def upload_form(settings: Settings = Depends(get_settings)) -> HTMLResponse:
    path = resolve_form_path(settings)
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            html = await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileStorageError(
            message="Error reading HTML form",
            context={"path": str(path), "error": str(e)},
        )
    return HTMLResponse(html)
