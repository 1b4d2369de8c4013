"""
FastAPI dependencies giving route handlers access to per-app state.

`create_app()` stores the Settings and the NoteStore on `app.state`; these
getters read them back for the current request, so handlers receive their
collaborators through `Depends(...)` instead of importing module globals.
Tests swap either one with `app.dependency_overrides`.
"""

from fastapi import Request

from notestore.config import Settings
from notestore.services.note_store import NoteStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_note_store(request: Request) -> NoteStore:
    return request.app.state.note_store
