"""
NoteStore Backend - Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every way a note operation can fail.
Why:   The service layer raises these instead of leaking OSError details; the
       global handlers registered in main.py turn each type into its HTTP
       status with a `{"error": message}` body.
How:   Each exception carries a client-safe message and an optional context
       dict that is logged but never returned.

Exception Hierarchy:
    NoteStoreError (base)            → 500 Internal Server Error
    ├── ValidationError              → 400 Bad Request
    │   └── InvalidNoteNameError     → 400 Bad Request
    ├── NoteAlreadyExistsError       → 400 Bad Request
    ├── NoteNotFoundError            → 404 Not Found
    ├── FileStorageError             → 500 Internal Server Error
    └── RateLimitExceededError       → 429 Too Many Requests
"""

from typing import Any, Dict, Optional


class NoteStoreError(Exception):
    """
    Base exception for all NoteStore application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteStoreError):
    """
    Raised when client input fails validation.

    When:    Missing `note_name`/`note` on create, missing `text` on update,
             or a request body that cannot be parsed.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidNoteNameError(ValidationError):
    """
    Raised when a note name cannot be used safely as a file stem.

    What:    Empty names, "." / "..", and names containing path separators or
             NUL would let a request read or write outside the storage directory.
    HTTP:    400 Bad Request
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["name"] = name
        super().__init__(message="Invalid note name", field="name", context=ctx)
        self.name = name


class NoteAlreadyExistsError(NoteStoreError):
    """
    Raised by create when `<name>.txt` is already present.

    HTTP:    400 Bad Request (the create endpoint reports conflicts as 400)
    """

    status_code = 400

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["name"] = name
        super().__init__(message="Note already exists", context=ctx)
        self.name = name


class NoteNotFoundError(NoteStoreError):
    """
    Raised when a note file is absent or cannot be used.

    What:    Absence, permission problems and other read/remove failures are
             deliberately indistinguishable to the client.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["name"] = name
        super().__init__(message="Note not found", context=ctx)
        self.name = name


class FileStorageError(NoteStoreError):
    """
    Raised when a file system operation fails in a way that is not the client's fault.

    When:    Storage directory cannot be listed, a new note cannot be written,
             the upload form cannot be read.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(NoteStoreError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
