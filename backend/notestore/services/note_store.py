"""
NoteStore Backend - Note Storage Service
==========================================

What:  Maps note operations onto files inside the storage directory.
Why:   Keeps every file system concern (path derivation, name safety, I/O
       errors) out of the route handlers.
How:   One `<name>.txt` per note, read and written asynchronously with
       aiofiles so a slow disk never stalls the event loop. OSErrors are
       translated into application exceptions here; routes never see them.
Who:   Route handlers, through the `get_note_store` dependency.

Storage layout:
    storage/
    ├── groceries.txt
    ├── todo.txt
    └── .todo.txt.3f2a...tmp   (transient, only during an update)

Concurrency:
    No locks. Create uses an exclusive open, so two racing creates cannot
    both succeed. Update replaces content by renaming a fully written temp
    file over the note, so readers see either the old or the new text. The
    existence check before that rename is not atomic with it: an update
    racing a delete can bring the note back, and concurrent updates are
    last-writer-wins.
"""

import logging
import uuid
from pathlib import Path
from typing import List, Union

import aiofiles
import aiofiles.os

from notestore.exceptions import (
    FileStorageError,
    InvalidNoteNameError,
    NoteAlreadyExistsError,
    NoteNotFoundError,
)
from notestore.schemas.note import NoteItem

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".txt"
NOTE_ENCODING = "utf-8"

# Characters that would let a name escape the storage directory
_FORBIDDEN_NAME_CHARS = ("/", "\\", "\x00")


class NoteStore:
    """
    File-backed note repository.

    Every public method is a coroutine and raises only NoteStoreError
    subclasses:
        list_notes()   → FileStorageError when the directory can't be listed
        get_note()     → NoteNotFoundError
        create_note()  → ValidationError, NoteAlreadyExistsError, FileStorageError
        update_note()  → NoteNotFoundError
        delete_note()  → NoteNotFoundError
    """

    def __init__(self, storage_root: Union[str, Path]):
        self.storage_root = Path(storage_root).resolve()

    # ── Paths ─────────────────────────────────────────────────────────────

    def validate_name(self, name: str) -> str:
        """
        Reject names that are not safe to use as a file stem.

        Raises:
            InvalidNoteNameError for empty names, "." / "..", and names
            containing a path separator, NUL or a lone surrogate.
        """
        if not name or name in (".", ".."):
            raise InvalidNoteNameError(name)
        if any(ch in name for ch in _FORBIDDEN_NAME_CHARS):
            raise InvalidNoteNameError(name)
        try:
            name.encode(NOTE_ENCODING)
        except UnicodeEncodeError:
            raise InvalidNoteNameError(name)
        return name

    def note_path(self, name: str) -> Path:
        """
        Build the absolute path of `<name>.txt` inside the storage directory.

        The resolved path must be a direct child of the storage root; the
        name checks above guarantee it, the comparison below enforces it.
        """
        self.validate_name(name)
        path = (self.storage_root / f"{name}{NOTE_SUFFIX}").resolve()
        if path.parent != self.storage_root:
            raise InvalidNoteNameError(name, context={"resolved": str(path)})
        return path

    async def ensure_storage(self) -> None:
        """Create the storage directory if it does not exist yet."""
        try:
            await aiofiles.os.makedirs(self.storage_root, exist_ok=True)
        except OSError as e:
            raise FileStorageError(
                message="Storage directory is not available",
                context={"path": str(self.storage_root), "os_error": str(e)},
            )

    async def storage_available(self) -> bool:
        return await aiofiles.os.path.isdir(self.storage_root)

    # ── Low-level I/O ─────────────────────────────────────────────────────

    async def _read_text(self, path: Path) -> str:
        # newline="" keeps the stored bytes exactly as written
        async with aiofiles.open(path, "r", encoding=NOTE_ENCODING, newline="") as f:
            return await f.read()

    async def _discard(self, path: Path) -> None:
        """Best-effort removal of a partially written file."""
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to clean up %s: %s", path.name, str(e))

    # ── Operations ────────────────────────────────────────────────────────

    async def list_notes(self) -> List[NoteItem]:
        """
        Return every readable note in the storage directory, sorted by name.

        Partial-failure policy:
            A `.txt` entry that cannot be read (a directory, bad permissions,
            undecodable bytes) is skipped and logged; the remaining notes are
            still returned. Only a failure to list the directory itself is
            an error.
        """
        try:
            entries = await aiofiles.os.listdir(self.storage_root)
        except OSError as e:
            logger.error("Error reading storage directory %s: %s", self.storage_root, str(e))
            raise FileStorageError(
                message="Error reading notes",
                context={"path": str(self.storage_root), "os_error": str(e)},
            )

        notes: List[NoteItem] = []
        skipped = 0
        for entry in sorted(entries):
            if not entry.endswith(NOTE_SUFFIX):
                continue
            name = entry[: -len(NOTE_SUFFIX)]
            if not name:
                continue
            try:
                text = await self._read_text(self.storage_root / entry)
            except (OSError, UnicodeDecodeError) as e:
                skipped += 1
                logger.warning("Error reading file %s: %s", entry, str(e))
                continue
            notes.append(NoteItem(name=name, text=text))

        logger.debug("Listed %d notes (%d skipped)", len(notes), skipped)
        return notes

    async def get_note(self, name: str) -> str:
        """Return the full text of a note."""
        path = self.note_path(name)
        try:
            return await self._read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Note %r unreadable: %s", name, str(e))
            raise NoteNotFoundError(name, context={"error": str(e)})

    async def create_note(self, name: str, text: str) -> None:
        """
        Write a new note, failing if one with the same name already exists.

        How:     Mode "x" (O_CREAT | O_EXCL) makes the existence check and the
                 creation a single file system operation.
        Raises:
            NoteAlreadyExistsError: `<name>.txt` is present; it is left untouched
            FileStorageError: the file could not be created or written
        """
        path = self.note_path(name)
        try:
            f = await aiofiles.open(path, "x", encoding=NOTE_ENCODING, newline="")
        except FileExistsError:
            raise NoteAlreadyExistsError(name)
        except OSError as e:
            logger.error("Failed to create note %s: %s", path, str(e))
            raise FileStorageError(
                message="Error writing note",
                context={"path": str(path), "os_error": str(e)},
            )

        try:
            try:
                await f.write(text)
            finally:
                await f.close()
        except (OSError, UnicodeEncodeError) as e:
            # The file is ours (exclusive create), so a partial write is removed
            logger.error("Failed to write note %s: %s", path, str(e))
            await self._discard(path)
            raise FileStorageError(
                message="Error writing note",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("Note created: %s (%d chars)", name, len(text))

    async def update_note(self, name: str, text: str) -> None:
        """
        Replace the text of an existing note.

        How:     Check the note exists, write the new text to a hidden temp
                 file next to it, then rename the temp file over the note.
        Raises:
            NoteNotFoundError: the note is missing, or the write failed
        """
        path = self.note_path(name)
        if not await aiofiles.os.path.isfile(path):
            raise NoteNotFoundError(name)

        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding=NOTE_ENCODING, newline="") as f:
                await f.write(text)
            await aiofiles.os.replace(tmp_path, path)
        except (OSError, UnicodeEncodeError) as e:
            logger.warning("Failed to update note %s: %s", name, str(e))
            await self._discard(tmp_path)
            raise NoteNotFoundError(name, context={"os_error": str(e)})

        logger.info("Note updated: %s (%d chars)", name, len(text))

    async def delete_note(self, name: str) -> None:
        """Remove a note."""
        path = self.note_path(name)
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            raise NoteNotFoundError(name, context={"os_error": str(e)})

        logger.info("Note deleted: %s", name)
