"""
Upload admission and photo file storage.

Admission validates the declared type and size of an uploaded file and assigns
it a stored name before any photo record exists. Storage writes admitted files
to the upload directory, creating it on first use.
"""
import os
import time
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from services.errors import ValidationError, StorageError
from services.security import security_config

logger = logging.getLogger(__name__)

# Admission constants
ALLOWED_MIME_TYPES = ('image/jpeg', 'image/png', 'image/gif', 'image/jpg')

MAX_FILE_SIZE = security_config.max_upload_size

INVALID_TYPE_MESSAGE = "Invalid file type. Only JPEG, PNG and GIF are allowed."

READ_CHUNK_SIZE = 64 * 1024

class FileValidationError(ValidationError):
    """Upload rejected by admission."""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason

@dataclass
class UploadCandidate:
    """What admission gets to see about an inbound file."""
    filename: str
    content_type: Optional[str]
    size: int

@dataclass
class AdmissionResult:
    stored_name: str

def generate_stored_name(original_filename: str) -> str:
    """
    Collision-resistant name: ``<epoch millis>-<random int><ext>``.
    The extension is taken from the original filename, lower-cased.
    """
    ext = Path(original_filename or "").suffix.lower()
    millis = int(time.time() * 1000)
    return f"{millis}-{secrets.randbelow(10**9 + 1)}{ext}"

def check_content_type(content_type: Optional[str]) -> None:
    """Reject a declared MIME type outside ALLOWED_MIME_TYPES."""
    if content_type not in ALLOWED_MIME_TYPES:
        raise FileValidationError(INVALID_TYPE_MESSAGE, "invalid_type")

def admit(candidate: UploadCandidate, max_size: int = None) -> AdmissionResult:
    """
    Validate an upload candidate and assign its stored name.

    Raises:
        FileValidationError: With reason ``invalid_type`` for a MIME type outside
            ALLOWED_MIME_TYPES, or ``too_large`` above the size limit.
    """
    max_size = MAX_FILE_SIZE if max_size is None else max_size

    check_content_type(candidate.content_type)

    if candidate.size > max_size:
        raise FileValidationError(
            f"File too large. Maximum size: {max_size // (1024 * 1024)}MB", "too_large"
        )

    return AdmissionResult(stored_name=generate_stored_name(candidate.filename))

async def read_upload(upload: UploadFile, max_size: int = None) -> bytes:
    """
    Read an upload into memory, stopping one byte past ``max_size``.

    Enough to tell an oversized file apart without buffering all of it.
    """
    max_size = MAX_FILE_SIZE if max_size is None else max_size
    chunks = []
    remaining = max_size + 1
    while remaining > 0:
        chunk = await upload.read(min(READ_CHUNK_SIZE, remaining))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)

class PhotoFileStorage:
    """
    Local disk storage for admitted photo files.
    """

    def __init__(self, base_storage_path: str = None):
        self.base_path = Path(base_storage_path or security_config.upload_dir)

    def ensure_directory(self) -> Path:
        self.base_path.mkdir(parents=True, exist_ok=True)
        return self.base_path

    def path_for(self, stored_name: str) -> Path:
        return self.base_path / stored_name

    def _write(self, stored_name: str, content: bytes) -> Path:
        target = self.ensure_directory() / stored_name
        # 'xb' never overwrites an existing photo
        with open(target, 'xb') as fh:
            fh.write(content)
        return target

    async def save(self, stored_name: str, content: bytes) -> Path:
        """Write an admitted file without blocking the event loop."""
        try:
            path = await run_in_threadpool(self._write, stored_name, content)
        except OSError as e:
            logger.error(f"Failed to store upload {stored_name}: {e}")
            raise StorageError("Error uploading photo", str(e))
        logger.info(f"Stored upload {stored_name} ({len(content)} bytes)")
        return path

    async def delete(self, stored_name: str) -> bool:
        """Remove a stored file; returns False if it was already gone."""
        path = self.path_for(stored_name)
        try:
            await run_in_threadpool(os.remove, path)
        except FileNotFoundError:
            return False
        return True

storage = PhotoFileStorage()
