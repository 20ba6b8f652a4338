"""
Tests for upload admission and photo file storage.
"""
import re
import pytest

from services.errors import ValidationError, StorageError
from services.file_storage import (
    admit, generate_stored_name, UploadCandidate, FileValidationError,
    PhotoFileStorage, ALLOWED_MIME_TYPES, MAX_FILE_SIZE
)

KIB = 1024
MIB = 1024 * 1024
STORED_NAME = re.compile(r"^\d{13}-\d+\.png$")

class TestAdmission:

    def test_default_limit_is_five_mib(self):
        assert MAX_FILE_SIZE == 5 * MIB

    def test_oversized_jpeg_rejected(self):
        with pytest.raises(FileValidationError) as exc_info:
            admit(UploadCandidate("beach.jpg", "image/jpeg", 6 * MIB))
        assert exc_info.value.reason == "too_large"
        assert "too large" in exc_info.value.message.lower()

    def test_text_file_rejected(self):
        with pytest.raises(FileValidationError) as exc_info:
            admit(UploadCandidate("notes.txt", "text/plain", KIB))
        assert exc_info.value.reason == "invalid_type"
        assert "invalid file type" in exc_info.value.message.lower()

    def test_rejections_are_validation_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            admit(UploadCandidate("a.bin", None, KIB))
        assert exc_info.value.status_code == 400

    def test_png_accepted_with_unique_name(self):
        first = admit(UploadCandidate("cat.png", "image/png", KIB))
        second = admit(UploadCandidate("cat.png", "image/png", KIB))

        assert STORED_NAME.match(first.stored_name)
        assert first.stored_name.endswith(".png")
        assert first.stored_name != second.stored_name

    @pytest.mark.parametrize("mime_type", ALLOWED_MIME_TYPES)
    def test_every_allowed_type(self, mime_type):
        assert admit(UploadCandidate("x.img", mime_type, KIB)).stored_name.endswith(".img")

    def test_exact_limit_accepted(self):
        assert admit(UploadCandidate("big.gif", "image/gif", 5 * MIB)).stored_name.endswith(".gif")

    def test_custom_limit(self):
        with pytest.raises(FileValidationError):
            admit(UploadCandidate("a.png", "image/png", 2 * KIB), max_size=KIB)

class TestStoredNames:

    def test_extension_lowercased(self):
        assert generate_stored_name("IMG_0001.JPG").endswith(".jpg")

    def test_no_extension(self):
        assert re.match(r"^\d+-\d+$", generate_stored_name("photo"))

    def test_names_do_not_repeat(self):
        names = {generate_stored_name("a.png") for _ in range(200)}
        assert len(names) == 200

@pytest.mark.asyncio
class TestPhotoFileStorage:

    async def test_save_creates_directory(self, tmp_path):
        storage = PhotoFileStorage(str(tmp_path / "nested" / "images"))

        path = await storage.save("1-2.png", b"\x89PNG data")

        assert path.read_bytes() == b"\x89PNG data"
        assert path.parent == tmp_path / "nested" / "images"

    async def test_save_never_overwrites(self, tmp_path):
        storage = PhotoFileStorage(str(tmp_path))
        await storage.save("1-2.png", b"first")

        with pytest.raises(StorageError):
            await storage.save("1-2.png", b"second")
        assert (tmp_path / "1-2.png").read_bytes() == b"first"

    async def test_delete(self, tmp_path):
        storage = PhotoFileStorage(str(tmp_path))
        await storage.save("1-2.png", b"data")

        assert await storage.delete("1-2.png") is True
        assert await storage.delete("1-2.png") is False
        assert not (tmp_path / "1-2.png").exists()
