"""Tests for check-in photo storage."""

import pytest

from terramine.exceptions import PhotoRejected
from terramine.services.photos import LocalObjectStore

JPEG = b"\xff\xd8\xff\xe0" + b"jpegdata"
PNG = b"\x89PNG\r\n\x1a\n" + b"pngdata"


@pytest.fixture
def photo_store(tmp_path):
    return LocalObjectStore(tmp_path, "https://cdn.example.com/photos/", max_bytes=1024)


class TestLocalObjectStore:
    """Tests for the directory-backed object store."""

    async def test_put_jpeg(self, photo_store, tmp_path):
        url = await photo_store.put(JPEG, "checkins/1_2/bob_1000")
        assert url == "https://cdn.example.com/photos/checkins/1_2/bob_1000.jpg"
        assert (tmp_path / "checkins" / "1_2" / "bob_1000.jpg").read_bytes() == JPEG

    async def test_put_png(self, photo_store):
        url = await photo_store.put(PNG, "checkins/1_2/bob_2000")
        assert url.endswith(".png")

    async def test_rejects_unknown_format(self, photo_store):
        with pytest.raises(PhotoRejected, match="JPEG or PNG"):
            await photo_store.put(b"GIF89a....", "checkins/1_2/bob")

    async def test_rejects_empty(self, photo_store):
        with pytest.raises(PhotoRejected):
            await photo_store.put(b"", "checkins/1_2/bob")

    async def test_rejects_oversized(self, photo_store):
        with pytest.raises(PhotoRejected, match="exceeds"):
            await photo_store.put(JPEG + b"\x00" * 2048, "checkins/1_2/bob")

    @pytest.mark.parametrize("key", ["../escape", "checkins/../../etc/passwd", "/abs/path"])
    async def test_rejects_path_traversal(self, photo_store, key):
        with pytest.raises(PhotoRejected):
            await photo_store.put(JPEG, key)

    def test_rejected_photo_maps_to_413(self):
        assert PhotoRejected.status_code == 413

    async def test_delete_removes_object(self, photo_store, tmp_path):
        url = await photo_store.put(JPEG, "checkins/1_2/bob_3000")
        await photo_store.delete(url)
        assert not (tmp_path / "checkins" / "1_2" / "bob_3000.jpg").exists()

        # Deleting twice is harmless
        await photo_store.delete(url)

    @pytest.mark.parametrize(
        "reference",
        ["https://elsewhere.example.com/x.jpg", "https://cdn.example.com/photos/../secret.jpg"],
    )
    async def test_delete_rejects_foreign_references(self, photo_store, reference):
        with pytest.raises(PhotoRejected):
            await photo_store.delete(reference)
