"""Unit tests for the blob-backed media store."""

from unittest.mock import AsyncMock

import pytest

from src.commons.infrastructure.blob.base import StoredObject
from src.commons.settings.models import BlobStorageSettings, MediaSettings
from src.infrastructure.media.base import LocalMedia, MediaKind, MediaStoreError
from src.infrastructure.media.blob_media_store import BlobMediaStore

BASE_URL = "http://cdn.local"


@pytest.fixture
def blob_storage():
    """Blob storage double that echoes uploads back as metadata."""
    storage = AsyncMock()

    async def upload(bucket, path, data, content_type="application/octet-stream"):
        payload = data.read()
        return StoredObject(
            bucket=bucket,
            path=path,
            size_bytes=len(payload),
            content_type=content_type,
            etag="etag",
        )

    storage.upload.side_effect = upload
    storage.delete.return_value = True
    return storage


@pytest.fixture
def probe():
    """Duration probe returning a fixed duration."""
    probe = AsyncMock()
    probe.probe_duration.return_value = 42.0
    return probe


@pytest.fixture
def media_store(blob_storage, probe):
    """Media store with mocked collaborators."""
    return BlobMediaStore(
        blob_storage,
        probe,
        BlobStorageSettings(public_base_url=f"{BASE_URL}/"),
        MediaSettings(),
    )


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "clip.MP4"
    path.write_bytes(b"\x00" * 128)
    return path


class TestReferences:
    """Tests for building and parsing references."""

    def test_reference_for(self, media_store):
        assert (
            media_store.reference_for("catalog-videos", "a.mp4")
            == "http://cdn.local/catalog-videos/a.mp4"
        )

    def test_parse_reference(self, media_store):
        assert media_store.parse_reference(
            "http://cdn.local/catalog-thumbnails/x/y.jpg"
        ) == ("catalog-thumbnails", "x/y.jpg")

    @pytest.mark.parametrize(
        "reference",
        [
            "",
            "https://elsewhere.example/catalog-videos/a.mp4",
            "http://cdn.local/unknown-bucket/a.mp4",
            "http://cdn.local/catalog-videos/",
        ],
    )
    def test_foreign_references(self, media_store, reference):
        assert media_store.parse_reference(reference) is None


class TestUpload:
    """Tests for upload."""

    async def test_video_is_probed_and_stored(
        self, media_store, blob_storage, probe, video_file
    ):
        uploaded = await media_store.upload(
            LocalMedia(path=video_file), MediaKind.VIDEO
        )

        probe.probe_duration.assert_awaited_once_with(video_file)
        bucket, path = blob_storage.upload.call_args.args[:2]
        assert bucket == "catalog-videos"
        assert path.endswith(".mp4")
        assert blob_storage.upload.call_args.kwargs["content_type"] == "video/mp4"
        assert uploaded.url == f"{BASE_URL}/catalog-videos/{path}"
        assert uploaded.kind is MediaKind.VIDEO
        assert uploaded.size_bytes == 128
        assert uploaded.duration == 42.0

    async def test_thumbnail_is_not_probed(
        self, media_store, blob_storage, probe, tmp_path
    ):
        image = tmp_path / "cover.png"
        image.write_bytes(b"png")

        uploaded = await media_store.upload(
            LocalMedia(path=image, content_type="image/webp"), MediaKind.THUMBNAIL
        )

        probe.probe_duration.assert_not_called()
        assert blob_storage.upload.call_args.args[0] == "catalog-thumbnails"
        assert blob_storage.upload.call_args.kwargs["content_type"] == "image/webp"
        assert uploaded.duration is None

    async def test_missing_file(self, media_store, blob_storage, tmp_path):
        with pytest.raises(MediaStoreError) as exc_info:
            await media_store.upload(
                LocalMedia(path=tmp_path / "gone.mp4"), MediaKind.VIDEO
            )

        assert exc_info.value.operation == "upload"
        blob_storage.upload.assert_not_called()

    async def test_probe_failure_propagates(
        self, media_store, blob_storage, probe, video_file
    ):
        probe.probe_duration.side_effect = MediaStoreError(
            "probe", str(video_file), "no duration reported"
        )

        with pytest.raises(MediaStoreError):
            await media_store.upload(LocalMedia(path=video_file), MediaKind.VIDEO)

        blob_storage.upload.assert_not_called()

    async def test_store_error_is_wrapped(self, media_store, blob_storage, video_file):
        blob_storage.upload.side_effect = RuntimeError("bucket full")

        with pytest.raises(MediaStoreError, match="bucket full"):
            await media_store.upload(LocalMedia(path=video_file), MediaKind.VIDEO)


class TestDelete:
    """Tests for delete."""

    async def test_delete_parses_reference(self, media_store, blob_storage):
        removed = await media_store.delete(f"{BASE_URL}/catalog-videos/a.mp4")

        assert removed is True
        blob_storage.delete.assert_awaited_once_with("catalog-videos", "a.mp4")

    async def test_foreign_reference_is_refused(self, media_store, blob_storage):
        removed = await media_store.delete("https://elsewhere.example/x/a.mp4")

        assert removed is False
        blob_storage.delete.assert_not_called()

    async def test_already_absent_counts_as_deleted(self, media_store, blob_storage):
        blob_storage.delete.return_value = False

        assert await media_store.delete(f"{BASE_URL}/catalog-videos/a.mp4") is True

    async def test_store_error_is_wrapped(self, media_store, blob_storage):
        blob_storage.delete.side_effect = RuntimeError("timeout")

        with pytest.raises(MediaStoreError) as exc_info:
            await media_store.delete(f"{BASE_URL}/catalog-videos/a.mp4")

        assert exc_info.value.operation == "delete"


class TestEnsureBuckets:
    """Tests for bucket bootstrap."""

    async def test_creates_missing_buckets_only(self, media_store, blob_storage):
        blob_storage.bucket_exists.side_effect = lambda bucket: bucket == (
            "catalog-videos"
        )

        await media_store.ensure_buckets_exist()

        blob_storage.create_bucket.assert_awaited_once_with("catalog-thumbnails")
