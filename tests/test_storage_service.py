"""Tests for the storage upload client."""

import httpx
import pytest
from supabase import StorageException
from profile_form.services.storage_service import StorageService, StorageSettings, UploadError


class FakeBucket:
    """Stands in for a storage bucket proxy; records uploads."""

    def __init__(self, error=None):
        self.error = error
        self.uploads = []

    def upload(self, path, file, file_options=None):
        self.uploads.append((path, file, file_options))
        if self.error is not None:
            raise self.error
        return {"path": path}


class FakeStorageClient:
    def __init__(self, bucket):
        self.bucket = bucket
        self.opened = []

    def from_(self, bucket_id):
        self.opened.append(bucket_id)
        return self.bucket


class FakeSupabase:
    def __init__(self, bucket):
        self.storage = FakeStorageClient(bucket)


def make_settings(**overrides):
    values = {
        "supabase_url": "https://project.supabase.co",
        "supabase_key": "service-key",
        "storage_bucket": "avatars",
        "upload_timeout": 5,
    }
    values.update(overrides)
    return StorageSettings(**values)


def make_service(bucket, **overrides):
    return StorageService(settings=make_settings(**overrides), client=FakeSupabase(bucket))


@pytest.mark.asyncio
async def test_upload_sends_file_to_bucket():
    """Test the upload call made on the Supabase client."""
    bucket = FakeBucket()
    service = make_service(bucket)

    key = await service.upload("maria.png", b"image-bytes", "image/png")

    assert key == "maria.png"
    assert service.client.storage.opened == ["avatars"]
    assert bucket.uploads == [(
        "maria.png",
        b"image-bytes",
        {"content-type": "image/png", "cache-control": "3600", "x-upsert": "false"},
    )]


@pytest.mark.asyncio
async def test_default_bucket_name():
    """Test the placeholder bucket used when none is configured."""
    bucket = FakeBucket()
    settings = StorageSettings(supabase_url="https://project.supabase.co")
    service = StorageService(settings=settings, client=FakeSupabase(bucket))

    await service.upload("a.png", b"x")

    assert service.client.storage.opened == ["nome_do_seu_bucket"]


@pytest.mark.asyncio
async def test_rejected_upload_raises():
    """Test a storage error such as a duplicate key."""
    bucket = FakeBucket(error=StorageException({"statusCode": 400, "error": "Duplicate"}))
    service = make_service(bucket)

    with pytest.raises(UploadError, match="Duplicate"):
        await service.upload("maria.png", b"image-bytes")


@pytest.mark.asyncio
async def test_timeout_raises_upload_error():
    """Test that a transport timeout is wrapped."""
    bucket = FakeBucket(error=httpx.ReadTimeout("too slow"))
    service = make_service(bucket)

    with pytest.raises(UploadError, match="timed out"):
        await service.upload("maria.png", b"image-bytes")


@pytest.mark.asyncio
async def test_connection_error_raises_upload_error():
    """Test that a connection failure is wrapped."""
    bucket = FakeBucket(error=httpx.ConnectError("refused"))
    service = make_service(bucket)

    with pytest.raises(UploadError, match="Failed to communicate"):
        await service.upload("maria.png", b"image-bytes")


@pytest.mark.asyncio
async def test_missing_url_raises():
    """Test that an unconfigured service fails before creating a client."""
    service = StorageService(settings=make_settings(supabase_url=""))

    with pytest.raises(UploadError, match="not configured"):
        await service.upload("maria.png", b"image-bytes")


@pytest.mark.asyncio
async def test_malformed_url_raises():
    """Test that the client's own configuration checks are wrapped."""
    service = StorageService(settings=make_settings(supabase_url="project.supabase.co"))

    with pytest.raises(UploadError, match="Invalid storage configuration"):
        await service.upload("maria.png", b"image-bytes")
