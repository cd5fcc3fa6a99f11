"""Tests for the Cloudinary media storage service."""

import io

import httpx
import pytest
from fastapi import UploadFile

from src.services.media import MediaStorageService, save_upload_to_temp

_RealAsyncClient = httpx.AsyncClient


def _client_with(handler):
    """Build an AsyncClient factory that routes requests to handler."""

    def factory(**kwargs):
        return _RealAsyncClient(transport=httpx.MockTransport(handler), **kwargs)

    return factory


@pytest.fixture
def service(tmp_path):
    svc = MediaStorageService()
    svc.cloud_name = "demo"
    svc.api_key = "key123"
    svc.api_secret = "secret456"  # noqa: S105
    svc.base_url = "https://upload.test/v1_1"
    svc.temp_dir = str(tmp_path / "temp")
    return svc


@pytest.fixture
def local_file(tmp_path):
    path = tmp_path / "avatar.png"
    path.write_bytes(b"png-bytes")
    return path


class TestSaveUploadToTemp:
    """Tests for save_upload_to_temp."""

    def test_copies_upload(self, tmp_path):
        upload = UploadFile(file=io.BytesIO(b"hello"), filename="photo.jpg")
        path = save_upload_to_temp(upload, tmp_path / "staging")
        assert path.exists()
        assert path.suffix == ".jpg"
        assert path.read_bytes() == b"hello"


class TestUpload:
    """Tests for MediaStorageService.upload."""

    @pytest.mark.asyncio
    async def test_returns_secure_url(self, service, local_file, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(
                200,
                json={"secure_url": "https://cdn.test/avatar.png", "public_id": "avatar"},
            )

        monkeypatch.setattr("src.services.media.httpx.AsyncClient", _client_with(handler))

        result = await service.upload(local_file)

        assert result is not None
        assert result.url == "https://cdn.test/avatar.png"
        assert result.public_id == "avatar"
        assert seen["url"] == "https://upload.test/v1_1/demo/auto/upload"
        assert b"key123" in seen["body"]
        assert b"secret456" not in seen["body"]
        assert not local_file.exists()

    @pytest.mark.asyncio
    async def test_http_error_returns_none_and_removes_file(
        self, service, local_file, monkeypatch
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": {"message": "boom"}})

        monkeypatch.setattr("src.services.media.httpx.AsyncClient", _client_with(handler))

        assert await service.upload(local_file) is None
        assert not local_file.exists()

    @pytest.mark.asyncio
    async def test_response_without_url(self, service, local_file, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"public_id": "x"})

        monkeypatch.setattr("src.services.media.httpx.AsyncClient", _client_with(handler))

        assert await service.upload(local_file) is None

    @pytest.mark.asyncio
    async def test_missing_path(self, service, tmp_path):
        assert await service.upload(None) is None
        assert await service.upload(tmp_path / "nope.png") is None

    @pytest.mark.asyncio
    async def test_not_configured(self, service, local_file):
        service.api_secret = None
        assert await service.upload(local_file) is None
        assert not local_file.exists()

    @pytest.mark.asyncio
    async def test_upload_file_stages_then_uploads(self, service, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"url": "http://cdn.test/cover.png"})

        monkeypatch.setattr("src.services.media.httpx.AsyncClient", _client_with(handler))

        upload = UploadFile(file=io.BytesIO(b"cover"), filename="cover.png")
        result = await service.upload_file(upload)

        assert result.url == "http://cdn.test/cover.png"

    @pytest.mark.asyncio
    async def test_upload_file_without_file(self, service):
        assert await service.upload_file(None) is None


def test_signature_matches_cloudinary_scheme(service):
    """Signature is sha1 of the sorted params followed by the secret."""
    import hashlib

    expected = hashlib.sha1(b"timestamp=1700000000secret456").hexdigest()  # noqa: S324
    assert service._sign({"timestamp": "1700000000"}) == expected
