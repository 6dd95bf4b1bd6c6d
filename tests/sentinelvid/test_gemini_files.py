"""Tests for GeminiFileUploader - mocking at HTTP boundary."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from sentinelvid.errors import AssetReadError, AuthError, MissingCredentialError, TransportError
from sentinelvid.gemini import GeminiFileUploader
from sentinelvid.models.asset import RemoteAssetHandle, VideoAsset
from sentinelvid.models.config import UPLOAD_CHUNK_GRANULARITY, GeminiConfig, TransportConfig
from tests.sentinelvid.conftest import TEST_CREDENTIAL

UPLOAD_URL = "https://generativelanguage.googleapis.com/upload/v1beta/files?upload_id=abc"


def _file_resource(state: str = "PROCESSING", **extra: Any) -> dict[str, Any]:
    resource = {
        "name": "files/abc123",
        "uri": "https://generativelanguage.googleapis.com/v1beta/files/abc123",
        "mimeType": "video/mp4",
        "state": state,
    }
    resource.update(extra)
    return resource


def _response(
    status: int = 200,
    body: Any = None,
    text: str = "",
    headers: dict[str, str] | None = None,
) -> AsyncMock:
    response = AsyncMock()
    response.status = status
    response.json = AsyncMock(return_value=body)
    response.text = AsyncMock(return_value=text)
    response.headers = headers or {}
    return response


def _make_async_cm(response: AsyncMock) -> AsyncMock:
    async_cm = AsyncMock()
    async_cm.__aenter__ = AsyncMock(return_value=response)
    async_cm.__aexit__ = AsyncMock(return_value=None)
    return async_cm


class FakeSession:
    """Records requests and replays queued responses in order."""

    def __init__(self, responses: list[AsyncMock]) -> None:
        self._responses = list(responses)
        self.posts: list[dict[str, Any]] = []
        self.gets: list[dict[str, Any]] = []
        self.closed = False

    def _next(self) -> AsyncMock:
        return _make_async_cm(self._responses.pop(0))

    def post(self, url: str, **kwargs: Any) -> AsyncMock:
        self.posts.append({"url": url, **kwargs})
        return self._next()

    def get(self, url: str, **kwargs: Any) -> AsyncMock:
        self.gets.append({"url": url, **kwargs})
        return self._next()

    async def close(self) -> None:
        self.closed = True


def _patch_session(monkeypatch: pytest.MonkeyPatch, session: Any) -> None:
    monkeypatch.setattr(
        "sentinelvid.gemini.files.aiohttp.ClientSession",
        lambda **_kw: session,
    )


def _uploader(chunk_bytes: int = UPLOAD_CHUNK_GRANULARITY) -> GeminiFileUploader:
    return GeminiFileUploader(GeminiConfig(), TransportConfig(upload_chunk_bytes=chunk_bytes))


def _start_response() -> AsyncMock:
    return _response(headers={"X-Goog-Upload-URL": UPLOAD_URL})


class TestUpload:
    @pytest.mark.asyncio
    async def test_resumable_upload_in_chunks(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Upload starts a resumable session then sends offset-tagged chunks."""
        # Given: A 2.5-chunk asset and a session accepting every request
        size = UPLOAD_CHUNK_GRANULARITY * 2 + 1000
        data = bytes(range(256)) * (size // 256) + bytes(size % 256)
        asset = VideoAsset.from_bytes(data, mime_type="video/mp4", name="yard.mp4")
        session = FakeSession(
            [
                _start_response(),
                _response(),
                _response(),
                _response(body={"file": _file_resource()}),
            ]
        )
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        # When: Uploading
        handle = await uploader.upload(asset, TEST_CREDENTIAL)

        # Then: The start request declares size and type
        start = session.posts[0]
        assert start["url"] == "https://generativelanguage.googleapis.com/upload/v1beta/files"
        assert start["json"] == {"file": {"display_name": "yard.mp4"}}
        assert start["headers"]["X-Goog-Upload-Protocol"] == "resumable"
        assert start["headers"]["X-Goog-Upload-Command"] == "start"
        assert start["headers"]["X-Goog-Upload-Header-Content-Length"] == str(size)
        assert start["headers"]["X-Goog-Upload-Header-Content-Type"] == "video/mp4"
        assert start["headers"]["x-goog-api-key"] == TEST_CREDENTIAL

        # Then: Chunks go to the upload URL and only the last one finalizes
        chunks = session.posts[1:]
        assert [c["url"] for c in chunks] == [UPLOAD_URL] * 3
        assert [c["headers"]["X-Goog-Upload-Command"] for c in chunks] == [
            "upload",
            "upload",
            "upload, finalize",
        ]
        assert [c["headers"]["X-Goog-Upload-Offset"] for c in chunks] == [
            "0",
            str(UPLOAD_CHUNK_GRANULARITY),
            str(UPLOAD_CHUNK_GRANULARITY * 2),
        ]
        assert b"".join(c["data"] for c in chunks) == data

        # Then: The handle reflects the returned file resource
        assert handle == RemoteAssetHandle(
            name="files/abc123",
            uri="https://generativelanguage.googleapis.com/v1beta/files/abc123",
            mime_type="video/mp4",
            state="PROCESSING",
        )
        await uploader.shutdown()
        assert session.closed

    @pytest.mark.asyncio
    async def test_path_asset_is_streamed(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        path = tmp_path / "drive.mp4"
        path.write_bytes(b"z" * 1000)
        session = FakeSession([_start_response(), _response(body=_file_resource())])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        handle = await uploader.upload(VideoAsset.from_path(path), TEST_CREDENTIAL)

        assert len(session.posts) == 2
        assert session.posts[1]["data"] == b"z" * 1000
        assert session.posts[1]["headers"]["X-Goog-Upload-Command"] == "upload, finalize"
        assert handle.name == "files/abc123"
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_vanished_file_is_asset_read_error(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """A file removed after selection fails as AssetReadError, not OSError."""
        # Given: A path asset whose file is deleted after it was described
        path = tmp_path / "drive.mp4"
        path.write_bytes(b"z" * 1000)
        asset = VideoAsset.from_path(path)
        path.unlink()
        session = FakeSession([_start_response()])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        # When/Then: The upload starts, then reading the first chunk fails
        with pytest.raises(AssetReadError) as exc_info:
            await uploader.upload(asset, TEST_CREDENTIAL)

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert len(session.posts) == 1
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_undecodable_error_body_is_transport_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        response = _response(status=502)
        response.text = AsyncMock(
            side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        )
        session = FakeSession([response])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        with pytest.raises(TransportError, match="undecodable"):
            await uploader.upload(
                VideoAsset.from_bytes(b"abc", mime_type="video/mp4"), TEST_CREDENTIAL
            )
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_missing_upload_url_is_transport_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        session = FakeSession([_response()])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        with pytest.raises(TransportError, match="upload URL"):
            await uploader.upload(
                VideoAsset.from_bytes(b"abc", mime_type="video/mp4"), TEST_CREDENTIAL
            )
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_start_rejected_key_is_auth_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = FakeSession([_response(status=403, text="PERMISSION_DENIED")])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        with pytest.raises(AuthError):
            await uploader.upload(
                VideoAsset.from_bytes(b"abc", mime_type="video/mp4"), TEST_CREDENTIAL
            )
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_chunk_server_error_is_transport_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        session = FakeSession([_start_response(), _response(status=503, text="unavailable")])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        with pytest.raises(TransportError) as exc_info:
            await uploader.upload(
                VideoAsset.from_bytes(b"abc", mime_type="video/mp4"), TEST_CREDENTIAL
            )

        assert exc_info.value.status == 503
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        session = MagicMock()
        session.post = MagicMock(side_effect=aiohttp.ClientConnectionError("reset"))
        session.close = AsyncMock()
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        with pytest.raises(TransportError) as exc_info:
            await uploader.upload(
                VideoAsset.from_bytes(b"abc", mime_type="video/mp4"), TEST_CREDENTIAL
            )

        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_missing_credential_makes_no_request(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        session = FakeSession([])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        with pytest.raises(MissingCredentialError):
            await uploader.upload(VideoAsset.from_bytes(b"abc", mime_type="video/mp4"), "")

        assert session.posts == []


class TestGetStatus:
    def _handle(self) -> RemoteAssetHandle:
        return RemoteAssetHandle(
            name="files/abc123",
            uri="https://generativelanguage.googleapis.com/v1beta/files/abc123",
            mime_type="video/mp4",
        )

    @pytest.mark.asyncio
    async def test_active_status(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = FakeSession([_response(body=_file_resource(state="ACTIVE"))])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        handle = await uploader.get_status(self._handle(), TEST_CREDENTIAL)

        assert handle.is_active
        assert session.gets[0]["url"] == (
            "https://generativelanguage.googleapis.com/v1beta/files/abc123"
        )
        assert session.gets[0]["headers"] == {"x-goog-api-key": TEST_CREDENTIAL}
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_failed_status_carries_error_message(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        body = _file_resource(state="FAILED", error={"code": 3, "message": "unsupported codec"})
        session = FakeSession([_response(body=body)])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        handle = await uploader.get_status(self._handle(), TEST_CREDENTIAL)

        assert handle.state == "FAILED"
        assert handle.error_message == "unsupported codec"
        assert not handle.is_processing
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_missing_state_is_unspecified(self, monkeypatch: pytest.MonkeyPatch) -> None:
        body = _file_resource()
        del body["state"]
        session = FakeSession([_response(body=body)])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        handle = await uploader.get_status(self._handle(), TEST_CREDENTIAL)

        assert handle.state == "STATE_UNSPECIFIED"
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_forbidden_status_is_auth_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session = FakeSession([_response(status=403, text="forbidden")])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        with pytest.raises(AuthError) as exc_info:
            await uploader.get_status(self._handle(), TEST_CREDENTIAL)

        assert exc_info.value.status == 403
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_response_without_resource_is_transport_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        session = FakeSession([_response(body={"unexpected": True})])
        _patch_session(monkeypatch, session)
        uploader = _uploader()

        with pytest.raises(TransportError, match="missing the file resource"):
            await uploader.get_status(self._handle(), TEST_CREDENTIAL)
        await uploader.shutdown()

    @pytest.mark.asyncio
    async def test_status_after_shutdown_raises(self) -> None:
        uploader = _uploader()
        await uploader.shutdown()

        with pytest.raises(RuntimeError, match="shut down"):
            await uploader.get_status(self._handle(), TEST_CREDENTIAL)
