"""Tests for the dual-strategy upload transport."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import patch

import httpx
import pytest

from course_studio.api.client import RequestClient
from course_studio.config import ApiConfig, UploadConfig
from course_studio.errors import UploadError
from course_studio.models.files import SourceFile
from course_studio.uploads.transport import TransferStrategy, UploadSession, UploadTransport

STORAGE_URL = "http://minio:9000/bucket/lesson.pdf?X-Amz-Signature=abc"


class Recorder:
    """Collects requests and replies with a canned response per host."""

    def __init__(self, status: int = 200, *, json: object | None = None, error: bool = False):
        self.status = status
        self.json = json if json is not None else {}
        self.error = error
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(await request.aread())
        self.requests.append(request)
        if self.error:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(self.status, json=self.json)


def _transport(
    api_config: ApiConfig,
    upload_config: UploadConfig,
    storage: Recorder,
    relay: Recorder,
    **kwargs,
) -> UploadTransport:
    client = RequestClient(api_config, transport=httpx.MockTransport(relay))
    http = httpx.AsyncClient(transport=httpx.MockTransport(storage))
    return UploadTransport(client, upload_config, http=http, **kwargs)


@pytest.mark.unit
class TestUploadSession:
    """Test progress reporting within one attempt."""

    def test_progress_never_moves_backwards(self, source_file: SourceFile) -> None:
        """Verify lower and repeated percentages are dropped."""
        seen: list[int] = []
        session = UploadSession(source_file, STORAGE_URL, TransferStrategy.DIRECT, seen.append)

        for percent in (10, 5, 10, 40, 120):
            session.report(percent)

        assert seen == [10, 40, 100]

    def test_forced_report_repeats_current_value(self, source_file: SourceFile) -> None:
        """Verify a forced report of the current value is forwarded."""
        seen: list[int] = []
        session = UploadSession(source_file, STORAGE_URL, TransferStrategy.RELAYED, seen.append)

        session.report(0, force=True)

        assert seen == [0]


@pytest.mark.unit
class TestDirectTransfer:
    """Test the direct storage PUT."""

    async def test_streams_file_and_reports_progress(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
    ) -> None:
        """Verify a successful direct PUT never touches the relay."""
        storage, relay = Recorder(200), Recorder(200)
        transport = _transport(api_config, upload_config, storage, relay)
        progress: list[int] = []

        await transport.transfer(STORAGE_URL, source_file, progress.append)

        assert progress == [25, 50, 75, 99, 100]
        assert relay.requests == []
        request = storage.requests[0]
        assert request.method == "PUT"
        assert request.headers["Content-Type"] == "application/pdf"
        assert request.headers["Content-Length"] == str(source_file.size_bytes)
        assert storage.bodies == [source_file.read_bytes()]

    async def test_probe_result_is_cached(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
    ) -> None:
        """Verify the capability probe runs once per transport."""
        calls: list[None] = []

        def probe() -> bool:
            calls.append(None)
            return True

        transport = _transport(api_config, upload_config, Recorder(), Recorder(), probe=probe)

        await transport.transfer(STORAGE_URL, source_file)
        await transport.transfer(STORAGE_URL, source_file)

        assert len(calls) == 1
        assert transport.strategy() is TransferStrategy.DIRECT


@pytest.mark.unit
class TestRelayFallback:
    """Test falling back to the same-origin relay."""

    @pytest.mark.parametrize("status", [None, 403], ids=["network-error", "rejected"])
    async def test_falls_back_when_direct_fails(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
        status: int | None,
    ) -> None:
        """Verify a failed direct attempt is repeated through the relay."""
        storage = Recorder(status or 200, error=status is None)
        relay = Recorder(200, json={"success": True})
        transport = _transport(api_config, upload_config, storage, relay)
        progress: list[int] = []

        await transport.transfer(STORAGE_URL, source_file, progress.append)

        assert len(relay.requests) == 1
        request = relay.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "http://testserver/internal/upload-proxy"
        assert b'name="uploadUrl"' in relay.bodies[0]
        assert STORAGE_URL.encode() in relay.bodies[0]
        assert source_file.read_bytes() in relay.bodies[0]
        assert progress[-2:] == [0, 100]

    async def test_relay_only_when_probe_fails(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
    ) -> None:
        """Verify a disabled direct path goes straight to the relay."""
        storage, relay = Recorder(200), Recorder(200)
        transport = _transport(
            api_config,
            replace(upload_config, direct_enabled=False),
            storage,
            relay,
        )
        progress: list[int] = []

        await transport.transfer(STORAGE_URL, source_file, progress.append)

        assert storage.requests == []
        assert len(relay.requests) == 1
        assert progress == [0, 100]

    async def test_unsupported_scheme_falls_back(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
    ) -> None:
        """Verify a non-HTTP target skips the direct PUT."""
        storage, relay = Recorder(200), Recorder(200)
        transport = _transport(api_config, upload_config, storage, relay)

        await transport.transfer("s3://bucket/lesson.pdf", source_file)

        assert storage.requests == []
        assert len(relay.requests) == 1

    async def test_both_strategies_failing_raises_upload_error(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
    ) -> None:
        """Verify the relay's error status and details surface on UploadError."""
        relay = Recorder(
            502,
            json={"error": "Error while uploading to storage", "details": "AccessDenied"},
        )
        transport = _transport(api_config, upload_config, Recorder(error=True), relay)
        progress: list[int] = []

        with pytest.raises(UploadError) as exc_info:
            await transport.transfer(STORAGE_URL, source_file, progress.append)

        assert exc_info.value.status == 502
        assert exc_info.value.details == "AccessDenied"
        assert str(exc_info.value) == "Error while uploading to storage"
        assert progress[-1] == 0

    async def test_unreachable_relay_raises_upload_error(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
    ) -> None:
        """Verify a relay network failure is still reported as an upload failure."""
        transport = _transport(
            api_config,
            upload_config,
            Recorder(error=True),
            Recorder(error=True),
        )

        with pytest.raises(UploadError) as exc_info:
            await transport.transfer(STORAGE_URL, source_file)

        assert exc_info.value.status is None


@pytest.mark.unit
class TestLocalFileFailures:
    """Test local read failures during a transfer."""

    async def test_read_error_during_direct_stream_falls_back(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
    ) -> None:
        """Verify a disk error mid-stream counts as a failed direct attempt."""

        async def broken_chunks(self, chunk_size):
            yield b"0123"
            raise OSError("I/O error")

        storage, relay = Recorder(200), Recorder(200)
        transport = _transport(api_config, upload_config, storage, relay)

        with patch.object(SourceFile, "iter_chunks", broken_chunks):
            await transport.transfer(STORAGE_URL, source_file)

        assert len(relay.requests) == 1
        assert source_file.read_bytes() in relay.bodies[0]

    async def test_missing_file_is_upload_error(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
        source_file: SourceFile,
    ) -> None:
        """Verify a file removed before the transfer surfaces as UploadError."""
        storage, relay = Recorder(200), Recorder(200)
        transport = _transport(api_config, upload_config, storage, relay)
        source_file.path.unlink()

        with pytest.raises(UploadError) as exc_info:
            await transport.transfer(STORAGE_URL, source_file)

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert storage.requests == []
        assert relay.requests == []


@pytest.mark.unit
class TestRelayUrl:
    """Test where the relayed transfer is sent."""

    def test_absolute_relay_url_is_used_as_is(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
    ) -> None:
        """Verify a relay on its own host and port is not rebased onto the API origin."""
        config = replace(upload_config, relay_url="http://127.0.0.1:3000/internal/upload-proxy")
        transport = _transport(api_config, config, Recorder(), Recorder())

        assert transport.relay_url == "http://127.0.0.1:3000/internal/upload-proxy"

    def test_path_relay_url_uses_api_origin(
        self,
        api_config: ApiConfig,
        upload_config: UploadConfig,
    ) -> None:
        """Verify a bare path targets the same origin as the API."""
        transport = _transport(api_config, upload_config, Recorder(), Recorder())

        assert transport.relay_url == "http://testserver/internal/upload-proxy"
