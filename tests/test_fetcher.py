"""Tests for downloading symbol-master files."""

from unittest.mock import patch

import aiohttp
import pytest

from catalog.services.ingestor.fetcher import DownloadError, download_file, download_instruments


class FakeResponse:
    def __init__(self, status, body=b""):
        self.status = status
        self.body = body

    async def read(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession with canned responses per URL."""

    def __init__(self, responses):
        self.responses = responses
        self.requested = []

    def get(self, url):
        self.requested.append(url)
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


@pytest.mark.asyncio
async def test_download_file_writes_body_verbatim(tmp_path):
    body = b'{"NSE:SBIN-EQ": {"symTicker": "NSE:SBIN-EQ"}}'
    session = FakeSession({"https://example.test/a.json": FakeResponse(200, body)})
    destination = tmp_path / "a.json"

    size = await download_file(session, "https://example.test/a.json", destination)

    assert size == len(body)
    assert destination.read_bytes() == body


@pytest.mark.asyncio
async def test_download_file_rejects_error_status(tmp_path):
    session = FakeSession({"https://example.test/a.json": FakeResponse(404, b"not found")})
    destination = tmp_path / "a.json"

    with pytest.raises(DownloadError, match="HTTP 404"):
        await download_file(session, "https://example.test/a.json", destination)

    assert not destination.exists()


@pytest.mark.asyncio
async def test_download_file_wraps_client_errors(tmp_path):
    session = FakeSession({"https://example.test/a.json": aiohttp.ClientConnectionError("refused")})

    with pytest.raises(DownloadError) as exc_info:
        await download_file(session, "https://example.test/a.json", tmp_path / "a.json")

    assert exc_info.value.url == "https://example.test/a.json"


@pytest.mark.asyncio
async def test_download_instruments_creates_directory(tmp_path):
    sources = {
        "NSE_CM_sym_master.json": "https://example.test/NSE_CM_sym_master.json",
        "MCX_COM_sym_master.json": "https://example.test/MCX_COM_sym_master.json",
    }
    session = FakeSession({url: FakeResponse(200, b"{}") for url in sources.values()})
    target = tmp_path / "nested" / "data"

    with patch("catalog.services.ingestor.fetcher.aiohttp.ClientSession", return_value=session):
        paths = await download_instruments(sources, target, timeout=5)

    assert sorted(path.name for path in paths) == sorted(sources)
    assert all(path.read_bytes() == b"{}" for path in paths)
    assert sorted(session.requested) == sorted(sources.values())


@pytest.mark.asyncio
async def test_download_instruments_fails_on_any_error(tmp_path):
    sources = {
        "NSE_CM_sym_master.json": "https://example.test/NSE_CM_sym_master.json",
        "BSE_CM_sym_master.json": "https://example.test/BSE_CM_sym_master.json",
    }
    session = FakeSession({
        sources["NSE_CM_sym_master.json"]: FakeResponse(200, b"{}"),
        sources["BSE_CM_sym_master.json"]: FakeResponse(503),
    })

    with patch("catalog.services.ingestor.fetcher.aiohttp.ClientSession", return_value=session):
        with pytest.raises(DownloadError, match="HTTP 503"):
            await download_instruments(sources, tmp_path, timeout=5)
