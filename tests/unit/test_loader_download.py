"""
Unit Tests for OBO Download
===========================
Auto-download of a missing OBO file against a local aiohttp server.
"""
import asyncio
from pathlib import Path

import pytest
from aiohttp import web
from aiohttp import test_utils

from gosim.config import GoSimSettings
from gosim.core.errors import ResourceError
from gosim.ontology import OntologyLoader, download_file


FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
OBO_TEXT = (FIXTURES_DIR / "three_node.obo").read_text()


def _make_app() -> web.Application:
    async def obo(request):
        return web.Response(text=OBO_TEXT)

    async def moved(request):
        raise web.HTTPFound("/go-basic.obo")

    async def loop(request):
        raise web.HTTPFound("/loop")

    async def hop(request):
        # /hop/<n> answers after exactly n redirects
        remaining = int(request.match_info["n"])
        if remaining <= 0:
            return web.Response(text=OBO_TEXT)
        raise web.HTTPFound(f"/hop/{remaining - 1}")

    async def missing(request):
        raise web.HTTPNotFound()

    app = web.Application()
    app.router.add_get("/go-basic.obo", obo)
    app.router.add_get("/moved", moved)
    app.router.add_get("/loop", loop)
    app.router.add_get("/missing", missing)
    app.router.add_get("/hop/{n}", hop)
    return app


async def _with_server(scenario):
    server = test_utils.TestServer(_make_app())
    await server.start_server()
    try:
        return await scenario(server)
    finally:
        await server.close()


def _loader(path: Path, url: str = "", auto_download: bool = True) -> OntologyLoader:
    return OntologyLoader(GoSimSettings(
        obo_path=str(path),
        obo_url=url,
        auto_download=auto_download,
        max_redirects=3,
        download_timeout=10,
    ))


# =============================================================================
# download_file
# =============================================================================
class TestDownloadFile:
    """Streaming download with atomic rename"""

    def test_follows_redirect(self, tmp_path):
        destination = tmp_path / "go-basic.obo"

        async def scenario(server):
            return await download_file(str(server.make_url("/moved")), destination, max_redirects=3)

        result = asyncio.run(_with_server(scenario))

        assert result == destination
        assert destination.read_text() == OBO_TEXT
        assert not (tmp_path / "go-basic.obo.download").exists()

    def test_http_error(self, tmp_path):
        destination = tmp_path / "go-basic.obo"

        async def scenario(server):
            await download_file(str(server.make_url("/missing")), destination)

        with pytest.raises(ResourceError, match="HTTP 404"):
            asyncio.run(_with_server(scenario))

        assert not destination.exists()
        assert not (tmp_path / "go-basic.obo.download").exists()

    @pytest.mark.parametrize("hops,max_redirects", [(5, 5), (1, 1), (0, 0), (2, 5)])
    def test_redirects_within_limit(self, tmp_path, hops, max_redirects):
        destination = tmp_path / "go-basic.obo"

        async def scenario(server):
            await download_file(str(server.make_url(f"/hop/{hops}")), destination, max_redirects=max_redirects)

        asyncio.run(_with_server(scenario))
        assert destination.read_text() == OBO_TEXT

    @pytest.mark.parametrize("hops,max_redirects", [(6, 5), (1, 0), (30, 0)])
    def test_redirects_beyond_limit(self, tmp_path, hops, max_redirects):
        destination = tmp_path / "go-basic.obo"

        async def scenario(server):
            await download_file(str(server.make_url(f"/hop/{hops}")), destination, max_redirects=max_redirects)

        with pytest.raises(ResourceError, match="Too many redirects"):
            asyncio.run(_with_server(scenario))

        assert not destination.exists()
        assert not (tmp_path / "go-basic.obo.download").exists()


# =============================================================================
# OntologyLoader.ensure_obo_file / load
# =============================================================================
class TestAutoDownload:
    """Missing OBO handling in the loader"""

    def test_downloads_then_parses(self, tmp_path):
        path = tmp_path / "cache" / "go-basic.obo"

        async def scenario(server):
            return await _loader(path, str(server.make_url("/go-basic.obo"))).load()

        graph = asyncio.run(_with_server(scenario))

        assert path.exists()
        assert graph.total_nodes == 3

    def test_too_many_redirects(self, tmp_path):
        path = tmp_path / "go-basic.obo"

        async def scenario(server):
            await _loader(path, str(server.make_url("/loop"))).ensure_obo_file()

        with pytest.raises(ResourceError, match="Failed to auto-download GO OBO") as exc_info:
            asyncio.run(_with_server(scenario))

        assert exc_info.value.status == 500
        assert exc_info.value.details
        assert not path.exists()
        assert not (tmp_path / "go-basic.obo.download").exists()

    def test_not_found_is_wrapped(self, tmp_path):
        path = tmp_path / "go-basic.obo"

        async def scenario(server):
            await _loader(path, str(server.make_url("/missing"))).ensure_obo_file()

        with pytest.raises(ResourceError, match="Failed to auto-download GO OBO"):
            asyncio.run(_with_server(scenario))
        assert not path.exists()

    def test_unusable_cache_directory(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        loader = _loader(blocker / "go-basic.obo", "http://127.0.0.1:9/never")

        with pytest.raises(ResourceError, match="Failed to auto-download GO OBO"):
            asyncio.run(loader.ensure_obo_file())

    def test_disabled_auto_download(self, tmp_path):
        loader = _loader(tmp_path / "go-basic.obo", "http://127.0.0.1:9/never", auto_download=False)

        with pytest.raises(ResourceError, match="Missing GO OBO file"):
            asyncio.run(loader.load())

    def test_existing_file_not_downloaded(self, tmp_path):
        path = tmp_path / "go-basic.obo"
        path.write_text(OBO_TEXT)
        # unreachable URL: any download attempt would fail
        loader = _loader(path, "http://127.0.0.1:9/never")

        graph = asyncio.run(loader.load())
        assert graph.total_nodes == 3
