"""
Tests for the async artifact fetcher
"""
import asyncio
import dataclasses

import pytest
from aiohttp import web

from fetcher import ArtifactFetcher, fetch_site_artifacts
from utils import normalize_target
from conftest import text_route, origin_of


class TestArtifactFetcher:
    """Tests for single-resource fetching"""

    async def test_ok_response(self, site_server, test_config):
        """Test that a 2xx response carries its body"""
        server = await site_server({"/llms.txt": text_route("# Acme\n> Plumbing")})

        async with ArtifactFetcher(test_config) as fetcher:
            outcome = await fetcher.fetch(origin_of(server) + "/llms.txt")

        assert outcome.ok is True
        assert outcome.status == 200
        assert outcome.body == "# Acme\n> Plumbing"

    async def test_not_found(self, site_server, test_config):
        """Test that a non-2xx response is reachable but does not exist"""
        server = await site_server({})

        async with ArtifactFetcher(test_config) as fetcher:
            outcome = await fetcher.fetch(origin_of(server) + "/llms.txt")

        assert outcome.reachable is True
        assert outcome.ok is False
        assert outcome.status == 404
        assert outcome.body == ""

    async def test_sends_user_agent(self, site_server, test_config):
        """Test that requests identify the scanner"""
        seen = {}

        async def echo(request):
            seen["ua"] = request.headers.get("User-Agent")
            return web.Response(text="ok")

        server = await site_server({"/": echo})
        async with ArtifactFetcher(test_config) as fetcher:
            await fetcher.fetch(origin_of(server) + "/")

        assert seen["ua"] == "AIVisibilityChecker/1.0"

    async def test_follows_redirects(self, site_server, test_config):
        """Test that redirects are followed to the final resource"""
        async def moved(request):
            raise web.HTTPFound("/robots-new.txt")

        server = await site_server({
            "/robots.txt": moved,
            "/robots-new.txt": text_route("User-agent: GPTBot\nAllow: /"),
        })
        async with ArtifactFetcher(test_config) as fetcher:
            outcome = await fetcher.fetch(origin_of(server) + "/robots.txt")

        assert outcome.ok is True
        assert "GPTBot" in outcome.body

    async def test_timeout_is_unreachable(self, site_server, test_config):
        """Test that a slow resource resolves to unreachable instead of raising"""
        async def slow(request):
            await asyncio.sleep(0.5)
            return web.Response(text="late")

        server = await site_server({"/": slow})
        cfg = dataclasses.replace(test_config, fetch_timeout=0.1)
        async with ArtifactFetcher(cfg) as fetcher:
            outcome = await fetcher.fetch(origin_of(server) + "/")

        assert outcome.reachable is False
        assert outcome.status is None

    async def test_connection_refused_is_unreachable(self, test_config):
        """Test that a transport error resolves to unreachable"""
        async with ArtifactFetcher(test_config) as fetcher:
            outcome = await fetcher.fetch("http://127.0.0.1:1/robots.txt")

        assert outcome.reachable is False
        assert outcome.ok is False


class TestFetchArtifacts:
    """Tests for the four-resource fan-out"""

    async def test_fetches_all_four(self, site_server, test_config):
        """Test that each artifact lands in its own slot"""
        server = await site_server({
            "/robots.txt": text_route("User-agent: *\nAllow: /"),
            "/sitemap.xml": text_route("<urlset/>", content_type="application/xml"),
            "/": text_route("<h1>Home</h1>", content_type="text/html"),
        })
        artifacts = await fetch_site_artifacts(normalize_target(origin_of(server)), test_config)

        assert artifacts.robots_txt.ok is True
        assert artifacts.llms_txt.status == 404
        assert artifacts.sitemap.body == "<urlset/>"
        assert artifacts.homepage.body == "<h1>Home</h1>"
        assert artifacts.unreachable() == []

    async def test_one_slow_resource_does_not_fail_others(self, site_server, test_config):
        """Test that fetch outcomes are independent"""
        async def slow(request):
            await asyncio.sleep(0.5)
            return web.Response(text="late")

        server = await site_server({
            "/robots.txt": text_route("User-agent: GPTBot\nDisallow: /"),
            "/llms.txt": slow,
            "/": text_route("<p>hi</p>", content_type="text/html"),
        })
        cfg = dataclasses.replace(test_config, fetch_timeout=0.2)
        target = normalize_target(origin_of(server))
        artifacts = await fetch_site_artifacts(target, cfg)

        assert artifacts.llms_txt.reachable is False
        assert artifacts.robots_txt.ok is True
        assert artifacts.homepage.ok is True
        assert artifacts.unreachable() == [target.origin + "/llms.txt"]

    async def test_requests_run_concurrently(self, site_server, test_config):
        """Test that four slow resources take about one timeout, not four"""
        async def slow(request):
            await asyncio.sleep(0.2)
            return web.Response(text="ok")

        server = await site_server({path: slow for path in ("/robots.txt", "/llms.txt", "/sitemap.xml", "/")})
        loop = asyncio.get_running_loop()
        started = loop.time()
        artifacts = await fetch_site_artifacts(normalize_target(origin_of(server)), test_config)
        elapsed = loop.time() - started

        assert artifacts.unreachable() == []
        assert elapsed < 0.6
