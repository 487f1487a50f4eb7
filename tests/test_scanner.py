"""
Tests for assembling ScanData and the end-to-end scan
"""
import dataclasses

import pytest

from models import FetchOutcome, SiteArtifacts
from fetcher import ArtifactFetcher
from scanner import build_scan_data, run_scan
from utils import normalize_target, InvalidTargetError
from conftest import text_route, origin_of

TARGET = normalize_target("https://example.com")


def artifacts(robots=None, llms=None, sitemap=None, homepage=None):
    """SiteArtifacts from (status, body) pairs; None means unreachable"""
    def outcome(path, pair):
        url = TARGET.origin + path
        if pair is None:
            return FetchOutcome(url=url)
        status, body = pair
        return FetchOutcome(url=url, status=status, body=body)

    return SiteArtifacts(
        robots_txt=outcome("/robots.txt", robots),
        llms_txt=outcome("/llms.txt", llms),
        sitemap=outcome("/sitemap.xml", sitemap),
        homepage=outcome("/", homepage),
    )


class TestBuildScanData:
    """Tests for converting fetch outcomes into ScanData"""

    def test_everything_present(self, rich_html, test_config):
        """Test a site where every artifact exists"""
        data = build_scan_data(TARGET, artifacts(
            robots=(200, "User-agent: GPTBot\nDisallow: /"),
            llms=(200, "# Example"),
            sitemap=(200, "<urlset/>"),
            homepage=(200, rich_html),
        ), cfg=test_config)

        assert data.url == "example.com"
        assert data.robots_txt.exists is True
        assert [c.name for c in data.robots_txt.crawlers] == test_config.ai_crawlers
        assert data.robots_txt.crawlers[0].allowed is False
        assert data.llms_txt.exists is True
        assert data.llms_txt.content == "# Example"
        assert data.sitemap.exists is True
        assert data.html.title == "Acme Plumbing | Tulsa"

    def test_absent_resources_become_empty_values(self, test_config):
        """Test that unreachable and non-2xx resources are encoded as absent"""
        data = build_scan_data(TARGET, artifacts(
            robots=(404, ""),
            llms=None,
            sitemap=(500, ""),
            homepage=None,
        ), cfg=test_config)

        assert data.robots_txt.exists is False
        assert data.robots_txt.content == ""
        assert all(c.allowed and not c.found for c in data.robots_txt.crawlers)
        assert data.llms_txt.exists is False
        assert data.sitemap.exists is False
        assert data.html.word_count == 0
        assert data.html.title == ""

    def test_content_truncated(self, test_config):
        """Test that stored robots.txt and llms.txt content is capped"""
        robots_body = "User-agent: GPTBot\nDisallow: /\n" + "#" * 5000
        data = build_scan_data(TARGET, artifacts(
            robots=(200, robots_body),
            llms=(200, "l" * 5000),
        ), cfg=test_config)

        assert len(data.robots_txt.content) == 2000
        assert len(data.llms_txt.content) == 1000
        assert data.robots_txt.crawlers[0].allowed is False

    def test_soup_backend(self, rich_html, test_config):
        """Test that the configured analyzer backend is used"""
        cfg = dataclasses.replace(test_config, analyzer_backend="soup")
        data = build_scan_data(TARGET, artifacts(homepage=(200, rich_html)), cfg=cfg)
        assert data.html.images_without_alt == 2


class TestRunScan:
    """Tests for the end-to-end scan"""

    async def test_scan_live_site(self, site_server, test_config, rich_html):
        """Test a scan against an in-process site"""
        server = await site_server({
            "/robots.txt": text_route("User-agent: GPTBot\nDisallow: /"),
            "/llms.txt": text_route("# Acme"),
            "/": text_route(rich_html, content_type="text/html"),
        })
        result, fetched = await run_scan(origin_of(server) + "/", test_config)

        assert result.url == f"127.0.0.1:{server.port}"
        robots = result.category("ai-access").checks[0]
        assert robots.status == "warning"
        assert robots.score == 60
        assert result.category("discoverability").checks[0].status == "fail"
        assert fetched.sitemap.status == 404
        assert result.letter_grade in ("A", "B", "C", "D", "F")

    async def test_unreachable_site_still_scores(self, test_config):
        """Test that a dead host produces a low-scoring result, not an error"""
        result, fetched = await run_scan("http://127.0.0.1:1", test_config)

        assert len(fetched.unreachable()) == 4
        assert result.overall_score <= 35
        assert result.letter_grade == "F"

    async def test_invalid_target(self, test_config):
        """Test that unusable input fails before any request"""
        with pytest.raises(InvalidTargetError):
            await run_scan("https://", test_config)

    async def test_shared_fetcher(self, site_server, test_config):
        """Test that a caller-owned fetcher session is reused"""
        server = await site_server({"/sitemap.xml": text_route("<urlset/>")})

        async with ArtifactFetcher(test_config) as fetcher:
            first, _ = await run_scan(origin_of(server), test_config, fetcher)
            second, _ = await run_scan(origin_of(server), test_config, fetcher)
            assert fetcher.session is not None
            assert not fetcher.session.closed

        assert first.category("discoverability").checks[0].status == "pass"
        assert second.overall_score == first.overall_score
