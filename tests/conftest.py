"""
Pytest configuration and shared fixtures
"""
import pytest
import os
import sys

from aiohttp import web
from aiohttp.test_utils import TestServer

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from config import ScannerConfig
from models import (
    ScanData, RobotsTxtData, LlmsTxtData, SitemapData, HtmlSignals, CrawlerStatus,
)

AI_CRAWLERS = ["GPTBot", "ClaudeBot", "PerplexityBot", "Google-Extended"]

RICH_HTML = """<!DOCTYPE html>
<html>
    <head>
        <title>Acme Plumbing | Tulsa</title>
        <meta name="description" content="{description}">
        <meta property="og:title" content="Acme Plumbing">
        <meta content="Emergency plumbing in Tulsa" property="og:description">
        <meta property="og:image" content="https://acme.example/og.png">
        <script type="application/ld+json">
        {{"@context": "https://schema.org", "@type": "LocalBusiness", "name": "Acme"}}
        </script>
        <script type="application/ld+json">
        {{"@context": "https://schema.org", "@type": "FAQPage", "mainEntity": []}}
        </script>
        <style>body {{ color: red; }}</style>
    </head>
    <body>
        <header><nav><a href="/">Home</a></nav></header>
        <main>
            <h1>Acme Plumbing</h1>
            <h2>Services</h2>
            <h3>Drains</h3>
            <p>We fix leaks fast.</p>
            <p>Call us any time of day.</p>
            <img src="a.jpg" alt="Van">
            <img src="b.jpg" alt="">
            <img src="c.jpg">
        </main>
        <footer>Acme</footer>
    </body>
</html>
"""


@pytest.fixture
def test_config(tmp_path):
    """Test configuration writing logs to a temporary directory"""
    return ScannerConfig(
        fetch_timeout=0.5,
        access_keys=["paid-key"],
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def rich_html():
    """Homepage HTML carrying most of the signals the scorer looks for"""
    return RICH_HTML.format(description="x" * 140)


def make_scan_data(url="example.com", robots_exists=True, crawlers=None, llms_exists=True,
                   sitemap_exists=True, **html_fields):
    """Build ScanData with sensible passing defaults, overridable per test"""
    if crawlers is None:
        crawlers = [CrawlerStatus(name=name, allowed=True, found=False) for name in AI_CRAWLERS]
    html_defaults = dict(
        title="Example",
        meta_description="d" * 140,
        og_title="Example",
        og_description="Example site",
        og_image="https://example.com/og.png",
        h1_count=1,
        h2_count=3,
        h3_count=2,
        has_json_ld=True,
        json_ld_types=("Organization", "WebSite"),
        has_faq_schema=True,
        has_how_to_schema=True,
        word_count=800,
        paragraph_count=25,
        image_count=5,
        images_without_alt=0,
        has_semantic_html=True,
    )
    html_defaults.update(html_fields)
    return ScanData(
        url=url,
        robots_txt=RobotsTxtData(exists=robots_exists, content="", crawlers=tuple(crawlers)),
        llms_txt=LlmsTxtData(exists=llms_exists, content="# Example" if llms_exists else ""),
        sitemap=SitemapData(exists=sitemap_exists),
        html=HtmlSignals(**html_defaults),
    )


@pytest.fixture
def scan_data_factory():
    """Factory for ScanData instances"""
    return make_scan_data


@pytest.fixture
def empty_scan_data():
    """A site where every artifact is missing and the homepage is blank"""
    return ScanData(
        url="empty.example",
        robots_txt=RobotsTxtData(
            exists=False, content="",
            crawlers=tuple(CrawlerStatus(name=name, allowed=True, found=False) for name in AI_CRAWLERS)),
        llms_txt=LlmsTxtData(exists=False, content=""),
        sitemap=SitemapData(exists=False),
        html=HtmlSignals(),
    )


def text_route(body, status=200, content_type="text/plain"):
    """aiohttp handler returning a fixed body"""
    async def handler(request):
        return web.Response(text=body, status=status, content_type=content_type)
    return handler


def origin_of(server):
    return f"http://{server.host}:{server.port}"


@pytest.fixture
async def site_server():
    """Start in-process sites serving the given {path: handler} routes"""
    servers = []

    async def start(routes):
        app = web.Application()
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return server

    yield start

    for server in servers:
        await server.close()
