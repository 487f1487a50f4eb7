"""
Async artifact fetcher: retrieves robots.txt, llms.txt, sitemap.xml and the
homepage for a scan target concurrently
"""
import asyncio
import logging
from typing import Optional

import aiohttp

from models import FetchOutcome, ScanTarget, SiteArtifacts
from config import config, ScannerConfig

logger = logging.getLogger(__name__)

ROBOTS_PATH = "/robots.txt"
LLMS_PATH = "/llms.txt"
SITEMAP_PATH = "/sitemap.xml"

class ArtifactFetcher:
    """Async HTTP client that never raises for a single failed resource"""

    def __init__(self, cfg: ScannerConfig = None):
        self.config = cfg or config
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            headers={
                'User-Agent': self.config.user_agent,
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,text/plain;q=0.8,*/*;q=0.5',
            }
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str) -> FetchOutcome:
        """GET a single resource bounded by the configured timeout.

        Non-2xx responses are reported with their status but no body; timeouts
        and transport errors come back as an unreachable outcome.
        """
        timeout = aiohttp.ClientTimeout(total=self.config.fetch_timeout)
        try:
            async with self.session.get(url, timeout=timeout, allow_redirects=True) as response:
                if 200 <= response.status < 300:
                    body = await response.text(errors="replace")
                    logger.debug(f"Fetched {url} ({response.status}, {len(body)} chars)")
                    return FetchOutcome(url=url, status=response.status, body=body)

                logger.info(f"HTTP {response.status} for {url}")
                return FetchOutcome(url=url, status=response.status)
        except asyncio.TimeoutError:
            logger.warning(f"Timeout after {self.config.fetch_timeout}s for {url}")
        except aiohttp.ClientError as e:
            logger.warning(f"Request error for {url}: {e}")
        except OSError as e:
            logger.warning(f"Connection error for {url}: {e}")
        return FetchOutcome(url=url)

    async def fetch_artifacts(self, target: ScanTarget) -> SiteArtifacts:
        """Fetch the four artifacts together and wait for all of them to settle"""
        robots, llms, sitemap, homepage = await asyncio.gather(
            self.fetch(target.origin + ROBOTS_PATH),
            self.fetch(target.origin + LLMS_PATH),
            self.fetch(target.origin + SITEMAP_PATH),
            self.fetch(target.page_url),
        )

        artifacts = SiteArtifacts(
            robots_txt=robots,
            llms_txt=llms,
            sitemap=sitemap,
            homepage=homepage,
        )

        unreachable = artifacts.unreachable()
        if unreachable:
            logger.info(f"{len(unreachable)} of 4 artifacts unreachable for {target.origin}")
        return artifacts

async def fetch_site_artifacts(target: ScanTarget, cfg: ScannerConfig = None) -> SiteArtifacts:
    """Convenience wrapper opening a short-lived fetcher session"""
    async with ArtifactFetcher(cfg) as fetcher:
        return await fetcher.fetch_artifacts(target)
