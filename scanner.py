"""
Scan pipeline: fetch artifacts, analyze them and assemble ScanData
"""
import logging
from typing import Tuple

from models import (
    ScanData, ScanTarget, SiteArtifacts, RobotsTxtData, LlmsTxtData, SitemapData, ScanResult,
)
from config import config, ScannerConfig
from fetcher import ArtifactFetcher
from robots_parser import parse_robots_txt
from html_analyzer import HtmlAnalyzer, create_analyzer
from scorer import score_scan
from utils import normalize_target, PerformanceMonitor

logger = logging.getLogger(__name__)

def build_scan_data(target: ScanTarget, artifacts: SiteArtifacts,
                    analyzer: HtmlAnalyzer = None, cfg: ScannerConfig = None) -> ScanData:
    """Turn fetched artifacts into ScanData. Absent resources become empty values."""
    cfg = cfg or config
    analyzer = analyzer or create_analyzer(cfg.analyzer_backend)

    robots_text = artifacts.robots_txt.body if artifacts.robots_txt.ok else ''
    llms_text = artifacts.llms_txt.body if artifacts.llms_txt.ok else ''
    html = artifacts.homepage.body if artifacts.homepage.ok else ''

    return ScanData(
        url=target.url,
        robots_txt=RobotsTxtData(
            exists=artifacts.robots_txt.ok,
            content=robots_text[:cfg.robots_content_limit],
            crawlers=tuple(parse_robots_txt(robots_text, cfg.ai_crawlers)),
        ),
        llms_txt=LlmsTxtData(
            exists=artifacts.llms_txt.ok,
            content=llms_text[:cfg.llms_content_limit],
        ),
        sitemap=SitemapData(exists=artifacts.sitemap.ok),
        html=analyzer.analyze(html),
    )

async def run_scan(url: str, cfg: ScannerConfig = None,
                   fetcher: ArtifactFetcher = None) -> Tuple[ScanResult, SiteArtifacts]:
    """
    Fetch, analyze and score one URL.

    Raises InvalidTargetError before any request is made when the input has
    no usable host. Returns the scored result along with the raw fetch
    outcomes.
    """
    cfg = cfg or config
    target = normalize_target(url)
    logger.info(f"Scanning {target.origin}")
    monitor = PerformanceMonitor()

    monitor.start_timer(f"fetch {target.url}")
    if fetcher is not None:
        artifacts = await fetcher.fetch_artifacts(target)
    else:
        async with ArtifactFetcher(cfg) as own_fetcher:
            artifacts = await own_fetcher.fetch_artifacts(target)
    monitor.end_timer(f"fetch {target.url}")

    monitor.start_timer(f"analyze {target.url}")
    data = build_scan_data(target, artifacts, cfg=cfg)
    result = score_scan(data)
    monitor.end_timer(f"analyze {target.url}")
    return result, artifacts
