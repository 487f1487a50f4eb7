"""
robots.txt parsing for AI crawler access decisions
"""
import logging
from typing import List, Iterable

from models import CrawlerStatus
from config import config

logger = logging.getLogger(__name__)

def _directive_value(line: str) -> str:
    parts = line.split(':')
    return parts[1].strip() if len(parts) > 1 else ''

def evaluate_crawler(lines: List[str], crawler: str) -> CrawlerStatus:
    """
    Walk lower-cased robots.txt lines and decide access for one crawler.

    Only groups that name the crawler exactly are applied; ``*`` groups are
    never attributed to a named crawler. Inside an applicable group
    ``Disallow: /`` blocks, ``Allow:`` re-allows, and an empty ``Disallow:``
    allows everything.
    """
    crawler_lower = crawler.lower()
    in_section = False
    allowed = True
    found = False

    for line in lines:
        trimmed = line.strip()
        if trimmed.startswith('user-agent:'):
            agent = _directive_value(trimmed)
            in_section = agent == crawler_lower
            if in_section:
                found = True
        elif in_section and trimmed.startswith('disallow:'):
            path = _directive_value(trimmed)
            if path == '/':
                allowed = False
            elif path == '':
                allowed = True
        elif in_section and trimmed.startswith('allow:'):
            allowed = True

    return CrawlerStatus(name=crawler, allowed=allowed, found=found)

def parse_robots_txt(content: str, crawlers: Iterable[str] = None) -> List[CrawlerStatus]:
    """Return one CrawlerStatus per tracked crawler, in tracking order"""
    crawlers = list(crawlers) if crawlers is not None else config.ai_crawlers
    lines = (content or '').lower().split('\n')

    statuses = [evaluate_crawler(lines, crawler) for crawler in crawlers]
    blocked = [status.name for status in statuses if not status.allowed]
    if blocked:
        logger.debug(f"robots.txt blocks: {', '.join(blocked)}")
    return statuses
