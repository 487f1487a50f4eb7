"""
Utility functions for URL handling, rounding, and performance timing
"""
import re
import math
import time
import logging
from urllib.parse import urlsplit, urlunsplit

from models import ScanTarget

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOST_RE = re.compile(r"([^/?#]*)(.*)", re.DOTALL)

class InvalidTargetError(ValueError):
    """Raised when a scan target cannot be turned into a fetchable URL"""

def normalize_site(url: str) -> str:
    """Display form of a site: no scheme, no trailing slashes, lower-case host"""
    if not url:
        return ""
    site = _SCHEME_RE.sub("", url.strip()).rstrip("/")
    host, rest = _HOST_RE.match(site).groups()
    return host.lower() + rest

def normalize_target(url: str) -> ScanTarget:
    """
    Build a ScanTarget from user input.

    The scheme defaults to https. Scheme and host are lower-cased; the
    origin is used for the well-known artifacts and the page URL for the
    homepage fetch.
    """
    raw = (url or "").strip()
    if not raw:
        raise InvalidTargetError("URL is empty")

    page_url = raw if _SCHEME_RE.match(raw) else f"https://{raw}"

    try:
        parts = urlsplit(page_url)
        hostname = parts.hostname
        parts.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidTargetError(f"Invalid URL: {raw}") from e

    if not hostname:
        raise InvalidTargetError(f"Invalid URL: {raw}")

    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower()
    origin = f"{scheme}://{netloc}"

    return ScanTarget(
        url=normalize_site(raw),
        page_url=urlunsplit((scheme, netloc, parts.path or "/", parts.query, "")),
        origin=origin,
    )

def validate_url(url: str) -> bool:
    """Check whether input can be normalized into a scan target"""
    try:
        normalize_target(url)
        return True
    except InvalidTargetError:
        return False

def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, matching report consumers"""
    return int(math.floor(value + 0.5))

def mean_score(scores) -> int:
    """Rounded arithmetic mean of integer scores; 0 for an empty sequence"""
    scores = list(scores)
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))

# Performance monitoring utilities
class PerformanceMonitor:
    """Monitor and log performance metrics"""

    def __init__(self):
        self.metrics = {}

    def start_timer(self, operation: str):
        """Start timing an operation"""
        self.metrics[operation] = {'start': time.time()}

    def end_timer(self, operation: str) -> float:
        """End timing and log results"""
        if operation in self.metrics:
            duration = time.time() - self.metrics[operation]['start']
            self.metrics[operation]['duration'] = duration
            logging.getLogger('performance').info(f"Operation '{operation}' completed in {duration:.2f} seconds")
            return duration
        return 0

    def get_metrics(self) -> dict:
        """Get all recorded metrics"""
        return self.metrics.copy()
