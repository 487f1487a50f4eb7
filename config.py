"""
Configuration file for the AI Visibility Scanner
"""
import os
from dataclasses import dataclass
from typing import List

@dataclass
class ScannerConfig:
    """Configuration settings for the AI visibility scanner"""

    # Fetch settings
    fetch_timeout: float = 5.0
    user_agent: str = "AIVisibilityChecker/1.0"

    # AI crawlers tracked in robots.txt
    ai_crawlers: List[str] = None

    # Stored artifact content is truncated to these lengths
    robots_content_limit: int = 2000
    llms_content_limit: int = 1000

    # HTML analysis backend: "regex" or "soup"
    analyzer_backend: str = "regex"

    # Competitor comparison
    max_competitors: int = 3

    # Access control for derived insights
    demo_mode_enabled: bool = True
    access_keys: List[str] = None

    # API
    cors_origins: List[str] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"
    log_dir: str = "logs"

    def __post_init__(self):
        if self.ai_crawlers is None:
            self.ai_crawlers = ["GPTBot", "ClaudeBot", "PerplexityBot", "Google-Extended"]

        if self.access_keys is None:
            raw_keys = os.environ.get("AIV_ACCESS_KEYS", "")
            self.access_keys = [key.strip() for key in raw_keys.split(",") if key.strip()]

        if self.cors_origins is None:
            self.cors_origins = ["*"]

# Default configuration instance
config = ScannerConfig()
