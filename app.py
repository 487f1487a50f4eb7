"""
Main application for the AI Visibility Scanner - Orchestrates all components
"""
import argparse
import asyncio
import json
import time
import logging
from typing import List, Dict, Any, Optional

from config import config, ScannerConfig
from models import ScanResult
from scanner import run_scan
from comparison import select_competitors, build_comparison
from access import AccessGrant, resolve_access, require_full_access, build_insights
from monitoring import init_monitoring
from utils import InvalidTargetError, normalize_site

logger = logging.getLogger(__name__)

class AIVisibilityApp:
    """Main AI visibility scanner application"""

    def __init__(self, cfg: ScannerConfig = None, configure_logging: bool = True):
        self.config = cfg or config
        self.metrics_collector, self.health_checker = init_monitoring(self.config, configure_logging)
        logger.info("AI Visibility Scanner initialized")

    async def scan(self, url: str) -> ScanResult:
        """Scan a single URL and score it"""
        start_time = time.time()
        try:
            result, artifacts = await run_scan(url, self.config)
        except InvalidTargetError:
            raise
        except Exception as e:
            self.metrics_collector.record_error()
            logger.error(f"Error scanning {url}: {e}")
            raise

        response_time = time.time() - start_time
        self.metrics_collector.record_scan(response_time, len(artifacts.unreachable()))
        logger.info(f"Scanned {result.url} in {response_time:.2f}s: "
                    f"{result.overall_score} ({result.letter_grade})")
        return result

    async def _scan_competitor(self, url: str) -> Optional[ScanResult]:
        try:
            return await self.scan(url)
        except Exception as e:
            logger.warning(f"Competitor scan failed for {url}: {e}")
            return None

    async def compare(self, url: str, competitors: List[str], grant: AccessGrant) -> Dict[str, Any]:
        """Scan a site and its competitors concurrently and build the comparison table"""
        require_full_access(grant)
        selected = select_competitors(url, competitors, self.config.max_competitors)
        logger.info(f"Comparing {normalize_site(url)} against {len(selected)} competitors")

        primary, *others = await asyncio.gather(
            self.scan(url),
            *[self._scan_competitor(site) for site in selected],
        )
        return build_comparison(primary, list(zip(selected, others)))

    def insights(self, result: ScanResult, grant: AccessGrant) -> Dict[str, Any]:
        """Per-model scores and priority recommendations"""
        return build_insights(result, grant)

    def get_system_status(self) -> Dict[str, Any]:
        """Get system status"""
        health = self.health_checker.check_health()
        return {
            "timestamp": health["timestamp"],
            "health": health,
            "metrics": self.metrics_collector.get_metrics(),
        }

    def shutdown(self):
        """Gracefully shutdown the application"""
        logger.info("Shutting down AI Visibility Scanner")
        logging.shutdown()

def create_cli():
    """Create command line interface"""
    parser = argparse.ArgumentParser(description="AI Visibility Scanner - score how visible a site is to AI systems")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="Scan a single URL")
    scan_parser.add_argument("url", help="URL to scan")
    scan_parser.add_argument("--insights", action="store_true", help="Include model scores and recommendations")
    scan_parser.add_argument("--access-key", help="Access key for the full report")
    scan_parser.add_argument("--demo", action="store_true", help="Use demo access for the full report")

    # Compare command
    compare_parser = subparsers.add_parser("compare", help="Compare a URL against competitors")
    compare_parser.add_argument("url", help="Your URL")
    compare_parser.add_argument("competitors", nargs="+", help="Competitor URLs (up to 3)")
    compare_parser.add_argument("--access-key", help="Access key for the full report")
    compare_parser.add_argument("--demo", action="store_true", help="Use demo access")

    # Status command
    subparsers.add_parser("status", help="Get system status")

    # Server mode
    server_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    server_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    server_parser.add_argument("--port", type=int, default=8000, help="Server port")

    return parser

async def run_command(app: AIVisibilityApp, args) -> Dict[str, Any]:
    """Execute a parsed CLI command and return its JSON-able output"""
    if args.command == "scan":
        result = await app.scan(args.url)
        output = {"result": result.to_dict()}
        if args.insights:
            grant = resolve_access(args.access_key, args.demo, app.config)
            output["insights"] = app.insights(result, grant)
        return output

    if args.command == "compare":
        grant = resolve_access(args.access_key, args.demo, app.config)
        return await app.compare(args.url, args.competitors, grant)

    if args.command == "status":
        return app.get_system_status()

    raise ValueError(f"Unknown command: {args.command}")

def main(argv: List[str] = None) -> int:
    """Main application entry point"""
    parser = create_cli()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "serve":
        import uvicorn
        uvicorn.run("api:app", host=args.host, port=args.port, log_level=config.log_level.lower())
        return 0

    app = AIVisibilityApp()
    try:
        output = asyncio.run(run_command(app, args))
        print(json.dumps(output, indent=2, ensure_ascii=False))
        return 0
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Application error: {e}")
        print(f"Error: {e}")
        return 1
    finally:
        app.shutdown()

if __name__ == "__main__":
    raise SystemExit(main())
