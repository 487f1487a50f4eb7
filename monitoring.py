"""
Logging, scan metrics and health checks for the AI Visibility Scanner
"""
import logging
import os
import time
from typing import Dict, List, Any, Iterable
from datetime import datetime
from dataclasses import dataclass, asdict
from threading import Lock

import psutil

from config import config, ScannerConfig

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'

# (file name, level) for each root file handler
LOG_FILES = (
    ('scanner.log', logging.DEBUG),
    ('errors.log', logging.ERROR),
)
PERFORMANCE_LOG = 'performance.log'

# Resource readings: (warning above, critical above), in percent
RESOURCE_THRESHOLDS = {
    'cpu_usage': (80, 90),
    'memory_usage': (85, 95),
}

# Scan success rate: (warning below, critical below), in percent
SUCCESS_RATE_THRESHOLDS = (90, 80)

STATUS_ORDER = ('healthy', 'unknown', 'warning', 'critical')

def _file_handler(log_dir: str, filename: str, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.FileHandler(os.path.join(log_dir, filename), encoding='utf-8')
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler

def setup_logging(log_level: str = None, log_dir: str = None):
    """
    Configure the root logger for console output plus scanner/error log files.

    Stage timings from PerformanceMonitor go to their own performance.log and
    do not reach the root handlers.
    """
    log_level = log_level or config.log_level
    log_dir = log_dir or config.log_dir
    os.makedirs(log_dir, exist_ok=True)

    detailed = logging.Formatter(DETAILED_FORMAT)
    simple = logging.Formatter(config.log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(simple)
    root_logger.addHandler(console)

    for filename, level in LOG_FILES:
        root_logger.addHandler(_file_handler(log_dir, filename, level, detailed))

    perf_logger = logging.getLogger('performance')
    perf_logger.handlers.clear()
    perf_logger.addHandler(_file_handler(log_dir, PERFORMANCE_LOG, logging.INFO, simple))
    perf_logger.setLevel(logging.INFO)
    perf_logger.propagate = False

    return root_logger

def worst_status(statuses: Iterable[str]) -> str:
    """Most severe of the given component statuses"""
    return max(statuses, key=STATUS_ORDER.index, default='healthy')

@dataclass
class SystemMetrics:
    """Host resource snapshot"""
    timestamp: str
    cpu_usage: float
    memory_usage: float
    disk_usage: float

@dataclass
class ScanMetrics:
    """Scan pipeline counters"""
    timestamp: str
    scans_completed: int
    scans_failed: int
    artifacts_unreachable: int
    success_rate: float
    avg_scan_time: float

class MetricsCollector:
    """Thread-safe scan counters plus psutil host readings"""

    def __init__(self, max_samples: int = 500):
        self._lock = Lock()
        self.max_samples = max_samples
        self.started_at = time.time()

        self.scans_completed = 0
        self.scans_failed = 0
        self.artifacts_unreachable = 0
        self.scan_times: List[float] = []

    def record_scan(self, duration: float, unreachable: int = 0):
        """Count a scored scan and how many of its artifacts could not be reached"""
        with self._lock:
            self.scans_completed += 1
            self.artifacts_unreachable += unreachable
            self.scan_times.append(duration)
            del self.scan_times[:-self.max_samples]

    def record_error(self):
        with self._lock:
            self.scans_failed += 1

    def collect_system_metrics(self) -> SystemMetrics:
        return SystemMetrics(
            timestamp=datetime.now().isoformat(),
            cpu_usage=psutil.cpu_percent(interval=None),
            memory_usage=psutil.virtual_memory().percent,
            disk_usage=psutil.disk_usage(os.path.abspath(os.sep)).percent,
        )

    def collect_scan_metrics(self) -> ScanMetrics:
        with self._lock:
            attempted = self.scans_completed + self.scans_failed
            return ScanMetrics(
                timestamp=datetime.now().isoformat(),
                scans_completed=self.scans_completed,
                scans_failed=self.scans_failed,
                artifacts_unreachable=self.artifacts_unreachable,
                success_rate=(self.scans_completed / attempted * 100) if attempted else 100.0,
                avg_scan_time=(sum(self.scan_times) / len(self.scan_times)) if self.scan_times else 0.0,
            )

    def get_metrics(self) -> Dict[str, Any]:
        return {
            'uptime_seconds': time.time() - self.started_at,
            'system': asdict(self.collect_system_metrics()),
            'scanning': asdict(self.collect_scan_metrics()),
        }

class HealthChecker:
    """Rolls resource readings and scan counters up into component statuses"""

    def __init__(self, metrics_collector: MetricsCollector, cfg: ScannerConfig = None):
        self.metrics_collector = metrics_collector
        self.config = cfg or config

    def check_health(self) -> Dict[str, Any]:
        components = {
            'system': self._check_system_health(),
            'scanning': self._check_scanning_health(),
        }
        return {
            'timestamp': datetime.now().isoformat(),
            'overall_status': worst_status(comp['status'] for comp in components.values()),
            'components': components,
        }

    def _check_system_health(self) -> Dict[str, Any]:
        try:
            reading = self.metrics_collector.collect_system_metrics()
        except (psutil.Error, OSError) as e:
            logging.warning(f"Could not read system metrics: {e}")
            return {'status': 'unknown', 'message': 'No metrics available'}

        statuses = ['healthy']
        issues = []
        for name, (warning_above, critical_above) in RESOURCE_THRESHOLDS.items():
            value = getattr(reading, name)
            label = name.replace('_', ' ')
            if value > critical_above:
                statuses.append('critical')
                issues.append(f"{label} critical: {value:.1f}%")
            elif value > warning_above:
                statuses.append('warning')
                issues.append(f"{label} high: {value:.1f}%")

        return {
            'status': worst_status(statuses),
            'cpu_usage': reading.cpu_usage,
            'memory_usage': reading.memory_usage,
            'disk_usage': reading.disk_usage,
            'issues': issues,
        }

    def _check_scanning_health(self) -> Dict[str, Any]:
        counters = self.metrics_collector.collect_scan_metrics()
        if counters.scans_completed + counters.scans_failed == 0:
            return {'status': 'healthy', 'message': 'No scans yet', 'issues': []}

        statuses = ['healthy']
        issues = []
        warning_below, critical_below = SUCCESS_RATE_THRESHOLDS
        if counters.success_rate < critical_below:
            statuses.append('critical')
            issues.append(f"Scan success rate critical: {counters.success_rate:.1f}%")
        elif counters.success_rate < warning_below:
            statuses.append('warning')
            issues.append(f"Scan success rate low: {counters.success_rate:.1f}%")

        # The four fetches run concurrently, so a scan should settle within about one timeout
        if counters.avg_scan_time > self.config.fetch_timeout * 2:
            statuses.append('warning')
            issues.append(f"Slow scans: {counters.avg_scan_time:.1f}s average")

        return {
            'status': worst_status(statuses),
            'success_rate': counters.success_rate,
            'avg_scan_time': counters.avg_scan_time,
            'scans_completed': counters.scans_completed,
            'artifacts_unreachable': counters.artifacts_unreachable,
            'issues': issues,
        }

def init_monitoring(cfg: ScannerConfig = None, configure_logging: bool = True):
    """Set up logging and return (metrics_collector, health_checker)"""
    cfg = cfg or config
    if configure_logging:
        setup_logging(cfg.log_level, cfg.log_dir)

    metrics_collector = MetricsCollector()
    health_checker = HealthChecker(metrics_collector, cfg)

    logging.info("Monitoring initialized")

    return metrics_collector, health_checker
