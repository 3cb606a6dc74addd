"""
Pipeline metrics for PMHNP Hiring.
Tracks ingestion outcomes, listing lifecycle and API health.
"""

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
from typing import Optional
import time
from contextlib import contextmanager


class PipelineMetrics:
    """
    Central metrics collection for the ingestion pipeline and API.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics with optional custom registry."""
        self.registry = registry or CollectorRegistry()

        # Ingestion outcomes per job
        self.jobs_ingested_total = Counter(
            'jobs_ingested_total',
            'Jobs seen by the ingestion pipeline',
            ['source', 'outcome'],
            registry=self.registry
        )

        self.ingestion_duration_seconds = Histogram(
            'ingestion_duration_seconds',
            'Duration of one source ingestion run',
            ['source'],
            buckets=(1, 5, 15, 30, 60, 120, 300, 600),
            registry=self.registry
        )

        # Listing lifecycle
        self.jobs_unpublished_total = Counter(
            'jobs_unpublished_total',
            'Jobs taken offline',
            ['reason'],
            registry=self.registry
        )

        self.api_response_seconds = Histogram(
            'api_response_seconds',
            'API response time in seconds',
            ['endpoint'],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self.registry
        )

        self.rate_limit_rejections_total = Counter(
            'rate_limit_rejections_total',
            'Requests rejected by the rate limiter',
            ['endpoint'],
            registry=self.registry
        )

        # System health
        self.system_cpu_usage = Gauge(
            'system_cpu_usage_percent',
            'System CPU usage percentage',
            registry=self.registry
        )

        self.system_memory_usage = Gauge(
            'system_memory_usage_percent',
            'System memory usage percentage',
            registry=self.registry
        )

    def record_job_outcome(self, source: str, outcome: str, count: int = 1):
        """Record ingestion outcome: added, duplicate, error or filtered."""
        if count:
            self.jobs_ingested_total.labels(source=source, outcome=outcome).inc(count)

    def record_ingestion_duration(self, source: str, duration: float):
        self.ingestion_duration_seconds.labels(source=source).observe(duration)

    def record_unpublished(self, reason: str, count: int = 1):
        """Record jobs unpublished as expired, stale or dead_link."""
        if count:
            self.jobs_unpublished_total.labels(reason=reason).inc(count)

    def record_rate_limit_rejection(self, endpoint: str):
        self.rate_limit_rejections_total.labels(endpoint=endpoint).inc()

    def update_system_metrics(self, cpu_percent: float, memory_percent: float):
        self.system_cpu_usage.set(cpu_percent)
        self.system_memory_usage.set(memory_percent)

    @contextmanager
    def time_api_call(self, endpoint: str):
        """Context manager to time API calls."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            self.api_response_seconds.labels(endpoint=endpoint).observe(duration)

    def get_metrics(self) -> str:
        """Get current metrics in Prometheus format."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics instance
metrics = PipelineMetrics()


class IngestionOutcomes:
    """Standard outcomes for jobs_ingested_total."""
    ADDED = 'added'
    DUPLICATE = 'duplicate'
    ERROR = 'error'
    FILTERED = 'filtered'


class UnpublishReasons:
    """Standard reasons for jobs_unpublished_total."""
    EXPIRED = 'expired'
    STALE = 'stale'
    DEAD_LINK = 'dead_link'
