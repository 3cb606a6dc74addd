"""
Base Aggregator Classes

Abstract base class for job source aggregators. Provides the shared HTTP
client, request pacing, retries with exponential backoff and statistics.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from datetime import datetime
import asyncio
import time
from dataclasses import dataclass

import httpx

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.exceptions import (
    AggregatorException,
    AggregatorRateLimitError,
    AggregatorAuthError,
)
from pmhnp_hiring.utils.logger import get_logger

# Initialize logger and settings
logger = get_logger(__name__)
settings = get_settings()

DEFAULT_USER_AGENT = "PMHNPHiringBot/1.0 (+https://pmhnphiring.com)"

RawJob = Dict[str, Any]


@dataclass
class AggregatorConfig:
    """Configuration for fetch operations."""

    delay_between_requests: Optional[float] = None
    timeout_seconds: int = settings.REQUEST_TIMEOUT_SECONDS
    max_retries: int = settings.MAX_RETRIES
    rate_limit_per_minute: int = 120
    user_agent: Optional[str] = None


class BaseAggregator(ABC):
    """
    Abstract base class for job sources.

    Subclasses implement ``fetch_jobs`` and return raw job dicts in the
    source's own shape; normalization happens later in the pipeline.
    """

    # Pause between requests unless the config overrides it
    default_delay: float = settings.REQUEST_DELAY_SECONDS

    def __init__(
        self,
        config: Optional[AggregatorConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ) -> None:
        """
        Initialize the aggregator.

        Args:
            config: Fetch configuration
            client: Pre-built HTTP client; the aggregator does not close it
        """
        self.config = config or AggregatorConfig()
        self.session: Optional[httpx.AsyncClient] = client
        self._owns_session = client is None

        # Rate limiting
        self._request_times: List[float] = []
        self._last_request_time = 0.0

        # Statistics
        self._stats = {
            "requests": 0,
            "jobs_found": 0,
            "jobs_filtered": 0,
            "errors": 0,
            "start_time": None,
            "end_time": None
        }

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name, e.g. ``adzuna``."""
        pass

    @property
    def delay(self) -> float:
        if self.config.delay_between_requests is not None:
            return self.config.delay_between_requests
        return self.default_delay

    def has_credentials(self) -> bool:
        """Whether the credentials this source needs are configured."""
        return True

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.cleanup()

    async def initialize(self) -> None:
        """Initialize aggregator resources."""
        self._stats["start_time"] = datetime.utcnow()

        if self.session is None:
            self.session = httpx.AsyncClient(
                headers={"User-Agent": self.config.user_agent or DEFAULT_USER_AGENT},
                timeout=self.config.timeout_seconds,
                follow_redirects=True
            )

        logger.info(f"Initialized {self.name} aggregator")

    async def cleanup(self) -> None:
        """Cleanup aggregator resources."""
        self._stats["end_time"] = datetime.utcnow()

        if self.session and self._owns_session:
            await self.session.aclose()
            self.session = None

        duration = (self._stats["end_time"] - self._stats["start_time"]).total_seconds()
        logger.info(
            f"Aggregator {self.name} completed in {duration:.2f}s. "
            f"Requests: {self._stats['requests']}, "
            f"Found: {self._stats['jobs_found']}, "
            f"Filtered: {self._stats['jobs_filtered']}, "
            f"Errors: {self._stats['errors']}"
        )

    async def _rate_limit_check(self) -> None:
        """Check and enforce rate limiting."""
        current_time = time.time()

        # Remove requests older than 1 minute
        cutoff_time = current_time - 60
        self._request_times = [t for t in self._request_times if t > cutoff_time]

        if len(self._request_times) >= self.config.rate_limit_per_minute:
            sleep_time = 60 - (current_time - self._request_times[0])
            if sleep_time > 0:
                logger.warning(f"Rate limit reached for {self.name}, sleeping for {sleep_time:.2f}s")
                await asyncio.sleep(sleep_time)

        time_since_last = current_time - self._last_request_time
        if time_since_last < self.delay:
            await asyncio.sleep(self.delay - time_since_last)

        self._request_times.append(time.time())
        self._last_request_time = time.time()

    async def _make_http_request(
        self,
        url: str,
        method: str = "GET",
        throttle: bool = True,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with rate limiting and retry logic.

        Server errors and network failures are retried with exponential
        backoff; client errors are not.

        Args:
            url: URL to request
            method: HTTP method
            throttle: Apply request pacing; concurrent batches pace themselves
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response: Successful HTTP response

        Raises:
            AggregatorRateLimitError: On HTTP 429
            AggregatorAuthError: On HTTP 401/403
            AggregatorException: If the request fails after retries
        """
        if self.session is None:
            await self.initialize()

        if throttle:
            await self._rate_limit_check()

        for attempt in range(self.config.max_retries):
            try:
                self._stats["requests"] += 1
                response = await self.session.request(method, url, **kwargs)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 429:
                    raise AggregatorRateLimitError(self.name)
                elif status in [401, 403]:
                    raise AggregatorAuthError(self.name)
                elif status < 500 or attempt == self.config.max_retries - 1:
                    self._stats["errors"] += 1
                    raise AggregatorException(self.name, f"HTTP error {status} from {self.name}")

                # Exponential backoff
                await asyncio.sleep((2 ** attempt) * self.delay)

            except httpx.RequestError as e:
                if attempt == self.config.max_retries - 1:
                    self._stats["errors"] += 1
                    raise AggregatorException(self.name, f"Request failed: {e}")

                await asyncio.sleep((2 ** attempt) * self.delay)

        raise AggregatorException(self.name, "Request failed without a response")

    async def _get_json(self, url: str, method: str = "GET", **kwargs) -> Any:
        response = await self._make_http_request(url, method=method, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            self._stats["errors"] += 1
            raise AggregatorException(self.name, f"Invalid JSON from {self.name}: {e}")

    def _record_found(self, count: int = 1) -> None:
        self._stats["jobs_found"] += count

    def _record_filtered(self, count: int = 1) -> None:
        self._stats["jobs_filtered"] += count

    @abstractmethod
    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        """
        Fetch raw jobs from the source.

        Args:
            chunk: Slice of the source's work to run, for chunked sources

        Returns:
            List[RawJob]: Raw job payloads
        """
        pass

    def get_stats(self) -> Dict[str, Any]:
        """Get fetch statistics."""
        return self._stats.copy()
