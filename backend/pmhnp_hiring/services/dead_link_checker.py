"""
Dead Link Checker

Checks apply links of published external jobs and unpublishes jobs whose
postings are gone. Least recently updated jobs are checked first, so
repeated runs rotate through the whole catalogue.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.utils.logger import get_logger
from pmhnp_hiring.utils.metrics import metrics, UnpublishReasons

logger = get_logger(__name__)

BATCH_SIZE = 15
REQUEST_TIMEOUT_SECONDS = 8.0
MAX_JOBS_PER_RUN = 1500
TIME_BUDGET_SECONDS = 250.0
BATCH_DELAY_SECONDS = 0.2

USER_AGENT = "Mozilla/5.0 (compatible; PMHNPHiring-LinkChecker/1.0)"

DEAD_STATUSES = {404, 410}
HEAD_BLOCKED_STATUSES = {403, 405}


@dataclass
class LinkStatus:
    alive: bool
    status: int  # 0 when the request itself failed


async def is_link_alive(client: httpx.AsyncClient, url: str) -> LinkStatus:
    """
    Whether a link still resolves.

    Only 404 and 410 count as dead; server errors and network failures are
    treated as transient.
    """
    try:
        response = await client.head(url)
        if response.is_success:
            return LinkStatus(True, response.status_code)
        if response.status_code in DEAD_STATUSES:
            return LinkStatus(False, response.status_code)

        if response.status_code in HEAD_BLOCKED_STATUSES:
            response = await client.get(url)
            if response.status_code in DEAD_STATUSES:
                return LinkStatus(False, response.status_code)
            return LinkStatus(response.is_success, response.status_code)

        return LinkStatus(True, response.status_code)

    except httpx.HTTPError:
        return LinkStatus(True, 0)


class DeadLinkChecker:
    """Batch link checking with a time budget."""

    def __init__(
        self,
        db: Optional[DatabaseManager] = None,
        client: Optional[httpx.AsyncClient] = None,
        batch_delay: float = BATCH_DELAY_SECONDS
    ):
        self.jobs = JobRepository(db)
        self.client = client
        self.batch_delay = batch_delay

    async def check_dead_links(
        self,
        max_jobs: int = MAX_JOBS_PER_RUN,
        batch_size: int = BATCH_SIZE,
        time_budget: float = TIME_BUDGET_SECONDS
    ) -> Dict[str, Any]:
        """
        Check up to ``max_jobs`` links in concurrent batches.

        Returns:
            Dict[str, Any]: ``checked``, ``alive``, ``dead``, ``errors``,
            ``dead_by_source`` and ``elapsed_seconds``
        """
        started = time.monotonic()
        jobs = await self.jobs.get_dead_link_candidates(limit=max_jobs)

        result: Dict[str, Any] = {"checked": 0, "alive": 0, "dead": 0, "errors": 0, "dead_by_source": {}}
        dead_ids = []

        owns_client = self.client is None
        client = self.client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=REQUEST_TIMEOUT_SECONDS,
            follow_redirects=True
        )

        try:
            for start in range(0, len(jobs), batch_size):
                if time.monotonic() - started >= time_budget:
                    logger.warning(f"Time budget exhausted after {result['checked']}/{len(jobs)} links")
                    break

                batch = jobs[start:start + batch_size]
                statuses = await asyncio.gather(
                    *(is_link_alive(client, job.apply_link) for job in batch),
                    return_exceptions=True
                )

                for job, status in zip(batch, statuses):
                    result["checked"] += 1
                    if isinstance(status, Exception):
                        result["errors"] += 1
                    elif not status.alive:
                        result["dead"] += 1
                        dead_ids.append(job.id)
                        source = job.source_provider or "unknown"
                        result["dead_by_source"][source] = result["dead_by_source"].get(source, 0) + 1
                    elif status.status == 0:
                        result["errors"] += 1
                    else:
                        result["alive"] += 1

                if start + batch_size < len(jobs) and self.batch_delay:
                    await asyncio.sleep(self.batch_delay)
        finally:
            if owns_client:
                await client.aclose()

        if dead_ids:
            unpublished = await self.jobs.unpublish(dead_ids)
            metrics.record_unpublished(UnpublishReasons.DEAD_LINK, unpublished)

        result["elapsed_seconds"] = round(time.monotonic() - started, 2)
        logger.info(
            "Dead link check finished",
            checked=result["checked"],
            alive=result["alive"],
            dead=result["dead"],
            errors=result["errors"]
        )
        return result
