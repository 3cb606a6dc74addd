"""
Greenhouse Aggregator

Reads public Greenhouse job boards of mental-health employers. The board
list is long, so it can be processed in chunks across cron invocations.
"""

import asyncio
import math
from typing import Any, Dict, List, Optional, TypeVar

from pmhnp_hiring.aggregators.base import BaseAggregator, RawJob
from pmhnp_hiring.aggregators.constants import format_company_name, get_board_slugs
from pmhnp_hiring.core.exceptions import AggregatorException
from pmhnp_hiring.services.job_filter import is_relevant_job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

BOARD_URL = "https://boards-api.greenhouse.io/v1/boards/{slug}/jobs"
TOTAL_CHUNKS = 4


def chunk_slugs(slugs: List[T], chunk: Optional[int], total_chunks: int = TOTAL_CHUNKS) -> List[T]:
    """The ``chunk``-th of ``total_chunks`` equal slices; all items when chunk is None."""
    if chunk is None:
        return slugs
    size = math.ceil(len(slugs) / total_chunks)
    return slugs[chunk * size:(chunk + 1) * size]


def job_location(job: Dict[str, Any]) -> str:
    location = (job.get("location") or {}).get("name")
    if location:
        return location
    offices = job.get("offices") or []
    if offices and offices[0].get("name"):
        return offices[0]["name"]
    return "Remote"


class GreenhouseAggregator(BaseAggregator):
    """Greenhouse board API."""

    @property
    def name(self) -> str:
        return "greenhouse"

    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        slugs = chunk_slugs(get_board_slugs("greenhouse"), chunk)
        if chunk is not None:
            logger.info(f"Greenhouse chunk {chunk}/{TOTAL_CHUNKS - 1}: {len(slugs)} boards")

        jobs: List[RawJob] = []
        for slug in slugs:
            jobs.extend(await self.fetch_board(slug))

        logger.info(f"Greenhouse fetch finished with {len(jobs)} relevant jobs from {len(slugs)} boards")
        return jobs

    async def fetch_board(self, slug: str) -> List[RawJob]:
        """Relevant jobs from one board; an unreachable board yields none."""
        try:
            data = await self._get_json(BOARD_URL.format(slug=slug), params={"content": "true"})
        except AggregatorException as e:
            logger.debug(f"Greenhouse board {slug} unavailable: {e.message}")
            return []

        company = format_company_name(slug)
        relevant: List[RawJob] = []

        for job in data.get("jobs") or []:
            self._record_found()
            if not is_relevant_job(job.get("title") or "", job.get("content") or ""):
                self._record_filtered()
                continue

            relevant.append({
                "externalId": f"greenhouse-{slug}-{job.get('id')}",
                "title": job.get("title"),
                "company": company,
                "location": job_location(job),
                "description": job.get("content") or "",
                "applyLink": job.get("absolute_url"),
                "postedDate": job.get("updated_at"),
            })

        return relevant
