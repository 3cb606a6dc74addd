"""
Ashby Aggregator

Reads public Ashby job boards, ten boards at a time.
"""

import asyncio
import re
from typing import Any, Dict, List, Optional, Tuple

from pmhnp_hiring.aggregators.base import BaseAggregator, RawJob
from pmhnp_hiring.aggregators.constants import format_company_name, get_board_slugs
from pmhnp_hiring.core.exceptions import AggregatorException
from pmhnp_hiring.services.job_filter import is_relevant_job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

BOARD_URL = "https://api.ashbyhq.com/posting-api/job-board/{slug}"
BATCH_SIZE = 10

_COMPENSATION_RANGE = re.compile(
    r'\$(\d{1,3}(?:,?\d{3})*k?)\s*(?:-|–|to)\s*\$?(\d{1,3}(?:,?\d{3})*k?)?',
    re.IGNORECASE
)


def _amount(value: str) -> float:
    value = value.replace(',', '').lower()
    if value.endswith('k'):
        return float(value[:-1]) * 1000
    return float(value)


def parse_compensation(summary: Optional[str]) -> Tuple[Optional[float], Optional[float], Optional[str]]:
    """
    Salary range from a compensation tier summary such as ``$130K - $180K``.

    Returns:
        Tuple: (min, max, period); the period is ``year`` when a range matched
    """
    if not summary:
        return None, None, None

    match = _COMPENSATION_RANGE.search(summary)
    if not match:
        return None, None, None

    maximum = _amount(match.group(2)) if match.group(2) else None
    return _amount(match.group(1)), maximum, 'year'


def job_location(job: Dict[str, Any]) -> str:
    """Postal address parts when present, else the location label."""
    postal = (job.get("address") or {}).get("postalAddress") or {}
    parts = [postal.get(key) for key in ("addressLocality", "addressRegion", "addressCountry")]
    parts = [part for part in parts if part]
    if parts:
        return ", ".join(parts)
    if job.get("location"):
        return job["location"]
    return "Remote" if job.get("isRemote") else "United States"


class AshbyAggregator(BaseAggregator):
    """Ashby posting API."""

    # Pause between batches; requests inside a batch run concurrently
    default_delay = 0.2

    @property
    def name(self) -> str:
        return "ashby"

    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        slugs = get_board_slugs("ashby")
        jobs: List[RawJob] = []

        for start in range(0, len(slugs), BATCH_SIZE):
            batch = slugs[start:start + BATCH_SIZE]
            results = await asyncio.gather(
                *(self.fetch_board(slug) for slug in batch),
                return_exceptions=True
            )

            for slug, result in zip(batch, results):
                if isinstance(result, Exception):
                    logger.warning(f"Ashby board {slug} failed: {result}")
                    continue
                jobs.extend(result)

            if start + BATCH_SIZE < len(slugs):
                await asyncio.sleep(self.delay)

        logger.info(f"Ashby fetch finished with {len(jobs)} relevant jobs from {len(slugs)} boards")
        return jobs

    async def fetch_board(self, slug: str) -> List[RawJob]:
        try:
            data = await self._get_json(BOARD_URL.format(slug=slug), throttle=False)
        except AggregatorException as e:
            logger.debug(f"Ashby board {slug} unavailable: {e.message}")
            return []

        company = format_company_name(slug)
        relevant: List[RawJob] = []

        for job in data.get("jobs") or []:
            self._record_found()
            description = job.get("descriptionHtml") or ""
            if not is_relevant_job(job.get("title") or "", description):
                self._record_filtered()
                continue

            compensation = (job.get("compensation") or {}).get("compensationTierSummary")
            min_salary, max_salary, period = parse_compensation(compensation)

            relevant.append({
                "externalId": f"ashby-{slug}-{job.get('id')}",
                "title": job.get("title"),
                "company": company,
                "location": job_location(job),
                "description": description,
                "applyLink": job.get("jobUrl"),
                "postedDate": job.get("publishedAt") or job.get("updatedAt"),
                "remote": bool(job.get("isRemote")),
                "minSalary": min_salary,
                "maxSalary": max_salary,
                "salaryPeriod": period,
            })

        logger.debug(f"Ashby board {slug}: {len(relevant)} relevant jobs")
        return relevant
