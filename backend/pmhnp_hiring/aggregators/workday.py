"""
Workday Aggregator

Searches Workday career sites through the JSON endpoints behind their
public job pages. Each site is searched with a handful of PMHNP terms,
paged 20 postings at a time, and the description of every likely match is
read from the posting's detail endpoint. Like Greenhouse, the site list
can be split into chunks across cron invocations.
"""

import asyncio
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Set

from pmhnp_hiring.aggregators.base import BaseAggregator, RawJob
from pmhnp_hiring.aggregators.constants import WORKDAY_SITES, WorkdaySite
from pmhnp_hiring.aggregators.greenhouse import chunk_slugs
from pmhnp_hiring.core.exceptions import AggregatorException
from pmhnp_hiring.services.job_filter import is_relevant_job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

API_BASE = "https://{slug}.wd{instance}.myworkdayjobs.com/wday/cxs/{slug}/{site}"
APPLY_BASE = "https://{slug}.wd{instance}.myworkdayjobs.com/en-US/{site}"
TOTAL_CHUNKS = 5
BATCH_SIZE = 5
PAGE_SIZE = 20

SEARCH_TERMS = [
    'Psychiatric Nurse Practitioner',
    'PMHNP',
    'Psychiatric Mental Health',
    'Behavioral Health Nurse Practitioner',
    'Psychiatric APRN',
    'Psych NP',
]

# Checked before the detail request so unrelated postings cost nothing
_LIKELY_TITLE_MARKERS = (
    'pmhnp', 'psych', 'mental health', 'behavioral health', 'nurse practitioner',
)

_DAYS_AGO = re.compile(r"(\d+)\+?\s+days?\s+ago", re.IGNORECASE)


def api_url(site: WorkdaySite) -> str:
    return API_BASE.format(slug=site.slug, instance=site.instance, site=site.site)


def apply_url(site: WorkdaySite, external_path: str) -> str:
    return APPLY_BASE.format(slug=site.slug, instance=site.instance, site=site.site) + external_path


def job_id_from_path(external_path: str) -> str:
    """Requisition id, the last segment of ``/job/<title>/<id>``."""
    return external_path.rstrip('/').split('/')[-1] or external_path


def posted_on_iso(posted_on: Optional[str], now: Optional[datetime] = None) -> Optional[str]:
    """
    ISO date for Workday's relative ``postedOn`` text.

    ``Posted Today``, ``Posted Yesterday`` and ``Posted 5 Days Ago`` are
    understood; ``30+ Days Ago`` counts as 30 days.
    """
    if not posted_on:
        return None
    now = now or datetime.utcnow()
    text = posted_on.lower()

    if "today" in text:
        days = 0
    elif "yesterday" in text:
        days = 1
    else:
        match = _DAYS_AGO.search(text)
        if not match:
            return None
        days = int(match.group(1))

    return (now - timedelta(days=days)).date().isoformat()


def is_likely_pmhnp_title(title: str) -> bool:
    title = title.lower()
    return any(marker in title for marker in _LIKELY_TITLE_MARKERS)


class WorkdayAggregator(BaseAggregator):
    """Workday career site search."""

    # Pause between result pages and between search terms of one site
    default_delay = 0.3

    @property
    def name(self) -> str:
        return "workday"

    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        sites = chunk_slugs(WORKDAY_SITES, chunk, TOTAL_CHUNKS)
        if chunk is not None:
            logger.info(f"Workday chunk {chunk}/{TOTAL_CHUNKS - 1}: {len(sites)} career sites")

        jobs: List[RawJob] = []
        failed: List[str] = []

        for start in range(0, len(sites), BATCH_SIZE):
            batch = sites[start:start + BATCH_SIZE]
            results = await asyncio.gather(
                *(self.fetch_site(site) for site in batch),
                return_exceptions=True
            )

            for site, result in zip(batch, results):
                if isinstance(result, Exception):
                    logger.warning(f"Workday site {site.name} failed: {result}")
                    failed.append(site.name)
                    continue
                jobs.extend(result)

            if start + BATCH_SIZE < len(sites):
                await asyncio.sleep(self.delay)

        if failed:
            logger.warning(f"Workday sites failed ({len(failed)}): {', '.join(failed)}")
        logger.info(f"Workday fetch finished with {len(jobs)} relevant jobs from {len(sites)} career sites")
        return jobs

    async def fetch_site(self, site: WorkdaySite) -> List[RawJob]:
        """Relevant jobs from one career site across all search terms."""
        jobs: List[RawJob] = []
        seen_paths: Set[str] = set()

        for term in SEARCH_TERMS:
            offset = 0
            while True:
                try:
                    data = await self._get_json(
                        f"{api_url(site)}/jobs",
                        method="POST",
                        json={"limit": PAGE_SIZE, "offset": offset, "searchText": term},
                        throttle=False
                    )
                except AggregatorException as e:
                    logger.debug(f"Workday {site.name} search '{term}' stopped at offset {offset}: {e.message}")
                    break

                postings = data.get("jobPostings") or []
                if not postings:
                    break

                for posting in postings:
                    path = posting.get("externalPath")
                    if not path or path in seen_paths:
                        continue
                    seen_paths.add(path)

                    job = await self._build_job(site, posting)
                    if job:
                        jobs.append(job)

                offset += PAGE_SIZE
                if offset >= (data.get("total") or 0) or len(postings) < PAGE_SIZE:
                    break
                await asyncio.sleep(self.delay)

            await asyncio.sleep(self.delay)

        logger.debug(f"Workday {site.name}: {len(jobs)} relevant of {len(seen_paths)} postings searched")
        return jobs

    async def fetch_description(self, site: WorkdaySite, external_path: str) -> str:
        """Description HTML of one posting; empty when the detail request fails."""
        try:
            data = await self._get_json(f"{api_url(site)}{external_path}", throttle=False)
        except AggregatorException:
            return ""
        return (data.get("jobPostingInfo") or {}).get("jobDescription") or ""

    async def _build_job(self, site: WorkdaySite, posting: Dict[str, Any]) -> Optional[RawJob]:
        self._record_found()
        title = posting.get("title") or ""
        if not is_likely_pmhnp_title(title):
            self._record_filtered()
            return None

        path = posting["externalPath"]
        description = await self.fetch_description(site, path)
        if not is_relevant_job(title, description):
            self._record_filtered()
            return None

        return {
            "externalId": f"workday-{site.slug}-{job_id_from_path(path)}",
            "title": title,
            "company": site.name,
            "location": posting.get("locationsText") or "United States",
            "description": description,
            "applyLink": apply_url(site, path),
            "postedDate": posted_on_iso(posting.get("postedOn")),
        }
