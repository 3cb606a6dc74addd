"""
Adzuna Aggregator

Searches the Adzuna US job index for every PMHNP query.
"""

from typing import List, Optional, Set

from pmhnp_hiring.aggregators.base import BaseAggregator, RawJob
from pmhnp_hiring.aggregators.constants import SEARCH_QUERIES
from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.exceptions import AggregatorException
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://api.adzuna.com/v1/api/jobs/us/search/{page}"
RESULTS_PER_PAGE = 50
MAX_PAGES = 20


def map_job_type(contract_time: Optional[str], contract_type: Optional[str]) -> Optional[str]:
    if contract_time == 'full_time':
        return 'Full-Time'
    if contract_time == 'part_time':
        return 'Part-Time'
    if contract_type == 'contract':
        return 'Contract'
    if contract_type == 'permanent':
        return 'Full-Time'
    return None


class AdzunaAggregator(BaseAggregator):
    """Adzuna search API."""

    default_delay = 0.5

    @property
    def name(self) -> str:
        return "adzuna"

    def has_credentials(self) -> bool:
        settings = get_settings()
        return bool(settings.ADZUNA_APP_ID and settings.ADZUNA_APP_KEY)

    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        settings = get_settings()
        jobs: List[RawJob] = []
        seen_ids: Set[str] = set()
        dropped = 0

        logger.info(f"Starting Adzuna fetch with {len(SEARCH_QUERIES)} queries")

        for query in SEARCH_QUERIES:
            for page in range(1, MAX_PAGES + 1):
                params = {
                    "app_id": settings.ADZUNA_APP_ID,
                    "app_key": settings.ADZUNA_APP_KEY,
                    "what": query,
                    "results_per_page": RESULTS_PER_PAGE,
                    "max_days_old": 7,
                    "sort_by": "date",
                }
                try:
                    data = await self._get_json(SEARCH_URL.format(page=page), params=params)
                except AggregatorException as e:
                    logger.error(f"Adzuna error for '{query}' page {page}: {e.message}")
                    break

                results = data.get("results") or []
                if not results:
                    break

                for item in results:
                    job_id = str(item.get("id"))
                    if job_id in seen_ids:
                        continue
                    seen_ids.add(job_id)
                    self._record_found()

                    if not item.get("redirect_url"):
                        dropped += 1
                        continue

                    jobs.append(self._to_raw_job(item))

                if len(results) < RESULTS_PER_PAGE:
                    break

        self._record_filtered(dropped)
        logger.info("Adzuna fetch finished", raw=len(seen_ids), dropped=dropped, accepted=len(jobs))
        return jobs

    @staticmethod
    def _to_raw_job(item: RawJob) -> RawJob:
        company = item.get("company") or {}
        location = item.get("location") or {}
        return {
            "title": item.get("title"),
            "employer": company.get("display_name") or "Company Not Listed",
            "location": location.get("display_name") or "United States",
            "description": item.get("description") or "",
            "minSalary": item.get("salary_min") or None,
            "maxSalary": item.get("salary_max") or None,
            "salaryPeriod": "annual" if item.get("salary_min") else None,
            "jobType": map_job_type(item.get("contract_time"), item.get("contract_type")),
            "applyLink": item.get("redirect_url"),
            "externalId": f"adzuna_{item.get('id')}",
            "postedDate": item.get("created"),
        }
