"""
JSearch Aggregator

Google for Jobs results through the JSearch RapidAPI endpoint.
"""

import asyncio
from typing import Any, Dict, List, Optional, Set

from pmhnp_hiring.aggregators.base import BaseAggregator, RawJob
from pmhnp_hiring.aggregators.constants import SEARCH_QUERIES
from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.exceptions import AggregatorException, AggregatorRateLimitError
from pmhnp_hiring.services.job_filter import is_relevant_job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://jsearch.p.rapidapi.com/search"
RAPIDAPI_HOST = "jsearch.p.rapidapi.com"
PAGES_PER_QUERY = 3
RATE_LIMIT_PAUSE_SECONDS = 2.0

SALARY_PERIODS = {
    'YEAR': 'annual', 'YEARLY': 'annual', 'ANNUAL': 'annual',
    'HOUR': 'hourly', 'HOURLY': 'hourly',
    'MONTH': 'monthly', 'MONTHLY': 'monthly',
    'WEEK': 'weekly', 'WEEKLY': 'weekly',
}


def normalize_salary_period(period: Optional[str]) -> Optional[str]:
    if not period:
        return None
    return SALARY_PERIODS.get(period.upper())


def build_location(job: Dict[str, Any]) -> str:
    city = job.get("job_city")
    state = job.get("job_state")

    if job.get("job_is_remote"):
        return f"{city}, {state} (Remote)" if city and state else "Remote"
    if city and state:
        return f"{city}, {state}"
    if state:
        return state
    return "United States"


class JSearchAggregator(BaseAggregator):
    """JSearch (RapidAPI) search endpoint."""

    default_delay = 0.3

    @property
    def name(self) -> str:
        return "jsearch"

    def has_credentials(self) -> bool:
        return bool(get_settings().RAPIDAPI_KEY)

    async def fetch_page(self, query: str, page: int) -> List[Dict[str, Any]]:
        """One result page; failures yield an empty page."""
        params = {
            "query": query,
            "page": page,
            "num_pages": 1,
            "date_posted": "month",
            "country": "us",
            "language": "en",
        }
        headers = {
            "X-RapidAPI-Key": get_settings().RAPIDAPI_KEY or "",
            "X-RapidAPI-Host": RAPIDAPI_HOST,
        }

        try:
            data = await self._get_json(SEARCH_URL, params=params, headers=headers)
        except AggregatorRateLimitError:
            logger.warning(f"JSearch rate limited on '{query}' page {page}")
            await asyncio.sleep(RATE_LIMIT_PAUSE_SECONDS if self.delay else 0)
            return []
        except AggregatorException as e:
            logger.error(f"JSearch error for '{query}' page {page}: {e.message}")
            return []

        if data.get("status") != "OK":
            logger.error(f"JSearch returned status {data.get('status')}")
            return []

        return data.get("data") or []

    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        jobs: List[RawJob] = []
        seen_ids: Set[str] = set()

        for query in SEARCH_QUERIES:
            for page in range(1, PAGES_PER_QUERY + 1):
                results = await self.fetch_page(query, page)
                if not results:
                    break

                for item in results:
                    job_id = item.get("job_id")
                    if not job_id or job_id in seen_ids:
                        continue
                    self._record_found()

                    if not is_relevant_job(item.get("job_title") or "", item.get("job_description") or ""):
                        self._record_filtered()
                        continue

                    seen_ids.add(job_id)
                    jobs.append({
                        "title": item.get("job_title"),
                        "employer": item.get("employer_name") or "Company Not Listed",
                        "location": build_location(item),
                        "description": item.get("job_description") or "",
                        "applyLink": item.get("job_apply_link"),
                        "externalId": f"jsearch_{job_id}",
                        "sourceSite": item.get("job_publisher") or "Google Jobs",
                        "minSalary": item.get("job_min_salary"),
                        "maxSalary": item.get("job_max_salary"),
                        "salaryPeriod": normalize_salary_period(item.get("job_salary_period")),
                        "remote": bool(item.get("job_is_remote")),
                        "postedDate": item.get("job_posted_at_datetime_utc"),
                    })

        logger.info(f"JSearch fetch finished with {len(jobs)} relevant jobs")
        return jobs
