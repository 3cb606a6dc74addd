"""
Jooble Aggregator

Keyword search against the Jooble REST API. Jooble returns short
snippets rather than full descriptions, and salary as free text.
"""

import re
from typing import List, Optional, Set, Tuple

from pmhnp_hiring.aggregators.base import BaseAggregator, RawJob
from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.exceptions import AggregatorException
from pmhnp_hiring.services.job_filter import is_relevant_job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

API_URL = "https://jooble.org/api/{key}"
MAX_PAGES = 5
PAGE_SIZE = 20

SEARCH_KEYWORDS = [
    'PMHNP',
    'Psychiatric Mental Health Nurse Practitioner',
    'Psychiatric Nurse Practitioner',
    'Psych NP',
    'Mental Health NP',
    'Psychiatric APRN',
]

_HOURLY = re.compile(
    r'\$?([\d,]+(?:\.\d+)?)\s*(?:-|to)?\s*\$?([\d,]+(?:\.\d+)?)?\s*(?:per\s*)?(?:hour|hr)',
    re.IGNORECASE
)
_ANNUAL = re.compile(r'\$?([\d,]+(?:k)?)\s*(?:-|to)?\s*\$?([\d,]+(?:k)?)?', re.IGNORECASE)


def clean_snippet(snippet: Optional[str]) -> str:
    """Tidy a search snippet into a sentence."""
    if not snippet:
        return ''

    cleaned = re.sub(r'\.{2,}', ' ', snippet.strip())
    cleaned = re.sub(r'^Description Summary:\s*', '', cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r'^About (this|the) (role|position|job):\s*', '', cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()

    if cleaned and not re.search(r'[.!?]$', cleaned):
        cleaned += '.'
    return cleaned


def _amount(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    value = value.replace(',', '').lower()
    try:
        if value.endswith('k'):
            return float(value[:-1]) * 1000
        return float(value)
    except ValueError:
        return None


def parse_salary(salary: Optional[str]) -> Tuple[Optional[float], Optional[float], Optional[str]]:
    """
    Parse a Jooble salary string.

    Returns:
        Tuple: (min, max, period) with period 'hourly', 'annual' or None
    """
    if not salary or not salary.strip():
        return None, None, None

    text = salary.lower()
    match = _HOURLY.search(text)
    if match:
        return _amount(match.group(1)), _amount(match.group(2)), 'hourly'

    match = _ANNUAL.search(text)
    if match:
        return _amount(match.group(1)), _amount(match.group(2)), 'annual'

    return None, None, None


def map_job_type(job_type: Optional[str]) -> Optional[str]:
    if not job_type:
        return None
    lower = job_type.lower()
    if 'full-time' in lower or 'full time' in lower:
        return 'Full-Time'
    if 'part-time' in lower or 'part time' in lower:
        return 'Part-Time'
    if 'contract' in lower or 'temporary' in lower:
        return 'Contract'
    if 'per diem' in lower:
        return 'Per Diem'
    return None


class JoobleAggregator(BaseAggregator):
    """Jooble search API."""

    default_delay = 1.0

    @property
    def name(self) -> str:
        return "jooble"

    def has_credentials(self) -> bool:
        return bool(get_settings().JOOBLE_API_KEY)

    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        url = API_URL.format(key=get_settings().JOOBLE_API_KEY)
        jobs: List[RawJob] = []
        seen_ids: Set[str] = set()

        for keyword in SEARCH_KEYWORDS:
            for page in range(1, MAX_PAGES + 1):
                body = {"keywords": keyword, "location": "United States", "page": page}
                try:
                    data = await self._get_json(url, method="POST", json=body)
                except AggregatorException as e:
                    logger.error(f"Jooble error for '{keyword}' page {page}: {e.message}")
                    break

                results = data.get("jobs") or []
                if not results:
                    break

                for item in results:
                    job_id = str(item.get("id"))
                    if job_id in seen_ids:
                        continue
                    seen_ids.add(job_id)
                    self._record_found()

                    if not is_relevant_job(item.get("title") or "", item.get("snippet") or ""):
                        self._record_filtered()
                        continue

                    min_salary, max_salary, period = parse_salary(item.get("salary"))
                    jobs.append({
                        "title": item.get("title"),
                        "company": item.get("company") or "Company Not Listed",
                        "location": item.get("location") or "United States",
                        "description": clean_snippet(item.get("snippet")),
                        "minSalary": min_salary,
                        "maxSalary": max_salary,
                        "salaryPeriod": period,
                        "jobType": map_job_type(item.get("type")),
                        "applyLink": item.get("link"),
                        "externalId": f"jooble_{job_id}",
                        "postedDate": item.get("updated"),
                    })

                if len(results) < PAGE_SIZE:
                    break

        logger.info(f"Jooble fetch finished with {len(jobs)} relevant jobs")
        return jobs
