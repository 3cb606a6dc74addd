"""
USAJobs Aggregator

Federal openings (VA, Bureau of Prisons, IHS) from the USAJobs search API.
"""

from typing import Any, Dict, List, Optional, Set

from pmhnp_hiring.aggregators.base import BaseAggregator, RawJob
from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.exceptions import AggregatorException
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://data.usajobs.gov/api/search"
RESULTS_PER_PAGE = 100
MAX_PAGES = 5
DEFAULT_CONTACT = "pmhnp-jobs@example.com"

SEARCH_KEYWORDS = [
    'Psychiatric Nurse Practitioner',
    'PMHNP',
    'Psychiatric Mental Health Nurse Practitioner',
    'Psychiatric APRN',
    'Mental Health Nurse Practitioner',
    'Psychiatric NP',
    'Behavioral Health Nurse Practitioner',
    'Nurse Practitioner Psychiatry',
    'Psychiatric ARNP',
    'Psychiatry Nurse Practitioner',
    'Psychiatric Mental Health NP-BC',
    'Telehealth Psychiatric Nurse Practitioner',
    'Correctional Psychiatric Nurse Practitioner',
    'Outpatient PMHNP',
]

RATE_INTERVALS = {'PA': 'year', 'PH': 'hour'}


def format_locations(locations: List[Dict[str, Any]]) -> str:
    """First two location names, then a count of the rest."""
    names = [loc.get('LocationName') for loc in locations if loc.get('LocationName')]
    if not names:
        return 'United States'
    if len(names) <= 2:
        return '; '.join(names)
    return f"{'; '.join(names[:2])} + {len(names) - 2} more"


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value else None
    except (TypeError, ValueError):
        return None


class USAJobsAggregator(BaseAggregator):
    """USAJobs search API."""

    default_delay = 0.5

    @property
    def name(self) -> str:
        return "usajobs"

    def has_credentials(self) -> bool:
        return bool(get_settings().USAJOBS_API_KEY)

    def _headers(self) -> Dict[str, str]:
        settings = get_settings()
        return {
            "Authorization-Key": settings.USAJOBS_API_KEY or "",
            "User-Agent": settings.USAJOBS_USER_AGENT or DEFAULT_CONTACT,
            "Host": "data.usajobs.gov",
        }

    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        jobs: List[RawJob] = []
        seen_ids: Set[str] = set()

        for keyword in SEARCH_KEYWORDS:
            for page in range(MAX_PAGES):
                params = {"Keyword": keyword, "ResultsPerPage": RESULTS_PER_PAGE, "Page": page}
                try:
                    data = await self._get_json(SEARCH_URL, params=params, headers=self._headers())
                except AggregatorException as e:
                    logger.warning(f"USAJobs error for '{keyword}' page {page}: {e.message}")
                    break

                items = (data.get("SearchResult") or {}).get("SearchResultItems") or []
                if not items:
                    break

                for item in items:
                    position = item.get("MatchedObjectDescriptor") or {}
                    position_id = position.get("PositionID")
                    if not position_id or position_id in seen_ids:
                        continue
                    seen_ids.add(position_id)
                    self._record_found()
                    jobs.append(self._to_raw_job(position))

                if len(items) < RESULTS_PER_PAGE:
                    break

        logger.info(f"USAJobs fetch finished with {len(jobs)} positions")
        return jobs

    @staticmethod
    def _to_raw_job(position: Dict[str, Any]) -> RawJob:
        details = (position.get("UserArea") or {}).get("Details") or {}
        remuneration = (position.get("PositionRemuneration") or [{}])[0]

        parts = [
            details.get("JobSummary"),
            "\n".join(details.get("MajorDuties") or []),
            details.get("Requirements"),
            details.get("Education"),
        ]
        description = "\n\n".join(part for part in parts if part)
        if not description:
            formatted = position.get("PositionFormattedDescription") or [{}]
            description = formatted[0].get("Content") or ""

        return {
            "title": position.get("PositionTitle"),
            "company": position.get("OrganizationName") or position.get("DepartmentName"),
            "location": format_locations(position.get("PositionLocation") or []),
            "description": description,
            "minSalary": _to_float(remuneration.get("MinimumRange")),
            "maxSalary": _to_float(remuneration.get("MaximumRange")),
            "salaryPeriod": RATE_INTERVALS.get(remuneration.get("RateIntervalCode")),
            "applyLink": details.get("ApplyOnlineUrl") or position.get("PositionURI"),
            "externalId": position.get("PositionID"),
            "remote": details.get("RemoteIndicator") is True or details.get("TeleworkEligible") is True,
            "postedDate": position.get("PublicationStartDate"),
            "expiresAt": position.get("ApplicationCloseDate"),
        }
