"""
Company Normalizer

Normalizes employer names so spelling variants map to one company row,
and links jobs to their companies.
"""

import re
from typing import Dict, List, Optional

from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.core.exceptions import (
    CompanyMergeException,
    CompanyNotFoundException,
    JobNotFoundException,
    ValidationException,
)
from pmhnp_hiring.repositories.company_repository import CompanyRepository
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)


SUFFIXES = [
    'inc', 'incorporated', 'llc', 'ltd', 'limited',
    'corp', 'corporation', 'co', 'company',
    'health', 'healthcare', 'health care', 'medical', 'medical group',
    'group', 'services', 'solutions', 'partners', 'associates',
    'pllc', 'pc', 'pa',
]

KNOWN_COMPANIES: Dict[str, List[str]] = {
    'Talkiatry': ['talkiatry', 'talkiatry inc'],
    'Talkspace': ['talkspace', 'talkspace inc', 'talkspace llc'],
    'SonderMind': ['sondermind', 'sonder mind', 'sondermind inc'],
    'LifeStance Health': ['lifestance', 'lifestance health', 'life stance'],
    'Cerebral': ['cerebral', 'cerebral inc'],
    'Headway': ['headway', 'headway health'],
    'Spring Health': ['spring health', 'springhealth'],
    'Lyra Health': ['lyra health', 'lyrahealth', 'lyra'],
    'Modern Health': ['modern health', 'modernhealth'],
    'Teladoc Health': ['teladoc', 'teladoc health', 'teladochealth'],
    'Brightside Health': ['brightside', 'brightside health'],
    'Department of Veterans Affairs': ['veterans affairs', 'va hospital', 'va health', 'va medical'],
}

# Longest first so "medical group" goes before "medical" and "group"
_SUFFIX_PATTERNS = [
    re.compile(rf'\b{re.escape(suffix)}\b')
    for suffix in sorted(SUFFIXES, key=len, reverse=True)
]


def normalize_company_name(name: Optional[str]) -> str:
    """
    Normalize an employer name for matching.

    Punctuation is removed before suffixes so dotted forms such as
    ``L.L.C.`` and ``P.A.`` are caught; this also makes the function
    idempotent.

    Args:
        name: Employer name as shown on the posting

    Returns:
        str: Lowercase name without corporate/healthcare suffixes
    """
    if not name:
        return ''

    normalized = name.lower().strip()
    normalized = re.sub(r'[^a-z0-9\s-]', '', normalized)

    for pattern in _SUFFIX_PATTERNS:
        normalized = pattern.sub('', normalized)

    return re.sub(r'\s+', ' ', normalized).strip()


_CANONICAL_BY_ALIAS: Dict[str, str] = {
    normalize_company_name(alias): canonical
    for canonical, aliases in KNOWN_COMPANIES.items()
    for alias in aliases
}


def find_canonical_name(name: Optional[str]) -> Optional[str]:
    """Canonical display name for a known company, or None."""
    normalized = normalize_company_name(name)
    if not normalized:
        return None
    return _CANONICAL_BY_ALIAS.get(normalized)


class CompanyService:
    """Company lookup, linking and merge operations."""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.companies = CompanyRepository(db)
        self.jobs = JobRepository(db)

    async def get_or_create_company(self, employer_name: str) -> str:
        """
        Find the company for an employer name, creating it if needed.

        Returns:
            str: Company ID
        """
        if not employer_name or not employer_name.strip():
            raise ValidationException("Employer name is required", field_errors={"employer": "required"})

        normalized = normalize_company_name(employer_name)
        canonical = find_canonical_name(employer_name)

        company = await self.companies.get_by_normalized_name(normalized)
        if company:
            await self.companies.record_job(company.id, alias=employer_name.strip())
            return company.id

        company = await self.companies.create({
            "name": canonical or employer_name.strip(),
            "normalized_name": normalized,
            "aliases": list(KNOWN_COMPANIES.get(canonical, [])) if canonical else [],
            "job_count": 1,
            "is_verified": canonical is not None,
        })
        if company is None:
            # Another writer may have created it between lookup and insert
            company = await self.companies.get_by_normalized_name(normalized)
            if company is None:
                raise CompanyNotFoundException(normalized)

        logger.info(f"Created company '{company.name}'", normalized_name=normalized)
        return company.id

    async def link_job_to_company(self, job_id: str, employer: Optional[str] = None) -> Optional[str]:
        """Attach a job to its company. Returns the company ID."""
        job = await self.jobs.get_by_id(job_id)
        if not job:
            raise JobNotFoundException(job_id)

        if job.company_id:
            return job.company_id

        company_id = await self.get_or_create_company(employer or job.employer)
        await self.companies.link_job(job_id, company_id)
        return company_id

    async def link_all_jobs_to_companies(self, batch_size: int = 100) -> Dict[str, int]:
        """
        Link every job that has no company yet.

        Returns:
            Dict[str, int]: ``processed``, ``linked`` and ``errors`` counts
        """
        processed = 0
        linked = 0
        errors = 0
        failed_ids = set()

        while True:
            batch = [job for job in await self.jobs.get_without_company(limit=batch_size + len(failed_ids))
                     if job.id not in failed_ids]
            if not batch:
                break

            for job in batch[:batch_size]:
                processed += 1
                try:
                    company_id = await self.get_or_create_company(job.employer)
                    if await self.companies.link_job(job.id, company_id):
                        linked += 1
                    else:
                        errors += 1
                        failed_ids.add(job.id)
                except Exception as e:
                    logger.error(f"Error linking job {job.id} to company: {e}")
                    errors += 1
                    failed_ids.add(job.id)

            logger.info(f"Linked {linked}/{processed} jobs to companies")

        return {"processed": processed, "linked": linked, "errors": errors}

    async def merge_companies(self, keep_id: str, merge_id: str) -> Dict[str, object]:
        """Merge ``merge_id`` into ``keep_id``."""
        if not keep_id or not merge_id:
            raise CompanyMergeException("Both keep_id and merge_id are required")
        if keep_id == merge_id:
            raise CompanyMergeException("Cannot merge a company with itself")

        keep = await self.companies.get_by_id(keep_id)
        if not keep:
            raise CompanyNotFoundException(keep_id)
        merge = await self.companies.get_by_id(merge_id)
        if not merge:
            raise CompanyNotFoundException(merge_id)

        transferred = await self.companies.merge(keep, merge)
        logger.info(f"Merged company {merge.name} ({transferred} jobs) into {keep.name}")

        return {"kept_id": keep_id, "merged_id": merge_id, "jobs_transferred": transferred}
