"""
Job Deduplicator

Detects whether an incoming job is already stored, using four strategies
in decreasing order of certainty: exact source id, exact normalized
title/employer/location, apply URL and fuzzy title/employer similarity.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlsplit, parse_qsl, urlencode

from rapidfuzz.distance import Levenshtein

from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)


STOP_WORDS = {'the', 'a', 'an', 'at', 'in', 'for', 'to', 'and', 'or'}
CORPORATE_SUFFIXES = {
    'inc', 'llc', 'corp', 'corporation', 'company', 'co', 'ltd',
    'health', 'healthcare', 'medical', 'group', 'services',
}
TRACKING_PARAMS = {'utm_source', 'utm_medium', 'utm_campaign', 'ref', 'source'}

TITLE_PREFIX_LENGTH = 30
TITLE_CANDIDATE_LIMIT = 50
EMPLOYER_PREFIX_LENGTH = 10
EMPLOYER_CANDIDATE_LIMIT = 20

TITLE_SIMILARITY_THRESHOLD = 0.85
EMPLOYER_SIMILARITY_THRESHOLD = 0.80

BATCH_SIZE = 10


@dataclass
class DuplicateCheckResult:
    """Outcome of a duplicate check."""

    is_duplicate: bool
    confidence: float
    match_type: str  # exact_id | exact_title | apply_url | fuzzy_title | none
    matched_job_id: Optional[str] = None


NOT_DUPLICATE = DuplicateCheckResult(is_duplicate=False, confidence=0.0, match_type='none')


def normalize_title(title: Optional[str]) -> str:
    if not title:
        return ''
    words = re.sub(r'[^a-z0-9\s]', ' ', title.lower()).split()
    return ' '.join(word for word in words if word not in STOP_WORDS)


def normalize_company(company: Optional[str]) -> str:
    """Drop corporate and healthcare suffix words, so "Spring Health, Inc." matches "Spring"."""
    if not company:
        return ''
    words = re.sub(r'[^a-z0-9\s]', ' ', company.lower()).split()
    return ' '.join(word for word in words if word not in CORPORATE_SUFFIXES)


def normalize_location(location: Optional[str]) -> str:
    if not location:
        return ''
    normalized = re.sub(r'[^a-z0-9\s,]', ' ', location.lower())
    return re.sub(r'\s+', ' ', normalized).strip()


def normalize_apply_url(url: Optional[str]) -> str:
    """Host + path + query, without tracking parameters."""
    if not url:
        return ''
    try:
        parts = urlsplit(url)
        if not parts.hostname:
            raise ValueError("relative URL")
        query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in TRACKING_PARAMS]
        encoded = urlencode(query)
        return parts.hostname + (parts.path or '/') + (f"?{encoded}" if encoded else '')
    except ValueError:
        return re.sub(r'[?&](utm_source|utm_medium|utm_campaign|ref|source)=[^&]*', '', url.lower())


def calculate_similarity(first: str, second: str) -> float:
    """``1 - levenshtein / max(len)``; 1.0 for equal strings, 0.0 if either is empty."""
    if first == second:
        return 1.0
    if not first or not second:
        return 0.0
    return Levenshtein.normalized_similarity(first, second)


class Deduplicator:
    """Duplicate detection against stored jobs."""

    def __init__(self, db: Optional[DatabaseManager] = None, job_repository: Optional[JobRepository] = None):
        self.jobs = job_repository or JobRepository(db)

    async def check_duplicate(self, job: Mapping[str, Any]) -> DuplicateCheckResult:
        """
        Check one normalized job.

        Args:
            job: Normalized job with ``title``, ``employer``, ``location`` and
                optionally ``external_id``, ``source_provider``, ``apply_link``

        Returns:
            DuplicateCheckResult: Match details; errors count as not duplicate
        """
        try:
            external_id = job.get('external_id')
            source = job.get('source_provider')
            if external_id and source:
                match = await self.jobs.find_by_external_id(source, external_id)
                if match:
                    return DuplicateCheckResult(True, 1.0, 'exact_id', match.id)

            title = job.get('title') or ''
            employer = job.get('employer') or ''
            normalized_title = normalize_title(title)
            normalized_employer = normalize_company(employer)
            normalized_location = normalize_location(job.get('location'))

            candidates = await self.jobs.find_by_title_fragment(
                title[:TITLE_PREFIX_LENGTH], limit=TITLE_CANDIDATE_LIMIT
            )

            for candidate in candidates:
                if (
                    normalize_title(candidate.title) == normalized_title
                    and normalize_company(candidate.employer) == normalized_employer
                    and normalize_location(candidate.location) == normalized_location
                ):
                    return DuplicateCheckResult(True, 0.95, 'exact_title', candidate.id)

            apply_link = job.get('apply_link')
            if apply_link:
                normalized_url = normalize_apply_url(apply_link)
                for candidate in candidates:
                    if candidate.apply_link and normalize_apply_url(candidate.apply_link) == normalized_url:
                        return DuplicateCheckResult(True, 0.90, 'apply_url', candidate.id)

            fuzzy_candidates = await self.jobs.find_by_employer_fragment(
                employer[:EMPLOYER_PREFIX_LENGTH], limit=EMPLOYER_CANDIDATE_LIMIT
            )
            for candidate in fuzzy_candidates:
                title_similarity = calculate_similarity(normalized_title, normalize_title(candidate.title))
                employer_similarity = calculate_similarity(normalized_employer, normalize_company(candidate.employer))

                if title_similarity > TITLE_SIMILARITY_THRESHOLD and employer_similarity > EMPLOYER_SIMILARITY_THRESHOLD:
                    confidence = min(title_similarity, employer_similarity)
                    return DuplicateCheckResult(True, confidence, 'fuzzy_title', candidate.id)

            return NOT_DUPLICATE

        except Exception as e:
            # Never block ingestion on a failed lookup
            logger.error(f"Error in duplicate check: {e}")
            return NOT_DUPLICATE

    async def batch_check_duplicates(self, jobs: List[Mapping[str, Any]]) -> Dict[int, DuplicateCheckResult]:
        """Check jobs concurrently in groups of ten, keyed by input index."""
        results: Dict[int, DuplicateCheckResult] = {}
        for start in range(0, len(jobs), BATCH_SIZE):
            batch = jobs[start:start + BATCH_SIZE]
            batch_results = await asyncio.gather(*(self.check_duplicate(job) for job in batch))
            for offset, result in enumerate(batch_results):
                results[start + offset] = result
        return results

    async def is_duplicate(self, job: Mapping[str, Any]) -> bool:
        result = await self.check_duplicate(job)
        return result.is_duplicate
