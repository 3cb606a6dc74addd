"""
Lever Aggregator

Reads public Lever posting lists, ten boards at a time.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pmhnp_hiring.aggregators.base import BaseAggregator, RawJob
from pmhnp_hiring.aggregators.constants import format_company_name, get_board_slugs
from pmhnp_hiring.core.exceptions import AggregatorException
from pmhnp_hiring.services.job_filter import is_relevant_job
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

POSTINGS_URL = "https://api.lever.co/v0/postings/{slug}"
BATCH_SIZE = 10


def build_description(posting: Dict[str, Any]) -> str:
    """Body, list sections and closing text joined by blank lines."""
    parts = []

    body = posting.get("descriptionPlain") or posting.get("description")
    if body:
        parts.append(body)

    for section in posting.get("lists") or []:
        parts.append(f"{section.get('text', '')}\n{section.get('content', '')}")

    additional = posting.get("additionalPlain") or posting.get("additional")
    if additional:
        parts.append(additional)

    return "\n\n".join(parts)


def created_at_iso(created_at: Any) -> Optional[str]:
    """Lever reports creation time in epoch milliseconds."""
    if not isinstance(created_at, (int, float)):
        return None
    return datetime.fromtimestamp(created_at / 1000, tz=timezone.utc).isoformat()


class LeverAggregator(BaseAggregator):
    """Lever postings API."""

    # Pause between batches; requests inside a batch run concurrently
    default_delay = 0.2

    @property
    def name(self) -> str:
        return "lever"

    async def fetch_jobs(self, chunk: Optional[int] = None) -> List[RawJob]:
        slugs = get_board_slugs("lever")
        jobs: List[RawJob] = []

        for start in range(0, len(slugs), BATCH_SIZE):
            batch = slugs[start:start + BATCH_SIZE]
            results = await asyncio.gather(
                *(self.fetch_board(slug) for slug in batch),
                return_exceptions=True
            )

            for slug, result in zip(batch, results):
                if isinstance(result, Exception):
                    logger.warning(f"Lever board {slug} failed: {result}")
                    continue
                jobs.extend(result)

            if start + BATCH_SIZE < len(slugs):
                await asyncio.sleep(self.delay)

        logger.info(f"Lever fetch finished with {len(jobs)} relevant jobs from {len(slugs)} boards")
        return jobs

    async def fetch_board(self, slug: str) -> List[RawJob]:
        try:
            postings = await self._get_json(
                POSTINGS_URL.format(slug=slug),
                params={"mode": "json"},
                throttle=False
            )
        except AggregatorException as e:
            logger.debug(f"Lever board {slug} unavailable: {e.message}")
            return []

        if not isinstance(postings, list):
            return []

        company = format_company_name(slug)
        relevant: List[RawJob] = []

        for posting in postings:
            self._record_found()
            description = build_description(posting)
            if not is_relevant_job(posting.get("text") or "", description):
                self._record_filtered()
                continue

            categories = posting.get("categories") or {}
            relevant.append({
                "externalId": f"lever-{slug}-{posting.get('id')}",
                "title": posting.get("text"),
                "company": company,
                "location": categories.get("location") or "Remote",
                "description": description,
                "applyLink": posting.get("hostedUrl") or posting.get("applyUrl"),
                "jobType": categories.get("commitment"),
                "postedDate": created_at_iso(posting.get("createdAt")),
            })

        return relevant
