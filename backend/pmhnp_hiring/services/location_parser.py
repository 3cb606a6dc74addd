"""
Location Parser

Parses free-text job locations into city/state/remote fields and backfills
parsed locations on stored jobs.
"""

import re
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.core.exceptions import JobNotFoundException
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)


STATE_CODES = {
    'Alabama': 'AL', 'Alaska': 'AK', 'Arizona': 'AZ', 'Arkansas': 'AR',
    'California': 'CA', 'Colorado': 'CO', 'Connecticut': 'CT', 'Delaware': 'DE',
    'Florida': 'FL', 'Georgia': 'GA', 'Hawaii': 'HI', 'Idaho': 'ID',
    'Illinois': 'IL', 'Indiana': 'IN', 'Iowa': 'IA', 'Kansas': 'KS',
    'Kentucky': 'KY', 'Louisiana': 'LA', 'Maine': 'ME', 'Maryland': 'MD',
    'Massachusetts': 'MA', 'Michigan': 'MI', 'Minnesota': 'MN', 'Mississippi': 'MS',
    'Missouri': 'MO', 'Montana': 'MT', 'Nebraska': 'NE', 'Nevada': 'NV',
    'New Hampshire': 'NH', 'New Jersey': 'NJ', 'New Mexico': 'NM', 'New York': 'NY',
    'North Carolina': 'NC', 'North Dakota': 'ND', 'Ohio': 'OH', 'Oklahoma': 'OK',
    'Oregon': 'OR', 'Pennsylvania': 'PA', 'Rhode Island': 'RI', 'South Carolina': 'SC',
    'South Dakota': 'SD', 'Tennessee': 'TN', 'Texas': 'TX', 'Utah': 'UT',
    'Vermont': 'VT', 'Virginia': 'VA', 'Washington': 'WA', 'West Virginia': 'WV',
    'Wisconsin': 'WI', 'Wyoming': 'WY', 'District of Columbia': 'DC',
}

CODE_TO_STATE = {code: name for name, code in STATE_CODES.items()}

REMOTE_KEYWORDS = [
    'remote', 'telehealth', 'telepsychiatry', 'virtual', 'work from home',
    'wfh', 'anywhere', 'nationwide', 'united states', 'usa remote',
]

HYBRID_KEYWORDS = ['hybrid', 'flexible', 'partial remote']

_CITY_STATE_CODE = re.compile(r'^([^,]+),\s*([A-Z]{2})$', re.IGNORECASE)
_CITY_STATE_NAME = re.compile(r'^([^,]+),\s*([A-Za-z\s]+)$')
_STATE_CODE_ONLY = re.compile(r'\b([A-Z]{2})\b')


@dataclass
class ParsedLocation:
    """Structured location extracted from a free-text string."""

    city: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None
    country: str = "US"
    is_remote: bool = False
    is_hybrid: bool = False
    original_location: str = ""
    confidence: float = 0.3

    def to_job_fields(self) -> Dict[str, Any]:
        """Columns to write back on a Job row."""
        data = asdict(self)
        data.pop("original_location")
        data.pop("confidence")
        return data


def parse_location(location: Optional[str]) -> ParsedLocation:
    """
    Parse a location string.

    Recognizes, in order: remote-only text, ``City, ST``, ``City, State``,
    a bare state code and a state name anywhere in the text.

    Args:
        location: Raw location as provided by the source

    Returns:
        ParsedLocation: Parsed fields with a 0-1 confidence
    """
    result = ParsedLocation(original_location=location or "")

    if not location or not isinstance(location, str):
        return result

    normalized = location.strip()
    if not normalized:
        return result

    result.original_location = normalized
    lower = normalized.lower()

    if any(keyword in lower for keyword in REMOTE_KEYWORDS):
        result.is_remote = True
        result.confidence = 0.7

    if any(keyword in lower for keyword in HYBRID_KEYWORDS):
        result.is_hybrid = True
        result.confidence = 0.7

    # Fully remote jobs carry no meaningful city/state
    if result.is_remote and not result.is_hybrid:
        return result

    match = _CITY_STATE_CODE.match(normalized)
    if match:
        code = match.group(2).upper()
        if code in CODE_TO_STATE:
            result.city = match.group(1).strip()
            result.state_code = code
            result.state = CODE_TO_STATE[code]
            result.confidence = 1.0
            return result

    match = _CITY_STATE_NAME.match(normalized)
    if match:
        potential_state = match.group(2).strip().lower()
        for state_name, code in STATE_CODES.items():
            if state_name.lower() == potential_state:
                result.city = match.group(1).strip()
                result.state = state_name
                result.state_code = code
                result.confidence = 1.0
                return result

    match = _STATE_CODE_ONLY.search(normalized)
    if match and match.group(1) in CODE_TO_STATE:
        code = match.group(1)
        result.state_code = code
        result.state = CODE_TO_STATE[code]
        result.confidence = 0.8

        before = re.sub(r',\s*$', '', normalized.split(code)[0].strip())
        if len(before) > 2:
            result.city = before
            result.confidence = 1.0
        return result

    for state_name, code in STATE_CODES.items():
        if state_name.lower() in lower:
            result.state = state_name
            result.state_code = code
            result.confidence = 0.8

            parts = re.split(re.escape(state_name), normalized, flags=re.IGNORECASE)
            if len(parts) > 1 and parts[0].strip():
                potential_city = re.sub(r',\s*$', '', parts[0].strip())
                if len(potential_city) > 2:
                    result.city = potential_city
                    result.confidence = 1.0
            return result

    if not result.is_hybrid:
        result.confidence = 0.3

    return result


async def parse_job_location(job_id: str, db: Optional[DatabaseManager] = None) -> ParsedLocation:
    """Parse and store the location of one job."""
    repository = JobRepository(db)
    job = await repository.get_by_id(job_id)
    if not job:
        raise JobNotFoundException(job_id)

    parsed = parse_location(job.location)
    await repository.update(job_id, parsed.to_job_fields())
    return parsed


async def parse_all_locations(db: Optional[DatabaseManager] = None, batch_size: int = 100) -> Dict[str, int]:
    """
    Parse locations of published jobs that have no state yet.

    Returns:
        Dict[str, int]: ``processed``, ``parsed`` and ``remote`` counts
    """
    repository = JobRepository(db)
    processed = 0
    parsed = 0
    remote = 0
    after_id = None

    while True:
        batch = await repository.get_unparsed_locations(limit=batch_size, after_id=after_id)
        if not batch:
            break

        for job in batch:
            processed += 1
            location = parse_location(job.location)
            if not await repository.update(job.id, location.to_job_fields()):
                continue
            if location.state or location.city:
                parsed += 1
            if location.is_remote:
                remote += 1

        after_id = batch[-1].id
        logger.info(f"Parsed locations for {processed} jobs so far")

    return {"processed": processed, "parsed": parsed, "remote": remote}
