"""
Job Normalizer

Maps raw aggregator payloads onto the common job shape: required field
checks, description cleaning, salary extraction and validation, job
type/mode detection, location parsing and expiry.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from dateutil import parser as date_parser

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.services.description_cleaner import clean_description, summarize
from pmhnp_hiring.services.location_parser import parse_location
from pmhnp_hiring.services.salary_normalizer import normalize_salary, format_display_salary
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()


_HOURLY_SALARY = re.compile(
    r'\$(\d{1,3}(?:\.\d{2})?)\s*(?:-|to)?\s*\$?(\d{1,3}(?:\.\d{2})?)?(?:\s*(?:per\s*)?(?:hour|hr|hourly))',
    re.IGNORECASE
)
_ANNUAL_SALARY = re.compile(
    r'\$(\d{1,3}(?:,?\d{3})*(?:k)?)\s*(?:-|to)?\s*\$?(\d{1,3}(?:,?\d{3})*(?:k)?)?'
    r'(?:\s*(?:per\s*)?(?:year|annual|yearly|pa|p\.a\.))?',
    re.IGNORECASE
)

_PERIOD_PATTERNS = [
    ('hourly', re.compile(r'per\s*hour|/\s*hr|hourly|an\s*hour', re.IGNORECASE)),
    ('weekly', re.compile(r'per\s*week|/\s*week|weekly', re.IGNORECASE)),
    ('monthly', re.compile(r'per\s*month|/\s*month|monthly', re.IGNORECASE)),
    ('annual', re.compile(r'per\s*year|/\s*yr|annual|yearly|per\s*annum', re.IGNORECASE)),
]

# Plausible bounds per period; values outside are treated as parse errors
SALARY_BOUNDS = {
    'hourly': (20, 300),
    'weekly': (400, 10000),
    'monthly': (2000, 40000),
    'annual': (30000, 500000),
}


@dataclass
class ValidatedSalary:
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    salary_period: Optional[str] = None


def _parse_amount(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    value = value.replace(',', '').lower()
    multiplier = 1000 if value.endswith('k') else 1
    try:
        return float(value.rstrip('k')) * multiplier
    except ValueError:
        return None


def extract_salary(text: str) -> Tuple[Optional[float], Optional[float], Optional[str]]:
    """
    Pull a salary out of free text.

    Hourly patterns are tried first since ``$75`` on its own is ambiguous.

    Returns:
        Tuple: (min, max, period) where period is 'hour', 'year' or None
    """
    match = _HOURLY_SALARY.search(text)
    if match:
        return _parse_amount(match.group(1)), _parse_amount(match.group(2)), 'hour'

    match = _ANNUAL_SALARY.search(text)
    if match:
        return _parse_amount(match.group(1)), _parse_amount(match.group(2)), 'year'

    return None, None, None


def _detect_period_from_text(text: str, value: float, hint: Optional[str] = None) -> str:
    for period, pattern in _PERIOD_PATTERNS:
        if pattern.search(text):
            return period

    if hint:
        hint = hint.lower()
        for period in ('hour', 'week', 'month'):
            if period in hint:
                return f"{period}ly"
        if 'year' in hint or 'annual' in hint:
            return 'annual'

    return 'hourly' if value < 500 else 'annual'


def validate_and_normalize_salary(
    min_salary: Optional[float],
    max_salary: Optional[float],
    text: str = '',
    period_hint: Optional[str] = None
) -> ValidatedSalary:
    """
    Drop implausible salary values and detect the pay period.

    Args:
        min_salary: Extracted or provided lower bound
        max_salary: Extracted or provided upper bound
        text: Title, description and location used for period keywords
        period_hint: Period reported by the source, if any

    Returns:
        ValidatedSalary: Rounded bounds; everything None when both are invalid
    """
    if not min_salary and not max_salary:
        return ValidatedSalary()

    period = _detect_period_from_text(text, min_salary or max_salary, period_hint)
    low, high = SALARY_BOUNDS[period]

    min_valid = bool(min_salary) and low <= min_salary <= high
    max_valid = bool(max_salary) and low <= max_salary <= high

    if not min_valid and not max_valid:
        logger.debug(f"Discarding salary {min_salary}-{max_salary} as {period}")
        return ValidatedSalary()

    valid_min = min_salary if min_valid else None
    valid_max = max_salary if max_valid else None

    if valid_min and valid_max and valid_min > valid_max:
        valid_min, valid_max = valid_max, valid_min

    return ValidatedSalary(
        min_salary=round(valid_min) if valid_min else None,
        max_salary=round(valid_max) if valid_max else None,
        salary_period=period,
    )


def detect_job_type(text: str) -> Optional[str]:
    lower = text.lower()

    if 'per diem' in lower or 'per-diem' in lower:
        return 'Per Diem'
    if any(word in lower for word in ('contract', 'contractor', 'locum', 'temporary', 'travel')):
        return 'Contract'
    if 'part-time' in lower or 'part time' in lower:
        return 'Part-Time'
    if any(word in lower for word in ('full-time', 'full time', 'permanent')):
        return 'Full-Time'

    return None


def detect_mode(text: str) -> Optional[str]:
    lower = text.lower()

    if 'hybrid' in lower:
        return 'Hybrid'
    if any(word in lower for word in ('remote', 'telehealth', 'telepsychiatry', 'work from home')):
        return 'Remote'
    if any(word in lower for word in ('on-site', 'onsite', 'in-person', 'in person')):
        return 'In-Person'

    return None


def parse_posted_date(value: Any) -> Optional[datetime]:
    """Parse a source date into a naive UTC datetime."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = date_parser.parse(str(value))
        except (ValueError, OverflowError):
            logger.debug(f"Unparseable posted date: {value}")
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def _display_name(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get('display_name')
    return value


def _map_source_fields(raw: Dict[str, Any], source: str) -> Dict[str, Any]:
    if source == 'adzuna':
        return {
            'title': raw.get('title'),
            'employer': _display_name(raw.get('company')) or raw.get('employer') or 'Unknown Company',
            'location': _display_name(raw.get('location')) or 'Unknown Location',
            'description': raw.get('description'),
            'apply_link': _first(raw, 'applyLink', 'redirect_url'),
            'external_id': _first(raw, 'externalId', 'id'),
            'min_salary': _as_number(raw.get('minSalary')),
            'max_salary': _as_number(raw.get('maxSalary')),
        }

    if source == 'jsearch':
        return {
            'title': raw.get('title'),
            'employer': raw.get('employer') or 'Company Not Listed',
            'location': raw.get('location') or 'United States',
            'description': raw.get('description'),
            'apply_link': raw.get('applyLink'),
            'external_id': raw.get('externalId'),
            'min_salary': _as_number(raw.get('minSalary')),
            'max_salary': _as_number(raw.get('maxSalary')),
        }

    return {
        'title': raw.get('title'),
        'employer': _first(raw, 'company', 'employer') or 'Unknown Company',
        'location': raw.get('location') or 'Unknown Location',
        'description': raw.get('description'),
        'apply_link': _first(raw, 'applyLink', 'url', 'redirect_url', 'apply_link'),
        'external_id': _first(raw, 'externalId', 'id', 'external_id'),
        'min_salary': _as_number(raw.get('minSalary')),
        'max_salary': _as_number(raw.get('maxSalary')),
    }


def _format_range(min_salary: Optional[int], max_salary: Optional[int]) -> Optional[str]:
    if min_salary and max_salary:
        return f"${min_salary:,} - ${max_salary:,}"
    return None


def normalize_job(raw: Dict[str, Any], source: str) -> Optional[Dict[str, Any]]:
    """
    Normalize one raw job from a source.

    Args:
        raw: Payload produced by the source's aggregator
        source: Source name, e.g. ``adzuna``

    Returns:
        Optional[Dict[str, Any]]: Job columns ready for insert, or None when
        the title or apply link is missing
    """
    try:
        fields = _map_source_fields(raw, source)
        title = str(fields['title'] or '').strip()
        apply_link = str(fields['apply_link'] or '').strip()

        if not title or not apply_link:
            logger.warning("Missing required fields for job", source=source, title=title, apply_link=apply_link)
            return None

        employer = str(fields['employer'])
        location = str(fields['location'])
        external_id = str(fields['external_id']) if fields['external_id'] else None

        description = clean_description(str(fields['description'] or ''))
        full_text = f"{title} {description} {location}"

        min_salary = fields['min_salary']
        max_salary = fields['max_salary']
        period_hint = raw.get('salaryPeriod')
        if not min_salary and not max_salary:
            min_salary, max_salary, period_hint = extract_salary(full_text)

        validated = validate_and_normalize_salary(min_salary, max_salary, full_text, period_hint)
        salary_range = _format_range(validated.min_salary, validated.max_salary)

        normalized = normalize_salary(
            min_salary=validated.min_salary,
            max_salary=validated.max_salary,
            salary_period=validated.salary_period,
            salary_range=salary_range,
        )
        parsed_location = parse_location(location)

        job_type = str(raw['jobType']) if raw.get('jobType') else detect_job_type(full_text)

        job: Dict[str, Any] = {
            'title': title,
            'employer': employer,
            'location': location,
            'job_type': job_type,
            'mode': 'Remote' if raw.get('remote') else detect_mode(full_text),
            'description': description,
            'description_summary': summarize(description),
            'salary_range': salary_range,
            'min_salary': validated.min_salary,
            'max_salary': validated.max_salary,
            'salary_period': validated.salary_period,
            'normalized_min_salary': normalized.normalized_min,
            'normalized_max_salary': normalized.normalized_max,
            'salary_is_estimated': normalized.is_estimated,
            'salary_confidence': normalized.confidence,
            'display_salary': format_display_salary(
                normalized.normalized_min,
                normalized.normalized_max,
                validated.salary_period
            ),
            'apply_link': apply_link,
            'is_featured': False,
            'is_published': True,
            'is_verified_employer': False,
            'source_type': 'external',
            'source_provider': source,
            'external_id': external_id,
            'expires_at': datetime.utcnow() + timedelta(days=settings.JOB_EXPIRY_DAYS),
            'original_posted_at': parse_posted_date(raw.get('postedDate')),
        }
        job.update(parsed_location.to_job_fields())
        return job

    except Exception as e:
        logger.error(f"Error normalizing job from {source}: {e}")
        return None
