"""
Description Cleaner

Turns source HTML/plain-text descriptions into clean plain text, and
re-cleans stored jobs that still carry markup after ingestion.
"""

import html
import re
from typing import Dict, Optional

from bs4 import BeautifulSoup

from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

SUMMARY_LENGTH = 300

_MOJIBAKE = [
    ('\ufffd', ''),
    ('â€™', "'"),
    ('â€“', '–'),
    ('â€œ', '"'),
    ('â€', '"'),
    ('Â', ''),
]

_PARAGRAPH_TAGS = ['p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6']
_HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']
_LINE_TAGS = ['div', 'li']

_ADZUNA_PREVIEW = re.compile(r'^Preview: This is a summary from adzuna[\s\S]*?application details\.?', re.IGNORECASE)
_LEADING_ABOUT = re.compile(
    r'^\s*(?:>|•|-)?\s*(?:Who We Are|About Us|About the Company|Company Overview)[:\s]*',
    re.IGNORECASE
)
_LEADING_SECTION_HEADER = re.compile(r'^(Job Description|Position Summary|Role Overview)[:\s]*', re.IGNORECASE)
_LINE_SECTION_HEADER = re.compile(r'\n(Job Description|Position Summary|Role Overview)[:\s]*', re.IGNORECASE)


def _html_to_text(markup: str) -> str:
    """Parse markup and keep its text, with block elements on their own lines."""
    soup = BeautifulSoup(markup, "html.parser")

    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    for br in soup.find_all("br"):
        br.replace_with("\n")

    for heading in soup.find_all(_HEADING_TAGS):
        heading.insert_before("\n\n")

    for tag in soup.find_all(_PARAGRAPH_TAGS):
        tag.append("\n\n")

    for item in soup.find_all("li"):
        item.insert(0, "• ")

    for tag in soup.find_all(_LINE_TAGS):
        tag.append("\n")

    return soup.get_text()


def clean_description(raw_description: Optional[str]) -> str:
    """
    Clean a job description.

    Steps run in a fixed order: mojibake repair, entity decoding, literal
    escape sequences, HTML parsing to text, boilerplate removal and
    whitespace normalization. A bare ``<`` or ``>`` that does not open a
    tag is kept as text.

    Args:
        raw_description: Description as delivered by the source

    Returns:
        str: Plain-text description
    """
    if not raw_description:
        return ''

    cleaned = raw_description

    for artifact, replacement in _MOJIBAKE:
        cleaned = cleaned.replace(artifact, replacement)

    # Greenhouse delivers its markup entity-escaped
    cleaned = html.unescape(cleaned).replace('\xa0', ' ')

    # Literal backslash sequences left behind by double-encoded JSON
    cleaned = cleaned.replace('\\r\\n', '\n').replace('\\n', '\n').replace('\\r', '\n')

    if has_html(cleaned):
        cleaned = _html_to_text(cleaned)

    cleaned = _ADZUNA_PREVIEW.sub('', cleaned)
    cleaned = _LEADING_ABOUT.sub('', cleaned, count=1)
    cleaned = _LEADING_SECTION_HEADER.sub('', cleaned, count=1)
    cleaned = _LINE_SECTION_HEADER.sub('\n', cleaned)

    cleaned = re.sub(r'[ \t]+', ' ', cleaned)
    cleaned = re.sub(r'\n[ \t]+', '\n', cleaned)
    cleaned = re.sub(r'[ \t]+\n', '\n', cleaned)
    cleaned = re.sub(r'\n{3,}', '\n\n', cleaned)

    return cleaned.strip()


def summarize(description: str, length: int = SUMMARY_LENGTH) -> str:
    """First ``length`` characters, with ``...`` when truncated."""
    if len(description) > length:
        return description[:length] + '...'
    return description


def has_html(text: Optional[str]) -> bool:
    """True when the text holds at least one element, not just angle brackets."""
    if not text or '<' not in text:
        return False
    return BeautifulSoup(text, "html.parser").find() is not None


async def clean_all_job_descriptions(db: Optional[DatabaseManager] = None) -> Dict[str, int]:
    """
    Re-clean stored jobs whose description or summary still contains tags.

    Returns:
        Dict[str, int]: ``total``, ``cleaned``, ``skipped`` and ``errors`` counts
    """
    repository = JobRepository(db)
    jobs = await repository.get_with_html()

    cleaned = 0
    skipped = 0
    errors = 0

    for job in jobs:
        if not has_html(job.description) and not has_html(job.description_summary):
            skipped += 1
            continue

        description = clean_description(job.description or '')
        updated = await repository.update(job.id, {
            "description": description,
            "description_summary": summarize(description),
        })
        if updated:
            cleaned += 1
        else:
            errors += 1

    if cleaned:
        logger.info(f"Cleaned {cleaned} job descriptions, {skipped} already clean, {errors} errors")
    else:
        logger.info(f"All {skipped} job descriptions already clean")

    return {
        "total": len(jobs),
        "cleaned": cleaned,
        "skipped": skipped,
        "errors": errors,
    }
