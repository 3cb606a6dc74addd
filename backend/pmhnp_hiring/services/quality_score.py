"""
Quality Score

Computes a 0-100 listing quality score at ingestion time so jobs can be
sorted without recomputation.
"""

from typing import Any, Mapping
from urllib.parse import urlparse

# Direct ATS platforms: one click to the employer's form
DIRECT_ATS_DOMAINS = [
    'boards.greenhouse.io', 'jobs.lever.co', 'jobs.ashbyhq.com',
    'myworkdayjobs.com', 'myworkdaysite.com', 'careers.icims.com',
    'bamboohr.com', 'breezy.hr', 'workable.com', 'recruitee.com',
    'jazz.co', 'jobvite.com', 'smartrecruiters.com', 'paylocity.com',
    'paycomonline.net', 'ultipro.com', 'clearcompany.com',
    'applytojob.com', 'pinpointhq.com', 'usajobs.gov',
    'governmentjobs.com', 'healthcaresource.com', 'dayforce.com',
]

# Job boards and aggregators: extra redirects before the real form
JOB_BOARD_DOMAINS = [
    'indeed.com', 'ziprecruiter.com', 'linkedin.com', 'glassdoor.com',
    'monster.com', 'simplyhired.com', 'snagajob.com', 'talent.com',
    'lensa.com', 'ladders.com', 'bebee.com', 'learn4good.com',
    'doccafe.com', 'practicematch.com', 'docjobs.com', 'doximity.com',
    'jobrapido.com', 'whatjobs.com', 'teal.com', 'career.io',
    'gothamenterprises.com', 'jooble.org', 'adzuna.com',
    'localjobs.com', 'enpnetwork.com', 'jobtarget.com', 'getwork.com',
    'tealhq.com', 'jobilize.com', 'rapidapi.com', 'careerjet.com',
]


def _hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or '').lower()
    except ValueError:
        return ''


def is_direct_ats_link(url: str) -> bool:
    hostname = _hostname(url)
    return bool(hostname) and any(domain in hostname for domain in DIRECT_ATS_DOMAINS)


def is_job_board_link(url: str) -> bool:
    hostname = _hostname(url)
    return bool(hostname) and any(domain in hostname for domain in JOB_BOARD_DOMAINS)


def compute_quality_score(job: Mapping[str, Any], is_employer_posted: bool = False) -> int:
    """
    Score a normalized job.

    Points: link quality up to 30, salary 20, description up to 10,
    location up to 10 and employer-posted 30. Capped at 100.

    Args:
        job: Normalized job fields (snake_case keys)
        is_employer_posted: Whether the job came through the employer form

    Returns:
        int: Score between 0 and 100
    """
    score = 0
    apply_link = job.get('apply_link') or ''

    if is_direct_ats_link(apply_link):
        score += 30
    elif not is_job_board_link(apply_link):
        score += 20

    if job.get('display_salary') or job.get('normalized_min_salary') or job.get('normalized_max_salary'):
        score += 20

    summary = job.get('description_summary') or ''
    description = job.get('description') or ''
    if len(summary) > 20:
        score += 10
    elif len(description) > 200:
        score += 5

    if job.get('city') and job.get('state'):
        score += 10
    elif job.get('state'):
        score += 5

    if is_employer_posted or job.get('source_type') == 'employer':
        score += 30

    return min(score, 100)
