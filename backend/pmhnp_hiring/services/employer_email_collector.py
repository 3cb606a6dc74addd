"""
Employer E-mail Collector

Copies the contact e-mails of employer postings into the e-mail leads
table after each ingestion run. Running it again creates no duplicates.
"""

from typing import Dict, Optional

from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.repositories.employer_repository import EmployerJobRepository, EmailLeadRepository
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

LEAD_SOURCE = "employer_posting"


async def collect_employer_emails(db: Optional[DatabaseManager] = None) -> Dict[str, int]:
    """
    Upsert employer contact e-mails into ``email_leads``.

    New addresses become subscribed leads. Known leads that had
    unsubscribed are subscribed again.

    Returns:
        Dict[str, int]: ``created``, ``updated`` and ``total`` counts
    """
    employer_jobs = EmployerJobRepository(db)
    leads = EmailLeadRepository(db)

    emails = await employer_jobs.get_contact_emails()
    created = 0
    updated = 0

    for email in emails:
        existing = await leads.get_by_email(email)
        if existing is None:
            if await leads.get_or_create(email, LEAD_SOURCE):
                created += 1
            continue

        if not existing.is_subscribed:
            if await leads.update(existing.id, {"is_subscribed": True}):
                updated += 1

    logger.info(f"Employer e-mails collected: {created} created, {updated} updated, {len(emails)} total")
    return {"created": created, "updated": updated, "total": len(emails)}
