"""
Expiry Checker

Warns employers whose paid listings expire within the next few days.
"""

from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.models.employer import EmployerJob
from pmhnp_hiring.models.job import Job
from pmhnp_hiring.repositories.employer_repository import EmployerJobRepository, EmailLeadRepository
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

WARNING_WINDOW_DAYS = 5

# (employer_job, job, dashboard_url, unsubscribe_url) -> sent
ExpiryNotifier = Callable[[EmployerJob, Job, str, str], Awaitable[bool]]


async def log_expiry_warning(employer_job: EmployerJob, job: Job, dashboard_url: str, unsubscribe_url: str) -> bool:
    """Default notifier: records the warning in the structured log."""
    logger.info(
        "Expiry warning",
        job_id=job.id,
        title=job.title,
        contact_email=employer_job.contact_email,
        expires_at=job.expires_at.isoformat() if job.expires_at else None,
        views=job.view_count,
        apply_clicks=job.apply_click_count,
        dashboard_url=dashboard_url,
        unsubscribe_url=unsubscribe_url
    )
    return True


class ExpiryChecker:
    """Finds expiring employer jobs and sends one warning per listing."""

    def __init__(self, db: Optional[DatabaseManager] = None, notifier: Optional[ExpiryNotifier] = None):
        self.employer_jobs = EmployerJobRepository(db)
        self.leads = EmailLeadRepository(db)
        self.notifier = notifier or log_expiry_warning
        self.settings = get_settings()

    async def check_expiring_jobs(self) -> Dict[str, Any]:
        """
        Send warnings for published employer jobs expiring within five days.

        Returns:
            Dict[str, Any]: ``checked``, ``warnings_sent`` and ``errors`` (messages)
        """
        now = datetime.utcnow()
        expiring = await self.employer_jobs.get_expiring(now, now + timedelta(days=WARNING_WINDOW_DAYS))

        result: Dict[str, Any] = {"checked": len(expiring), "warnings_sent": 0, "errors": []}

        for employer_job, job in expiring:
            try:
                lead = await self.leads.get_or_create(employer_job.contact_email, source="employer")
                if lead is None:
                    result["errors"].append(f"Could not create e-mail lead for job {job.id}")
                    continue

                dashboard_url = f"{self.settings.SITE_URL}/employer/dashboard/{employer_job.dashboard_token}"
                unsubscribe_url = f"{self.settings.SITE_URL}/unsubscribe?token={lead.unsubscribe_token}"

                if await self.notifier(employer_job, job, dashboard_url, unsubscribe_url):
                    await self.employer_jobs.mark_warning_sent(employer_job.id, datetime.utcnow())
                    result["warnings_sent"] += 1
                else:
                    result["errors"].append(f"Failed to send warning for job {job.id}")

            except Exception as e:
                logger.error(f"Error processing expiry warning for job {job.id}: {e}")
                result["errors"].append(f"Error processing job {job.id}: {e}")

        logger.info(
            "Expiry check finished",
            checked=result["checked"],
            warnings_sent=result["warnings_sent"],
            errors=len(result["errors"])
        )
        return result
