"""
Request Security

Client identification and the shared-secret check guarding cron and admin
endpoints.
"""

import hmac
from typing import Optional

from fastapi import Request

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.exceptions import AuthenticationException
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CLIENT_IP = "127.0.0.1"


def get_client_ip(request: Request) -> str:
    """
    Get the client IP address from request headers.

    Proxies put the original client first in ``X-Forwarded-For``.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return DEFAULT_CLIENT_IP


def is_valid_cron_authorization(authorization: Optional[str], secret: Optional[str]) -> bool:
    """Constant-time comparison of an Authorization header with ``Bearer {secret}``."""
    if not secret or not authorization:
        return False
    return hmac.compare_digest(authorization.encode(), f"Bearer {secret}".encode())


class SecurityAuditLogger:
    """Logger for security events and audit trails."""

    def __init__(self):
        self.security_logger = get_logger("security_audit")

    def log_cron_access(self, path: str, ip_address: str, success: bool, reason: Optional[str] = None) -> None:
        if success:
            self.security_logger.info("Cron access granted", path=path, ip_address=ip_address)
        else:
            self.security_logger.warning("Cron access denied", path=path, ip_address=ip_address, reason=reason)


security_audit_logger = SecurityAuditLogger()


async def verify_cron_secret(request: Request) -> None:
    """
    Dependency guarding cron and admin endpoints.

    Raises:
        AuthenticationException: If the secret is unset or the header does not match
    """
    settings = get_settings()
    if settings.is_development():
        return

    client_ip = get_client_ip(request)

    if not settings.CRON_SECRET:
        security_audit_logger.log_cron_access(request.url.path, client_ip, False, reason="CRON_SECRET not configured")
        raise AuthenticationException("CRON_SECRET is not configured")

    if not is_valid_cron_authorization(request.headers.get("authorization"), settings.CRON_SECRET):
        security_audit_logger.log_cron_access(request.url.path, client_ip, False, reason="invalid secret")
        raise AuthenticationException("Invalid cron secret")

    security_audit_logger.log_cron_access(request.url.path, client_ip, True)
