"""
Custom Exceptions for PMHNP Hiring

Business logic exceptions with user-facing messages and proper error codes.
Each exception knows the HTTP status it maps to so API handlers can render
it directly.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum

from fastapi import status


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    BUSINESS_LOGIC = "business_logic"
    EXTERNAL_SERVICE = "external_service"
    SYSTEM = "system"
    RATE_LIMIT = "rate_limit"


class BaseApplicationException(Exception):
    """
    Base exception for all application-specific errors.

    Provides structured error information for consistent error handling
    and API error responses.
    """

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        error_code: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        suggested_action: Optional[str] = None,
        retry_after: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.details = details or {}
        self.suggested_action = suggested_action
        self.retry_after = retry_after
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_code": self.error_code,
            "message": self.user_message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "suggested_action": self.suggested_action,
            "retry_after": self.retry_after
        }


# Validation Exceptions
class ValidationException(BaseApplicationException):
    """Exception for input validation errors."""

    def __init__(
        self,
        message: str,
        field_errors: Optional[Dict[str, str]] = None,
        **kwargs
    ):
        kwargs.setdefault("user_message", "Please check your input")
        kwargs.setdefault("error_code", "VALIDATION_ERROR")
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_400_BAD_REQUEST,
            **kwargs
        )
        self.field_errors = field_errors or {}
        self.details.update({"field_errors": self.field_errors})


class UnknownSourceException(ValidationException):
    """Raised when an ingestion run names a job source that does not exist."""

    def __init__(self, source: str, **kwargs):
        super().__init__(
            message=f"Unknown job source: {source}",
            user_message=f"Unknown source '{source}'",
            error_code="UNKNOWN_SOURCE",
            field_errors={"source": f"Invalid value: {source}"},
            **kwargs
        )


# Authentication Exceptions
class AuthenticationException(BaseApplicationException):
    """Exception for authentication errors."""

    def __init__(self, message: str = "Unauthorized", **kwargs):
        kwargs.setdefault("user_message", "Unauthorized")
        kwargs.setdefault("error_code", "AUTH_REQUIRED")
        super().__init__(
            message=message,
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.MEDIUM,
            http_status=status.HTTP_401_UNAUTHORIZED,
            **kwargs
        )


# Resource Exceptions
class ResourceNotFoundException(BaseApplicationException):
    """Exception for resource not found errors."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None, **kwargs):
        kwargs.setdefault("user_message", f"{resource_type.capitalize()} not found")
        super().__init__(
            message=f"{resource_type} not found",
            error_code="RESOURCE_NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
            **kwargs
        )


class JobNotFoundException(ResourceNotFoundException):
    """Exception for job not found errors."""

    def __init__(self, job_id: str, **kwargs):
        super().__init__(resource_type="job", resource_id=job_id, **kwargs)


class CompanyNotFoundException(ResourceNotFoundException):
    """Exception for company not found errors."""

    def __init__(self, company_id: str, **kwargs):
        super().__init__(resource_type="company", resource_id=company_id, **kwargs)


# Business Logic Exceptions
class BusinessLogicException(BaseApplicationException):
    """Exception for business logic violations."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("user_message", message)
        kwargs.setdefault("error_code", "BUSINESS_LOGIC_ERROR")
        super().__init__(
            message=message,
            category=ErrorCategory.BUSINESS_LOGIC,
            severity=ErrorSeverity.MEDIUM,
            http_status=kwargs.pop("http_status", status.HTTP_400_BAD_REQUEST),
            **kwargs
        )


class CompanyMergeException(BusinessLogicException):
    """Raised when two companies cannot be merged."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, error_code="COMPANY_MERGE_ERROR", **kwargs)


# External Service Exceptions
class ExternalServiceException(BaseApplicationException):
    """Exception for external service errors."""

    def __init__(
        self,
        service_name: str,
        message: str = "External service error",
        **kwargs
    ):
        kwargs.setdefault("user_message", "An upstream service is temporarily unavailable")
        kwargs.setdefault("error_code", "EXTERNAL_SERVICE_ERROR")
        details = {"service_name": service_name}
        details.update(kwargs.pop("details", None) or {})
        super().__init__(
            message=f"{service_name}: {message}",
            category=ErrorCategory.EXTERNAL_SERVICE,
            severity=ErrorSeverity.HIGH,
            http_status=status.HTTP_502_BAD_GATEWAY,
            details=details,
            **kwargs
        )
        self.service_name = service_name


class AggregatorException(ExternalServiceException):
    """Raised when a job source fails to return usable data."""

    def __init__(self, source: str, message: str = "Job source request failed", **kwargs):
        kwargs.setdefault("error_code", "AGGREGATOR_ERROR")
        super().__init__(service_name=source, message=message, **kwargs)
        self.source = source


class AggregatorRateLimitError(AggregatorException):
    """Raised when a job source answers HTTP 429."""

    def __init__(self, source: str, **kwargs):
        super().__init__(
            source=source,
            message="Rate limited by job source",
            error_code="AGGREGATOR_RATE_LIMITED",
            retry_after=kwargs.pop("retry_after", 60),
            **kwargs
        )


class AggregatorAuthError(AggregatorException):
    """Raised when a job source rejects our credentials."""

    def __init__(self, source: str, **kwargs):
        super().__init__(
            source=source,
            message="Authentication failed for job source",
            error_code="AGGREGATOR_AUTH_FAILED",
            **kwargs
        )


# Rate Limiting Exceptions
class RateLimitException(BaseApplicationException):
    """Exception for rate limiting errors."""

    def __init__(
        self,
        limit_type: str = "requests",
        retry_after: int = 60,
        limit: Optional[int] = None,
        reset_at: Optional[int] = None,
        **kwargs
    ):
        super().__init__(
            message=f"Rate limit exceeded: {limit_type}",
            user_message="Too many requests. Please try again later.",
            error_code="RATE_LIMIT_EXCEEDED",
            category=ErrorCategory.RATE_LIMIT,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"limit_type": limit_type, "limit": limit, "reset_at": reset_at},
            suggested_action=f"Wait {retry_after} seconds before retrying",
            retry_after=retry_after,
            **kwargs
        )
        self.limit = limit
        self.reset_at = reset_at
