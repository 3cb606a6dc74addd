"""
Test cases for the application exception hierarchy.
"""

import pytest

from pmhnp_hiring.core.exceptions import (
    AggregatorAuthError,
    AggregatorException,
    AggregatorRateLimitError,
    AuthenticationException,
    BaseApplicationException,
    CompanyMergeException,
    CompanyNotFoundException,
    JobNotFoundException,
    RateLimitException,
    UnknownSourceException,
    ValidationException,
)


@pytest.mark.unit
class TestApplicationExceptions:
    """Test status codes and serialized payloads."""

    def test_base_exception_defaults(self):
        error = BaseApplicationException("boom")

        assert error.http_status == 500
        assert error.error_code == "BASEAPPLICATIONEXCEPTION"
        assert error.to_dict()["message"] == "boom"
        assert error.to_dict()["category"] == "system"

    def test_validation_exception(self):
        error = ValidationException("bad input", field_errors={"limit": "too large"})

        assert error.http_status == 400
        assert error.error_code == "VALIDATION_ERROR"
        assert error.details == {"field_errors": {"limit": "too large"}}

    def test_unknown_source(self):
        error = UnknownSourceException("monster")

        assert isinstance(error, ValidationException)
        assert error.error_code == "UNKNOWN_SOURCE"
        assert error.user_message == "Unknown source 'monster'"
        assert error.details["field_errors"] == {"source": "Invalid value: monster"}

    def test_authentication(self):
        error = AuthenticationException()

        assert error.http_status == 401
        assert error.to_dict()["error_code"] == "AUTH_REQUIRED"

    @pytest.mark.parametrize("error, resource_type", [
        (JobNotFoundException("j1"), "job"),
        (CompanyNotFoundException("c1"), "company"),
    ])
    def test_not_found(self, error, resource_type):
        assert error.http_status == 404
        assert error.error_code == "RESOURCE_NOT_FOUND"
        assert error.details["resource_type"] == resource_type
        assert error.user_message == f"{resource_type.capitalize()} not found"

    def test_company_merge(self):
        error = CompanyMergeException("Cannot merge a company into itself")

        assert error.http_status == 400
        assert error.error_code == "COMPANY_MERGE_ERROR"
        assert error.user_message == "Cannot merge a company into itself"

    def test_aggregator_errors(self):
        error = AggregatorException("lever", "HTTP 500")
        assert error.http_status == 502
        assert error.source == "lever"
        assert error.details == {"service_name": "lever"}
        assert str(error) == "lever: HTTP 500"

        limited = AggregatorRateLimitError("adzuna", retry_after=30)
        assert limited.error_code == "AGGREGATOR_RATE_LIMITED"
        assert limited.retry_after == 30

        assert AggregatorAuthError("usajobs").error_code == "AGGREGATOR_AUTH_FAILED"

    def test_rate_limit(self):
        error = RateLimitException(limit_type="jobs.list", retry_after=12, limit=60, reset_at=1700000000)

        payload = error.to_dict()
        assert error.http_status == 429
        assert payload["retry_after"] == 12
        assert payload["details"] == {"limit_type": "jobs.list", "limit": 60, "reset_at": 1700000000}
        assert payload["suggested_action"] == "Wait 12 seconds before retrying"
