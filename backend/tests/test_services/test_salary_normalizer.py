"""
Tests for salary annualization and display formatting.
"""

import pytest

from pmhnp_hiring.services.salary_normalizer import (
    detect_salary_period,
    format_display_salary,
    format_normalized_salary,
    is_salary_in_typical_range,
    normalize_salary,
)


@pytest.mark.unit
class TestDetectSalaryPeriod:
    """Period detection order: explicit, text, magnitude."""

    def test_explicit_period_wins(self):
        assert detect_salary_period(150000, None, explicit_period="Hourly") == "hourly"

    def test_text_keywords(self):
        assert detect_salary_period(3000, None, salary_range="$3,000 per week") == "weekly"
        assert detect_salary_period(150, None, salary_range="$150 per day") == "daily"

    def test_magnitude_fallback(self):
        assert detect_salary_period(75, 90) == "hourly"
        assert detect_salary_period(2500, None) == "weekly"
        assert detect_salary_period(12000, None) == "monthly"
        assert detect_salary_period(140000, None) == "annual"


@pytest.mark.unit
class TestNormalizeSalary:
    """Annual conversion, validation and confidence."""

    def test_hourly_range(self):
        result = normalize_salary(60, 80, "hourly")

        assert result.normalized_min == 124800
        assert result.normalized_max == 166400
        assert result.confidence == pytest.approx(0.9)
        assert result.period == "hourly"

    def test_annual_range_full_confidence(self):
        result = normalize_salary(150000, 180000, "annual")

        assert result.normalized_min == 150000
        assert result.normalized_max == 180000
        assert result.confidence == 1.0
        assert result.is_estimated is False

    def test_weekly_salary_lowers_confidence(self):
        result = normalize_salary(3000, None, "weekly")

        assert result.normalized_min == 156000
        assert result.confidence == pytest.approx(0.85)

    def test_implausible_hourly_rate_rejected(self):
        result = normalize_salary(30, None, "hourly")

        assert result.normalized_min is None
        assert result.confidence is None

    def test_low_annual_salary_rejected(self):
        assert normalize_salary(50000, None, "annual").normalized_min is None

    def test_estimated_salary(self):
        result = normalize_salary(130000, None, "annual", salary_range="Estimated $130K a year")

        assert result.is_estimated is True
        assert result.normalized_min == 130000
        assert result.confidence == pytest.approx(0.6)

    def test_swapped_bounds_are_reordered(self):
        result = normalize_salary(180000, 150000, "annual")

        assert (result.normalized_min, result.normalized_max) == (150000, 180000)

    def test_wide_range_lowers_confidence(self):
        result = normalize_salary(100000, 260000, "annual")

        assert result.confidence == pytest.approx(0.7)

    def test_no_salary(self):
        result = normalize_salary(None, None)

        assert result.normalized_min is None
        assert result.normalized_max is None
        assert result.period is None


@pytest.mark.unit
class TestSalaryFormatting:

    def test_display_salary_annual(self):
        assert format_display_salary(150000, 180000) == "$150k-$180k/yr"
        assert format_display_salary(150000, None) == "$150k/yr"

    def test_display_salary_hourly(self):
        assert format_display_salary(124800, 166400, "hourly") == "$60-$80/hr"
        assert format_display_salary(124800, None, "hour") == "$60/hr"

    def test_display_salary_missing(self):
        assert format_display_salary(None, None) is None

    def test_normalized_salary_text(self):
        assert format_normalized_salary(120000, 150000) == "$120,000 - $150,000"
        assert format_normalized_salary(120000, None, is_estimated=True) == "From $120,000 (estimated)"
        assert format_normalized_salary(None, 150000) == "Up to $150,000"
        assert format_normalized_salary(None, None) == "Not specified"

    def test_typical_range(self):
        assert is_salary_in_typical_range(130000) is True
        assert is_salary_in_typical_range(90000) is False
        assert is_salary_in_typical_range(None) is False
