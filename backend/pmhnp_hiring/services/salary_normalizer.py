"""
Salary Normalizer

Converts hourly, daily, weekly and monthly pay into annual equivalents and
rejects values that are implausible for PMHNP roles.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)


# Order matters: explicit periods are matched by substring in this order
PERIOD_MULTIPLIERS = {
    "annual": 1,
    "yearly": 1,
    "year": 1,
    "monthly": 12,
    "month": 12,
    "weekly": 52,
    "week": 52,
    "daily": 260,
    "day": 260,
    "hourly": 2080,
    "hour": 2080,
}

HOURS_PER_YEAR = 2080

ANNUAL_MIN = 80000
CONTRACTOR_HOURLY_MIN = 50
CONTRACTOR_HOURLY_MAX = 350
TYPICAL_RANGE = (100000, 160000)


@dataclass
class NormalizedSalary:
    """Annualized salary bounds with a confidence score."""

    normalized_min: Optional[int] = None
    normalized_max: Optional[int] = None
    is_estimated: bool = False
    confidence: Optional[float] = None
    period: Optional[str] = None


def detect_salary_period(
    min_salary: Optional[float],
    max_salary: Optional[float],
    explicit_period: Optional[str] = None,
    salary_range: Optional[str] = None
) -> str:
    """
    Detect the pay period of a salary.

    Checks the explicit period first, then keywords in the salary text,
    then falls back to the magnitude of the value.
    """
    if explicit_period:
        normalized = explicit_period.lower().strip()
        for period in PERIOD_MULTIPLIERS:
            if period in normalized:
                return period

    if salary_range:
        lower = salary_range.lower()
        if "/hour" in lower or "per hour" in lower or "hourly" in lower:
            return "hourly"
        if "/week" in lower or "per week" in lower or "weekly" in lower:
            return "weekly"
        if "/month" in lower or "per month" in lower or "monthly" in lower:
            return "monthly"
        if "/year" in lower or "per year" in lower or "annual" in lower:
            return "annual"
        if "/day" in lower or "per day" in lower or "daily" in lower:
            return "daily"

    salary = min_salary or max_salary
    if salary:
        if salary < 500:
            return "hourly"
        if salary < 5000:
            return "weekly"
        if salary < 20000:
            return "monthly"

    return "annual"


def _is_hourly(period: str) -> bool:
    return period in ("hourly", "hour")


def is_reasonable_salary(annual: float, period: str, original: float, confidence: float = 1.0) -> bool:
    """
    Check a salary against PMHNP bounds.

    Hourly pay is validated on the raw rate; everything else on the
    annual equivalent, with a wider window for low-confidence values.
    """
    if _is_hourly(period):
        valid = CONTRACTOR_HOURLY_MIN <= original <= CONTRACTOR_HOURLY_MAX
        if not valid:
            logger.debug(f"Rejected hourly rate ${original}/hr")
        return valid

    if confidence < 0.5:
        min_threshold, max_threshold = ANNUAL_MIN * 0.6, 400000
    else:
        min_threshold, max_threshold = ANNUAL_MIN * 0.8, 300000

    valid = min_threshold <= annual <= max_threshold
    if not valid:
        logger.debug(f"Rejected annual salary ${annual:,.0f} (confidence {confidence})")
    return valid


def _normalize_single(salary: float, period: str, is_estimated: bool) -> Optional[Tuple[int, float]]:
    annual = round(salary * PERIOD_MULTIPLIERS.get(period, 1))
    confidence = 0.6 if is_estimated else 1.0

    if not is_reasonable_salary(annual, period, salary, confidence):
        return None

    if _is_hourly(period):
        confidence *= 0.9
    elif period in ("daily", "day", "weekly", "week"):
        confidence *= 0.85

    return annual, confidence


def normalize_salary(
    min_salary: Optional[float] = None,
    max_salary: Optional[float] = None,
    salary_period: Optional[str] = None,
    salary_range: Optional[str] = None
) -> NormalizedSalary:
    """
    Normalize a job's salary to annual USD.

    Args:
        min_salary: Lower bound as given by the source
        max_salary: Upper bound as given by the source
        salary_period: Explicit pay period, if known
        salary_range: Free-text salary, used for period and estimate detection

    Returns:
        NormalizedSalary: Annualized bounds; bounds failing validation are None
    """
    range_lower = (salary_range or "").lower()
    is_estimated = "estimated" in range_lower or "predicted" in range_lower
    result = NormalizedSalary(is_estimated=is_estimated)

    if not min_salary and not max_salary:
        return result

    period = detect_salary_period(min_salary, max_salary, salary_period, salary_range)
    result.period = period

    if min_salary:
        normalized = _normalize_single(min_salary, period, is_estimated)
        if normalized:
            result.normalized_min, result.confidence = normalized

    if max_salary:
        normalized = _normalize_single(max_salary, period, is_estimated)
        if normalized:
            result.normalized_max = normalized[0]
            if result.confidence is not None:
                result.confidence = min(result.confidence, normalized[1])
            else:
                result.confidence = normalized[1]

    if result.normalized_min and result.normalized_max:
        if result.normalized_min > result.normalized_max:
            result.normalized_min, result.normalized_max = result.normalized_max, result.normalized_min

        # A very wide range usually means bad source data
        if result.normalized_max / result.normalized_min > 2.5 and result.confidence:
            result.confidence *= 0.7

    return result


def format_normalized_salary(
    min_salary: Optional[int],
    max_salary: Optional[int],
    is_estimated: bool = False
) -> str:
    """Format annual bounds as e.g. ``$120,000 - $150,000 (estimated)``."""
    if not min_salary and not max_salary:
        return "Not specified"

    suffix = " (estimated)" if is_estimated else ""

    if min_salary and max_salary:
        return f"${min_salary:,.0f} - ${max_salary:,.0f}{suffix}"
    if min_salary:
        return f"From ${min_salary:,.0f}{suffix}"
    return f"Up to ${max_salary:,.0f}{suffix}"


def _format_k(value: int) -> str:
    if value >= 1000:
        return f"{round(value / 1000)}k"
    return str(value)


def format_display_salary(
    normalized_min: Optional[int],
    normalized_max: Optional[int],
    period: Optional[str] = None
) -> Optional[str]:
    """
    Compact salary label for job cards, e.g. ``$150k-$180k/yr`` or ``$75-$90/hr``.
    """
    if not normalized_min and not normalized_max:
        return None

    if period and _is_hourly(period):
        min_hr = round(normalized_min / HOURS_PER_YEAR) if normalized_min else None
        max_hr = round(normalized_max / HOURS_PER_YEAR) if normalized_max else None
        if min_hr and max_hr and min_hr != max_hr:
            return f"${min_hr}-${max_hr}/hr"
        rate = min_hr or max_hr
        return f"${rate}/hr" if rate else None

    if normalized_min and normalized_max and normalized_min != normalized_max:
        return f"${_format_k(normalized_min)}-${_format_k(normalized_max)}/yr"

    value = normalized_min or normalized_max
    return f"${_format_k(value)}/yr"


def is_salary_in_typical_range(annual: Optional[int]) -> bool:
    """Whether an annual salary falls inside the typical PMHNP band."""
    if not annual:
        return False
    return TYPICAL_RANGE[0] <= annual <= TYPICAL_RANGE[1]
