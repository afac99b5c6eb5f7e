"""Frequency conversion and numeric helpers for FacilityQuote.

Provides:
- round_money: the single money rounding policy (half-up, 2 decimals)
- monthly_visits: frequency token -> canonical monthly visit count
- label and category maps used on proposal service lines
- total lookups into plan multiplier maps with explicit neutral defaults

Unknown frequency tokens fall back to DEFAULT_MONTHLY_VISITS silently.
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from config.settings import settings


Number = Union[int, float, Decimal]

CENTS = Decimal("0.01")

NEUTRAL_MULTIPLIER = 1.0
NEUTRAL_ADD_ON = 0.0


class CleaningFrequency(str, Enum):
    """Service frequency tokens understood by the engine."""

    ONE_X_WEEK = "1x_week"
    TWO_X_WEEK = "2x_week"
    THREE_X_WEEK = "3x_week"
    FOUR_X_WEEK = "4x_week"
    FIVE_X_WEEK = "5x_week"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


# =============================================================================
# STATIC TABLES
# =============================================================================

MONTHLY_VISITS: Dict[str, float] = {
    CleaningFrequency.ONE_X_WEEK.value: 4.33,
    CleaningFrequency.TWO_X_WEEK.value: 8.67,
    CleaningFrequency.THREE_X_WEEK.value: 13.0,
    CleaningFrequency.FOUR_X_WEEK.value: 17.33,
    CleaningFrequency.FIVE_X_WEEK.value: 21.67,
    CleaningFrequency.DAILY.value: 30.0,
    CleaningFrequency.WEEKLY.value: 4.33,
    CleaningFrequency.BIWEEKLY.value: 2.17,
    CleaningFrequency.MONTHLY.value: 1.0,
    CleaningFrequency.QUARTERLY.value: 0.33,
}

FREQUENCY_LABELS: Dict[str, str] = {
    CleaningFrequency.ONE_X_WEEK.value: "Weekly (1x)",
    CleaningFrequency.TWO_X_WEEK.value: "Bi-Weekly (2x)",
    CleaningFrequency.THREE_X_WEEK.value: "3x Weekly",
    CleaningFrequency.FOUR_X_WEEK.value: "4x Weekly",
    CleaningFrequency.FIVE_X_WEEK.value: "5x Weekly",
    CleaningFrequency.DAILY.value: "Daily",
    CleaningFrequency.WEEKLY.value: "Weekly",
    CleaningFrequency.BIWEEKLY.value: "Bi-Weekly",
    CleaningFrequency.MONTHLY.value: "Monthly",
    CleaningFrequency.QUARTERLY.value: "Quarterly",
}

SERVICE_TYPES: Dict[str, str] = {
    CleaningFrequency.ONE_X_WEEK.value: "weekly",
    CleaningFrequency.TWO_X_WEEK.value: "weekly",
    CleaningFrequency.THREE_X_WEEK.value: "weekly",
    CleaningFrequency.FOUR_X_WEEK.value: "weekly",
    CleaningFrequency.FIVE_X_WEEK.value: "daily",
    CleaningFrequency.DAILY.value: "daily",
    CleaningFrequency.WEEKLY.value: "weekly",
    CleaningFrequency.BIWEEKLY.value: "biweekly",
    CleaningFrequency.MONTHLY.value: "monthly",
    CleaningFrequency.QUARTERLY.value: "quarterly",
}

PROPOSAL_FREQUENCIES: Dict[str, str] = {
    CleaningFrequency.ONE_X_WEEK.value: "weekly",
    CleaningFrequency.TWO_X_WEEK.value: "weekly",
    CleaningFrequency.THREE_X_WEEK.value: "weekly",
    CleaningFrequency.FOUR_X_WEEK.value: "weekly",
    CleaningFrequency.FIVE_X_WEEK.value: "weekly",
    CleaningFrequency.DAILY.value: "daily",
    CleaningFrequency.WEEKLY.value: "weekly",
    CleaningFrequency.BIWEEKLY.value: "biweekly",
    CleaningFrequency.MONTHLY.value: "monthly",
    CleaningFrequency.QUARTERLY.value: "quarterly",
}

# Task bands shown on service line descriptions, in display order
TASK_FREQUENCY_ORDER = ["daily", "weekly", "biweekly", "monthly", "quarterly", "annual"]

TASK_FREQUENCY_LABELS: Dict[str, str] = {
    "daily": "Daily",
    "weekly": "Weekly",
    "biweekly": "Bi-Weekly",
    "monthly": "Monthly",
    "quarterly": "Quarterly",
    "annual": "Yearly",
    "as_needed": "As Needed",
}

DEFAULT_COMPARISON_FREQUENCIES = [
    CleaningFrequency.ONE_X_WEEK.value,
    CleaningFrequency.TWO_X_WEEK.value,
    CleaningFrequency.THREE_X_WEEK.value,
    CleaningFrequency.FIVE_X_WEEK.value,
]


# =============================================================================
# ROUNDING
# =============================================================================


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal via its string form (no binary artifacts)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money_decimal(value: Number) -> Decimal:
    """Round to cents, half-up."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def round_money(value: Number) -> float:
    """Round a money amount to 2 decimals, half-up.

    Every row-level and aggregate rounding in the engine goes through
    this function so the rounding policy lives in one place.
    """
    return float(round_money_decimal(value))


# =============================================================================
# LOOKUPS
# =============================================================================


def parse_frequency(token: Optional[str]) -> Optional[CleaningFrequency]:
    """Return the enum member for a token, or None when unknown."""
    if not token:
        return None
    try:
        return CleaningFrequency(token)
    except ValueError:
        return None


def monthly_visits(token: Optional[str]) -> float:
    """Canonical monthly visit count for a frequency token.

    Args:
        token: Frequency token such as '1x_week' or 'daily'

    Returns:
        Visits per month; DEFAULT_MONTHLY_VISITS for unknown tokens.
    """
    frequency = parse_frequency(token)
    if frequency is None:
        return settings.default_monthly_visits
    return MONTHLY_VISITS[frequency.value]


def frequency_label(token: str) -> str:
    return FREQUENCY_LABELS.get(token, token)


def service_type_for(token: str) -> str:
    return SERVICE_TYPES.get(token, "monthly")


def proposal_frequency_for(token: str) -> str:
    return PROPOSAL_FREQUENCIES.get(token, "monthly")


def multiplier_for(multipliers: Optional[Mapping[str, float]], key: Optional[str]) -> float:
    """Look up a multiplier; missing map or key is neutral (1.0)."""
    if not multipliers or key is None:
        return NEUTRAL_MULTIPLIER
    value = multipliers.get(key)
    return NEUTRAL_MULTIPLIER if value is None else float(value)


def add_on_for(add_ons: Optional[Mapping[str, float]], key: Optional[str]) -> float:
    """Look up a percentage add-on; missing map or key is neutral (0)."""
    if not add_ons or key is None:
        return NEUTRAL_ADD_ON
    value = add_ons.get(key)
    return NEUTRAL_ADD_ON if value is None else float(value)
