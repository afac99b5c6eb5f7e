"""Proration Service for FacilityQuote.

Converts a flat monthly value into a day-weighted amount for an
inclusive billing window, normalizes billing windows to local calendar
dates, and provides the in-process idempotency lock that guards batch
invoice generation.
"""

import calendar
import threading
import time
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterator, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from config.errors import BatchInProgressError, ProrationWindowError
from config.settings import settings
from models.invoice import BillingWindow
from services.frequency_service import Number, round_money, to_decimal

logger = structlog.get_logger()


DateLike = Union[date, datetime]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def prorate(monthly_value: Number, start: date, end: date) -> float:
    """Day-weighted share of a monthly value over [start, end].

    Each calendar-month segment contributes
    (monthly_value / days_in_that_month) * overlap_days. The sum is
    rounded once at the end.

    Raises:
        ProrationWindowError: If end is before start.
    """
    if end < start:
        raise ProrationWindowError(
            "Billing period end date must be on or after period start date",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )

    monthly = to_decimal(monthly_value)
    total = Decimal("0")
    cursor = start
    while cursor <= end:
        month_days = days_in_month(cursor.year, cursor.month)
        month_end = date(cursor.year, cursor.month, month_days)
        segment_end = min(month_end, end)
        overlap_days = (segment_end - cursor).days + 1
        total += monthly / Decimal(month_days) * overlap_days
        cursor = segment_end + timedelta(days=1)

    return round_money(total)


def _local_date(value: DateLike, tz: ZoneInfo) -> date:
    if isinstance(value, datetime):
        aware = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
        return aware.astimezone(tz).date()
    return value


def normalize_window(
    start: DateLike,
    end: DateLike,
    tz_name: Optional[str] = None,
    max_days: Optional[int] = None,
) -> BillingWindow:
    """Convert a billing window to local calendar dates and validate it.

    Naive datetimes are treated as UTC. Plain dates are taken as already
    local.

    Raises:
        ProrationWindowError: Unknown timezone, inverted window, or a
            window longer than max_days.
    """
    tz_name = tz_name or settings.default_timezone
    max_days = max_days or settings.max_billing_window_days

    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ProrationWindowError(f"Unknown timezone: {tz_name}", details={"timezone": tz_name})

    local_start = _local_date(start, tz)
    local_end = _local_date(end, tz)

    if local_end < local_start:
        raise ProrationWindowError(
            "Billing period end date must be on or after period start date",
            details={"start": local_start.isoformat(), "end": local_end.isoformat()},
        )

    duration_days = (local_end - local_start).days + 1
    if duration_days > max_days:
        raise ProrationWindowError(
            f"Billing period cannot exceed {max_days} days",
            details={"days": duration_days, "max_days": max_days},
        )

    return BillingWindow(start=local_start, end=local_end, timezone=tz_name)


def batch_key(window: BillingWindow, prorate_enabled: bool) -> str:
    mode = "prorate" if prorate_enabled else "full"
    return f"invoice_batch:{window.start.isoformat()}:{window.end.isoformat()}:{window.timezone}:{mode}"


class BatchIdempotencyLock:
    """Advisory in-process lock keyed by batch period.

    Entries self-expire after ttl_seconds. A second acquire of an active
    key raises BatchInProgressError instead of double-running.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize BatchIdempotencyLock.

        Args:
            ttl_seconds: Entry lifetime; defaults to settings.
            clock: Monotonic seconds source (inject a fake in tests).
        """
        self.ttl_seconds = ttl_seconds or settings.batch_idempotency_ttl_seconds
        self._clock = clock or time.monotonic
        self._expires_at: Dict[str, float] = {}
        self._mutex = threading.Lock()

    def _purge_expired(self, now: float) -> None:
        for key in [k for k, expires in self._expires_at.items() if expires <= now]:
            del self._expires_at[key]

    def acquire(self, key: str) -> None:
        with self._mutex:
            now = self._clock()
            self._purge_expired(now)
            if key in self._expires_at:
                logger.warning("invoice_batch_already_running", batch_key=key)
                raise BatchInProgressError(key)
            self._expires_at[key] = now + self.ttl_seconds

    def release(self, key: str) -> None:
        with self._mutex:
            self._expires_at.pop(key, None)

    def is_held(self, key: str) -> bool:
        with self._mutex:
            self._purge_expired(self._clock())
            return key in self._expires_at

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Acquire for the duration of a with-block; always released."""
        self.acquire(key)
        try:
            yield
        finally:
            self.release(key)
