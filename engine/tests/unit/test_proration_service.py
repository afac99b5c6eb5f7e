"""Unit tests for proration, billing windows and the batch lock."""

from datetime import date, datetime, timezone

import pytest

from config.errors import BatchInProgressError, ErrorCode, ProrationWindowError
from models.invoice import BillingWindow
from services.proration_service import (
    BatchIdempotencyLock,
    batch_key,
    days_in_month,
    normalize_window,
    prorate,
)


class TestProrate:
    """Day-weighted monthly value over an inclusive window."""

    def test_full_month_equals_monthly_value(self):
        assert prorate(310.0, date(2025, 1, 1), date(2025, 1, 31)) == 310.0

    def test_full_leap_february(self):
        assert prorate(290.0, date(2024, 2, 1), date(2024, 2, 29)) == 290.0

    def test_full_month_with_repeating_daily_rate(self):
        assert prorate(100.0, date(2025, 3, 1), date(2025, 3, 31)) == 100.0

    def test_cross_month_window(self):
        # 310 x 12/31 + 310 x 5/28 = 120 + 55.357...
        assert prorate(310.0, date(2025, 1, 20), date(2025, 2, 5)) == 175.36

    def test_single_day(self):
        assert prorate(310.0, date(2025, 1, 31), date(2025, 1, 31)) == 10.0

    def test_zero_value(self):
        assert prorate(0, date(2025, 1, 1), date(2025, 1, 15)) == 0.0

    def test_inverted_window_rejected(self):
        with pytest.raises(ProrationWindowError) as exc_info:
            prorate(310.0, date(2025, 2, 5), date(2025, 1, 20))
        assert exc_info.value.code == ErrorCode.INVALID_BILLING_WINDOW

    def test_days_in_month(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2025, 2) == 28
        assert days_in_month(2025, 12) == 31


class TestNormalizeWindow:
    def test_plain_dates_pass_through(self):
        window = normalize_window(date(2025, 1, 1), date(2025, 1, 31), "America/New_York")
        assert window == BillingWindow(
            start=date(2025, 1, 1), end=date(2025, 1, 31), timezone="America/New_York"
        )
        assert window.days == 31

    def test_aware_datetime_converted_to_local_date(self):
        start = datetime(2025, 2, 1, 3, 0, tzinfo=timezone.utc)
        end = datetime(2025, 2, 28, 12, 0, tzinfo=timezone.utc)
        window = normalize_window(start, end, "America/New_York")

        assert window.start == date(2025, 1, 31)
        assert window.end == date(2025, 2, 28)

    def test_naive_datetime_treated_as_utc(self):
        window = normalize_window(datetime(2025, 2, 1, 3, 0), datetime(2025, 2, 2), "America/Chicago")
        assert window.start == date(2025, 1, 31)

    def test_unknown_timezone(self):
        with pytest.raises(ProrationWindowError):
            normalize_window(date(2025, 1, 1), date(2025, 1, 2), "Mars/Olympus_Mons")

    def test_inverted_window(self):
        with pytest.raises(ProrationWindowError):
            normalize_window(date(2025, 1, 2), date(2025, 1, 1))

    def test_window_too_long(self):
        with pytest.raises(ProrationWindowError) as exc_info:
            normalize_window(date(2025, 1, 1), date(2025, 2, 1))
        assert exc_info.value.details == {"days": 32, "max_days": 31}

    def test_custom_max_days(self):
        window = normalize_window(date(2025, 1, 1), date(2025, 3, 31), max_days=90)
        assert window.days == 90

    def test_batch_key(self):
        window = normalize_window(date(2025, 1, 1), date(2025, 1, 31), "UTC")
        assert batch_key(window, True) == "invoice_batch:2025-01-01:2025-01-31:UTC:prorate"
        assert batch_key(window, False) == "invoice_batch:2025-01-01:2025-01-31:UTC:full"


class TestBatchIdempotencyLock:
    """Tests for BatchIdempotencyLock."""

    def test_second_acquire_conflicts(self, fake_monotonic):
        lock = BatchIdempotencyLock(ttl_seconds=60, clock=fake_monotonic)
        lock.acquire("k")

        with pytest.raises(BatchInProgressError) as exc_info:
            lock.acquire("k")
        assert exc_info.value.batch_key == "k"

    def test_different_keys_independent(self, fake_monotonic):
        lock = BatchIdempotencyLock(ttl_seconds=60, clock=fake_monotonic)
        lock.acquire("a")
        lock.acquire("b")
        assert lock.is_held("a") and lock.is_held("b")

    def test_entry_expires_after_ttl(self, fake_monotonic):
        lock = BatchIdempotencyLock(ttl_seconds=60, clock=fake_monotonic)
        lock.acquire("k")

        fake_monotonic.advance(59)
        assert lock.is_held("k")

        fake_monotonic.advance(1)
        assert not lock.is_held("k")
        lock.acquire("k")

    def test_release(self, fake_monotonic):
        lock = BatchIdempotencyLock(ttl_seconds=60, clock=fake_monotonic)
        lock.acquire("k")
        lock.release("k")
        lock.acquire("k")

    def test_hold_releases_on_error(self, fake_monotonic):
        lock = BatchIdempotencyLock(ttl_seconds=60, clock=fake_monotonic)

        with pytest.raises(RuntimeError):
            with lock.hold("k"):
                assert lock.is_held("k")
                raise RuntimeError("boom")

        assert not lock.is_held("k")

    def test_default_ttl_from_settings(self):
        assert BatchIdempotencyLock().ttl_seconds == 600
