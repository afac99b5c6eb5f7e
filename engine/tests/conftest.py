"""Pytest configuration and shared fixtures for FacilityQuote tests."""

import os
import sys

import pytest


# ============================================================================
# Ensure local imports work (models/, services/, strategies/, config/)
# ============================================================================
#
# The codebase uses absolute imports like `from models...` / `from services...`,
# so `engine/` must be importable as the top-level module root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


# ============================================================================
# Clocks
# ============================================================================

@pytest.fixture
def fixed_clock():
    """Wall clock frozen at FIXED_NOW."""
    from tests.fixtures.mock_pricing_data import FIXED_NOW

    return lambda: FIXED_NOW


class FakeMonotonic:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_monotonic():
    return FakeMonotonic()


# ============================================================================
# Store and services
# ============================================================================

@pytest.fixture
def snapshot_builder(fixed_clock):
    from strategies.base_strategy import SnapshotBuilder

    return SnapshotBuilder(clock=fixed_clock)


@pytest.fixture
def sqft_plan():
    from tests.fixtures.mock_pricing_data import make_sqft_plan

    return make_sqft_plan()


@pytest.fixture
def hourly_plan():
    from tests.fixtures.mock_pricing_data import make_hourly_plan

    return make_hourly_plan()


@pytest.fixture
def store(sqft_plan, hourly_plan):
    """Store with one account, one 1000 sqft office facility and both plans."""
    from services.pricing_store import InMemoryPricingStore
    from tests.fixtures.mock_pricing_data import make_account, make_facility

    return InMemoryPricingStore(
        accounts=[make_account()],
        facilities=[make_facility()],
        pricing_plans=[sqft_plan, hourly_plan],
    )


@pytest.fixture
def registry(store, snapshot_builder):
    from strategies.registry import PricingStrategyRegistry

    return PricingStrategyRegistry(
        store,
        default_key="sqft_settings_v1",
        snapshot_builder=snapshot_builder,
    )


@pytest.fixture
def pricing_service(store, registry):
    from services.pricing_service import PricingService

    return PricingService(store, registry=registry)


@pytest.fixture
def sqft_strategy(store, snapshot_builder):
    from strategies.sqft_settings_v1 import SqftSettingsV1Strategy

    return SqftSettingsV1Strategy(store, snapshot_builder)


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture(autouse=True)
def reset_structlog():
    """Drop logging config bound to a captured stream by an earlier test."""
    import structlog

    yield
    structlog.reset_defaults()
