"""Unit tests for PricingService (plan and strategy resolution)."""

import pytest

from config.errors import FacilityNotFoundError, PricingPlanNotFoundError
from models.quote import PricingContext
from services.pricing_service import PricingService
from services.pricing_store import InMemoryPricingStore
from strategies.registry import PricingScope
from tests.fixtures.mock_pricing_data import (
    make_account,
    make_area,
    make_facility,
    make_proposal,
    make_sqft_plan,
)


def _context(**overrides):
    data = dict(facility_id="fac-1", service_frequency="1x_week")
    data.update(overrides)
    return PricingContext(**data)


class TestSelectStrategy:
    """One authoritative rule for picking the strategy."""

    def test_request_key_beats_scope(self, pricing_service, sqft_plan):
        scope = PricingScope(proposal_strategy_key="sqft_settings_v1")
        strategy = pricing_service.select_strategy(scope, sqft_plan, strategy_key="per_hour_v1")
        assert strategy.key == "per_hour_v1"

    def test_scope_key_used(self, pricing_service, sqft_plan):
        scope = PricingScope(account_strategy_key="per_hour_v1")
        assert pricing_service.select_strategy(scope, sqft_plan).key == "per_hour_v1"

    def test_hourly_plan_dispatches_to_per_hour(self, pricing_service, hourly_plan):
        assert pricing_service.select_strategy(PricingScope(), hourly_plan).key == "per_hour_v1"

    def test_square_foot_plan_uses_system_default(self, pricing_service, sqft_plan):
        assert pricing_service.select_strategy(PricingScope(), sqft_plan).key == "sqft_settings_v1"

    def test_explicit_key_kept_on_plan_type_conflict(self, pricing_service, hourly_plan):
        scope = PricingScope(facility_strategy_key="sqft_settings_v1")
        assert pricing_service.select_strategy(scope, hourly_plan).key == "sqft_settings_v1"

    def test_unknown_key_falls_back(self, pricing_service, sqft_plan):
        strategy = pricing_service.select_strategy(PricingScope(), sqft_plan, strategy_key="nope_v0")
        assert strategy.key == "sqft_settings_v1"


class TestScopeChain:
    """Scope overrides read from stored proposal, facility and account."""

    def test_build_scope_from_proposal(self, store, registry):
        store.save_proposal(make_proposal(pricing_strategy_key="per_hour_v1", pricing_plan_id="plan-hourly"))
        scope = PricingService(store, registry=registry).build_scope(proposal_id="prop-1")

        assert scope.proposal_strategy_key == "per_hour_v1"
        assert scope.proposal_plan_id == "plan-hourly"
        assert scope.facility_strategy_key is None
        assert scope.account_strategy_key is None

    def test_facility_then_account(self):
        store = InMemoryPricingStore(
            accounts=[make_account(default_pricing_strategy_key="sqft_settings_v1")],
            facilities=[make_facility(default_pricing_strategy_key="per_hour_v1")],
            pricing_plans=[make_sqft_plan()],
        )
        service = PricingService(store)

        quote = service.calculate_pricing(_context())
        assert quote.strategy_key == "per_hour_v1"

    def test_account_used_when_facility_unset(self):
        store = InMemoryPricingStore(
            accounts=[make_account(default_pricing_strategy_key="per_hour_v1")],
            facilities=[make_facility()],
            pricing_plans=[make_sqft_plan()],
        )
        quote = PricingService(store).calculate_pricing(_context())
        assert quote.strategy_key == "per_hour_v1"

    def test_proposal_beats_facility(self):
        store = InMemoryPricingStore(
            accounts=[make_account()],
            facilities=[make_facility(default_pricing_strategy_key="per_hour_v1")],
            pricing_plans=[make_sqft_plan()],
            proposals=[make_proposal(pricing_strategy_key="sqft_settings_v1")],
        )
        quote = PricingService(store).calculate_pricing(_context(), proposal_id="prop-1")
        assert quote.strategy_key == "sqft_settings_v1"


class TestResolvePlan:
    def test_request_plan_id_wins(self, pricing_service):
        scope = PricingScope(proposal_plan_id="plan-sqft")
        assert pricing_service.resolve_plan(scope, "plan-hourly").id == "plan-hourly"

    def test_scope_plan_id(self, pricing_service):
        assert pricing_service.resolve_plan(PricingScope(account_plan_id="plan-hourly")).id == "plan-hourly"

    def test_default_plan(self, pricing_service):
        assert pricing_service.resolve_plan(PricingScope()).id == "plan-sqft"

    def test_unknown_plan_id(self, pricing_service):
        with pytest.raises(PricingPlanNotFoundError) as exc_info:
            pricing_service.resolve_plan(PricingScope(), "plan-missing")
        assert exc_info.value.details == {"pricing_plan_id": "plan-missing"}

    def test_unflagged_active_plan_used_as_default(self):
        store = InMemoryPricingStore(
            facilities=[make_facility()],
            pricing_plans=[make_sqft_plan(is_default=False)],
        )
        quote = PricingService(store).calculate_pricing(_context())

        assert quote.pricing_plan_id == "plan-sqft"
        assert quote.monthly_total == 100.0

    def test_no_active_plan(self):
        store = InMemoryPricingStore(
            facilities=[make_facility()],
            pricing_plans=[make_sqft_plan(is_default=False, is_active=False)],
        )
        with pytest.raises(PricingPlanNotFoundError):
            PricingService(store).calculate_pricing(_context())

    def test_inactive_default_ignored(self):
        store = InMemoryPricingStore(
            facilities=[make_facility()],
            pricing_plans=[make_sqft_plan(is_active=False)],
        )
        with pytest.raises(PricingPlanNotFoundError):
            PricingService(store).resolve_plan(PricingScope())


class TestCalculatePricing:
    def test_end_to_end_default_plan(self, pricing_service):
        quote = pricing_service.calculate_pricing(_context())

        assert quote.strategy_key == "sqft_settings_v1"
        assert quote.pricing_plan_id == "plan-sqft"
        assert quote.monthly_total == 100.0
        assert quote.minimum_applied is False
        assert quote.settings_snapshot.pricing_plan_id == "plan-sqft"

    def test_hourly_plan_by_id(self, pricing_service):
        quote = pricing_service.calculate_pricing(_context(pricing_plan_id="plan-hourly"))
        assert quote.strategy_key == "per_hour_v1"
        assert quote.pricing_plan_id == "plan-hourly"

    def test_unknown_facility(self, pricing_service):
        with pytest.raises(FacilityNotFoundError):
            pricing_service.calculate_pricing(_context(facility_id="fac-missing"))

    def test_generate_proposal_services(self, pricing_service):
        lines = pricing_service.generate_proposal_services(_context())
        assert len(lines) == 1
        assert lines[0].monthly_price == 100.0


class TestCompareFrequencies:
    def test_default_frequencies(self, pricing_service):
        results = pricing_service.compare_frequencies("fac-1")

        assert [r.frequency for r in results] == ["1x_week", "2x_week", "3x_week", "5x_week"]
        # 3x_week is not in the plan's map, so it is neutral
        assert [r.monthly_total for r in results] == [100.0, 200.0, 100.0, 400.0]

    def test_custom_frequencies(self, pricing_service):
        results = pricing_service.compare_frequencies("fac-1", frequencies=["2x_week"])
        assert [(r.frequency, r.monthly_total) for r in results] == [("2x_week", 200.0)]


class TestFacilityReadiness:
    def test_ready(self, pricing_service):
        readiness = pricing_service.is_facility_ready("fac-1")
        assert readiness.is_ready is True
        assert readiness.area_count == 1
        assert readiness.total_square_feet == 1000.0

    def test_missing_facility(self, pricing_service):
        readiness = pricing_service.is_facility_ready("fac-missing")
        assert readiness.is_ready is False
        assert readiness.reason == "Facility not found"

    def test_no_areas(self):
        store = InMemoryPricingStore(facilities=[make_facility(areas=[])])
        readiness = PricingService(store).is_facility_ready("fac-1")
        assert readiness.is_ready is False
        assert readiness.reason == "Facility has no areas defined"

    def test_no_square_footage(self):
        store = InMemoryPricingStore(facilities=[make_facility(areas=[make_area(square_feet=0.0)])])
        readiness = PricingService(store).is_facility_ready("fac-1")
        assert readiness.is_ready is False
        assert readiness.reason == "Facility areas have no square footage"
        assert readiness.area_count == 1
