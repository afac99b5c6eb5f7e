"""Unit tests for pricing Pydantic models."""

import json

import pytest
from pydantic import ValidationError

from models.facility import Area, FacilityTask, TaskTemplate
from models.pricing_settings import PricingSettings
from models.quote import PricingContext, PricingSettingsSnapshot
from tests.fixtures.mock_pricing_data import make_sqft_plan, make_facility, make_area


class TestPricingSettings:
    """Tests for PricingSettings validation."""

    def test_camel_case_aliases(self):
        plan = PricingSettings.model_validate({
            "id": "p1",
            "name": "Plan",
            "pricingType": "hourly",
            "baseRatePerSqFt": 0.12,
            "targetProfitMargin": 0.3,
        })
        assert plan.is_hourly
        assert plan.base_rate_per_sq_ft == 0.12
        assert plan.target_profit_margin == 0.3

    def test_margin_of_one_rejected(self):
        with pytest.raises(ValidationError):
            make_sqft_plan(target_profit_margin=1.0)

    def test_negative_multiplier_rejected(self):
        with pytest.raises(ValidationError):
            make_sqft_plan(floor_type_multipliers={"vct": -0.5})

    def test_default_maps_are_independent(self):
        a = PricingSettings(id="a", name="A")
        b = PricingSettings(id="b", name="B")
        a.floor_type_multipliers["carpet"] = 9.0
        assert b.floor_type_multipliers["carpet"] == 1.15


class TestAreaDefaults:
    """Missing area attributes normalize to the engine defaults."""

    def test_nulls_become_defaults(self):
        area = Area.model_validate({
            "id": "a1",
            "squareFeet": None,
            "quantity": 0,
            "floorType": None,
            "conditionLevel": None,
            "trafficLevel": None,
        })
        assert area.square_feet == 0.0
        assert area.quantity == 1
        assert area.floor_type == "vct"
        assert area.condition_level == "standard"
        assert area.traffic_level == "medium"

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Area.model_validate({"id": "a1", "squareFeet": 100.0, "quantity": -2})

    def test_missing_quantity_is_one(self):
        assert Area(id="a1").quantity == 1

    def test_total_square_feet_uses_quantity(self):
        area = make_area(square_feet=250.0, quantity=4)
        assert area.total_square_feet == 1000.0

    def test_facility_total(self):
        facility = make_facility(areas=[make_area("a", 100.0), make_area("b", 250.0, quantity=2)])
        assert facility.total_square_feet == 600.0

    def test_display_name_falls_back_to_type(self):
        area = Area(id="a1", area_type_name="Restroom")
        assert area.display_name == "Restroom"


class TestFacilityTask:
    def test_display_name_precedence(self):
        template = TaskTemplate(id="t", name="Mop Floors")
        assert FacilityTask(id="1", custom_name="Custom", template=template).display_name == "Custom"
        assert FacilityTask(id="2", template=template).display_name == "Mop Floors"
        assert FacilityTask(id="3").display_name == "Unnamed Task"


class TestPricingContext:
    def test_null_defaults_are_dropped(self):
        context = PricingContext.model_validate({
            "facilityId": "fac-1",
            "serviceFrequency": "1x_week",
            "taskComplexity": None,
            "workerCount": None,
        })
        assert context.task_complexity == "standard"
        assert context.worker_count == 1

    def test_worker_count_must_be_positive(self):
        with pytest.raises(ValidationError):
            PricingContext(facility_id="fac-1", service_frequency="1x_week", worker_count=0)

    def test_override_range(self):
        with pytest.raises(ValidationError):
            PricingContext(
                facility_id="fac-1",
                service_frequency="1x_week",
                subcontractor_percentage_override=1.5,
            )

    def test_frozen(self):
        context = PricingContext(facility_id="fac-1", service_frequency="1x_week")
        with pytest.raises(ValidationError):
            context.service_frequency = "daily"


class TestSettingsSnapshot:
    """Snapshots are deep copies with a stable serialized form."""

    def test_snapshot_survives_plan_mutation(self, snapshot_builder):
        plan = make_sqft_plan()
        snapshot = snapshot_builder.build(plan, worker_count=3)

        plan.floor_type_multipliers["vct"] = 5.0
        plan.frequency_multipliers["1x_week"] = 7.0

        assert snapshot.floor_type_multipliers["vct"] == 1.0
        assert snapshot.frequency_multipliers["1x_week"] == 1.0
        assert snapshot.worker_count == 3

    def test_to_json_is_stable(self, snapshot_builder):
        plan = make_sqft_plan()
        first = snapshot_builder.build(plan).to_json()
        second = snapshot_builder.build(plan).to_json()

        assert first == second
        assert ", \"" not in first
        assert "\": " not in first
        payload = json.loads(first)
        assert list(payload) == sorted(payload)
        assert payload["snapshotVersion"] == "1"
        assert payload["capturedAt"] == "2025-01-15T12:00:00+00:00"

    def test_dict_round_trip(self, snapshot_builder):
        snapshot = snapshot_builder.build(make_sqft_plan())
        restored = PricingSettingsSnapshot.from_dict(snapshot.to_dict())
        assert restored == snapshot
