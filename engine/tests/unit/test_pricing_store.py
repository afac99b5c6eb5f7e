"""Unit tests for InMemoryPricingStore."""

import json
from datetime import date

from models.invoice import ContractStatus
from services.pricing_store import InMemoryPricingStore
from tests.fixtures.mock_pricing_data import (
    SAMPLE_DATASET,
    make_contract,
    make_facility,
    make_hourly_plan,
    make_sqft_plan,
    make_task,
)


class TestInMemoryPricingStore:
    def test_from_dict(self):
        store = InMemoryPricingStore.from_dict(SAMPLE_DATASET)

        facility = store.get_facility("fac-1")
        assert facility.name == "Acme HQ"
        assert facility.areas[0].square_feet == 1000.0
        assert store.get_account("acct-1").name == "Acme Corp"
        assert store.get_default_pricing_plan().id == "plan-sqft"

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "dataset.json"
        path.write_text(json.dumps(SAMPLE_DATASET), encoding="utf-8")

        store = InMemoryPricingStore.from_json_file(path)
        assert store.get_pricing_plan("plan-sqft").base_rate_per_sq_ft == 0.10

    def test_records_are_copies(self):
        store = InMemoryPricingStore(facilities=[make_facility()])
        facility = store.get_facility("fac-1")
        facility.areas[0].square_feet = 5.0

        assert store.get_facility("fac-1").areas[0].square_feet == 1000.0

    def test_inputs_are_copied(self):
        facility = make_facility()
        plan = make_sqft_plan()
        store = InMemoryPricingStore(facilities=[facility])
        store.add_pricing_plan(plan)

        facility.areas[0].square_feet = 5.0
        plan.base_rate_per_sq_ft = 9.0

        assert store.get_facility("fac-1").areas[0].square_feet == 1000.0
        assert store.get_pricing_plan("plan-sqft").base_rate_per_sq_ft == 0.10

    def test_tasks_ordered_by_frequency_then_priority(self):
        store = InMemoryPricingStore(tasks=[
            make_task("w2", cleaning_frequency="weekly", priority=2),
            make_task("d1", cleaning_frequency="daily", priority=1),
            make_task("w1", cleaning_frequency="weekly", priority=1),
            make_task("other", facility_id="fac-2"),
        ])
        assert [t.id for t in store.list_facility_tasks("fac-1")] == ["d1", "w1", "w2"]

    def test_flagged_default_beats_other_active_plans(self):
        store = InMemoryPricingStore(pricing_plans=[
            make_sqft_plan(id="old", is_default=True, is_active=False),
            make_hourly_plan(),
        ])
        assert store.get_default_pricing_plan().id == "plan-hourly"

        store.add_pricing_plan(make_sqft_plan(id="new", is_default=True))
        assert store.get_default_pricing_plan().id == "new"

    def test_default_falls_back_to_first_active_plan(self):
        store = InMemoryPricingStore(pricing_plans=[
            make_sqft_plan(id="archived", is_default=False, is_active=False),
            make_hourly_plan(id="first"),
            make_hourly_plan(id="second"),
        ])
        assert store.get_default_pricing_plan().id == "first"

    def test_no_active_plans(self):
        store = InMemoryPricingStore(pricing_plans=[make_sqft_plan(is_active=False)])
        assert store.get_default_pricing_plan() is None

    def test_active_contracts_only(self):
        store = InMemoryPricingStore(contracts=[
            make_contract("a"),
            make_contract("b", status=ContractStatus.TERMINATED),
        ])
        assert [c.id for c in store.list_active_contracts()] == ["a"]

    def test_next_invoice_number_per_year(self):
        store = InMemoryPricingStore()
        assert store.next_invoice_number(2025) == "INV-2025-0001"

    def test_overlap_filters(self):
        from models.invoice import Invoice

        store = InMemoryPricingStore(invoices=[Invoice(
            id="i1",
            invoice_number="INV-2025-0001",
            account_id="acct-1",
            contract_id="con-1",
            issue_date=date(2025, 1, 31),
            due_date=date(2025, 3, 2),
            period_start=date(2025, 1, 1),
            period_end=date(2025, 1, 31),
        )])

        assert store.find_overlapping_invoice(date(2025, 1, 31), date(2025, 2, 28)) is not None
        assert store.find_overlapping_invoice(date(2025, 2, 1), date(2025, 2, 28)) is None
        assert store.find_overlapping_invoice(
            date(2025, 1, 1), date(2025, 1, 31), contract_id="con-2"
        ) is None
        assert store.find_overlapping_invoice(
            date(2025, 1, 1), date(2025, 1, 31), account_id="acct-1"
        ).id == "i1"
