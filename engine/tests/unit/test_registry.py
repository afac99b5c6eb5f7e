"""Unit tests for the strategy registry and scope resolution."""

import pytest

from strategies.base_strategy import BasePricingStrategy
from strategies.per_hour_v1 import PerHourV1Strategy
from strategies.registry import (
    PricingScope,
    PricingStrategyRegistry,
    resolve_plan_id,
    resolve_strategy_key,
)


class TestPricingScope:
    """Proposal > facility > account > system default."""

    def test_proposal_wins(self):
        scope = PricingScope(
            proposal_strategy_key="p",
            facility_strategy_key="f",
            account_strategy_key="a",
        )
        assert resolve_strategy_key(scope, "default") == "p"

    def test_facility_beats_account(self):
        scope = PricingScope(facility_strategy_key="f", account_strategy_key="a")
        assert resolve_strategy_key(scope, "default") == "f"

    def test_account_beats_default(self):
        scope = PricingScope(account_strategy_key="a")
        assert resolve_strategy_key(scope, "default") == "a"

    def test_nothing_set_uses_default(self):
        assert resolve_strategy_key(PricingScope(), "default") == "default"

    def test_empty_string_is_unset(self):
        scope = PricingScope(proposal_strategy_key="", facility_strategy_key="f")
        assert resolve_strategy_key(scope, "default") == "f"

    def test_plan_id_chain(self):
        assert resolve_plan_id(PricingScope(proposal_plan_id="p1", account_plan_id="a1")) == "p1"
        assert resolve_plan_id(PricingScope(facility_plan_id="f1", account_plan_id="a1")) == "f1"
        assert resolve_plan_id(PricingScope(account_plan_id="a1")) == "a1"
        assert resolve_plan_id(PricingScope()) is None


class TestPricingStrategyRegistry:
    """Tests for PricingStrategyRegistry."""

    def test_built_ins_registered(self, registry):
        assert registry.list_keys() == ["sqft_settings_v1", "per_hour_v1"]
        assert registry.has("per_hour_v1")
        assert not registry.has("flat_rate_v9")

    def test_get_returns_none_for_unknown(self, registry):
        assert registry.get("flat_rate_v9") is None

    def test_get_default(self, registry):
        assert registry.get_default().key == "sqft_settings_v1"

    def test_unknown_key_falls_back_to_default(self, registry):
        strategy = registry.get_or_default("flat_rate_v9")
        assert strategy.key == "sqft_settings_v1"

    def test_none_key_uses_default(self, registry):
        assert registry.get_or_default(None).key == "sqft_settings_v1"

    def test_known_key(self, registry):
        assert isinstance(registry.get_or_default("per_hour_v1"), PerHourV1Strategy)

    def test_unregistered_default_raises(self, store):
        registry = PricingStrategyRegistry(store, default_key="missing_v1")
        with pytest.raises(KeyError):
            registry.get_default()

    def test_list_all_metadata(self, registry):
        metadata = {m.key: m for m in registry.list_all()}

        assert metadata["sqft_settings_v1"].is_default is True
        assert metadata["per_hour_v1"].is_default is False
        assert metadata["per_hour_v1"].name == "Per Hour (Task Minutes V1)"
        assert metadata["sqft_settings_v1"].version == "1.0.0"

    def test_register_overwrites(self, store, registry):
        class CustomSqft(PerHourV1Strategy):
            key = "sqft_settings_v1"

        replacement = CustomSqft(store)
        registry.register(replacement)

        assert registry.get("sqft_settings_v1") is replacement
        assert isinstance(registry.get("sqft_settings_v1"), BasePricingStrategy)
