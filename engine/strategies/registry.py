"""Pricing strategy registry for FacilityQuote.

Holds the available strategies and resolves which strategy key and
pricing plan apply to a request through the scope chain:

    proposal -> facility -> account -> system default

Each scope carries explicit nullable overrides; the first non-empty
value wins. Resolution is a pure lookup with no caching.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import structlog

from config.settings import settings
from models.quote import StrategyMetadata
from services.pricing_store import PricingStore
from strategies.base_strategy import BasePricingStrategy, SnapshotBuilder
from strategies.per_hour_v1 import PerHourV1Strategy
from strategies.sqft_settings_v1 import SqftSettingsV1Strategy

logger = structlog.get_logger()


@dataclass(frozen=True)
class PricingScope:
    """Nullable per-scope overrides, narrowest scope first."""

    proposal_strategy_key: Optional[str] = None
    proposal_plan_id: Optional[str] = None
    facility_strategy_key: Optional[str] = None
    facility_plan_id: Optional[str] = None
    account_strategy_key: Optional[str] = None
    account_plan_id: Optional[str] = None

    @property
    def strategy_key(self) -> Optional[str]:
        """First strategy key set on any scope, or None."""
        return _first_set(
            self.proposal_strategy_key,
            self.facility_strategy_key,
            self.account_strategy_key,
        )

    @property
    def plan_id(self) -> Optional[str]:
        """First pricing plan id set on any scope, or None."""
        return _first_set(
            self.proposal_plan_id,
            self.facility_plan_id,
            self.account_plan_id,
        )


def _first_set(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def resolve_strategy_key(scope: PricingScope, system_default: str) -> str:
    """Proposal > facility > account > system default."""
    return scope.strategy_key or system_default


def resolve_plan_id(scope: PricingScope) -> Optional[str]:
    """Proposal > facility > account; None means 'use the default plan'."""
    return scope.plan_id


class PricingStrategyRegistry:
    """Registry of pricing strategies keyed by strategy key.

    Built-in strategies are registered at construction. The default key
    is injected so tests and embedders can run several registries side
    by side.
    """

    def __init__(
        self,
        store: PricingStore,
        default_key: Optional[str] = None,
        snapshot_builder: Optional[SnapshotBuilder] = None,
    ):
        self.default_key = default_key or settings.default_pricing_strategy_key
        self._strategies: Dict[str, BasePricingStrategy] = {}

        self.register(SqftSettingsV1Strategy(store, snapshot_builder))
        self.register(PerHourV1Strategy(store, snapshot_builder))

    def register(self, strategy: BasePricingStrategy) -> None:
        if strategy.key in self._strategies:
            logger.warning("strategy_already_registered_overwriting", strategy_key=strategy.key)
        self._strategies[strategy.key] = strategy

    def get(self, key: str) -> Optional[BasePricingStrategy]:
        return self._strategies.get(key)

    def has(self, key: str) -> bool:
        return key in self._strategies

    def list_keys(self) -> List[str]:
        return list(self._strategies.keys())

    def list_all(self) -> List[StrategyMetadata]:
        return [
            strategy.metadata(is_default=strategy.key == self.default_key)
            for strategy in self._strategies.values()
        ]

    def get_default(self) -> BasePricingStrategy:
        strategy = self._strategies.get(self.default_key)
        if strategy is None:
            raise KeyError(f"Default pricing strategy '{self.default_key}' is not registered")
        return strategy

    def get_or_default(self, key: Optional[str]) -> BasePricingStrategy:
        """Return the strategy for key, falling back to the default.

        Unknown keys never raise; they log a warning and use the default
        strategy so quoting stays available.
        """
        if key:
            strategy = self._strategies.get(key)
            if strategy is not None:
                return strategy
            logger.warning(
                "strategy_not_found_using_default",
                strategy_key=key,
                default_key=self.default_key,
                available=self.list_keys(),
            )
        return self.get_default()
