"""FacilityQuote pricing strategies.

This package contains:
- base_strategy: BasePricingStrategy and SnapshotBuilder
- sqft_settings_v1: square-footage rate strategy
- per_hour_v1: task-minutes labor cost strategy
- registry: strategy registry and scope resolution
"""

from strategies.base_strategy import BasePricingStrategy, SnapshotBuilder
from strategies.per_hour_v1 import PER_HOUR_V1, PerHourV1Strategy
from strategies.sqft_settings_v1 import SQFT_SETTINGS_V1, SqftSettingsV1Strategy
from strategies.registry import PricingScope, PricingStrategyRegistry

__all__ = [
    "BasePricingStrategy",
    "SnapshotBuilder",
    "PER_HOUR_V1",
    "PerHourV1Strategy",
    "SQFT_SETTINGS_V1",
    "SqftSettingsV1Strategy",
    "PricingScope",
    "PricingStrategyRegistry",
]
