"""Pricing plan (cost plan) Pydantic models for FacilityQuote.

This module defines the closed vocabularies used by the pricing engine
(floor types, condition levels, traffic levels, building types, task
complexity tiers) and the PricingSettings model that carries rates,
overhead percentages and multiplier maps.

Multiplier maps stay string-keyed so that stored plans round-trip
unchanged; lookups go through the total functions in
services.frequency_service, which encode the neutral defaults.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class PricingType(str, Enum):
    """How a pricing plan is meant to be quoted."""

    SQUARE_FOOT = "square_foot"
    HOURLY = "hourly"


class FloorType(str, Enum):
    """Floor surface of an area."""

    VCT = "vct"
    CARPET = "carpet"
    TILE = "tile"
    HARDWOOD = "hardwood"
    CONCRETE = "concrete"
    OTHER = "other"


class ConditionLevel(str, Enum):
    """Cleaning difficulty of an area."""

    STANDARD = "standard"
    MEDIUM = "medium"
    HARD = "hard"


class TrafficLevel(str, Enum):
    """Foot traffic in an area."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BuildingType(str, Enum):
    """Building classification of a facility."""

    OFFICE = "office"
    MEDICAL = "medical"
    INDUSTRIAL = "industrial"
    RETAIL = "retail"
    EDUCATIONAL = "educational"
    WAREHOUSE = "warehouse"
    RESIDENTIAL = "residential"
    MIXED = "mixed"
    OTHER = "other"


class TaskComplexity(str, Enum):
    """Task complexity tier; maps to a percentage add-on."""

    STANDARD = "standard"
    SANITIZATION = "sanitization"
    BIOHAZARD = "biohazard"
    HIGH_SECURITY = "high_security"


# =============================================================================
# DEFAULT MULTIPLIER MAPS
# =============================================================================

DEFAULT_FLOOR_TYPE_MULTIPLIERS: Dict[str, float] = {
    FloorType.VCT.value: 1.0,
    FloorType.CARPET.value: 1.15,
    FloorType.TILE.value: 1.1,
    FloorType.HARDWOOD.value: 1.2,
    FloorType.CONCRETE.value: 0.9,
    FloorType.OTHER.value: 1.0,
}

# Monthly factor applied by the square-footage strategy. Not the visit count.
DEFAULT_FREQUENCY_MULTIPLIERS: Dict[str, float] = {
    "1x_week": 1.0,
    "2x_week": 1.8,
    "3x_week": 2.5,
    "4x_week": 3.2,
    "5x_week": 4.0,
    "daily": 4.33,
    "weekly": 1.0,
    "biweekly": 0.5,
    "monthly": 0.25,
    "quarterly": 0.083,
}

DEFAULT_CONDITION_MULTIPLIERS: Dict[str, float] = {
    ConditionLevel.STANDARD.value: 1.0,
    ConditionLevel.MEDIUM.value: 1.25,
    ConditionLevel.HARD.value: 1.33,
}

DEFAULT_BUILDING_TYPE_MULTIPLIERS: Dict[str, float] = {
    BuildingType.OFFICE.value: 1.0,
    BuildingType.MEDICAL.value: 1.3,
    BuildingType.INDUSTRIAL.value: 1.15,
    BuildingType.RETAIL.value: 1.05,
    BuildingType.EDUCATIONAL.value: 1.1,
    BuildingType.WAREHOUSE.value: 0.9,
    BuildingType.RESIDENTIAL.value: 1.0,
    BuildingType.MIXED.value: 1.05,
    BuildingType.OTHER.value: 1.0,
}

DEFAULT_TRAFFIC_MULTIPLIERS: Dict[str, float] = {
    TrafficLevel.LOW.value: 0.9,
    TrafficLevel.MEDIUM.value: 1.0,
    TrafficLevel.HIGH.value: 1.15,
}

DEFAULT_TASK_COMPLEXITY_ADD_ONS: Dict[str, float] = {
    TaskComplexity.STANDARD.value: 0.0,
    TaskComplexity.SANITIZATION.value: 0.15,
    TaskComplexity.BIOHAZARD.value: 0.5,
    TaskComplexity.HIGH_SECURITY.value: 0.2,
}


# =============================================================================
# PRICING SETTINGS MODEL
# =============================================================================


class PricingSettings(BaseModel):
    """A pricing plan: rates, overhead stack and multiplier maps.

    Plans are read-only at quote time. Strategies never mutate a plan;
    the snapshot builder deep-copies every map it captures.
    """

    id: str = Field(..., description="Pricing plan ID")
    name: str = Field(..., min_length=1, max_length=100, description="Plan display name")
    pricing_type: PricingType = Field(
        default=PricingType.SQUARE_FOOT,
        alias="pricingType",
        description="Square-foot or hourly plan"
    )

    # Square-foot rates
    base_rate_per_sq_ft: float = Field(
        default=0.10, ge=0, alias="baseRatePerSqFt",
        description="Base price per square foot per month-equivalent visit"
    )
    minimum_monthly_charge: float = Field(
        default=250.0, ge=0, alias="minimumMonthlyCharge",
        description="Floor that replaces any lower monthly total"
    )
    hourly_rate: float = Field(
        default=35.0, ge=0, alias="hourlyRate",
        description="Billed hourly rate (captured for audit)"
    )

    # Labor cost settings
    labor_cost_per_hour: float = Field(
        default=18.0, ge=0, alias="laborCostPerHour",
        description="Average hourly wage"
    )
    labor_burden_percentage: float = Field(
        default=0.25, ge=0, le=1, alias="laborBurdenPercentage",
        description="Payroll taxes and benefits as a share of base labor"
    )
    sqft_per_labor_hour: float = Field(
        default=2500.0, ge=0, alias="sqftPerLaborHour",
        description="Productivity rate"
    )

    # Overhead cost settings
    insurance_percentage: float = Field(default=0.08, ge=0, le=1, alias="insurancePercentage")
    admin_overhead_percentage: float = Field(default=0.12, ge=0, le=1, alias="adminOverheadPercentage")
    travel_cost_per_visit: float = Field(default=15.0, ge=0, alias="travelCostPerVisit")
    equipment_percentage: float = Field(default=0.05, ge=0, le=1, alias="equipmentPercentage")

    # Supply cost settings
    supply_cost_percentage: float = Field(
        default=0.04, ge=0, le=1, alias="supplyCostPercentage",
        description="Supplies as a share of labor plus overhead"
    )
    supply_cost_per_sq_ft: Optional[float] = Field(
        default=None, ge=0, alias="supplyCostPerSqFt",
        description="Flat per-sqft supply rate; replaces the percentage when set"
    )

    # Profit and revenue split
    target_profit_margin: float = Field(
        default=0.25, ge=0, lt=1, alias="targetProfitMargin",
        description="Target margin used for cost-to-price inversion, in [0, 1)"
    )
    subcontractor_percentage: Optional[float] = Field(
        default=None, ge=0, le=1, alias="subcontractorPercentage",
        description="Share of the monthly total paid to the subcontractor"
    )

    # Multiplier maps
    floor_type_multipliers: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_FLOOR_TYPE_MULTIPLIERS),
        alias="floorTypeMultipliers"
    )
    frequency_multipliers: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_FREQUENCY_MULTIPLIERS),
        alias="frequencyMultipliers"
    )
    condition_multipliers: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_CONDITION_MULTIPLIERS),
        alias="conditionMultipliers"
    )
    building_type_multipliers: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_BUILDING_TYPE_MULTIPLIERS),
        alias="buildingTypeMultipliers"
    )
    traffic_multipliers: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TRAFFIC_MULTIPLIERS),
        alias="trafficMultipliers"
    )
    task_complexity_add_ons: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TASK_COMPLEXITY_ADD_ONS),
        alias="taskComplexityAddOns"
    )

    is_active: bool = Field(default=True, alias="isActive")
    is_default: bool = Field(default=False, alias="isDefault")

    class Config:
        populate_by_name = True

    @field_validator(
        "floor_type_multipliers",
        "frequency_multipliers",
        "condition_multipliers",
        "building_type_multipliers",
        "traffic_multipliers",
        "task_complexity_add_ons",
    )
    @classmethod
    def validate_map_values(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Multipliers and add-ons must be non-negative."""
        for key, value in v.items():
            if value < 0:
                raise ValueError(f"Multiplier '{key}' must be non-negative, got {value}")
        return v

    @property
    def is_hourly(self) -> bool:
        return self.pricing_type == PricingType.HOURLY
