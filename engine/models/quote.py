"""Quote result Pydantic models for FacilityQuote.

This module defines the request context, per-area breakdown rows,
the aggregate cost breakdown, the settings snapshot used for audit and
pricing lock, and the immutable QuoteResult returned by strategies.
"""

import json
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, model_validator


SNAPSHOT_VERSION = "1"


# =============================================================================
# REQUEST CONTEXT
# =============================================================================


class PricingContext(BaseModel):
    """Inputs to a single quote."""

    facility_id: str = Field(..., alias="facilityId")
    service_frequency: str = Field(..., alias="serviceFrequency")
    task_complexity: str = Field(default="standard", alias="taskComplexity")
    pricing_plan_id: Optional[str] = Field(default=None, alias="pricingPlanId")
    worker_count: int = Field(
        default=1, ge=1, alias="workerCount",
        description="Recorded in the snapshot; never scales the price"
    )
    subcontractor_percentage_override: Optional[float] = Field(
        default=None, ge=0, le=1, alias="subcontractorPercentageOverride"
    )

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def drop_null_defaults(cls, data: Any) -> Any:
        """Treat explicit None for defaulted fields as 'not provided'."""
        if isinstance(data, dict):
            for key in ("task_complexity", "taskComplexity", "worker_count", "workerCount"):
                if key in data and data[key] is None:
                    data = {k: v for k, v in data.items() if k != key}
        return data


# =============================================================================
# PER-AREA ROWS
# =============================================================================


class AreaPriceRow(BaseModel):
    """Square-footage strategy row. Money values are rounded per row."""

    area_id: str = Field(..., alias="areaId")
    area_name: str = Field(..., alias="areaName")
    area_type_name: str = Field(..., alias="areaTypeName")
    square_feet: float = Field(..., alias="squareFeet")
    floor_type: str = Field(..., alias="floorType")
    condition_level: str = Field(..., alias="conditionLevel")
    quantity: int
    base_price: float = Field(..., alias="basePrice")
    floor_multiplier: float = Field(..., alias="floorMultiplier")
    condition_multiplier: float = Field(..., alias="conditionMultiplier")
    frequency_multiplier: float = Field(..., alias="frequencyMultiplier")
    task_complexity_add_on: float = Field(..., alias="taskComplexityAddOn")
    price_before_frequency: float = Field(..., alias="priceBeforeFrequency")
    area_total: float = Field(..., alias="areaTotal")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def monthly_price(self) -> float:
        return self.area_total


class AreaCostRow(BaseModel):
    """Per-hour strategy row with the full monthly cost stack."""

    area_id: str = Field(..., alias="areaId")
    area_name: str = Field(..., alias="areaName")
    area_type_name: str = Field(..., alias="areaTypeName")
    square_feet: float = Field(..., alias="squareFeet")
    floor_type: str = Field(..., alias="floorType")
    condition_level: str = Field(..., alias="conditionLevel")
    traffic_level: str = Field(..., alias="trafficLevel")
    quantity: int

    # Labor
    labor_minutes: float = Field(..., alias="laborMinutes")
    base_labor_hours: float = Field(..., alias="baseLaborHours")
    labor_hours: float = Field(..., alias="laborHours")
    labor_cost_base: float = Field(..., alias="laborCostBase")
    labor_burden: float = Field(..., alias="laborBurden")
    total_labor_cost: float = Field(..., alias="totalLaborCost")

    # Overhead
    insurance_cost: float = Field(..., alias="insuranceCost")
    admin_overhead_cost: float = Field(..., alias="adminOverheadCost")
    equipment_cost: float = Field(..., alias="equipmentCost")
    supply_cost: float = Field(..., alias="supplyCost")
    total_cost: float = Field(..., alias="totalCost")

    # Multipliers applied to hours
    floor_multiplier: float = Field(..., alias="floorMultiplier")
    condition_multiplier: float = Field(..., alias="conditionMultiplier")
    traffic_multiplier: float = Field(..., alias="trafficMultiplier")

    monthly_visits: float = Field(..., alias="monthlyVisits")
    monthly_price: float = Field(..., alias="monthlyPrice")

    class Config:
        populate_by_name = True
        frozen = True


AreaRow = Union[AreaCostRow, AreaPriceRow]


class CostBreakdown(BaseModel):
    """Aggregate monthly cost stack (per-hour strategy)."""

    total_labor_hours: float = Field(default=0.0, alias="totalLaborHours")
    total_labor_cost: float = Field(default=0.0, alias="totalLaborCost")
    total_insurance_cost: float = Field(default=0.0, alias="totalInsuranceCost")
    total_admin_overhead_cost: float = Field(default=0.0, alias="totalAdminOverheadCost")
    total_equipment_cost: float = Field(default=0.0, alias="totalEquipmentCost")
    total_supply_cost: float = Field(default=0.0, alias="totalSupplyCost")
    total_travel_cost: float = Field(default=0.0, alias="totalTravelCost")
    total_cost: float = Field(default=0.0, alias="totalCost")

    class Config:
        populate_by_name = True
        frozen = True


# =============================================================================
# SETTINGS SNAPSHOT
# =============================================================================


class PricingSettingsSnapshot(BaseModel):
    """Immutable copy of the plan used for a quote.

    This is the audit-of-record persisted with a proposal. The shape is
    versioned and must stay stable; it is never re-derived from live
    settings.
    """

    snapshot_version: str = Field(default=SNAPSHOT_VERSION, alias="snapshotVersion")
    pricing_plan_id: str = Field(..., alias="pricingPlanId")
    pricing_plan_name: str = Field(..., alias="pricingPlanName")
    pricing_type: str = Field(..., alias="pricingType")
    base_rate_per_sq_ft: float = Field(..., alias="baseRatePerSqFt")
    minimum_monthly_charge: float = Field(..., alias="minimumMonthlyCharge")
    hourly_rate: Optional[float] = Field(default=None, alias="hourlyRate")
    labor_cost_per_hour: Optional[float] = Field(default=None, alias="laborCostPerHour")
    labor_burden_percentage: Optional[float] = Field(default=None, alias="laborBurdenPercentage")
    insurance_percentage: Optional[float] = Field(default=None, alias="insurancePercentage")
    admin_overhead_percentage: Optional[float] = Field(default=None, alias="adminOverheadPercentage")
    equipment_percentage: Optional[float] = Field(default=None, alias="equipmentPercentage")
    supply_cost_percentage: Optional[float] = Field(default=None, alias="supplyCostPercentage")
    supply_cost_per_sq_ft: Optional[float] = Field(default=None, alias="supplyCostPerSqFt")
    travel_cost_per_visit: Optional[float] = Field(default=None, alias="travelCostPerVisit")
    target_profit_margin: Optional[float] = Field(default=None, alias="targetProfitMargin")
    subcontractor_percentage: Optional[float] = Field(default=None, alias="subcontractorPercentage")
    floor_type_multipliers: Dict[str, float] = Field(default_factory=dict, alias="floorTypeMultipliers")
    frequency_multipliers: Dict[str, float] = Field(default_factory=dict, alias="frequencyMultipliers")
    condition_multipliers: Dict[str, float] = Field(default_factory=dict, alias="conditionMultipliers")
    traffic_multipliers: Dict[str, float] = Field(default_factory=dict, alias="trafficMultipliers")
    building_type_multipliers: Dict[str, float] = Field(default_factory=dict, alias="buildingTypeMultipliers")
    task_complexity_add_ons: Dict[str, float] = Field(default_factory=dict, alias="taskComplexityAddOns")
    captured_at: str = Field(..., alias="capturedAt", description="ISO-8601 capture timestamp")
    worker_count: Optional[int] = Field(default=None, alias="workerCount")

    class Config:
        populate_by_name = True
        frozen = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted camelCase shape."""
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        """Serialize deterministically (sorted keys, no whitespace)."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PricingSettingsSnapshot":
        return cls.model_validate(data)


# =============================================================================
# QUOTE RESULT
# =============================================================================


class QuoteResult(BaseModel):
    """Complete, immutable pricing breakdown for one quote call."""

    facility_id: str = Field(..., alias="facilityId")
    facility_name: str = Field(..., alias="facilityName")
    building_type: str = Field(..., alias="buildingType")
    building_multiplier: float = Field(default=1.0, alias="buildingMultiplier")
    service_frequency: str = Field(..., alias="serviceFrequency")
    total_square_feet: float = Field(..., alias="totalSquareFeet")

    areas: List[AreaRow] = Field(default_factory=list)
    cost_breakdown: Optional[CostBreakdown] = Field(default=None, alias="costBreakdown")

    monthly_visits: Optional[float] = Field(default=None, alias="monthlyVisits")
    monthly_cost_before_profit: Optional[float] = Field(default=None, alias="monthlyCostBeforeProfit")
    profit_amount: float = Field(default=0.0, alias="profitAmount")
    profit_margin_applied: float = Field(default=0.0, alias="profitMarginApplied")

    building_adjustment: float = Field(default=0.0, alias="buildingAdjustment")
    task_complexity_add_on: float = Field(default=0.0, alias="taskComplexityAddOn")
    task_complexity_amount: float = Field(default=0.0, alias="taskComplexityAmount")

    subtotal: float
    monthly_total: float = Field(..., ge=0, alias="monthlyTotal")
    minimum_applied: bool = Field(..., alias="minimumApplied")

    subcontractor_percentage: float = Field(..., ge=0, le=1, alias="subcontractorPercentage")
    subcontractor_payout: float = Field(..., alias="subcontractorPayout")
    company_revenue: float = Field(..., alias="companyRevenue")

    pricing_plan_id: str = Field(..., alias="pricingPlanId")
    pricing_plan_name: str = Field(..., alias="pricingPlanName")
    strategy_key: str = Field(..., alias="strategyKey")
    strategy_version: str = Field(..., alias="strategyVersion")
    settings_snapshot: PricingSettingsSnapshot = Field(..., alias="settingsSnapshot")

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def validate_revenue_split(self) -> "QuoteResult":
        """Payout plus company revenue must equal the monthly total to the cent."""
        payout = Decimal(str(self.subcontractor_payout))
        revenue = Decimal(str(self.company_revenue))
        total = Decimal(str(self.monthly_total))
        if payout + revenue != total:
            raise ValueError(
                f"Revenue split does not add up: payout={payout}, "
                f"revenue={revenue}, total={total}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(by_alias=True)


# =============================================================================
# STRATEGY METADATA / DERIVED OUTPUTS
# =============================================================================


class StrategyMetadata(BaseModel):
    """Static registration data for a pricing strategy."""

    key: str
    name: str
    description: str
    version: str
    is_default: bool = Field(default=False, alias="isDefault")
    is_active: bool = Field(default=True, alias="isActive")

    class Config:
        populate_by_name = True
        frozen = True


class ProposalServiceLine(BaseModel):
    """Proposal service line generated from a quote."""

    service_name: str = Field(..., alias="serviceName")
    service_type: str = Field(..., alias="serviceType")
    frequency: str
    monthly_price: float = Field(..., alias="monthlyPrice")
    description: str
    included_tasks: List[str] = Field(default_factory=list, alias="includedTasks")

    class Config:
        populate_by_name = True


class FrequencyComparison(BaseModel):
    """One entry of a frequency comparison."""

    frequency: str
    monthly_total: float = Field(..., alias="monthlyTotal")

    class Config:
        populate_by_name = True


class FacilityReadiness(BaseModel):
    """Whether a facility has enough data to be priced."""

    is_ready: bool = Field(..., alias="isReady")
    reason: Optional[str] = None
    area_count: int = Field(default=0, alias="areaCount")
    total_square_feet: float = Field(default=0.0, alias="totalSquareFeet")

    class Config:
        populate_by_name = True
