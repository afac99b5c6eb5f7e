"""Facility graph models for FacilityQuote.

Account -> Facility -> Area -> FixtureInstance, plus the FacilityTask /
TaskTemplate pair that drives labor-minute pricing.

Missing area attributes are normalized on load the same way every
strategy expects them: floor 'vct', condition 'standard', traffic
'medium', quantity 1.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from models.pricing_settings import ConditionLevel, FloorType, TrafficLevel


FACILITY_WIDE_AREA_ID = "facility-wide"
FACILITY_WIDE_AREA_NAME = "Facility-Wide"


# =============================================================================
# ACCOUNT / FACILITY
# =============================================================================


class Account(BaseModel):
    """Customer account; the outermost pricing scope."""

    id: str
    name: str = ""
    default_pricing_strategy_key: Optional[str] = Field(default=None, alias="defaultPricingStrategyKey")
    default_pricing_plan_id: Optional[str] = Field(default=None, alias="defaultPricingPlanId")

    class Config:
        populate_by_name = True


class FixtureInstance(BaseModel):
    """Countable fixture in an area (toilet, sink, desk...)."""

    fixture_type_id: str = Field(..., alias="fixtureTypeId")
    name: Optional[str] = Field(default=None, description="Fixture type display name")
    count: int = Field(default=0, ge=0)
    minutes_per_item: Optional[float] = Field(
        default=None, ge=0, alias="minutesPerItem",
        description="Direct per-item minutes, independent of tasks"
    )

    class Config:
        populate_by_name = True


class Area(BaseModel):
    """A priced area of a facility."""

    id: str
    name: Optional[str] = None
    area_type_name: str = Field(default="Area", alias="areaTypeName")
    square_feet: float = Field(default=0.0, ge=0, alias="squareFeet")
    quantity: int = Field(default=1, ge=1)
    floor_type: str = Field(default=FloorType.VCT.value, alias="floorType")
    condition_level: str = Field(default=ConditionLevel.STANDARD.value, alias="conditionLevel")
    traffic_level: str = Field(default=TrafficLevel.MEDIUM.value, alias="trafficLevel")
    room_count: int = Field(default=0, ge=0, alias="roomCount")
    unit_count: int = Field(default=0, ge=0, alias="unitCount")
    fixtures: List[FixtureInstance] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @field_validator("square_feet", mode="before")
    @classmethod
    def default_square_feet(cls, v):
        return 0.0 if v is None else v

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, v):
        # Zero or missing quantity counts as a single area
        return v if v else 1

    @field_validator("floor_type", mode="before")
    @classmethod
    def default_floor_type(cls, v):
        return v or FloorType.VCT.value

    @field_validator("condition_level", mode="before")
    @classmethod
    def default_condition_level(cls, v):
        return v or ConditionLevel.STANDARD.value

    @field_validator("traffic_level", mode="before")
    @classmethod
    def default_traffic_level(cls, v):
        return v or TrafficLevel.MEDIUM.value

    @field_validator("room_count", "unit_count", mode="before")
    @classmethod
    def default_counts(cls, v):
        return v or 0

    @property
    def display_name(self) -> str:
        return self.name or self.area_type_name

    @property
    def total_square_feet(self) -> float:
        return self.square_feet * self.quantity


class Facility(BaseModel):
    """A serviced building with its areas and pricing scope defaults."""

    id: str
    name: str = ""
    account_id: Optional[str] = Field(default=None, alias="accountId")
    building_type: Optional[str] = Field(default=None, alias="buildingType")
    status: str = Field(default="active")
    timezone: Optional[str] = Field(default=None, description="IANA timezone of the site")
    default_pricing_strategy_key: Optional[str] = Field(default=None, alias="defaultPricingStrategyKey")
    default_pricing_plan_id: Optional[str] = Field(default=None, alias="defaultPricingPlanId")
    areas: List[Area] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @property
    def total_square_feet(self) -> float:
        return sum(area.total_square_feet for area in self.areas)


# =============================================================================
# TASKS
# =============================================================================


class TaskTemplate(BaseModel):
    """Reusable task definition with default per-occurrence minutes."""

    id: str
    name: str = ""
    base_minutes: float = Field(default=0.0, ge=0, alias="baseMinutes")
    per_sqft_minutes: float = Field(default=0.0, ge=0, alias="perSqftMinutes")
    per_unit_minutes: float = Field(default=0.0, ge=0, alias="perUnitMinutes")
    per_room_minutes: float = Field(default=0.0, ge=0, alias="perRoomMinutes")
    fixture_minutes: Dict[str, float] = Field(
        default_factory=dict, alias="fixtureMinutes",
        description="Minutes per fixture, keyed by fixture type ID"
    )

    class Config:
        populate_by_name = True


class FacilityTask(BaseModel):
    """A task scheduled at a facility, optionally bound to one area.

    Override fields win over the template; unset values on both fall
    back to zero.
    """

    id: str
    facility_id: Optional[str] = Field(default=None, alias="facilityId")
    area_id: Optional[str] = Field(default=None, alias="areaId")
    custom_name: Optional[str] = Field(default=None, alias="customName")
    cleaning_frequency: str = Field(default="weekly", alias="cleaningFrequency")
    priority: int = Field(default=0)
    template: Optional[TaskTemplate] = None
    base_minutes_override: Optional[float] = Field(default=None, ge=0, alias="baseMinutesOverride")
    per_sqft_minutes_override: Optional[float] = Field(default=None, ge=0, alias="perSqftMinutesOverride")
    per_unit_minutes_override: Optional[float] = Field(default=None, ge=0, alias="perUnitMinutesOverride")
    per_room_minutes_override: Optional[float] = Field(default=None, ge=0, alias="perRoomMinutesOverride")
    fixture_minutes_overrides: Dict[str, float] = Field(
        default_factory=dict, alias="fixtureMinutesOverrides"
    )

    class Config:
        populate_by_name = True

    @property
    def display_name(self) -> str:
        if self.custom_name:
            return self.custom_name
        if self.template and self.template.name:
            return self.template.name
        return "Unnamed Task"
