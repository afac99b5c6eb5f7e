"""Proposal models for FacilityQuote.

A proposal carries the persisted copy of a quote: service lines, totals,
the strategy identity and the settings snapshot used to produce them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProposalStatus(str, Enum):
    """Lifecycle state of a proposal."""

    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class ProposalService(BaseModel):
    """A persisted service line on a proposal."""

    service_name: str = Field(..., alias="serviceName")
    service_type: str = Field(default="monthly", alias="serviceType")
    frequency: str = Field(default="monthly")
    monthly_price: float = Field(default=0.0, ge=0, alias="monthlyPrice")
    description: Optional[str] = None
    included_tasks: List[str] = Field(default_factory=list, alias="includedTasks")
    sort_order: int = Field(default=0, alias="sortOrder")

    class Config:
        populate_by_name = True


class Proposal(BaseModel):
    """Proposal record with its pricing lock state."""

    id: str
    account_id: str = Field(..., alias="accountId")
    facility_id: Optional[str] = Field(default=None, alias="facilityId")
    title: str = ""
    status: ProposalStatus = Field(default=ProposalStatus.DRAFT)

    pricing_strategy_key: Optional[str] = Field(default=None, alias="pricingStrategyKey")
    pricing_strategy_version: Optional[str] = Field(default=None, alias="pricingStrategyVersion")
    pricing_plan_id: Optional[str] = Field(default=None, alias="pricingPlanId")
    pricing_snapshot: Optional[Dict[str, Any]] = Field(default=None, alias="pricingSnapshot")
    pricing_locked: bool = Field(default=False, alias="pricingLocked")
    pricing_locked_at: Optional[datetime] = Field(default=None, alias="pricingLockedAt")
    pricing_locked_by: Optional[str] = Field(default=None, alias="pricingLockedBy")

    subtotal: float = Field(default=0.0, ge=0)
    tax_rate: float = Field(default=0.0, ge=0, le=1, alias="taxRate")
    tax_amount: float = Field(default=0.0, ge=0, alias="taxAmount")
    total_amount: float = Field(default=0.0, ge=0, alias="totalAmount")

    services: List[ProposalService] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @property
    def is_draft(self) -> bool:
        return self.status == ProposalStatus.DRAFT
