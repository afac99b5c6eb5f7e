"""FacilityQuote data models."""

from models.pricing_settings import PricingSettings, PricingType
from models.facility import Account, Area, Facility, FacilityTask, FixtureInstance, TaskTemplate
from models.quote import (
    AreaCostRow,
    AreaPriceRow,
    CostBreakdown,
    PricingContext,
    PricingSettingsSnapshot,
    QuoteResult,
    StrategyMetadata,
)
from models.proposal import Proposal, ProposalService, ProposalStatus
from models.invoice import Contract, Invoice, InvoiceItem

__all__ = [
    "PricingSettings",
    "PricingType",
    "Account",
    "Area",
    "Facility",
    "FacilityTask",
    "FixtureInstance",
    "TaskTemplate",
    "AreaCostRow",
    "AreaPriceRow",
    "CostBreakdown",
    "PricingContext",
    "PricingSettingsSnapshot",
    "QuoteResult",
    "StrategyMetadata",
    "Proposal",
    "ProposalService",
    "ProposalStatus",
    "Contract",
    "Invoice",
    "InvoiceItem",
]
