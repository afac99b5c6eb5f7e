"""Base pricing strategy for FacilityQuote.

Abstract base class for all pricing strategies, plus the SnapshotBuilder
that captures the exact plan used for a quote.
"""

import copy
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

import structlog

from config.errors import (
    ErrorCode,
    FacilityNotFoundError,
    PricingEngineError,
    PricingPlanNotFoundError,
)
from config.settings import settings
from models.facility import Facility
from models.pricing_settings import PricingSettings
from models.quote import (
    FrequencyComparison,
    PricingContext,
    PricingSettingsSnapshot,
    ProposalServiceLine,
    QuoteResult,
    StrategyMetadata,
)
from services.frequency_service import (
    DEFAULT_COMPARISON_FREQUENCIES,
    round_money,
    round_money_decimal,
    to_decimal,
)
from services.pricing_store import PricingStore

logger = structlog.get_logger()


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotBuilder:
    """Captures an immutable copy of a pricing plan.

    Multiplier maps are deep-copied so later edits to the plan never
    reach a snapshot that has already been persisted.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or utc_now

    def build(
        self,
        plan: PricingSettings,
        worker_count: Optional[int] = None,
    ) -> PricingSettingsSnapshot:
        return PricingSettingsSnapshot(
            pricing_plan_id=plan.id,
            pricing_plan_name=plan.name,
            pricing_type=plan.pricing_type.value,
            base_rate_per_sq_ft=plan.base_rate_per_sq_ft,
            minimum_monthly_charge=plan.minimum_monthly_charge,
            hourly_rate=plan.hourly_rate,
            labor_cost_per_hour=plan.labor_cost_per_hour,
            labor_burden_percentage=plan.labor_burden_percentage,
            insurance_percentage=plan.insurance_percentage,
            admin_overhead_percentage=plan.admin_overhead_percentage,
            equipment_percentage=plan.equipment_percentage,
            supply_cost_percentage=plan.supply_cost_percentage,
            supply_cost_per_sq_ft=plan.supply_cost_per_sq_ft,
            travel_cost_per_visit=plan.travel_cost_per_visit,
            target_profit_margin=plan.target_profit_margin,
            subcontractor_percentage=plan.subcontractor_percentage,
            floor_type_multipliers=copy.deepcopy(plan.floor_type_multipliers),
            frequency_multipliers=copy.deepcopy(plan.frequency_multipliers),
            condition_multipliers=copy.deepcopy(plan.condition_multipliers),
            traffic_multipliers=copy.deepcopy(plan.traffic_multipliers),
            building_type_multipliers=copy.deepcopy(plan.building_type_multipliers),
            task_complexity_add_ons=copy.deepcopy(plan.task_complexity_add_ons),
            captured_at=self._clock().isoformat(),
            worker_count=worker_count,
        )


class BasePricingStrategy(ABC):
    """Abstract base class for pricing strategies.

    Provides:
    - Plan and facility loading through the PricingStore
    - Minimum-charge floor and subcontractor revenue split
    - Frequency comparison on top of quote()

    Subclasses must implement:
    - quote(context) - the strategy's pricing algorithm
    - generate_proposal_services(context) - proposal service lines
    """

    key: str = ""
    name: str = ""
    description: str = ""
    version: str = "1.0.0"

    def __init__(
        self,
        store: PricingStore,
        snapshot_builder: Optional[SnapshotBuilder] = None,
    ):
        """Initialize the strategy.

        Args:
            store: Persistence collaborator for facilities, tasks and plans.
            snapshot_builder: Optional builder (inject a fixed clock in tests).
        """
        self.store = store
        self.snapshots = snapshot_builder or SnapshotBuilder()

    @abstractmethod
    def quote(self, context: PricingContext) -> QuoteResult:
        """Compute a full pricing breakdown for a facility."""
        pass

    @abstractmethod
    def generate_proposal_services(self, context: PricingContext) -> List[ProposalServiceLine]:
        """Turn a quote into proposal service lines."""
        pass

    def compare_frequencies(
        self,
        facility_id: str,
        frequencies: Optional[List[str]] = None,
        pricing_plan_id: Optional[str] = None,
    ) -> List[FrequencyComparison]:
        """Quote the same facility at several frequencies."""
        results = []
        for frequency in frequencies or DEFAULT_COMPARISON_FREQUENCIES:
            quote = self.quote(PricingContext(
                facility_id=facility_id,
                service_frequency=frequency,
                pricing_plan_id=pricing_plan_id,
            ))
            results.append(FrequencyComparison(frequency=frequency, monthly_total=quote.monthly_total))
        return results

    def metadata(self, is_default: bool = False) -> StrategyMetadata:
        return StrategyMetadata(
            key=self.key,
            name=self.name,
            description=self.description,
            version=self.version,
            is_default=is_default,
            is_active=True,
        )

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def resolve_plan(self, context: PricingContext) -> PricingSettings:
        """Load the plan named by the context, or the active default plan.

        Raises:
            PricingPlanNotFoundError: If no plan can be resolved.
        """
        if context.pricing_plan_id:
            plan = self.store.get_pricing_plan(context.pricing_plan_id)
            if plan is None:
                raise PricingPlanNotFoundError(
                    message="Pricing plan not found",
                    pricing_plan_id=context.pricing_plan_id,
                )
            return plan

        plan = self.store.get_default_pricing_plan()
        if plan is None:
            raise PricingPlanNotFoundError(
                message="No pricing plan found. Please configure pricing plans first."
            )
        return plan

    def load_facility(self, facility_id: str) -> Facility:
        facility = self.store.get_facility(facility_id)
        if facility is None:
            raise FacilityNotFoundError(facility_id)
        return facility

    @staticmethod
    def check_profit_margin(plan: PricingSettings) -> float:
        """Return the plan margin, rejecting values that would break inversion."""
        margin = plan.target_profit_margin
        if margin < 0 or margin >= 1:
            raise PricingEngineError(
                code=ErrorCode.INVALID_PROFIT_MARGIN,
                message="Target profit margin must be in [0, 1)",
                details={"pricing_plan_id": plan.id, "target_profit_margin": margin},
            )
        return margin

    @staticmethod
    def apply_minimum(monthly_total: float, plan: PricingSettings) -> Tuple[float, bool]:
        """Replace a below-minimum total with the plan minimum."""
        if monthly_total < plan.minimum_monthly_charge:
            return round_money(plan.minimum_monthly_charge), True
        return monthly_total, False

    @staticmethod
    def split_revenue(
        monthly_total: float,
        plan: PricingSettings,
        override: Optional[float] = None,
    ) -> Tuple[float, float, float]:
        """Split the final total between subcontractor and company.

        The payout is rounded; company revenue is the exact residual so
        payout + revenue always equals the total to the cent.

        Returns:
            Tuple of (percentage, payout, company_revenue).
        """
        if override is not None:
            percentage = override
        elif plan.subcontractor_percentage is not None:
            percentage = plan.subcontractor_percentage
        else:
            percentage = settings.default_subcontractor_percentage

        total = round_money_decimal(monthly_total)
        payout = round_money_decimal(total * to_decimal(percentage))
        revenue = total - payout
        return float(percentage), float(payout), float(revenue)

    @staticmethod
    def sum_money(values) -> float:
        """Exact sum of already-rounded money values."""
        return float(sum((to_decimal(v) for v in values), Decimal("0")))
