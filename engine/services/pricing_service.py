"""Pricing Service for FacilityQuote.

Entry point for quoting. Resolves the pricing plan and strategy for a
request through the scope chain, then delegates to the strategy.

Strategy selection uses one authoritative rule:
1. An explicit key on the request wins.
2. Otherwise the first key set on proposal, facility or account wins.
3. Otherwise the plan's pricing type decides (hourly -> per_hour_v1),
   falling back to the system default key.

When a chosen key disagrees with the plan's pricing type the conflict
is logged and the chosen key is kept.
"""

from typing import List, Optional, Tuple

import structlog

from config.errors import PricingPlanNotFoundError
from models.pricing_settings import PricingSettings, PricingType
from models.quote import (
    FacilityReadiness,
    FrequencyComparison,
    PricingContext,
    ProposalServiceLine,
    QuoteResult,
)
from services.pricing_store import PricingStore
from strategies.base_strategy import BasePricingStrategy
from strategies.per_hour_v1 import PER_HOUR_V1
from strategies.registry import (
    PricingScope,
    PricingStrategyRegistry,
    resolve_plan_id,
    resolve_strategy_key,
)

logger = structlog.get_logger()


class PricingService:
    """Resolves plan and strategy for a request and runs the quote."""

    def __init__(
        self,
        store: PricingStore,
        registry: Optional[PricingStrategyRegistry] = None,
    ):
        """Initialize PricingService.

        Args:
            store: Persistence collaborator.
            registry: Optional strategy registry; built from the store if omitted.
        """
        self.store = store
        self.registry = registry or PricingStrategyRegistry(store)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def build_scope(
        self,
        facility_id: Optional[str] = None,
        account_id: Optional[str] = None,
        proposal_id: Optional[str] = None,
    ) -> PricingScope:
        """Collect nullable overrides from proposal, facility and account.

        A proposal contributes its facility and account when they are not
        given explicitly; a facility contributes its account.
        """
        proposal = self.store.get_proposal(proposal_id) if proposal_id else None
        if proposal is not None:
            facility_id = facility_id or proposal.facility_id
            account_id = account_id or proposal.account_id

        facility = self.store.get_facility(facility_id) if facility_id else None
        if facility is not None:
            account_id = account_id or facility.account_id

        account = self.store.get_account(account_id) if account_id else None

        return PricingScope(
            proposal_strategy_key=proposal.pricing_strategy_key if proposal else None,
            proposal_plan_id=proposal.pricing_plan_id if proposal else None,
            facility_strategy_key=facility.default_pricing_strategy_key if facility else None,
            facility_plan_id=facility.default_pricing_plan_id if facility else None,
            account_strategy_key=account.default_pricing_strategy_key if account else None,
            account_plan_id=account.default_pricing_plan_id if account else None,
        )

    def resolve_plan(
        self,
        scope: PricingScope,
        pricing_plan_id: Optional[str] = None,
    ) -> PricingSettings:
        """Load the plan for a request.

        Raises:
            PricingPlanNotFoundError: If the resolved id is unknown or no
                active default plan exists.
        """
        plan_id = pricing_plan_id or resolve_plan_id(scope)
        if plan_id:
            plan = self.store.get_pricing_plan(plan_id)
            if plan is None:
                raise PricingPlanNotFoundError(message="Pricing plan not found", pricing_plan_id=plan_id)
            return plan

        plan = self.store.get_default_pricing_plan()
        if plan is None:
            raise PricingPlanNotFoundError(
                message="No pricing plan found. Please configure pricing plans first."
            )
        return plan

    def select_strategy(
        self,
        scope: PricingScope,
        plan: PricingSettings,
        strategy_key: Optional[str] = None,
    ) -> BasePricingStrategy:
        """Pick the single strategy for a request."""
        chosen = strategy_key or scope.strategy_key
        plan_key = PER_HOUR_V1 if plan.pricing_type == PricingType.HOURLY else None

        if chosen is None:
            chosen = plan_key or resolve_strategy_key(scope, self.registry.default_key)
        elif plan_key and chosen != plan_key:
            logger.warning(
                "strategy_plan_type_conflict",
                strategy_key=chosen,
                pricing_plan_id=plan.id,
                pricing_type=plan.pricing_type.value,
            )

        return self.registry.get_or_default(chosen)

    def resolve(
        self,
        context: PricingContext,
        strategy_key: Optional[str] = None,
        proposal_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> Tuple[BasePricingStrategy, PricingContext]:
        """Resolve strategy and plan; return the strategy and a pinned context."""
        scope = self.build_scope(
            facility_id=context.facility_id,
            account_id=account_id,
            proposal_id=proposal_id,
        )
        plan = self.resolve_plan(scope, context.pricing_plan_id)
        strategy = self.select_strategy(scope, plan, strategy_key)
        pinned = context.model_copy(update={"pricing_plan_id": plan.id})
        return strategy, pinned

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def calculate_pricing(
        self,
        context: PricingContext,
        strategy_key: Optional[str] = None,
        proposal_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> QuoteResult:
        """Quote a facility with the resolved strategy and plan."""
        strategy, pinned = self.resolve(context, strategy_key, proposal_id, account_id)
        result = strategy.quote(pinned)

        logger.info(
            "quote_calculated",
            facility_id=result.facility_id,
            strategy_key=result.strategy_key,
            pricing_plan_id=result.pricing_plan_id,
            service_frequency=result.service_frequency,
            monthly_total=result.monthly_total,
            minimum_applied=result.minimum_applied,
        )
        return result

    def generate_proposal_services(
        self,
        context: PricingContext,
        strategy_key: Optional[str] = None,
        proposal_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> List[ProposalServiceLine]:
        strategy, pinned = self.resolve(context, strategy_key, proposal_id, account_id)
        services = strategy.generate_proposal_services(pinned)
        logger.info(
            "proposal_services_generated",
            facility_id=context.facility_id,
            strategy_key=strategy.key,
            services=len(services),
        )
        return services

    def compare_frequencies(
        self,
        facility_id: str,
        frequencies: Optional[List[str]] = None,
        strategy_key: Optional[str] = None,
    ) -> List[FrequencyComparison]:
        """Monthly totals for the same facility at several frequencies."""
        strategy, pinned = self.resolve(
            PricingContext(facility_id=facility_id, service_frequency="1x_week"),
            strategy_key=strategy_key,
        )
        return strategy.compare_frequencies(facility_id, frequencies, pinned.pricing_plan_id)

    def is_facility_ready(self, facility_id: str) -> FacilityReadiness:
        """Check that a facility has areas with square footage to price."""
        facility = self.store.get_facility(facility_id)
        if facility is None:
            return FacilityReadiness(is_ready=False, reason="Facility not found")

        area_count = len(facility.areas)
        total_sqft = facility.total_square_feet
        if area_count == 0:
            return FacilityReadiness(is_ready=False, reason="Facility has no areas defined")
        if total_sqft <= 0:
            return FacilityReadiness(
                is_ready=False,
                reason="Facility areas have no square footage",
                area_count=area_count,
            )
        return FacilityReadiness(is_ready=True, area_count=area_count, total_square_feet=total_sqft)
