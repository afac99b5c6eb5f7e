"""Proposal Pricing Service for FacilityQuote.

Manages the pricing lock on proposals. A locked proposal keeps its
persisted services, totals and settings snapshot exactly as they were
computed; nothing is recalculated until it is explicitly unlocked.

Every mutation validates all guards before writing, and writes the
proposal once, so a rejected call leaves the stored record untouched.
"""

from typing import Optional

import structlog

from config.errors import (
    ErrorCode,
    PricingEngineError,
    PricingLockedError,
    PricingPlanNotFoundError,
    ProposalNotEditableError,
    ProposalNotFoundError,
    ValidationError,
)
from models.proposal import Proposal, ProposalService
from models.quote import PricingContext, QuoteResult
from services.frequency_service import round_money, round_money_decimal, to_decimal
from services.pricing_service import PricingService
from services.pricing_store import PricingStore
from strategies.base_strategy import Clock, utc_now

logger = structlog.get_logger()


class ProposalPricingService:
    """Lock, unlock, re-plan and recalculate proposal pricing."""

    def __init__(
        self,
        store: PricingStore,
        pricing_service: Optional[PricingService] = None,
        clock: Optional[Clock] = None,
    ):
        self.store = store
        self.pricing = pricing_service or PricingService(store)
        self._clock = clock or utc_now

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _get(self, proposal_id: str) -> Proposal:
        proposal = self.store.get_proposal(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(proposal_id)
        return proposal

    @staticmethod
    def _require_draft(proposal: Proposal, action: str) -> None:
        if not proposal.is_draft:
            raise ProposalNotEditableError(
                f"Can only {action} for draft proposals",
                proposal_id=proposal.id,
                status=proposal.status.value,
            )

    @staticmethod
    def _require_unlocked(proposal: Proposal, message: str) -> None:
        if proposal.pricing_locked:
            raise PricingLockedError(message, proposal_id=proposal.id)

    @staticmethod
    def _require_facility(proposal: Proposal, action: str) -> str:
        if not proposal.facility_id:
            raise PricingEngineError(
                code=ErrorCode.PROPOSAL_MISSING_FACILITY,
                message=f"Proposal must have a facility to {action}",
                details={"proposal_id": proposal.id},
            )
        return proposal.facility_id

    def _save(self, proposal: Proposal, **changes) -> Proposal:
        updated = proposal.model_copy(update=changes)
        return self.store.save_proposal(updated)

    # ------------------------------------------------------------------
    # Lock state
    # ------------------------------------------------------------------

    def lock_pricing(self, proposal_id: str, locked_by: Optional[str] = None) -> Proposal:
        proposal = self._get(proposal_id)
        self._require_unlocked(proposal, "Proposal pricing is already locked")

        saved = self._save(
            proposal,
            pricing_locked=True,
            pricing_locked_at=self._clock(),
            pricing_locked_by=locked_by,
        )
        logger.info("proposal_pricing_locked", proposal_id=proposal_id, locked_by=locked_by)
        return saved

    def unlock_pricing(self, proposal_id: str) -> Proposal:
        proposal = self._get(proposal_id)
        if not proposal.pricing_locked:
            raise PricingLockedError(
                "Proposal pricing is not locked",
                proposal_id=proposal.id,
                code=ErrorCode.PRICING_NOT_LOCKED,
            )
        self._require_draft(proposal, "unlock pricing")

        saved = self._save(
            proposal,
            pricing_locked=False,
            pricing_locked_at=None,
            pricing_locked_by=None,
        )
        logger.info("proposal_pricing_unlocked", proposal_id=proposal_id)
        return saved

    # ------------------------------------------------------------------
    # Strategy and plan
    # ------------------------------------------------------------------

    def change_strategy(self, proposal_id: str, strategy_key: str) -> Proposal:
        """Pin a strategy on the proposal; clears the stale snapshot."""
        proposal = self._get(proposal_id)
        self._require_draft(proposal, "change pricing strategy")
        self._require_unlocked(proposal, "Cannot change pricing strategy while pricing is locked")
        if not self.pricing.registry.has(strategy_key):
            raise ValidationError(
                f"Unknown pricing strategy '{strategy_key}'",
                field="pricing_strategy_key",
                details={"available": self.pricing.registry.list_keys()},
            )

        saved = self._save(
            proposal,
            pricing_strategy_key=strategy_key,
            pricing_strategy_version=None,
            pricing_snapshot=None,
        )
        logger.info("proposal_strategy_changed", proposal_id=proposal_id, strategy_key=strategy_key)
        return saved

    def change_plan(self, proposal_id: str, pricing_plan_id: str) -> Proposal:
        """Point the proposal at another plan; clears the stale snapshot."""
        proposal = self._get(proposal_id)
        self._require_draft(proposal, "change pricing plan")
        self._require_unlocked(proposal, "Cannot change pricing plan while pricing is locked")
        if self.store.get_pricing_plan(pricing_plan_id) is None:
            raise PricingPlanNotFoundError(message="Pricing plan not found", pricing_plan_id=pricing_plan_id)

        saved = self._save(proposal, pricing_plan_id=pricing_plan_id, pricing_snapshot=None)
        logger.info("proposal_plan_changed", proposal_id=proposal_id, pricing_plan_id=pricing_plan_id)
        return saved

    # ------------------------------------------------------------------
    # Recalculation
    # ------------------------------------------------------------------

    def recalculate_pricing(
        self,
        proposal_id: str,
        service_frequency: str,
        lock_after: bool = False,
        worker_count: Optional[int] = None,
    ) -> Proposal:
        """Reprice a draft, unlocked proposal from current facility data.

        Replaces services, totals, snapshot and strategy identity in one
        write. With lock_after the result is locked in the same write.
        """
        proposal = self._get(proposal_id)
        self._require_draft(proposal, "recalculate pricing")
        self._require_unlocked(proposal, "Cannot recalculate pricing while pricing is locked. Unlock first.")
        facility_id = self._require_facility(proposal, "recalculate pricing")

        context = PricingContext(
            facility_id=facility_id,
            service_frequency=service_frequency,
            pricing_plan_id=proposal.pricing_plan_id,
            worker_count=worker_count,
        )
        quote = self.pricing.calculate_pricing(context, proposal_id=proposal.id)
        lines = self.pricing.generate_proposal_services(context, proposal_id=proposal.id)

        services = [
            ProposalService(
                service_name=line.service_name,
                service_type=line.service_type,
                frequency=line.frequency,
                monthly_price=line.monthly_price,
                description=line.description,
                included_tasks=list(line.included_tasks),
                sort_order=index,
            )
            for index, line in enumerate(lines)
        ]

        subtotal = sum((to_decimal(s.monthly_price) for s in services), to_decimal(0))
        tax_amount = round_money_decimal(subtotal * to_decimal(proposal.tax_rate))
        total_amount = round_money_decimal(subtotal + tax_amount)

        saved = self._save(
            proposal,
            services=services,
            subtotal=round_money(subtotal),
            tax_amount=float(tax_amount),
            total_amount=float(total_amount),
            pricing_plan_id=quote.pricing_plan_id,
            pricing_strategy_key=quote.strategy_key,
            pricing_strategy_version=quote.strategy_version,
            pricing_snapshot=quote.settings_snapshot.to_dict(),
            pricing_locked=lock_after,
            pricing_locked_at=self._clock() if lock_after else None,
        )
        logger.info(
            "proposal_pricing_recalculated",
            proposal_id=proposal_id,
            strategy_key=quote.strategy_key,
            monthly_total=quote.monthly_total,
            services=len(services),
            locked=lock_after,
        )
        return saved

    def pricing_preview(
        self,
        proposal_id: str,
        service_frequency: str,
        pricing_plan_id: Optional[str] = None,
        worker_count: Optional[int] = None,
    ) -> QuoteResult:
        """Quote a proposal's facility without writing anything.

        Works on locked and non-draft proposals.
        """
        proposal = self._get(proposal_id)
        facility_id = self._require_facility(proposal, "preview pricing")

        context = PricingContext(
            facility_id=facility_id,
            service_frequency=service_frequency,
            pricing_plan_id=pricing_plan_id or proposal.pricing_plan_id,
            worker_count=worker_count,
        )
        return self.pricing.calculate_pricing(context, proposal_id=proposal.id)
