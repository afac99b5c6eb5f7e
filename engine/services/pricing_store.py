"""Persistence collaborator for FacilityQuote.

The engine never talks to a database directly. Strategies and services
receive a PricingStore and read already-validated records through it.
InMemoryPricingStore backs tests, the CLI and embedding callers.
"""

import copy
import json
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import structlog

from models.facility import Account, Facility, FacilityTask
from models.invoice import INACTIVE_INVOICE_STATUSES, Contract, ContractStatus, Invoice
from models.pricing_settings import PricingSettings
from models.proposal import Proposal

logger = structlog.get_logger()


class PricingStore(ABC):
    """Read/write interface the pricing engine depends on."""

    # Facility graph

    @abstractmethod
    def get_facility(self, facility_id: str) -> Optional[Facility]:
        ...

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        ...

    @abstractmethod
    def list_facility_tasks(self, facility_id: str) -> List[FacilityTask]:
        """Tasks for a facility ordered by (cleaning_frequency, priority)."""

    # Pricing plans

    @abstractmethod
    def get_pricing_plan(self, plan_id: str) -> Optional[PricingSettings]:
        ...

    @abstractmethod
    def get_default_pricing_plan(self) -> Optional[PricingSettings]:
        """Active plan flagged as default, else any active plan, else None."""

    # Proposals

    @abstractmethod
    def get_proposal(self, proposal_id: str) -> Optional[Proposal]:
        ...

    @abstractmethod
    def save_proposal(self, proposal: Proposal) -> Proposal:
        ...

    # Contracts and invoices

    @abstractmethod
    def get_contract(self, contract_id: str) -> Optional[Contract]:
        ...

    @abstractmethod
    def list_active_contracts(self) -> List[Contract]:
        ...

    @abstractmethod
    def find_overlapping_invoice(
        self,
        start: date,
        end: date,
        contract_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> Optional[Invoice]:
        """First non-void invoice whose period intersects [start, end]."""

    @abstractmethod
    def save_invoice(self, invoice: Invoice) -> Invoice:
        ...

    @abstractmethod
    def next_invoice_number(self, year: int) -> str:
        ...


class InMemoryPricingStore(PricingStore):
    """Dictionary-backed PricingStore.

    Records are deep-copied on the way in and out so callers cannot
    mutate stored state behind the store's back.
    """

    INVOICE_PREFIX = "INV"

    def __init__(
        self,
        accounts: Optional[Iterable[Account]] = None,
        facilities: Optional[Iterable[Facility]] = None,
        tasks: Optional[Iterable[FacilityTask]] = None,
        pricing_plans: Optional[Iterable[PricingSettings]] = None,
        proposals: Optional[Iterable[Proposal]] = None,
        contracts: Optional[Iterable[Contract]] = None,
        invoices: Optional[Iterable[Invoice]] = None,
    ):
        self._accounts: Dict[str, Account] = {a.id: copy.deepcopy(a) for a in accounts or []}
        self._facilities: Dict[str, Facility] = {f.id: copy.deepcopy(f) for f in facilities or []}
        self._tasks: List[FacilityTask] = copy.deepcopy(list(tasks or []))
        self._plans: Dict[str, PricingSettings] = {p.id: copy.deepcopy(p) for p in pricing_plans or []}
        self._proposals: Dict[str, Proposal] = {p.id: copy.deepcopy(p) for p in proposals or []}
        self._contracts: Dict[str, Contract] = {c.id: copy.deepcopy(c) for c in contracts or []}
        self._invoices: Dict[str, Invoice] = {i.id: copy.deepcopy(i) for i in invoices or []}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryPricingStore":
        """Build a store from a camelCase dataset document.

        Expected keys (all optional): accounts, facilities, tasks,
        pricingPlans, proposals, contracts, invoices.
        """
        return cls(
            accounts=[Account.model_validate(a) for a in data.get("accounts", [])],
            facilities=[Facility.model_validate(f) for f in data.get("facilities", [])],
            tasks=[FacilityTask.model_validate(t) for t in data.get("tasks", [])],
            pricing_plans=[PricingSettings.model_validate(p) for p in data.get("pricingPlans", [])],
            proposals=[Proposal.model_validate(p) for p in data.get("proposals", [])],
            contracts=[Contract.model_validate(c) for c in data.get("contracts", [])],
            invoices=[Invoice.model_validate(i) for i in data.get("invoices", [])],
        )

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryPricingStore":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        store = cls.from_dict(data)
        logger.info(
            "pricing_store_loaded",
            path=str(path),
            facilities=len(store._facilities),
            pricing_plans=len(store._plans),
        )
        return store

    # ------------------------------------------------------------------
    # Writers used by tests and seeding
    # ------------------------------------------------------------------

    def add_account(self, account: Account) -> None:
        self._accounts[account.id] = copy.deepcopy(account)

    def add_facility(self, facility: Facility) -> None:
        self._facilities[facility.id] = copy.deepcopy(facility)

    def add_task(self, task: FacilityTask) -> None:
        self._tasks.append(copy.deepcopy(task))

    def add_pricing_plan(self, plan: PricingSettings) -> None:
        self._plans[plan.id] = copy.deepcopy(plan)

    def add_contract(self, contract: Contract) -> None:
        self._contracts[contract.id] = copy.deepcopy(contract)

    def list_invoices(self) -> List[Invoice]:
        return [copy.deepcopy(i) for i in self._invoices.values()]

    # ------------------------------------------------------------------
    # PricingStore
    # ------------------------------------------------------------------

    def get_facility(self, facility_id: str) -> Optional[Facility]:
        facility = self._facilities.get(facility_id)
        return copy.deepcopy(facility) if facility else None

    def get_account(self, account_id: str) -> Optional[Account]:
        account = self._accounts.get(account_id)
        return copy.deepcopy(account) if account else None

    def list_facility_tasks(self, facility_id: str) -> List[FacilityTask]:
        tasks = [t for t in self._tasks if t.facility_id == facility_id]
        tasks.sort(key=lambda t: (t.cleaning_frequency, t.priority))
        return copy.deepcopy(tasks)

    def get_pricing_plan(self, plan_id: str) -> Optional[PricingSettings]:
        plan = self._plans.get(plan_id)
        return copy.deepcopy(plan) if plan else None

    def get_default_pricing_plan(self) -> Optional[PricingSettings]:
        active = [p for p in self._plans.values() if p.is_active]
        for plan in active:
            if plan.is_default:
                return copy.deepcopy(plan)
        # No flagged default: first active plan in insertion order
        if active:
            logger.debug("default_pricing_plan_fallback", pricing_plan_id=active[0].id)
            return copy.deepcopy(active[0])
        return None

    def get_proposal(self, proposal_id: str) -> Optional[Proposal]:
        proposal = self._proposals.get(proposal_id)
        return copy.deepcopy(proposal) if proposal else None

    def save_proposal(self, proposal: Proposal) -> Proposal:
        self._proposals[proposal.id] = copy.deepcopy(proposal)
        return proposal

    def get_contract(self, contract_id: str) -> Optional[Contract]:
        contract = self._contracts.get(contract_id)
        return copy.deepcopy(contract) if contract else None

    def list_active_contracts(self) -> List[Contract]:
        return [
            copy.deepcopy(c) for c in self._contracts.values()
            if c.status == ContractStatus.ACTIVE
        ]

    def find_overlapping_invoice(
        self,
        start: date,
        end: date,
        contract_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> Optional[Invoice]:
        for invoice in self._invoices.values():
            if invoice.status in INACTIVE_INVOICE_STATUSES:
                continue
            if contract_id is not None and invoice.contract_id != contract_id:
                continue
            if account_id is not None and invoice.account_id != account_id:
                continue
            if invoice.period_start <= end and invoice.period_end >= start:
                return copy.deepcopy(invoice)
        return None

    def save_invoice(self, invoice: Invoice) -> Invoice:
        self._invoices[invoice.id] = copy.deepcopy(invoice)
        return invoice

    def next_invoice_number(self, year: int) -> str:
        prefix = f"{self.INVOICE_PREFIX}-{year}-"
        existing = [
            int(i.invoice_number[len(prefix):])
            for i in self._invoices.values()
            if i.invoice_number.startswith(prefix) and i.invoice_number[len(prefix):].isdigit()
        ]
        next_num = max(existing, default=0) + 1
        return f"{prefix}{next_num:04d}"
