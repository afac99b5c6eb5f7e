"""Invoice Service for FacilityQuote.

Generates invoices from contracts' flat monthly values, either in full
or prorated over a billing window, one contract at a time or as a batch
grouped by account.
"""

import re
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import uuid4

import structlog

from config.errors import ContractNotFoundError, InvoiceOverlapError
from config.settings import settings
from models.invoice import (
    BatchAccountResult,
    BatchInvoiceResult,
    BatchResultStatus,
    BillingWindow,
    Contract,
    Invoice,
    InvoiceItem,
)
from services.frequency_service import round_money, round_money_decimal, to_decimal
from services.pricing_store import PricingStore
from services.proration_service import (
    BatchIdempotencyLock,
    DateLike,
    batch_key,
    normalize_window,
    prorate as prorated_amount,
)
from utils.pricing_logger import log_batch_summary

logger = structlog.get_logger()


_NET_TERMS = re.compile(r"net\s*(\d{1,3})", re.IGNORECASE)
_ANY_NUMBER = re.compile(r"(\d{1,3})")


def parse_payment_terms_days(payment_terms: Optional[str]) -> int:
    """'Net 15' -> 15, '45 days' -> 45, anything else -> default terms."""
    if not payment_terms:
        return settings.default_payment_terms_days
    normalized = payment_terms.strip().lower()

    match = _NET_TERMS.search(normalized) or _ANY_NUMBER.search(normalized)
    if match:
        return int(match.group(1))
    return settings.default_payment_terms_days


def calculate_totals(items: List[InvoiceItem], tax_rate: float) -> Dict[str, float]:
    subtotal = sum((to_decimal(i.quantity) * to_decimal(i.unit_price) for i in items), Decimal("0"))
    tax_amount = round_money_decimal(subtotal * to_decimal(tax_rate))
    total_amount = round_money_decimal(subtotal + tax_amount)
    return {
        "subtotal": round_money(subtotal),
        "tax_amount": float(tax_amount),
        "total_amount": float(total_amount),
    }


class InvoiceService:
    """Contract and batch invoice generation."""

    def __init__(
        self,
        store: PricingStore,
        batch_lock: Optional[BatchIdempotencyLock] = None,
    ):
        """Initialize InvoiceService.

        Args:
            store: Persistence collaborator.
            batch_lock: Idempotency lock shared by every caller that may
                start a batch for the same period.
        """
        self.store = store
        self.batch_lock = batch_lock or BatchIdempotencyLock()

    def create_invoice(
        self,
        account_id: str,
        window: BillingWindow,
        items: List[InvoiceItem],
        payment_terms: Optional[str] = None,
        contract_id: Optional[str] = None,
        facility_id: Optional[str] = None,
        tax_rate: float = 0.0,
    ) -> Invoice:
        """Number, total and persist an invoice issued at the window end."""
        issue_date = window.end
        due_date = issue_date + timedelta(days=parse_payment_terms_days(payment_terms))
        totals = calculate_totals(items, tax_rate)

        invoice = Invoice(
            id=str(uuid4()),
            invoice_number=self.store.next_invoice_number(issue_date.year),
            account_id=account_id,
            contract_id=contract_id,
            facility_id=facility_id,
            issue_date=issue_date,
            due_date=due_date,
            period_start=window.start,
            period_end=window.end,
            subtotal=totals["subtotal"],
            tax_rate=tax_rate,
            tax_amount=totals["tax_amount"],
            total_amount=totals["total_amount"],
            balance_due=totals["total_amount"],
            items=items,
        )
        self.store.save_invoice(invoice)

        logger.info(
            "invoice_created",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            account_id=account_id,
            contract_id=contract_id,
            total_amount=invoice.total_amount,
        )
        return invoice

    def _service_amount(self, contract: Contract, window: BillingWindow, prorate: bool) -> float:
        if prorate:
            return prorated_amount(contract.monthly_value, window.start, window.end)
        return round_money(contract.monthly_value)

    def generate_invoice_from_contract(
        self,
        contract_id: str,
        period_start: DateLike,
        period_end: DateLike,
        prorate: bool = True,
    ) -> Invoice:
        """Invoice one contract for a billing window.

        Raises:
            ContractNotFoundError: Unknown contract.
            ProrationWindowError: Invalid or oversized window.
            InvoiceOverlapError: A non-void invoice already covers part
                of the window for this contract.
        """
        contract = self.store.get_contract(contract_id)
        if contract is None:
            raise ContractNotFoundError(contract_id)

        facility = self.store.get_facility(contract.facility_id) if contract.facility_id else None
        tz_name = (facility.timezone if facility else None) or settings.default_timezone
        window = normalize_window(period_start, period_end, tz_name)

        overlap = self.store.find_overlapping_invoice(window.start, window.end, contract_id=contract.id)
        if overlap is not None:
            raise InvoiceOverlapError(
                overlap.invoice_number,
                details={"contract_id": contract.id},
            )

        amount = self._service_amount(contract, window, prorate)
        label = contract.title or contract.contract_number
        item = InvoiceItem(
            item_type="service",
            description=(
                f"{label} - Cleaning Services "
                f"({window.start.isoformat()} to {window.end.isoformat()})"
            ),
            quantity=1,
            unit_price=amount,
            total_price=amount,
        )

        return self.create_invoice(
            account_id=contract.account_id,
            window=window,
            items=[item],
            payment_terms=contract.payment_terms,
            contract_id=contract.id,
            facility_id=contract.facility_id,
        )

    def batch_generate_invoices(
        self,
        period_start: DateLike,
        period_end: DateLike,
        prorate: bool = True,
    ) -> BatchInvoiceResult:
        """Invoice every account with active contracts on active facilities.

        One invoice per account. Accounts that already have an
        overlapping invoice are skipped; a failure on one account is
        recorded and the batch moves on.

        Raises:
            BatchInProgressError: A batch for the same period is running.
        """
        window = normalize_window(period_start, period_end, "UTC")
        key = batch_key(window, prorate)

        with self.batch_lock.hold(key):
            logger.info("invoice_batch_started", batch_key=key)
            contracts_by_account = self._group_billable_contracts()

            results: List[BatchAccountResult] = []
            for account_id, contracts in contracts_by_account.items():
                results.append(self._invoice_account(account_id, contracts, window, prorate))

        summary = BatchInvoiceResult.from_results(window.start, window.end, prorate, results)
        log_batch_summary(summary.model_dump(by_alias=True), batch_key=key)
        return summary

    def _group_billable_contracts(self) -> "OrderedDict[str, List[Contract]]":
        grouped: "OrderedDict[str, List[Contract]]" = OrderedDict()
        for contract in self.store.list_active_contracts():
            facility = self.store.get_facility(contract.facility_id) if contract.facility_id else None
            if facility is None or facility.status != "active":
                continue
            grouped.setdefault(contract.account_id, []).append(contract)
        return grouped

    def _invoice_account(
        self,
        account_id: str,
        contracts: List[Contract],
        window: BillingWindow,
        prorate: bool,
    ) -> BatchAccountResult:
        try:
            overlap = self.store.find_overlapping_invoice(window.start, window.end, account_id=account_id)
            if overlap is not None:
                return BatchAccountResult(
                    account_id=account_id,
                    status=BatchResultStatus.SKIPPED_DUPLICATE,
                    reason=f"Overlaps with {overlap.invoice_number}",
                )

            items = []
            for index, contract in enumerate(contracts):
                facility = self.store.get_facility(contract.facility_id)
                amount = self._service_amount(contract, window, prorate)
                label = contract.title or contract.contract_number
                facility_name = (facility.name if facility else None) or "Facility"
                items.append(InvoiceItem(
                    item_type="service",
                    description=(
                        f"{facility_name} - {label} "
                        f"({window.start.isoformat()} to {window.end.isoformat()})"
                    ),
                    quantity=1,
                    unit_price=amount,
                    total_price=amount,
                    sort_order=index,
                ))

            invoice = self.create_invoice(
                account_id=account_id,
                window=window,
                items=items,
                payment_terms=contracts[0].payment_terms,
            )
            return BatchAccountResult(
                account_id=account_id,
                status=BatchResultStatus.GENERATED,
                invoice_id=invoice.id,
                line_items=len(items),
            )

        except Exception as e:
            logger.error("invoice_batch_account_failed", account_id=account_id, error=str(e))
            return BatchAccountResult(
                account_id=account_id,
                status=BatchResultStatus.ERROR,
                reason=str(e),
            )
