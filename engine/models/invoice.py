"""Contract and invoice models for FacilityQuote.

Invoices are generated from a contract's flat monthly value, either in
full or prorated over a billing window.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class ContractStatus(str, Enum):
    """Contract lifecycle state."""

    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle state."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    VOID = "void"
    WRITTEN_OFF = "written_off"


# Invoices in these states never block a new invoice for the same period
INACTIVE_INVOICE_STATUSES = (InvoiceStatus.VOID, InvoiceStatus.WRITTEN_OFF)


class BatchResultStatus(str, Enum):
    """Per-account outcome of a batch invoice run."""

    GENERATED = "generated"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    ERROR = "error"


class Contract(BaseModel):
    """A recurring service contract with a flat monthly value."""

    id: str
    contract_number: str = Field(..., alias="contractNumber")
    title: Optional[str] = None
    account_id: str = Field(..., alias="accountId")
    facility_id: Optional[str] = Field(default=None, alias="facilityId")
    monthly_value: float = Field(..., ge=0, alias="monthlyValue")
    payment_terms: Optional[str] = Field(default=None, alias="paymentTerms")
    status: ContractStatus = Field(default=ContractStatus.ACTIVE)

    class Config:
        populate_by_name = True


class BillingWindow(BaseModel):
    """Inclusive local-date billing window."""

    start: date
    end: date
    timezone: str = "UTC"

    @model_validator(mode="after")
    def check_order(self) -> "BillingWindow":
        if self.end < self.start:
            raise ValueError("Billing window end must not be before start")
        return self

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


class InvoiceItem(BaseModel):
    """An invoice line."""

    item_type: str = Field(default="service", alias="itemType")
    description: str
    quantity: float = Field(default=1.0, ge=0)
    unit_price: float = Field(..., alias="unitPrice")
    total_price: float = Field(..., alias="totalPrice")
    sort_order: int = Field(default=0, alias="sortOrder")

    class Config:
        populate_by_name = True


class Invoice(BaseModel):
    """A generated invoice."""

    id: str
    invoice_number: str = Field(..., alias="invoiceNumber")
    account_id: str = Field(..., alias="accountId")
    contract_id: Optional[str] = Field(default=None, alias="contractId")
    facility_id: Optional[str] = Field(default=None, alias="facilityId")
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT)
    issue_date: date = Field(..., alias="issueDate")
    due_date: date = Field(..., alias="dueDate")
    period_start: date = Field(..., alias="periodStart")
    period_end: date = Field(..., alias="periodEnd")
    subtotal: float = 0.0
    tax_rate: float = Field(default=0.0, ge=0, le=1, alias="taxRate")
    tax_amount: float = Field(default=0.0, alias="taxAmount")
    total_amount: float = Field(default=0.0, alias="totalAmount")
    balance_due: float = Field(default=0.0, alias="balanceDue")
    items: List[InvoiceItem] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class BatchAccountResult(BaseModel):
    """Outcome for one account in a batch run."""

    account_id: str = Field(..., alias="accountId")
    status: BatchResultStatus
    reason: Optional[str] = None
    invoice_id: Optional[str] = Field(default=None, alias="invoiceId")
    line_items: Optional[int] = Field(default=None, alias="lineItems")

    class Config:
        populate_by_name = True


class BatchInvoiceResult(BaseModel):
    """Summary of a batch invoice run."""

    period_start: date = Field(..., alias="periodStart")
    period_end: date = Field(..., alias="periodEnd")
    prorate: bool = True
    generated: int = 0
    skipped: int = 0
    duplicates: int = 0
    errors: int = 0
    results: List[BatchAccountResult] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @classmethod
    def from_results(
        cls,
        period_start: date,
        period_end: date,
        prorate: bool,
        results: List[BatchAccountResult],
    ) -> "BatchInvoiceResult":
        generated = sum(1 for r in results if r.status == BatchResultStatus.GENERATED)
        return cls(
            period_start=period_start,
            period_end=period_end,
            prorate=prorate,
            generated=generated,
            skipped=len(results) - generated,
            duplicates=sum(1 for r in results if r.status == BatchResultStatus.SKIPPED_DUPLICATE),
            errors=sum(1 for r in results if r.status == BatchResultStatus.ERROR),
            results=results,
        )
