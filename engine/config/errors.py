"""FacilityQuote error handling.

Custom exceptions and error codes for the pricing engine and the
proposal/invoice collaborators built on top of it.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Validation Errors (1xxx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FIELD = "INVALID_FIELD"
    INVALID_PROFIT_MARGIN = "INVALID_PROFIT_MARGIN"

    # Lookup Errors (2xxx)
    FACILITY_NOT_FOUND = "FACILITY_NOT_FOUND"
    PRICING_PLAN_NOT_FOUND = "PRICING_PLAN_NOT_FOUND"
    PROPOSAL_NOT_FOUND = "PROPOSAL_NOT_FOUND"
    CONTRACT_NOT_FOUND = "CONTRACT_NOT_FOUND"

    # Mutation Guards (3xxx)
    PRICING_LOCKED = "PRICING_LOCKED"
    PRICING_NOT_LOCKED = "PRICING_NOT_LOCKED"
    PROPOSAL_NOT_EDITABLE = "PROPOSAL_NOT_EDITABLE"
    PROPOSAL_MISSING_FACILITY = "PROPOSAL_MISSING_FACILITY"

    # Invoicing Errors (4xxx)
    INVALID_BILLING_WINDOW = "INVALID_BILLING_WINDOW"
    BATCH_IN_PROGRESS = "BATCH_IN_PROGRESS"
    INVOICE_OVERLAP = "INVOICE_OVERLAP"


class PricingEngineError(Exception):
    """Base exception for pricing engine errors.

    Provides structured error information for callers.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response.

        Returns:
            Dictionary with code, message, and details.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(PricingEngineError):
    """Validation-specific error."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class FacilityNotFoundError(PricingEngineError):
    """Raised when a quote references a facility the store does not know."""

    def __init__(self, facility_id: str):
        super().__init__(
            code=ErrorCode.FACILITY_NOT_FOUND,
            message="Facility not found",
            details={"facility_id": facility_id}
        )
        self.facility_id = facility_id


class PricingPlanNotFoundError(PricingEngineError):
    """Raised when no pricing plan can be resolved for a pricing context."""

    def __init__(self, message: str = "No pricing plan found", pricing_plan_id: Optional[str] = None):
        super().__init__(
            code=ErrorCode.PRICING_PLAN_NOT_FOUND,
            message=message,
            details={"pricing_plan_id": pricing_plan_id} if pricing_plan_id else None
        )
        self.pricing_plan_id = pricing_plan_id


class ProposalNotFoundError(PricingEngineError):
    """Proposal lookup failure."""

    def __init__(self, proposal_id: str):
        super().__init__(
            code=ErrorCode.PROPOSAL_NOT_FOUND,
            message="Proposal not found",
            details={"proposal_id": proposal_id}
        )
        self.proposal_id = proposal_id


class ContractNotFoundError(PricingEngineError):
    """Contract lookup failure."""

    def __init__(self, contract_id: str):
        super().__init__(
            code=ErrorCode.CONTRACT_NOT_FOUND,
            message="Contract not found",
            details={"contract_id": contract_id}
        )
        self.contract_id = contract_id


class PricingLockedError(PricingEngineError):
    """Raised when a lock-state transition is not allowed."""

    def __init__(self, message: str, proposal_id: str, code: str = ErrorCode.PRICING_LOCKED):
        super().__init__(
            code=code,
            message=message,
            details={"proposal_id": proposal_id}
        )
        self.proposal_id = proposal_id


class ProposalNotEditableError(PricingEngineError):
    """Raised when pricing changes are attempted on a non-draft proposal."""

    def __init__(self, message: str, proposal_id: str, status: Optional[str] = None):
        super().__init__(
            code=ErrorCode.PROPOSAL_NOT_EDITABLE,
            message=message,
            details={"proposal_id": proposal_id, "status": status}
        )
        self.proposal_id = proposal_id
        self.status = status


class ProrationWindowError(PricingEngineError):
    """Raised for inverted, empty or oversized billing windows."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.INVALID_BILLING_WINDOW,
            message=message,
            details=details
        )


class BatchInProgressError(PricingEngineError):
    """Raised when a batch for the same idempotency key is already running."""

    def __init__(self, batch_key: str):
        super().__init__(
            code=ErrorCode.BATCH_IN_PROGRESS,
            message="An invoice batch generation for this period is already in progress",
            details={"batch_key": batch_key}
        )
        self.batch_key = batch_key


class InvoiceOverlapError(PricingEngineError):
    """Raised when an existing invoice already covers part of a billing window."""

    def __init__(self, invoice_number: str, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.INVOICE_OVERLAP,
            message=f"Invoice {invoice_number} already covers an overlapping billing period",
            details={**(details or {}), "invoice_number": invoice_number}
        )
        self.invoice_number = invoice_number
