"""Utility modules for FacilityQuote."""

from utils.pricing_logger import (
    configure_logging,
    format_quote_summary,
    log_quote_summary,
    log_batch_summary,
)

__all__ = [
    "configure_logging",
    "format_quote_summary",
    "log_quote_summary",
    "log_batch_summary",
]
