"""Pricing Logger for FacilityQuote.

Configures structlog for the engine and provides formatted, highly
visible summaries of quotes and invoice batches for console output.
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from config.settings import settings

logger = structlog.get_logger()

BANNER_WIDTH = 80
QUOTE_BANNER_CHAR = "═"
BATCH_BANNER_CHAR = "─"


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure structlog processors.

    Args:
        level: Log level name; defaults to settings.log_level.
        fmt: 'console' or 'json'; defaults to settings.log_format.

    Raises:
        ValueError: If the loaded settings are out of range.
    """
    settings.validate()
    level_name = (level or settings.log_level).upper()
    renderer = (
        structlog.processors.JSONRenderer()
        if (fmt or settings.log_format) == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO)
        ),
    )


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _money(value: Any) -> str:
    return f"${float(value or 0):,.2f}"


def format_quote_summary(quote: Dict[str, Any]) -> str:
    """Render a camelCase quote dict as a fixed-width text block."""
    lines = [
        QUOTE_BANNER_CHAR * BANNER_WIDTH,
        _create_banner(QUOTE_BANNER_CHAR, "QUOTE"),
        QUOTE_BANNER_CHAR * BANNER_WIDTH,
        f"║ Facility      : {quote.get('facilityName') or quote.get('facilityId')}",
        f"║ Strategy      : {quote.get('strategyKey')} v{quote.get('strategyVersion')}",
        f"║ Pricing Plan  : {quote.get('pricingPlanName')} ({quote.get('pricingPlanId')})",
        f"║ Frequency     : {quote.get('serviceFrequency')}",
        f"║ Square Feet   : {quote.get('totalSquareFeet', 0):,.0f}",
        f"║ Areas         : {len(quote.get('areas') or [])}",
        f"║ Subtotal      : {_money(quote.get('subtotal'))}",
        f"║ Monthly Total : {_money(quote.get('monthlyTotal'))}"
        + ("  (minimum applied)" if quote.get("minimumApplied") else ""),
        f"║ Subcontractor : {_money(quote.get('subcontractorPayout'))}"
        f" ({float(quote.get('subcontractorPercentage') or 0):.0%})",
        f"║ Company       : {_money(quote.get('companyRevenue'))}",
        QUOTE_BANNER_CHAR * BANNER_WIDTH,
    ]
    return "\n".join(lines)


def log_quote_summary(quote: Dict[str, Any], echo: bool = False) -> None:
    """Log a quote summary; optionally echo the formatted block to stdout."""
    if echo:
        print(format_quote_summary(quote))

    logger.info(
        "quote_summary",
        facility_id=quote.get("facilityId"),
        strategy_key=quote.get("strategyKey"),
        pricing_plan_id=quote.get("pricingPlanId"),
        service_frequency=quote.get("serviceFrequency"),
        monthly_total=quote.get("monthlyTotal"),
        minimum_applied=quote.get("minimumApplied"),
    )


def log_batch_summary(
    batch: Dict[str, Any],
    batch_key: Optional[str] = None,
    echo: bool = False,
) -> None:
    """Log the outcome of a batch invoicing run."""
    if echo:
        print(BATCH_BANNER_CHAR * BANNER_WIDTH)
        print(_create_banner(BATCH_BANNER_CHAR, "INVOICE BATCH"))
        print(f"│ Period     : {batch.get('periodStart')} to {batch.get('periodEnd')}")
        print(f"│ Generated  : {batch.get('generated')}")
        print(f"│ Duplicates : {batch.get('duplicates')}")
        print(f"│ Errors     : {batch.get('errors')}")
        print(BATCH_BANNER_CHAR * BANNER_WIDTH)

    logger.info(
        "invoice_batch_completed",
        batch_key=batch_key,
        period_start=str(batch.get("periodStart")),
        period_end=str(batch.get("periodEnd")),
        generated=batch.get("generated"),
        duplicates=batch.get("duplicates"),
        errors=batch.get("errors"),
    )
