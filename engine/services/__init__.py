"""FacilityQuote services.

This package contains:
- frequency_service: rounding policy, frequency tables, multiplier lookups
- pricing_store: persistence collaborator interface and in-memory store
- pricing_service: plan/strategy resolution and quoting entry point
- proration_service: day-weighted proration and batch idempotency lock
- invoice_service: contract and batch invoicing
- proposal_pricing_service: proposal pricing lock workflow
"""
