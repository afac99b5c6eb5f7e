"""FacilityQuote pricing engine.

This package contains the Python pricing computation engine for a
facility-services business: pluggable quoting strategies, a configurable
cost plan, profit-margin inversion, subcontractor revenue split and
day-weighted proration for invoicing.

Architecture:
- 2 Strategies: sqft_settings_v1 (area rates), per_hour_v1 (labor minutes)
- 1 Registry: strategy lookup plus proposal > facility > account > default resolution
- Collaborators: proposal pricing lock, contract and batch invoicing
"""

__version__ = "1.0.0"
