"""FacilityQuote configuration.

This package contains:
- settings: Environment variables and configuration
- errors: Custom exceptions and error codes
"""

from config.settings import settings
from config.errors import PricingEngineError, ErrorCode

__all__ = [
    "settings",
    "PricingEngineError",
    "ErrorCode",
]
