"""Command-line tools for FacilityQuote."""
