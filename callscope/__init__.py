"""Call-option chain valuation against the Massive market-data API."""

__version__ = "0.1.0"
