"""News sentiment and price-direction prediction service."""

__version__ = "0.1.0"
