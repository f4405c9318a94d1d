"""Daily stock prediction puzzle service."""

__version__ = "0.1.0"
