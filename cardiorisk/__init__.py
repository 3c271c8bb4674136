"""Cardiovascular risk engine: ASCVD-style and PREVENT-style scoring."""

__version__ = "0.1.0"
