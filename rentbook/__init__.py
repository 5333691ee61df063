"""Rentbook: rental billing and payment-claim reconciliation."""

__version__ = "0.1.0"
