"""HTTP API for the billing and payment-claim workflow."""
