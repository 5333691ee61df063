"""Service layer: billing calculations, bill lifecycle and the payment-claim ledger."""
