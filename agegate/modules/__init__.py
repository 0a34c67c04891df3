"""Domain modules: shops, pricing, wallets, top-ups, providers, verifications, reconciliation."""
