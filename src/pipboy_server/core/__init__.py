"""Business core: ledger, registry, notification bus and access rules."""
