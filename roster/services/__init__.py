"""Business logic: authorization engine, role ledger, school scoping and migration shims."""
