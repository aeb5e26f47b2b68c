"""Domain package for ledger rules and core models."""
