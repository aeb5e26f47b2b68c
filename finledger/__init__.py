"""Personal-finance ledger consistency and derived-metric engine."""

__version__ = "0.1.0"
