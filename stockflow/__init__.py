"""Stock ledger, movement processing and offline sync outbox."""

__version__ = "0.1.0"
