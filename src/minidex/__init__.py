"""MiniDex - polling order book and trade ledger view for a remote mini exchange."""

__version__ = "0.1.0"
