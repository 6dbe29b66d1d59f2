"""
Banking Ledger Engine

Per-user account ledger for a banking dashboard: atomic transfers over an
append-only transaction log, Decimal money math, lazily accrued savings
interest, budget spend derived from history and checksum-validated
account numbers.
"""

__version__ = "1.0.0"
