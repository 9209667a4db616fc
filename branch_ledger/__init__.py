"""
Branch Ledger

A single-branch ledger engine with deposit/withdrawal processing, an
interest rule timeline, and time-weighted simple interest accrual using
Decimal arithmetic throughout.
"""

__version__ = "1.0.0"
