"""
Split Ledger

A deterministic fee-splitting transfer ledger: incoming funds are divided
between two accounts after an owner fee, and every account can withdraw its
per-denomination balance. All arithmetic is integer and every operation is
all-or-nothing.
"""

__version__ = "1.0.0"
