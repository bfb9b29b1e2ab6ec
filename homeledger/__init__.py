"""
HomeLedger - Source Package

A household-finance ledger: accounts in several currencies, income,
expense and transfer transactions, time-versioned category budgets and
the balances and monthly reports derived from them.

DESIGN PRINCIPLES:
1. The snapshot is the single source of truth; everything else is derived
2. Historical amounts use the rate frozen on each transaction
3. No silent corrections: mismatches are reported for confirmation
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "HomeLedger Team"
