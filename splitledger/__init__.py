"""
Split Ledger - Source Package

A small shared ledger of people and expenses that works out,
on demand, who owes whom and how much.

DESIGN PRINCIPLES:
1. One explicit store object owns the ledger - no global state
2. Fail early, fail visibly: rejected input changes nothing
3. Balances and settlements are derived, never stored
4. A corrupt saved ledger degrades to an empty one, never a crash
5. Storage and sharing are swappable collaborators
"""

__version__ = "1.0.0"
__author__ = "Split Ledger Team"
