"""Ledger query package."""

from splitledger.queries.executor import (
    BalanceLine,
    LedgerQueries,
    SettlementLine,
    balance_markup,
    format_currency,
)

__all__ = [
    "BalanceLine",
    "LedgerQueries",
    "SettlementLine",
    "balance_markup",
    "format_currency",
]
