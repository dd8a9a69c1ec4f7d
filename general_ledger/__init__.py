"""Double-entry general ledger: entries, vouchers, balances and bank side effects."""

__version__ = "0.1.0"
