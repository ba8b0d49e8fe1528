"""
Money Savings Ledger

An in-memory savings ledger: customers, deposits, withdrawals and
transaction history, with Decimal money and a small REST front end.
"""

__version__ = "1.0.0"
