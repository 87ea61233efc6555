"""
Transfer Ledger

Commission-bearing transfer ledger for client money movements between
external bank accounts, with exact Decimal arithmetic, linked transfer
balances, period aggregates and a hash-chained audit trail.
"""

__version__ = "1.0.0"
