"""Seller balances and withdrawals."""
