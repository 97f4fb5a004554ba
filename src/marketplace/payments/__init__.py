"""Payments and the gateway callback."""
