"""Ticket bookings."""
