"""Campaigns: the events sellers put on sale."""
