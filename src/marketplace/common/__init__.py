"""Shared building blocks: errors, wire schemas, formatting and retries."""
