"""Adapters — in-memory reference implementations of the ports."""
