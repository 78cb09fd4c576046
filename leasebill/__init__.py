"""Recurring rent charge generation and batched auto-payment dispatch."""

__version__ = "0.1.0"
