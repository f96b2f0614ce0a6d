"""Domain model package exports."""

from .transaction import Transaction

__all__ = ["Transaction"]
