"""Data-access layer for payments and invoices."""

from .base import ReceivablesRepository
from .memory import InMemoryReceivablesRepository

__all__ = ["ReceivablesRepository", "InMemoryReceivablesRepository"]
