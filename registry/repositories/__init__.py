"""Repository layer for data access."""

from registry.repositories.ledger_repository import LedgerRepository
from registry.repositories.invocation_repository import InvocationRepository

__all__ = [
    "LedgerRepository",
    "InvocationRepository",
]
