"""Audit storage module for persistent audit tracking.

Provides SQLite-backed storage for:
- Audit results of each processed chart
- Communication dispatch ledger (prevents duplicate sends via was_dispatched())
"""

from .models import StoredAudit, DispatchRecord
from .store import AuditStore

__all__ = [
    "StoredAudit",
    "DispatchRecord",
    "AuditStore",
]
