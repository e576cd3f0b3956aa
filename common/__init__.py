"""Common channels and storage for Clinical Chart Audit."""

from .channels import WhatsAppChannel
from .audit_store import (
    AuditStore,
    StoredAudit,
    DispatchRecord,
)

__all__ = [
    # Channels
    "WhatsAppChannel",
    # Audit Store
    "AuditStore",
    "StoredAudit",
    "DispatchRecord",
]
