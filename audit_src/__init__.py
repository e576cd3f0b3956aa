"""Clinical Chart Audit - medical-record completeness auditing.

Extracts admission data, daily progress notes, discharge documents, the
surgical record and ancillary studies from chart text, and routes every
omission found to the department that must correct it.
"""

from .models import (
    AuditInputError,
    AuditResult,
    AuditStatus,
    Communication,
    MissingAdmissionDateError,
    Urgency,
)
from .auditor import audit_document

__all__ = [
    "AuditInputError",
    "AuditResult",
    "AuditStatus",
    "Communication",
    "MissingAdmissionDateError",
    "Urgency",
    "audit_document",
]
