"""Audit-and-persist orchestration.

A persistence failure never hides the computed audit: the result is
returned with no audit ID and the failure is logged.
"""

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime

from common.audit_store import AuditStore

from .auditor import audit_document
from .config import config
from .models import AuditResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessedAudit:
    """An audit result and the ID it was stored under, if it was stored."""
    result: AuditResult
    audit_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": True,
            "resultado": self.result.to_dict(),
            "auditoriaId": self.audit_id,
        }


class AuditService:
    """Audits chart text and persists the outcome."""

    def __init__(self, store: AuditStore | None = None, db_path: str | None = None):
        self._store = store
        self.db_path = db_path or config.AUDIT_DB_PATH

    @property
    def store(self) -> AuditStore:
        """Lazy-open the store so a broken database path only fails persistence."""
        if self._store is None:
            self._store = AuditStore(self.db_path)
        return self._store

    def persist(self, result: AuditResult) -> str | None:
        """Save a result; returns None when the write fails."""
        try:
            return self.store.save_audit(result.to_db_row())
        except (sqlite3.Error, OSError):
            logger.exception(f"Failed to persist audit of {result.file_name}")
            return None

    def process(
        self,
        text: str,
        file_name: str,
        now: datetime | None = None,
        save: bool = True,
    ) -> ProcessedAudit:
        """Audit a chart and optionally persist it.

        Raises:
            AuditInputError: Missing text, file name or admission date.
        """
        result = audit_document(text, file_name, now=now)
        audit_id = self.persist(result) if save else None
        return ProcessedAudit(result=result, audit_id=audit_id)
