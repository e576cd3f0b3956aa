"""Idempotent dispatch of routed communications.

A communication is identified by (audit id, communication index). Its row
in the dispatch ledger is claimed before sending and released again if the
channel fails, so a communication is sent at most once.
"""

import logging
from dataclasses import dataclass

from common.audit_store import AuditStore
from common.channels.whatsapp import WhatsAppChannel

from .config import config
from .messages import render_message
from .models import (
    NOT_FOUND_LABEL,
    NOT_FOUND_LABEL_F,
    AuditNotFoundError,
    Communication,
    PatientRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a dispatch attempt."""
    success: bool
    already_sent: bool = False
    error: str | None = None
    phone: str | None = None

    def to_dict(self) -> dict:
        data = {"success": self.success, "alreadySent": self.already_sent}
        if self.error:
            data["error"] = self.error
        return data


def _stored_value(value: str | None) -> str | None:
    """Map UI "not found" sentinels back to absence."""
    return None if value in (None, NOT_FOUND_LABEL, NOT_FOUND_LABEL_F) else value


class CommunicationDispatcher:
    """Sends communications through a channel, at most once each."""

    def __init__(
        self,
        store: AuditStore | None = None,
        channel: WhatsAppChannel | None = None,
    ):
        self.store = store or AuditStore(config.AUDIT_DB_PATH)
        self.channel = channel or WhatsAppChannel(
            config.WHATSAPP_API_URL,
            config.WHATSAPP_API_TOKEN,
            timeout=config.WHATSAPP_TIMEOUT,
        )

    def send(
        self,
        communication: Communication,
        patient: PatientRecord,
        file_name: str,
        audit_id: str,
        index: int,
    ) -> DispatchResult:
        """Send one communication unless the ledger says it was already sent."""
        if self.store.was_dispatched(audit_id, index):
            logger.info(f"Communication {index} of audit {audit_id} already sent; skipping")
            return DispatchResult(success=False, already_sent=True)

        phone = config.phone_for_sector(communication.sector)
        if not phone:
            logger.warning(f"No phone number configured for sector {communication.sector}")
            return DispatchResult(
                success=False,
                error=f"No hay número configurado para el sector {communication.sector}",
            )

        message = render_message(communication, patient, file_name)

        # The ledger row is claimed first; a concurrent send loses on the UNIQUE constraint
        if not self.store.mark_dispatched(audit_id, index, sector=communication.sector, phone=phone):
            return DispatchResult(success=False, already_sent=True)

        if not self.channel.send(message, phone):
            self.store.release_dispatch(audit_id, index)
            return DispatchResult(success=False, error="Error al enviar el mensaje", phone=phone)

        return DispatchResult(success=True, phone=phone)

    def dispatch(self, audit_id: str, index: int) -> DispatchResult:
        """Send a communication of a stored audit.

        Raises:
            AuditNotFoundError: Unknown audit ID or communication index.
        """
        audit = self.store.get_audit(audit_id)
        if audit is None:
            raise AuditNotFoundError(f"Auditoría {audit_id} no encontrada")
        if not 0 <= index < len(audit.communications):
            raise AuditNotFoundError(f"Comunicación {index} no encontrada en auditoría {audit_id}")

        communication = Communication.from_dict(audit.communications[index])
        patient = PatientRecord(
            name=_stored_value(audit.patient_name),
            national_id=_stored_value(audit.patient_dni),
            insurer=_stored_value(audit.insurer),
        )
        return self.send(communication, patient, audit.file_name, audit_id, index)

    def dispatched_indices(self, audit_id: str) -> list[int]:
        return [record.index for record in self.store.list_dispatched(audit_id)]
