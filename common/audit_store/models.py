"""Data models for persistent audit storage."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# JSON-encoded columns of the auditorias table
JSON_COLUMNS = (
    "estudios",
    "errores_estudios",
    "errores_detalle",
    "comunicaciones",
    "datos_adicionales",
)


@dataclass
class StoredAudit:
    """A persisted audit record."""
    id: str
    file_name: str
    created_at: datetime
    status: str
    total_errors: int = 0

    # Patient info (UI sentinels kept as stored)
    patient_name: str | None = None
    patient_dni: str | None = None
    insurer: str | None = None
    room: str | None = None

    # Flattened columns and decoded JSON blobs
    columns: dict[str, Any] = field(default_factory=dict)

    @property
    def communications(self) -> list[dict]:
        return self.columns.get("comunicaciones") or []

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = dict(self.columns)
        data["id"] = self.id
        data["created_at"] = self.created_at.isoformat()
        return data

    @classmethod
    def from_row(cls, row: dict) -> "StoredAudit":
        """Create from a database row mapping."""
        columns = dict(row)
        for key in JSON_COLUMNS:
            raw = columns.get(key)
            columns[key] = json.loads(raw) if raw else None

        return cls(
            id=columns["id"],
            file_name=columns["nombre_archivo"],
            created_at=datetime.fromisoformat(columns["created_at"]),
            status=columns["estado"],
            total_errors=columns["total_errores"],
            patient_name=columns.get("nombre_paciente"),
            patient_dni=columns.get("dni_paciente"),
            insurer=columns.get("obra_social"),
            room=columns.get("habitacion"),
            columns=columns,
        )


@dataclass
class DispatchRecord:
    """A communication that was successfully delivered."""
    audit_id: str
    index: int
    sent_at: datetime
    sector: str | None = None
    phone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "auditoria_id": self.audit_id,
            "comunicacion_index": self.index,
            "sector": self.sector,
            "telefono": self.phone,
            "enviado_at": self.sent_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: dict) -> "DispatchRecord":
        return cls(
            audit_id=row["auditoria_id"],
            index=row["comunicacion_index"],
            sent_at=datetime.fromisoformat(row["enviado_at"]),
            sector=row["sector"],
            phone=row["telefono"],
        )
