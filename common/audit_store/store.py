"""SQLite-backed storage for audit records and communication dispatch."""

import logging
import os
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from .models import DispatchRecord, StoredAudit

logger = logging.getLogger(__name__)

# Columns written from a flattened audit row, in schema order
AUDIT_COLUMNS = (
    "nombre_archivo",
    "nombre_paciente",
    "dni_paciente",
    "obra_social",
    "habitacion",
    "fecha_ingreso",
    "fecha_alta",
    "total_errores",
    "errores_admision",
    "errores_evoluciones",
    "errores_foja_quirurgica",
    "errores_alta_medica",
    "errores_epicrisis",
    "bisturi_armonico",
    "estado",
    "estudios_total",
    "estudios_imagenes",
    "estudios_laboratorio",
    "estudios_procedimientos",
    "sesiones_kinesiologia",
    "estudios",
    "errores_estudios",
    "errores_detalle",
    "comunicaciones",
    "datos_adicionales",
    "created_at",
)


class AuditStore:
    """SQLite-backed storage for audit results and the dispatch ledger."""

    def __init__(self, db_path: str | None = None):
        """Initialize audit store.

        Args:
            db_path: Path to SQLite database. Defaults to AUDIT_DB_PATH env var
                     or ~/.chart-audit/audits.db
        """
        if db_path:
            self.db_path = os.path.expanduser(db_path)
        else:
            self.db_path = os.path.expanduser(
                os.environ.get("AUDIT_DB_PATH", "~/.chart-audit/audits.db")
            )

        # Ensure directory exists
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema."""
        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path) as f:
            schema = f.read()

        with self._connect() as conn:
            conn.executescript(schema)

    def _connect(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _generate_id(self) -> str:
        """Generate a unique audit ID."""
        return str(uuid.uuid4())[:8]

    # Audit records

    def save_audit(self, row: dict) -> str:
        """Save a flattened audit row.

        Args:
            row: Column values keyed by column name (see AUDIT_COLUMNS).
                 JSON columns must already be encoded.

        Returns:
            The generated audit ID
        """
        audit_id = self._generate_id()
        values = [row.get(column) for column in AUDIT_COLUMNS]
        if values[AUDIT_COLUMNS.index("created_at")] is None:
            values[AUDIT_COLUMNS.index("created_at")] = datetime.now().isoformat()

        placeholders = ", ".join("?" for _ in range(len(AUDIT_COLUMNS) + 1))
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO auditorias (id, {', '.join(AUDIT_COLUMNS)}) VALUES ({placeholders})",
                [audit_id, *values],
            )
            conn.commit()

        logger.info(f"Saved audit {audit_id} for {row.get('nombre_archivo')}")
        return audit_id

    def get_audit(self, audit_id: str) -> StoredAudit | None:
        """Get an audit by ID."""
        with self._connect() as conn:
            cursor = conn.execute("SELECT * FROM auditorias WHERE id = ?", (audit_id,))
            row = cursor.fetchone()

            if row:
                return StoredAudit.from_row(dict(row))
            return None

    def list_audits(self, status: str | None = None, limit: int = 100) -> list[StoredAudit]:
        """List audits, newest first.

        Args:
            status: Filter by status (e.g. "Aprobado")
            limit: Maximum number of results
        """
        query = "SELECT * FROM auditorias"
        params: list = []
        if status:
            query += " WHERE estado = ?"
            params.append(status)
        query += " ORDER BY created_at DESC LIMIT ?"
        params.append(limit)

        with self._connect() as conn:
            cursor = conn.execute(query, params)
            return [StoredAudit.from_row(dict(row)) for row in cursor.fetchall()]

    # Dispatch ledger

    def was_dispatched(self, audit_id: str, index: int) -> bool:
        """Check if a communication of an audit was already sent.

        Use this before sending to prevent duplicates.
        """
        with self._connect() as conn:
            cursor = conn.execute(
                """
                SELECT id FROM comunicaciones_enviadas
                WHERE auditoria_id = ? AND comunicacion_index = ?
                """,
                (audit_id, index),
            )
            return cursor.fetchone() is not None

    def mark_dispatched(
        self,
        audit_id: str,
        index: int,
        sector: str | None = None,
        phone: str | None = None,
    ) -> bool:
        """Claim a communication in the ledger before it is sent.

        Returns:
            True if claimed, False if it was already claimed or sent
        """
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO comunicaciones_enviadas (
                        auditoria_id, comunicacion_index, sector, telefono, enviado_at
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (audit_id, index, sector, phone, datetime.now().isoformat()),
                )
                conn.commit()
        except sqlite3.IntegrityError:
            logger.warning(f"Communication {index} of audit {audit_id} already claimed")
            return False

        logger.info(f"Claimed communication {index} of audit {audit_id} for sending")
        return True

    def release_dispatch(self, audit_id: str, index: int) -> None:
        """Drop a claim whose send failed, so it can be retried."""
        with self._connect() as conn:
            conn.execute(
                """
                DELETE FROM comunicaciones_enviadas
                WHERE auditoria_id = ? AND comunicacion_index = ?
                """,
                (audit_id, index),
            )
            conn.commit()
        logger.info(f"Released communication {index} of audit {audit_id} after a failed send")

    def list_dispatched(self, audit_id: str) -> list[DispatchRecord]:
        """Sent communications of an audit, by index."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                SELECT auditoria_id, comunicacion_index, sector, telefono, enviado_at
                FROM comunicaciones_enviadas
                WHERE auditoria_id = ?
                ORDER BY comunicacion_index
                """,
                (audit_id,),
            )
            return [DispatchRecord.from_row(dict(row)) for row in cursor.fetchall()]
