"""Outbound notification text for a routed communication."""

from .config import config
from .models import NOT_FOUND_LABEL, NOT_FOUND_LABEL_F, Communication, PatientRecord, Urgency

URGENCY_MARKERS = {
    Urgency.CRITICAL: "🚨",
    Urgency.HIGH: "⚠️",
    Urgency.MEDIUM: "📋",
}


def render_message(
    communication: Communication,
    patient: PatientRecord,
    file_name: str,
    payer: str | None = None,
) -> str:
    """Render the WhatsApp text sent to the responsible department."""
    payer = payer or config.PAYER_NAME
    marker = URGENCY_MARKERS[communication.urgency]

    lines = [
        f"{marker} NOTIFICACIÓN DE AUDITORÍA MÉDICA {marker}",
        "",
        f"👤 Responsable: {communication.responsible}",
    ]
    if communication.license:
        lines.append(f"📋 Matrícula: {communication.license}")
    lines += [
        f"🏥 Sector: {communication.sector}",
        f"⚠️ Urgencia: {communication.urgency.value}",
        "",
        "📄 Motivo de la comunicación:",
        communication.motive,
        "",
        "👨‍⚕️ Datos del Paciente:",
        f"• Nombre: {patient.name or NOT_FOUND_LABEL}",
        f"• DNI: {patient.national_id or NOT_FOUND_LABEL}",
        f"• Obra Social: {patient.insurer or NOT_FOUND_LABEL_F}",
        f"• Archivo: {file_name}",
        "",
    ]

    if communication.errors:
        lines.append("❌ Errores Detectados:")
        lines += [f"{i}. {error}" for i, error in enumerate(communication.errors, start=1)]
        lines.append("")

    lines += [
        "📝 Acción Requerida:",
        communication.message,
        "",
        f"⚕️ Importante: Es necesario completar esta corrección antes del envío a {payer} "
        "para evitar débitos en la facturación.",
        "",
        f"{config.INSTITUTION_NAME} - {config.MESSAGE_SIGNATURE}",
    ]
    return "\n".join(lines)
