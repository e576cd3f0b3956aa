"""Route audit findings to the department responsible for correcting them."""

from .config import config
from .models import (
    AuditWarning,
    Communication,
    DeviceUsage,
    Doctor,
    StaffRoster,
    Study,
    StudyCategory,
    SurgicalRecord,
    Urgency,
)

SURGEON_TITLE = "Cirujano Responsable"
RESIDENT_TITLE = "Equipo de Residentes"

# Category, sector, responsible, motive, urgency, message template
STUDY_ROUTES = [
    (
        StudyCategory.IMAGING,
        "Diagnóstico por Imágenes",
        "Jefe/a de Servicio",
        "Estudios de imágenes sin informe",
        Urgency.HIGH,
        "Faltan informes en: {studies}. Adjuntar antes del envío a {payer}.",
    ),
    (
        StudyCategory.LABORATORY,
        "Laboratorio",
        "Jefe/a de Laboratorio",
        "Estudios de laboratorio sin resultado/informe",
        Urgency.MEDIUM,
        "Faltan resultados claros en: {studies}. Adjuntar reporte normalizado.",
    ),
    (
        StudyCategory.PROCEDURE,
        "Endoscopía / Procedimientos",
        "Responsable de Procedimientos",
        "Procedimientos sin informe",
        Urgency.HIGH,
        "Faltan informes y conclusiones de procedimientos. Cargar documentación.",
    ),
]


def unique_by_name(doctors: list[Doctor]) -> list[Doctor]:
    seen = set()
    unique = []
    for doctor in doctors:
        if doctor.name in seen:
            continue
        seen.add(doctor.name)
        unique.append(doctor)
    return unique


def resolve_responsible(doctors: list[Doctor], fallback: str) -> tuple[str, str | None]:
    """Responsible label plus a license number when exactly one doctor is named."""
    doctors = unique_by_name(doctors)
    if not doctors:
        return fallback, None
    label = ", ".join(f"Dr/a {d.name}" for d in doctors)
    license = doctors[0].license if len(doctors) == 1 else None
    return label, license


class FindingRouter:
    """Builds the ordered list of communications for one audit.

    Order: admission, progress notes, progress-note warnings, discharge
    order, discharge summary, surgical record, harmonic scalpel, studies
    by category, study normalization.
    """

    def __init__(self, staff: StaffRoster, payer: str | None = None):
        self.staff = staff
        self.payer = payer or config.PAYER_NAME

    def _surgeon_communication(
        self, motive: str, urgency: Urgency, errors: list[str], message: str
    ) -> Communication:
        responsible, license = resolve_responsible(self.staff.surgeons, SURGEON_TITLE)
        return Communication(
            sector="Cirugía",
            responsible=responsible,
            motive=motive,
            urgency=urgency,
            errors=tuple(errors),
            message=message,
            license=license,
        )

    def route(
        self,
        admission_errors: list[str],
        progress_errors: list[str],
        warnings: list[AuditWarning],
        discharge_errors: list[str],
        summary_errors: list[str],
        surgical: SurgicalRecord,
        studies: list[Study],
        study_errors: list[str],
    ) -> list[Communication]:
        communications = []

        if admission_errors:
            communications.append(Communication(
                sector="Admisión",
                responsible="Personal de Admisión",
                motive="Datos de admisión incompletos",
                urgency=Urgency.HIGH,
                errors=tuple(admission_errors),
                message=(
                    "Se detectaron errores en los datos de admisión del paciente. "
                    f"Completar antes del envío a {self.payer}."
                ),
            ))

        if progress_errors:
            responsible, license = resolve_responsible(self.staff.residents, RESIDENT_TITLE)
            communications.append(Communication(
                sector="Residentes",
                responsible=responsible,
                motive="Problemas en evoluciones médicas diarias",
                urgency=Urgency.HIGH,
                errors=tuple(progress_errors),
                message="Se detectaron días sin evolución médica diaria. Revisar y completar.",
                license=license,
            ))

        if warnings:
            communications.append(Communication(
                sector="Residentes",
                responsible=RESIDENT_TITLE,
                motive="Advertencias sobre evoluciones médicas",
                urgency=Urgency.MEDIUM,
                errors=tuple(w.description for w in warnings),
                message="Se detectaron advertencias relacionadas con evoluciones. Revisar.",
            ))

        if discharge_errors:
            communications.append(self._surgeon_communication(
                "Falta registro de alta médica",
                Urgency.CRITICAL,
                discharge_errors,
                f"Se detectó ausencia de alta médica. Completar antes del envío a {self.payer}.",
            ))

        if summary_errors:
            communications.append(self._surgeon_communication(
                "Falta epicrisis (resumen de alta)",
                Urgency.CRITICAL,
                summary_errors,
                "Se detectó ausencia de epicrisis. Completar.",
            ))

        if surgical.errors:
            communications.append(self._surgeon_communication(
                "Problemas en foja quirúrgica",
                Urgency.HIGH,
                surgical.errors,
                "Se detectaron inconsistencias en la foja quirúrgica. Completar.",
            ))

        if surgical.device_usage == DeviceUsage.USED:
            communications.append(self._surgeon_communication(
                "Uso de bisturí armónico - Requiere autorización especial",
                Urgency.CRITICAL,
                ["Se utilizó bisturí armónico"],
                f"Se detectó uso de BISTURÍ ARMÓNICO. Verificar autorización de {self.payer} previa a facturación.",
            ))

        communications.extend(self._study_communications(studies))

        if study_errors:
            communications.append(Communication(
                sector="Coordinación de Historias Clínicas",
                responsible="Equipo Coordinación",
                motive="Normalización de estudios",
                urgency=Urgency.MEDIUM,
                errors=tuple(study_errors),
                message=(
                    "Se detectaron estudios sin informe o sin fecha. "
                    "Normalizar documentación para auditoría externa."
                ),
            ))

        return communications

    def _study_communications(self, studies: list[Study]) -> list[Communication]:
        unreported = [s for s in studies if not s.report_present]
        communications = []
        for category, sector, responsible, motive, urgency, template in STUDY_ROUTES:
            matching = [s for s in unreported if s.category == category]
            if not matching:
                continue
            communications.append(Communication(
                sector=sector,
                responsible=responsible,
                motive=motive,
                urgency=urgency,
                errors=tuple(f"[{category.value}] {s.short_label}" for s in matching),
                message=template.format(
                    studies="; ".join(s.short_label for s in matching),
                    payer=self.payer,
                ),
            ))
        return communications
