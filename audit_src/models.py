"""Data models for Clinical Chart Audit."""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


NOT_FOUND_LABEL = "No encontrado"
NOT_FOUND_LABEL_F = "No encontrada"


class AuditInputError(ValueError):
    """The document cannot be audited (missing text or file name)."""


class MissingAdmissionDateError(AuditInputError):
    """No admission date could be resolved from the document."""

    def __init__(self, message: str = "No se pudo extraer la fecha de ingreso (dato obligatorio)"):
        super().__init__(message)


class AuditNotFoundError(LookupError):
    """No stored audit (or communication index) matches the request."""


class DayStatus(Enum):
    """Progress-note classification of a single hospitalization day."""
    COVERED = "cubierto"
    CRITICAL_MISSING = "falta_critica"
    ADMISSION_EXEMPT = "ingreso_exento"    # Admission day never requires a note
    DISCHARGE_WARNING = "advertencia_alta"  # Discharge day (or today) without a note


class SurgicalRole(Enum):
    """Roles of the surgical team, as labelled on the operative record."""
    SURGEON = "cirujano"
    FIRST_ASSISTANT = "primer_ayudante"
    ANESTHESIOLOGIST = "anestesista"
    INSTRUMENTALIST = "instrumentador"
    RESIDENT_ASSISTANT = "ayudante_residencia"
    ASSISTANT = "ayudante"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


# Roles that must be held by distinct people
CRITICAL_ROLES = (
    SurgicalRole.SURGEON,
    SurgicalRole.FIRST_ASSISTANT,
    SurgicalRole.INSTRUMENTALIST,
    SurgicalRole.ANESTHESIOLOGIST,
)


class DeviceUsage(Enum):
    """Harmonic scalpel usage as answered on the operative record."""
    USED = "SI"
    NOT_USED = "NO"
    UNDETERMINED = "No determinado"


class StudyCategory(Enum):
    """Ancillary study families."""
    IMAGING = "Imagenes"
    LABORATORY = "Laboratorio"
    PROCEDURE = "Procedimientos"


class Urgency(Enum):
    """Urgency tier of a routed communication."""
    CRITICAL = "CRÍTICA"
    HIGH = "ALTA"
    MEDIUM = "MEDIA"


class AuditStatus(Enum):
    """Overall audit outcome."""
    PENDING_CORRECTION = "Pendiente de corrección"
    APPROVED = "Aprobado"


def format_day(day: date) -> str:
    """Format a date the way the charts print it (DD/MM/YYYY)."""
    return day.strftime("%d/%m/%Y")


@dataclass(frozen=True)
class PatientRecord:
    """Patient demographics read from the chart header."""
    name: str | None = None
    national_id: str | None = None
    birth_date: str | None = None  # DD/MM/YYYY as printed
    sex: str | None = None
    insurer: str | None = None
    room: str | None = None
    intensive_care: bool = False
    admission_errors: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to the JSON shape consumed by the presentation layer."""
        return {
            "nombre": self.name,
            "dni": self.national_id,
            "fecha_nacimiento": self.birth_date,
            "sexo": self.sex,
            "obra_social": self.insurer or NOT_FOUND_LABEL_F,
            "habitacion": self.room or NOT_FOUND_LABEL_F,
            "uci": self.intensive_care,
            "errores_admision": list(self.admission_errors),
        }


@dataclass(frozen=True)
class HospitalizationPeriod:
    """Admission/discharge window of the hospitalization episode."""
    admission: datetime
    discharge: datetime | None = None
    now: datetime = field(default_factory=datetime.now)

    @property
    def currently_admitted(self) -> bool:
        return self.discharge is None

    @property
    def reference_end(self) -> datetime:
        """Discharge timestamp, or the current moment while still admitted."""
        return self.discharge if self.discharge is not None else self.now

    @property
    def first_day(self) -> date:
        return self.admission.date()

    @property
    def last_day(self) -> date:
        return self.reference_end.date()

    @property
    def day_count(self) -> int:
        """Hospitalization days.

        Discharged: admission day included, discharge day excluded (same day = 0).
        Admitted: admission day and today included, minimum 1.
        """
        if self.discharge is not None:
            return max(0, (self.discharge.date() - self.first_day).days)
        return max(1, (self.now.date() - self.first_day).days + 1)


@dataclass(frozen=True)
class ProgressNoteFinding:
    """Progress-note classification for one calendar day."""
    day: date
    status: DayStatus
    description: str | None = None

    @property
    def date_str(self) -> str:
        return format_day(self.day)

    def to_dict(self) -> dict:
        return {"fecha": self.date_str, "estado": self.status.value}


@dataclass(frozen=True)
class AuditWarning:
    """Non-blocking observation (e.g. discharge day without a note)."""
    kind: str
    description: str
    date: str | None = None

    def to_dict(self) -> dict:
        data = {"tipo": self.kind, "descripcion": self.description}
        if self.date:
            data["fecha"] = self.date
        return data


@dataclass(frozen=True)
class TeamMember:
    """A member of the surgical team."""
    role: SurgicalRole
    name: str

    def to_dict(self) -> dict:
        return {"rol": self.role.value, "nombre": self.name}


@dataclass
class SurgicalRecord:
    """Facts extracted from the operative record."""
    found: bool = False
    device_usage: DeviceUsage = DeviceUsage.UNDETERMINED
    team: list[TeamMember] = field(default_factory=list)
    surgery_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "bisturi_armonico": (
                None if self.device_usage == DeviceUsage.UNDETERMINED
                else self.device_usage.value
            ),
            "equipo_quirurgico": [m.to_dict() for m in self.team],
            "fecha_cirugia": self.surgery_date,
            "hora_inicio": self.start_time,
            "hora_fin": self.end_time,
            "errores": list(self.errors),
        }


@dataclass(frozen=True)
class Doctor:
    """A physician identified by a license number in the chart."""
    name: str
    license: str | None = None

    def to_dict(self) -> dict:
        return {"nombre": self.name, "matricula": self.license}


@dataclass
class StaffRoster:
    """Physicians grouped by the role inferred from their surroundings."""
    residents: list[Doctor] = field(default_factory=list)
    surgeons: list[Doctor] = field(default_factory=list)
    others: list[Doctor] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "residentes": [d.to_dict() for d in self.residents],
            "cirujanos": [d.to_dict() for d in self.surgeons],
            "otros": [d.to_dict() for d in self.others],
        }


@dataclass
class Study:
    """An imaging, laboratory or procedure record found in the chart."""
    category: StudyCategory
    type: str
    date: str | None = None
    time: str | None = None
    location: str | None = None
    result: str | None = None
    report_present: bool = False
    warnings: list[str] = field(default_factory=list)
    page: int | None = None
    sessions: int | None = None  # Only set on the therapy-session summary

    @property
    def dedup_key(self) -> str:
        return f"{self.category.value}|{self.type.upper()}|{self.date or 'NA'}"

    @property
    def short_label(self) -> str:
        return f"{self.type}{f' ({self.date})' if self.date else ''}"

    def to_dict(self) -> dict:
        data = {
            "categoria": self.category.value,
            "tipo": self.type,
            "fecha": self.date,
            "hora": self.time,
            "lugar": self.location,
            "resultado": self.result,
            "informe_presente": self.report_present,
            "advertencias": list(self.warnings),
            "numero_hoja": self.page,
        }
        if self.sessions is not None:
            data["sesiones"] = self.sessions
        return data


@dataclass
class StudyCounts:
    """Study totals per category."""
    total: int = 0
    imaging: int = 0
    laboratory: int = 0
    procedures: int = 0
    therapy_sessions: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "imagenes": self.imaging,
            "laboratorio": self.laboratory,
            "procedimientos": self.procedures,
            "kinesiologia": self.therapy_sessions,
        }


@dataclass(frozen=True)
class Communication:
    """A finding routed to the department that must correct it."""
    sector: str
    responsible: str
    motive: str
    urgency: Urgency
    errors: tuple[str, ...]
    message: str
    license: str | None = None

    def to_dict(self) -> dict:
        data = {
            "sector": self.sector,
            "responsable": self.responsible,
            "motivo": self.motive,
            "urgencia": self.urgency.value,
            "errores": list(self.errors),
            "mensaje": self.message,
        }
        if self.license:
            data["matricula"] = self.license
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Communication":
        """Rebuild a communication from its stored JSON form."""
        return cls(
            sector=data["sector"],
            responsible=data["responsable"],
            motive=data["motivo"],
            urgency=Urgency(data["urgencia"]),
            errors=tuple(data.get("errores") or ()),
            message=data.get("mensaje", ""),
            license=data.get("matricula"),
        )


@dataclass(frozen=True)
class AuditResult:
    """Complete audit of one medical-record document."""
    file_name: str
    patient: PatientRecord
    period: HospitalizationPeriod
    progress_days: list[ProgressNoteFinding]
    progress_errors: list[str]
    warnings: list[AuditWarning]
    discharge_errors: list[str]
    summary_errors: list[str]
    surgical: SurgicalRecord
    staff: StaffRoster
    studies: list[Study]
    study_counts: StudyCounts
    study_errors: list[str]
    communications: list[Communication]
    total_errors: int
    status: AuditStatus
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def currently_admitted(self) -> bool:
        return self.period.currently_admitted

    def to_dict(self) -> dict:
        """Convert to the JSON result returned to callers."""
        return {
            "nombreArchivo": self.file_name,
            "datosPaciente": self.patient.to_dict(),
            "fechaIngreso": self.period.admission.isoformat(),
            "fechaAlta": self.period.discharge.isoformat() if self.period.discharge else None,
            "pacienteInternado": self.currently_admitted,
            "diasHospitalizacion": self.period.day_count,
            "erroresAdmision": list(self.patient.admission_errors),
            "evoluciones": [d.to_dict() for d in self.progress_days],
            "erroresEvolucion": list(self.progress_errors),
            "advertencias": [w.to_dict() for w in self.warnings],
            "erroresAltaMedica": list(self.discharge_errors),
            "erroresEpicrisis": list(self.summary_errors),
            "erroresFoja": list(self.surgical.errors),
            "resultadosFoja": self.surgical.to_dict(),
            "doctores": self.staff.to_dict(),
            "estudios": [s.to_dict() for s in self.studies],
            "estudiosConteo": self.study_counts.to_dict(),
            "erroresEstudios": list(self.study_errors),
            "sesionesKinesiologia": self.study_counts.therapy_sessions,
            "comunicaciones": [c.to_dict() for c in self.communications],
            "totalErrores": self.total_errors,
            "estado": self.status.value,
        }

    def error_details(self) -> list[dict]:
        """Flatten every finding into typed {tipo, descripcion} entries."""
        details = [{"tipo": "Admisión", "descripcion": e} for e in self.patient.admission_errors]
        details += [{"tipo": "Evolución", "descripcion": e} for e in self.progress_errors]
        details += [{"tipo": w.kind, "descripcion": w.description} for w in self.warnings]
        details += [{"tipo": "Foja Quirúrgica", "descripcion": e} for e in self.surgical.errors]
        if not self.currently_admitted:
            details += [{"tipo": "Alta Médica", "descripcion": e} for e in self.discharge_errors]
            details += [{"tipo": "Epicrisis", "descripcion": e} for e in self.summary_errors]
        details += [{"tipo": "Estudios", "descripcion": e} for e in self.study_errors]
        return details

    def to_db_row(self) -> dict:
        """Convert to database row format."""
        admitted = self.currently_admitted
        return {
            "nombre_archivo": self.file_name,
            "nombre_paciente": self.patient.name or NOT_FOUND_LABEL,
            "dni_paciente": self.patient.national_id or NOT_FOUND_LABEL,
            "obra_social": self.patient.insurer or NOT_FOUND_LABEL_F,
            "habitacion": self.patient.room or NOT_FOUND_LABEL_F,
            "fecha_ingreso": self.period.admission.isoformat(),
            "fecha_alta": None if admitted else self.period.discharge.isoformat(),
            "total_errores": self.total_errors,
            "errores_admision": len(self.patient.admission_errors),
            "errores_evoluciones": len(self.progress_errors),
            "errores_foja_quirurgica": len(self.surgical.errors),
            "errores_alta_medica": 0 if admitted else len(self.discharge_errors),
            "errores_epicrisis": 0 if admitted else len(self.summary_errors),
            "bisturi_armonico": self.surgical.device_usage.value,
            "estado": self.status.value,
            "estudios_total": self.study_counts.total,
            "estudios_imagenes": self.study_counts.imaging,
            "estudios_laboratorio": self.study_counts.laboratory,
            "estudios_procedimientos": self.study_counts.procedures,
            "sesiones_kinesiologia": self.study_counts.therapy_sessions,
            "estudios": json.dumps([s.to_dict() for s in self.studies]),
            "errores_estudios": json.dumps(self.study_errors),
            "errores_detalle": json.dumps(self.error_details()),
            "comunicaciones": json.dumps([c.to_dict() for c in self.communications]),
            "datos_adicionales": json.dumps({
                "doctores": self.staff.to_dict(),
                "resultadosFoja": self.surgical.to_dict(),
                "diasHospitalizacion": self.period.day_count,
                "advertencias": [w.to_dict() for w in self.warnings],
            }),
            "created_at": self.created_at.isoformat(),
        }
