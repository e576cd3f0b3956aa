"""Audit pipeline: one chart text in, one AuditResult out."""

import logging
from datetime import datetime

from .extraction.dates import local_timezone, resolve_period
from .extraction.demographics import extract_patient
from .extraction.discharge import check_discharge_order, check_discharge_summary
from .extraction.progress_notes import audit_progress_notes
from .extraction.staff import extract_staff
from .extraction.studies import extract_studies
from .extraction.surgical import analyze_surgical_record
from .models import AuditInputError, AuditResult, AuditStatus
from .normalizer import normalize_text
from .router import FindingRouter

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Faltan datos requeridos"


def audit_document(text: str, file_name: str, now: datetime | None = None) -> AuditResult:
    """Audit a medical-record text.

    Args:
        text: Text extracted from the chart PDF.
        file_name: Uploaded document file name.
        now: Reference moment for patients still admitted (defaults to now
            in the configured timezone).

    Raises:
        AuditInputError: Text or file name is missing.
        MissingAdmissionDateError: No admission date in the document.
    """
    if not text or not text.strip() or not file_name or not file_name.strip():
        raise AuditInputError(MISSING_INPUT_MESSAGE)

    tz = local_timezone()
    now = now or datetime.now(tz)
    if now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    else:
        now = now.astimezone(tz)

    text = normalize_text(text)
    period = resolve_period(text, now)
    patient = extract_patient(text)

    progress = audit_progress_notes(text, period, intensive_care=patient.intensive_care)

    # Discharge documents are not applicable while the patient is admitted
    discharge_errors: list[str] = []
    summary_errors: list[str] = []
    if not period.currently_admitted:
        discharge_errors = check_discharge_order(text)
        summary_errors = check_discharge_summary(text)

    staff = extract_staff(text)
    surgical = analyze_surgical_record(text)
    studies = extract_studies(text)

    communications = FindingRouter(staff).route(
        admission_errors=list(patient.admission_errors),
        progress_errors=progress.errors,
        warnings=progress.warnings,
        discharge_errors=discharge_errors,
        summary_errors=summary_errors,
        surgical=surgical,
        studies=studies.studies,
        study_errors=studies.errors,
    )

    total_errors = (
        len(patient.admission_errors)
        + len(progress.errors)
        + len(surgical.errors)
        + len(discharge_errors)
        + len(summary_errors)
        + len(studies.errors)
    )
    status = AuditStatus.APPROVED if total_errors == 0 else AuditStatus.PENDING_CORRECTION

    result = AuditResult(
        file_name=file_name,
        patient=patient,
        period=period,
        progress_days=progress.days,
        progress_errors=progress.errors,
        warnings=progress.warnings,
        discharge_errors=discharge_errors,
        summary_errors=summary_errors,
        surgical=surgical,
        staff=staff,
        studies=studies.studies,
        study_counts=studies.counts,
        study_errors=studies.errors,
        communications=communications,
        total_errors=total_errors,
        status=status,
        created_at=now,
    )

    logger.info(
        f"Audited {file_name}: {total_errors} error(s), "
        f"{len(communications)} communication(s), status={status.value}"
    )
    return result
