"""Heuristic extractors over normalized chart text."""

from .dates import resolve_period
from .demographics import extract_patient
from .discharge import check_discharge_order, check_discharge_summary
from .progress_notes import audit_progress_notes
from .staff import extract_staff
from .studies import extract_studies
from .surgical import analyze_surgical_record

__all__ = [
    "resolve_period",
    "extract_patient",
    "check_discharge_order",
    "check_discharge_summary",
    "audit_progress_notes",
    "extract_staff",
    "extract_studies",
    "analyze_surgical_record",
]
