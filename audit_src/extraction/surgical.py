"""Surgical record ("foja quirúrgica") analysis.

The record is located by its heading. Charts exported without a heading
are still analyzed when at least two circumstantial indicators (surgeon,
anesthesiologist, start time, harmonic scalpel mention) are present; the
analysis window then starts at the earliest indicator.
"""

import logging
import re
from itertools import combinations

from ..config import config
from ..matching import MatchResult, PatternRule, first_match
from ..models import (
    CRITICAL_ROLES,
    DeviceUsage,
    SurgicalRecord,
    SurgicalRole,
    TeamMember,
)
from .names import find_name_after_label

logger = logging.getLogger(__name__)

HEADER_RULES = [
    PatternRule.compile(r"foja[\s_]+quir[uú]rgica", handler=lambda m: m.group(0)),
    PatternRule.compile(r"hoja[\s_]+quir[uú]rgica", handler=lambda m: m.group(0)),
    PatternRule.compile(r"protocolo[\s_]+quir[uú]rgico", handler=lambda m: m.group(0)),
    PatternRule.compile(r"protocolo[\s_]+operatorio", handler=lambda m: m.group(0)),
    PatternRule.compile(r"registro[\s_]+quir[uú]rgico", handler=lambda m: m.group(0)),
    PatternRule.compile(r"parte[\s_]+quir[uú]rgico", handler=lambda m: m.group(0)),
]

# Checked in this order so "primer ayudante" is never read as "ayudante"
ROLE_LABELS = {
    SurgicalRole.SURGEON: r"\bcirujan[oa]\b",
    SurgicalRole.FIRST_ASSISTANT: r"\bprimer[\s_]+ayudante",
    SurgicalRole.ANESTHESIOLOGIST: r"\banestesi(?:sta|[oó]log[oa])",
    SurgicalRole.INSTRUMENTALIST: r"\binstrumentador(?:a)?",
    SurgicalRole.RESIDENT_ASSISTANT: r"\bayudante[\s_]+(?:de[\s_]+)?residencia",
    SurgicalRole.ASSISTANT: r"(?<!primer )(?<!primer_)\bayudante\b(?![\s_]+(?:de[\s_]+)?residencia)",
}

_ANSWER = r"\b(s[ií]|no)\b"

DEVICE_RULES = [
    PatternRule.compile(r"uso[\s_]+de[\s_]+bistur[ií][\s_]+arm[oó]nico\??[:\s]*" + _ANSWER),
    PatternRule.compile(r"bistur[ií][\s_]+arm[oó]nico\??[:\s]*" + _ANSWER),
    PatternRule.compile(r"arm[oó]nico\??[:\s]*" + _ANSWER),
    PatternRule.compile(r"bistur[ií][^\n]*?" + _ANSWER),
    PatternRule.compile(r"arm[oó]nico[^\n]*?" + _ANSWER),
]

DEVICE_MENTION = re.compile(r"bistur[ií][\s_]+arm[oó]nico", re.IGNORECASE)

START_TIME_RULES = [
    PatternRule.compile(r"hora[\s_]+(?:de[\s_]+)?comienzo[:\s]*(\d{1,2}:\d{2})"),
    PatternRule.compile(r"hora[\s_]+(?:de[\s_]+)?inicio[:\s]*(\d{1,2}:\d{2})"),
    PatternRule.compile(r"\bcomienzo[:\s]*(\d{1,2}:\d{2})"),
]

END_TIME_RULES = [
    PatternRule.compile(r"hora[\s_]+(?:de[\s_]+)?finalizaci[oó]n[:\s]*(\d{1,2}:\d{2})"),
    PatternRule.compile(r"hora[\s_]+(?:de[\s_]+)?fin\b[:\s]*(\d{1,2}:\d{2})"),
    PatternRule.compile(r"\bfinalizaci[oó]n[:\s]*(\d{1,2}:\d{2})"),
]

_LABELED_DATE = re.compile(r"fecha[^\d\n]{0,20}(\d{1,2}/\d{1,2}/\d{4})", re.IGNORECASE)
_ANY_DATE = re.compile(r"(?<!\d)(\d{1,2}/\d{1,2}/\d{4})(?!\d)")

MIN_INDICATORS = 2

NOT_FOUND_ERROR = "❌ CRÍTICO: No se encontró foja quirúrgica en el documento"
MISSING_START_ERROR = "❌ CRÍTICO: Hora de comienzo no encontrada en foja quirúrgica"
MISSING_DATE_ERROR = "❌ CRÍTICO: Fecha de cirugía no encontrada en foja quirúrgica"
MISSING_END_WARNING = "⚠️ ADVERTENCIA: Hora de finalización no encontrada en foja quirúrgica"


def _indicator_positions(text: str) -> list[int]:
    """Start offsets of each circumstantial indicator that is present."""
    positions = []
    for role in (SurgicalRole.SURGEON, SurgicalRole.ANESTHESIOLOGIST):
        found = find_name_after_label(ROLE_LABELS[role], text)
        if found:
            positions.append(found.start)
    start = first_match(START_TIME_RULES, text)
    if start:
        positions.append(start.start)
    mention = DEVICE_MENTION.search(text)
    if mention:
        positions.append(mention.start())
    return positions


def locate_section(text: str) -> int | None:
    """Offset where the surgical record starts, or None when there is none."""
    header = first_match(HEADER_RULES, text)
    if header:
        return header.start
    positions = _indicator_positions(text)
    if len(positions) >= MIN_INDICATORS:
        logger.debug(f"No surgical header; {len(positions)} indicators present")
        return min(positions)
    return None


def _device_usage(window: str) -> DeviceUsage:
    answer = first_match(DEVICE_RULES, window)
    if not answer:
        return DeviceUsage.UNDETERMINED
    return DeviceUsage.USED if answer.value.lower().startswith("s") else DeviceUsage.NOT_USED


def _surgery_date(before_start: str) -> str | None:
    """Nearest date printed before the start time, preferring a labeled one."""
    for pattern in (_LABELED_DATE, _ANY_DATE):
        dates = pattern.findall(before_start)
        if dates:
            return dates[-1]
    return None


def extract_team(window: str) -> list[TeamMember]:
    team = []
    for role, label in ROLE_LABELS.items():
        name = find_name_after_label(label, window)
        if name:
            team.append(TeamMember(role, name.value))
    return team


def validate_unique_team(team: list[TeamMember]) -> list[str]:
    """One error per pair of critical roles held by the same person."""
    by_role: dict[SurgicalRole, str] = {}
    for member in team:
        if member.role in CRITICAL_ROLES:
            by_role[member.role] = member.name.strip().upper()

    errors = []
    for first, second in combinations(by_role, 2):
        if by_role[first] == by_role[second]:
            errors.append(
                f"❌ CRÍTICO: El {first.label} y el {second.label} tienen el mismo "
                f"nombre: {by_role[first]}. Deben ser diferentes."
            )
    return errors


def analyze_surgical_record(text: str, window_chars: int | None = None) -> SurgicalRecord:
    """Analyze the surgical record of a normalized chart."""
    window_chars = window_chars or config.SURGICAL_WINDOW_CHARS
    record = SurgicalRecord()

    offset = locate_section(text)
    if offset is None:
        record.errors.append(NOT_FOUND_ERROR)
        return record

    record.found = True
    window = text[offset:offset + window_chars]

    record.device_usage = _device_usage(window)
    record.team = extract_team(window)

    start: MatchResult = first_match(START_TIME_RULES, window)
    if start:
        record.start_time = start.value
        record.surgery_date = _surgery_date(window[:start.start])
        if record.surgery_date is None:
            record.errors.append(MISSING_DATE_ERROR)
    else:
        record.errors.append(MISSING_START_ERROR)

    end = first_match(END_TIME_RULES, window)
    if end:
        record.end_time = end.value
    else:
        record.errors.append(MISSING_END_WARNING)

    record.errors.extend(validate_unique_team(record.team))

    logger.debug(
        f"Surgical record: team={len(record.team)} device={record.device_usage.value} "
        f"errors={len(record.errors)}"
    )
    return record
