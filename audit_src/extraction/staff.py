"""Physician extraction from license-number ("matrícula") mentions."""

import re

from ..models import Doctor, StaffRoster
from .names import NAME_RUN, clean_person_name

LICENSE_PATTERN = re.compile(r"\b(?:mp|mn|matr[ií]cula)\b[:.\s]*(\d{3,6})\b", re.IGNORECASE)

_NAME_RUN = re.compile(NAME_RUN)

SURGEON_CONTEXT = re.compile(r"cirujan[oa]|cirug[ií]a|operaci[oó]n|quir[uú]rgic[oa]", re.IGNORECASE)
RESIDENT_CONTEXT = re.compile(r"residente|\bresident\b|evoluci[oó]n", re.IGNORECASE)

NAME_SEARCH_LINES = 3
CONTEXT_LINES = 5
MIN_NAME_LENGTH = 6


def _nearby_lines(index: int, count: int, radius: int) -> list[int]:
    """Line indices ordered by distance from index: i, i-1, i+1, i-2, ..."""
    order = [index]
    for step in range(1, radius + 1):
        order += [index - step, index + step]
    return [i for i in order if 0 <= i < count]


def _name_on_line(line: str) -> str | None:
    for match in _NAME_RUN.finditer(line):
        name = clean_person_name(match.group(1))
        if name and len(name) >= MIN_NAME_LENGTH:
            return name
    return None


def extract_staff(text: str) -> StaffRoster:
    """Group every licensed physician mentioned in the chart by role."""
    roster = StaffRoster()
    lines = text.split("\n")

    for i, line in enumerate(lines):
        license_match = LICENSE_PATTERN.search(line)
        if not license_match:
            continue

        name = None
        for j in _nearby_lines(i, len(lines), NAME_SEARCH_LINES):
            name = _name_on_line(lines[j])
            if name:
                break
        if not name:
            continue

        doctor = Doctor(name=name, license=license_match.group(1))
        context = " ".join(lines[max(0, i - CONTEXT_LINES):i + CONTEXT_LINES + 1])
        if SURGEON_CONTEXT.search(context):
            roster.surgeons.append(doctor)
        elif RESIDENT_CONTEXT.search(context):
            roster.residents.append(doctor)
        else:
            roster.others.append(doctor)

    return roster
