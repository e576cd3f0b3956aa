"""Ancillary study extraction (imaging, laboratory, procedures).

The chart is scanned line by line. Pages are tracked through "Página N"
markers. Pages belonging to studies the patient brought from outside the
institution are skipped (only the section lines when the text has no page
markers), but physiotherapy ("kinesiología") sessions are always counted
because they happen in-house.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator

from ..models import Study, StudyCategory, StudyCounts

logger = logging.getLogger(__name__)

THERAPY_TYPE = "Kinesiología"

DATE_PATTERN = re.compile(r"(?<!\d)(\d{1,2}/\d{1,2}/\d{2,4})(?!\d)")
TIME_PATTERN = re.compile(r"(?<!\d)(\d{1,2}:\d{2}(?::\d{2})?)(?!\d)")
PAGE_PATTERN = re.compile(r"^p[aá]gina\s+(\d+)\b", re.IGNORECASE)

REPORT_PATTERN = re.compile(r"informe|impresi[oó]n|conclusi[oó]n|resultado", re.IGNORECASE)
NEGATED_REPORT_PATTERN = re.compile(
    r"\b(?:sin|falta(?:n)?|no\s+(?:hay|tiene|posee))\s+(?:de\s+)?"
    r"(?:informe|resultado|conclusi[oó]n)"
    r"|(?:informe|resultado)s?\s+pendientes?",
    re.IGNORECASE,
)
RESULT_PATTERN = re.compile(r"(?:resultado|impresi[oó]n|conclusi[oó]n)[:\s-]+(.{10,200})", re.IGNORECASE)
LOCATION_PATTERN = re.compile(r"servicio[:\s]+([a-z0-9\s]+)$", re.IGNORECASE)

REGION_PATTERN = re.compile(
    r"\bde\s+(t[oó]rax|abdomen|pelvis|columna|cerebro|cr[aá]neo|cuello|rodilla|hombro"
    r"|hep[aá]tico|renal|tiroides|obst[eé]trica|venoso|arterial|car[oó]tideo)\b",
    re.IGNORECASE,
)

IMAGING_PATTERNS = [
    (r"\b(?:tac|tc|tomograf[ií]a)\b", "TAC"),
    (r"\b(?:rm|rmn|resonancia)\b", "Resonancia Magnética"),
    (r"\b(?:rx|radiograf[ií]a)\b", "Radiografía"),
    (r"\b(?:eco|ecograf[ií]a|ultrasonido)\b(?![-\s]?cardio)", "Ecografía"),
    (r"\bdoppler\b", "Doppler"),
    (r"\b(?:angiotac|angio[-\s]?rm)\b", "Angio"),
]

LABORATORY_PATTERNS = [
    (r"\bhemograma\b", "Hemograma"),
    (r"\bpcr\b(?![-\w])", "PCR"),
    (r"\bvsg\b", "VSG"),
    (r"\bglucemia\b", "Glucemia"),
    (r"\bcreatinin(?:a|emia)?\b", "Creatinina"),
    (r"\burea\b", "Urea"),
    (r"\b(?:ionograma|sodio|potasio|cloro)\b", "Ionograma"),
    (r"\b(?:hep[aá]tic[oa]|tgo|tgp|gamm?aglutamil|bilirrubinas?)\b", "Perfil hepático"),
    (r"\b(?:ur[ie]n[aá]lisis|sumario\s+de\s+orina|orina\s+completa)\b", "Orina completa"),
]

PROCEDURE_PATTERNS = [
    (r"\bendoscop[ií]a\s+(?:digestiva\s+)?alta\b", "Endoscopía alta"),
    (r"\bcolonoscop[ií]a\b", "Colonoscopía"),
    (r"\bbroncoscop[ií]a\b", "Broncoscopía"),
    (r"\beco[-\s]?cardiogram?a\b", "Ecocardiograma"),
    (r"\b(?:ecg|electrocardiograma)\b", "Electrocardiograma"),
    (r"\b(?:paracentesis|toracocentesis|punci[oó]n\s+lumbar)\b", "Procedimiento"),
]

THERAPY_PATTERN = re.compile(
    r"\b(?:ktr|kine|kinesio|kinesiolog[ií]a|kinesioterapia|kinesioter\w+)\b",
    re.IGNORECASE,
)

# Types that never carry an anatomical region
NO_REGION_TYPES = frozenset({
    THERAPY_TYPE, "Perfil hepático", "Hemograma", "PCR", "VSG", "Glucemia",
    "Creatinina", "Urea", "Orina completa", "Ionograma",
})

EXTERNAL_SECTION_PATTERN = re.compile(
    r"ex[áa]menes\s+complementarios|estudios\s+entregados\s+por\s+el\s+paciente",
    re.IGNORECASE,
)
MAIN_SECTION_PATTERN = re.compile(
    r"evoluci[oó]n|\bvisita\b|alta\s+m[eé]dica|epicrisis|\bfoja\b|cirug[ií]a",
    re.IGNORECASE,
)


def _compile(patterns):
    return [(re.compile(regex, re.IGNORECASE), label) for regex, label in patterns]


FAMILIES = [
    (StudyCategory.IMAGING, _compile(IMAGING_PATTERNS)),
    (StudyCategory.LABORATORY, _compile(LABORATORY_PATTERNS)),
    (StudyCategory.PROCEDURE, _compile(PROCEDURE_PATTERNS)),
]


@dataclass
class StudyExtraction:
    """Deduplicated studies, their counts and missing-report errors."""
    studies: list[Study] = field(default_factory=list)
    counts: StudyCounts = field(default_factory=StudyCounts)
    errors: list[str] = field(default_factory=list)


def has_report(line: str) -> bool:
    """Whether the line mentions a report, ignoring "sin informe" style negations."""
    return bool(REPORT_PATTERN.search(NEGATED_REPORT_PATTERN.sub(" ", line)))


def study_type(base: str, line: str) -> str:
    if base in NO_REGION_TYPES:
        return base
    region = REGION_PATTERN.search(line)
    return f"{base} de {region.group(1)}" if region else base


def build_study(category: StudyCategory, base_type: str, line: str, page: int) -> Study:
    date = DATE_PATTERN.search(line)
    time = TIME_PATTERN.search(line)
    location = LOCATION_PATTERN.search(line)
    result = RESULT_PATTERN.search(line)
    report_present = has_report(line)

    warnings = []
    if not report_present:
        warnings.append("sin informe")
    if not date:
        warnings.append("sin fecha")

    return Study(
        category=category,
        type=study_type(base_type, line),
        date=date.group(1) if date else None,
        time=time.group(1) if time else None,
        location=location.group(1).strip() if location else None,
        result=result.group(1).strip() if result else None,
        report_present=report_present,
        warnings=warnings,
        page=page,
    )


def scan_sections(lines: list[str]) -> Iterator[tuple[int, bool, str]]:
    """Yield (page, inside_external_section, line) for every non-marker line.

    An external section runs from its heading until the next main chart
    section (progress notes, visits, discharge, surgery).
    """
    page = 1
    inside = False
    for line in lines:
        page_match = PAGE_PATTERN.match(line.strip())
        if page_match:
            page = int(page_match.group(1))
            continue
        if EXTERNAL_SECTION_PATTERN.search(line):
            inside = True
        elif inside and MAIN_SECTION_PATTERN.search(line):
            inside = False
        yield page, inside, line


def has_page_markers(lines: list[str]) -> bool:
    return any(PAGE_PATTERN.match(line.strip()) for line in lines)


def external_pages(lines: list[str]) -> set[int]:
    """Pages that belong to externally supplied study sections."""
    return {page for page, inside, _ in scan_sections(lines) if inside}


def deduplicate(studies: list[Study]) -> list[Study]:
    """Keep the first study per (category, type, date)."""
    seen = set()
    unique = []
    for study in studies:
        if study.dedup_key in seen:
            continue
        seen.add(study.dedup_key)
        unique.append(study)
    return unique


def missing_report_error(study: Study) -> str:
    date = f" ({study.date})" if study.date else ""
    return f"Estudio sin informe: [{study.category.value}] {study.type}{date} (Hoja {study.page})"


def extract_studies(text: str) -> StudyExtraction:
    """Extract ancillary studies from normalized chart text."""
    lines = text.split("\n")
    # Whole pages are only skipped when the text carries real page markers
    skipped_pages = external_pages(lines) if has_page_markers(lines) else set()

    candidates: list[Study] = []
    therapy_pages: set[int] = set()

    for page, inside, raw in scan_sections(lines):
        line = raw.strip()
        if not line:
            continue

        if THERAPY_PATTERN.search(line):
            therapy_pages.add(page)

        if inside or page in skipped_pages:
            continue

        for category, patterns in FAMILIES:
            for pattern, label in patterns:
                if pattern.search(line):
                    candidates.append(build_study(category, label, line, page))
                    break

    extraction = StudyExtraction(studies=deduplicate(candidates))

    if therapy_pages:
        extraction.studies.append(Study(
            category=StudyCategory.PROCEDURE,
            type=THERAPY_TYPE,
            report_present=True,
            page=min(therapy_pages),
            sessions=len(therapy_pages),
        ))

    extraction.counts = StudyCounts(
        total=len(extraction.studies),
        imaging=sum(1 for s in extraction.studies if s.category == StudyCategory.IMAGING),
        laboratory=sum(1 for s in extraction.studies if s.category == StudyCategory.LABORATORY),
        procedures=sum(1 for s in extraction.studies if s.category == StudyCategory.PROCEDURE),
        therapy_sessions=len(therapy_pages),
    )
    extraction.errors = [
        missing_report_error(s) for s in extraction.studies
        if not s.report_present and s.type != THERAPY_TYPE
    ]

    if skipped_pages:
        logger.debug(f"Skipped externally supplied study pages: {sorted(skipped_pages)}")
    logger.debug(f"Studies: {extraction.counts.to_dict()}")
    return extraction
