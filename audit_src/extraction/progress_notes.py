"""Daily progress-note ("evolución médica diaria") audit.

Every calendar day of the hospitalization needs a progress note, except
the admission day. A missing note on the discharge day (or on the current
day for patients still admitted) is only a warning.

Evidence comes from two passes:
1. Dated "Visita DD/MM/YYYY" markers, with the note heading searched in the
   text that follows the marker.
2. Every occurrence of each remaining day's date anywhere in the document,
   with the heading searched in the surrounding text. This recovers days
   whose visit marker is printed in another format.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta

from ..config import config
from ..matching import any_match, compile_all
from ..models import (
    AuditWarning,
    DayStatus,
    HospitalizationPeriod,
    ProgressNoteFinding,
    format_day,
)
from .dates import parse_day_month_year

logger = logging.getLogger(__name__)

VISIT_PATTERN = re.compile(
    r"visita[\s_]+(\d{1,2}/\d{1,2}/\d{2,4})(?:\s+\d{1,2}:\d{2})?",
    re.IGNORECASE,
)

PROGRESS_NOTE_PATTERNS = compile_all([
    r"evoluci[oó]n[\s_]+m[eé]dica[\s_]+diaria",
    r"\bevol\.?[\s_]+m[eé]dica[\s_]+diaria",
    r"evoluci[oó]n[\s_]+diaria",
])

# Headings used by the intensive-care team instead of the ward template
ICU_NOTE_PATTERNS = compile_all([
    r"evoluci[oó]n[\s_]+(?:de[\s_]+)?(?:u\.?t\.?i|u\.?c\.?i|terapia[\s_]+intensiva|cuidados[\s_]+intensivos)\b",
    r"\b(?:u\.?t\.?i|u\.?c\.?i|terapia[\s_]+intensiva)[\s_:-]+evoluci[oó]n",
    r"evoluci[oó]n[\s_]+(?:del[\s_]+)?intensivista",
    r"parte[\s_]+diario[\s_]+(?:de[\s_]+)?(?:u\.?t\.?i|u\.?c\.?i|terapia)",
])

# A date printed right after one of these labels is not note evidence
_HEADER_DATE_LABEL = re.compile(
    r"fecha[\s_]*(?:de[\s_]+)?(?:ingreso|alta|egreso|nacimiento)[^\d\n]{0,20}$",
    re.IGNORECASE,
)

DAY_SEARCH_BEFORE = 500
DAY_SEARCH_AFTER = 1500


@dataclass
class ProgressNoteAudit:
    """Per-day classification plus the findings derived from it."""
    days: list[ProgressNoteFinding] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[AuditWarning] = field(default_factory=list)


def iter_days(first: date, last: date):
    """Every calendar day from first to last, inclusive."""
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def _day_regex(day: date) -> re.Pattern:
    """Match a day as D/M/YYYY or DD/MM/YY, padded or not."""
    return re.compile(
        rf"(?<!\d)0?{day.day}/0?{day.month}/(?:{day.year}|{day.year % 100:02d})(?!\d)"
    )


class ProgressNoteAuditor:
    """Classifies each hospitalization day by progress-note evidence."""

    def __init__(self, intensive_care: bool = False, window_chars: int | None = None):
        self.window_chars = window_chars or config.PROGRESS_NOTE_WINDOW_CHARS
        self.patterns = list(PROGRESS_NOTE_PATTERNS)
        if intensive_care:
            self.patterns += ICU_NOTE_PATTERNS

    def _has_note(self, block: str) -> bool:
        return any_match(self.patterns, block)

    def visit_marker_days(self, text: str, first: date, last: date) -> set[date]:
        """Days whose "Visita" marker is followed by a progress-note heading."""
        covered: set[date] = set()
        for match in VISIT_PATTERN.finditer(text):
            visit = parse_day_month_year(match.group(1))
            if visit is None or not first <= visit.date() <= last:
                continue
            block = text[match.start():match.start() + self.window_chars]
            if self._has_note(block):
                covered.add(visit.date())
        return covered

    def date_mention_covers(self, text: str, day: date) -> bool:
        """Whether any mention of the day sits near a progress-note heading."""
        for match in _day_regex(day).finditer(text):
            prefix = text[max(0, match.start() - 40):match.start()]
            if _HEADER_DATE_LABEL.search(prefix):
                continue
            start = max(0, match.start() - DAY_SEARCH_BEFORE)
            if self._has_note(text[start:match.end() + DAY_SEARCH_AFTER]):
                return True
        return False

    def audit(self, text: str, period: HospitalizationPeriod) -> ProgressNoteAudit:
        first, last = period.first_day, period.last_day
        covered = self.visit_marker_days(text, first, last)

        result = ProgressNoteAudit()
        for day in iter_days(first, last):
            if day != first and day not in covered and self.date_mention_covers(text, day):
                covered.add(day)
            result.days.append(self._classify(day, first, last, covered, period, result))

        logger.debug(
            f"Progress notes: {len(covered)} day(s) covered, "
            f"{len(result.errors)} missing, {len(result.warnings)} warning(s)"
        )
        return result

    @staticmethod
    def _classify(
        day: date,
        first: date,
        last: date,
        covered: set[date],
        period: HospitalizationPeriod,
        result: ProgressNoteAudit,
    ) -> ProgressNoteFinding:
        day_str = format_day(day)
        if day == first:
            return ProgressNoteFinding(day, DayStatus.ADMISSION_EXEMPT)
        if day in covered:
            return ProgressNoteFinding(day, DayStatus.COVERED)
        if day == last:
            if period.currently_admitted:
                warning = AuditWarning(
                    kind="Día actual sin evolución",
                    description=f"⚠️ ADVERTENCIA: {day_str} - Día en curso (paciente internado), evolución diaria pendiente",
                    date=day_str,
                )
            else:
                warning = AuditWarning(
                    kind="Día de alta sin evolución",
                    description=f"⚠️ ADVERTENCIA: {day_str} - Día de alta, usualmente no requiere evolución diaria",
                    date=day_str,
                )
            result.warnings.append(warning)
            return ProgressNoteFinding(day, DayStatus.DISCHARGE_WARNING, warning.description)

        error = f"❌ CRÍTICO: {day_str} - Falta 'Evolución médica diaria'"
        result.errors.append(error)
        return ProgressNoteFinding(day, DayStatus.CRITICAL_MISSING, error)


def audit_progress_notes(
    text: str,
    period: HospitalizationPeriod,
    intensive_care: bool = False,
) -> ProgressNoteAudit:
    """Audit daily progress notes across the hospitalization window."""
    return ProgressNoteAuditor(intensive_care=intensive_care).audit(text, period)
