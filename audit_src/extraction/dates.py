"""Admission/discharge resolution and hospitalization day count."""

import logging
import re
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from ..config import config
from ..matching import PatternRule, first_match
from ..models import HospitalizationPeriod, MissingAdmissionDateError

logger = logging.getLogger(__name__)

DATE = r"(\d{1,2}/\d{1,2}/\d{2,4})"
TIME = r"(\d{1,2}:\d{2}(?::\d{2})?)"

# Label, then at most a short run of non-digit characters on the same line
_ADMISSION_LABEL = r"fecha[\s_]*(?:de[\s_]+)?ingreso"
_DISCHARGE_LABEL = r"fecha[\s_]*(?:de[\s_]+)?(?:alta|egreso)"
_GAP = r"[^\d\n]{0,20}?"


def parse_day_month_year(date_str: str, time_str: str | None = None, tz: tzinfo | None = None) -> datetime | None:
    """Build a datetime from DD/MM/YYYY (two-digit years are 20YY) and optional HH:MM[:SS].

    Returns None for impossible dates (e.g. 31/02/2024).
    """
    try:
        day_s, month_s, year_s = date_str.split("/")
        year = int(year_s)
        if year < 100:
            year += 2000
        hour = minute = second = 0
        if time_str:
            parts = [int(p) for p in time_str.split(":")]
            hour = parts[0]
            minute = parts[1] if len(parts) > 1 else 0
            second = parts[2] if len(parts) > 2 else 0
        return datetime(year, int(month_s), int(day_s), hour, minute, second, tzinfo=tz)
    except ValueError:
        return None


def _timestamp_rules(label: str, tz: tzinfo) -> list[PatternRule]:
    """Date+time first, then date only."""

    def with_time(match: re.Match) -> str | None:
        dt = parse_day_month_year(match.group(1), match.group(2), tz)
        return dt.isoformat() if dt else None

    def date_only(match: re.Match) -> str | None:
        dt = parse_day_month_year(match.group(1), None, tz)
        return dt.isoformat() if dt else None

    return [
        PatternRule.compile(label + _GAP + DATE + r"[\s,-]+" + TIME, handler=with_time),
        PatternRule.compile(label + _GAP + DATE, handler=date_only),
    ]


def local_timezone() -> tzinfo:
    return ZoneInfo(config.AUDIT_TIMEZONE)


def extract_admission_discharge(text: str, tz: tzinfo | None = None) -> tuple[datetime | None, datetime | None]:
    """Locate the admission and discharge timestamps by label proximity."""
    tz = tz or local_timezone()
    admission = first_match(_timestamp_rules(_ADMISSION_LABEL, tz), text)
    discharge = first_match(_timestamp_rules(_DISCHARGE_LABEL, tz), text)
    return (
        datetime.fromisoformat(admission.value) if admission else None,
        datetime.fromisoformat(discharge.value) if discharge else None,
    )


def resolve_period(text: str, now: datetime | None = None) -> HospitalizationPeriod:
    """Resolve the hospitalization window.

    Raises:
        MissingAdmissionDateError: No admission date in the document.
    """
    tz = local_timezone()
    now = now or datetime.now(tz)
    if now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    else:
        now = now.astimezone(tz)

    admission, discharge = extract_admission_discharge(text, tz)
    if admission is None:
        raise MissingAdmissionDateError()

    if discharge is not None and discharge < admission:
        logger.warning(
            f"Discharge {discharge.isoformat()} precedes admission {admission.isoformat()}; "
            "treating patient as currently admitted"
        )
        discharge = None

    period = HospitalizationPeriod(admission=admission, discharge=discharge, now=now)
    logger.debug(
        f"Period resolved: admission={admission.isoformat()} "
        f"discharge={discharge.isoformat() if discharge else None} days={period.day_count}"
    )
    return period
