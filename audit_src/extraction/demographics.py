"""Patient demographics extraction from the chart header."""

import logging
import re

from ..config import config
from ..matching import MatchResult, PatternRule, first_match
from ..models import PatientRecord
from .names import CAPITALIZED_NAME_RUN, name_after_label

logger = logging.getLogger(__name__)

# Tried in order; the first label followed by a capitalized name of 4+ chars wins
NAME_LABELS = [
    r"\bnombre",
    r"\bpaciente",
    r"\bapellidos?(?:\s+y\s+nombres?)?",
]


def _min_length(length: int):
    def handler(match: re.Match) -> str | None:
        value = match.group(1).strip()
        return value if len(value) >= length else None
    return handler


NATIONAL_ID_RULES = [
    PatternRule.compile(r"\bdni[:\s.]*(\d{7,8})\b"),
    PatternRule.compile(r"\bdocumento[:\s.]*(\d{7,8})\b"),
    PatternRule.compile(r"\bd\.n\.i\.?[:\s]*(\d{7,8})\b"),
]

BIRTH_DATE_RULES = [
    PatternRule.compile(r"fecha[:\s]*(?:de\s+)?nacimiento[:\s]*(\d{1,2}/\d{1,2}/\d{4})"),
    PatternRule.compile(r"\bf\.?\s*nac\.?[:\s]*(\d{1,2}/\d{1,2}/\d{4})"),
]

SEX_RULES = [
    PatternRule.compile(r"\bsexo[:\s]*(mujer|hombre|femenino|masculino|f|m)\b"),
]

INSURER_RULES = [
    PatternRule.compile(r"obra[\s_]*social[ \t:]*(\d+[ \t-]*[A-Za-zÁÉÍÓÚáéíóúñÑ \t]+)", handler=_min_length(3)),
    PatternRule.compile(r"obra[\s_]*social[ \t:]*([A-Za-zÁÉÍÓÚáéíóúñÑ \t]+)", handler=_min_length(3)),
    PatternRule.compile(r"\bprepaga[ \t:]*([A-Za-zÁÉÍÓÚáéíóúñÑ \t]+)", handler=_min_length(3)),
]

ROOM_RULES = [
    PatternRule.compile(r"habitaci[oó]n[:\s]*([A-Za-z0-9 \-]+)"),
    PatternRule.compile(r"\bhab\b\.?[:\s]*([A-Za-z0-9 \-]+)"),
    PatternRule.compile(r"\bbox\b[:\s]*([A-Za-z0-9 \-]+)"),
    PatternRule.compile(r"\bsala\b[:\s]*([A-Za-z0-9 \-]+)"),
]

# "BOX n" is the hospital's term for a bed slot; "CAJA" is the cash desk
BOX_RULE = PatternRule.compile(r"\bbox\b[:\s-]*([A-Za-z0-9\-]+)")

ICU_TOKEN = re.compile(
    r"\b(u\.?t\.?i|u\.?c\.?i|utia|terapia\s+intensiva|cuidados\s+intensivos|unidad\s+coronaria)\b",
    re.IGNORECASE,
)
_ICU_PLACEMENT_CONTEXT = re.compile(
    r"habitaci[oó]n|\bhab\b|\bbox\b|\bcama\b|\bsector\b|\bservicio\b|\bsala\b"
    r"|internaci[oó]n|internad[oa]|ingres[oa]|\bpase\s+a\b",
    re.IGNORECASE,
)
ICU_CONTEXT_CHARS = 150


def _normalize_sex(value: str) -> str:
    s = value.lower()
    if s in ("f", "femenino"):
        return "Femenino"
    if s in ("m", "masculino"):
        return "Masculino"
    return s[:1].upper() + s[1:]


def _clean_room(raw: str) -> str:
    room = re.sub(r"[ ,]+-?$", "", raw).strip()
    room = re.sub(r"\s+", " ", room)
    return room.upper() if re.match(r"^box\b", room, re.IGNORECASE) else room


def extract_room(header: str, full_text: str) -> str | None:
    """Room/bed label.

    A generic room label in the header is taken first, but an explicit
    "BOX n" anywhere in the document always wins.
    """
    box = first_match([BOX_RULE], full_text)
    if box:
        return _clean_room(f"BOX {box.value}")
    room = first_match(ROOM_RULES, header)
    if not room:
        room = first_match(ROOM_RULES, full_text)
    return _clean_room(room.value) if room else None


def detect_intensive_care(room: str | None, full_text: str) -> bool:
    """Whether the patient is placed in an intensive-care unit.

    The room label is checked first; otherwise an ICU mention only counts
    when its surroundings talk about placement (room, sector, admission).
    """
    if room and ICU_TOKEN.search(room):
        return True
    for match in ICU_TOKEN.finditer(full_text):
        start = max(0, match.start() - ICU_CONTEXT_CHARS)
        context = full_text[start:match.end() + ICU_CONTEXT_CHARS]
        if _ICU_PLACEMENT_CONTEXT.search(context):
            return True
    return False


def _patient_name(header: str) -> MatchResult:
    for label in NAME_LABELS:
        name = name_after_label(label, header, name_run=CAPITALIZED_NAME_RUN)
        if name:
            return MatchResult(name)
    return MatchResult.not_found()


def extract_patient(text: str, window_lines: int | None = None) -> PatientRecord:
    """Extract demographics from normalized chart text.

    Only the leading window is searched for identity fields. Every missing
    required field adds an admission error; none of them is fatal.
    """
    window_lines = window_lines or config.DEMOGRAPHICS_WINDOW_LINES
    header = "\n".join(text.split("\n")[:window_lines])
    errors: list[str] = []

    name = _patient_name(header)
    if not name:
        errors.append("Nombre del paciente no encontrado")

    national_id = first_match(NATIONAL_ID_RULES, header)
    if not national_id:
        errors.append("DNI del paciente no encontrado")

    birth_date = first_match(BIRTH_DATE_RULES, header)
    if not birth_date:
        errors.append("Fecha de nacimiento no encontrada")

    sex = first_match(SEX_RULES, header)
    if not sex:
        errors.append("Sexo del paciente no especificado")

    insurer = first_match(INSURER_RULES, header)

    room = extract_room(header, text)
    intensive_care = detect_intensive_care(room, text)

    if errors:
        logger.debug(f"Admission data incomplete: {errors}")

    return PatientRecord(
        name=name.value,
        national_id=national_id.value,
        birth_date=birth_date.value,
        sex=_normalize_sex(sex.value) if sex else None,
        insurer=insurer.value,
        room=room,
        intensive_care=intensive_care,
        admission_errors=tuple(errors),
    )
