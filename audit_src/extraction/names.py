"""Person-name capture next to a role or field label.

Names in the chart are printed in uppercase right after their label, but
PDF text runs fields together ("PEREZ JUAN INSTRUMENTADOR GOMEZ ANA"), so a
captured run is cut at the first label word that follows the name.
"""

import re

from ..matching import MatchResult

UPPER = "A-ZÁÉÍÓÚÑÜ"
LOWER = "a-záéíóúñü"

# Words that follow a name on the same line but are never part of it
NOISE_WORDS = frozenset({
    "AYUDANTE", "PRIMER", "SEGUNDO", "RESIDENCIA", "RESIDENTE",
    "ANESTESISTA", "ANESTESIOLOGO", "ANESTESIÓLOGO",
    "INSTRUMENTADOR", "INSTRUMENTADORA", "CIRUJANO", "CIRUJANA",
    "MP", "MN", "MATRICULA", "MATRÍCULA",
    "DNI", "HC", "SEXO", "EDAD", "FECHA", "HORA", "OBRA", "SOCIAL",
    "HABITACION", "HABITACIÓN", "BOX", "CAMA", "NACIMIENTO",
    "BISTURI", "BISTURÍ", "USO", "COMIENZO", "INICIO", "FIN",
    "FINALIZACION", "FINALIZACIÓN", "DIAGNOSTICO", "DIAGNÓSTICO",
    "PROCEDIMIENTO", "DEL", "PACIENTE", "NOMBRE", "NOMBRES", "APELLIDO",
    "APELLIDOS",
})

# Courtesy titles dropped from the front of a name
TITLE_WORDS = frozenset({"DR", "DRA", "LIC", "INST"})

# Whole uppercase words; a capitalized word ("Hora") is not part of the run
_WORD = rf"[{UPPER}][{UPPER}'.-]*"
NAME_RUN = rf"({_WORD}(?:[ ,]+{_WORD})*)(?![{LOWER}])"

# Patient headers may be typed in title case ("Juan Pérez")
_CAPITALIZED_WORD = rf"[{UPPER}](?:[{LOWER}]+|[{UPPER}'.-]*)"
CAPITALIZED_NAME_RUN = rf"({_CAPITALIZED_WORD}(?:[ ,]+{_CAPITALIZED_WORD})*)(?![{LOWER}])"


def clean_person_name(raw: str, noise_words: frozenset[str] = NOISE_WORDS) -> str | None:
    """Trim a captured name at the first noise word and drop leading titles.

    Returns None when nothing name-like remains.
    """
    tokens = [t for t in re.split(r"[\s,]+", raw.strip()) if t]
    while tokens and tokens[0].upper().rstrip(".") in TITLE_WORDS:
        tokens.pop(0)
    kept = []
    for token in tokens:
        if token.upper().strip(".") in noise_words:
            break
        kept.append(token)
    name = " ".join(kept).strip(" .,-'")
    return name or None


def find_name_after_label(
    label_regex: str, text: str, min_length: int = 4, name_run: str = NAME_RUN,
) -> MatchResult:
    """Name printed right after a case-insensitive label, with its position."""
    pattern = re.compile(rf"(?i:{label_regex})[ \t:.]*" + name_run)
    for match in pattern.finditer(text):
        name = clean_person_name(match.group(1))
        if name and len(name) >= min_length:
            return MatchResult(name, match.start(), match.end())
    return MatchResult.not_found()


def name_after_label(
    label_regex: str, text: str, min_length: int = 4, name_run: str = NAME_RUN,
) -> str | None:
    """Name printed right after a case-insensitive label."""
    return find_name_after_label(label_regex, text, min_length, name_run).value
