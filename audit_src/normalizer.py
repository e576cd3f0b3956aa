"""Text cleanup applied to every extracted chart before auditing."""

import re

# Pagination and print-stamp boilerplate repeated on every page
_BOILERPLATE_PATTERNS = [
    re.compile(r"^P[aá]gina\s+\d+\s+de\s+\d+\s*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Page\s+\d+\s+of\s+\d+\s*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Fecha\s+(?:de\s+)?impresi[oó]n:.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Print\s+date:.*$", re.IGNORECASE | re.MULTILINE),
]

_HORIZONTAL_WS = re.compile(r"[ \t\v]+")


def normalize_text(text: str) -> str:
    """Normalize raw PDF text.

    Form feeds become spaces, line endings become "\\n", runs of spaces
    and tabs collapse to one space, lines are trimmed and pagination /
    print-date lines are blanked. Terms are never translated ("BOX" stays
    "BOX"). Applying this twice yields the same text.
    """
    text = text.replace("\f", " ")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [_HORIZONTAL_WS.sub(" ", line).strip() for line in text.split("\n")]
    text = "\n".join(lines)
    for pattern in _BOILERPLATE_PATTERNS:
        text = pattern.sub("", text)
    return text
