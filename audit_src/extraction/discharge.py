"""Discharge order and discharge-summary presence checks.

Both documents are printed at the end of the chart, so only the tail of
the normalized text is searched.
"""

import logging

from ..config import config
from ..matching import any_match, compile_all

logger = logging.getLogger(__name__)

DISCHARGE_ORDER_PATTERNS = compile_all([
    r"alta[\s_]+m[eé]dica",
    r"registro[\s_]+de[\s_]+alta",
    r"egreso[\s_]+(?:sanatorial|hospitalario)",
    r"\bdischarge\b",
    r"\begreso\b",
])

DISCHARGE_SUMMARY_PATTERNS = compile_all([
    r"epicr[ií]sis",
    r"resumen[\s_]+de[\s_]+alta",
    r"cierre[\s_]+de[\s_]+atenci[oó]n",
    r"indicaciones[\s_]+y[\s_]+evoluci[oó]n",
])

MISSING_DISCHARGE_ORDER = "❌ CRÍTICO: Falta registro de alta médica"
MISSING_DISCHARGE_SUMMARY = "❌ CRÍTICO: No existe epicrisis (resumen de alta)"


def tail(text: str, lines: int) -> str:
    """Last `lines` lines of the text."""
    return "\n".join(text.split("\n")[-lines:])


def check_discharge_order(text: str, tail_lines: int | None = None) -> list[str]:
    """Errors for a missing discharge order in the last lines of the chart."""
    tail_lines = tail_lines or config.DISCHARGE_TAIL_LINES
    if any_match(DISCHARGE_ORDER_PATTERNS, tail(text, tail_lines)):
        return []
    logger.debug(f"No discharge order in last {tail_lines} lines")
    return [MISSING_DISCHARGE_ORDER]


def check_discharge_summary(text: str, tail_lines: int | None = None) -> list[str]:
    """Errors for a missing discharge summary (epicrisis)."""
    tail_lines = tail_lines or config.SUMMARY_TAIL_LINES
    if any_match(DISCHARGE_SUMMARY_PATTERNS, tail(text, tail_lines)):
        return []
    logger.debug(f"No discharge summary in last {tail_lines} lines")
    return [MISSING_DISCHARGE_SUMMARY]
