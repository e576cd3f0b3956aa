"""Tests for chart text normalization."""

from audit_src.normalizer import normalize_text


class TestNormalizeText:
    """Test whitespace and boilerplate cleanup."""

    def test_collapses_horizontal_whitespace(self):
        """Runs of spaces and tabs become a single space."""
        assert normalize_text("Fecha   Ingreso:\t\t01/03/2024") == "Fecha Ingreso: 01/03/2024"

    def test_unifies_line_endings(self):
        """CRLF and CR become LF."""
        assert normalize_text("a\r\nb\rc") == "a\nb\nc"

    def test_form_feed_becomes_space(self):
        assert normalize_text("fin de hoja\fsiguiente") == "fin de hoja siguiente"

    def test_trims_lines(self):
        assert normalize_text("   Epicrisis   \n  Alta médica ") == "Epicrisis\nAlta médica"

    def test_removes_pagination_lines(self):
        """Page N of M lines are blanked in both languages."""
        text = "Evolución\nPágina 3 de 10\nPage 2 of 5\nVisita"
        assert normalize_text(text) == "Evolución\n\n\nVisita"

    def test_removes_print_date_lines(self):
        text = "Epicrisis\nFecha de impresión: 06/03/2024 10:00\nPrint date: 2024-03-06"
        assert normalize_text(text) == "Epicrisis\n\n"

    def test_keeps_page_markers_and_terms(self):
        """Single page markers and hospital terms are preserved."""
        text = "Página 2\nHabitación: BOX 3"
        assert normalize_text(text) == text

    def test_idempotent(self, clean_chart):
        """Normalizing normalized text changes nothing."""
        raw = "  Página 1 de 2\r\nPaciente:\tGARCIA   MARIA\fDNI 123\r\n" + clean_chart
        once = normalize_text(raw)
        assert normalize_text(once) == once
