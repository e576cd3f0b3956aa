"""Tests for discharge order and discharge summary checks."""

from audit_src.extraction.discharge import (
    MISSING_DISCHARGE_ORDER,
    MISSING_DISCHARGE_SUMMARY,
    check_discharge_order,
    check_discharge_summary,
    tail,
)


class TestDischargeOrder:
    """Test discharge order detection."""

    def test_present(self, clean_chart):
        assert check_discharge_order(clean_chart) == []

    def test_egreso_variants(self):
        assert check_discharge_order("Egreso sanatorial 04/03/2024") == []
        assert check_discharge_order("Registro de alta") == []

    def test_missing(self):
        assert check_discharge_order("Evolución médica diaria") == [MISSING_DISCHARGE_ORDER]

    def test_only_tail_searched(self):
        text = "Alta médica\n" + "\n".join(["evolución"] * 10)
        assert check_discharge_order(text, tail_lines=5) == [MISSING_DISCHARGE_ORDER]
        assert check_discharge_order(text, tail_lines=20) == []


class TestDischargeSummary:
    """Test discharge summary (epicrisis) detection."""

    def test_epicrisis(self):
        assert check_discharge_summary("EPICRISIS\nPaciente con buena evolución") == []

    def test_resumen_de_alta(self):
        assert check_discharge_summary("Resumen de alta") == []

    def test_missing(self):
        assert check_discharge_summary("Alta médica") == [MISSING_DISCHARGE_SUMMARY]


def test_tail():
    assert tail("a\nb\nc", 2) == "b\nc"
    assert tail("a", 5) == "a"
