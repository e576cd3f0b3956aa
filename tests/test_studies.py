"""Tests for ancillary study extraction."""

from audit_src.extraction.studies import (
    THERAPY_TYPE,
    external_pages,
    extract_studies,
    has_report,
)
from audit_src.models import StudyCategory


class TestHasReport:
    """Test report detection on a study line."""

    def test_report_keyword(self):
        assert has_report("Rx de tórax informe: sin alteraciones")

    def test_negated_report(self):
        assert not has_report("Ecografía de abdomen sin informe")
        assert not has_report("TAC de cerebro informe pendiente")
        assert not has_report("Hemograma falta resultado")


class TestExtractStudies:
    """Test study detection, deduplication and counts."""

    def test_unreported_imaging(self):
        extraction = extract_studies("Página 1\nTAC de tórax 10/03/2024")
        assert len(extraction.studies) == 1
        study = extraction.studies[0]
        assert study.category == StudyCategory.IMAGING
        assert study.type == "TAC de tórax"
        assert study.date == "10/03/2024"
        assert not study.report_present
        assert study.warnings == ["sin informe"]
        assert extraction.errors == [
            "Estudio sin informe: [Imagenes] TAC de tórax (10/03/2024) (Hoja 1)"
        ]

    def test_reported_studies(self, clean_chart):
        extraction = extract_studies(clean_chart)
        assert extraction.errors == []
        assert {(s.category, s.type) for s in extraction.studies} == {
            (StudyCategory.LABORATORY, "Hemograma"),
            (StudyCategory.IMAGING, "Radiografía de tórax"),
        }
        assert extraction.counts.to_dict() == {
            "total": 2,
            "imagenes": 1,
            "laboratorio": 1,
            "procedimientos": 0,
            "kinesiologia": 0,
        }

    def test_result_and_page(self):
        text = "Página 1\nPágina 2\nHemograma 03/03/2024 08:30 resultado: leucocitos normales"
        study = extract_studies(text).studies[0]
        assert study.page == 2
        assert study.time == "08:30"
        assert study.result == "leucocitos normales"

    def test_missing_date_warning(self):
        study = extract_studies("Hemograma resultado: normal").studies[0]
        assert study.date is None
        assert study.warnings == ["sin fecha"]

    def test_duplicates_collapsed(self):
        text = "Hemograma 03/03/2024 resultado: normal\nHemograma 03/03/2024 resultado: normal"
        assert len(extract_studies(text).studies) == 1

    def test_same_type_different_dates_kept(self):
        text = "Hemograma 03/03/2024 resultado: normal\nHemograma 04/03/2024 resultado: normal"
        assert len(extract_studies(text).studies) == 2

    def test_procedure(self):
        extraction = extract_studies("Colonoscopía 05/03/2024 conclusión: sin lesiones")
        assert extraction.studies[0].category == StudyCategory.PROCEDURE
        assert extraction.counts.procedures == 1

    def test_echocardiogram_is_not_ultrasound(self):
        extraction = extract_studies("Ecocardiograma 05/03/2024 informe: normal")
        assert [s.type for s in extraction.studies] == ["Ecocardiograma"]


class TestExternalSections:
    """Test skipping of externally supplied study pages."""

    TEXT = "\n".join([
        "Página 1",
        "Visita 01/03/2024",
        "Evolución médica diaria",
        "Kinesiología sesión 1",
        "Página 2",
        "Exámenes complementarios",
        "TAC de cerebro 15/02/2024",
        "Kinesiología sesión 2",
        "Página 3",
        "Visita 02/03/2024",
        "Evolución médica diaria",
        "Kinesiología sesión 3",
    ])

    def test_external_pages(self):
        assert external_pages(self.TEXT.split("\n")) == {2}

    def test_external_studies_skipped_but_therapy_counted(self):
        extraction = extract_studies(self.TEXT)
        assert [s.type for s in extraction.studies] == [THERAPY_TYPE]
        therapy = extraction.studies[0]
        assert therapy.sessions == 3
        assert therapy.page == 1
        assert therapy.report_present
        assert extraction.counts.therapy_sessions == 3
        assert extraction.errors == []

    def test_therapy_counted_once_per_page(self):
        text = "Página 4\nKTR sesión mañana\nKinesioterapia respiratoria tarde"
        extraction = extract_studies(text)
        assert extraction.counts.therapy_sessions == 1
        assert extraction.studies[0].to_dict()["sesiones"] == 1

    def test_unpaginated_section_ends_at_main_section(self):
        """Without page markers only the external section lines are skipped."""
        text = "\n".join([
            "Exámenes complementarios",
            "TAC de cerebro 15/02/2024",
            "Evolución médica diaria",
            "Rx de tórax 03/03/2024 sin informe",
            "Ecografía de abdomen 04/03/2024 informe: normal",
        ])
        extraction = extract_studies(text)
        assert [s.type for s in extraction.studies] == ["Radiografía de tórax", "Ecografía de abdomen"]
        assert extraction.errors == [
            "Estudio sin informe: [Imagenes] Radiografía de tórax (03/03/2024) (Hoja 1)"
        ]

    def test_unpaginated_visit_closes_section(self):
        text = "Exámenes complementarios\nTAC de cerebro 15/02/2024\nVisita 01/03/2024\nHemograma 01/03/2024"
        assert [s.type for s in extract_studies(text).studies] == ["Hemograma"]
