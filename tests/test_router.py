"""Tests for routing findings to responsible departments."""

import pytest

from audit_src.models import (
    AuditWarning,
    DeviceUsage,
    Doctor,
    StaffRoster,
    Study,
    StudyCategory,
    SurgicalRecord,
    Urgency,
)
from audit_src.router import (
    RESIDENT_TITLE,
    SURGEON_TITLE,
    FindingRouter,
    resolve_responsible,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def staff():
    return StaffRoster(
        residents=[Doctor("SUAREZ VALERIA", "22222"), Doctor("ROMERO DIEGO", "44444")],
        surgeons=[Doctor("LOPEZ CARLOS", "12345")],
    )


@pytest.fixture
def every_finding():
    """Keyword arguments for route() with every kind of finding present."""
    return dict(
        admission_errors=["DNI del paciente no encontrado"],
        progress_errors=["❌ CRÍTICO: 02/03/2024 - Falta 'Evolución médica diaria'"],
        warnings=[AuditWarning("Día de alta sin evolución", "⚠️ ADVERTENCIA: 04/03/2024 - Día de alta")],
        discharge_errors=["❌ CRÍTICO: Falta registro de alta médica"],
        summary_errors=["❌ CRÍTICO: No existe epicrisis (resumen de alta)"],
        surgical=SurgicalRecord(
            found=True,
            device_usage=DeviceUsage.USED,
            errors=["⚠️ ADVERTENCIA: Hora de finalización no encontrada en foja quirúrgica"],
        ),
        studies=[
            Study(StudyCategory.IMAGING, "TAC de tórax", date="10/03/2024", page=1),
            Study(StudyCategory.LABORATORY, "Hemograma", page=2),
            Study(StudyCategory.LABORATORY, "PCR", date="11/03/2024", report_present=True, page=2),
        ],
        study_errors=["Estudio sin informe: [Imagenes] TAC de tórax (10/03/2024) (Hoja 1)"],
    )


def no_findings():
    return dict(
        admission_errors=[],
        progress_errors=[],
        warnings=[],
        discharge_errors=[],
        summary_errors=[],
        surgical=SurgicalRecord(found=True),
        studies=[],
        study_errors=[],
    )


# =============================================================================
# TESTS
# =============================================================================

class TestResolveResponsible:
    """Test responsible-party labels."""

    def test_fallback(self):
        assert resolve_responsible([], SURGEON_TITLE) == (SURGEON_TITLE, None)

    def test_single_doctor_carries_license(self):
        assert resolve_responsible([Doctor("LOPEZ CARLOS", "12345")], SURGEON_TITLE) == (
            "Dr/a LOPEZ CARLOS", "12345"
        )

    def test_duplicates_collapse(self):
        doctors = [Doctor("LOPEZ CARLOS", "12345"), Doctor("LOPEZ CARLOS", "12345")]
        assert resolve_responsible(doctors, SURGEON_TITLE) == ("Dr/a LOPEZ CARLOS", "12345")

    def test_several_doctors(self):
        doctors = [Doctor("SUAREZ VALERIA", "22222"), Doctor("ROMERO DIEGO", "44444")]
        assert resolve_responsible(doctors, RESIDENT_TITLE) == (
            "Dr/a SUAREZ VALERIA, Dr/a ROMERO DIEGO", None
        )


class TestFindingRouter:
    """Test communication order and content."""

    def test_no_findings(self, staff):
        assert FindingRouter(staff).route(**no_findings()) == []

    def test_order(self, staff, every_finding):
        communications = FindingRouter(staff).route(**every_finding)
        assert [(c.sector, c.urgency) for c in communications] == [
            ("Admisión", Urgency.HIGH),
            ("Residentes", Urgency.HIGH),
            ("Residentes", Urgency.MEDIUM),
            ("Cirugía", Urgency.CRITICAL),
            ("Cirugía", Urgency.CRITICAL),
            ("Cirugía", Urgency.HIGH),
            ("Cirugía", Urgency.CRITICAL),
            ("Diagnóstico por Imágenes", Urgency.HIGH),
            ("Laboratorio", Urgency.MEDIUM),
            ("Coordinación de Historias Clínicas", Urgency.MEDIUM),
        ]

    def test_surgeon_named_with_license(self, staff, every_finding):
        communications = FindingRouter(staff).route(**every_finding)
        surgery = [c for c in communications if c.sector == "Cirugía"]
        assert all(c.responsible == "Dr/a LOPEZ CARLOS" for c in surgery)
        assert all(c.license == "12345" for c in surgery)

    def test_generic_titles_without_staff(self, every_finding):
        communications = FindingRouter(StaffRoster()).route(**every_finding)
        assert communications[1].responsible == RESIDENT_TITLE
        assert communications[3].responsible == SURGEON_TITLE
        assert communications[3].license is None

    def test_warning_communication_uses_descriptions(self, staff, every_finding):
        warning = FindingRouter(staff).route(**every_finding)[2]
        assert warning.responsible == RESIDENT_TITLE
        assert warning.errors == ("⚠️ ADVERTENCIA: 04/03/2024 - Día de alta",)

    def test_device_usage(self, staff):
        findings = no_findings()
        findings["surgical"] = SurgicalRecord(found=True, device_usage=DeviceUsage.USED)
        [communication] = FindingRouter(staff, payer="Galeno").route(**findings)
        assert communication.motive == "Uso de bisturí armónico - Requiere autorización especial"
        assert communication.errors == ("Se utilizó bisturí armónico",)
        assert "Galeno" in communication.message

    def test_study_communications_list_unreported_only(self, staff, every_finding):
        communications = FindingRouter(staff, payer="Galeno").route(**every_finding)
        imaging, laboratory = communications[7], communications[8]
        assert imaging.errors == ("[Imagenes] TAC de tórax (10/03/2024)",)
        assert imaging.message == "Faltan informes en: TAC de tórax (10/03/2024). Adjuntar antes del envío a Galeno."
        assert laboratory.errors == ("[Laboratorio] Hemograma",)

    def test_payer_in_admission_message(self, staff, every_finding):
        admission = FindingRouter(staff, payer="Galeno").route(**every_finding)[0]
        assert admission.message.endswith("Completar antes del envío a Galeno.")
