"""Shared fixtures: sample charts and a temporary audit store."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from common.audit_store import AuditStore


TZ = ZoneInfo("America/Argentina/Buenos_Aires")


# Complete chart: every required document present
CLEAN_CHART = """SANATORIO ARGENTINO - HISTORIA CLINICA
Página 1
Paciente: GARCIA MARIA ELENA
DNI: 28456789
Fecha de nacimiento: 12/05/1980
Sexo: F
Obra Social: OSDE 210
Habitación: 305
Fecha Ingreso: 01/03/2024 08:00
Fecha Alta: 04/03/2024 11:00
Visita 01/03/2024 09:00
Evolución médica diaria
Paciente estable, afebril.
Visita 02/03/2024 09:30
Evolución médica diaria
Postoperatorio inmediato sin complicaciones.
Página 2
FOJA QUIRÚRGICA
Fecha: 02/03/2024
Cirujano: LOPEZ CARLOS
Primer Ayudante: MARTINEZ ANA
Anestesista: FERNANDEZ PABLO
Instrumentador: SOSA LAURA
Uso de bisturí armónico: NO
Hora comienzo: 10:30
Hora finalización: 12:15
Dr. LOPEZ CARLOS Cirujano MP 12345
Visita 03/03/2024 10:00
Evolución médica diaria
Hemograma 03/03/2024 resultado: leucocitos normales
Rx de tórax 03/03/2024 informe: sin alteraciones
Página 3
Alta médica 04/03/2024
Epicrisis
Paciente con buena evolución. Se otorga el alta.
"""

# Discharged chart with progress notes missing for 02/03 to 04/03
MISSING_NOTES_CHART = """Paciente: PEREZ JUAN CARLOS
DNI: 30111222
Fecha de nacimiento: 01/01/1975
Sexo: M
Obra Social: OSDE
Habitación: 210
Fecha Ingreso: 01/03/2024 08:00
Fecha Alta: 05/03/2024 10:00
Visita 01/03/2024 09:00
Evolución médica diaria
Ingresa para control clínico.
Alta médica
Epicrisis
"""

# Patient still admitted (no discharge date)
ADMITTED_CHART = """Paciente: SOSA LAURA BEATRIZ
DNI: 25999888
Fecha de nacimiento: 03/07/1990
Sexo: Femenino
Obra Social: Swiss Medical
Habitación: BOX 3
Fecha Ingreso: 01/03/2024 08:00
Visita 01/03/2024 09:00
Evolución médica diaria
"""


@pytest.fixture
def clean_chart():
    return CLEAN_CHART


@pytest.fixture
def missing_notes_chart():
    return MISSING_NOTES_CHART


@pytest.fixture
def admitted_chart():
    return ADMITTED_CHART


@pytest.fixture
def now():
    """Fixed reference moment in the audit timezone."""
    return datetime(2024, 3, 3, 12, 0, tzinfo=TZ)


@pytest.fixture
def store(tmp_path):
    """Audit store backed by a temporary database."""
    return AuditStore(db_path=str(tmp_path / "audits.db"))
