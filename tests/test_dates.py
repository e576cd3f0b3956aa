"""Tests for admission/discharge resolution and day counting."""

import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from audit_src.extraction.dates import (
    extract_admission_discharge,
    parse_day_month_year,
    resolve_period,
)
from audit_src.models import HospitalizationPeriod, MissingAdmissionDateError

TZ = ZoneInfo("America/Argentina/Buenos_Aires")


class TestParseDayMonthYear:
    """Test DD/MM/YYYY parsing."""

    def test_date_and_time(self):
        assert parse_day_month_year("01/03/2024", "08:15") == datetime(2024, 3, 1, 8, 15)

    def test_seconds(self):
        assert parse_day_month_year("1/3/2024", "08:15:30") == datetime(2024, 3, 1, 8, 15, 30)

    def test_two_digit_year_is_2000s(self):
        assert parse_day_month_year("05/03/24") == datetime(2024, 3, 5)

    def test_impossible_date(self):
        assert parse_day_month_year("31/02/2024") is None


class TestExtractAdmissionDischarge:
    """Test label-proximity timestamp matching."""

    def test_date_and_time(self):
        admission, discharge = extract_admission_discharge(
            "Fecha Ingreso: 01/03/2024 08:00\nFecha Alta: 05/03/2024 10:30", TZ
        )
        assert admission == datetime(2024, 3, 1, 8, 0, tzinfo=TZ)
        assert discharge == datetime(2024, 3, 5, 10, 30, tzinfo=TZ)

    def test_date_only_fallback(self):
        admission, discharge = extract_admission_discharge("Fecha de ingreso: 01/03/2024", TZ)
        assert admission == datetime(2024, 3, 1, 0, 0, tzinfo=TZ)
        assert discharge is None

    def test_egreso_label(self):
        _, discharge = extract_admission_discharge(
            "Fecha Ingreso: 01/03/2024\nFecha de egreso: 04/03/2024", TZ
        )
        assert discharge == datetime(2024, 3, 4, tzinfo=TZ)

    def test_date_on_another_line_is_not_used(self):
        admission, _ = extract_admission_discharge("Fecha Ingreso:\n\n01/03/2024", TZ)
        assert admission is None


class TestResolvePeriod:
    """Test hospitalization window resolution."""

    def test_missing_admission_is_fatal(self, now):
        with pytest.raises(MissingAdmissionDateError) as exc:
            resolve_period("Paciente: PEREZ JUAN\nFecha Alta: 05/03/2024", now)
        assert "fecha de ingreso" in str(exc.value)

    def test_admitted_patient(self, now):
        """No discharge date means currently admitted, never an error."""
        period = resolve_period("Fecha Ingreso: 01/03/2024 08:00", now)
        assert period.currently_admitted
        assert period.discharge is None
        assert period.last_day == now.date()
        assert period.day_count == 3

    def test_discharged_patient(self, now):
        period = resolve_period("Fecha Ingreso: 01/03/2024 08:00\nFecha Alta: 05/03/2024 10:00", now)
        assert not period.currently_admitted
        assert period.day_count == 4

    def test_discharge_before_admission_is_dropped(self, now, caplog):
        text = "Fecha Ingreso: 05/03/2024 08:00\nFecha Alta: 01/03/2024 10:00"
        with caplog.at_level(logging.WARNING):
            period = resolve_period(text, datetime(2024, 3, 6, 9, 0, tzinfo=TZ))
        assert period.currently_admitted
        assert "precedes admission" in caplog.text

    def test_naive_now_gets_local_timezone(self):
        period = resolve_period("Fecha Ingreso: 01/03/2024 08:00", datetime(2024, 3, 2, 9, 0))
        assert period.now.tzinfo is not None
        assert period.day_count == 2

    def test_aware_now_converted_to_local_timezone(self):
        """A UTC reference moment is counted on the local calendar day."""
        now = datetime(2024, 3, 3, 1, 0, tzinfo=timezone.utc)
        period = resolve_period("Fecha Ingreso: 01/03/2024 08:00", now)
        assert (period.now.day, period.now.hour) == (2, 22)
        assert period.day_count == 2

class TestDayCount:
    """Test hospitalization day counting rules."""

    def test_same_day_discharge_is_zero(self):
        period = HospitalizationPeriod(
            admission=datetime(2024, 3, 1, 8, 0, tzinfo=TZ),
            discharge=datetime(2024, 3, 1, 20, 0, tzinfo=TZ),
        )
        assert period.day_count == 0

    def test_discharge_day_excluded(self):
        """Times of day do not matter, only calendar days."""
        period = HospitalizationPeriod(
            admission=datetime(2024, 3, 1, 23, 50, tzinfo=TZ),
            discharge=datetime(2024, 3, 2, 0, 10, tzinfo=TZ),
        )
        assert period.day_count == 1

    def test_admitted_minimum_one(self):
        admission = datetime(2024, 3, 1, 8, 0, tzinfo=TZ)
        period = HospitalizationPeriod(admission=admission, now=admission)
        assert period.day_count == 1

    def test_admitted_includes_today(self):
        period = HospitalizationPeriod(
            admission=datetime(2024, 3, 1, 8, 0, tzinfo=TZ),
            now=datetime(2024, 3, 10, 8, 0, tzinfo=TZ),
        )
        assert period.day_count == 10
