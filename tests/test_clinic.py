"""
Tests for clinic hours, the patient queue and referral codes.
"""

from datetime import date, datetime

import pytest
import pytz
from unittest.mock import AsyncMock

from shubhstra_bot.core.enums import AppointmentStatus
from shubhstra_bot.core.exceptions import DataStoreError
from shubhstra_bot.core.models import Appointment, ClinicConfig, ClinicStatus, Patient
from shubhstra_bot.services.clinic import ClinicHours, QueueService, ReferralService, format_clock_label

IST = pytz.timezone("Asia/Kolkata")
MONDAY_10AM = IST.localize(datetime(2026, 10, 19, 10, 0))


def _with_config(doctor, **config):
    return doctor.model_copy(update={"clinic_config": ClinicConfig(**config)})


class TestClinicHours:
    """Test open/closed decisions."""

    def test_open_during_hours(self, doctor):
        """Test a time inside the configured window."""
        status = ClinicHours().status(_with_config(doctor), MONDAY_10AM)
        assert status.is_open is True
        assert status.opening_time == "9:00 AM"
        assert status.closing_time == "6:00 PM"

    def test_closed_outside_hours(self, doctor):
        """Test closing time is exclusive."""
        status = ClinicHours().status(_with_config(doctor), IST.localize(datetime(2026, 10, 19, 18, 0)))
        assert status.is_open is False
        assert status.reason == "outside_hours"

    def test_utc_input_is_converted(self, doctor):
        """Test instants in other zones are read in clinic time."""
        utc_morning = datetime(2026, 10, 19, 4, 0, tzinfo=pytz.utc)
        assert ClinicHours().status(_with_config(doctor), utc_morning).is_open is True

    def test_holiday(self, doctor):
        """Test configured holidays are closed all day."""
        status = ClinicHours().status(_with_config(doctor, holidays=[date(2026, 10, 19)]), MONDAY_10AM)
        assert status.is_open is False
        assert status.reason == "holiday"

    @pytest.mark.parametrize("opening", ["nine", "25:00", ""])
    def test_malformed_hours_assume_open(self, doctor, opening):
        """Test bad configuration never blocks patients."""
        status = ClinicHours().status(_with_config(doctor, opening_time=opening), MONDAY_10AM)
        assert status == ClinicStatus(is_open=True)

    @pytest.mark.parametrize("value,label", [
        ("09:00", "9:00 AM"),
        ("12:30:00", "12:30 PM"),
        ("00:15", "12:15 AM"),
        ("18:00", "6:00 PM"),
    ])
    def test_clock_labels(self, value, label):
        """Test 24-hour clock strings render as 12-hour labels."""
        assert format_clock_label(value) == label


class TestQueueService:
    """Test token numbers and wait estimates."""

    @pytest.mark.asyncio
    async def test_position_in_todays_queue(self, store, doctor, patient):
        """Test the token counts today's bookings and the wait counts active ones."""
        store.add_patient(Patient(id="pat-2", phone_number="919811111111", doctor_id=doctor.id, name="Priya"))
        store.add_appointment(Appointment(
            id="a1", patient_id="pat-2", doctor_id=doctor.id,
            appointment_time=IST.localize(datetime(2026, 10, 19, 9, 30)),
        ))
        store.add_appointment(Appointment(
            id="a2", patient_id="pat-2", doctor_id=doctor.id,
            appointment_time=IST.localize(datetime(2026, 10, 19, 10, 15)),
            status=AppointmentStatus.CANCELLED,
        ))
        store.add_appointment(Appointment(
            id="a3", patient_id=patient.id, doctor_id=doctor.id,
            appointment_time=IST.localize(datetime(2026, 10, 19, 11, 0)),
            status=AppointmentStatus.CONFIRMED,
        ))
        store.add_appointment(Appointment(
            id="a4", patient_id="pat-2", doctor_id=doctor.id,
            appointment_time=IST.localize(datetime(2026, 10, 19, 12, 0)),
        ))

        status = await QueueService(store).status(patient, _with_config(doctor, average_consultation_time=20), MONDAY_10AM)

        assert status.has_appointment is True
        assert status.token_number == 3
        assert status.people_ahead == 1
        assert status.estimated_wait_minutes == 20
        assert status.status == "confirmed"

    @pytest.mark.asyncio
    async def test_no_appointment(self, store, doctor, patient):
        """Test patients without an upcoming appointment."""
        status = await QueueService(store).status(patient, doctor, MONDAY_10AM)
        assert status.has_appointment is False

    @pytest.mark.asyncio
    async def test_store_failure(self, store, doctor, patient):
        """Test store failures read as no appointment."""
        store.get_next_appointment = AsyncMock(side_effect=DataStoreError("down"))
        status = await QueueService(store).status(patient, doctor, MONDAY_10AM)
        assert status.has_appointment is False

    def test_day_bounds(self, store):
        """Test the day is taken in clinic time."""
        start, end = QueueService(store).day_bounds(datetime(2026, 10, 19, 20, 0, tzinfo=pytz.utc))
        assert start == IST.localize(datetime(2026, 10, 20))
        assert end == IST.localize(datetime(2026, 10, 21))


class TestReferralService:
    """Test referral codes."""

    @pytest.mark.asyncio
    async def test_code_from_name_and_phone(self, store, patient):
        """Test the code shape and that it is persisted."""
        code = await ReferralService(store).get_or_create_code(patient)

        assert code == "RAH5678"
        assert (await store.get_patient_by_id(patient.id)).referral_code == "RAH5678"

    @pytest.mark.asyncio
    async def test_existing_code_is_kept(self, store, patient):
        """Test a patient's code never changes."""
        existing = patient.model_copy(update={"referral_code": "OLD0001"})
        assert await ReferralService(store).get_or_create_code(existing) == "OLD0001"

    @pytest.mark.asyncio
    async def test_conflict_gets_suffix(self, store, patient):
        """Test a taken code gets a numeric suffix."""
        store.add_patient(Patient(
            id="pat-2", phone_number="919800005678", name="Rahi", referral_code="RAH5678",
        ))
        assert await ReferralService(store).get_or_create_code(patient) == "RAH56781"

    @pytest.mark.parametrize("name,expected", [(None, "PAT5678"), ("Al", "ALX5678"), ("  ज्योति", "PAT5678")])
    def test_base_code_fallbacks(self, patient, name, expected):
        """Test short and non-Latin names."""
        assert ReferralService.base_code(patient.model_copy(update={"name": name})) == expected

    @pytest.mark.asyncio
    async def test_store_failure(self, store, patient):
        """Test store failures return no code."""
        store.set_referral_code = AsyncMock(side_effect=DataStoreError("down"))
        assert await ReferralService(store).get_or_create_code(patient) is None
