"""
In-memory data store for tests and local development.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ...core.enums import AppointmentStatus, ConversationState, KnowledgeCategory
from ...core.exceptions import DataStoreError, NotFoundError
from ...core.models import Appointment, Doctor, ExternalDoctor, KnowledgeEntry, Patient
from ...utils.phone import PhoneNumberParser


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryDataStore:
    """Dictionary-backed ``DataStore``. Records are copied in and out."""

    def __init__(self):
        self._patients: Dict[str, Patient] = {}
        self._doctors: Dict[str, Doctor] = {}
        self._appointments: Dict[str, Appointment] = {}
        self._knowledge: Dict[str, KnowledgeEntry] = {}
        self._network: Dict[str, List[ExternalDoctor]] = {}
        self._messages: List[Dict[str, Any]] = []

    # Seeding

    def add_doctor(self, doctor: Doctor) -> Doctor:
        self._doctors[doctor.id] = doctor.model_copy(deep=True)
        return doctor

    def add_patient(self, patient: Patient) -> Patient:
        self._patients[patient.id] = patient.model_copy(deep=True)
        return patient

    def add_knowledge_entry(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        self._knowledge[entry.id] = entry.model_copy(deep=True)
        return entry

    def add_appointment(self, appointment: Appointment) -> Appointment:
        self._appointments[appointment.id] = appointment.model_copy(deep=True)
        return appointment

    def add_external_doctor(self, doctor_id: str, external: ExternalDoctor) -> ExternalDoctor:
        self._network.setdefault(doctor_id, []).append(external.model_copy(deep=True))
        return external

    # Patients

    async def get_patient(self, phone: str) -> Optional[Patient]:
        key = PhoneNumberParser.normalize(phone)
        for patient in self._patients.values():
            if patient.phone_number == key:
                return patient.model_copy(deep=True)
        return None

    async def get_patient_by_id(self, patient_id: str) -> Optional[Patient]:
        patient = self._patients.get(patient_id)
        return patient.model_copy(deep=True) if patient else None

    async def upsert_patient(self, phone: str, doctor_id: str, name: Optional[str]) -> Patient:
        key = PhoneNumberParser.normalize(phone)
        if not key:
            raise DataStoreError("Cannot upsert a patient without a phone number")

        existing = next((p for p in self._patients.values() if p.phone_number == key), None)
        if existing is None:
            existing = Patient(id=_new_id(), phone_number=key, doctor_id=doctor_id, name=name)
            self._patients[existing.id] = existing
        else:
            existing.doctor_id = doctor_id
            if name:
                existing.name = name
        existing.last_seen_at = _utcnow()
        return existing.model_copy(deep=True)

    async def update_patient_state(
        self,
        patient_id: str,
        state: ConversationState,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        patient = self._require_patient(patient_id)
        patient.conversation_state = state
        patient.conversation_data = {} if state == ConversationState.IDLE else dict(payload or {})

    async def set_bot_paused(self, patient_id: str, paused: bool, paused_by: Optional[str] = None) -> Patient:
        patient = self._require_patient(patient_id)
        patient.is_bot_paused = paused
        patient.bot_paused_at = _utcnow() if paused else None
        patient.bot_paused_by = paused_by if paused else None
        return patient.model_copy(deep=True)

    async def set_referral_code(self, patient_id: str, code: str) -> None:
        patient = self._require_patient(patient_id)
        owner = await self.get_patient_by_referral_code(code)
        if owner and owner.id != patient_id:
            raise DataStoreError(f"Referral code {code} already in use")
        patient.referral_code = code

    async def get_patient_by_referral_code(self, code: str) -> Optional[Patient]:
        for patient in self._patients.values():
            if patient.referral_code == code:
                return patient.model_copy(deep=True)
        return None

    async def search_patients(self, doctor_id: str, name: str, limit: int = 10) -> List[Patient]:
        needle = name.strip().lower()
        matches = [
            p for p in self._patients.values()
            if p.doctor_id == doctor_id and p.name and needle in p.name.lower()
        ]
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        matches.sort(key=lambda p: p.last_seen_at or oldest, reverse=True)
        return [p.model_copy(deep=True) for p in matches[:limit]]

    def _require_patient(self, patient_id: str) -> Patient:
        patient = self._patients.get(patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return patient

    # Doctors

    async def get_doctor_by_phone(self, phone: str) -> Optional[Doctor]:
        key = PhoneNumberParser.normalize(phone)
        for doctor in self._doctors.values():
            if doctor.is_active and PhoneNumberParser.normalize(doctor.phone_number) == key:
                return doctor.model_copy(deep=True)
        return None

    async def get_doctor_by_id(self, doctor_id: str) -> Optional[Doctor]:
        doctor = self._doctors.get(doctor_id)
        return doctor.model_copy(deep=True) if doctor else None

    # Appointments

    async def create_appointment(
        self,
        patient_id: str,
        doctor_id: str,
        when_iso: str,
        notes: Optional[str] = None,
    ) -> Appointment:
        patient = self._require_patient(patient_id)
        try:
            when = datetime.fromisoformat(when_iso)
        except ValueError as e:
            raise DataStoreError(f"Invalid appointment time {when_iso!r}") from e

        appointment = Appointment(
            id=_new_id(),
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_time=when,
            status=AppointmentStatus.PENDING,
            notes=notes,
            patient_name=patient.name,
            patient_phone=patient.phone_number,
        )
        self._appointments[appointment.id] = appointment
        return appointment.model_copy(deep=True)

    async def get_next_appointment(self, patient_id: str, now: datetime) -> Optional[Appointment]:
        upcoming = [
            a for a in self._appointments.values()
            if a.patient_id == patient_id
            and a.status in AppointmentStatus.queue_statuses()
            and a.appointment_time >= now
        ]
        if not upcoming:
            return None
        return min(upcoming, key=lambda a: a.appointment_time).model_copy(deep=True)

    async def list_appointments(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        statuses: Optional[Iterable[AppointmentStatus]] = None,
    ) -> List[Appointment]:
        wanted = set(statuses) if statuses is not None else None
        rows = [
            a for a in self._appointments.values()
            if a.doctor_id == doctor_id
            and start <= a.appointment_time < end
            and (wanted is None or a.status in wanted)
        ]
        rows.sort(key=lambda a: a.appointment_time)
        return [self._with_patient(a) for a in rows]

    async def list_patient_appointments(self, patient_id: str) -> List[Appointment]:
        rows = [a for a in self._appointments.values() if a.patient_id == patient_id]
        rows.sort(key=lambda a: a.appointment_time, reverse=True)
        return [self._with_patient(a) for a in rows]

    def _with_patient(self, appointment: Appointment) -> Appointment:
        copy = appointment.model_copy(deep=True)
        patient = self._patients.get(appointment.patient_id)
        if patient:
            copy.patient_name = patient.name
            copy.patient_phone = patient.phone_number
        return copy

    # Knowledge base and network

    async def get_knowledge_entries(self, doctor_id: str, category: KnowledgeCategory) -> List[KnowledgeEntry]:
        entries = [
            e for e in self._knowledge.values()
            if e.doctor_id == doctor_id and e.category == category and e.is_active
        ]
        entries.sort(key=lambda e: e.priority, reverse=True)
        return [e.model_copy(deep=True) for e in entries]

    async def get_external_doctor_network(self, doctor_id: str) -> List[ExternalDoctor]:
        return [d.model_copy(deep=True) for d in self._network.get(doctor_id, [])]

    # Messages

    async def save_message(
        self,
        patient_id: str,
        doctor_id: str,
        direction: str,
        body: str,
        sent_by: str,
    ) -> None:
        self._messages.append({
            "id": _new_id(),
            "patient_id": patient_id,
            "doctor_id": doctor_id,
            "direction": direction,
            "message_body": body,
            "sent_by": sent_by,
            "created_at": _utcnow().isoformat(),
        })

    async def list_messages(self, patient_id: str) -> List[Dict[str, Any]]:
        return [dict(m) for m in self._messages if m["patient_id"] == patient_id]

    async def ping(self) -> None:
        return None
