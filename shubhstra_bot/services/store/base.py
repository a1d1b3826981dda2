"""
Data-store interface consumed by the routing core.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from ...core.enums import AppointmentStatus, ConversationState, KnowledgeCategory
from ...core.models import Appointment, Doctor, ExternalDoctor, KnowledgeEntry, Patient


@runtime_checkable
class DataStore(Protocol):
    """Persistence for patients, doctors, appointments and knowledge entries.

    Getters return ``None`` when a record does not exist. Mutations on a
    missing id raise ``NotFoundError``. Any storage failure raises
    ``DataStoreError``.
    """

    async def get_patient(self, phone: str) -> Optional[Patient]: ...

    async def get_patient_by_id(self, patient_id: str) -> Optional[Patient]: ...

    async def upsert_patient(self, phone: str, doctor_id: str, name: Optional[str]) -> Patient: ...

    async def update_patient_state(
        self,
        patient_id: str,
        state: ConversationState,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None: ...

    async def set_bot_paused(self, patient_id: str, paused: bool, paused_by: Optional[str] = None) -> Patient: ...

    async def set_referral_code(self, patient_id: str, code: str) -> None: ...

    async def get_patient_by_referral_code(self, code: str) -> Optional[Patient]: ...

    async def search_patients(self, doctor_id: str, name: str, limit: int = 10) -> List[Patient]: ...

    async def get_doctor_by_phone(self, phone: str) -> Optional[Doctor]: ...

    async def get_doctor_by_id(self, doctor_id: str) -> Optional[Doctor]: ...

    async def create_appointment(
        self,
        patient_id: str,
        doctor_id: str,
        when_iso: str,
        notes: Optional[str] = None,
    ) -> Appointment: ...

    async def get_next_appointment(self, patient_id: str, now: datetime) -> Optional[Appointment]: ...

    async def list_appointments(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        statuses: Optional[Iterable[AppointmentStatus]] = None,
    ) -> List[Appointment]: ...

    async def list_patient_appointments(self, patient_id: str) -> List[Appointment]: ...

    async def get_knowledge_entries(self, doctor_id: str, category: KnowledgeCategory) -> List[KnowledgeEntry]: ...

    async def get_external_doctor_network(self, doctor_id: str) -> List[ExternalDoctor]: ...

    async def save_message(
        self,
        patient_id: str,
        doctor_id: str,
        direction: str,
        body: str,
        sent_by: str,
    ) -> None: ...

    async def list_messages(self, patient_id: str) -> List[Dict[str, Any]]: ...

    async def ping(self) -> None:
        """Raise ``DataStoreError`` if the backend cannot serve queries."""
        ...
