"""
SQLite-backed data store.
"""

import asyncio
import json
import sqlite3
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from ...core.enums import AppointmentStatus, ConversationState, KnowledgeCategory, Language
from ...core.exceptions import DataStoreError, NotFoundError
from ...core.models import Appointment, ClinicConfig, Doctor, ExternalDoctor, KnowledgeEntry, Patient
from ...utils.logging import get_logger
from ...utils.phone import PhoneNumberParser

logger = get_logger("shubhstra.store")

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS doctors (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    phone_number TEXT NOT NULL,
    clinic_name TEXT,
    clinic_address TEXT,
    welcome_message TEXT,
    default_fee REAL,
    social_links TEXT NOT NULL DEFAULT '{}',
    whatsapp_access_token TEXT,
    whatsapp_phone_number_id TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    clinic_config TEXT NOT NULL DEFAULT '{}'
);
CREATE TABLE IF NOT EXISTS patients (
    id TEXT PRIMARY KEY,
    phone_number TEXT NOT NULL UNIQUE,
    doctor_id TEXT,
    name TEXT,
    preferred_language TEXT NOT NULL DEFAULT 'en',
    conversation_state TEXT NOT NULL DEFAULT 'idle',
    conversation_data TEXT NOT NULL DEFAULT '{}',
    is_bot_paused INTEGER NOT NULL DEFAULT 0,
    bot_paused_at TEXT,
    bot_paused_by TEXT,
    last_seen_at TEXT,
    referral_code TEXT UNIQUE,
    referral_count INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS appointments (
    id TEXT PRIMARY KEY,
    patient_id TEXT NOT NULL,
    doctor_id TEXT NOT NULL,
    appointment_time TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    notes TEXT
);
CREATE TABLE IF NOT EXISTS knowledge_entries (
    id TEXT PRIMARY KEY,
    doctor_id TEXT NOT NULL,
    category TEXT NOT NULL,
    symptom_name TEXT,
    keywords TEXT NOT NULL DEFAULT '[]',
    medical_advice TEXT,
    question TEXT,
    answer TEXT,
    priority INTEGER NOT NULL DEFAULT 0,
    is_active INTEGER NOT NULL DEFAULT 1
);
CREATE TABLE IF NOT EXISTS external_doctors (
    id TEXT PRIMARY KEY,
    doctor_id TEXT NOT NULL,
    name TEXT NOT NULL,
    specialization TEXT,
    total_referrals INTEGER NOT NULL DEFAULT 0,
    commission_percentage REAL NOT NULL DEFAULT 10.0,
    total_commission_due REAL NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    patient_id TEXT NOT NULL,
    doctor_id TEXT NOT NULL,
    direction TEXT NOT NULL,
    message_body TEXT NOT NULL,
    sent_by TEXT NOT NULL,
    created_at TEXT NOT NULL
);
"""


def _to_db_time(value: datetime) -> str:
    """Store instants as UTC ISO strings so they sort lexically."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_db_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


class SQLiteDataStore:
    """``DataStore`` on a local SQLite file.

    Every call opens its own connection in a worker thread; an asyncio lock
    serializes writers within one process.
    """

    def __init__(self, db_path: str = "shubhstra.db"):
        self.db_path = db_path
        self._lock = asyncio.Lock()
        self._schema_ready = False

    def _execute(self, work: Callable[[sqlite3.Connection], T]) -> T:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            result = work(conn)
            conn.commit()
            return result
        finally:
            conn.close()

    async def _run(self, work: Callable[[sqlite3.Connection], T]) -> T:
        async with self._lock:
            try:
                if not self._schema_ready:
                    await asyncio.to_thread(self._execute, lambda conn: conn.executescript(_SCHEMA))
                    self._schema_ready = True
                return await asyncio.to_thread(self._execute, work)
            except sqlite3.Error as e:
                logger.exception(f"SQLite call failed on {self.db_path}")
                raise DataStoreError(f"SQLite error: {e}") from e

    # Row mapping

    @staticmethod
    def _patient(row: sqlite3.Row) -> Patient:
        return Patient(
            id=row["id"],
            phone_number=row["phone_number"],
            doctor_id=row["doctor_id"],
            name=row["name"],
            preferred_language=Language.from_code(row["preferred_language"]),
            conversation_state=ConversationState.from_string(row["conversation_state"]),
            conversation_data=json.loads(row["conversation_data"] or "{}"),
            is_bot_paused=bool(row["is_bot_paused"]),
            bot_paused_at=_from_db_time(row["bot_paused_at"]),
            bot_paused_by=row["bot_paused_by"],
            last_seen_at=_from_db_time(row["last_seen_at"]),
            referral_code=row["referral_code"],
            referral_count=row["referral_count"] or 0,
        )

    @staticmethod
    def _doctor(row: sqlite3.Row) -> Doctor:
        return Doctor(
            id=row["id"],
            name=row["name"],
            phone_number=row["phone_number"],
            clinic_name=row["clinic_name"],
            clinic_address=row["clinic_address"],
            welcome_message=row["welcome_message"],
            default_fee=row["default_fee"],
            social_links=json.loads(row["social_links"] or "{}"),
            whatsapp_access_token=row["whatsapp_access_token"],
            whatsapp_phone_number_id=row["whatsapp_phone_number_id"],
            is_active=bool(row["is_active"]),
            clinic_config=ClinicConfig(**json.loads(row["clinic_config"] or "{}")),
        )

    @staticmethod
    def _appointment(row: sqlite3.Row) -> Appointment:
        keys = row.keys()
        return Appointment(
            id=row["id"],
            patient_id=row["patient_id"],
            doctor_id=row["doctor_id"],
            appointment_time=_from_db_time(row["appointment_time"]),
            status=AppointmentStatus(row["status"]),
            notes=row["notes"],
            patient_name=row["patient_name"] if "patient_name" in keys else None,
            patient_phone=row["patient_phone"] if "patient_phone" in keys else None,
        )

    @staticmethod
    def _knowledge(row: sqlite3.Row) -> KnowledgeEntry:
        return KnowledgeEntry(
            id=row["id"],
            doctor_id=row["doctor_id"],
            category=KnowledgeCategory(row["category"]),
            symptom_name=row["symptom_name"],
            keywords=json.loads(row["keywords"] or "[]"),
            medical_advice=row["medical_advice"],
            question=row["question"],
            answer=row["answer"],
            priority=row["priority"],
            is_active=bool(row["is_active"]),
        )

    # Seeding (records owned by the dashboard in production)

    async def add_doctor(self, doctor: Doctor) -> Doctor:
        params = (
            doctor.id, doctor.name, PhoneNumberParser.normalize(doctor.phone_number),
            doctor.clinic_name, doctor.clinic_address, doctor.welcome_message,
            doctor.default_fee, json.dumps(doctor.social_links),
            doctor.whatsapp_access_token, doctor.whatsapp_phone_number_id,
            int(doctor.is_active),
            json.dumps(doctor.clinic_config.model_dump(), default=_json_default),
        )

        def _insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                INSERT OR REPLACE INTO doctors (
                    id, name, phone_number, clinic_name, clinic_address, welcome_message,
                    default_fee, social_links, whatsapp_access_token,
                    whatsapp_phone_number_id, is_active, clinic_config
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                params,
            )

        await self._run(_insert)
        return doctor

    async def add_knowledge_entry(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        params = (
            entry.id, entry.doctor_id, entry.category.value, entry.symptom_name,
            json.dumps(entry.keywords, ensure_ascii=False), entry.medical_advice,
            entry.question, entry.answer, entry.priority, int(entry.is_active),
        )

        def _insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                INSERT OR REPLACE INTO knowledge_entries (
                    id, doctor_id, category, symptom_name, keywords, medical_advice,
                    question, answer, priority, is_active
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                params,
            )

        await self._run(_insert)
        return entry

    async def add_external_doctor(self, doctor_id: str, external: ExternalDoctor) -> ExternalDoctor:
        params = (
            str(uuid.uuid4()), doctor_id, external.name, external.specialization,
            external.total_referrals, external.commission_percentage, external.total_commission_due,
        )

        def _insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                INSERT INTO external_doctors (
                    id, doctor_id, name, specialization, total_referrals,
                    commission_percentage, total_commission_due
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                params,
            )

        await self._run(_insert)
        return external

    # Patients

    async def get_patient(self, phone: str) -> Optional[Patient]:
        key = PhoneNumberParser.normalize(phone)

        def _fetch(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute("SELECT * FROM patients WHERE phone_number = ?", (key,)).fetchone()

        row = await self._run(_fetch)
        return self._patient(row) if row else None

    async def get_patient_by_id(self, patient_id: str) -> Optional[Patient]:
        def _fetch(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute("SELECT * FROM patients WHERE id = ?", (patient_id,)).fetchone()

        row = await self._run(_fetch)
        return self._patient(row) if row else None

    async def upsert_patient(self, phone: str, doctor_id: str, name: Optional[str]) -> Patient:
        key = PhoneNumberParser.normalize(phone)
        if not key:
            raise DataStoreError("Cannot upsert a patient without a phone number")
        now = _to_db_time(datetime.now(timezone.utc))

        def _upsert(conn: sqlite3.Connection) -> sqlite3.Row:
            conn.execute(
                """
                INSERT INTO patients (id, phone_number, doctor_id, name, last_seen_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(phone_number) DO UPDATE SET
                    doctor_id = excluded.doctor_id,
                    name = COALESCE(excluded.name, patients.name),
                    last_seen_at = excluded.last_seen_at
                """,
                (str(uuid.uuid4()), key, doctor_id, name, now),
            )
            return conn.execute("SELECT * FROM patients WHERE phone_number = ?", (key,)).fetchone()

        return self._patient(await self._run(_upsert))

    async def update_patient_state(
        self,
        patient_id: str,
        state: ConversationState,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        data = {} if state == ConversationState.IDLE else dict(payload or {})
        data_json = json.dumps(data, default=_json_default)

        def _update(conn: sqlite3.Connection) -> int:
            cur = conn.execute(
                "UPDATE patients SET conversation_state = ?, conversation_data = ? WHERE id = ?",
                (state.value, data_json, patient_id),
            )
            return cur.rowcount

        if await self._run(_update) == 0:
            raise NotFoundError(f"Patient {patient_id} not found")

    async def set_bot_paused(self, patient_id: str, paused: bool, paused_by: Optional[str] = None) -> Patient:
        paused_at = _to_db_time(datetime.now(timezone.utc)) if paused else None

        def _update(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            conn.execute(
                "UPDATE patients SET is_bot_paused = ?, bot_paused_at = ?, bot_paused_by = ? WHERE id = ?",
                (int(paused), paused_at, paused_by if paused else None, patient_id),
            )
            return conn.execute("SELECT * FROM patients WHERE id = ?", (patient_id,)).fetchone()

        row = await self._run(_update)
        if row is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return self._patient(row)

    async def set_referral_code(self, patient_id: str, code: str) -> None:
        def _update(conn: sqlite3.Connection) -> int:
            return conn.execute(
                "UPDATE patients SET referral_code = ? WHERE id = ?", (code, patient_id)
            ).rowcount

        if await self._run(_update) == 0:
            raise NotFoundError(f"Patient {patient_id} not found")

    async def get_patient_by_referral_code(self, code: str) -> Optional[Patient]:
        def _fetch(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute("SELECT * FROM patients WHERE referral_code = ?", (code,)).fetchone()

        row = await self._run(_fetch)
        return self._patient(row) if row else None

    async def search_patients(self, doctor_id: str, name: str, limit: int = 10) -> List[Patient]:
        needle = name.strip().lower()
        for char in ("\\", "%", "_"):
            needle = needle.replace(char, "\\" + char)
        pattern = f"%{needle}%"

        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                """
                SELECT * FROM patients
                WHERE doctor_id = ? AND LOWER(name) LIKE ? ESCAPE '\\'
                ORDER BY last_seen_at DESC
                LIMIT ?
                """,
                (doctor_id, pattern, limit),
            ).fetchall()

        return [self._patient(row) for row in await self._run(_fetch)]

    # Doctors

    async def get_doctor_by_phone(self, phone: str) -> Optional[Doctor]:
        key = PhoneNumberParser.normalize(phone)

        def _fetch(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute(
                "SELECT * FROM doctors WHERE phone_number = ? AND is_active = 1", (key,)
            ).fetchone()

        row = await self._run(_fetch)
        return self._doctor(row) if row else None

    async def get_doctor_by_id(self, doctor_id: str) -> Optional[Doctor]:
        def _fetch(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute("SELECT * FROM doctors WHERE id = ?", (doctor_id,)).fetchone()

        row = await self._run(_fetch)
        return self._doctor(row) if row else None

    # Appointments

    async def create_appointment(
        self,
        patient_id: str,
        doctor_id: str,
        when_iso: str,
        notes: Optional[str] = None,
    ) -> Appointment:
        try:
            when = _to_db_time(datetime.fromisoformat(when_iso))
        except ValueError as e:
            raise DataStoreError(f"Invalid appointment time {when_iso!r}") from e
        appointment_id = str(uuid.uuid4())

        def _insert(conn: sqlite3.Connection) -> sqlite3.Row:
            if conn.execute("SELECT 1 FROM patients WHERE id = ?", (patient_id,)).fetchone() is None:
                raise NotFoundError(f"Patient {patient_id} not found")
            conn.execute(
                """
                INSERT INTO appointments (id, patient_id, doctor_id, appointment_time, status, notes)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (appointment_id, patient_id, doctor_id, when, AppointmentStatus.PENDING.value, notes),
            )
            return conn.execute(
                """
                SELECT a.*, p.name AS patient_name, p.phone_number AS patient_phone
                FROM appointments a JOIN patients p ON p.id = a.patient_id
                WHERE a.id = ?
                """,
                (appointment_id,),
            ).fetchone()

        return self._appointment(await self._run(_insert))

    async def get_next_appointment(self, patient_id: str, now: datetime) -> Optional[Appointment]:
        statuses = [s.value for s in AppointmentStatus.queue_statuses()]

        def _fetch(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute(
                f"""
                SELECT * FROM appointments
                WHERE patient_id = ? AND appointment_time >= ?
                  AND status IN ({",".join("?" * len(statuses))})
                ORDER BY appointment_time ASC
                LIMIT 1
                """,
                (patient_id, _to_db_time(now), *statuses),
            ).fetchone()

        row = await self._run(_fetch)
        return self._appointment(row) if row else None

    async def list_appointments(
        self,
        doctor_id: str,
        start: datetime,
        end: datetime,
        statuses: Optional[Iterable[AppointmentStatus]] = None,
    ) -> List[Appointment]:
        query = """
            SELECT a.*, p.name AS patient_name, p.phone_number AS patient_phone
            FROM appointments a LEFT JOIN patients p ON p.id = a.patient_id
            WHERE a.doctor_id = ? AND a.appointment_time >= ? AND a.appointment_time < ?
        """
        params: List[Any] = [doctor_id, _to_db_time(start), _to_db_time(end)]
        if statuses is not None:
            values = [AppointmentStatus(s).value for s in statuses]
            query += f" AND a.status IN ({','.join('?' * len(values))})"
            params.extend(values)
        query += " ORDER BY a.appointment_time ASC"

        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(query, params).fetchall()

        return [self._appointment(row) for row in await self._run(_fetch)]

    async def list_patient_appointments(self, patient_id: str) -> List[Appointment]:
        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                """
                SELECT a.*, p.name AS patient_name, p.phone_number AS patient_phone
                FROM appointments a JOIN patients p ON p.id = a.patient_id
                WHERE a.patient_id = ?
                ORDER BY a.appointment_time DESC
                """,
                (patient_id,),
            ).fetchall()

        return [self._appointment(row) for row in await self._run(_fetch)]

    # Knowledge base and network

    async def get_knowledge_entries(self, doctor_id: str, category: KnowledgeCategory) -> List[KnowledgeEntry]:
        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                """
                SELECT * FROM knowledge_entries
                WHERE doctor_id = ? AND category = ? AND is_active = 1
                ORDER BY priority DESC
                """,
                (doctor_id, category.value),
            ).fetchall()

        return [self._knowledge(row) for row in await self._run(_fetch)]

    async def get_external_doctor_network(self, doctor_id: str) -> List[ExternalDoctor]:
        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                "SELECT * FROM external_doctors WHERE doctor_id = ? ORDER BY name", (doctor_id,)
            ).fetchall()

        return [
            ExternalDoctor(
                name=row["name"],
                specialization=row["specialization"],
                total_referrals=row["total_referrals"],
                commission_percentage=row["commission_percentage"],
                total_commission_due=row["total_commission_due"],
            )
            for row in await self._run(_fetch)
        ]

    # Messages

    async def save_message(
        self,
        patient_id: str,
        doctor_id: str,
        direction: str,
        body: str,
        sent_by: str,
    ) -> None:
        params = (
            str(uuid.uuid4()), patient_id, doctor_id, direction, body, sent_by,
            _to_db_time(datetime.now(timezone.utc)),
        )

        def _insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                INSERT INTO messages (id, patient_id, doctor_id, direction, message_body, sent_by, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                params,
            )

        await self._run(_insert)

    async def list_messages(self, patient_id: str) -> List[Dict[str, Any]]:
        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                "SELECT * FROM messages WHERE patient_id = ? ORDER BY created_at ASC", (patient_id,)
            ).fetchall()

        return [dict(row) for row in await self._run(_fetch)]

    async def ping(self) -> None:
        await self._run(lambda conn: conn.execute("SELECT 1").fetchone())
