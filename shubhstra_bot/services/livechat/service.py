"""
Doctor live chat: manual messages and bot takeover.
"""

from typing import Any, Dict, List, Optional

from ...config.settings import Settings
from ...core.exceptions import DataStoreError, MessagingGatewayError, NotFoundError
from ...core.models import ManualSendResult, Patient, WhatsAppCredentials
from ...utils.logging import get_logger
from ...utils.phone import PhoneNumberParser
from ..messaging import MessagingGateway
from ..store import DataStore

logger = get_logger("shubhstra.livechat")


class LiveChatService:
    """Let a doctor message a patient directly, pausing automated replies."""

    def __init__(self, store: DataStore, gateway: MessagingGateway, settings: Optional[Settings] = None):
        self.store = store
        self.gateway = gateway
        self.settings = settings or Settings()

    async def send_manual_message(self, patient_id: str, doctor_id: str, body: str) -> ManualSendResult:
        """
        Send a doctor-written message and pause the bot for the patient.

        Gateway failures come back as a structured result, never swallowed.

        Raises:
            ValueError: if a required field is missing
            NotFoundError: if the patient or doctor does not exist
        """
        if not patient_id or not doctor_id or not (body or "").strip():
            raise ValueError("Missing required fields: patientId, doctorId, messageBody")

        patient = await self.store.get_patient_by_id(patient_id)
        if patient is None:
            raise NotFoundError("Patient not found")
        doctor = await self.store.get_doctor_by_id(doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")

        paused = False
        try:
            await self.store.set_bot_paused(patient_id, True, paused_by=doctor_id)
            paused = True
        except DataStoreError:
            logger.exception(f"Failed to pause bot for patient {patient_id}")

        credentials = WhatsAppCredentials.resolve(doctor, self.settings)
        try:
            await self.gateway.send_text(patient.phone_number, body, credentials)
        except MessagingGatewayError as e:
            logger.error({
                "event": "manual_send_failed",
                "patient_id": patient_id,
                "to": PhoneNumberParser.mask(patient.phone_number),
                "code": e.code,
                "error": e.message,
            })
            return ManualSendResult(
                success=False,
                error=e.user_message,
                error_code=str(e.code) if e.code is not None else None,
                can_retry=e.retryable,
                bot_paused=paused,
            )

        try:
            await self.store.save_message(patient_id, doctor_id, "outgoing", body, "doctor")
        except DataStoreError:
            logger.exception(f"Message to patient {patient_id} sent but not saved")

        logger.info({"event": "manual_send", "patient_id": patient_id, "doctor_id": doctor_id})
        return ManualSendResult(success=True, bot_paused=paused)

    async def toggle_bot(self, patient_id: str, pause: bool, doctor_id: Optional[str] = None) -> Patient:
        """Pause or resume automated replies for a patient."""
        patient = await self.store.set_bot_paused(patient_id, pause, paused_by=doctor_id if pause else None)
        logger.info({"event": "bot_toggled", "patient_id": patient_id, "paused": pause})
        return patient

    async def get_messages(self, patient_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        messages = await self.store.list_messages(patient_id)
        return messages[:limit]
