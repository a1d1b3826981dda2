"""
Live chat handler: doctor-initiated messages and bot takeover.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ...core.exceptions import NotFoundError
from ...services.livechat import LiveChatService


class ManualSendRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    patient_id: str = Field(default="", alias="patientId")
    doctor_id: str = Field(default="", alias="doctorId")
    message_body: str = Field(default="", alias="messageBody")


class ToggleBotRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    patient_id: str = Field(alias="patientId")
    pause: bool
    doctor_id: Optional[str] = Field(default=None, alias="doctorId")


class LiveChatHandler:
    """Handler for the doctor dashboard's live chat endpoints."""

    def __init__(self, live_chat: LiveChatService):
        self.live_chat = live_chat
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):

        @self.router.post("/send")
        async def send_manual_message(payload: ManualSendRequest):
            """Send a manual message and pause the bot for that patient."""
            try:
                result = await self.live_chat.send_manual_message(
                    payload.patient_id, payload.doctor_id, payload.message_body
                )
            except ValueError as e:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
            except NotFoundError as e:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

            body = result.model_dump(by_alias=True)
            if not result.success:
                return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)
            return body

        @self.router.post("/toggle-bot")
        async def toggle_bot(payload: ToggleBotRequest):
            try:
                patient = await self.live_chat.toggle_bot(payload.patient_id, payload.pause, payload.doctor_id)
            except NotFoundError as e:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
            return {
                "success": True,
                "patientId": patient.id,
                "isBotPaused": patient.is_bot_paused,
            }

        @self.router.get("/messages/{patient_id}")
        async def get_messages(patient_id: str, limit: int = 50):
            messages = await self.live_chat.get_messages(patient_id, limit=limit)
            return {"patientId": patient_id, "messages": messages}
