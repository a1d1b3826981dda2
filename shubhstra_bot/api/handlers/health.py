"""
Health check handler.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from datetime import datetime

from ...config import Settings
from ...core.exceptions import DataStoreError
from ...core.models import WhatsAppCredentials
from ...services.store import DataStore
from ...utils.logging import get_logger

logger = get_logger("shubhstra.health")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    version: str
    uptime: float
    store: str


class HealthHandler:
    """Handler for health check endpoints."""

    def __init__(self, settings: Settings, store: DataStore):
        self.settings = settings
        self.store = store
        self.start_time = datetime.now()
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):
        """Setup health check routes."""

        @self.router.get("/", response_model=HealthResponse)
        async def health_check():
            """Basic health check endpoint."""
            uptime = (datetime.now() - self.start_time).total_seconds()
            return HealthResponse(
                status="healthy",
                timestamp=datetime.now().isoformat(),
                version=self.settings.app_version,
                uptime=uptime,
                store=self.settings.store_backend,
            )

        @self.router.get("/ready")
        async def readiness_check():
            """Ready once the data store answers; reports whether master WhatsApp credentials are set."""
            whatsapp = WhatsAppCredentials.resolve(None, self.settings).is_complete
            try:
                await self.store.ping()
            except DataStoreError:
                logger.exception("Readiness check failed: data store unavailable")
                return JSONResponse(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    content={"status": "not_ready", "store": False, "whatsapp": whatsapp},
                )
            return {"status": "ready", "store": True, "whatsapp": whatsapp}

        @self.router.get("/live")
        async def liveness_check():
            """Liveness check for container orchestration."""
            return {"status": "alive"}
