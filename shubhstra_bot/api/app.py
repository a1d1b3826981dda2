"""
FastAPI application factory and configuration.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..services.factory import BotServices, build_services
from ..utils.event_log import set_log_path
from .middleware import SecurityHeaders, LoggingMiddleware
from .webhooks import WhatsAppWebhook
from .handlers import HealthHandler, LiveChatHandler


def create_app(services: Optional[BotServices] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    services = services or build_services()
    settings = services.settings

    if settings.event_log_path:
        set_log_path(settings.event_log_path)

    app = FastAPI(
        title=settings.app_name,
        description="WhatsApp automation for Shubhstra clinics",
        version=settings.app_version,
        debug=settings.debug,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(SecurityHeaders)
    app.add_middleware(LoggingMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    health_handler = HealthHandler(settings, services.store)
    whatsapp_webhook = WhatsAppWebhook(services)
    live_chat_handler = LiveChatHandler(services.live_chat)

    app.include_router(health_handler.router, prefix="/health", tags=["health"])
    app.include_router(whatsapp_webhook.router, prefix="/webhook", tags=["webhooks"])
    app.include_router(live_chat_handler.router, prefix="/api/live-chat", tags=["live-chat"])

    return app
