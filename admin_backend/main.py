import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin_backend.api import auth, messages
from admin_backend.api.webhook import telegram_webhook
from admin_backend.bot.gateway import TelegramGateway
from admin_backend.bot.ingestion import WebhookIngestor
from admin_backend.core.config import Settings, get_settings
from admin_backend.core.errors import register_exception_handlers
from admin_backend.core.logging import setup_logging
from admin_backend.core.middleware import AccessLogMiddleware, ErrorResponseMiddleware, SecurityHeadersMiddleware
from admin_backend.db.session import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database: Optional[Database] = app.state.database
    gateway: TelegramGateway = app.state.gateway

    logger.info("Starting %s", settings.SERVICE_NAME)
    # Table creation errors propagate and abort startup
    if database is not None:
        try:
            await database.init_tables()
        except Exception:
            await database.close()
            raise
        logger.info("Database initialized")
    else:
        logger.warning("DATABASE_URL not configured – running without database")

    await gateway.start()
    identity = await gateway.get_bot_identity()
    if identity:
        logger.info("Telegram bot connected: @%s (id %s)", identity.username, identity.id)
        webhook_url = settings.webhook_url
        if webhook_url:
            if await gateway.register_webhook(webhook_url):
                logger.info("Webhook configured: %s", webhook_url)
            else:
                logger.warning("Failed to set webhook %s", webhook_url)
        else:
            logger.warning("WEBHOOK_BASE_URL not set – webhook will NOT be configured automatically")
    else:
        logger.warning("Telegram bot not configured or not accessible")

    logger.info("Environment: %s", settings.ENVIRONMENT)
    try:
        yield
    finally:
        logger.info("Shutting down server")
        await gateway.stop()
        if database is not None:
            await database.close()


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    gateway: Optional[TelegramGateway] = None,
) -> FastAPI:
    if settings is None:
        settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    if database is None and settings.persistence_enabled:
        database = Database(settings.DATABASE_URL, settings.DATABASE_POOL_SIZE)
    if gateway is None:
        gateway = TelegramGateway(settings)

    app = FastAPI(title=f"{settings.SERVICE_NAME} API", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database if settings.persistence_enabled else None
    app.state.gateway = gateway
    app.state.ingestor = WebhookIngestor(settings, app.state.database, gateway)

    # Added innermost first: errors become JSON responses before headers and CORS apply
    app.add_middleware(ErrorResponseMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": settings.SERVICE_NAME,
        }

    app.add_api_route("/" + settings.WEBHOOK_PATH.strip("/"), telegram_webhook, methods=["POST"])
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(messages.router, prefix="/api/messages", tags=["Messages"])

    return app


def run() -> None:
    settings = get_settings()
    app = create_app(settings)
    logger.info("Admin backend server starting on port %d", settings.PORT)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
