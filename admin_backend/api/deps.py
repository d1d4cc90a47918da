from fastapi import HTTPException, Request, status

from admin_backend.bot.gateway import TelegramGateway
from admin_backend.bot.ingestion import WebhookIngestor
from admin_backend.core.config import Settings
from admin_backend.db.session import Database


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> TelegramGateway:
    return request.app.state.gateway


def get_ingestor(request: Request) -> WebhookIngestor:
    return request.app.state.ingestor


def require_db(request: Request) -> Database:
    database = request.app.state.database
    if not request.app.state.settings.persistence_enabled or database is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database not configured")
    return database
