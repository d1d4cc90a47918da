import hmac
import logging

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse

from admin_backend.api.deps import get_app_settings, get_ingestor
from admin_backend.bot.ingestion import WebhookIngestor
from admin_backend.core.config import Settings
from admin_backend.core.errors import error_payload

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


async def telegram_webhook(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    ingestor: WebhookIngestor = Depends(get_ingestor),
):
    expected = settings.TELEGRAM_WEBHOOK_SECRET
    if expected:
        token = request.headers.get(SECRET_HEADER, "")
        if not hmac.compare_digest(token.encode(), expected.encode()):
            return JSONResponse({"error": "unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED)

    try:
        update = await request.json()
        result = await ingestor.handle_update(update)
        if result.error is not None:
            raise result.error
    except Exception as e:
        logger.exception("Error processing webhook")
        return JSONResponse(
            error_payload(e, settings.is_development),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return JSONResponse({"ok": True})
