"""Webhook ingestion: persist an inbound Telegram message and notify the admin.

The insert and the notification are two independent steps. A failed insert
does not stop the notification, and nothing is rolled back when the
notification fails after a successful insert.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from admin_backend.bot.gateway import TelegramGateway
from admin_backend.core.config import Settings
from admin_backend.db import repositories
from admin_backend.db.session import Database
from admin_backend.models.message import MessageStatus
from admin_backend.models.update import InboundUpdate

logger = logging.getLogger(__name__)


class StepOutcome(str, Enum):
    YES = "yes"
    NO = "no"
    ERROR = "error"


@dataclass
class IngestionResult:
    persisted: StepOutcome = StepOutcome.NO
    notified: StepOutcome = StepOutcome.NO
    record: Optional[Dict[str, Any]] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


TELEGRAM_MESSAGE_LIMIT = 4096


def _utf16_len(value: str) -> int:
    # Telegram measures message length in UTF-16 code units
    return len(value.encode("utf-16-le")) // 2


def format_admin_notification(user_id: str, text: Optional[str]) -> str:
    header = f"📨 New message from user {user_id}:\n\n"
    body = text or ""
    room = TELEGRAM_MESSAGE_LIMIT - _utf16_len(header)
    if _utf16_len(body) > room:
        encoded = body.encode("utf-16-le")[: (room - 1) * 2]
        body = encoded.decode("utf-16-le", errors="ignore") + "…"
    return header + body


class WebhookIngestor:
    def __init__(self, settings: Settings, database: Optional[Database], gateway: TelegramGateway) -> None:
        self._persistence_enabled = settings.persistence_enabled and database is not None
        self._database = database
        self._gateway = gateway

    async def handle_update(self, payload: Any) -> IngestionResult:
        """Process one raw update; raises only if the payload itself is malformed."""
        update = InboundUpdate.model_validate(payload)
        result = IngestionResult()
        if update.message is None:
            return result

        message = update.message
        chat_id = str(message.chat.id)
        user_id = str(message.from_user.id)
        text = message.text

        if self._persistence_enabled:
            try:
                result.record = await repositories.insert_message(
                    self._database, user_id, text, MessageStatus.NEW.value
                )
                result.persisted = StepOutcome.YES
            except Exception as e:
                logger.error("Failed to store message from user %s: %s", user_id, e)
                result.persisted = StepOutcome.ERROR
                result.error = e

        try:
            sent = await self._gateway.send_admin_notification(format_admin_notification(user_id, text))
            result.notified = StepOutcome.YES if sent else StepOutcome.NO
        except Exception as e:
            logger.error("Admin notification for user %s raised: %s", user_id, e)
            result.notified = StepOutcome.ERROR
            if result.error is None:
                result.error = e

        logger.info(
            "Received message from user %s (chat %s): persisted=%s notified=%s",
            user_id,
            chat_id,
            result.persisted.value,
            result.notified.value,
        )
        return result
