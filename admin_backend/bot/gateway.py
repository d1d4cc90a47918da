import logging
from dataclasses import dataclass
from typing import Optional, Union

from telegram import Bot
from telegram.error import TelegramError

from admin_backend.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BotIdentity:
    id: int
    username: Optional[str]


class TelegramGateway:
    """Outbound Bot API calls. Every method is best effort and never raises."""

    def __init__(self, settings: Settings, bot: Optional[Bot] = None) -> None:
        self._admin_chat_id = settings.TELEGRAM_ADMIN_CHAT_ID
        self._secret_token = settings.TELEGRAM_WEBHOOK_SECRET or None
        if bot is not None:
            self._bot: Optional[Bot] = bot
        elif settings.TELEGRAM_BOT_TOKEN:
            self._bot = Bot(token=settings.TELEGRAM_BOT_TOKEN)
        else:
            logger.warning("TELEGRAM_BOT_TOKEN not set – Telegram gateway disabled")
            self._bot = None

    @property
    def enabled(self) -> bool:
        return self._bot is not None

    async def start(self) -> None:
        if self._bot is None:
            return
        try:
            await self._bot.initialize()
        except Exception as e:
            logger.warning("Telegram bot initialization failed: %s", e)

    async def stop(self) -> None:
        if self._bot is None:
            return
        try:
            await self._bot.shutdown()
        except Exception as e:
            logger.warning("Error while shutting down Telegram bot: %s", e)

    async def get_bot_identity(self) -> Optional[BotIdentity]:
        if self._bot is None:
            return None
        try:
            me = await self._bot.get_me()
        except TelegramError as e:
            logger.warning("Telegram getMe failed: %s", e)
            return None
        except Exception as e:
            logger.warning("Telegram API not reachable: %s", e)
            return None
        return BotIdentity(id=me.id, username=me.username)

    async def register_webhook(self, url: str) -> bool:
        if self._bot is None:
            return False
        try:
            return bool(await self._bot.set_webhook(url=url, secret_token=self._secret_token))
        except Exception as e:
            logger.warning("Failed to set webhook %s: %s", url, e)
            return False

    async def send_message(self, chat_id: Union[int, str], text: str) -> bool:
        if self._bot is None:
            logger.warning("Telegram gateway disabled – message to %s dropped", chat_id)
            return False
        try:
            await self._bot.send_message(chat_id=chat_id, text=text)
        except Exception as e:
            logger.warning("Failed to send message to %s: %s", chat_id, e)
            return False
        return True

    async def send_admin_notification(self, text: str) -> bool:
        if not self._admin_chat_id:
            logger.warning("TELEGRAM_ADMIN_CHAT_ID not set – admin notification dropped")
            return False
        return await self.send_message(self._admin_chat_id, text)
