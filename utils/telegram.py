"""Отправка ответов в Telegram"""

import logging
from typing import Union

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import LinkPreviewOptions

from config import ConfigError, Settings

logger = logging.getLogger(__name__)

ChatId = Union[int, str]


def create_bot(settings: Settings) -> Bot:
    """Bot без parse_mode по умолчанию: ответы отправляются простым текстом"""
    if not settings.telegram_bot_token:
        raise ConfigError("TELEGRAM_BOT_TOKEN is not set")
    return Bot(token=settings.telegram_bot_token)


class TelegramDelivery:
    """Доставка текста в чат"""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_message(self, chat_id: ChatId, text: str) -> None:
        """Отправляет текст без превью ссылок. Ошибки Bot API пробрасываются."""
        await self.bot.send_message(
            chat_id=chat_id,
            text=text,
            parse_mode=None,
            link_preview_options=LinkPreviewOptions(is_disabled=True),
        )

    async def safe_send(self, chat_id: ChatId, text: str) -> bool:
        """Отправляет текст; ошибка доставки только логируется"""
        try:
            await self.send_message(chat_id, text)
        except TelegramAPIError as e:
            logger.error("Failed to send Telegram message to %s: %s", chat_id, e)
            return False
        return True
