"Обработчик сообщений с текстом для поиска первоисточников"

import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from utils.formatter import build_facts_reply, build_reply
from utils.pipeline import AnalysisPipeline
from utils.telegram import TelegramDelivery

router = Router()
logger = logging.getLogger(__name__)

ASK_FOR_TEXT = "Пришлите текст или ссылку на пост."
ANALYSIS_FAILED = "Не удалось завершить анализ. Проверьте настройки OpenAI."
FACTS_FAILED = "Не удалось извлечь факты из текста."


def message_text(message: Message) -> str:
    """Текст сообщения или подпись к медиа"""
    return (message.text or message.caption or "").strip()


@router.message(Command("facts"))
async def cmd_facts(
    message: Message,
    command: CommandObject,
    pipeline: AnalysisPipeline,
    delivery: TelegramDelivery,
):
    """Факты и ссылки из текста без обращения к LLM: /facts <текст или ссылка>"""
    chat_id = message.chat.id
    if not (text := (command.args or "").strip()):
        return await delivery.safe_send(chat_id, ASK_FOR_TEXT)

    try:
        resolved, facts, candidates = await pipeline.collect_facts(text)
    except Exception:
        logger.exception("Facts extraction failed for chat %s", chat_id)
        return await delivery.safe_send(chat_id, FACTS_FAILED)

    await delivery.safe_send(chat_id, build_facts_reply(resolved, facts, candidates))


@router.message(F.text | F.caption)
@router.edited_message(F.text | F.caption)
async def handle_text(
    message: Message, pipeline: AnalysisPipeline, delivery: TelegramDelivery
):
    """
    Основной сценарий: текст, подпись или ссылка на пост.

    Ошибка анализа логируется, пользователь получает общее сообщение.
    """
    chat_id = message.chat.id
    if not (text := message_text(message)):
        return await delivery.safe_send(chat_id, ASK_FOR_TEXT)

    try:
        result = await pipeline.run(text)
    except Exception:
        logger.exception("Pipeline failed for chat %s", chat_id)
        return await delivery.safe_send(chat_id, ANALYSIS_FAILED)

    await delivery.safe_send(chat_id, build_reply(result.resolved, result.analysis))


@router.message()
@router.edited_message()
async def handle_without_text(message: Message, delivery: TelegramDelivery):
    """Сообщение без текста (стикер, фото без подписи и т.п.)"""
    await delivery.safe_send(message.chat.id, ASK_FOR_TEXT)
