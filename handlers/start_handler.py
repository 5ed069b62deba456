"""Обработчик базовых команд (start, help)"""

from aiogram import Router
from aiogram.enums import ParseMode
from aiogram.filters import Command
from aiogram.types import Message

router = Router()

HELP_TEXT = {
    "start": (
        "👋 Этот бот ищет первоисточники для текстов и постов.\n\n"
        "<b>Как это работает:</b>\n"
        "1. Пришлите текст или ссылку на пост канала\n"
        "2. Бот извлечет даты, числа, имена и ссылки\n"
        "3. Получите краткий вывод и до трех возможных источников\n\n"
        "❓ /help — список команд"
    ),
    "help": (
        "📖 <b>Команды</b>\n\n"
        "/start — начало работы\n"
        "/facts &lt;текст&gt; — только факты, без AI\n"
        "/help — эта справка\n\n"
        "<b>Способы отправки:</b>\n"
        "• Текст или пересланный пост\n"
        "• Ссылка на пост: https://t.me/channel/123\n"
        "• Фото или видео с подписью"
    ),
}


@router.message(Command("start"))
async def cmd_start(message: Message):
    """Обработчик команды /start"""
    await message.answer(HELP_TEXT["start"], parse_mode=ParseMode.HTML)


@router.message(Command("help"))
async def cmd_help(message: Message):
    """Обработчик команды /help"""
    await message.answer(HELP_TEXT["help"], parse_mode=ParseMode.HTML)
