#!/usr/bin/env python3
"""Telegram бот для поиска первоисточников текстов и постов с помощью LLM"""

import asyncio
import logging
from typing import Optional
from aiogram import Bot, Dispatcher
from aiogram.exceptions import TelegramNetworkError
from aiogram.types import BotCommand

from config import LOG_LEVEL, WEBHOOK_ENDPOINT, Settings, load_settings
from handlers import analysis_handler, start_handler
from utils.http import create_app, start_web_server
from utils.pipeline import AnalysisPipeline
from utils.telegram import TelegramDelivery, create_bot

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def set_commands(bot: Bot):
    """Регистрация команд в меню Telegram"""
    commands = [
        BotCommand(command="start", description="Начать работу"),
        BotCommand(command="help", description="Справка"),
        BotCommand(command="facts", description="Только факты, без AI"),
    ]
    await bot.set_my_commands(commands)


def create_dispatcher(pipeline: AnalysisPipeline, delivery: TelegramDelivery) -> Dispatcher:
    """Dispatcher с роутерами; pipeline и delivery доступны хендлерам по имени"""
    dp = Dispatcher(pipeline=pipeline, delivery=delivery)
    dp.include_router(start_handler.router)
    dp.include_router(analysis_handler.router)
    return dp


async def run_polling(bot: Bot, dp: Dispatcher):
    for attempt in range(1, 6):
        try:
            logger.info("Подключение к Telegram (попытка %d/5)...", attempt)
            await bot.delete_webhook()
            await dp.start_polling(bot)
            break
        except TelegramNetworkError:
            if attempt == 5:
                logger.error("Не удалось подключиться после 5 попыток")
                raise
            logger.warning("Ошибка, повтор через 10 сек...")
            await asyncio.sleep(10)


async def main(settings: Optional[Settings] = None):
    """Запуск бота и HTTP сервера (webhook, mini-app, healthcheck)"""
    settings = settings or load_settings()
    bot = create_bot(settings)
    pipeline = AnalysisPipeline(settings)
    dp = create_dispatcher(pipeline, TelegramDelivery(bot))

    await set_commands(bot)

    webhook_mode = bool(settings.webhook_url)
    app = create_app(
        pipeline,
        bot=bot if webhook_mode else None,
        dispatcher=dp if webhook_mode else None,
        webhook_secret=settings.webhook_secret,
    )
    runner = await start_web_server(app, host=settings.web_host, port=settings.web_port)

    try:
        if webhook_mode:
            url = settings.webhook_url.rstrip("/") + WEBHOOK_ENDPOINT
            await bot.set_webhook(
                url,
                secret_token=settings.webhook_secret or None,
                drop_pending_updates=False,
            )
            logger.info("Webhook установлен: %s", url)
            await asyncio.Event().wait()
        else:
            await run_polling(bot, dp)
    finally:
        await runner.cleanup()
        await bot.session.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Бот остановлен")
