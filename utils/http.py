"""HTTP сервер: webhook Telegram, API мини-приложения и healthcheck"""

from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.types import Update
from aiohttp import web
import logging

from config import HEALTHCHECK_ENDPOINT, MINIAPP_ANALYZE_ENDPOINT, WEBHOOK_ENDPOINT

from .pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

BAD_REQUEST = "Неверный формат запроса."
EMPTY_TEXT = "Введите текст для анализа."
ANALYSIS_FAILED = "Не удалось выполнить анализ."


async def health_handler(_request):
    """Обработчик healthcheck запроса"""
    return web.Response(text="OK", status=200)


async def webhook_handler(request: web.Request) -> web.Response:
    """
    Принимает update от Telegram.

    Некорректное тело или update без чата подтверждаются без обработки;
    после обработки всегда отвечает 200, чтобы Telegram не повторял доставку.
    """
    secret = request.app["webhook_secret"]
    if secret and request.headers.get(SECRET_HEADER) != secret:
        logger.warning("Webhook request with invalid secret token")
        return web.Response(status=401)

    bot: Bot = request.app["bot"]
    dispatcher: Dispatcher = request.app["dispatcher"]

    try:
        payload = await request.json()
        update = Update.model_validate(payload, context={"bot": bot})
    except ValueError as e:
        logger.warning("Malformed webhook update skipped: %s", e)
        return web.Response(text="ok")

    try:
        await dispatcher.feed_update(bot, update)
    except Exception:
        logger.exception("Update %s processing failed", update.update_id)

    return web.Response(text="ok")


async def miniapp_analyze_handler(request: web.Request) -> web.Response:
    """POST {"text": "..."} -> {"analysis": {...}} или {"error": "..."}"""
    pipeline: AnalysisPipeline = request.app["pipeline"]

    try:
        payload = await request.json()
    except ValueError:
        return web.json_response({"error": BAD_REQUEST}, status=400)

    text = payload.get("text") if isinstance(payload, dict) else None
    if not isinstance(text, str) or not text.strip():
        return web.json_response({"error": EMPTY_TEXT}, status=400)

    try:
        result = await pipeline.run(text)
    except Exception:
        logger.exception("Mini app analysis failed")
        return web.json_response({"error": ANALYSIS_FAILED}, status=500)

    return web.json_response({"analysis": result.analysis.to_dict()})


def create_app(
    pipeline: AnalysisPipeline,
    bot: Optional[Bot] = None,
    dispatcher: Optional[Dispatcher] = None,
    webhook_secret: str = "",
) -> web.Application:
    """Приложение aiohttp; webhook подключается, только если переданы bot и dispatcher"""
    app = web.Application()
    app["pipeline"] = pipeline
    app["bot"] = bot
    app["dispatcher"] = dispatcher
    app["webhook_secret"] = webhook_secret

    app.router.add_get(HEALTHCHECK_ENDPOINT, health_handler)
    app.router.add_post(MINIAPP_ANALYZE_ENDPOINT, miniapp_analyze_handler)
    if bot is not None and dispatcher is not None:
        app.router.add_post(WEBHOOK_ENDPOINT, webhook_handler)
    return app


async def start_web_server(app: web.Application, host: str = "0.0.0.0", port: int = 8080):
    """Запуск HTTP сервера"""
    runner = web.AppRunner(app)
    await runner.setup()
    await web.TCPSite(runner, host, port).start()

    logger.info("HTTP сервер запущен на %s:%s", host, port)
    return runner
