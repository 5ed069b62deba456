"""Pytest конфигурация и фикстуры для тестирования бота"""

import pytest
from aiogram import Bot
from unittest.mock import AsyncMock, MagicMock

from config import Settings
from utils.llm_service import AiAnalysis
from utils.parser import TelegramWebError


@pytest.fixture
def settings():
    """Settings без внешних ключей"""
    return Settings(llm_api_key="sk-test", telegram_bot_token="123456:TEST-TOKEN")


@pytest.fixture
def bot():
    """Настоящий Bot с тестовым токеном; сеть в тестах не используется"""
    return Bot(token="123456:TEST-TOKEN")


@pytest.fixture(scope="session")
def dispatcher():
    """
    Dispatcher с роутерами бота.

    Роутеры являются модульными синглтонами и подключаются к диспетчеру один раз,
    поэтому фикстура на всю сессию; зависимости подставляются в тестах.
    """
    from bot import create_dispatcher

    return create_dispatcher(pipeline=None, delivery=None)


@pytest.fixture
def mock_delivery():
    """Мок TelegramDelivery"""
    delivery = MagicMock()
    delivery.safe_send = AsyncMock(return_value=True)
    delivery.send_message = AsyncMock()
    return delivery


@pytest.fixture
def failing_scraper():
    """Скрапер, у которого загрузка поста всегда падает"""
    scraper = MagicMock()
    scraper.fetch_post_text.side_effect = TelegramWebError("Ошибка запроса: network down")
    return scraper


@pytest.fixture
def mock_analyzer():
    """Мок AnalysisClient с пустым анализом"""
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(return_value=AiAnalysis(summary="Кратко", sources=()))
    return analyzer


@pytest.fixture
def mock_message():
    """Мок Message для тестирования handlers"""
    message = AsyncMock()
    message.chat.id = 42
    message.from_user.id = 123456
    message.from_user.first_name = "TestUser"
    message.text = "/start"
    message.caption = None
    message.answer = AsyncMock()
    message.reply = AsyncMock()
    return message


@pytest.fixture
def aiohttp_client():
    """Фикстура для создания тестового aiohttp клиента"""
    from aiohttp.test_utils import TestClient, TestServer

    async def factory(app):
        server = TestServer(app)
        client = TestClient(server)

        await client.start_server()
        yield client
        await client.close()

    return factory
