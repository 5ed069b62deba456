"""Конфигурация бота, поиска и LLM"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

# Загрузка переменных окружения из .env
load_dotenv()

# LLM
DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OPENROUTER_MODEL = "openai/gpt-4o-mini"
LLM_TEMPERATURE = 0.2

# Таймауты (секунды)
POST_FETCH_TIMEOUT = 3.0
SEARCH_TIMEOUT = 8.0

# Лимиты
MAX_MESSAGE_LENGTH = 4000
MAX_SOURCES = 3
MAX_CLAIMS = 5
MAX_SEARCH_RESULTS = 5
MAX_SEARCH_QUERY_LENGTH = 256
MAX_FACTS_PER_CATEGORY = 5

# Логирование
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# HTTP сервер (webhook, mini-app, healthcheck)
WEB_HOST = "0.0.0.0"
WEB_PORT = 8080
HEALTHCHECK_ENDPOINT = "/health"
WEBHOOK_ENDPOINT = "/api/webhook"
MINIAPP_ANALYZE_ENDPOINT = "/api/miniapp/analyze"


class ConfigError(Exception):
    """Не задан обязательный параметр конфигурации."""


def default_model_for(base_url: str) -> str:
    """Модель по умолчанию в зависимости от провайдера"""
    if "openrouter.ai" in base_url:
        return DEFAULT_OPENROUTER_MODEL
    return DEFAULT_OPENAI_MODEL


@dataclass(frozen=True)
class Settings:
    """
    Учетные данные и адреса внешних сервисов.

    Передаются явно в каждый компонент, который ходит в сеть;
    чистая логика окружение не читает.
    """

    telegram_bot_token: str = ""
    webhook_url: str = ""
    webhook_secret: str = ""
    llm_api_key: str = ""
    llm_base_url: str = DEFAULT_LLM_BASE_URL
    llm_model: str = ""
    google_api_key: str = ""
    google_cx: str = ""
    search_timeout: float = SEARCH_TIMEOUT
    post_fetch_timeout: float = POST_FETCH_TIMEOUT
    web_host: str = WEB_HOST
    web_port: int = WEB_PORT

    @property
    def normalized_base_url(self) -> str:
        return self.llm_base_url.rstrip("/")

    @property
    def model(self) -> str:
        return self.llm_model or default_model_for(self.normalized_base_url)

    @property
    def search_enabled(self) -> bool:
        return bool(self.google_api_key and self.google_cx)


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    # отсекает также nan
    if not value > 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Собирает Settings из переменных окружения"""
    env = os.environ if env is None else env

    port_raw = env.get("WEB_PORT", "").strip()
    try:
        web_port = int(port_raw) if port_raw else WEB_PORT
    except ValueError as exc:
        raise ConfigError(f"WEB_PORT must be an integer, got {port_raw!r}") from exc

    return Settings(
        telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN", "").strip(),
        webhook_url=env.get("TELEGRAM_WEBHOOK_URL", "").strip(),
        webhook_secret=env.get("TELEGRAM_WEBHOOK_SECRET", "").strip(),
        llm_api_key=(
            env.get("OPENAI_API_KEY") or env.get("OPENROUTER_API_KEY") or ""
        ).strip(),
        llm_base_url=env.get("OPENAI_BASE_URL", "").strip() or DEFAULT_LLM_BASE_URL,
        llm_model=env.get("OPENAI_MODEL", "").strip(),
        google_api_key=env.get("GOOGLE_API_KEY", "").strip(),
        google_cx=env.get("GOOGLE_CX", "").strip(),
        search_timeout=_get_float(env, "SEARCH_TIMEOUT", SEARCH_TIMEOUT),
        post_fetch_timeout=_get_float(env, "POST_FETCH_TIMEOUT", POST_FETCH_TIMEOUT),
        web_host=env.get("WEB_HOST", "").strip() or WEB_HOST,
        web_port=web_port,
    )
