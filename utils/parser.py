"""
Ссылки на посты Telegram и загрузка текста поста через embed-страницу t.me

Примеры использования:
    from utils.parser import find_post_link, resolve_input_text

    link = find_post_link("Глянь https://t.me/channelname/123")
    print(link.channel, link.message_id)  # channelname 123

    resolved = await resolve_input_text("https://t.me/channelname/123")
    print(resolved.text)
    print("Текст из поста" if resolved.used_telegram_fetch else "Текст сообщения")
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

import requests
from bs4 import BeautifulSoup

from config import POST_FETCH_TIMEOUT

logger = logging.getLogger(__name__)

POST_LINK_RE = re.compile(
    r"https?://t\.me/(?:s/)?([a-zA-Z0-9_]+)/(\d+)", re.IGNORECASE
)


class TelegramWebError(Exception):
    """Базовая ошибка при работе с веб-версией Telegram."""


@dataclass(frozen=True)
class TelegramLink:
    """Ссылка на пост публичного канала"""

    url: str
    channel: str
    message_id: int


@dataclass(frozen=True)
class ResolvedInput:
    """
    Текст для анализа.

    text: текст поста, если его удалось загрузить, иначе исходный текст;
    original_text: исходный текст сообщения без краевых пробелов.
    """

    text: str
    original_text: str
    telegram_link: Optional[TelegramLink] = None
    used_telegram_fetch: bool = False

    def __post_init__(self):
        if self.used_telegram_fetch and (
            self.telegram_link is None or self.text == self.original_text
        ):
            raise ValueError("used_telegram_fetch requires a link and a fetched text")


@dataclass(frozen=True)
class Fetched:
    """Текст поста загружен"""

    text: str


@dataclass(frozen=True)
class FallbackOriginal:
    """Текст поста недоступен, используется исходный текст"""

    reason: str = ""


PostFetchResult = Union[Fetched, FallbackOriginal]


def find_post_link(text: str) -> Optional[TelegramLink]:
    """
    Ищет первую ссылку на пост канала в произвольном тексте.

    Примеры:
        - "https://t.me/prog_ai/345" -> TelegramLink(channel="prog_ai", message_id=345)
        - "читай https://t.me/s/prog_ai/345 тут" -> TelegramLink(channel="prog_ai", ...)
        - "https://t.me/prog_ai" -> None (нет ID)
    """
    match = POST_LINK_RE.search(text or "")
    if not match:
        return None

    channel, message_id = match.groups()
    return TelegramLink(url=match.group(0), channel=channel, message_id=int(message_id))


def _html_to_text(block) -> str:
    """Текст блока сообщения: <br> и абзацы превращаются в переводы строк."""
    for br in block.find_all("br"):
        br.replace_with("\n")
    for paragraph in block.find_all("p"):
        paragraph.insert_after("\n")
    # get_text снимает теги и декодирует HTML-сущности
    text = block.get_text().replace("\r\n", "\n").replace("\xa0", " ")
    return text.strip()


class TelegramWebScraper:
    """
    Загрузчик текста одиночного поста через https://t.me/<channel>/<id>?embed=1

    Не требует Bot API токена, работает через простые HTTP запросы.
    Сессия requests создается на каждую загрузку: загрузки разных
    запросов идут в разных потоках и не делят cookies и пул соединений.

    Пример:
        scraper = TelegramWebScraper()
        text = scraper.fetch_post_text(find_post_link("https://t.me/channel/1"))
    """

    BASE_URL = "https://t.me"
    HEADERS = {
        "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36",
        "Accept-Language": "ru-RU,ru;q=0.9,en;q=0.8",
    }

    def __init__(
        self,
        session_factory: Callable[[], requests.Session] = requests.Session,
        timeout: float = POST_FETCH_TIMEOUT,
    ):
        """
        Args:
            session_factory: Фабрика requests.Session, вызывается на каждую загрузку
            timeout: Таймаут запроса в секундах
        """
        self.timeout = timeout
        self.session_factory = session_factory

    def fetch_post_text(self, link: TelegramLink) -> str:
        """
        Загружает embed-страницу поста и извлекает текст сообщения.

        Args:
            link: Ссылка на пост

        Returns:
            Текст поста без разметки

        Raises:
            TelegramWebError: Ошибка сети, некорректный таймаут, статус не 200,
                страница ошибки, нет блока с текстом или текст пустой
        """
        url = f"{self.BASE_URL}/{link.channel}/{link.message_id}"

        try:
            with self.session_factory() as session:
                response = session.get(
                    url, params={"embed": "1"}, headers=self.HEADERS, timeout=self.timeout
                )
        # urllib3 отклоняет некорректный таймаут обычным ValueError
        except (requests.RequestException, ValueError) as exc:
            raise TelegramWebError(f"Ошибка запроса: {exc}") from exc

        if response.status_code != 200:
            raise TelegramWebError(f"t.me вернул статус {response.status_code}")

        soup = BeautifulSoup(response.text, "html.parser")
        if soup.select_one(".tgme_page_error"):
            raise TelegramWebError("Пост недоступен (возможно, канал приватный или пост удален)")

        block = soup.select_one(".tgme_widget_message_text")
        if block is None:
            raise TelegramWebError("Блок с текстом поста не найден")

        text = _html_to_text(block)
        if not text:
            raise TelegramWebError("Пост не содержит текста")
        return text


async def fetch_or_fallback(
    scraper: TelegramWebScraper, link: TelegramLink
) -> PostFetchResult:
    """Загружает текст поста в отдельном потоке; ошибки превращаются в FallbackOriginal"""
    try:
        text = await asyncio.to_thread(scraper.fetch_post_text, link)
    except TelegramWebError as e:
        logger.warning("Post fetch failed for %s: %s", link.url, e)
        return FallbackOriginal(reason=str(e))
    return Fetched(text=text)


async def resolve_input_text(
    raw_text: str, scraper: Optional[TelegramWebScraper] = None
) -> ResolvedInput:
    """
    Определяет текст для анализа.

    Если в тексте есть ссылка на пост, пытается загрузить текст поста;
    при любой неудаче возвращает исходный текст, сохраняя найденную ссылку.
    """
    original_text = (raw_text or "").strip()
    link = find_post_link(original_text)
    if link is None:
        return ResolvedInput(text=original_text, original_text=original_text)

    result = await fetch_or_fallback(scraper or TelegramWebScraper(), link)
    if isinstance(result, Fetched) and result.text != original_text:
        return ResolvedInput(
            text=result.text,
            original_text=original_text,
            telegram_link=link,
            used_telegram_fetch=True,
        )

    return ResolvedInput(
        text=original_text,
        original_text=original_text,
        telegram_link=link,
        used_telegram_fetch=False,
    )
