"""Клиент Google Custom Search JSON API"""

import logging
from dataclasses import dataclass
from typing import List

import aiohttp

from config import MAX_SEARCH_RESULTS, SEARCH_TIMEOUT, ConfigError, Settings

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


class SearchError(Exception):
    """Поисковый API ответил ошибкой"""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"Google Search API failed: {status} {body}".strip())


@dataclass(frozen=True)
class SearchItem:
    title: str
    link: str
    snippet: str


class GoogleSearchClient:
    """Поиск страниц по запросу. Возвращает до 5 результатов с непустой ссылкой."""

    def __init__(
        self,
        api_key: str,
        cx: str,
        timeout: float = SEARCH_TIMEOUT,
        endpoint: str = GOOGLE_SEARCH_URL,
    ):
        self.api_key = api_key
        self.cx = cx
        self.timeout = timeout
        self.endpoint = endpoint

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleSearchClient":
        return cls(
            api_key=settings.google_api_key,
            cx=settings.google_cx,
            timeout=settings.search_timeout,
        )

    async def search(self, query: str) -> List[SearchItem]:
        if not self.api_key or not self.cx:
            raise ConfigError("GOOGLE_API_KEY or GOOGLE_CX is not set")

        params = {
            "key": self.api_key,
            "cx": self.cx,
            "q": query,
            "num": str(MAX_SEARCH_RESULTS),
            "hl": "ru",
            "gl": "ru",
        }

        async with aiohttp.ClientSession() as session:
            async with session.get(
                self.endpoint,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise SearchError(resp.status, body)
                data = await resp.json(content_type=None)

        items = data.get("items") if isinstance(data, dict) else None
        results = []
        for item in items or []:
            if not isinstance(item, dict):
                continue
            link = str(item.get("link") or "").strip()
            if not link:
                continue
            results.append(
                SearchItem(
                    title=str(item.get("title") or ""),
                    link=link,
                    snippet=str(item.get("snippet") or ""),
                )
            )

        logger.info("Search returned %d results for %r", len(results), query)
        return results[:MAX_SEARCH_RESULTS]
