"""Сервис анализа текста через LangChain + OpenAI-совместимый API"""

import asyncio
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI

from config import LLM_TEMPERATURE, MAX_SOURCES, ConfigError, Settings

from .facts import ExtractedFacts
from .search import SearchItem
from .sources import find_candidate_sources
from .text_utils import unique

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "Отвечай строго JSON-объектом с полями summary (строка) и sources (массив до 3 объектов). "
    "Каждый объект источника: title, url, confidence (0..1), reason. "
    "Никакого текста вне JSON."
)

PARSE_FAILED_SUMMARY = "Не удалось разобрать ответ AI."

PROMPT = ChatPromptTemplate.from_messages(
    [("system", "{instruction}"), ("human", "{prompt}")]
)


class AnalysisError(Exception):
    """LLM API ответил ошибкой"""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"OpenAI API failed: {status_code} {body}".strip())


@dataclass(frozen=True)
class AiSource:
    title: str
    url: str
    reason: str
    confidence: float

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "url": self.url,
            "confidence": self.confidence,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class AiAnalysis:
    summary: str = ""
    sources: Tuple[AiSource, ...] = ()

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "sources": [source.to_dict() for source in self.sources],
        }


def _join_or_none(items: Iterable[str], separator: str = ", ") -> str:
    return separator.join(items) or "нет"


def build_prompt(
    text: str,
    facts: ExtractedFacts,
    search_results: Optional[Sequence[SearchItem]] = None,
) -> str:
    """Текст задания для модели"""
    if search_results:
        links_rule = (
            "Не выдумывай источники. Используй только ссылки из результатов поиска ниже."
        )
    else:
        links_rule = (
            "Не выдумывай источники. Используй только ссылки, которые есть в исходном тексте."
        )

    lines = [
        "Ты помощник по поиску первоисточников.",
        "Сравни смысл исходного текста и предложи краткий вывод.",
        links_rule,
        f"Верни от 0 до {MAX_SOURCES} источников.",
        "Если подходящих ссылок нет, верни пустой список sources. Title оставляй пустым, если не знаешь заголовок.",
        "",
        "Исходный текст:",
        text,
        "",
        "Извлеченные факты:",
        f"Утверждения: {_join_or_none(facts.claims, ' | ')}",
        f"Даты: {_join_or_none(facts.dates)}",
        f"Числа: {_join_or_none(facts.numbers)}",
        f"Имена: {_join_or_none(facts.names)}",
        f"Ссылки: {_join_or_none(facts.links)}",
    ]

    if search_results:
        lines += ["", "Результаты поиска:"]
        for i, item in enumerate(search_results, 1):
            lines.append(f"{i}. {item.title}\n{item.link}\n{item.snippet}")

    return "\n".join(lines)


def allowed_urls_for(
    facts: ExtractedFacts, search_results: Optional[Sequence[SearchItem]] = None
) -> List[str]:
    """Ссылки, которые модели разрешено вернуть"""
    if search_results:
        return unique(item.link for item in search_results)
    return unique([*facts.links, *find_candidate_sources(facts).sources])


def extract_response_text(content: Any) -> str:
    """
    Текст ответа модели.

    Чат-ответ приходит строкой, ответ в формате output text приходит списком
    блоков; текстовые блоки склеиваются.
    """
    if isinstance(content, str):
        return content.strip()

    if isinstance(content, list):
        chunks = []
        for block in content:
            if isinstance(block, str):
                chunks.append(block)
            elif isinstance(block, Mapping) and isinstance(block.get("text"), str):
                chunks.append(block["text"])
        return "".join(chunks).strip()

    return ""


def _loads_object(text: str) -> Optional[dict]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def parse_model_output(raw: str) -> Optional[dict]:
    """JSON из ответа модели: целиком или между первой '{' и последней '}'"""
    if not raw:
        return None

    data = _loads_object(raw)
    if data is not None:
        return data

    first, last = raw.find("{"), raw.rfind("}")
    if first == -1 or last <= first:
        return None
    return _loads_object(raw[first : last + 1])


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return (value if isinstance(value, str) else str(value)).strip()


def _clamp_confidence(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return max(0.0, min(1.0, number))


def normalize_analysis(
    data: Mapping[str, Any], allowed_urls: Optional[Iterable[str]] = None
) -> AiAnalysis:
    """
    Приводит ответ модели к AiAnalysis.

    Строки обрезаются, confidence ограничивается [0, 1], источники без url
    и (при заданном списке разрешенных ссылок) с посторонним url
    отбрасываются, остается не больше трех.
    """
    allowed = None if allowed_urls is None else {url.strip() for url in allowed_urls}
    raw_sources = data.get("sources")

    sources = []
    for item in raw_sources if isinstance(raw_sources, list) else []:
        if not isinstance(item, Mapping):
            continue
        url = _as_text(item.get("url"))
        if not url or (allowed is not None and url not in allowed):
            continue
        sources.append(
            AiSource(
                title=_as_text(item.get("title")),
                url=url,
                reason=_as_text(item.get("reason")),
                confidence=_clamp_confidence(item.get("confidence")),
            )
        )

    summary = data.get("summary")
    return AiAnalysis(
        summary=summary.strip() if isinstance(summary, str) else "",
        sources=tuple(sources[:MAX_SOURCES]),
    )


class AnalysisClient:
    """
    Краткий вывод и до трех источников по тексту и фактам.

    Модель создается при первом вызове, чтобы отсутствие ключа проявлялось
    ошибкой запроса, а не падением при старте.
    """

    def __init__(self, settings: Settings, llm: Optional[Runnable] = None):
        self.settings = settings
        self._llm = llm

    def _get_llm(self) -> Runnable:
        if self._llm is not None:
            return self._llm

        if not self.settings.llm_api_key:
            raise ConfigError("OPENAI_API_KEY or OPENROUTER_API_KEY is not set")

        base_url = self.settings.normalized_base_url
        llm: BaseChatModel = ChatOpenAI(
            model=self.settings.model,
            api_key=self.settings.llm_api_key,
            base_url=base_url,
            temperature=LLM_TEMPERATURE,
        )
        # JSON mode есть не у всех совместимых провайдеров
        self._llm = (
            llm.bind(response_format={"type": "json_object"})
            if "api.openai.com" in base_url
            else llm
        )
        return self._llm

    async def analyze(
        self,
        text: str,
        facts: ExtractedFacts,
        search_results: Optional[Sequence[SearchItem]] = None,
    ) -> AiAnalysis:
        chain = PROMPT | self._get_llm()

        try:
            result = await asyncio.to_thread(
                chain.invoke,
                {
                    "instruction": SYSTEM_INSTRUCTION,
                    "prompt": build_prompt(text, facts, search_results),
                },
            )
        except openai.APIStatusError as exc:
            raise AnalysisError(exc.status_code, exc.response.text) from exc

        raw_text = extract_response_text(getattr(result, "content", result))
        parsed = parse_model_output(raw_text)
        if parsed is None:
            logger.warning("Unparsable model output: %.200r", raw_text)
            return AiAnalysis(summary=PARSE_FAILED_SUMMARY)

        return normalize_analysis(parsed, allowed_urls_for(facts, search_results))
