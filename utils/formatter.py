"""Форматирование ответа пользователю"""

import math
from typing import List, Sequence

from config import MAX_FACTS_PER_CATEGORY, MAX_SOURCES

from .facts import ExtractedFacts
from .llm_service import AiAnalysis
from .parser import ResolvedInput
from .sources import CandidateSources
from .text_utils import truncate_message, truncate_text

FETCHED_FROM_POST = "Текст извлечен из Telegram-поста."
FETCH_FAILED_FALLBACK = "Не удалось извлечь текст поста, использую текст сообщения."
TAKEN_FROM_MESSAGE = "Текст взят из сообщения."
NO_SOURCES = "Возможные источники: не найдены."


def describe_origin(resolved: ResolvedInput) -> str:
    """Откуда взят анализируемый текст"""
    if resolved.used_telegram_fetch:
        return FETCHED_FROM_POST
    if resolved.telegram_link is not None:
        return FETCH_FAILED_FALLBACK
    return TAKEN_FROM_MESSAGE


def format_confidence(value: float) -> str:
    return f"{math.floor(value * 100 + 0.5)}%"


def build_reply(resolved: ResolvedInput, analysis: AiAnalysis) -> str:
    """Ответ с кратким выводом и источниками, не длиннее лимита сообщения"""
    lines = [describe_origin(resolved), ""]

    if summary := analysis.summary.strip():
        lines += ["Краткий вывод:", summary, ""]

    if analysis.sources:
        lines.append("Возможные источники:")
        for source in analysis.sources:
            lines.append(
                f"- {source.title or source.url} ({format_confidence(source.confidence)})"
            )
            lines.append(f"  {source.url}")
    else:
        lines.append(NO_SOURCES)

    return truncate_message("\n".join(lines))


def _inline(title: str, items: Sequence[str]) -> str:
    shown = items[:MAX_FACTS_PER_CATEGORY]
    return f"{title}: {', '.join(shown) if shown else 'нет'}"


def build_facts_reply(
    resolved: ResolvedInput, facts: ExtractedFacts, candidates: CandidateSources
) -> str:
    """Ответ только с извлеченными фактами, без обращения к LLM"""
    lines: List[str] = [describe_origin(resolved), ""]

    claims = facts.claims[:MAX_FACTS_PER_CATEGORY]
    if claims:
        lines.append("Утверждения:")
        lines += [f"- {truncate_text(claim, 200)}" for claim in claims]
    else:
        lines.append("Утверждения: нет")

    lines += [
        _inline("Даты", facts.dates),
        _inline("Числа", facts.numbers),
        _inline("Имена", facts.names),
        _inline("Ссылки", facts.links),
        "",
    ]

    if candidates.sources:
        lines.append("Возможные источники:")
        lines += [f"- {url}" for url in candidates.sources[:MAX_SOURCES]]
    else:
        lines.append(NO_SOURCES)

    return truncate_message("\n".join(lines))
