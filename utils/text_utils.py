"""Утилиты для работы с текстом"""

import re
from typing import Iterable, List

from config import MAX_MESSAGE_LENGTH

_WHITESPACE_RE = re.compile(r"\s+")

ELLIPSIS = "…"


def normalize_whitespace(text: str) -> str:
    """Схлопывает последовательности пробельных символов и обрезает края"""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def unique(items: Iterable[str]) -> List[str]:
    """Убирает дубликаты с сохранением порядка; пустые строки отбрасываются"""
    seen = set()
    result = []
    for item in items:
        normalized = item.strip()
        if normalized and normalized not in seen:
            seen.add(normalized)
            result.append(normalized)
    return result


def truncate_text(text: str, max_length: int = 100) -> str:
    """Обрезает текст до указанной длины с добавлением '...'"""
    return (
        ""
        if not (text := (text or "").strip())
        else (
            text
            if len(text) <= max_length
            else text[:max_length].rsplit(" ", 1)[0] + "..."
        )
    )


def truncate_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    """Ограничивает длину ответа: limit - 1 символ и многоточие"""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + ELLIPSIS
