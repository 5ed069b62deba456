"""Кандидаты в источники и поисковый запрос по извлеченным фактам"""

import re
from dataclasses import dataclass
from typing import Tuple

from config import MAX_SEARCH_QUERY_LENGTH

from .facts import ExtractedFacts
from .text_utils import normalize_whitespace, unique

_TRAILING_PUNCTUATION_RE = re.compile(r"[),.]+$")


@dataclass(frozen=True)
class CandidateSources:
    sources: Tuple[str, ...] = ()


def find_candidate_sources(facts: ExtractedFacts) -> CandidateSources:
    """Оставляет http(s)-ссылки без хвостовой пунктуации, без повторов"""
    sources = [
        _TRAILING_PUNCTUATION_RE.sub("", link)
        for link in facts.links
        if link.startswith(("http://", "https://"))
    ]
    return CandidateSources(sources=tuple(unique(sources)))


def build_search_query(text: str, facts: ExtractedFacts) -> str:
    """
    Запрос для веб-поиска: до 3 имен, до 2 дат, до 2 чисел и первое
    утверждение (или весь текст, если утверждений нет).
    """
    parts = [
        *facts.names[:3],
        *facts.dates[:2],
        *facts.numbers[:2],
        facts.claims[0] if facts.claims else (text or ""),
    ]
    query = normalize_whitespace(" ".join(parts))
    return query[:MAX_SEARCH_QUERY_LENGTH].strip()
