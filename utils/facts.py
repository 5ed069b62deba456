"""
Извлечение фактов из текста регулярными выражениями.

Утверждения, даты, числа, имена и ссылки. Шаблоны имен и дат рассчитаны
на русский текст (кириллица, названия месяцев в родительном падеже).

Пример:
    facts = extract_facts("Встреча состоялась 12.03.2024. https://example.com")
    facts.dates  # ("12.03.2024",)
    facts.links  # ("https://example.com",)
"""

import re
from dataclasses import asdict, dataclass
from typing import List, Tuple

from config import MAX_CLAIMS

from .text_utils import normalize_whitespace, unique

URL_RE = re.compile(r"https?://[^\s<>()]+", re.IGNORECASE)

MONTHS = (
    "января",
    "февраля",
    "марта",
    "апреля",
    "мая",
    "июня",
    "июля",
    "августа",
    "сентября",
    "октября",
    "ноября",
    "декабря",
)

DATE_RES = (
    # 12.03.2024, 1.3.24
    re.compile(r"\b\d{1,2}\.\d{1,2}\.(?:\d{4}|\d{2})\b"),
    # 2024-03-12
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    # 12 марта 2024
    re.compile(
        r"\b\d{1,2}\s+(?:" + "|".join(MONTHS) + r")\s+\d{4}\b", re.IGNORECASE
    ),
)

# Группы разрядов через пробел, NBSP, точку или запятую; иначе просто цифры
NUMBER_RE = re.compile(
    r"\b\d{1,3}(?:[ \u00a0.,]\d{3})+(?:[.,]\d+)?\b|\b\d+(?:[.,]\d+)?\b"
)

NAME_RE = re.compile(r"\b[А-ЯЁ][а-яё]+(?: [А-ЯЁ][а-яё]+){0,2}\b")

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")


@dataclass(frozen=True)
class ExtractedFacts:
    """Факты, извлеченные из текста. Все поля без дубликатов, в порядке появления."""

    claims: Tuple[str, ...] = ()
    dates: Tuple[str, ...] = ()
    numbers: Tuple[str, ...] = ()
    names: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {key: list(value) for key, value in asdict(self).items()}


def _match_all(text: str, pattern: re.Pattern) -> List[str]:
    return [match.group(0).strip() for match in pattern.finditer(text)]


def extract_claims(text: str) -> List[str]:
    """Первые предложения нормализованного текста"""
    normalized = normalize_whitespace(text)
    if not normalized:
        return []

    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(normalized)]
    return [s for s in sentences if s][:MAX_CLAIMS]


def extract_facts(text: str) -> ExtractedFacts:
    """Извлекает факты из текста. Чистая функция, не бросает исключений."""
    text = text or ""
    dates = [date for pattern in DATE_RES for date in _match_all(text, pattern)]

    return ExtractedFacts(
        claims=tuple(extract_claims(text)),
        dates=tuple(unique(dates)),
        numbers=tuple(unique(_match_all(text, NUMBER_RE))),
        names=tuple(unique(_match_all(text, NAME_RE))),
        links=tuple(unique(_match_all(text, URL_RE))),
    )
