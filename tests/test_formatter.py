"""Тесты для форматирования ответа"""

from utils.facts import ExtractedFacts, extract_facts
from utils.formatter import (
    FETCH_FAILED_FALLBACK,
    FETCHED_FROM_POST,
    NO_SOURCES,
    TAKEN_FROM_MESSAGE,
    build_facts_reply,
    build_reply,
    format_confidence,
)
from utils.llm_service import AiAnalysis, AiSource
from utils.parser import ResolvedInput, TelegramLink
from utils.sources import CandidateSources, find_candidate_sources

LINK = TelegramLink(url="https://t.me/channel/1", channel="channel", message_id=1)
PLAIN = ResolvedInput(text="текст", original_text="текст")
FETCHED = ResolvedInput(
    text="текст поста", original_text=LINK.url, telegram_link=LINK, used_telegram_fetch=True
)
FALLBACK = ResolvedInput(text=LINK.url, original_text=LINK.url, telegram_link=LINK)


def test_origin_line_variants():
    """Тест строки о происхождении текста"""
    assert build_reply(FETCHED, AiAnalysis()).startswith(FETCHED_FROM_POST)
    assert build_reply(FALLBACK, AiAnalysis()).startswith(FETCH_FAILED_FALLBACK)
    assert build_reply(PLAIN, AiAnalysis()).startswith(TAKEN_FROM_MESSAGE)


def test_reply_without_summary_and_sources():
    result = build_reply(PLAIN, AiAnalysis())

    assert result == f"{TAKEN_FROM_MESSAGE}\n\n{NO_SOURCES}"
    assert "Краткий вывод" not in result


def test_reply_with_summary_and_sources():
    analysis = AiAnalysis(
        summary="  Вывод по тексту  ",
        sources=(
            AiSource(title="Заголовок", url="https://a.example", reason="", confidence=0.876),
            AiSource(title="", url="https://b.example", reason="", confidence=0.125),
        ),
    )

    result = build_reply(PLAIN, analysis)

    assert result.split("\n") == [
        TAKEN_FROM_MESSAGE,
        "",
        "Краткий вывод:",
        "Вывод по тексту",
        "",
        "Возможные источники:",
        "- Заголовок (88%)",
        "  https://a.example",
        "- https://b.example (13%)",
        "  https://b.example",
    ]


def test_format_confidence_rounds_half_up():
    assert format_confidence(0.125) == "13%"
    assert format_confidence(0.5) == "50%"
    assert format_confidence(0.0) == "0%"
    assert format_confidence(1.0) == "100%"


def test_reply_truncated_to_limit():
    """Тест что длинный ответ обрезается до 4000 символов с многоточием"""
    analysis = AiAnalysis(summary="А" * 5000)

    result = build_reply(PLAIN, analysis)

    assert len(result) == 4000
    assert result.endswith("…")
    assert not result.endswith("……")


def test_reply_at_limit_not_truncated():
    prefix = f"{TAKEN_FROM_MESSAGE}\n\nКраткий вывод:\n"
    suffix = f"\n\n{NO_SOURCES}"
    summary = "Б" * (4000 - len(prefix) - len(suffix))

    result = build_reply(PLAIN, AiAnalysis(summary=summary))

    assert len(result) == 4000
    assert result.endswith(NO_SOURCES)


def test_facts_reply_lists_categories():
    text = "Встреча состоялась 12.03.2024, участвовало 250 человек. Подробности: https://example.com/a."
    facts = extract_facts(text)

    result = build_facts_reply(PLAIN, facts, find_candidate_sources(facts))

    assert "Утверждения:" in result
    assert "- Встреча состоялась 12.03.2024, участвовало 250 человек." in result
    assert "Даты: 12.03.2024" in result
    assert "Числа:" in result and "250" in result
    assert "Имена: Встреча, Подробности" in result
    assert "Возможные источники:\n- https://example.com/a" in result


def test_facts_reply_empty_sentinels():
    result = build_facts_reply(PLAIN, ExtractedFacts(), CandidateSources())

    assert "Утверждения: нет" in result
    assert "Даты: нет" in result
    assert "Числа: нет" in result
    assert "Имена: нет" in result
    assert "Ссылки: нет" in result
    assert result.endswith(NO_SOURCES)


def test_facts_reply_limits_items():
    facts = ExtractedFacts(numbers=tuple(str(i) for i in range(10)))
    candidates = CandidateSources(sources=tuple(f"https://{i}.example" for i in range(5)))

    result = build_facts_reply(PLAIN, facts, candidates)

    assert "Числа: 0, 1, 2, 3, 4" in result
    assert "5" not in result.split("Числа:")[1].split("\n")[0]
    assert "https://2.example" in result
    assert "https://3.example" not in result
