"""Тесты цепочки обработки"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from config import Settings
from utils.llm_service import AiAnalysis
from utils.pipeline import AnalysisPipeline
from utils.search import GoogleSearchClient, SearchError, SearchItem


@pytest.mark.asyncio
async def test_run_without_search(settings, mock_analyzer):
    pipeline = AnalysisPipeline(settings, scraper=MagicMock(), analyzer=mock_analyzer)

    result = await pipeline.run("  Иван сообщил 12.03.2024 https://example.com/a  ")

    assert pipeline.searcher is None
    assert result.resolved.text == "Иван сообщил 12.03.2024 https://example.com/a"
    assert result.facts.dates == ("12.03.2024",)
    assert result.analysis == AiAnalysis(summary="Кратко", sources=())
    assert result.search_results == ()
    text, facts, search_results = mock_analyzer.analyze.call_args.args
    assert text == result.resolved.text
    assert facts == result.facts
    assert search_results is None


@pytest.mark.asyncio
async def test_run_uses_fetched_post_text(settings, mock_analyzer):
    scraper = MagicMock()
    scraper.fetch_post_text.return_value = "Текст поста от 1 мая 2024 года."
    pipeline = AnalysisPipeline(settings, scraper=scraper, analyzer=mock_analyzer)

    result = await pipeline.run("https://t.me/somechannel/42")

    assert result.resolved.used_telegram_fetch is True
    assert result.facts.dates == ("1 мая 2024",)
    assert mock_analyzer.analyze.call_args.args[0] == "Текст поста от 1 мая 2024 года."


@pytest.mark.asyncio
async def test_run_with_failed_post_fetch(settings, failing_scraper, mock_analyzer):
    pipeline = AnalysisPipeline(settings, scraper=failing_scraper, analyzer=mock_analyzer)

    result = await pipeline.run("https://t.me/somechannel/42")

    assert result.resolved.used_telegram_fetch is False
    assert result.resolved.telegram_link is not None
    assert result.resolved.text == result.resolved.original_text


@pytest.mark.asyncio
async def test_run_with_search(settings, mock_analyzer):
    searcher = MagicMock()
    items = [SearchItem(title="t", link="https://found.example", snippet="s")]
    searcher.search = AsyncMock(return_value=items)
    pipeline = AnalysisPipeline(
        settings, scraper=MagicMock(), analyzer=mock_analyzer, searcher=searcher
    )

    result = await pipeline.run("Анна Петрова выступила 2024-05-01.")

    searcher.search.assert_awaited_once_with(
        "Анна Петрова 2024-05-01 2024 05 Анна Петрова выступила 2024-05-01."
    )
    assert result.search_results == tuple(items)
    assert mock_analyzer.analyze.call_args.args[2] == tuple(items)


@pytest.mark.asyncio
async def test_search_error_propagates(settings, mock_analyzer):
    searcher = MagicMock()
    searcher.search = AsyncMock(side_effect=SearchError(500, "boom"))
    pipeline = AnalysisPipeline(
        settings, scraper=MagicMock(), analyzer=mock_analyzer, searcher=searcher
    )

    with pytest.raises(SearchError):
        await pipeline.run("текст")
    mock_analyzer.analyze.assert_not_called()


@pytest.mark.asyncio
async def test_collect_facts_makes_no_analysis_call(settings, mock_analyzer):
    pipeline = AnalysisPipeline(settings, scraper=MagicMock(), analyzer=mock_analyzer)

    resolved, facts, candidates = await pipeline.collect_facts("Смотри https://example.com/a.")

    assert resolved.text == "Смотри https://example.com/a."
    assert facts.links == ("https://example.com/a.",)
    assert candidates.sources == ("https://example.com/a",)
    mock_analyzer.analyze.assert_not_called()


def test_search_enabled_by_settings():
    pipeline = AnalysisPipeline(Settings(google_api_key="k", google_cx="c"))
    assert isinstance(pipeline.searcher, GoogleSearchClient)
    assert pipeline.scraper.timeout == 3.0
