"""Цепочка обработки: текст -> факты -> [поиск] -> анализ"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from config import Settings

from .facts import ExtractedFacts, extract_facts
from .llm_service import AiAnalysis, AnalysisClient
from .parser import ResolvedInput, TelegramWebScraper, resolve_input_text
from .search import GoogleSearchClient, SearchItem
from .sources import CandidateSources, build_search_query, find_candidate_sources

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    resolved: ResolvedInput
    facts: ExtractedFacts
    analysis: AiAnalysis
    search_results: Tuple[SearchItem, ...] = ()


class AnalysisPipeline:
    """
    Последовательная обработка одного запроса.

    Все внешние вызовы выполняются по очереди; общего изменяемого
    состояния между запросами нет.
    """

    def __init__(
        self,
        settings: Settings,
        scraper: Optional[TelegramWebScraper] = None,
        analyzer: Optional[AnalysisClient] = None,
        searcher: Optional[GoogleSearchClient] = None,
    ):
        self.settings = settings
        self.scraper = scraper or TelegramWebScraper(timeout=settings.post_fetch_timeout)
        self.analyzer = analyzer or AnalysisClient(settings)
        if searcher is None and settings.search_enabled:
            searcher = GoogleSearchClient.from_settings(settings)
        self.searcher = searcher

    async def resolve(self, text: str) -> ResolvedInput:
        return await resolve_input_text(text, self.scraper)

    async def collect_facts(
        self, text: str
    ) -> Tuple[ResolvedInput, ExtractedFacts, CandidateSources]:
        """Факты и ссылки из текста без обращения к поиску и LLM"""
        resolved = await self.resolve(text)
        facts = extract_facts(resolved.text)
        return resolved, facts, find_candidate_sources(facts)

    async def run(self, text: str) -> PipelineResult:
        """Полный анализ. Ошибки поиска и LLM пробрасываются вызывающему."""
        resolved = await self.resolve(text)
        facts = extract_facts(resolved.text)

        search_results: Tuple[SearchItem, ...] = ()
        if self.searcher is not None:
            query = build_search_query(resolved.text, facts)
            search_results = tuple(await self.searcher.search(query))

        analysis = await self.analyzer.analyze(
            resolved.text, facts, search_results or None
        )
        logger.info(
            "Analysis done: fetched=%s, sources=%d, search_results=%d",
            resolved.used_telegram_fetch,
            len(analysis.sources),
            len(search_results),
        )
        return PipelineResult(
            resolved=resolved,
            facts=facts,
            analysis=analysis,
            search_results=search_results,
        )
