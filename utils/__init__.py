"""Утилиты и основные модули бота"""

from .facts import ExtractedFacts, extract_facts
from .parser import (
    TelegramWebScraper,
    TelegramWebError,
    ResolvedInput,
    find_post_link,
    resolve_input_text,
)
from .sources import find_candidate_sources, build_search_query
from .search import GoogleSearchClient, SearchError
from .llm_service import AiAnalysis, AiSource, AnalysisClient, AnalysisError
from .formatter import build_reply, build_facts_reply
from .pipeline import AnalysisPipeline
from .http import create_app, start_web_server, health_handler
from .text_utils import truncate_message

__all__ = [
    "ExtractedFacts",
    "extract_facts",
    "TelegramWebScraper",
    "TelegramWebError",
    "ResolvedInput",
    "find_post_link",
    "resolve_input_text",
    "find_candidate_sources",
    "build_search_query",
    "GoogleSearchClient",
    "SearchError",
    "AiAnalysis",
    "AiSource",
    "AnalysisClient",
    "AnalysisError",
    "build_reply",
    "build_facts_reply",
    "AnalysisPipeline",
    "create_app",
    "start_web_server",
    "health_handler",
    "truncate_message",
]
