"""
Keyword candidate expansion and search
"""
import re
import logging
from typing import List, Optional, Sequence

from errors import InvalidArgument
from metrics_provider import MetricsProvider
from models import SearchResult
from utils import clean_text

logger = logging.getLogger(__name__)

LONGTAIL_SUFFIXES = [
    "이란?",
    "사용법",
    "하는 방법",
    "완벽 가이드",
    "초보자 가이드",
    "설치 방법",
    "활용법",
    "비교",
    "장단점",
    "추천",
]

_QUERY_SEPARATORS = re.compile(r"[,\r\n]+")


def dedupe(keywords: Sequence[str]) -> List[str]:
    """Remove duplicates, keeping the first occurrence"""
    return list(dict.fromkeys(keywords))


def extract_keywords_from_query(query: str) -> List[str]:
    """Split a free-text query on commas and line breaks into unique keywords"""
    if not isinstance(query, str):
        raise InvalidArgument("Query must be a string", {"query": query})

    keywords = [clean_text(part) for part in _QUERY_SEPARATORS.split(query)]
    return dedupe([keyword for keyword in keywords if keyword])


def generate_longtail_variants(keyword: str, suffixes: Sequence[str] = None) -> List[str]:
    """Append each longtail suffix to the keyword"""
    suffixes = LONGTAIL_SUFFIXES if suffixes is None else suffixes
    return [f"{keyword} {suffix}" for suffix in suffixes]


def generate_related_keywords(keyword: str, limit: int = 5) -> List[str]:
    """Related keyword ideas: question and guide variants, plus the swapped two-word form"""
    related = generate_longtail_variants(keyword, LONGTAIL_SUFFIXES[:5])

    words = keyword.split()
    if len(words) == 2:
        related.append(f"{words[1]} {words[0]}")

    return related[:limit]


def search_keywords(query: str, provider: MetricsProvider, max_results: int = 10,
                    include_related: bool = True) -> List[SearchResult]:
    """Expand a query into keywords and attach estimated metrics"""
    if max_results < 1:
        raise InvalidArgument("max_results must be at least 1", {"max_results": max_results})

    keywords = extract_keywords_from_query(query)[:max_results]
    logger.info(f"Searching metrics for {len(keywords)} keywords")

    results = []
    for keyword in keywords:
        metrics = provider.estimate(keyword)
        results.append(SearchResult(
            keyword=keyword,
            search_volume=metrics.search_volume,
            competition_level=metrics.competition_level,
            related_keywords=generate_related_keywords(keyword) if include_related else None,
            trending=False
        ))

    return results


def search_trending_keywords(domain: Optional[str] = None) -> List[SearchResult]:
    """Trending keywords for a domain; no trend source is wired in yet"""
    logger.debug(f"No trend source configured for domain: {domain}")
    return []

