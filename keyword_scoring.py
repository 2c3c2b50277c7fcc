"""
Keyword scoring: type classification, sub-scores and recommendation filtering

A keyword's final score (0-100) is the sum of three bands:

    search volume fit      0-30  peaks in the 1,000-10,000 monthly searches range
    competition            0-40  lower competition scores higher
    blog fit               0-30  domain authority, recent performance, longtail bonus

Scoring never raises on noisy numbers; out-of-range inputs are clamped.
"""
import logging
from typing import Dict, Iterable, List, Optional

from models import (
    BlogAnalysis, KeywordMetrics, KeywordScore, KeywordType, Recommendation, count_words
)
from utils import clamp, round_score

logger = logging.getLogger(__name__)

SEARCH_VOLUME_BAND = 30.0
COMPETITION_BAND = 40.0
BLOG_FIT_BAND = 30.0

HIGH_THRESHOLD = 70.0
MEDIUM_THRESHOLD = 50.0

# Competition assumed per keyword type when no competition level is known
COMPETITION_BY_TYPE = {
    KeywordType.LONGTAIL: 35.0,
    KeywordType.SMALL: 30.0,
    KeywordType.MEDIUM: 20.0,
    KeywordType.LARGE: 15.0,
}


def classify_keyword_type(keyword: str, search_volume: Optional[int] = None) -> KeywordType:
    """Classify a keyword as large, medium, small or longtail"""
    word_count = count_words(keyword)

    if word_count >= 3:
        return KeywordType.LONGTAIL

    if search_volume is not None:
        if search_volume >= 10000:
            return KeywordType.LARGE
        if search_volume >= 1000:
            return KeywordType.MEDIUM
        return KeywordType.SMALL

    if word_count == 1:
        return KeywordType.LARGE
    if word_count == 2:
        return KeywordType.MEDIUM
    # Empty keyword
    return KeywordType.SMALL


def calculate_search_volume_score(search_volume: Optional[int] = None) -> float:
    """Search volume fit score (0-30)"""
    if search_volume is None:
        return 10.0

    volume = max(0, search_volume)

    if volume >= 10000:
        # Very popular keywords carry heavy competition
        score = max(15.0, 30 - volume / 10000 * 5)
    elif volume >= 1000:
        score = 25 + volume / 1000 * 0.5
    elif volume >= 100:
        score = 15 + volume / 100 * 0.5
    else:
        score = max(5.0, volume / 10)

    return clamp(score, 0.0, SEARCH_VOLUME_BAND)


def calculate_competition_score(competition_level: Optional[float] = None,
                                keyword_type: Optional[KeywordType] = None) -> float:
    """Competition score (0-40); lower competition scores higher"""
    if competition_level is None:
        return COMPETITION_BY_TYPE.get(keyword_type, COMPETITION_BY_TYPE[KeywordType.LARGE])

    level = clamp(competition_level, 0.0, 100.0)

    if level <= 30:
        score = 35 + (30 - level) / 30 * 5
    elif level <= 60:
        score = 20 + (60 - level) / 30 * 15
    else:
        score = max(5.0, 20 - (level - 60) / 40 * 15)

    return clamp(score, 0.0, COMPETITION_BAND)


def calculate_blog_fit_score(keyword: str, blog_analysis: Optional[BlogAnalysis] = None) -> float:
    """Blog fit score (0-30)"""
    score = 15.0

    if blog_analysis is not None:
        if blog_analysis.domain_authority is not None:
            score += clamp(blog_analysis.domain_authority, 0.0, 100.0) / 100 * 10
        if blog_analysis.recent_post_performance is not None:
            score += clamp(blog_analysis.recent_post_performance, 0.0, 100.0) / 100 * 10

    if count_words(keyword) >= 3:
        score += 5  # longtail bonus

    return min(BLOG_FIT_BAND, score)


def recommendation_for_score(final_score: float) -> Recommendation:
    """Map a final score onto its recommendation tier"""
    if final_score >= HIGH_THRESHOLD:
        return Recommendation.HIGH
    if final_score >= MEDIUM_THRESHOLD:
        return Recommendation.MEDIUM
    return Recommendation.LOW


def calculate_keyword_score(keyword: str, metrics: KeywordMetrics,
                            blog_analysis: Optional[BlogAnalysis] = None) -> KeywordScore:
    """Score a single keyword from its metrics"""
    keyword_type = metrics.keyword_type or classify_keyword_type(keyword, metrics.search_volume)

    search_volume_score = calculate_search_volume_score(metrics.search_volume)
    competition_score = calculate_competition_score(metrics.competition_level, keyword_type)
    blog_fit_score = calculate_blog_fit_score(keyword, blog_analysis)

    final_score = round_score(search_volume_score + competition_score + blog_fit_score)

    scored_metrics = KeywordMetrics(
        keyword=metrics.keyword or keyword,
        search_volume=metrics.search_volume,
        competition_level=metrics.competition_level,
        keyword_type=keyword_type
    )

    return KeywordScore(
        keyword=keyword,
        metrics=scored_metrics,
        final_score=final_score,
        search_volume_score=round_score(search_volume_score),
        competition_score=round_score(competition_score),
        blog_fit_score=round_score(blog_fit_score),
        recommendation=recommendation_for_score(final_score)
    )


def calculate_keyword_scores(keywords: Iterable[str], metrics_map: Dict[str, KeywordMetrics],
                             blog_analysis: Optional[BlogAnalysis] = None) -> List[KeywordScore]:
    """Score several keywords and sort them by final score, best first"""
    scores = [
        calculate_keyword_score(keyword, metrics_map.get(keyword) or KeywordMetrics(keyword=keyword),
                                blog_analysis)
        for keyword in keywords
    ]
    # sorted() is stable, so ties keep candidate order
    return sorted(scores, key=lambda score: score.final_score, reverse=True)


def filter_recommended_keywords(scores: Iterable[KeywordScore], min_score: float = MEDIUM_THRESHOLD,
                                recommendation: Optional[Recommendation] = None,
                                keyword_types: Optional[Iterable[KeywordType]] = None) -> List[KeywordScore]:
    """Keep scores passing the minimum score, tier and keyword type predicates"""
    allowed_types = set(keyword_types) if keyword_types is not None else None

    filtered = []
    for score in scores:
        if score.final_score < min_score:
            continue
        if recommendation is not None and score.recommendation != recommendation:
            continue
        if allowed_types is not None and score.metrics.keyword_type not in allowed_types:
            continue
        filtered.append(score)

    logger.debug(f"Filtered keywords down to {len(filtered)}")
    return filtered
