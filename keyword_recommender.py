"""
Keyword recommendation: expands a query into candidates, scores them and
manages the saved recommendations of the current user.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from config import AutobotConfig, config as default_config
from database import DatabaseManager
from errors import InvalidArgument
from identity import IdentityProvider
from keyword_scoring import calculate_keyword_scores, filter_recommended_keywords
from keyword_search import (
    dedupe, extract_keywords_from_query, generate_longtail_variants, search_trending_keywords
)
from metrics_provider import MetricsProvider
from models import (
    BlogAnalysis, Feedback, KeywordScore, KeywordType, Recommendation, RecommendedKeyword
)

# Types kept when longtail keywords are prioritized
LONGTAIL_FRIENDLY_TYPES = (KeywordType.LONGTAIL, KeywordType.SMALL, KeywordType.MEDIUM)

TRENDING_MAX_RESULTS = 10


@dataclass
class RecommendationOptions:
    min_score: float = 50.0
    max_results: int = 20
    prioritize_longtail: bool = True
    blog_analysis: Optional[BlogAnalysis] = None
    domain: Optional[str] = None


class KeywordRecommender:
    """Builds keyword recommendations and persists them per user"""

    def __init__(self, metrics_provider: MetricsProvider, store: DatabaseManager = None,
                 identity: IdentityProvider = None, config: AutobotConfig = None,
                 logger: logging.Logger = None):
        self.metrics_provider = metrics_provider
        self.store = store
        self.identity = identity or IdentityProvider()
        self.config = config or default_config
        self.logger = logger or logging.getLogger(__name__)

    def default_options(self) -> RecommendationOptions:
        return RecommendationOptions(
            min_score=self.config.min_score,
            max_results=self.config.max_results,
            prioritize_longtail=self.config.prioritize_longtail
        )

    def recommend(self, query: str, options: RecommendationOptions = None) -> List[RecommendedKeyword]:
        """Generate scored keyword recommendations for a free-text query.

        The query is split on commas and line breaks. With
        ``prioritize_longtail`` each keyword also gets its longtail variants
        and large keywords are dropped. Results are sorted by final score
        (ties keep candidate order) and nothing is persisted.
        """
        options = options or self.default_options()
        if options.max_results < 1:
            raise InvalidArgument("max_results must be at least 1", {"max_results": options.max_results})

        candidates = extract_keywords_from_query(query)
        if options.prioritize_longtail:
            candidates = self._with_longtail_variants(candidates)

        if not candidates:
            self.logger.info("No keyword candidates in query")
            return []

        keyword_types = LONGTAIL_FRIENDLY_TYPES if options.prioritize_longtail else None
        return self._recommend_candidates(candidates, options, keyword_types)

    def recommend_longtail(self, base_keywords: Iterable[str],
                           options: RecommendationOptions = None) -> List[RecommendedKeyword]:
        """Recommend only longtail variants of the given base keywords"""
        options = options or self.default_options()
        if options.max_results < 1:
            raise InvalidArgument("max_results must be at least 1", {"max_results": options.max_results})

        base_keywords = list(base_keywords)
        if not all(isinstance(keyword, str) for keyword in base_keywords):
            raise InvalidArgument("Base keywords must be strings", {"keywords": base_keywords})

        bases = dedupe([keyword.strip() for keyword in base_keywords if keyword.strip()])
        candidates = dedupe([
            variant
            for base in bases
            for variant in generate_longtail_variants(base, self.config.longtail_suffixes)
        ])
        if not candidates:
            return []

        return self._recommend_candidates(candidates, options, (KeywordType.LONGTAIL,))

    def recommend_trending(self, domain: Optional[str] = None,
                           options: RecommendationOptions = None) -> List[RecommendedKeyword]:
        """Recommend keywords trending for a domain, falling back to a domain query"""
        options = options or self.default_options()
        trending = search_trending_keywords(domain)
        query = ",".join(result.keyword for result in trending) or domain or "trending"

        capped = RecommendationOptions(
            min_score=options.min_score,
            max_results=min(options.max_results, TRENDING_MAX_RESULTS),
            prioritize_longtail=options.prioritize_longtail,
            blog_analysis=options.blog_analysis,
            domain=domain
        )
        return self.recommend(query, capped)

    def _with_longtail_variants(self, candidates: List[str]) -> List[str]:
        expanded = list(candidates)
        for keyword in candidates:
            expanded.extend(generate_longtail_variants(keyword, self.config.longtail_suffixes))
        return dedupe(expanded)

    def _recommend_candidates(self, candidates: List[str], options: RecommendationOptions,
                              keyword_types) -> List[RecommendedKeyword]:
        metrics_map = {keyword: self.metrics_provider.estimate(keyword) for keyword in candidates}
        scores = calculate_keyword_scores(candidates, metrics_map, options.blog_analysis)
        filtered = filter_recommended_keywords(
            scores,
            min_score=options.min_score,
            keyword_types=keyword_types
        )

        stamp = datetime.now().isoformat()
        recommendations = [
            self._to_recommended(score, stamp) for score in filtered[:options.max_results]
        ]

        self.logger.info(
            f"Recommended {len(recommendations)} of {len(candidates)} candidate keywords"
        )
        return recommendations

    @staticmethod
    def _to_recommended(score: KeywordScore, stamp: str) -> RecommendedKeyword:
        return RecommendedKeyword(
            keyword=score.keyword,
            metrics=score.metrics,
            final_score=score.final_score,
            search_volume_score=score.search_volume_score,
            competition_score=score.competition_score,
            blog_fit_score=score.blog_fit_score,
            recommendation=score.recommendation,
            collected_at=stamp,
            recommended_at=stamp,
            used=False
        )

    # Persistence

    def _require_store(self) -> DatabaseManager:
        if self.store is None:
            raise RuntimeError("KeywordRecommender was created without a store")
        return self.store

    def save_recommendations(self, recommendations: List[RecommendedKeyword]) -> List[RecommendedKeyword]:
        """Persist recommendations for the current user, returning them with ids"""
        user_id = self.identity.require_user_id()
        return self._require_store().upsert_recommendations(user_id, recommendations)

    def get_recommendations(self, used: Optional[bool] = None,
                            recommendation: Optional[Recommendation] = None,
                            limit: int = 50) -> List[RecommendedKeyword]:
        """Saved recommendations of the current user, best score first"""
        user_id = self.identity.require_user_id()
        if limit < 1:
            raise InvalidArgument("limit must be at least 1", {"limit": limit})
        return self._require_store().get_recommendations(user_id, used, recommendation, limit)

    def mark_as_used(self, keyword_id: int) -> RecommendedKeyword:
        """Mark a saved recommendation as used; repeated calls change nothing"""
        user_id = self.identity.require_user_id()
        return self._require_store().mark_keyword_used(user_id, keyword_id, datetime.now().isoformat())

    def record_feedback(self, keyword_id: int, feedback: Optional[Feedback]) -> RecommendedKeyword:
        """Attach positive/negative feedback to a saved recommendation"""
        user_id = self.identity.require_user_id()
        return self._require_store().set_feedback(user_id, keyword_id, feedback)
