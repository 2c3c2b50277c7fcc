"""
Tests for keyword classification and scoring
"""
import pytest

from keyword_scoring import (
    calculate_blog_fit_score, calculate_competition_score, calculate_keyword_score,
    calculate_keyword_scores, calculate_search_volume_score, classify_keyword_type,
    filter_recommended_keywords, recommendation_for_score
)
from models import BlogAnalysis, KeywordMetrics, KeywordType, Recommendation


class TestClassifyKeywordType:
    """Tests for keyword type classification"""

    def test_three_or_more_words_are_longtail(self):
        assert classify_keyword_type("파이썬 설치 방법") == KeywordType.LONGTAIL
        # Word count wins over volume
        assert classify_keyword_type("a b c d", 50000) == KeywordType.LONGTAIL

    def test_volume_thresholds(self):
        assert classify_keyword_type("파이썬", 10000) == KeywordType.LARGE
        assert classify_keyword_type("파이썬", 9999) == KeywordType.MEDIUM
        assert classify_keyword_type("파이썬 강좌", 1000) == KeywordType.MEDIUM
        assert classify_keyword_type("파이썬 강좌", 999) == KeywordType.SMALL
        assert classify_keyword_type("파이썬", 0) == KeywordType.SMALL

    def test_word_count_fallback_without_volume(self):
        assert classify_keyword_type("파이썬") == KeywordType.LARGE
        assert classify_keyword_type("파이썬 강좌") == KeywordType.MEDIUM
        assert classify_keyword_type("") == KeywordType.SMALL

    def test_whitespace_runs_count_as_one_separator(self):
        assert classify_keyword_type("  파이썬    강좌  ") == KeywordType.MEDIUM


class TestSearchVolumeScore:
    """Tests for the search volume band"""

    def test_missing_volume_is_flat(self):
        assert calculate_search_volume_score(None) == 10

    def test_zero_volume_hits_the_floor(self):
        assert calculate_search_volume_score(0) == 5

    @pytest.mark.parametrize("volume,expected", [
        (50, 5.0),
        (99, 9.9),
        (100, 15.5),
        (500, 17.5),
        (1000, 25.5),
        (5000, 27.5),
        (10000, 25.0),
        (30000, 15.0),
        (1000000, 15.0),
    ])
    def test_bands(self, volume, expected):
        assert calculate_search_volume_score(volume) == pytest.approx(expected)

    def test_negative_volume_treated_as_zero(self):
        assert calculate_search_volume_score(-100) == 5

    def test_always_within_band(self):
        for volume in [0, 1, 99, 100, 999, 1000, 9999, 10000, 10 ** 9]:
            assert 0 <= calculate_search_volume_score(volume) <= 30


class TestCompetitionScore:
    """Tests for the competition band"""

    @pytest.mark.parametrize("keyword_type,expected", [
        (KeywordType.LONGTAIL, 35),
        (KeywordType.SMALL, 30),
        (KeywordType.MEDIUM, 20),
        (KeywordType.LARGE, 15),
        (None, 15),
    ])
    def test_missing_level_uses_type_default(self, keyword_type, expected):
        assert calculate_competition_score(None, keyword_type) == expected

    @pytest.mark.parametrize("level,expected", [
        (0, 40.0),
        (30, 35.0),
        (45, 27.5),
        (60, 20.0),
        (80, 12.5),
        (100, 5.0),
    ])
    def test_bands(self, level, expected):
        assert calculate_competition_score(level) == pytest.approx(expected)

    def test_out_of_range_levels_are_clamped(self):
        assert calculate_competition_score(-20) == pytest.approx(40.0)
        assert calculate_competition_score(250) == pytest.approx(5.0)

    def test_lower_competition_never_scores_lower(self):
        scores = [calculate_competition_score(level) for level in range(0, 101)]
        assert scores == sorted(scores, reverse=True)


class TestBlogFitScore:
    """Tests for the blog fit band"""

    def test_baseline(self):
        assert calculate_blog_fit_score("파이썬") == 15

    def test_longtail_bonus(self):
        assert calculate_blog_fit_score("파이썬 설치 방법") == 20

    def test_blog_analysis_contributions(self):
        analysis = BlogAnalysis(domain_authority=50, recent_post_performance=30)
        assert calculate_blog_fit_score("파이썬", analysis) == pytest.approx(23.0)

    def test_capped_at_band(self):
        analysis = BlogAnalysis(domain_authority=100, recent_post_performance=100)
        assert calculate_blog_fit_score("파이썬 설치 방법", analysis) == 30

    def test_out_of_range_analysis_is_clamped(self):
        analysis = BlogAnalysis(domain_authority=500, recent_post_performance=-50)
        assert calculate_blog_fit_score("파이썬", analysis) == pytest.approx(25.0)


class TestRecommendationTier:
    """Tests for tier thresholds"""

    @pytest.mark.parametrize("score,tier", [
        (100, Recommendation.HIGH),
        (70, Recommendation.HIGH),
        (69.9, Recommendation.MEDIUM),
        (50, Recommendation.MEDIUM),
        (49.9, Recommendation.LOW),
        (0, Recommendation.LOW),
    ])
    def test_thresholds(self, score, tier):
        assert recommendation_for_score(score) == tier


class TestCalculateKeywordScore:
    """Tests for full keyword scoring"""

    def test_worked_example(self):
        metrics = KeywordMetrics(keyword="파이썬 강좌", search_volume=5000, competition_level=20)
        score = calculate_keyword_score("파이썬 강좌", metrics)

        assert score.search_volume_score == 27.5
        assert score.competition_score == 36.7
        assert score.blog_fit_score == 15.0
        assert score.final_score == 79.2
        assert score.recommendation == Recommendation.HIGH
        assert score.metrics.keyword_type == KeywordType.MEDIUM

    def test_missing_metrics(self):
        score = calculate_keyword_score("파이썬", KeywordMetrics(keyword="파이썬"))

        assert score.search_volume_score == 10
        assert score.competition_score == 15
        assert score.final_score == 40.0
        assert score.recommendation == Recommendation.LOW
        assert score.metrics.keyword_type == KeywordType.LARGE

    def test_explicit_keyword_type_is_kept(self):
        metrics = KeywordMetrics(keyword="파이썬", keyword_type=KeywordType.SMALL)
        score = calculate_keyword_score("파이썬", metrics)

        assert score.metrics.keyword_type == KeywordType.SMALL
        assert score.competition_score == 30

    def test_input_metrics_are_not_mutated(self):
        metrics = KeywordMetrics(keyword="파이썬 강좌", search_volume=5000, competition_level=20)
        calculate_keyword_score("파이썬 강좌", metrics)
        assert metrics.keyword_type is None

    def test_tier_matches_reported_score(self):
        for volume in range(0, 20000, 370):
            for level in range(0, 101, 7):
                metrics = KeywordMetrics(keyword="파이썬 강좌", search_volume=volume,
                                         competition_level=level)
                score = calculate_keyword_score("파이썬 강좌", metrics)
                assert 0 <= score.final_score <= 100
                assert score.recommendation == recommendation_for_score(score.final_score)

    def test_scores_are_rounded_to_one_decimal(self):
        metrics = KeywordMetrics(keyword="파이썬 강좌", search_volume=1234, competition_level=33)
        score = calculate_keyword_score("파이썬 강좌", metrics)

        for value in (score.final_score, score.search_volume_score,
                      score.competition_score, score.blog_fit_score):
            assert round(value, 1) == value

    @pytest.mark.parametrize("blog_analysis", [
        None,
        BlogAnalysis(domain_authority=80),
        BlogAnalysis(recent_post_performance=65),
        BlogAnalysis(domain_authority=100, recent_post_performance=100),
    ])
    def test_sub_scores_add_up_to_final_score(self, blog_analysis):
        for keyword in ("파이썬", "파이썬 강좌", "파이썬 설치 방법"):
            for volume in range(0, 70001, 1750):
                for level in range(0, 101, 5):
                    metrics = KeywordMetrics(keyword=keyword, search_volume=volume,
                                             competition_level=level)
                    score = calculate_keyword_score(keyword, metrics, blog_analysis)
                    total = score.search_volume_score + score.competition_score + score.blog_fit_score
                    assert abs(total - score.final_score) <= 0.1 + 1e-9


class TestCalculateKeywordScores:
    """Tests for batch scoring"""

    def test_sorted_best_first(self):
        metrics_map = {
            "파이썬": KeywordMetrics(keyword="파이썬", search_volume=50000, competition_level=90),
            "파이썬 강좌": KeywordMetrics(keyword="파이썬 강좌", search_volume=5000, competition_level=20),
            "파이썬 설치 방법": KeywordMetrics(keyword="파이썬 설치 방법", search_volume=300,
                                         competition_level=10),
        }
        scores = calculate_keyword_scores(list(metrics_map), metrics_map)

        finals = [score.final_score for score in scores]
        assert finals == sorted(finals, reverse=True)
        assert scores[-1].keyword == "파이썬"

    def test_ties_keep_input_order(self):
        keywords = ["alpha beta", "gamma delta", "epsilon zeta"]
        metrics_map = {
            keyword: KeywordMetrics(keyword=keyword, search_volume=5000, competition_level=20)
            for keyword in keywords
        }
        scores = calculate_keyword_scores(keywords, metrics_map)

        assert [score.keyword for score in scores] == keywords

    def test_missing_metrics_entry(self):
        scores = calculate_keyword_scores(["파이썬"], {})
        assert scores[0].final_score == 40.0


class TestFilterRecommendedKeywords:
    """Tests for recommendation filtering"""

    @pytest.fixture
    def scores(self):
        metrics_map = {
            "파이썬": KeywordMetrics(keyword="파이썬", search_volume=50000, competition_level=90),
            "파이썬 강좌": KeywordMetrics(keyword="파이썬 강좌", search_volume=5000, competition_level=20),
            "파이썬 설치 방법": KeywordMetrics(keyword="파이썬 설치 방법", search_volume=300,
                                         competition_level=50),
        }
        return calculate_keyword_scores(list(metrics_map), metrics_map)

    def test_min_score(self, scores):
        filtered = filter_recommended_keywords(scores, min_score=50)
        assert all(score.final_score >= 50 for score in filtered)
        assert "파이썬" not in [score.keyword for score in filtered]

    def test_recommendation_tier(self, scores):
        filtered = filter_recommended_keywords(scores, min_score=0, recommendation=Recommendation.HIGH)
        assert [score.keyword for score in filtered] == ["파이썬 강좌"]

    def test_keyword_types(self, scores):
        filtered = filter_recommended_keywords(scores, min_score=0, keyword_types=[KeywordType.LONGTAIL])
        assert [score.keyword for score in filtered] == ["파이썬 설치 방법"]

    def test_preserves_order(self, scores):
        filtered = filter_recommended_keywords(scores, min_score=0)
        assert filtered == scores
