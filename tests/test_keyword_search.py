"""
Tests for keyword candidate expansion and search
"""
import pytest

from conftest import FixedMetricsProvider
from errors import InvalidArgument
from keyword_search import (
    LONGTAIL_SUFFIXES, dedupe, extract_keywords_from_query, generate_longtail_variants,
    generate_related_keywords, search_keywords, search_trending_keywords
)


class TestExtractKeywordsFromQuery:
    """Tests for query splitting"""

    def test_splits_on_commas_and_line_breaks(self):
        query = "파이썬, 자바스크립트\n리액트 훅\r\n도커"
        assert extract_keywords_from_query(query) == ["파이썬", "자바스크립트", "리액트 훅", "도커"]

    def test_drops_empty_parts_and_duplicates(self):
        assert extract_keywords_from_query(" 파이썬 ,, 파이썬 ,\n\n") == ["파이썬"]

    def test_collapses_inner_whitespace(self):
        assert extract_keywords_from_query("파이썬   강좌, 파이썬 강좌") == ["파이썬 강좌"]

    def test_empty_query(self):
        assert extract_keywords_from_query("") == []
        assert extract_keywords_from_query(" , \n ") == []

    def test_non_string_query(self):
        with pytest.raises(InvalidArgument):
            extract_keywords_from_query(None)


class TestCandidateGeneration:
    """Tests for longtail and related keyword generation"""

    def test_dedupe_keeps_first_occurrence(self):
        assert dedupe(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_longtail_variants(self):
        variants = generate_longtail_variants("파이썬")
        assert len(variants) == len(LONGTAIL_SUFFIXES)
        assert variants[0] == "파이썬 이란?"
        assert "파이썬 설치 방법" in variants

    def test_longtail_variants_custom_suffixes(self):
        assert generate_longtail_variants("도커", ["기초"]) == ["도커 기초"]
        assert generate_longtail_variants("도커", []) == []

    def test_related_keywords_swap_two_word_keywords(self):
        related = generate_related_keywords("파이썬 강좌", limit=10)
        assert related[:5] == generate_longtail_variants("파이썬 강좌", LONGTAIL_SUFFIXES[:5])
        assert related[-1] == "강좌 파이썬"

    def test_related_keywords_limit(self):
        assert len(generate_related_keywords("파이썬 강좌", limit=3)) == 3


class TestSearchKeywords:
    """Tests for keyword search"""

    def test_attaches_metrics(self):
        provider = FixedMetricsProvider({"파이썬": (20000, 80.0)})
        results = search_keywords("파이썬, 도커", provider)

        assert [r.keyword for r in results] == ["파이썬", "도커"]
        assert results[0].search_volume == 20000
        assert results[0].competition_level == 80.0
        assert results[0].related_keywords
        assert results[0].trending is False

    def test_max_results(self):
        provider = FixedMetricsProvider()
        results = search_keywords("a, b, c, d", provider, max_results=2, include_related=False)

        assert [r.keyword for r in results] == ["a", "b"]
        assert results[0].related_keywords is None
        assert provider.calls == ["a", "b"]

    def test_invalid_max_results(self):
        with pytest.raises(InvalidArgument):
            search_keywords("파이썬", FixedMetricsProvider(), max_results=0)

    def test_trending_has_no_source(self):
        assert search_trending_keywords("ai") == []
