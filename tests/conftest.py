"""
Pytest configuration and shared fixtures
"""
import pytest
import os
import tempfile
from datetime import datetime
from typing import Dict, Optional, Tuple

# Add project root to path
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from config import AutobotConfig
from database import DatabaseManager
from identity import StaticIdentityProvider
from keyword_recommender import KeywordRecommender
from metrics_provider import MetricsProvider
from models import KeywordMetrics, KeywordType, Recommendation, RecommendedKeyword


class FixedMetricsProvider(MetricsProvider):
    """Metrics provider answering from a fixed table.

    Keywords missing from the table get the default metrics.
    """

    def __init__(self, table: Optional[Dict[str, Tuple[Optional[int], Optional[float]]]] = None,
                 default: Tuple[Optional[int], Optional[float]] = (500, 10.0)):
        self.table = table or {}
        self.default = default
        self.calls = []

    def estimate(self, keyword: str) -> KeywordMetrics:
        self.calls.append(keyword)
        search_volume, competition_level = self.table.get(keyword, self.default)
        return KeywordMetrics(keyword=keyword, search_volume=search_volume,
                              competition_level=competition_level)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        db_path = f.name

    yield db_path

    # Cleanup
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def test_config(temp_db):
    """Test configuration with temporary database"""
    config = AutobotConfig()
    config.db_path = temp_db
    config.metrics_seed = 42
    config.log_dir = ""
    return config


@pytest.fixture
def db_manager(temp_db):
    """Database manager with temporary database"""
    return DatabaseManager(temp_db)


@pytest.fixture
def metrics_provider():
    return FixedMetricsProvider()


@pytest.fixture
def identity():
    return StaticIdentityProvider("user-1")


@pytest.fixture
def recommender(metrics_provider, db_manager, identity, test_config):
    """Recommender signed in as user-1 on the temporary database"""
    return KeywordRecommender(metrics_provider, store=db_manager, identity=identity, config=test_config)


@pytest.fixture
def sample_recommendation():
    """Sample recommended keyword for testing"""
    stamp = datetime.now().isoformat()
    return RecommendedKeyword(
        keyword="파이썬 설치 방법",
        metrics=KeywordMetrics(
            keyword="파이썬 설치 방법",
            search_volume=500,
            competition_level=10.0,
            keyword_type=KeywordType.LONGTAIL
        ),
        final_score=75.8,
        search_volume_score=17.5,
        competition_score=38.3,
        blog_fit_score=20.0,
        recommendation=Recommendation.HIGH,
        collected_at=stamp,
        recommended_at=stamp
    )


def make_recommendation(keyword: str, final_score: float,
                        recommended_at: Optional[str] = None) -> RecommendedKeyword:
    """Recommended keyword with the given score and consistent tier"""
    if final_score >= 70:
        tier = Recommendation.HIGH
    elif final_score >= 50:
        tier = Recommendation.MEDIUM
    else:
        tier = Recommendation.LOW

    stamp = recommended_at or datetime.now().isoformat()
    return RecommendedKeyword(
        keyword=keyword,
        metrics=KeywordMetrics(keyword=keyword, search_volume=1000, competition_level=40.0,
                               keyword_type=KeywordType.MEDIUM),
        final_score=final_score,
        search_volume_score=25.5,
        competition_score=30.0,
        blog_fit_score=15.0,
        recommendation=tier,
        collected_at=stamp,
        recommended_at=stamp
    )


@pytest.fixture
def sample_html():
    """Sample blog post HTML"""
    return """
    <h2>설치 준비</h2>
    <p>파이썬은 배우기 쉬운 프로그래밍 언어입니다. 많은 개발자가 사용합니다.</p>
    <h2>설치 과정</h2>
    <p>공식 사이트에서 설치 파일을 내려받습니다.</p>
    <img src="install.png" alt="설치 화면">
    <img src="done.png">
    """
