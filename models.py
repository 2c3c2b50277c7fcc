"""
Data models for the Autobot keyword engine
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Optional


class KeywordType(str, Enum):
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"
    LONGTAIL = "longtail"


class Recommendation(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Feedback(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


def count_words(text: str) -> int:
    """Number of whitespace-delimited tokens; 0 for an empty string"""
    return len(text.split())


@dataclass
class KeywordMetrics:
    """Per-keyword facts used for scoring"""
    keyword: str
    search_volume: Optional[int] = None
    competition_level: Optional[float] = None
    keyword_type: Optional[KeywordType] = None
    word_count: int = field(init=False)

    def __post_init__(self):
        self.word_count = count_words(self.keyword)


@dataclass
class KeywordScore:
    """Scored keyword with its three sub-scores and recommendation tier"""
    keyword: str
    metrics: KeywordMetrics
    final_score: float
    search_volume_score: float
    competition_score: float
    blog_fit_score: float
    recommendation: Recommendation


@dataclass
class BlogAnalysis:
    """Caller-supplied context about the target blog"""
    domain_authority: Optional[float] = None
    average_post_length: Optional[int] = None
    backlink_count: Optional[int] = None
    recent_post_performance: Optional[float] = None


@dataclass
class RecommendedKeyword(KeywordScore):
    """A scored keyword with recommendation lifecycle fields"""
    id: Optional[int] = None
    user_id: Optional[str] = None
    collected_at: Optional[str] = None
    recommended_at: Optional[str] = None
    used: bool = False
    used_at: Optional[str] = None
    feedback: Optional[Feedback] = None


@dataclass
class SearchResult:
    """Data structure for keyword search results"""
    keyword: str
    search_volume: Optional[int] = None
    competition_level: Optional[float] = None
    related_keywords: Optional[List[str]] = None
    trending: bool = False


@dataclass
class KeywordFrequency:
    """Aggregated keyword occurrences across documents"""
    keyword: str
    frequency: int
    document_count: int
    documents: List[str]


@dataclass
class DocumentKeywords:
    """Keywords extracted from a single document"""
    document_id: str
    keywords: List[str]
    keyword_counts: Dict[str, int]


@dataclass
class KeywordAnalysisResult:
    """Data structure for keyword analysis results"""
    keywords: List[KeywordFrequency]
    top_keywords: List[KeywordFrequency]
    domain_keywords: List[KeywordFrequency]
    total_documents: int
    suggested_title: str = ""


@dataclass
class SEOOptimizationRequest:
    title: str
    content: str
    keywords: List[str]
    target_url: Optional[str] = None


@dataclass
class SEOOptimizationResult:
    """Data structure for SEO optimization results"""
    title: str
    meta_description: str
    h2_tags: List[str]
    keywords: List[str]
    image_alt_texts: List[str]
    internal_links: List[str]
    seo_score: int
    recommendations: List[str]


@dataclass
class BlogReconstructionRequest:
    original_content: str
    keywords: List[KeywordScore]
    target_length: int = 2000
    optimize_seo: bool = True
    include_images: bool = True


@dataclass
class ReconstructedBlog:
    """Data structure for a reconstructed blog post"""
    title: str
    content: str
    h2_tags: List[str]
    meta_description: str
    suggested_images: List[str]
    keywords: List[str]
    seo_score: int


@dataclass
class ScheduleConfig:
    """Daily recommendation schedule for one blog"""
    user_id: str
    blog_id: str
    publish_time: str = "09:00"
    keywords: List[str] = field(default_factory=list)
    enabled: bool = True
    timezone: str = "Asia/Seoul"
    domain: str = "default"
    auto_generate: bool = False
    next_run: Optional[str] = None
