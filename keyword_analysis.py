"""
Keyword extraction and frequency analysis over blog documents
"""
import re
import logging
from collections import Counter
from typing import Dict, List, Optional

from models import DocumentKeywords, KeywordAnalysisResult, KeywordFrequency
from utils import truncate

logger = logging.getLogger(__name__)

# Title patterns that perform well per blog domain; "~" marks the keyword slot
DOMAIN_KEYWORD_PATTERNS: Dict[str, List[str]] = {
    "ai": [
        "~이란?",
        "~란?",
        "~란 무엇인가",
        "~사용법",
        "~하는 방법",
        "~완벽 가이드",
        "~초보자 가이드",
        "~설치 방법",
        "~활용법",
        "~비교",
    ],
    "tech": [
        "~이란?",
        "~사용법",
        "~설치 방법",
        "~완벽 가이드",
        "~비교",
        "~장단점",
        "~추천",
    ],
    "default": [
        "~이란?",
        "~사용법",
        "~하는 방법",
        "~완벽 가이드",
    ],
}

STOP_WORDS = frozenset([
    "그리고", "그런데", "하지만", "그러나", "또한", "또", "또는",
    "이것", "저것", "그것", "이런", "저런", "그런",
    "있다", "없다", "되다", "하다", "이다",
    "의", "을", "를", "에", "에서", "로", "으로",
    "가", "이", "와", "과", "도", "만", "까지",
])

MAX_TITLE_LENGTH = 200

_NON_WORD = re.compile(r"[^\w\s]")
_TITLE_SPLIT = re.compile(r"[\s\-_]+")


def _tokenize(text: str) -> List[str]:
    return [
        word for word in _NON_WORD.sub(" ", text or "").split()
        if len(word) >= 2 and word not in STOP_WORDS
    ]


def extract_keywords(text: str) -> List[str]:
    """Unique keyword tokens of two or more characters, stop words removed"""
    return list(dict.fromkeys(_tokenize(text)))


def count_keywords(document_id: str, text: str) -> DocumentKeywords:
    """Extract keywords from one document along with their occurrence counts"""
    counts = Counter(_tokenize(text))
    return DocumentKeywords(
        document_id=document_id,
        keywords=list(counts),
        keyword_counts=dict(counts)
    )


def aggregate_document_keywords(documents: List[DocumentKeywords]) -> List[KeywordFrequency]:
    """Total each keyword's frequency across documents, most frequent first"""
    frequencies: Dict[str, int] = {}
    document_ids: Dict[str, List[str]] = {}

    for doc in documents:
        for keyword, count in doc.keyword_counts.items():
            frequencies[keyword] = frequencies.get(keyword, 0) + count
            ids = document_ids.setdefault(keyword, [])
            if doc.document_id not in ids:
                ids.append(doc.document_id)

    keywords = [
        KeywordFrequency(
            keyword=keyword,
            frequency=frequency,
            document_count=len(document_ids[keyword]),
            documents=document_ids[keyword]
        )
        for keyword, frequency in frequencies.items()
    ]
    return sorted(keywords, key=lambda kw: kw.frequency, reverse=True)


def analyze_keywords(documents: List[DocumentKeywords], top_n: int = 20, min_frequency: int = 2,
                     min_document_count: int = 1, domain: str = "default") -> KeywordAnalysisResult:
    """Frequency analysis with top keywords and keywords matching the domain's title patterns"""
    all_keywords = aggregate_document_keywords(documents)

    filtered = [
        kw for kw in all_keywords
        if kw.frequency >= min_frequency and kw.document_count >= min_document_count
    ]

    patterns = DOMAIN_KEYWORD_PATTERNS.get(domain, DOMAIN_KEYWORD_PATTERNS["default"])
    fragments = [pattern.replace("~", "") for pattern in patterns]
    domain_keywords = [
        kw for kw in filtered
        if any(fragment in kw.keyword for fragment in fragments)
    ]

    logger.info(f"Analyzed {len(documents)} documents: {len(filtered)} keywords kept")

    return KeywordAnalysisResult(
        keywords=filtered,
        top_keywords=filtered[:top_n],
        domain_keywords=domain_keywords,
        total_documents=len(documents),
        suggested_title=generate_title_from_keywords([kw.keyword for kw in filtered[:top_n]])
    )


def generate_title_from_keywords(keywords: List[str], pattern: Optional[str] = None) -> str:
    """Build a title that leads with the most important keywords"""
    if not keywords:
        return ""

    important = keywords[:3]

    if pattern:
        return pattern.replace("~", important[0])

    title_parts = []
    for keyword in important:
        title_parts.extend(part for part in _TITLE_SPLIT.split(keyword) if part)

    # Remaining keywords contribute at most two words each
    for keyword in keywords[len(important):]:
        title_parts.extend([part for part in _TITLE_SPLIT.split(keyword) if part][:2])

    return truncate(" ".join(title_parts), MAX_TITLE_LENGTH)


def generate_h2_with_keyword(keyword: str) -> str:
    return f"<h2>{keyword}</h2>"
