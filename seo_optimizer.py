"""
On-page SEO optimization for blog posts
"""
import re
import logging
from typing import List, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup

from models import SEOOptimizationRequest, SEOOptimizationResult
from utils import truncate

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
META_MIN_LENGTH = 120
META_MAX_LENGTH = 160
MIN_CONTENT_LENGTH = 1000
MAX_H2_TAGS = 5


def _parse(content: str) -> BeautifulSoup:
    return BeautifulSoup(content or "", "html.parser")


def strip_html(content: str) -> str:
    """Text content of an HTML fragment"""
    return _parse(content).get_text()


def count_keyword_occurrences(text: str, keywords: List[str]) -> int:
    """Case-insensitive occurrences of all keywords in text"""
    return sum(
        len(re.findall(re.escape(keyword), text, flags=re.IGNORECASE))
        for keyword in keywords if keyword
    )


def keyword_density(text: str, keywords: List[str]) -> float:
    """Keyword occurrences per 100 characters of text"""
    if not text:
        return 0.0
    return count_keyword_occurrences(text, keywords) / len(text) * 100


def optimize_title(title: str, keywords: List[str]) -> str:
    """Lead the title with the main keyword and keep it within 30-60 characters"""
    optimized = title

    if keywords and keywords[0] not in optimized:
        optimized = f"{keywords[0]} {optimized}"

    if len(optimized) > TITLE_MAX_LENGTH:
        optimized = truncate(optimized, TITLE_MAX_LENGTH)
    elif len(optimized) < TITLE_MIN_LENGTH and len(keywords) > 1:
        remaining = TITLE_MIN_LENGTH - len(optimized)
        if remaining > len(keywords[1]):
            optimized += f" {keywords[1]}"

    return optimized


def generate_meta_description(content: str, keywords: List[str]) -> str:
    """Meta description from the opening text, mentioning the main keyword"""
    text = strip_html(content).strip()
    description = text[:150].strip()

    if keywords and keywords[0] not in description:
        description = f"{keywords[0]}에 대한 정보입니다. {description}"

    if len(description) > META_MAX_LENGTH:
        description = truncate(description, META_MAX_LENGTH)
    elif len(description) < META_MIN_LENGTH:
        description += text[150:150 + (META_MIN_LENGTH - len(description))]

    return description


def optimize_h2_tags(content: str, keywords: List[str]) -> List[str]:
    """Existing H2 tags with the main keyword worked into the first one"""
    existing = _parse(content).find_all("h2")
    h2_tags = []

    if existing:
        first = existing[0]
        if keywords and keywords[0] not in first.get_text():
            h2_tags.append(f"<h2>{keywords[0]}: {first.get_text()}</h2>")
        else:
            h2_tags.append(str(first))
    elif keywords:
        h2_tags.append(f"<h2>{keywords[0]}</h2>")

    h2_tags.extend(str(tag) for tag in existing[1:MAX_H2_TAGS])

    # Top up with keyword headings
    if len(h2_tags) < 3 and len(keywords) > 1:
        for keyword in keywords[1:4 - len(h2_tags)]:
            h2_tags.append(f"<h2>{keyword}</h2>")

    return h2_tags


def generate_image_alt_texts(content: str, keywords: List[str]) -> List[str]:
    """Alt text per image, generating one from the main keyword where missing"""
    main_keyword = keywords[0] if keywords else "이미지"
    alt_texts = []

    for img in _parse(content).find_all("img"):
        alt = (img.get("alt") or "").strip()
        alt_texts.append(alt or f"{main_keyword} 관련 이미지")

    return alt_texts


def suggest_internal_links(keywords: List[str], target_url: Optional[str] = None) -> List[str]:
    """Internal link targets for the top three keywords"""
    base = target_url.rstrip("/") if target_url else "/blog"
    return [f"{base}/{quote(keyword, safe='')}" for keyword in keywords[:3]]


def calculate_seo_score(title: str, content: str, h2_tags: List[str], keywords: List[str],
                        meta_description: str, image_alt_texts: List[str]) -> int:
    """SEO score (0-100) from five 20-point checks"""
    score = 0

    # Title length
    if TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        score += 20
    elif 20 <= len(title) <= 70:
        score += 15
    else:
        score += 10

    # H2 structure
    if len(h2_tags) >= 3:
        score += 20
    elif len(h2_tags) == 2:
        score += 15
    elif len(h2_tags) == 1:
        score += 10

    # Keyword density
    density = keyword_density(strip_html(content), keywords)
    if 1 <= density <= 3:
        score += 20
    elif 0.5 <= density <= 5:
        score += 15
    else:
        score += 10

    # Meta description length
    if META_MIN_LENGTH <= len(meta_description) <= META_MAX_LENGTH:
        score += 20
    elif 100 <= len(meta_description) <= 180:
        score += 15
    else:
        score += 10

    # Image alt text
    if image_alt_texts:
        score += 20 if all(image_alt_texts) else 10

    return min(100, score)


def generate_recommendations(title: str, content: str, h2_tags: List[str], keywords: List[str],
                             meta_description: str) -> List[str]:
    """Improvement suggestions for the post"""
    recommendations = []

    if len(title) < TITLE_MIN_LENGTH:
        recommendations.append("제목을 30자 이상으로 늘려주세요.")
    elif len(title) > TITLE_MAX_LENGTH:
        recommendations.append("제목을 60자 이하로 줄여주세요.")

    if keywords and keywords[0] not in title:
        recommendations.append(f'제목에 주요 키워드 "{keywords[0]}"를 포함해주세요.')

    if len(h2_tags) < 3:
        recommendations.append("H2 태그를 최소 3개 이상 추가해주세요.")

    if h2_tags and keywords and keywords[0] not in h2_tags[0]:
        recommendations.append("첫 번째 H2 태그에 주요 키워드를 포함해주세요.")

    text = strip_html(content)
    if len(text) < MIN_CONTENT_LENGTH:
        recommendations.append("콘텐츠를 1000자 이상으로 늘려주세요.")

    if len(meta_description) < META_MIN_LENGTH:
        recommendations.append("메타 설명을 120자 이상으로 늘려주세요.")
    elif len(meta_description) > META_MAX_LENGTH:
        recommendations.append("메타 설명을 160자 이하로 줄여주세요.")

    density = keyword_density(text, keywords)
    if density < 1:
        recommendations.append("키워드 밀도를 1% 이상으로 늘려주세요.")
    elif density > 3:
        recommendations.append("키워드 밀도를 3% 이하로 줄여주세요. (과도한 키워드 삽입)")

    return recommendations


def optimize_seo(request: SEOOptimizationRequest) -> SEOOptimizationResult:
    """Optimize title, meta description, headings and images of a post and score the result"""
    logger.info(f"Optimizing SEO for post: {request.title}")

    title = optimize_title(request.title, request.keywords)
    meta_description = generate_meta_description(request.content, request.keywords)
    h2_tags = optimize_h2_tags(request.content, request.keywords)
    image_alt_texts = generate_image_alt_texts(request.content, request.keywords)
    internal_links = suggest_internal_links(request.keywords, request.target_url)

    seo_score = calculate_seo_score(title, request.content, h2_tags, request.keywords,
                                    meta_description, image_alt_texts)
    recommendations = generate_recommendations(title, request.content, h2_tags,
                                               request.keywords, meta_description)

    return SEOOptimizationResult(
        title=title,
        meta_description=meta_description,
        h2_tags=h2_tags,
        keywords=request.keywords,
        image_alt_texts=image_alt_texts,
        internal_links=internal_links,
        seo_score=seo_score,
        recommendations=recommendations
    )
