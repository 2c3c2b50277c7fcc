"""
Blog post reconstruction around recommended keywords
"""
import re
import random
import logging
from typing import List
from urllib.parse import quote

from models import BlogReconstructionRequest, ReconstructedBlog
from keyword_analysis import generate_h2_with_keyword
from seo_optimizer import keyword_density, strip_html
from utils import truncate

logger = logging.getLogger(__name__)

CLICK_PHRASES = ["완벽 가이드", "초보자 가이드", "이란?", "사용법"]

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")
_SENTENCE_END = re.compile(r"[.!?。！？]")


class BlogReconstructor:
    """Rewrites a post so its recommended keywords appear naturally"""

    def __init__(self, rng: random.Random = None):
        self.rng = rng or random.Random()

    def reconstruct(self, request: BlogReconstructionRequest) -> ReconstructedBlog:
        """Rebuild title, body, headings and meta description around the keywords"""
        ranked = sorted(request.keywords, key=lambda k: k.final_score, reverse=True)
        keywords = [k.keyword for k in ranked]

        title = self.generate_title(keywords)
        content = self.reconstruct_content(
            request.original_content, keywords, request.target_length, request.optimize_seo
        )
        h2_tags = generate_h2_tags(keywords, content)
        meta_description = generate_meta_description(content, keywords)
        suggested_images = suggest_images(keywords) if request.include_images else []
        seo_score = calculate_reconstruction_score(title, content, h2_tags, keywords, meta_description)

        logger.info(f"Reconstructed post '{title}' ({len(content)} chars, SEO score {seo_score})")

        return ReconstructedBlog(
            title=title,
            content=content,
            h2_tags=h2_tags,
            meta_description=meta_description,
            suggested_images=suggested_images,
            keywords=keywords,
            seo_score=seo_score
        )

    def generate_title(self, keywords: List[str]) -> str:
        """Keyword-first title with a click phrase when there is room"""
        title = keywords[0] if keywords else "주제"

        if len(keywords) > 1 and len(title) < 40:
            title += f" {keywords[1]}"

        if len(title) < 50:
            title += f" {self.rng.choice(CLICK_PHRASES)}"

        return truncate(title, 60)

    def reconstruct_content(self, original_content: str, keywords: List[str],
                            target_length: int, optimize_seo: bool = True) -> str:
        paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(original_content or "") if p.strip()]
        main_keyword = keywords[0] if keywords else None

        reconstructed = ""
        for i, paragraph in enumerate(paragraphs):
            if i == 0:
                if main_keyword and main_keyword not in paragraph:
                    paragraph = f"{main_keyword}에 대해 알아보겠습니다. {paragraph}"
            elif optimize_seo and i < len(keywords) and keywords[i] not in paragraph:
                paragraph = insert_keyword_naturally(paragraph, keywords[i])
            reconstructed += f"<p>{paragraph}</p>\n\n"

        if len(reconstructed) < target_length:
            reconstructed += generate_additional_content(keywords, target_length - len(reconstructed))
        elif len(reconstructed) > target_length * 1.2:
            reconstructed = truncate_content(reconstructed, target_length)

        return reconstructed


def insert_keyword_naturally(paragraph: str, keyword: str) -> str:
    """Work the keyword into the paragraph's closing sentence"""
    sentences = [s.strip() for s in _SENTENCE_END.split(paragraph) if s.strip()]
    if not sentences:
        return paragraph

    if keyword not in sentences[-1]:
        sentences[-1] = f"{sentences[-1]} {keyword}에 대해 더 알아보겠습니다"

    return ". ".join(sentences) + "."


def generate_additional_content(keywords: List[str], target_length: int) -> str:
    """Keyword sections to pad a short post"""
    additional = ""

    for keyword in keywords[1:4]:
        if len(additional) >= target_length:
            break
        additional += f"<h2>{keyword}</h2>\n\n"
        additional += f"<p>{keyword}에 대한 상세한 내용을 다루겠습니다. "
        additional += f"{keyword}의 특징과 활용 방법을 알아보겠습니다.</p>\n\n"

    return additional


def truncate_content(content: str, max_length: int) -> str:
    """Drop whole trailing paragraphs until the content fits"""
    if len(content) <= max_length:
        return content

    paragraphs = _PARAGRAPH_BREAK.split(content.strip())
    truncated = ""
    for paragraph in paragraphs:
        if len(truncated) + len(paragraph) > max_length:
            break
        truncated += paragraph + "\n\n"

    if truncated:
        return truncated.strip()

    # The first paragraph alone is too long: cut inside it
    first = paragraphs[0]
    if first.startswith("<p>") and first.endswith("</p>"):
        return f"<p>{truncate(first[3:-4], max_length - 7)}</p>"
    return truncate(first, max_length)


def generate_h2_tags(keywords: List[str], content: str) -> List[str]:
    h2_tags = [generate_h2_with_keyword(keyword) for keyword in keywords[:5]]

    for match in re.findall(r"<h2[^>]*>.*?</h2>", content, flags=re.IGNORECASE)[:3]:
        if match not in h2_tags:
            h2_tags.append(match)

    return h2_tags


def generate_meta_description(content: str, keywords: List[str]) -> str:
    description = strip_html(content)[:150].strip()

    if keywords and keywords[0] not in description:
        description = f"{keywords[0]}에 대한 정보입니다. {description}"

    return truncate(description, 160)


def suggest_images(keywords: List[str]) -> List[str]:
    """Image search links for the top three keywords"""
    return [f"https://unsplash.com/s/photos/{quote(keyword, safe='')}" for keyword in keywords[:3]]


def calculate_reconstruction_score(title: str, content: str, h2_tags: List[str],
                                   keywords: List[str], meta_description: str) -> int:
    """SEO score (0-100) of a reconstructed post"""
    score = 0
    main_keyword = keywords[0] if keywords else ""

    if 30 <= len(title) <= 60:
        score += 20
    elif 20 <= len(title) <= 70:
        score += 15
    else:
        score += 10
    if main_keyword and main_keyword in title:
        score += 5

    if len(h2_tags) >= 3:
        score += 20
    elif len(h2_tags) == 2:
        score += 15
    elif len(h2_tags) == 1:
        score += 10
    if h2_tags and main_keyword in h2_tags[0]:
        score += 5

    text = strip_html(content)
    density = keyword_density(text, keywords)
    if 1 <= density <= 3:
        score += 20
    elif 0.5 <= density <= 5:
        score += 15
    else:
        score += 10

    if len(text) >= 1500:
        score += 20
    elif len(text) >= 1000:
        score += 15
    elif len(text) >= 500:
        score += 10
    else:
        score += 5

    if 120 <= len(meta_description) <= 160:
        score += 20
    elif 100 <= len(meta_description) <= 180:
        score += 15
    else:
        score += 10
    if main_keyword and main_keyword in meta_description:
        score += 5

    return min(100, score)
