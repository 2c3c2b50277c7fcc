"""
FastAPI web application for the Autobot keyword engine
"""
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import Depends, FastAPI, Header, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
import uvicorn

from app import AutobotApp
from config import AutobotConfig, config
from errors import AutobotError, InvalidArgument, NotAuthenticated, NotFound, UpstreamUnavailable
from keyword_analysis import analyze_keywords, count_keywords
from keyword_recommender import KeywordRecommender
from keyword_scoring import calculate_keyword_score
from keyword_search import search_keywords
from models import (
    BlogAnalysis, BlogReconstructionRequest, Feedback, KeywordMetrics, Recommendation,
    SEOOptimizationRequest
)
from seo_optimizer import optimize_seo

logger = logging.getLogger(__name__)

# Pydantic models for API requests
class BlogAnalysisModel(BaseModel):
    domain_authority: Optional[float] = None
    average_post_length: Optional[int] = None
    backlink_count: Optional[int] = None
    recent_post_performance: Optional[float] = None

    def to_model(self) -> BlogAnalysis:
        return BlogAnalysis(**self.model_dump())

class ScoreRequest(BaseModel):
    keyword: str
    search_volume: Optional[int] = None
    competition_level: Optional[float] = None
    estimate: bool = False
    blog_analysis: Optional[BlogAnalysisModel] = None

class SearchRequest(BaseModel):
    query: str
    max_results: int = Field(10, ge=1)
    include_related: bool = True

class RecommendRequest(BaseModel):
    query: str
    min_score: Optional[float] = None
    max_results: Optional[int] = Field(None, ge=1)
    prioritize_longtail: Optional[bool] = None
    blog_analysis: Optional[BlogAnalysisModel] = None
    save: bool = False

class LongtailRequest(BaseModel):
    keywords: List[str]
    min_score: Optional[float] = None
    max_results: Optional[int] = Field(None, ge=1)
    blog_analysis: Optional[BlogAnalysisModel] = None

    @field_validator('keywords')
    @classmethod
    def keywords_must_not_be_empty(cls, v):
        if not v:
            raise ValueError('Keywords list cannot be empty')
        return v

class FeedbackRequest(BaseModel):
    feedback: Optional[Feedback] = None

class DocumentModel(BaseModel):
    id: str
    text: str

class AnalyzeRequest(BaseModel):
    documents: List[DocumentModel]
    top_n: int = Field(20, ge=1)
    min_frequency: int = Field(2, ge=1)
    min_document_count: int = Field(1, ge=1)
    domain: str = "default"

class SEORequest(BaseModel):
    title: str
    content: str
    keywords: List[str]
    target_url: Optional[str] = None

class ReconstructRequest(BaseModel):
    original_content: str
    keywords: List[str]
    target_length: int = Field(2000, ge=1)
    optimize_seo: bool = True
    include_images: bool = True

class ScheduleRequest(BaseModel):
    blog_id: str
    keywords: List[str]
    time: Optional[str] = None

# Response models
class APIResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    timestamp: datetime

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    components: Dict[str, Any]
    scheduled_jobs: int

# Global application instance
autobot_app: Optional[AutobotApp] = None

def get_autobot_app() -> AutobotApp:
    """Dependency to get the application instance"""
    global autobot_app
    if autobot_app is None:
        autobot_app = AutobotApp(AutobotConfig.from_env())
    return autobot_app

@asynccontextmanager
async def lifespan(_: FastAPI):
    autobot = get_autobot_app()
    autobot.scheduler.load_schedules()
    autobot.scheduler.start()
    logger.info("Autobot API started successfully")
    yield
    autobot.shutdown()
    logger.info("Autobot API shut down successfully")

# Initialize FastAPI app
app = FastAPI(
    title="Autobot Keyword API",
    description="Keyword recommendation and SEO tooling for Blogger publishing",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def get_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """The calling user, taken from the X-User-Id header"""
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None

def get_recommender(
    user_id: Optional[str] = Depends(get_user_id),
    autobot: AutobotApp = Depends(get_autobot_app)
) -> KeywordRecommender:
    return autobot.recommender_for(user_id)

def respond(message: str, data: Optional[Dict[str, Any]] = None) -> APIResponse:
    return APIResponse(success=True, message=message, data=data, timestamp=datetime.now())

# API Endpoints

@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint"""
    return {
        "message": "Autobot Keyword API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/health", response_model=HealthResponse)
def health_check(autobot: AutobotApp = Depends(get_autobot_app)):
    """Health check endpoint"""
    status = autobot.get_system_status()
    return HealthResponse(
        status=status["status"],
        timestamp=datetime.now(),
        components=status["components"],
        scheduled_jobs=status["scheduled_jobs"]
    )

@app.post("/keywords/score", response_model=APIResponse)
def score_keyword(request: ScoreRequest, autobot: AutobotApp = Depends(get_autobot_app)):
    """Score a keyword from explicit or estimated metrics"""
    if request.estimate:
        metrics = autobot.metrics_provider.estimate(request.keyword)
    else:
        if not request.keyword.strip():
            raise InvalidArgument("Keyword must be a non-empty string")
        metrics = KeywordMetrics(
            keyword=request.keyword.strip(),
            search_volume=request.search_volume,
            competition_level=request.competition_level
        )

    blog_analysis = request.blog_analysis.to_model() if request.blog_analysis else None
    score = calculate_keyword_score(metrics.keyword, metrics, blog_analysis)
    return respond("Keyword scored", asdict(score))

@app.post("/keywords/search", response_model=APIResponse)
def search(request: SearchRequest, autobot: AutobotApp = Depends(get_autobot_app)):
    """Expand a query into keywords with estimated metrics"""
    results = search_keywords(request.query, autobot.metrics_provider,
                              request.max_results, request.include_related)
    return respond(f"Found {len(results)} keywords", {"results": [asdict(r) for r in results]})

@app.post("/keywords/recommend", response_model=APIResponse)
def recommend(
    request: RecommendRequest,
    recommender: KeywordRecommender = Depends(get_recommender),
    autobot: AutobotApp = Depends(get_autobot_app)
):
    """Recommend keywords for a query, optionally saving them for the caller"""
    blog_analysis = request.blog_analysis.to_model() if request.blog_analysis else None
    options = autobot.options(request.min_score, request.max_results,
                              request.prioritize_longtail, blog_analysis)

    recommendations = recommender.recommend(request.query, options)
    if request.save:
        recommendations = recommender.save_recommendations(recommendations)

    return respond(
        f"Recommended {len(recommendations)} keywords",
        {"recommendations": [asdict(rec) for rec in recommendations], "saved": request.save}
    )

@app.post("/keywords/recommend/longtail", response_model=APIResponse)
def recommend_longtail(
    request: LongtailRequest,
    recommender: KeywordRecommender = Depends(get_recommender),
    autobot: AutobotApp = Depends(get_autobot_app)
):
    """Recommend longtail variants of base keywords"""
    blog_analysis = request.blog_analysis.to_model() if request.blog_analysis else None
    options = autobot.options(request.min_score, request.max_results, True, blog_analysis)
    recommendations = recommender.recommend_longtail(request.keywords, options)
    return respond(
        f"Recommended {len(recommendations)} longtail keywords",
        {"recommendations": [asdict(rec) for rec in recommendations]}
    )

@app.get("/keywords/trending", response_model=APIResponse)
def recommend_trending(
    domain: Optional[str] = Query(None, description="Blog domain, e.g. ai"),
    recommender: KeywordRecommender = Depends(get_recommender),
    autobot: AutobotApp = Depends(get_autobot_app)
):
    """Recommend trending keywords for a domain"""
    recommendations = recommender.recommend_trending(domain, autobot.options())
    return respond(
        f"Recommended {len(recommendations)} trending keywords",
        {"recommendations": [asdict(rec) for rec in recommendations]}
    )

@app.get("/keywords/recommendations", response_model=APIResponse)
def list_recommendations(
    used: Optional[bool] = Query(None, description="Filter by used flag"),
    recommendation: Optional[Recommendation] = Query(None, description="Filter by tier"),
    limit: int = Query(50, ge=1, le=500),
    recommender: KeywordRecommender = Depends(get_recommender)
):
    """Saved recommendations of the caller"""
    recommendations = recommender.get_recommendations(used, recommendation, limit)
    return respond(
        f"Retrieved {len(recommendations)} recommendations",
        {"recommendations": [asdict(rec) for rec in recommendations], "total": len(recommendations)}
    )

@app.post("/keywords/recommendations/{keyword_id}/use", response_model=APIResponse)
def mark_used(keyword_id: int, recommender: KeywordRecommender = Depends(get_recommender)):
    """Mark a saved recommendation as used"""
    recommendation = recommender.mark_as_used(keyword_id)
    return respond(f"Keyword {keyword_id} marked as used", asdict(recommendation))

@app.post("/keywords/recommendations/{keyword_id}/feedback", response_model=APIResponse)
def record_feedback(
    keyword_id: int,
    request: FeedbackRequest,
    recommender: KeywordRecommender = Depends(get_recommender)
):
    """Record feedback on a saved recommendation"""
    recommendation = recommender.record_feedback(keyword_id, request.feedback)
    return respond(f"Feedback recorded for keyword {keyword_id}", asdict(recommendation))

@app.post("/content/analyze", response_model=APIResponse)
def analyze_content(request: AnalyzeRequest):
    """Keyword frequency analysis across documents"""
    documents = [count_keywords(doc.id, doc.text) for doc in request.documents]
    result = analyze_keywords(documents, request.top_n, request.min_frequency,
                              request.min_document_count, request.domain)
    return respond(f"Analyzed {result.total_documents} documents", asdict(result))

@app.post("/seo/optimize", response_model=APIResponse)
def seo_optimize(request: SEORequest):
    """SEO-optimize a post"""
    result = optimize_seo(SEOOptimizationRequest(
        title=request.title,
        content=request.content,
        keywords=request.keywords,
        target_url=request.target_url
    ))
    return respond("SEO optimization completed", asdict(result))

@app.post("/content/reconstruct", response_model=APIResponse)
def reconstruct_content(request: ReconstructRequest, autobot: AutobotApp = Depends(get_autobot_app)):
    """Rebuild a post around scored keywords"""
    scores = []
    for keyword in request.keywords:
        metrics = autobot.metrics_provider.estimate(keyword)
        scores.append(calculate_keyword_score(metrics.keyword, metrics))

    result = autobot.reconstructor.reconstruct(BlogReconstructionRequest(
        original_content=request.original_content,
        keywords=scores,
        target_length=request.target_length,
        optimize_seo=request.optimize_seo,
        include_images=request.include_images
    ))
    return respond("Content reconstructed", asdict(result))

@app.post("/schedules", response_model=APIResponse)
def create_schedule(
    request: ScheduleRequest,
    user_id: Optional[str] = Depends(get_user_id),
    autobot: AutobotApp = Depends(get_autobot_app)
):
    """Schedule daily recommendations for one of the caller's blogs"""
    if not user_id:
        raise NotAuthenticated()
    schedule_config = autobot.schedule_daily_recommendations(user_id, request.blog_id,
                                                             request.keywords, request.time)
    return respond("Daily recommendations scheduled", asdict(schedule_config))

# Exception handlers
ERROR_STATUS = {
    InvalidArgument: 400,
    NotAuthenticated: 401,
    NotFound: 404,
    UpstreamUnavailable: 503,
}

@app.exception_handler(AutobotError)
async def autobot_exception_handler(request, exc: AutobotError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)), 500
    )
    if status_code >= 500:
        logger.error(f"Request to {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": type(exc).__name__,
            "timestamp": datetime.now().isoformat()
        }
    )

if __name__ == "__main__":
    uvicorn.run(
        "api:app",
        host=config.api_host,
        port=config.api_port,
        reload=True,
        log_level="info"
    )
