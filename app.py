"""
Main application for the Autobot keyword engine - wires all components together
"""
import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from config import AutobotConfig, config as default_config
from database import DatabaseManager
from errors import AutobotError
from identity import StaticIdentityProvider
from keyword_analysis import analyze_keywords, count_keywords
from keyword_recommender import KeywordRecommender, RecommendationOptions
from keyword_scoring import calculate_keyword_score
from metrics_provider import HttpMetricsProvider, MetricsProvider, RandomMetricsProvider
from models import BlogAnalysis, KeywordMetrics, ScheduleConfig, SEOOptimizationRequest
from monitoring import collect_system_metrics, setup_logging
from scheduler import RecommendationScheduler
from seo_optimizer import optimize_seo
from blog_reconstruction import BlogReconstructor

logger = logging.getLogger(__name__)

class AutobotApp:
    """Composition root for recommendations, persistence and scheduling"""

    def __init__(self, config: AutobotConfig = None, user_id: Optional[str] = None,
                 metrics_provider: MetricsProvider = None, configure_logging: bool = True):
        self.config = config or default_config

        if configure_logging:
            setup_logging(self.config.log_level, self.config.log_dir, self.config.log_format)

        self.db_manager = DatabaseManager(self.config.db_path)
        self.metrics_provider = metrics_provider or self._build_metrics_provider()
        self.recommender = self.recommender_for(user_id)
        self.scheduler = RecommendationScheduler(self.metrics_provider, self.db_manager, self.config)
        self.reconstructor = BlogReconstructor()

        logger.info("Autobot application initialized")

    def _build_metrics_provider(self) -> MetricsProvider:
        if self.config.metrics_api_url:
            logger.info(f"Using metrics API at {self.config.metrics_api_url}")
            return HttpMetricsProvider(self.config.metrics_api_url, timeout=self.config.request_timeout)
        return RandomMetricsProvider(seed=self.config.metrics_seed)

    def recommender_for(self, user_id: Optional[str]) -> KeywordRecommender:
        """Recommender acting on behalf of user_id (None means signed out)"""
        return KeywordRecommender(
            self.metrics_provider,
            store=self.db_manager,
            identity=StaticIdentityProvider(user_id),
            config=self.config,
            logger=logging.getLogger("keyword_recommender")
        )

    def options(self, min_score: Optional[float] = None, max_results: Optional[int] = None,
                prioritize_longtail: Optional[bool] = None,
                blog_analysis: Optional[BlogAnalysis] = None) -> RecommendationOptions:
        """Recommendation options, falling back to configured defaults"""
        return RecommendationOptions(
            min_score=self.config.min_score if min_score is None else min_score,
            max_results=self.config.max_results if max_results is None else max_results,
            prioritize_longtail=self.config.prioritize_longtail if prioritize_longtail is None else prioritize_longtail,
            blog_analysis=blog_analysis
        )

    def score_keyword(self, keyword: str, blog_analysis: Optional[BlogAnalysis] = None) -> Dict[str, Any]:
        """Estimate metrics for one keyword and score it"""
        metrics = self.metrics_provider.estimate(keyword)
        return asdict(calculate_keyword_score(metrics.keyword, metrics, blog_analysis))

    def schedule_daily_recommendations(self, user_id: str, blog_id: str, keywords: List[str],
                                       publish_time: Optional[str] = None) -> ScheduleConfig:
        """Schedule daily keyword recommendations for a blog"""
        schedule_config = ScheduleConfig(
            user_id=user_id,
            blog_id=blog_id,
            publish_time=publish_time or self.config.default_publish_time,
            keywords=keywords,
            timezone=self.config.timezone
        )
        return self.scheduler.add_schedule(schedule_config)

    def get_system_status(self) -> Dict[str, Any]:
        """Database reachability, scheduler state and host metrics"""
        try:
            self.db_manager.list_schedule_configs(enabled_only=False)
            database_status = "healthy"
        except AutobotError as e:
            logger.error(f"Database health check failed: {e}")
            database_status = "unhealthy"

        jobs = self.scheduler.get_jobs()
        return {
            "status": "healthy" if database_status == "healthy" else "degraded",
            "components": {
                "database": {"status": database_status, "path": self.config.db_path},
                "metrics_provider": {"type": type(self.metrics_provider).__name__},
                "scheduler": {"running": self.scheduler.is_running, "jobs": len(jobs)},
                "system": collect_system_metrics(self.config.db_path)
            },
            "scheduled_jobs": len(jobs),
            "failed_jobs": len(self.scheduler.last_errors)
        }

    def cleanup_old_data(self, days_to_keep: int = 30) -> int:
        """Clean up stale unused recommendations"""
        logger.info(f"Cleaning up data older than {days_to_keep} days")
        return self.db_manager.cleanup_old_data(days_to_keep)

    def shutdown(self):
        """Gracefully shutdown the application"""
        logger.info("Shutting down Autobot application")
        self.scheduler.stop()

def _read_text(path: str) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()

def _print_json(data: Any):
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))

def create_cli():
    """Create command line interface"""
    parser = argparse.ArgumentParser(description="Autobot - keyword recommendations for Blogger")
    parser.add_argument("--user", help="User id used for saved recommendations")
    parser.add_argument("--db", help="SQLite database path")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    recommend_parser = subparsers.add_parser("recommend", help="Recommend keywords for a query")
    recommend_parser.add_argument("query", help="Comma or newline separated keywords")
    recommend_parser.add_argument("--min-score", type=float)
    recommend_parser.add_argument("--max-results", type=int)
    recommend_parser.add_argument("--no-longtail", action="store_true", help="Do not prioritize longtail keywords")
    recommend_parser.add_argument("--domain-authority", type=float)
    recommend_parser.add_argument("--performance", type=float, help="Recent post performance (0-100)")
    recommend_parser.add_argument("--save", action="store_true", help="Save recommendations for --user")

    longtail_parser = subparsers.add_parser("longtail", help="Recommend longtail variants")
    longtail_parser.add_argument("keywords", nargs="+", help="Base keywords")
    longtail_parser.add_argument("--max-results", type=int)

    trending_parser = subparsers.add_parser("trending", help="Recommend trending keywords for a domain")
    trending_parser.add_argument("--domain", help="Blog domain, e.g. ai")

    score_parser = subparsers.add_parser("score", help="Score keywords with explicit metrics")
    score_parser.add_argument("keyword", help="Keyword to score")
    score_parser.add_argument("--volume", type=int, help="Monthly search volume")
    score_parser.add_argument("--competition", type=float, help="Competition level (0-100)")

    saved_parser = subparsers.add_parser("saved", help="List saved recommendations")
    saved_parser.add_argument("--unused", action="store_true", help="Only unused keywords")
    saved_parser.add_argument("--limit", type=int, default=50)

    used_parser = subparsers.add_parser("mark-used", help="Mark a saved keyword as used")
    used_parser.add_argument("keyword_id", type=int)

    analyze_parser = subparsers.add_parser("analyze", help="Keyword frequency analysis of text files")
    analyze_parser.add_argument("files", nargs="+", help="Text or HTML files")
    analyze_parser.add_argument("--domain", default="default")
    analyze_parser.add_argument("--top", type=int, default=20)

    seo_parser = subparsers.add_parser("seo", help="SEO-optimize a post")
    seo_parser.add_argument("file", help="HTML content file")
    seo_parser.add_argument("--title", required=True)
    seo_parser.add_argument("--keywords", nargs="+", required=True)

    schedule_parser = subparsers.add_parser("schedule", help="Schedule daily recommendations")
    schedule_parser.add_argument("blog_id")
    schedule_parser.add_argument("keywords", nargs="+")
    schedule_parser.add_argument("--time", help="Time to run (HH:MM)")

    cleanup_parser = subparsers.add_parser("cleanup", help="Clean up old data")
    cleanup_parser.add_argument("--days", type=int, default=30, help="Days of data to keep")

    server_parser = subparsers.add_parser("server", help="Run the HTTP API")
    server_parser.add_argument("--port", type=int, help="Server port")

    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point"""
    parser = create_cli()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = AutobotConfig.from_env()
    if args.db:
        settings.db_path = args.db

    if args.command == "server":
        import uvicorn
        # The API builds its own application from the environment
        os.environ["AUTOBOT_DB_PATH"] = settings.db_path
        uvicorn.run("api:app", host=settings.api_host, port=args.port or settings.api_port, log_level="info")
        return 0

    app = AutobotApp(settings, user_id=args.user)

    try:
        if args.command == "recommend":
            blog_analysis = None
            if args.domain_authority is not None or args.performance is not None:
                blog_analysis = BlogAnalysis(domain_authority=args.domain_authority,
                                             recent_post_performance=args.performance)
            options = app.options(args.min_score, args.max_results,
                                  False if args.no_longtail else None, blog_analysis)
            recommendations = app.recommender.recommend(args.query, options)
            if args.save:
                recommendations = app.recommender.save_recommendations(recommendations)
            _print_json([asdict(rec) for rec in recommendations])

        elif args.command == "longtail":
            recommendations = app.recommender.recommend_longtail(
                args.keywords, app.options(max_results=args.max_results)
            )
            _print_json([asdict(rec) for rec in recommendations])

        elif args.command == "trending":
            recommendations = app.recommender.recommend_trending(args.domain, app.options())
            _print_json([asdict(rec) for rec in recommendations])

        elif args.command == "score":
            metrics = KeywordMetrics(keyword=args.keyword, search_volume=args.volume,
                                     competition_level=args.competition)
            _print_json(asdict(calculate_keyword_score(args.keyword, metrics)))

        elif args.command == "saved":
            recommendations = app.recommender.get_recommendations(
                used=False if args.unused else None, limit=args.limit
            )
            _print_json([asdict(rec) for rec in recommendations])

        elif args.command == "mark-used":
            _print_json(asdict(app.recommender.mark_as_used(args.keyword_id)))

        elif args.command == "analyze":
            documents = [count_keywords(path, _read_text(path)) for path in args.files]
            _print_json(asdict(analyze_keywords(documents, top_n=args.top, domain=args.domain)))

        elif args.command == "seo":
            request = SEOOptimizationRequest(title=args.title, content=_read_text(args.file),
                                             keywords=args.keywords)
            _print_json(asdict(optimize_seo(request)))

        elif args.command == "schedule":
            if not args.user:
                parser.error("schedule requires --user")
            schedule_config = app.schedule_daily_recommendations(args.user, args.blog_id,
                                                                 args.keywords, args.time)
            print(f"Scheduled daily recommendations at {schedule_config.publish_time}, "
                  f"next run {schedule_config.next_run}")

        elif args.command == "cleanup":
            removed = app.cleanup_old_data(args.days)
            print(f"Removed {removed} recommendations older than {args.days} days")

    except AutobotError as e:
        logger.error(f"Command {args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.shutdown()

    return 0

if __name__ == "__main__":
    sys.exit(main())
