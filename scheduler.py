"""
Daily keyword recommendation scheduling
"""
import re
import time
import logging
import threading
from typing import Dict, List, Optional
from datetime import datetime, timedelta

import schedule

from config import AutobotConfig, config as default_config
from database import DatabaseManager
from errors import InvalidArgument
from identity import StaticIdentityProvider
from keyword_recommender import KeywordRecommender
from metrics_provider import MetricsProvider
from models import RecommendedKeyword, ScheduleConfig
from utils import PerformanceMonitor

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_publish_time(publish_time: str) -> str:
    """Validate an HH:MM time and return it zero-padded"""
    match = _TIME_PATTERN.match(publish_time or "")
    if not match:
        raise InvalidArgument("Publish time must be HH:MM", {"publish_time": publish_time})
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def calculate_next_run_time(publish_time: str, now: Optional[datetime] = None) -> datetime:
    """Next occurrence of publish_time: today if still ahead, otherwise tomorrow"""
    hours, minutes = map(int, parse_publish_time(publish_time).split(":"))
    now = now or datetime.now()

    next_run = now.replace(hour=hours, minute=minutes, second=0, microsecond=0)
    if next_run <= now:
        next_run += timedelta(days=1)
    return next_run


class RecommendationScheduler:
    """Runs a daily recommendation job per blog schedule"""

    def __init__(self, metrics_provider: MetricsProvider, store: DatabaseManager,
                 config: AutobotConfig = None, scheduler: schedule.Scheduler = None):
        self.metrics_provider = metrics_provider
        self.store = store
        self.config = config or default_config
        self.scheduler = scheduler or schedule.Scheduler()
        self.scheduler_thread = None
        self.is_running = False
        self.last_errors: Dict[str, str] = {}
        self.performance_monitor = PerformanceMonitor()

    @staticmethod
    def job_tag(schedule_config: ScheduleConfig) -> str:
        return f"{schedule_config.user_id}:{schedule_config.blog_id}"

    def add_schedule(self, schedule_config: ScheduleConfig) -> ScheduleConfig:
        """Validate, persist and register a blog schedule"""
        if not schedule_config.user_id or not schedule_config.blog_id:
            raise InvalidArgument("Schedules need a user_id and a blog_id")

        schedule_config.publish_time = parse_publish_time(schedule_config.publish_time)
        schedule_config.next_run = calculate_next_run_time(schedule_config.publish_time).isoformat()

        self.store.save_schedule_config(schedule_config)
        self._register(schedule_config)

        logger.info(f"Scheduled daily recommendations for blog {schedule_config.blog_id} "
                    f"at {schedule_config.publish_time}")
        return schedule_config

    def remove_schedule(self, user_id: str, blog_id: str) -> bool:
        """Stop running a blog's schedule; the stored config is disabled"""
        schedule_config = self.store.get_schedule_config(user_id, blog_id)
        if schedule_config is None:
            return False

        schedule_config.enabled = False
        self.store.save_schedule_config(schedule_config)
        self.scheduler.clear(self.job_tag(schedule_config))
        logger.info(f"Removed schedule for blog {blog_id}")
        return True

    def load_schedules(self) -> int:
        """Register every enabled schedule from the store"""
        schedules = self.store.list_schedule_configs(enabled_only=True)
        for schedule_config in schedules:
            self._register(schedule_config)
        logger.info(f"Loaded {len(schedules)} schedules")
        return len(schedules)

    def _register(self, schedule_config: ScheduleConfig):
        tag = self.job_tag(schedule_config)
        self.scheduler.clear(tag)
        if schedule_config.enabled:
            self.scheduler.every().day.at(schedule_config.publish_time).do(
                self._execute, schedule_config
            ).tag(tag)

    def run_schedule(self, schedule_config: ScheduleConfig) -> List[RecommendedKeyword]:
        """Generate and save today's recommendations for one schedule"""
        recommender = KeywordRecommender(
            self.metrics_provider,
            store=self.store,
            identity=StaticIdentityProvider(schedule_config.user_id),
            config=self.config
        )
        query = ",".join(schedule_config.keywords) or schedule_config.domain
        recommendations = recommender.recommend(query)
        return recommender.save_recommendations(recommendations)

    def _execute(self, schedule_config: ScheduleConfig):
        tag = self.job_tag(schedule_config)
        self.performance_monitor.start_timer(tag)
        try:
            saved = self.run_schedule(schedule_config)
            self.last_errors.pop(tag, None)
            logger.info(f"Scheduled run for {tag} saved {len(saved)} recommendations")
        except Exception as e:
            # One failing schedule must not stop the others
            self.last_errors[tag] = str(e)
            logger.error(f"Scheduled run for {tag} failed: {e}")
        finally:
            self.performance_monitor.end_timer(tag)

    def run_pending(self):
        self.scheduler.run_pending()

    def get_jobs(self) -> List[Dict[str, Optional[str]]]:
        """Registered jobs with their next run time"""
        return [
            {
                "tags": sorted(job.tags),
                "next_run": job.next_run.isoformat() if job.next_run else None
            }
            for job in self.scheduler.get_jobs()
        ]

    def start(self):
        """Start the scheduler loop on a daemon thread"""
        if self.is_running:
            logger.warning("Scheduler is already running")
            return

        self.is_running = True
        self.scheduler_thread = threading.Thread(target=self._run_scheduler, daemon=True)
        self.scheduler_thread.start()
        logger.info("Recommendation scheduler started")

    def stop(self):
        """Stop the scheduler loop"""
        self.is_running = False
        if self.scheduler_thread:
            self.scheduler_thread.join(timeout=5)
            self.scheduler_thread = None
        logger.info("Recommendation scheduler stopped")

    def _run_scheduler(self):
        while self.is_running:
            try:
                self.scheduler.run_pending()
            except Exception as e:
                logger.error(f"Scheduler error: {e}")
            time.sleep(1)
