"""
Configuration file for the Autobot keyword engine
"""
import os
from dataclasses import dataclass
from typing import List, Optional

from keyword_search import LONGTAIL_SUFFIXES

@dataclass
class AutobotConfig:
    """Configuration settings for keyword recommendation and content tools"""

    # Database settings
    db_path: str = "autobot_keywords.db"

    # Recommendation defaults
    min_score: float = 50.0
    max_results: int = 20
    prioritize_longtail: bool = True
    longtail_suffixes: List[str] = None

    # Metrics source
    metrics_seed: Optional[int] = None
    metrics_api_url: Optional[str] = None
    request_timeout: int = 15

    # Scheduling
    default_publish_time: str = "09:00"
    timezone: str = "Asia/Seoul"

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"
    log_dir: str = "logs"

    def __post_init__(self):
        if self.longtail_suffixes is None:
            self.longtail_suffixes = list(LONGTAIL_SUFFIXES)

    @classmethod
    def from_env(cls) -> "AutobotConfig":
        """Build a configuration, letting AUTOBOT_* environment variables override defaults"""
        settings = cls()
        env = os.environ

        settings.db_path = env.get("AUTOBOT_DB_PATH", settings.db_path)
        settings.log_level = env.get("AUTOBOT_LOG_LEVEL", settings.log_level).upper()
        settings.log_dir = env.get("AUTOBOT_LOG_DIR", settings.log_dir)
        settings.metrics_api_url = env.get("AUTOBOT_METRICS_API_URL", settings.metrics_api_url)
        settings.timezone = env.get("AUTOBOT_TIMEZONE", settings.timezone)
        settings.default_publish_time = env.get("AUTOBOT_PUBLISH_TIME", settings.default_publish_time)

        if "AUTOBOT_MIN_SCORE" in env:
            settings.min_score = float(env["AUTOBOT_MIN_SCORE"])
        if "AUTOBOT_MAX_RESULTS" in env:
            settings.max_results = int(env["AUTOBOT_MAX_RESULTS"])
        if "AUTOBOT_METRICS_SEED" in env:
            settings.metrics_seed = int(env["AUTOBOT_METRICS_SEED"])
        if "AUTOBOT_API_PORT" in env:
            settings.api_port = int(env["AUTOBOT_API_PORT"])

        return settings

# Default configuration instance
config = AutobotConfig.from_env()
