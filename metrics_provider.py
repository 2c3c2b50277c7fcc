"""
Search volume and competition estimation for keywords
"""
import logging
import random
from abc import ABC, abstractmethod
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from errors import InvalidArgument, UpstreamUnavailable
from models import KeywordMetrics, count_words
from utils import retry_on_failure

logger = logging.getLogger(__name__)


def _require_keyword(keyword) -> str:
    if not isinstance(keyword, str) or not keyword.strip():
        raise InvalidArgument("Keyword must be a non-empty string", {"keyword": keyword})
    return keyword.strip()


class MetricsProvider(ABC):
    """Source of search volume and competition estimates"""

    @abstractmethod
    def estimate(self, keyword: str) -> KeywordMetrics:
        """Return metrics carrying search_volume and competition_level for keyword"""


class RandomMetricsProvider(MetricsProvider):
    """Word-count bucketed random estimates.

    Stand-in until a real search volume source is configured. Shorter
    keywords are assumed to have more searches and more competition:

        1 word   -> volume [10000, 60000), competition [60, 100)
        2 words  -> volume [1000, 6000),   competition [30, 60)
        3+ words -> volume [100, 600),     competition [0, 30)
    """

    def __init__(self, rng: random.Random = None, seed: Optional[int] = None):
        self.rng = rng or random.Random(seed)

    def estimate(self, keyword: str) -> KeywordMetrics:
        keyword = _require_keyword(keyword)
        word_count = count_words(keyword)

        if word_count == 1:
            search_volume = self.rng.randrange(10000, 60000)
            competition_level = self.rng.randrange(60, 100)
        elif word_count == 2:
            search_volume = self.rng.randrange(1000, 6000)
            competition_level = self.rng.randrange(30, 60)
        else:
            search_volume = self.rng.randrange(100, 600)
            competition_level = self.rng.randrange(0, 30)

        return KeywordMetrics(
            keyword=keyword,
            search_volume=search_volume,
            competition_level=float(competition_level)
        )


class HttpMetricsProvider(MetricsProvider):
    """Fetches keyword metrics from a JSON HTTP endpoint.

    The endpoint is called as ``GET {base_url}/keywords/metrics?keyword=...``
    and must answer with ``{"search_volume": int, "competition_level": float}``.
    Either field may be null.
    """

    def __init__(self, base_url: str, timeout: int = 15, api_key: Optional[str] = None,
                 session: requests.Session = None, max_retries: int = 2, backoff_factor: float = 0.5):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

        # Rate limits and server errors are retried by the transport
        retry_strategy = Retry(
            total=max_retries,
            connect=0,
            read=0,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            backoff_factor=backoff_factor,
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({"Accept": "application/json"})
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def estimate(self, keyword: str) -> KeywordMetrics:
        keyword = _require_keyword(keyword)

        try:
            payload = self._fetch(keyword)
            search_volume = payload.get("search_volume")
            competition_level = payload.get("competition_level")
            return KeywordMetrics(
                keyword=keyword,
                search_volume=int(search_volume) if search_volume is not None else None,
                competition_level=float(competition_level) if competition_level is not None else None
            )
        except (requests.exceptions.RequestException, TypeError, ValueError) as e:
            logger.error(f"Metrics source failed for '{keyword}': {e}")
            raise UpstreamUnavailable(f"Metrics source unavailable: {e}", {"keyword": keyword}) from e

    @retry_on_failure(max_retries=2, delay=0.5, exceptions=(requests.exceptions.ConnectionError,
                                                             requests.exceptions.Timeout))
    def _fetch(self, keyword: str) -> dict:
        response = self.session.get(
            f"{self.base_url}/keywords/metrics",
            params={"keyword": keyword},
            timeout=self.timeout
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Unexpected metrics payload")
        return payload
