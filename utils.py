"""
Utility functions for retries, numeric helpers and timing
"""
import math
import time
import random
import logging
import functools
from typing import Callable

logger = logging.getLogger(__name__)

def retry_on_failure(max_retries: int = 3, delay: float = 1.0, backoff: float = 2.0,
                    exceptions: tuple = (Exception,)):
    """
    Decorator for retrying functions on failure with exponential backoff

    Args:
        max_retries: Maximum number of retry attempts
        delay: Initial delay between retries in seconds
        backoff: Multiplier for delay after each retry
        exceptions: Tuple of exceptions to catch and retry on
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        logger.error(f"Function {func.__name__} failed after {max_retries} retries: {e}")
                        raise

                    logger.warning(f"Attempt {attempt + 1} failed for {func.__name__}: {e}. Retrying in {current_delay:.2f}s")
                    time.sleep(current_delay + random.uniform(0, current_delay))  # jitter
                    current_delay *= backoff
        return wrapper
    return decorator

def round_score(value: float) -> float:
    """Round half up to one decimal place"""
    return math.floor(value * 10 + 0.5) / 10

def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]"""
    return max(lower, min(upper, value))

def clean_text(text: str) -> str:
    """Collapse whitespace runs into single spaces"""
    if not text:
        return ""
    return ' '.join(text.split())

def truncate(text: str, max_length: int, ellipsis: str = "...") -> str:
    """Cut text to max_length characters, ending with an ellipsis when cut"""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(ellipsis)] + ellipsis

class PerformanceMonitor:
    """Monitor and log operation durations"""

    def __init__(self):
        self.metrics = {}

    def start_timer(self, operation: str):
        """Start timing an operation"""
        self.metrics[operation] = {'start': time.time()}

    def end_timer(self, operation: str) -> float:
        """End timing and log results"""
        if operation in self.metrics:
            duration = time.time() - self.metrics[operation]['start']
            self.metrics[operation]['duration'] = duration
            logger.info(f"Operation '{operation}' completed in {duration:.2f} seconds")
            return duration
        return 0

    def get_metrics(self) -> dict:
        """Get all recorded metrics"""
        return self.metrics.copy()
