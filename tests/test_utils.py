"""
Tests for utility functions and decorators
"""
import logging

import pytest
from unittest.mock import patch

from config import AutobotConfig
from errors import NotAuthenticated, NotFound
from identity import IdentityProvider, StaticIdentityProvider
from keyword_search import LONGTAIL_SUFFIXES
from monitoring import setup_logging
from utils import (
    retry_on_failure, round_score, clamp, clean_text, truncate,
    PerformanceMonitor
)


class TestRetryDecorator:
    """Tests for retry decorator"""

    def test_retry_success_on_first_attempt(self):
        """Test successful execution on first attempt"""
        call_count = 0

        @retry_on_failure(max_retries=3)
        def successful_function():
            nonlocal call_count
            call_count += 1
            return "success"

        result = successful_function()
        assert result == "success"
        assert call_count == 1

    @patch('utils.time.sleep')
    def test_retry_success_after_failures(self, mock_sleep):
        """Test successful execution after some failures"""
        call_count = 0

        @retry_on_failure(max_retries=3, delay=0.1)
        def eventually_successful_function():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ValueError("Temporary failure")
            return "success"

        result = eventually_successful_function()
        assert result == "success"
        assert call_count == 3
        assert mock_sleep.call_count == 2

    @patch('utils.time.sleep')
    def test_retry_max_retries_exceeded(self, mock_sleep):
        """Test when max retries are exceeded"""
        call_count = 0

        @retry_on_failure(max_retries=2, delay=0.1)
        def always_failing_function():
            nonlocal call_count
            call_count += 1
            raise ValueError("Always fails")

        with pytest.raises(ValueError):
            always_failing_function()

        assert call_count == 3  # Initial call + 2 retries

    def test_retry_specific_exceptions(self):
        """Test retry with specific exception types"""
        call_count = 0

        @retry_on_failure(max_retries=2, delay=0.1, exceptions=(ValueError,))
        def specific_exception_function():
            nonlocal call_count
            call_count += 1
            raise TypeError("This should not be retried")

        with pytest.raises(TypeError):
            specific_exception_function()
        assert call_count == 1


class TestNumericHelpers:
    """Tests for rounding and clamping"""

    @pytest.mark.parametrize("value,expected", [
        (79.16666, 79.2),
        (2.25, 2.3),
        (70.0, 70.0),
        (36.6666, 36.7),
        (0, 0.0),
    ])
    def test_round_score_half_up(self, value, expected):
        assert round_score(value) == expected

    def test_clamp(self):
        assert clamp(150, 0, 100) == 100
        assert clamp(-5, 0, 100) == 0
        assert clamp(42.5, 0, 100) == 42.5


class TestTextHelpers:
    """Tests for text helpers"""

    def test_clean_text(self):
        assert clean_text("  hello \n\t world  ") == "hello world"
        assert clean_text("") == ""
        assert clean_text(None) == ""

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("a" * 20, 10) == "aaaaaaa..."
        assert len(truncate("a" * 20, 10)) == 10


class TestPerformanceMonitor:
    """Tests for performance monitoring"""

    def test_timer(self):
        monitor = PerformanceMonitor()
        monitor.start_timer("operation")
        duration = monitor.end_timer("operation")

        assert duration >= 0
        assert "duration" in monitor.get_metrics()["operation"]

    def test_end_unknown_timer(self):
        assert PerformanceMonitor().end_timer("missing") == 0


class TestIdentity:
    """Tests for current user resolution"""

    def test_signed_out(self):
        with pytest.raises(NotAuthenticated):
            IdentityProvider().require_user_id()
        with pytest.raises(NotAuthenticated):
            StaticIdentityProvider("").require_user_id()

    def test_static_user(self):
        assert StaticIdentityProvider("user-1").require_user_id() == "user-1"


class TestErrorsAndConfig:
    """Tests for error messages and environment configuration"""

    def test_not_found_message(self):
        error = NotFound("Recommended keyword", 7)
        assert str(error) == "Recommended keyword not found: 7"
        assert error.details == {"id": 7}

    def test_defaults(self):
        settings = AutobotConfig()
        assert settings.min_score == 50.0
        assert settings.max_results == 20
        assert settings.prioritize_longtail is True
        assert settings.longtail_suffixes == LONGTAIL_SUFFIXES
        assert settings.longtail_suffixes is not LONGTAIL_SUFFIXES

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("AUTOBOT_DB_PATH", "/tmp/other.db")
        monkeypatch.setenv("AUTOBOT_MIN_SCORE", "65")
        monkeypatch.setenv("AUTOBOT_METRICS_SEED", "11")
        monkeypatch.setenv("AUTOBOT_LOG_LEVEL", "debug")

        settings = AutobotConfig.from_env()

        assert settings.db_path == "/tmp/other.db"
        assert settings.min_score == 65.0
        assert settings.metrics_seed == 11
        assert settings.log_level == "DEBUG"


class TestLoggingSetup:
    """Tests for logging configuration"""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root_logger = logging.getLogger()
        handlers, level = root_logger.handlers[:], root_logger.level
        yield
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(level)

    def test_file_handlers(self, tmp_path):
        log_dir = tmp_path / "logs"
        root_logger = setup_logging("debug", str(log_dir))

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 3
        assert (log_dir / "autobot.log").exists()
        assert (log_dir / "errors.log").exists()

    def test_console_only(self):
        root_logger = setup_logging("warning", "")

        assert root_logger.level == logging.WARNING
        assert len(root_logger.handlers) == 1
