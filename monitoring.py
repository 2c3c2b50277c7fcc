"""
Logging setup and system metrics for the Autobot keyword engine
"""
import logging
import os
import threading
from typing import Any, Dict

import psutil

def setup_logging(log_level: str = "INFO", log_dir: str = "logs",
                  log_format: str = "%(asctime)s - %(levelname)s - %(message)s") -> logging.Logger:
    """Configure console and file logging on the root logger"""

    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    simple_formatter = logging.Formatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Clear existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        file_handler = logging.FileHandler(
            os.path.join(log_dir, 'autobot.log'),
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

        error_handler = logging.FileHandler(
            os.path.join(log_dir, 'errors.log'),
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(error_handler)

    return root_logger

def collect_system_metrics(db_path: str) -> Dict[str, Any]:
    """Host resource usage and database size"""
    database_size = 0.0
    if db_path and os.path.exists(db_path):
        database_size = os.path.getsize(db_path) / (1024 * 1024)  # MB

    process = psutil.Process(os.getpid())
    return {
        "cpu_usage": psutil.cpu_percent(interval=None),
        "memory_usage": psutil.virtual_memory().percent,
        "process_memory_mb": round(process.memory_info().rss / 1024 / 1024, 1),
        "active_threads": threading.active_count(),
        "database_size_mb": round(database_size, 3)
    }
