"""
Exception classes for the Autobot keyword engine
"""
from typing import Any, Dict, Optional


class AutobotError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgument(AutobotError):
    """Empty or malformed keyword, query or option"""


class NotAuthenticated(AutobotError):
    """Persistence was requested without a resolved user"""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class NotFound(AutobotError):
    """A referenced record does not exist for the current user"""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} not found: {resource_id}", {"id": resource_id})


class UpstreamUnavailable(AutobotError):
    """The store or an external metrics source failed"""
