"""
Current-user resolution for persistence calls
"""
from typing import Optional

from errors import NotAuthenticated


class IdentityProvider:
    """Resolves the id of the authenticated user, or None when signed out"""

    def current_user_id(self) -> Optional[str]:
        return None

    def require_user_id(self) -> str:
        """Return the current user id or raise NotAuthenticated"""
        user_id = self.current_user_id()
        if not user_id:
            raise NotAuthenticated()
        return user_id


class StaticIdentityProvider(IdentityProvider):
    """Identity fixed at construction time (CLI runs, API requests, tests)"""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self.user_id
