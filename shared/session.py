"""
Session store: maps opaque bearer tokens to user ids.

Identity-provider integration is outside this project; a token is issued
after a development sign-in and consulted before every mutation.
"""

import logging
import secrets
from typing import Optional

from shared.errors import Unauthenticated

logger = logging.getLogger("session_store")


class SessionStore:
    """In-memory token registry."""

    def __init__(self):
        self._tokens: dict[str, str] = {}

    def issue(self, user_id: str) -> str:
        """Create a new token for a user."""
        token = secrets.token_urlsafe(24)
        self._tokens[token] = user_id
        logger.info(f"Session issued for user {user_id}")
        return token

    def resolve(self, token: Optional[str]) -> Optional[str]:
        """Return the user id behind a token, or None."""
        if not token:
            return None
        return self._tokens.get(token)

    def current_user_id(self, token: Optional[str]) -> str:
        """
        Resolve the caller's user id.

        Raises:
            Unauthenticated: if the token is missing or unknown
        """
        user_id = self.resolve(token)
        if user_id is None:
            raise Unauthenticated()
        return user_id

    def revoke(self, token: str) -> bool:
        """Forget a token. Returns True if it existed."""
        return self._tokens.pop(token, None) is not None
