"""
Client for the hosted platform's auth service.

User tokens issued to the frontend are verified by asking the platform who
they belong to. Successful lookups are cached briefly so a burst of requests
from one page load does not hit the auth service for every call.
"""

import hashlib
import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.cache import cache

import requests

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    """Raised when a token cannot be verified by the auth service."""

    pass


class SupabaseAuthClient:
    """
    Thin wrapper around ``GET {SUPABASE_URL}/auth/v1/user``.
    """

    USER_PATH = "/auth/v1/user"
    CACHE_PREFIX = "platform_auth_user"

    def __init__(self, base_url: Optional[str] = None, anon_key: Optional[str] = None):
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.anon_key = anon_key or settings.SUPABASE_ANON_KEY
        self.timeout = getattr(settings, "SUPABASE_AUTH_TIMEOUT", 10)
        self.cache_seconds = getattr(settings, "SUPABASE_AUTH_CACHE_SECONDS", 60)

    def _cache_key(self, token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"{self.CACHE_PREFIX}:{digest}"

    def get_user(self, token: str) -> Dict[str, Any]:
        """
        Return the auth user JSON for ``token``.

        Raises:
            AuthServiceError: If the token is rejected or the service is unreachable
        """
        if not self.base_url:
            raise AuthServiceError("SUPABASE_URL not configured in settings")

        cache_key = self._cache_key(token)
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token}",
        }
        try:
            response = requests.get(
                f"{self.base_url}{self.USER_PATH}", headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Auth service request failed: {e}")
            raise AuthServiceError(f"Auth service unreachable: {e}")

        if response.status_code != 200:
            logger.info(f"Auth service rejected token (status {response.status_code})")
            raise AuthServiceError(f"Token rejected with status {response.status_code}")

        try:
            user = response.json()
        except ValueError as e:
            raise AuthServiceError(f"Invalid response from auth service: {e}")

        if not isinstance(user, dict) or not user.get("id"):
            raise AuthServiceError("Auth service response has no user id")

        if self.cache_seconds:
            cache.set(cache_key, user, timeout=self.cache_seconds)
        return user
