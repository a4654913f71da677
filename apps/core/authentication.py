"""
DRF authentication backed by the hosted platform's auth tokens.
"""

import logging
import uuid

from rest_framework import authentication, exceptions

from apps.core.supabase_client import AuthServiceError, SupabaseAuthClient

logger = logging.getLogger(__name__)


class SupabaseUser:
    """
    The authenticated shop owner for a request.

    Only carries what the platform returns. There is no local user row.
    """

    is_authenticated = True
    is_anonymous = False
    is_active = True
    is_staff = False

    def __init__(self, raw):
        self.raw = raw
        self.id = uuid.UUID(str(raw["id"]))
        self.email = raw.get("email") or ""

    @property
    def pk(self):
        return self.id

    def __str__(self):
        return self.email or str(self.id)

    def __eq__(self, other):
        return isinstance(other, SupabaseUser) and other.id == self.id

    def __hash__(self):
        return hash(self.id)


class SupabaseAuthentication(authentication.BaseAuthentication):
    """
    Reads the platform access token from ``Authorization: Bearer <token>``,
    falling back to the ``token`` query parameter so invoice links opened in a
    new window still authenticate.
    """

    keyword = "Bearer"
    query_param = "token"

    def get_token(self, request):
        header = authentication.get_authorization_header(request).split()
        if header and header[0].lower() == self.keyword.lower().encode():
            if len(header) != 2:
                raise exceptions.AuthenticationFailed("Unauthorized: Invalid token")
            try:
                return header[1].decode(), "header"
            except UnicodeError:
                raise exceptions.AuthenticationFailed("Unauthorized: Invalid token")

        token = request.query_params.get(self.query_param)
        if token:
            return token, "query"
        return None, None

    def authenticate(self, request):
        token, source = self.get_token(request)
        if not token:
            return None

        try:
            raw = SupabaseAuthClient().get_user(token)
            user = SupabaseUser(raw)
        except (AuthServiceError, ValueError, KeyError) as e:
            logger.warning(f"Rejected platform token from {source}: {e}")
            raise exceptions.AuthenticationFailed("Unauthorized: Invalid token")

        # Invoice links keep the token in the URL only when it arrived that way
        request.token_in_query = source == "query"
        logger.debug(f"Authenticated platform user {user.id}")
        return user, token

    def authenticate_header(self, request):
        return self.keyword
