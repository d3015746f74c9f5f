"""API-key gate for the upload route."""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Header, Query, Request

from webp_upload.core.exceptions import AuthenticationError, ConfigurationError
from webp_upload.core.logging_config import get_logger

API_KEY_REQUIRED_MESSAGE = (
    "API key is required. Provide it via the Authorization header, "
    "the X-API-Key header, or the api_key query parameter."
)
INVALID_API_KEY_MESSAGE = "Invalid API key."
API_KEY_NOT_CONFIGURED_MESSAGE = "API key is not configured."

BEARER_PREFIX = "Bearer "

logger = get_logger("api.security")


def extract_api_key(
    authorization: Optional[str],
    x_api_key: Optional[str],
    api_key_param: Optional[str],
) -> Optional[str]:
    """
    Pick the caller's key: ``Authorization: Bearer``, then ``X-API-Key``,
    then the ``api_key`` query parameter. The first non-empty one wins.
    """
    if authorization and authorization.startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX):]
        if token:
            return token
    if x_api_key:
        return x_api_key
    if api_key_param:
        return api_key_param
    return None


class ApiKeyAuthenticator:
    """Checks a presented key against the single configured secret."""

    def __init__(self, secret: Optional[str]):
        self._secret = secret

    def authenticate(self, provided: Optional[str]) -> None:
        """
        Raises:
            ConfigurationError: No secret is configured on the server.
            AuthenticationError: The key is missing or does not match.
        """
        if not self._secret:
            logger.error("IMAGE_ROUTE_API_KEY is not set; rejecting upload")
            raise ConfigurationError(API_KEY_NOT_CONFIGURED_MESSAGE)
        if not provided:
            raise AuthenticationError(API_KEY_REQUIRED_MESSAGE)
        if not secrets.compare_digest(provided.encode(), self._secret.encode()):
            raise AuthenticationError(INVALID_API_KEY_MESSAGE)


async def require_api_key(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    api_key: Optional[str] = Query(default=None),
) -> None:
    """FastAPI dependency enforcing the key when auth is enabled."""
    settings = request.app.state.settings
    if not settings.auth_enabled:
        return
    provided = extract_api_key(authorization, x_api_key, api_key)
    ApiKeyAuthenticator(settings.api_key).authenticate(provided)
