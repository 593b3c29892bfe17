"""
Authentication Module

Handles API authentication using a single shared secret.
The secret is injected into the Authenticator when the app is built;
nothing here reads the environment.
"""

import hmac
import logging
from typing import Optional

from fastapi import Request, Security
from fastapi.security import APIKeyHeader, APIKeyQuery

from .errors import InvalidCredential, MissingCredential


logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
API_KEY_QUERY = "api_key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)
api_key_query = APIKeyQuery(name=API_KEY_QUERY, auto_error=False)


class Authenticator:
    """Compares caller credentials against the process-wide shared secret."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Authenticator requires a non-empty secret")
        self._secret = secret.encode("utf-8")
        self._secret_length = len(secret)

    @property
    def secret_length(self) -> int:
        return self._secret_length

    def verify(self, credential: Optional[str]) -> str:
        """
        Verify a caller-supplied credential.

        Args:
            credential: Value from the x-api-key header or api_key query param

        Returns:
            The credential if it matches

        Raises:
            MissingCredential: no credential supplied
            InvalidCredential: credential does not match the shared secret
        """
        if not credential:
            raise MissingCredential()

        if not hmac.compare_digest(credential.encode("utf-8"), self._secret):
            logger.warning("Rejected request with invalid API key")
            raise InvalidCredential()

        return credential


async def require_api_key(
    request: Request,
    header_key: Optional[str] = Security(api_key_header),
    query_key: Optional[str] = Security(api_key_query),
) -> str:
    """
    FastAPI dependency guarding the generation endpoints.

    The header wins over the query parameter when both are present.
    """
    authenticator: Authenticator = request.app.state.authenticator
    return authenticator.verify(header_key or query_key)
