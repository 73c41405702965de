"""
Bearer credentials for the prediction service.

The remote call adapter only sees a CredentialProvider; where the token comes
from (a fixed service token, an interactive identity session, Google-signed ID
tokens) is decided once, at construction time.
"""

import asyncio
from typing import Any, Optional, Protocol, runtime_checkable

import google.auth.exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from trademark_client.config import ClientSettings
from trademark_client.errors import AuthenticationError
from trademark_client.logger import get_logger

logger = get_logger(__name__)

NOT_LOGGED_IN = "User is not logged in. Please log in to use this feature."


@runtime_checkable
class CredentialProvider(Protocol):
    async def current_token(self) -> str:
        """
        Returns the bearer token for the current session.
        Raises AuthenticationError if there is no session or the token
        cannot be obtained.
        """
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    """The identity collaborator: a current user and a way to mint their ID token."""

    def get_current_user(self) -> Optional[Any]:
        ...

    async def get_id_token(self, user: Any) -> str:
        ...


class StaticTokenProvider:
    """A fixed token. `None` models a signed-out session."""

    def __init__(self, token: Optional[str]):
        self._token = token

    async def current_token(self) -> str:
        if not self._token:
            raise AuthenticationError(NOT_LOGGED_IN)
        return self._token


class IdentityCredentialProvider:
    """Adapts an IdentityProvider to the CredentialProvider interface."""

    def __init__(self, identity: IdentityProvider):
        self._identity = identity

    async def current_token(self) -> str:
        user = self._identity.get_current_user()
        if user is None:
            raise AuthenticationError(NOT_LOGGED_IN)
        try:
            token = await self._identity.get_id_token(user)
        except AuthenticationError:
            raise
        except Exception as e:
            logger.error(f"Failed to retrieve ID token: {str(e)}")
            raise AuthenticationError(f"Could not retrieve an ID token: {str(e)}") from e
        if not token:
            raise AuthenticationError(NOT_LOGGED_IN)
        return token


class GoogleIdTokenProvider:
    """
    Google-signed ID tokens for the given audience, from Application Default
    Credentials (service account, metadata server, ...).
    """

    def __init__(self, audience: str):
        self._audience = audience

    def _fetch(self) -> str:
        return id_token.fetch_id_token(google_requests.Request(), self._audience)

    async def current_token(self) -> str:
        # fetch_id_token blocks on HTTP, keep it off the event loop
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._fetch)
        except google.auth.exceptions.GoogleAuthError as e:
            logger.error(f"Google ID token fetch failed for audience {self._audience}: {str(e)}")
            raise AuthenticationError(f"Could not obtain a Google ID token: {str(e)}") from e


def credentials_from_settings(settings: ClientSettings) -> CredentialProvider:
    """
    Pick a credential provider for the settings.

    A static token wins over a Google audience; with neither, every call
    fails with AuthenticationError.
    """
    if settings.api_token:
        return StaticTokenProvider(settings.api_token)
    if settings.id_token_audience:
        return GoogleIdTokenProvider(settings.id_token_audience)
    logger.warning("No API token or ID token audience configured; protected calls will fail until one is set")
    return StaticTokenProvider(None)
