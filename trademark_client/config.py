"""
Runtime configuration for the trademark opposition client.

Values come from environment variables; nothing is validated until a call
actually needs it, so a missing base URL only fails the run that uses it.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

BASE_URL_ENV = "TRADEMARK_API_BASE_URL"
TOKEN_ENV = "TRADEMARK_API_TOKEN"
AUDIENCE_ENV = "TRADEMARK_API_AUDIENCE"
TIMEOUT_ENV = "TRADEMARK_API_TIMEOUT"

DEFAULT_TIMEOUT = 30.0  # seconds; LLM-backed endpoints are slow


class ClientSettings(BaseModel):
    """
    Settings for talking to the prediction service.

    Attributes:
        api_base_url: Base URL the endpoint paths are appended to.
        api_token: Fixed bearer token, for service accounts and local use.
        id_token_audience: Audience for Google-signed ID tokens.
        timeout: Transport timeout for each request, in seconds.
    """

    api_base_url: Optional[str] = Field(default=None, description="Prediction service base URL.")
    api_token: Optional[str] = Field(default=None, description="Static bearer token.")
    id_token_audience: Optional[str] = Field(default=None, description="Google ID token audience.")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientSettings":
        """Read settings from `environ` (defaults to os.environ); empty values count as unset."""
        env = os.environ if environ is None else environ
        timeout = env.get(TIMEOUT_ENV, "").strip()
        return cls(
            api_base_url=env.get(BASE_URL_ENV, "").strip() or None,
            api_token=env.get(TOKEN_ENV, "").strip() or None,
            id_token_audience=env.get(AUDIENCE_ENV, "").strip() or None,
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        )
