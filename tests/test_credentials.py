"""Tests for credential providers and client settings."""

import logging
from unittest.mock import MagicMock

import google.auth.exceptions
import pytest

from trademark_client.config import DEFAULT_TIMEOUT, ClientSettings
from trademark_client.credentials import (
    CredentialProvider,
    GoogleIdTokenProvider,
    IdentityCredentialProvider,
    StaticTokenProvider,
    credentials_from_settings,
)
from trademark_client.errors import AuthenticationError


class FakeIdentity:
    """Identity collaborator with an optional signed-in user."""

    def __init__(self, user=None, token="id-token", error=None):
        self.user = user
        self.token = token
        self.error = error
        self.requested_for = []

    def get_current_user(self):
        return self.user

    async def get_id_token(self, user):
        self.requested_for.append(user)
        if self.error:
            raise self.error
        return self.token


@pytest.mark.asyncio
async def test_static_token():
    provider = StaticTokenProvider("abc")
    assert isinstance(provider, CredentialProvider)
    assert await provider.current_token() == "abc"


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, ""])
async def test_static_token_missing(token) -> None:
    with pytest.raises(AuthenticationError) as exc_info:
        await StaticTokenProvider(token).current_token()
    assert "Please log in" in str(exc_info.value)


@pytest.mark.asyncio
async def test_identity_provider_uses_current_user():
    identity = FakeIdentity(user="user-1", token="tok")
    assert await IdentityCredentialProvider(identity).current_token() == "tok"
    assert identity.requested_for == ["user-1"]


@pytest.mark.asyncio
async def test_identity_provider_without_user():
    identity = FakeIdentity(user=None)
    with pytest.raises(AuthenticationError):
        await IdentityCredentialProvider(identity).current_token()
    assert identity.requested_for == []


@pytest.mark.asyncio
async def test_identity_token_failure_is_authentication_error():
    identity = FakeIdentity(user="user-1", error=RuntimeError("token expired"))
    with pytest.raises(AuthenticationError) as exc_info:
        await IdentityCredentialProvider(identity).current_token()
    assert "token expired" in str(exc_info.value)


@pytest.mark.asyncio
async def test_google_id_token(monkeypatch):
    fetch = MagicMock(return_value="google-token")
    monkeypatch.setattr("trademark_client.credentials.id_token.fetch_id_token", fetch)

    token = await GoogleIdTokenProvider("https://api.example.com").current_token()

    assert token == "google-token"
    assert fetch.call_args.args[1] == "https://api.example.com"


@pytest.mark.asyncio
async def test_google_id_token_without_credentials(monkeypatch):
    fetch = MagicMock(side_effect=google.auth.exceptions.DefaultCredentialsError("no ADC"))
    monkeypatch.setattr("trademark_client.credentials.id_token.fetch_id_token", fetch)

    with pytest.raises(AuthenticationError) as exc_info:
        await GoogleIdTokenProvider("https://api.example.com").current_token()

    assert "no ADC" in str(exc_info.value)


def test_credentials_from_settings_prefers_static_token():
    settings = ClientSettings(api_token="abc", id_token_audience="https://api.example.com")
    assert isinstance(credentials_from_settings(settings), StaticTokenProvider)


def test_credentials_from_settings_google_audience():
    settings = ClientSettings(id_token_audience="https://api.example.com")
    assert isinstance(credentials_from_settings(settings), GoogleIdTokenProvider)


@pytest.mark.asyncio
async def test_credentials_from_settings_unauthenticated(caplog):
    with caplog.at_level(logging.WARNING, logger="trademark_client.credentials"):
        provider = credentials_from_settings(ClientSettings())
    assert "protected calls will fail" in caplog.text
    assert "unauthenticated" not in caplog.text
    with pytest.raises(AuthenticationError):
        await provider.current_token()


def test_settings_from_env():
    settings = ClientSettings.from_env({
        "TRADEMARK_API_BASE_URL": " https://api.example.com ",
        "TRADEMARK_API_TOKEN": "abc",
        "TRADEMARK_API_TIMEOUT": "12.5",
    })
    assert settings.api_base_url == "https://api.example.com"
    assert settings.api_token == "abc"
    assert settings.id_token_audience is None
    assert settings.timeout == pytest.approx(12.5)


def test_settings_from_empty_env():
    settings = ClientSettings.from_env({"TRADEMARK_API_BASE_URL": ""})
    assert settings.api_base_url is None
    assert settings.api_token is None
    assert settings.timeout == DEFAULT_TIMEOUT
