"""
Exception types raised by the trademark opposition client.
"""

from typing import Optional


class TrademarkClientError(Exception):
    """Base class for all client errors."""


class ConfigurationError(TrademarkClientError):
    """The prediction service base URL is not configured."""


class AuthenticationError(TrademarkClientError):
    """There is no logged-in user, or their token could not be retrieved."""


class FormValidationError(TrademarkClientError, ValueError):
    """The submitted form failed validation; no request was issued."""


class ApiError(TrademarkClientError):
    """
    A prediction service call returned a non-success status.

    Attributes:
        status_code: HTTP status of the failed response, if there was one.
        detail: The `detail` field of the error body, or the status text.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class ApiResponseError(ApiError):
    """A successful response whose body does not match the expected schema."""


class ReconciliationError(ApiError):
    """The batch goods/services response does not line up with the requested pairs."""
