"""
HTTP client for the trademark prediction service.

Every protected call attaches the current bearer token, posts a JSON body to
one named endpoint and parses the response into the matching Pydantic model.
There are no retries: one invocation is exactly one request.
"""

import json
from typing import List, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from trademark_client import models
from trademark_client.config import DEFAULT_TIMEOUT, ClientSettings
from trademark_client.credentials import CredentialProvider, credentials_from_settings
from trademark_client.errors import ApiError, ApiResponseError, ConfigurationError
from trademark_client.logger import get_logger, with_context

logger = get_logger(__name__)

MARK_SIMILARITY_ENDPOINT = "/mark_similarity"
GS_SIMILARITY_ENDPOINT = "/gs_similarity"
BATCH_GS_SIMILARITY_ENDPOINT = "/batch_gs_similarity"
CASE_PREDICTION_ENDPOINT = "/case_prediction"
HEALTH_ENDPOINT = "/health"

T = TypeVar("T")

_LIKELIHOOD_LIST = TypeAdapter(List[models.GoodServiceLikelihoodOutput])


def _error_detail(response: httpx.Response) -> str:
    """The `detail` of a JSON error body, falling back to the status text."""
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str) and detail:
        return detail
    if detail:
        return json.dumps(detail)
    return response.reason_phrase


class TrademarkApiClient:
    """
    Authenticated access to the prediction service endpoints.

    Args:
        base_url: Service base URL; endpoint paths are appended to it.
        credentials: Source of the bearer token.
        timeout: Transport timeout per request, in seconds.
        transport: Optional httpx transport, used by tests to stub the service.
    """

    def __init__(
        self,
        base_url: Optional[str],
        credentials: CredentialProvider,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        self._credentials = credentials
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "TrademarkApiClient":
        return cls(
            base_url=settings.api_base_url,
            credentials=credentials_from_settings(settings),
            timeout=settings.timeout,
            transport=transport,
        )

    def _require_base_url(self) -> str:
        if not self.base_url:
            raise ConfigurationError("API base URL is not configured in environment variables.")
        return self.base_url

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _call_protected(
        self,
        endpoint: str,
        payload: BaseModel,
        response_type: Union[Type[T], TypeAdapter],
    ) -> T:
        """
        POST `payload` to `endpoint` under the current bearer token.

        Raises:
            ConfigurationError: If no base URL is configured.
            AuthenticationError: If there is no current session.
            ApiError: On a non-2xx response.
            ApiResponseError: If a 2xx body does not match `response_type`.
            httpx.HTTPError: On network failures.
        """
        base_url = self._require_base_url()
        token = await self._credentials.current_token()

        async with self._http_client() as client:
            response = await client.post(
                f"{base_url}{endpoint}",
                content=payload.model_dump_json(exclude_none=True),
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {token}",
                },
            )

        if not response.is_success:
            detail = _error_detail(response)
            logger.error(
                "API Error",
                extra=with_context(endpoint=endpoint, status_code=response.status_code, detail=detail),
            )
            raise ApiError(
                f"API request failed with status {response.status_code}: {detail}",
                status_code=response.status_code,
                detail=detail,
            )

        adapter = response_type if isinstance(response_type, TypeAdapter) else TypeAdapter(response_type)
        try:
            return adapter.validate_json(response.content)
        except ValidationError as e:
            logger.error(
                "Invalid API response body",
                extra=with_context(endpoint=endpoint, errors=e.error_count()),
            )
            raise ApiResponseError(
                f"Invalid response from {endpoint}: {str(e)}",
                status_code=response.status_code,
            ) from e

    async def get_mark_similarity(
        self, request: models.MarkSimilarityRequest
    ) -> models.MarkSimilarityOutput:
        """Step 1: compare the two marks."""
        return await self._call_protected(
            MARK_SIMILARITY_ENDPOINT, request, models.MarkSimilarityOutput
        )

    async def get_good_service_similarity(
        self, request: models.GsSimilarityRequest
    ) -> models.GoodServiceLikelihoodOutput:
        """Step 2, single pair: compare one applicant good/service with one opponent good/service."""
        return await self._call_protected(
            GS_SIMILARITY_ENDPOINT, request, models.GoodServiceLikelihoodOutput
        )

    async def batch_good_service_similarity(
        self,
        applicant_goods: List[models.GoodOrService],
        opponent_goods: List[models.GoodOrService],
        mark_similarity: models.MarkSimilarityOutput,
    ) -> List[models.GoodServiceLikelihoodOutput]:
        """
        Step 2, batched: compare every applicant good/service with every opponent one.

        Args:
            applicant_goods: Applicant goods/services, in form order.
            opponent_goods: Opponent goods/services, in form order.
            mark_similarity: Result of step 1.

        Returns:
            List[GoodServiceLikelihoodOutput]: One entry per pair, ordered with the
            applicant goods as the outer loop and the opponent goods as the inner loop.
        """
        batch_request = models.BatchGsSimilarityRequest(
            applicant_goods=applicant_goods,
            opponent_goods=opponent_goods,
            mark_similarity=mark_similarity,
        )
        return await self._call_protected(
            BATCH_GS_SIMILARITY_ENDPOINT, batch_request, _LIKELIHOOD_LIST
        )

    async def get_case_prediction(
        self, request: models.CasePredictionRequest
    ) -> models.CasePredictionResult:
        """Step 3: predict the opposition outcome from the mark and goods/services results."""
        return await self._call_protected(
            CASE_PREDICTION_ENDPOINT, request, models.CasePredictionResult
        )

    async def check_health(self) -> models.HealthStatus:
        """Unauthenticated liveness check of the prediction service."""
        base_url = self._require_base_url()
        async with self._http_client() as client:
            response = await client.get(f"{base_url}{HEALTH_ENDPOINT}")
        if not response.is_success:
            raise ApiError(
                f"API health check failed with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return models.HealthStatus.model_validate_json(response.content)
        except ValidationError as e:
            raise ApiResponseError(
                f"Invalid response from {HEALTH_ENDPOINT}: {str(e)}",
                status_code=response.status_code,
            ) from e
