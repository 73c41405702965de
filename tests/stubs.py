"""
Test doubles for the prediction service.

StubService answers requests through httpx.MockTransport from canned
payloads (or handlers) per path and records every request it receives.
"""

import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from trademark_client.api_client import TrademarkApiClient
from trademark_client.credentials import StaticTokenProvider
from trademark_client.form import GoodServiceEntry, OppositionForm

BASE_URL = "https://test-api.example.com"
TOKEN = "test-token"

Handler = Callable[[httpx.Request], Union[httpx.Response, Awaitable[httpx.Response]]]


def mark_similarity_payload(overall: str = "high", **overrides: Any) -> Dict[str, Any]:
    payload = {
        "visual": "high",
        "aural": "high",
        "conceptual": "moderate",
        "overall": overall,
    }
    payload.update(overrides)
    return payload


def likelihood_payload(
    applicant: Tuple[str, int],
    opponent: Tuple[str, int],
    score: float = 0.5,
    confusion_type: Optional[str] = None,
    competitive: bool = False,
    complementary: bool = False,
) -> Dict[str, Any]:
    """A batch/single-pair result; passing a confusion_type marks the pair as confusing."""
    payload = {
        "applicant_good": {"term": applicant[0], "nice_class": applicant[1]},
        "opponent_good": {"term": opponent[0], "nice_class": opponent[1]},
        "are_competitive": competitive,
        "are_complementary": complementary,
        "similarity_score": score,
        "likelihood_of_confusion": confusion_type is not None,
    }
    if confusion_type is not None:
        payload["confusion_type"] = confusion_type
    return payload


def case_prediction_payload(
    likelihoods: List[Dict[str, Any]],
    result: str = "Opposition likely to succeed",
    confidence: float = 0.85,
) -> Dict[str, Any]:
    return {
        "mark_similarity": mark_similarity_payload(),
        "goods_services_likelihoods": likelihoods,
        "opposition_outcome": {
            "result": result,
            "confidence": confidence,
            "reasoning": "The marks are similar and the goods are identical.",
        },
    }


def make_form(
    applicant_wordmark: str = "SKYWORD",
    opponent_wordmark: str = "SKYWORKS",
    applicant_goods: Sequence[Tuple[str, Any]] = (("T-shirts", "25"),),
    opponent_goods: Sequence[Tuple[str, Any]] = (("Clothing, namely shirts", "25"),),
    opponent_is_registered: bool = False,
    opponent_registration_number: str = "",
) -> OppositionForm:
    return OppositionForm(
        applicant_wordmark=applicant_wordmark,
        opponent_wordmark=opponent_wordmark,
        opponent_is_registered=opponent_is_registered,
        opponent_registration_number=opponent_registration_number,
        applicant_goods=[GoodServiceEntry(term=t, nice_class=c) for t, c in applicant_goods],
        opponent_goods=[GoodServiceEntry(term=t, nice_class=c) for t, c in opponent_goods],
    )


class StubService:
    """Canned responses keyed by request path."""

    def __init__(self) -> None:
        self.routes: Dict[str, Handler] = {}
        self.requests: List[httpx.Request] = []

    def respond(self, path: str, body: Any = None, status_code: int = 200) -> None:
        self.routes[path] = lambda request: httpx.Response(status_code, json=body)

    def handle(self, path: str, handler: Handler) -> None:
        self.routes[path] = handler

    async def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._dispatch)

    @property
    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    def client(self, token: Optional[str] = TOKEN, base_url: Optional[str] = BASE_URL) -> TrademarkApiClient:
        return TrademarkApiClient(
            base_url=base_url,
            credentials=StaticTokenProvider(token),
            transport=self.transport,
        )
