"""
Single source of truth (SSoT) for all data models in the trademark opposition client.

This module defines the Pydantic models exchanged with the prediction service,
the request payloads built from the form, and the closed enumerations used for
similarity levels and outcome labels. These models serve as the canonical schema
definitions and should never be redeclared elsewhere in the codebase.
"""

from enum import Enum
from typing import List, Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SimilarityLevel(str, Enum):
    """Ordered similarity categories returned by the prediction service."""
    DISSIMILAR = "dissimilar"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    IDENTICAL = "identical"

    @property
    def rank(self) -> int:
        """Position of the level in the ordering, 0 (dissimilar) to 4 (identical)."""
        return _SIMILARITY_ORDER.index(self)


_SIMILARITY_ORDER = list(SimilarityLevel)


class ConfusionType(str, Enum):
    DIRECT = "direct"
    INDIRECT = "indirect"


class OutcomeLabel(str, Enum):
    """The three possible results of an opposition."""
    LIKELY_TO_SUCCEED = "Opposition likely to succeed"
    PARTIALLY_SUCCEED = "Opposition may partially succeed"
    LIKELY_TO_FAIL = "Opposition likely to fail"


class _ValueModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class TrademarkMark(_ValueModel):
    """A trademark mark, consisting of text and registration details."""
    wordmark: str = Field(..., description="Literal mark text, case-sensitive")
    is_registered: bool = False
    registration_number: str | None = None

    @model_validator(mode="after")
    def _check_registration_number(self) -> "TrademarkMark":
        if self.is_registered and not (self.registration_number or "").strip():
            raise ValueError("registration_number is required when is_registered is true")
        return self


class GoodOrService(_ValueModel):
    """A good or service classification under the Nice Agreement."""
    term: str = Field(..., min_length=1)
    nice_class: Annotated[int, Field(ge=1, le=45)]


class MarkSimilarityOutput(_ValueModel):
    """Comparison results between two marks across multiple dimensions."""
    visual: SimilarityLevel
    aural: SimilarityLevel
    conceptual: SimilarityLevel
    overall: SimilarityLevel
    reasoning: str | None = None


class GoodServiceLikelihoodOutput(_ValueModel):
    """
    Likelihood-of-confusion assessment for one applicant/opponent goods pair.

    `confusion_type` is set exactly when `likelihood_of_confusion` is true.
    """
    applicant_good: GoodOrService
    opponent_good: GoodOrService
    are_competitive: bool
    are_complementary: bool
    similarity_score: Annotated[float, Field(ge=0.0, le=1.0)]
    likelihood_of_confusion: bool
    confusion_type: ConfusionType | None = None

    @model_validator(mode="after")
    def _check_confusion_type(self) -> "GoodServiceLikelihoodOutput":
        if self.likelihood_of_confusion and self.confusion_type is None:
            raise ValueError("confusion_type is required when likelihood_of_confusion is true")
        if not self.likelihood_of_confusion and self.confusion_type is not None:
            raise ValueError("confusion_type must be absent when likelihood_of_confusion is false")
        return self


class OppositionOutcome(_ValueModel):
    """Predicted result of the opposition with confidence and rationale."""
    result: OutcomeLabel
    confidence: Annotated[float, Field(ge=0.0, le=1.0)]
    reasoning: str


class CasePredictionResult(_ValueModel):
    """Complete opposition case prediction, the terminal artifact of one run."""
    mark_similarity: MarkSimilarityOutput
    goods_services_likelihoods: List[GoodServiceLikelihoodOutput]
    opposition_outcome: OppositionOutcome


class HealthStatus(_ValueModel):
    status: str


# --- Request payloads ---

class MarkSimilarityRequest(_ValueModel):
    applicant: TrademarkMark
    opponent: TrademarkMark


class GsSimilarityRequest(_ValueModel):
    applicant_good: GoodOrService
    opponent_good: GoodOrService
    mark_similarity: MarkSimilarityOutput


class BatchGsSimilarityRequest(_ValueModel):
    applicant_goods: List[GoodOrService]
    opponent_goods: List[GoodOrService]
    mark_similarity: MarkSimilarityOutput


class CasePredictionRequest(_ValueModel):
    mark_similarity: MarkSimilarityOutput
    goods_services_likelihoods: List[GoodServiceLikelihoodOutput]


class PredictionRequest(_ValueModel):
    """Validated form submission: both marks and both goods/services lists."""
    applicant: TrademarkMark
    opponent: TrademarkMark
    applicant_goods: List[GoodOrService] = Field(..., min_length=1)
    opponent_goods: List[GoodOrService] = Field(..., min_length=1)

    def mark_similarity_request(self) -> MarkSimilarityRequest:
        return MarkSimilarityRequest(applicant=self.applicant, opponent=self.opponent)
