"""
Display helpers for prediction results.

Pure functions from CasePredictionResult pieces to the values the result view
shows: severity buckets, the filter tabs over the goods/services pairs, the
summary counts and the per-pair analysis text.
"""

from enum import Enum
from typing import Callable, Dict, List

from pydantic import BaseModel

from trademark_client.models import ConfusionType, GoodServiceLikelihoodOutput

HIGH_SIMILARITY_THRESHOLD = 0.8


class Severity(str, Enum):
    HIGH = "high"
    MODERATE_HIGH = "moderate-high"
    MODERATE = "moderate"
    LOW = "low"
    VERY_LOW = "very-low"


# Lower bound of each bucket, checked from the top down
_SEVERITY_BOUNDS = [
    (0.8, Severity.HIGH),
    (0.6, Severity.MODERATE_HIGH),
    (0.4, Severity.MODERATE),
    (0.2, Severity.LOW),
]

_SEVERITY_SENTENCES = {
    Severity.HIGH: "These goods/services are highly similar, creating a strong risk of consumer confusion.",
    Severity.MODERATE_HIGH: "These goods/services have substantial similarity, posing a moderate to high risk of confusion.",
    Severity.MODERATE: "These goods/services have moderate similarity, with some potential for confusion.",
    Severity.LOW: "These goods/services have low similarity, with limited potential for confusion.",
    Severity.VERY_LOW: "These goods/services are dissimilar, with minimal risk of confusion.",
}


def severity_bucket(score: float) -> Severity:
    """Map a similarity score in [0, 1] to its severity bucket."""
    for lower_bound, severity in _SEVERITY_BOUNDS:
        if score >= lower_bound:
            return severity
    return Severity.VERY_LOW


def format_score(score: float) -> str:
    """A similarity score as a whole percentage, e.g. 0.85 -> "85%"."""
    return f"{score * 100:.0f}%"


def progress_percent(progress: int) -> int:
    """Percentage complete for the 0-3 stage progress indicator."""
    return min(max(progress, 0), 3) * 100 // 3


class LikelihoodFilter(str, Enum):
    """The filter tabs over the goods/services comparisons."""
    ALL = "all"
    CONFUSING = "confusing"
    COMPETITIVE = "competitive"
    COMPLEMENTARY = "complementary"
    HIGH_SIMILARITY = "high-similarity"


def is_high_similarity(item: GoodServiceLikelihoodOutput) -> bool:
    return item.similarity_score >= HIGH_SIMILARITY_THRESHOLD


FILTER_PREDICATES: Dict[LikelihoodFilter, Callable[[GoodServiceLikelihoodOutput], bool]] = {
    LikelihoodFilter.ALL: lambda item: True,
    LikelihoodFilter.CONFUSING: lambda item: item.likelihood_of_confusion,
    LikelihoodFilter.COMPETITIVE: lambda item: item.are_competitive,
    LikelihoodFilter.COMPLEMENTARY: lambda item: item.are_complementary,
    LikelihoodFilter.HIGH_SIMILARITY: is_high_similarity,
}


def filter_likelihoods(
    items: List[GoodServiceLikelihoodOutput],
    active: LikelihoodFilter = LikelihoodFilter.ALL,
    confusing_only: bool = False,
) -> List[GoodServiceLikelihoodOutput]:
    """
    Apply the active tab and the independent "confusing only" toggle (both must hold).
    """
    predicate = FILTER_PREDICATES[active]
    return [
        item for item in items
        if predicate(item) and (not confusing_only or item.likelihood_of_confusion)
    ]


class ComparisonSummary(BaseModel):
    """Counts shown above the goods/services comparisons."""
    total: int
    confusing: int
    high_similarity: int
    competitive: int
    complementary: int


def summarize_likelihoods(items: List[GoodServiceLikelihoodOutput]) -> ComparisonSummary:
    def count(active: LikelihoodFilter) -> int:
        return len(filter_likelihoods(items, active))

    return ComparisonSummary(
        total=len(items),
        confusing=count(LikelihoodFilter.CONFUSING),
        high_similarity=count(LikelihoodFilter.HIGH_SIMILARITY),
        competitive=count(LikelihoodFilter.COMPETITIVE),
        complementary=count(LikelihoodFilter.COMPLEMENTARY),
    )


def describe_likelihood(item: GoodServiceLikelihoodOutput) -> str:
    """The analysis paragraph shown for one goods/services pair."""
    parts = [_SEVERITY_SENTENCES[severity_bucket(item.similarity_score)]]
    if item.are_competitive:
        parts.append("They compete in the same market, which increases the likelihood of confusion.")
    if item.are_complementary:
        parts.append("They are complementary in nature, which may contribute to indirect confusion.")
    if item.likelihood_of_confusion and item.confusion_type == ConfusionType.DIRECT:
        parts.append(
            "The direct confusion risk means consumers might mistake one good/service for the other."
        )
    elif item.likelihood_of_confusion and item.confusion_type == ConfusionType.INDIRECT:
        parts.append(
            "The indirect confusion risk means consumers might believe there is a connection "
            "between the providers."
        )
    return " ".join(parts)
