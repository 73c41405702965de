"""
Goods/services pairing and reconciliation.

The batch endpoint answers with one likelihood per (applicant, opponent) pair,
applicant goods as the outer loop. The service may normalise the terms it
echoes back, so each result is re-attached to the caller's own pair by
position before anything is displayed or sent on to the case prediction.
"""

from typing import List, Tuple

from trademark_client.api_client import TrademarkApiClient
from trademark_client.errors import ReconciliationError
from trademark_client.logger import get_logger, with_context
from trademark_client.models import (
    GoodOrService,
    GoodServiceLikelihoodOutput,
    MarkSimilarityOutput,
)

logger = get_logger(__name__)

GoodsPair = Tuple[GoodOrService, GoodOrService]


def build_pairs(
    applicant_goods: List[GoodOrService], opponent_goods: List[GoodOrService]
) -> List[GoodsPair]:
    """
    The full cross product, `pairs[i * M + j] == (applicant_goods[i], opponent_goods[j])`.
    """
    return [
        (applicant_good, opponent_good)
        for applicant_good in applicant_goods
        for opponent_good in opponent_goods
    ]


def reconcile_likelihoods(
    pairs: List[GoodsPair], results: List[GoodServiceLikelihoodOutput]
) -> List[GoodServiceLikelihoodOutput]:
    """
    Overwrite the goods echoed in each result with the requested pair at the same index.

    Raises:
        ReconciliationError: If the number of results differs from the number of pairs.
    """
    if len(results) != len(pairs):
        raise ReconciliationError(
            f"Goods/services comparison returned {len(results)} results for {len(pairs)} pairs"
        )
    return [
        result.model_copy(update={"applicant_good": applicant_good, "opponent_good": opponent_good})
        for (applicant_good, opponent_good), result in zip(pairs, results)
    ]


async def compare_goods_services(
    client: TrademarkApiClient,
    applicant_goods: List[GoodOrService],
    opponent_goods: List[GoodOrService],
    mark_similarity: MarkSimilarityOutput,
) -> List[GoodServiceLikelihoodOutput]:
    """
    Compare all goods/services pairs in one batch call and reconcile the results.

    Returns:
        List[GoodServiceLikelihoodOutput]: N x M entries carrying the caller's terms.
    """
    pairs = build_pairs(applicant_goods, opponent_goods)
    results = await client.batch_good_service_similarity(
        applicant_goods, opponent_goods, mark_similarity
    )
    try:
        return reconcile_likelihoods(pairs, results)
    except ReconciliationError:
        logger.error(
            "Batch goods/services response does not match request",
            extra=with_context(expected=len(pairs), received=len(results)),
        )
        raise
