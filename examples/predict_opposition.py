#!/usr/bin/env python
"""
Example script for running an opposition prediction against the service.

This script fills in the opposition form, drives the three-step workflow
(mark similarity, goods/services similarity, case prediction) and prints
the result. Configure the service with TRADEMARK_API_BASE_URL and either
TRADEMARK_API_TOKEN or TRADEMARK_API_AUDIENCE.
"""

import asyncio
import json
import sys
from typing import Any, Dict

from trademark_client.api_client import TrademarkApiClient
from trademark_client.config import ClientSettings
from trademark_client.form import OppositionForm
from trademark_client.presentation import (
    describe_likelihood,
    format_score,
    summarize_likelihoods,
)
from trademark_client.workflow import OppositionWorkflow, WorkflowStage, WorkflowState

# Sample opposition case
SAMPLE_FORM = {
    "applicant_wordmark": "SKYWORD",
    "opponent_wordmark": "SKYWORKS",
    "opponent_is_registered": True,
    "opponent_registration_number": "EU12345678",
    "applicant_goods": [
        {"term": "Computer software for content marketing", "nice_class": "9"},
        {"term": "Content marketing services", "nice_class": "35"}
    ],
    "opponent_goods": [
        {"term": "Semiconductors", "nice_class": "9"},
        {"term": "Design of integrated circuits", "nice_class": "42"}
    ]
}


def display_results(state: WorkflowState) -> None:
    """
    Display the prediction results in a readable format.

    Args:
        state: Final state of the prediction run
    """
    if state.validation_error:
        print(f"Form error: {state.validation_error}")
        return
    if state.stage == WorkflowStage.ERROR:
        print(f"Prediction failed: {state.error_message}")
        return

    result = state.result
    print("\n====== TRADEMARK OPPOSITION PREDICTION ======\n")

    mark = result.mark_similarity
    print("MARK COMPARISON:")
    print(f"- Visual Similarity: {mark.visual.value}")
    print(f"- Aural Similarity: {mark.aural.value}")
    print(f"- Conceptual Similarity: {mark.conceptual.value}")
    print(f"- Overall Similarity: {mark.overall.value}")

    summary = summarize_likelihoods(result.goods_services_likelihoods)
    print(f"\nGOODS/SERVICES COMPARISONS: {summary.total} "
          f"({summary.confusing} confusing, {summary.high_similarity} highly similar)")
    for item in result.goods_services_likelihoods:
        print(f"\n- {item.applicant_good.term} (Class {item.applicant_good.nice_class}) vs "
              f"{item.opponent_good.term} (Class {item.opponent_good.nice_class}): "
              f"{format_score(item.similarity_score)}")
        print(f"  {describe_likelihood(item)}")

    outcome = result.opposition_outcome
    print(f"\nOUTCOME: {outcome.result.value} (confidence {format_score(outcome.confidence)})")
    print("\nREASONING:")
    print(outcome.reasoning)


async def main(form_data: Dict[str, Any] = None) -> None:
    """
    Main function to run the example.

    Args:
        form_data: Optional custom form data
    """
    # Use sample data if none provided
    if form_data is None:
        form_data = SAMPLE_FORM

    form = OppositionForm.model_validate(form_data)
    workflow = OppositionWorkflow(TrademarkApiClient.from_settings(ClientSettings.from_env()))

    print(f"Comparing '{form.applicant_wordmark}' vs '{form.opponent_wordmark}'")
    state = await workflow.submit(form)
    display_results(state)


if __name__ == "__main__":
    # Check if custom JSON file path is provided
    if len(sys.argv) > 1:
        with open(sys.argv[1], 'r') as f:
            custom_data = json.load(f)
        asyncio.run(main(custom_data))
    else:
        asyncio.run(main())
