"""
FastAPI application serving the opposition prediction form.

This module exposes one form instance over HTTP: submit the raw form, read
the progress and results of the current run, clear it, and browse the
goods/services comparisons with the result view's filters.
"""

from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from trademark_client import models
from trademark_client.api_client import TrademarkApiClient
from trademark_client.config import ClientSettings
from trademark_client.form import OppositionForm
from trademark_client.presentation import (
    ComparisonSummary,
    LikelihoodFilter,
    filter_likelihoods,
    progress_percent,
    summarize_likelihoods,
)
from trademark_client.workflow import OppositionWorkflow, WorkflowStage, WorkflowState

app = FastAPI(
    title="Trademark Opposition Prediction",
    description="Form backend orchestrating trademark opposition predictions",
    version="1.0.0"
)


class WorkflowView(BaseModel):
    """The state of the current run as shown to the form."""
    stage: WorkflowStage
    progress: int
    progress_percent: int
    is_running: bool
    mark_similarity: Optional[models.MarkSimilarityOutput] = None
    goods_services_likelihoods: Optional[List[models.GoodServiceLikelihoodOutput]] = None
    result: Optional[models.CasePredictionResult] = None
    summary: Optional[ComparisonSummary] = None
    error: Optional[str] = None
    validation_error: Optional[str] = None


class ComparisonsView(BaseModel):
    tab: LikelihoodFilter
    confusing_only: bool
    summary: ComparisonSummary
    comparisons: List[models.GoodServiceLikelihoodOutput]


def _to_view(state: WorkflowState) -> WorkflowView:
    likelihoods = state.goods_services_likelihoods
    return WorkflowView(
        stage=state.stage,
        progress=state.progress,
        progress_percent=progress_percent(state.progress),
        is_running=state.is_running,
        mark_similarity=state.mark_similarity,
        goods_services_likelihoods=likelihoods,
        result=state.result,
        summary=summarize_likelihoods(likelihoods) if likelihoods is not None else None,
        error=state.error_message,
        validation_error=state.validation_error,
    )


@lru_cache(maxsize=1)
def get_workflow() -> OppositionWorkflow:
    """The single form instance, configured from the environment on first use."""
    client = TrademarkApiClient.from_settings(ClientSettings.from_env())
    return OppositionWorkflow(client)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/opposition/submit", response_model=WorkflowView)
async def submit_opposition(
    form: OppositionForm, workflow: OppositionWorkflow = Depends(get_workflow)
) -> WorkflowView:
    """
    Run a prediction for the submitted form.

    Args:
        form: The raw form state

    Returns:
        WorkflowView: The final state of the run, in Done or Error
    """
    state = await workflow.submit(form)
    if state is None:
        # Replaced by a newer submission or a clear while running
        raise HTTPException(status_code=409, detail="Prediction run was superseded.")
    if state.validation_error is not None:
        raise HTTPException(status_code=422, detail=state.validation_error)
    return _to_view(state)


@app.get("/opposition/state", response_model=WorkflowView)
async def get_state(workflow: OppositionWorkflow = Depends(get_workflow)) -> WorkflowView:
    return _to_view(workflow.state)


@app.post("/opposition/clear", response_model=WorkflowView)
async def clear_opposition(workflow: OppositionWorkflow = Depends(get_workflow)) -> WorkflowView:
    workflow.clear()
    return _to_view(workflow.state)


@app.get("/opposition/comparisons", response_model=ComparisonsView)
async def get_comparisons(
    tab: LikelihoodFilter = LikelihoodFilter.ALL,
    confusing_only: bool = False,
    workflow: OppositionWorkflow = Depends(get_workflow),
) -> ComparisonsView:
    """Goods/services comparisons of the current run, filtered like the result view."""
    likelihoods = workflow.state.goods_services_likelihoods
    if likelihoods is None:
        raise HTTPException(status_code=404, detail="No goods/services comparison data available.")
    return ComparisonsView(
        tab=tab,
        confusing_only=confusing_only,
        summary=summarize_likelihoods(likelihoods),
        comparisons=filter_likelihoods(likelihoods, tab, confusing_only),
    )
