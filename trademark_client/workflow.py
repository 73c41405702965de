"""
Orchestration of one opposition prediction run.

A run moves Idle -> MarkSimilarity -> GoodsServicesSimilarity -> CasePrediction
-> Done, feeding each stage's output into the next. The first failure moves it
to Error and stops it. Every run gets a new id; a stage result is only written
if its run is still the current one, so responses that arrive after a clear or
a newer submission are dropped.
"""

import copy
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from trademark_client.api_client import TrademarkApiClient
from trademark_client.errors import FormValidationError
from trademark_client.form import OppositionForm, build_prediction_request
from trademark_client.logger import get_logger, with_context
from trademark_client.models import (
    CasePredictionRequest,
    CasePredictionResult,
    GoodServiceLikelihoodOutput,
    MarkSimilarityOutput,
)
from trademark_client.reconcile import compare_goods_services

logger = get_logger(__name__)


class WorkflowStage(str, Enum):
    IDLE = "idle"
    MARK_SIMILARITY = "mark_similarity"
    GOODS_SERVICES_SIMILARITY = "goods_services_similarity"
    CASE_PREDICTION = "case_prediction"
    DONE = "done"
    ERROR = "error"


# Progress indicator value shown while (or after) a stage runs
STAGE_PROGRESS = {
    WorkflowStage.IDLE: 0,
    WorkflowStage.MARK_SIMILARITY: 1,
    WorkflowStage.GOODS_SERVICES_SIMILARITY: 2,
    WorkflowStage.CASE_PREDICTION: 3,
    WorkflowStage.DONE: 3,
}

_IN_FLIGHT = frozenset({
    WorkflowStage.MARK_SIMILARITY,
    WorkflowStage.GOODS_SERVICES_SIMILARITY,
    WorkflowStage.CASE_PREDICTION,
})


class WorkflowState(BaseModel):
    """
    Everything the form shows about the current run.

    Attributes:
        run_id: Identity of the run this state belongs to.
        stage: Current stage of the run.
        progress: 0-3, the number of the stage reached.
        mark_similarity: Stage 1 output, once it succeeded.
        goods_services_likelihoods: Reconciled stage 2 output, once it succeeded.
        result: Final prediction, with the reconciled likelihoods.
        validation_error: Message of the form rule that blocked the submission.
            Cleared when a run starts or finishes.
        error: The exception that moved the run to Error.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    run_id: int = 0
    stage: WorkflowStage = WorkflowStage.IDLE
    progress: int = Field(default=0, ge=0, le=3)
    mark_similarity: Optional[MarkSimilarityOutput] = None
    goods_services_likelihoods: Optional[List[GoodServiceLikelihoodOutput]] = None
    result: Optional[CasePredictionResult] = None
    validation_error: Optional[str] = None
    error: Optional[Exception] = Field(default=None, exclude=True)

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__

    @property
    def is_running(self) -> bool:
        return self.stage in _IN_FLIGHT


class RunSuperseded(Exception):
    """Internal signal: the run was cleared or replaced while awaiting a response."""


class OppositionWorkflow:
    """
    Drives the three prediction stages for one form instance.

    Args:
        client: Prediction service client used for every stage.
    """

    def __init__(self, client: TrademarkApiClient):
        self._client = client
        self._run_counter = 0
        self._state = WorkflowState()

    @property
    def state(self) -> WorkflowState:
        """A snapshot of the current state."""
        state = self._state
        # Nested lists are mutable even inside frozen models
        return state.model_copy(update={
            "goods_services_likelihoods": copy.deepcopy(state.goods_services_likelihoods),
            "result": copy.deepcopy(state.result),
        })

    def clear(self) -> None:
        """Discard all results and return to Idle, abandoning any run in flight."""
        if self._state.is_running:
            logger.warning(
                "Clearing while a run is in flight; its responses will be ignored",
                extra=with_context(run_id=self._state.run_id, stage=self._state.stage.value),
            )
        self._reset()

    def _reset(self) -> int:
        self._run_counter += 1
        self._state = WorkflowState(run_id=self._run_counter)
        return self._run_counter

    def _ensure_current(self, run_id: int) -> None:
        if self._state.run_id != run_id:
            raise RunSuperseded(run_id)

    def _enter(self, run_id: int, stage: WorkflowStage) -> None:
        self._ensure_current(run_id)
        self._state.stage = stage
        self._state.progress = STAGE_PROGRESS[stage]
        logger.info("Entering stage", extra=with_context(run_id=run_id, stage=stage.value))

    async def submit(self, form: OppositionForm) -> Optional[WorkflowState]:
        """
        Start a fresh run for `form` and drive it to Done or Error.

        A form that fails validation only records `validation_error`; earlier
        results and any run in flight are left alone. Otherwise earlier results,
        including those of a run still in flight, are discarded first. Failures
        are captured in the returned state rather than raised.

        Returns:
            The final state of this run, or None if it was superseded by a
            clear or a newer submission before it finished. A rejected form
            returns the current state with `validation_error` set.
        """
        try:
            request = build_prediction_request(form)
        except FormValidationError as e:
            logger.info("Form rejected", extra=with_context(run_id=self._state.run_id, reason=str(e)))
            self._state.validation_error = str(e)
            return self.state

        if self._state.is_running:
            logger.warning(
                "New submission supersedes run in flight",
                extra=with_context(run_id=self._state.run_id, stage=self._state.stage.value),
            )
        run_id = self._reset()

        try:
            self._enter(run_id, WorkflowStage.MARK_SIMILARITY)
            mark_similarity = await self._client.get_mark_similarity(
                request.mark_similarity_request()
            )
            self._ensure_current(run_id)
            self._state.mark_similarity = mark_similarity

            self._enter(run_id, WorkflowStage.GOODS_SERVICES_SIMILARITY)
            likelihoods = await compare_goods_services(
                self._client, request.applicant_goods, request.opponent_goods, mark_similarity
            )
            self._ensure_current(run_id)
            self._state.goods_services_likelihoods = likelihoods

            self._enter(run_id, WorkflowStage.CASE_PREDICTION)
            prediction = await self._client.get_case_prediction(
                CasePredictionRequest(
                    mark_similarity=mark_similarity,
                    goods_services_likelihoods=likelihoods,
                )
            )
            self._ensure_current(run_id)
            # The service may echo altered terms; keep the reconciled list
            self._state.result = prediction.model_copy(
                update={"goods_services_likelihoods": likelihoods}
            )
            self._state.stage = WorkflowStage.DONE
            self._state.validation_error = None
            self._state.progress = STAGE_PROGRESS[WorkflowStage.DONE]
            logger.info(
                "Prediction complete",
                extra=with_context(run_id=run_id, outcome=prediction.opposition_outcome.result.value),
            )
        except RunSuperseded:
            logger.warning("Discarding results of superseded run", extra=with_context(run_id=run_id))
            return None
        except Exception as e:
            if self._state.run_id != run_id:
                logger.warning(
                    "Discarding failure of superseded run",
                    extra=with_context(run_id=run_id, error=str(e)),
                )
                return None
            logger.error(
                "Prediction run failed",
                extra=with_context(
                    run_id=run_id,
                    stage=self._state.stage.value,
                    exception_type=type(e).__name__,
                    exception_message=str(e),
                ),
            )
            self._state.stage = WorkflowStage.ERROR
            self._state.validation_error = None
            self._state.error = e

        return self.state
