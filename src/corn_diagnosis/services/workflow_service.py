"""Service layer – the diagnosis workflow state machine.

::

    idle ──select──▶ image_staged ──submit──▶ submitting ──▶ result_ready
      ▲                  ▲                                 └─▶ failed
      └──── continue ────┴──────────── select (any state but submitting)

Only ``submit()`` suspends; everything else is synchronous. While a call is
in flight, further ``submit()`` and ``select_image()`` calls are ignored.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.corn_diagnosis.errors import NotAnImageError
from src.corn_diagnosis.schemas.history import HistoryRecord
from src.corn_diagnosis.schemas.predict import (
    FailureKind,
    PredictionFailure,
    PredictionSuccess,
    RankedEntry,
)
from src.corn_diagnosis.schemas.upload import CandidateInfo, ImageCandidate
from src.corn_diagnosis.schemas.workflow import (
    ConnectionState,
    ConnectionStatus,
    WorkflowSnapshot,
    WorkflowState,
)
from src.corn_diagnosis.services import intake_service, ranking_service
from src.corn_diagnosis.services.history_service import HistoryLedger
from src.corn_diagnosis.services.prediction_service import PredictionClient

logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    ConnectionState.CHECKING: "Analizando imagen...",
    ConnectionState.ONLINE: "Análisis completado exitosamente",
    ConnectionState.OFFLINE: "Error en el análisis",
}


class WorkflowController:
    """Owns the staged candidate and the current outcome of one user session."""

    def __init__(
        self,
        client: PredictionClient,
        ledger: HistoryLedger,
        show_connection_status: bool = False,
    ) -> None:
        self.client = client
        self.ledger = ledger
        self.show_connection_status = show_connection_status

        self._state = WorkflowState.IDLE
        self._candidate: Optional[ImageCandidate] = None
        self._result: Optional[PredictionSuccess] = None
        self._ranking: tuple[RankedEntry, ...] = ()
        self._failure: Optional[PredictionFailure] = None
        self._connection = ConnectionStatus()

        self.ledger.load()

    # ── read-only views ──
    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def candidate(self) -> Optional[ImageCandidate]:
        return self._candidate

    @property
    def result(self) -> Optional[PredictionSuccess]:
        return self._result

    @property
    def ranking(self) -> tuple[RankedEntry, ...]:
        return self._ranking

    @property
    def failure(self) -> Optional[PredictionFailure]:
        return self._failure

    @property
    def history(self) -> tuple[HistoryRecord, ...]:
        return self.ledger.records

    @property
    def connection(self) -> ConnectionStatus:
        return self._connection

    # ── user actions ──
    def select_image(self, data: bytes, media_type: Optional[str], file_name: Optional[str] = None) -> WorkflowState:
        """Stage a new image, discarding any previous candidate and outcome."""
        if self._state is WorkflowState.SUBMITTING:
            logger.warning("Ignoring image selection while a prediction is in flight.")
            return self._state

        self._clear_outcome()
        try:
            self._candidate = intake_service.validate(data, media_type, file_name)
        except NotAnImageError as exc:
            self._candidate = None
            self._failure = PredictionFailure(kind=FailureKind.NOT_AN_IMAGE, message=str(exc))
            self._state = WorkflowState.FAILED
            return self._state

        logger.info("Staged %s (%s, %d bytes).", self._candidate.file_name, self._candidate.media_type, self._candidate.size)
        self._state = WorkflowState.IMAGE_STAGED
        return self._state

    async def submit(self) -> WorkflowState:
        """Classify the staged candidate. No-op while already submitting."""
        if self._state is WorkflowState.SUBMITTING:
            logger.debug("Submit ignored: a prediction is already in flight.")
            return self._state
        if self._candidate is None:
            logger.info("Submit ignored: no image staged.")
            return self._state

        candidate = self._candidate
        self._clear_outcome()
        self._state = WorkflowState.SUBMITTING
        self._set_connection(ConnectionState.CHECKING)

        try:
            outcome = await self.client.classify(candidate)
            if isinstance(outcome, PredictionSuccess):
                ranking = ranking_service.rank(outcome.probabilities)
                self.ledger.record(outcome, candidate.file_name)
        except Exception as exc:
            # the controller must never be left in ``submitting``
            self._fail(PredictionFailure(
                kind=FailureKind.PROTOCOL_ERROR,
                message=f"Error al analizar la imagen: {exc}",
            ))
            raise

        if isinstance(outcome, PredictionFailure):
            logger.info("Prediction failed (%s): %s", outcome.kind.value, outcome.message)
            self._fail(outcome)
            return self._state

        self._result = outcome
        self._ranking = ranking
        self._state = WorkflowState.RESULT_READY
        self._set_connection(ConnectionState.ONLINE)
        logger.info("✅ Diagnosis: %s (%s)", outcome.predicted_class, outcome.confidence)
        return self._state

    def continue_analysis(self) -> WorkflowState:
        """Reset to ``idle`` after a result or a failure."""
        if self._state not in (WorkflowState.RESULT_READY, WorkflowState.FAILED):
            logger.debug("Continue ignored in state %s.", self._state.value)
            return self._state
        self._candidate = None
        self._clear_outcome()
        self._connection = ConnectionStatus()
        self._state = WorkflowState.IDLE
        return self._state

    def clear_history(self) -> None:
        """Empty the ledger. The UI must have the user confirm this first."""
        self.ledger.clear()

    # ── presentation ──
    def snapshot(self) -> WorkflowSnapshot:
        candidate_info = None
        if self._candidate is not None:
            candidate_info = CandidateInfo(
                file_name=self._candidate.file_name,
                media_type=self._candidate.media_type,
                size=self._candidate.size,
            )
        return WorkflowSnapshot(
            state=self._state,
            candidate=candidate_info,
            diagnosis=ranking_service.display_name(self._result.predicted_class) if self._result else None,
            confidence=self._result.confidence if self._result else None,
            ranking=list(self._ranking),
            failure=self._failure,
            history=list(self.ledger.records),
            connection=self._connection,
        )

    # ── helpers ──
    def _clear_outcome(self) -> None:
        self._result = None
        self._ranking = ()
        self._failure = None

    def _fail(self, failure: PredictionFailure) -> None:
        self._failure = failure
        self._state = WorkflowState.FAILED
        self._set_connection(ConnectionState.OFFLINE)

    def _set_connection(self, state: ConnectionState) -> None:
        if self.show_connection_status:
            self._connection = ConnectionStatus(state=state, message=_STATUS_MESSAGES[state])
