from enum import Enum
from typing import Optional

from pydantic import BaseModel

from src.corn_diagnosis.schemas.history import HistoryRecord
from src.corn_diagnosis.schemas.predict import PredictionFailure, RankedEntry
from src.corn_diagnosis.schemas.upload import CandidateInfo


class WorkflowState(str, Enum):
    IDLE = "idle"
    IMAGE_STAGED = "image_staged"
    SUBMITTING = "submitting"
    RESULT_READY = "result_ready"
    FAILED = "failed"


class ConnectionState(str, Enum):
    HIDDEN = "hidden"
    CHECKING = "checking"
    ONLINE = "online"
    OFFLINE = "offline"


class ConnectionStatus(BaseModel):
    state: ConnectionState = ConnectionState.HIDDEN
    message: str = ""


class WorkflowSnapshot(BaseModel):
    """Everything the UI needs to render the current workflow."""
    state: WorkflowState
    candidate: Optional[CandidateInfo] = None
    diagnosis: Optional[str] = None
    confidence: Optional[str] = None
    ranking: list[RankedEntry] = []
    failure: Optional[PredictionFailure] = None
    history: list[HistoryRecord] = []
    connection: ConnectionStatus = ConnectionStatus()


class HealthResponse(BaseModel):
    """Response schema for GET /health."""
    status: str
    endpoint: str
    workflow_state: WorkflowState
    history_records: int
