from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class DiagnosisClass(str, Enum):
    """Diagnoses the remote classifier is known to return."""
    BLIGHT = "Blight"
    COMMON_RUST = "Common_Rust"
    GRAY_LEAF_SPOT = "Gray_Leaf_Spot"
    HEALTHY = "Healthy"


def parse_label(label: str) -> Optional[DiagnosisClass]:
    """Return the known class for *label*, or ``None`` for an unknown label.

    Unknown labels are never an error: callers keep the raw string.
    """
    try:
        return DiagnosisClass(label)
    except ValueError:
        return None


class FailureKind(str, Enum):
    NOT_AN_IMAGE = "not_an_image"
    CONNECTION_ERROR = "connection_error"
    SERVER_ERROR = "server_error"
    PROTOCOL_ERROR = "protocol_error"
    MALFORMED_RESPONSE = "malformed_response"


class RemotePrediction(BaseModel):
    """Body returned by the remote ``/predict`` endpoint."""
    predicted_class: str = Field(min_length=1)
    confidence: str = Field(min_length=1)
    all_probabilities: dict[str, str] = Field(min_length=1)


class PredictionSuccess(BaseModel):
    """Successful classification."""
    predicted_class: str
    confidence: str
    probabilities: dict[str, str]

    @property
    def diagnosis(self) -> Optional[DiagnosisClass]:
        return parse_label(self.predicted_class)


class PredictionFailure(BaseModel):
    """Failed classification (or rejected intake)."""
    kind: FailureKind
    message: str
    status_code: Optional[int] = None
    body: Optional[str] = None


PredictionOutcome = Union[PredictionSuccess, PredictionFailure]


class RankedEntry(BaseModel):
    """Single class probability positioned within a ranking."""
    label: str
    display_name: str
    percentage: Optional[float]  # None when the text could not be parsed
    percentage_text: str
    is_top: bool = False
