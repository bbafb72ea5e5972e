"""Router – health check."""

from fastapi import APIRouter, Depends

from src.corn_diagnosis.router.deps import get_controller
from src.corn_diagnosis.schemas.workflow import HealthResponse
from src.corn_diagnosis.services.workflow_service import WorkflowController

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(controller: WorkflowController = Depends(get_controller)) -> HealthResponse:
    """Liveness probe; also reports the configured classifier endpoint."""
    return HealthResponse(
        status="ok",
        endpoint=controller.client.endpoint,
        workflow_state=controller.state,
        history_records=len(controller.history),
    )
