"""Router – diagnosis history."""

from fastapi import APIRouter, Depends, HTTPException

from src.corn_diagnosis.router.deps import get_controller
from src.corn_diagnosis.schemas.history import HistoryResponse
from src.corn_diagnosis.services.workflow_service import WorkflowController

router = APIRouter(prefix="/history", tags=["History"])


@router.get("", response_model=HistoryResponse)
def get_history(controller: WorkflowController = Depends(get_controller)) -> HistoryResponse:
    """Past diagnoses, newest first."""
    records = list(controller.history)
    return HistoryResponse(count=len(records), records=records)


@router.delete("", response_model=HistoryResponse)
def clear_history(
    confirm: bool = False,
    controller: WorkflowController = Depends(get_controller),
) -> HistoryResponse:
    """
    Delete every history record.

    Irreversible: the UI must ask the user first and then call this with
    ``confirm=true``.
    """
    if not confirm:
        raise HTTPException(
            status_code=400,
            detail="Confirmation required: repeat the request with confirm=true.",
        )
    controller.clear_history()
    return HistoryResponse(count=0, records=[])
