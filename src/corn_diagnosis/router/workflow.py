"""Router – user actions on the diagnosis workflow."""

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from src.corn_diagnosis.config import settings
from src.corn_diagnosis.router.deps import get_controller
from src.corn_diagnosis.schemas.workflow import WorkflowSnapshot
from src.corn_diagnosis.services.intake_service import build_preview
from src.corn_diagnosis.services.workflow_service import WorkflowController

router = APIRouter(prefix="/workflow", tags=["Workflow"])


@router.get("", response_model=WorkflowSnapshot)
def get_workflow(controller: WorkflowController = Depends(get_controller)) -> WorkflowSnapshot:
    """Current workflow state, result or failure, and history."""
    return controller.snapshot()


@router.post("/image", response_model=WorkflowSnapshot)
async def select_image(
    file: UploadFile = File(...),
    controller: WorkflowController = Depends(get_controller),
) -> WorkflowSnapshot:
    """
    Stage an image for diagnosis.

    A non-image file moves the workflow to ``failed`` (kind
    ``not_an_image``); it is reported in the snapshot, not as an HTTP error.
    """
    content = await file.read()
    file_size = len(content)

    if file_size > settings.max_upload_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large ({file_size} bytes). "
                   f"Maximum size: {settings.max_upload_size} bytes.",
        )

    controller.select_image(content, file.content_type, file.filename)
    return controller.snapshot()


@router.get("/preview")
def get_preview(controller: WorkflowController = Depends(get_controller)) -> Response:
    """Downscaled preview of the staged image."""
    if controller.candidate is None:
        raise HTTPException(status_code=404, detail="No image staged.")
    content, media_type = build_preview(controller.candidate, settings.preview_max_pixels)
    return Response(content=content, media_type=media_type)


@router.post("/submit", response_model=WorkflowSnapshot)
async def submit(controller: WorkflowController = Depends(get_controller)) -> WorkflowSnapshot:
    """
    Send the staged image to the classifier and wait for the outcome.

    While another submission is in flight this returns immediately with
    state ``submitting``.
    """
    await controller.submit()
    return controller.snapshot()


@router.post("/continue", response_model=WorkflowSnapshot)
def continue_analysis(controller: WorkflowController = Depends(get_controller)) -> WorkflowSnapshot:
    """Start over after a result or a failure."""
    controller.continue_analysis()
    return controller.snapshot()
