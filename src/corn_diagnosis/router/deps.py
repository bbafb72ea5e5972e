"""Router helpers – access to the application's workflow controller."""

from fastapi import Request

from src.corn_diagnosis.services.workflow_service import WorkflowController


def get_controller(request: Request) -> WorkflowController:
    return request.app.state.controller
