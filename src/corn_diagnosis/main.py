"""Corn Disease Diagnosis – FastAPI application entry-point."""

from contextlib import asynccontextmanager
import logging
from collections.abc import AsyncIterator
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from src.corn_diagnosis.config import settings
from src.corn_diagnosis.router import health, history, workflow
from src.corn_diagnosis.services.history_service import HistoryLedger
from src.corn_diagnosis.services.prediction_service import PredictionClient
from src.corn_diagnosis.services.storage_service import build_store
from src.corn_diagnosis.services.workflow_service import WorkflowController

# Configure logging from settings
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_controller() -> WorkflowController:
    """Composition root: wire the controller from the global settings."""
    store = build_store(settings.history_store_file)
    ledger = HistoryLedger(store)
    client = PredictionClient()
    return WorkflowController(
        client=client,
        ledger=ledger,
        show_connection_status=settings.show_connection_status,
    )


# ──────────────────────────────────────────────
# Lifespan: build the workflow controller on startup
# ──────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if getattr(app.state, "controller", None) is None:
        logger.info("🚀 Building workflow controller …")
        app.state.controller = build_controller()
    logger.info("✅ Ready. Classifier endpoint: %s", app.state.controller.client.endpoint)
    yield
    logger.info("🛑 Shutting down.")


# ──────────────────────────────────────────────
# Application factory
# ──────────────────────────────────────────────
def create_app(controller: Optional[WorkflowController] = None) -> FastAPI:
    application = FastAPI(
        title="Corn Disease Diagnosis API",
        description="Diagnose corn leaf diseases from images and keep a history of results.",
        version="1.0.0",
        lifespan=lifespan,
    )
    application.state.controller = controller

    # ── CORS middleware (configured from environment variables) ──
    application.add_middleware(
        middleware_class=CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_methods_list,
        allow_headers=settings.cors_headers_list,
    )

    # ── register routers ──
    application.get('/')(lambda: {"message": "Welcome to the Corn Disease Diagnosis API! Visit /docs for API documentation."})
    application.include_router(health.router)
    application.include_router(workflow.router)
    application.include_router(history.router)
    return application


app = create_app()
logger.info("CORS configured with origins: %s", settings.cors_origins_list)
