"""Shared fixtures: sample images, a fake classifier and an in-memory ledger."""

import io
import json
from collections.abc import Callable

import httpx
import pytest
from PIL import Image

from src.corn_diagnosis.services.history_service import HistoryLedger
from src.corn_diagnosis.services.prediction_service import PredictionClient
from src.corn_diagnosis.services.storage_service import InMemoryStore
from src.corn_diagnosis.services.workflow_service import WorkflowController

ENDPOINT = "https://classifier.test/predict"

COMMON_RUST_RESPONSE = {
    "predicted_class": "Common_Rust",
    "confidence": "87.3%",
    "all_probabilities": {
        "Common_Rust": "87.3%",
        "Healthy": "10.1%",
        "Blight": "1.8%",
        "Gray_Leaf_Spot": "0.8%",
    },
}


def make_jpeg(size: tuple[int, int] = (64, 48), color: str = "green") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=color).save(buf, format="JPEG")
    return buf.getvalue()


def json_handler(payload: dict, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=json.dumps(payload).encode("utf-8"))
    return handler


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> PredictionClient:
    transport = httpx.MockTransport(handler)
    return PredictionClient(endpoint=ENDPOINT, http_client=httpx.AsyncClient(transport=transport))


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def ledger(store: InMemoryStore) -> HistoryLedger:
    ticks = iter(range(1_700_000_000, 1_800_000_000))
    return HistoryLedger(store, key="history", limit=50, clock=lambda: float(next(ticks)))


@pytest.fixture
def calls() -> list[httpx.Request]:
    return []


@pytest.fixture
def success_controller(ledger: HistoryLedger, calls: list[httpx.Request]) -> WorkflowController:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return json_handler(COMMON_RUST_RESPONSE)(request)

    return WorkflowController(client=make_client(handler), ledger=ledger)
