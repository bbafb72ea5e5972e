"""Tests for the remote classification client."""

import asyncio

import httpx
import pytest

from src.corn_diagnosis.schemas.predict import DiagnosisClass, FailureKind, PredictionFailure, PredictionSuccess
from src.corn_diagnosis.services.intake_service import validate

from conftest import COMMON_RUST_RESPONSE, ENDPOINT, json_handler, make_client


@pytest.fixture
def candidate():
    return validate(b"\xff\xd8fake-jpeg", "image/jpeg", "leaf1.jpg")


def test_classify_success(candidate) -> None:
    outcome = asyncio.run(make_client(json_handler(COMMON_RUST_RESPONSE)).classify(candidate))
    assert isinstance(outcome, PredictionSuccess)
    assert outcome.predicted_class == "Common_Rust"
    assert outcome.diagnosis is DiagnosisClass.COMMON_RUST
    assert outcome.confidence == "87.3%"
    assert outcome.probabilities == COMMON_RUST_RESPONSE["all_probabilities"]


def test_classify_sends_single_multipart_file(candidate) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_handler(COMMON_RUST_RESPONSE)(request)

    asyncio.run(make_client(handler).classify(candidate))

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == ENDPOINT
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="file"' in body
    assert b'filename="leaf1.jpg"' in body
    assert b"fake-jpeg" in body
    assert "authorization" not in request.headers


def test_classify_keeps_unknown_label(candidate) -> None:
    payload = {"predicted_class": "Leaf_Curl", "confidence": "70%", "all_probabilities": {"Leaf_Curl": "70%"}}
    outcome = asyncio.run(make_client(json_handler(payload)).classify(candidate))
    assert isinstance(outcome, PredictionSuccess)
    assert outcome.predicted_class == "Leaf_Curl"
    assert outcome.diagnosis is None


# ──────────────────────────────────────────────
# Failures
# ──────────────────────────────────────────────
def test_classify_server_error(candidate) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="internal error")

    outcome = asyncio.run(make_client(handler).classify(candidate))
    assert isinstance(outcome, PredictionFailure)
    assert outcome.kind is FailureKind.SERVER_ERROR
    assert outcome.status_code == 500
    assert outcome.body == "internal error"
    assert "500" in outcome.message


def test_classify_server_error_body_is_not_parsed(candidate) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": "bad image"})

    outcome = asyncio.run(make_client(handler).classify(candidate))
    assert outcome.kind is FailureKind.SERVER_ERROR
    assert "bad image" in outcome.body


def test_classify_connection_error(candidate) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    outcome = asyncio.run(make_client(handler).classify(candidate))
    assert isinstance(outcome, PredictionFailure)
    assert outcome.kind is FailureKind.CONNECTION_ERROR
    assert outcome.message.startswith("Error de conexión")


def test_classify_timeout_is_connection_error(candidate) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    outcome = asyncio.run(make_client(handler).classify(candidate))
    assert outcome.kind is FailureKind.CONNECTION_ERROR


def test_classify_invalid_json_is_protocol_error(candidate) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    outcome = asyncio.run(make_client(handler).classify(candidate))
    assert outcome.kind is FailureKind.PROTOCOL_ERROR


@pytest.mark.parametrize(
    "payload",
    [
        {"confidence": "87.3%", "all_probabilities": {"Healthy": "87.3%"}},
        {"predicted_class": "Healthy", "all_probabilities": {"Healthy": "87.3%"}},
        {"predicted_class": "Healthy", "confidence": "87.3%"},
        {"predicted_class": "", "confidence": "87.3%", "all_probabilities": {"Healthy": "87.3%"}},
        {"predicted_class": "Healthy", "confidence": "87.3%", "all_probabilities": {}},
        {"predicted_class": "Healthy", "confidence": "87.3%", "all_probabilities": ["Healthy"]},
        ["not", "an", "object"],
    ],
)
def test_classify_missing_fields_is_malformed(candidate, payload) -> None:
    outcome = asyncio.run(make_client(json_handler(payload)).classify(candidate))
    assert isinstance(outcome, PredictionFailure)
    assert outcome.kind is FailureKind.MALFORMED_RESPONSE
