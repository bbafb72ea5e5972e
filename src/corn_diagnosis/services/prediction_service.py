"""Service layer – remote classification call.

One ``classify()`` call performs exactly one multipart POST to the
configured endpoint and always returns a typed outcome:

*  2xx + valid body        → ``PredictionSuccess``
*  non-2xx status          → ``SERVER_ERROR`` (status + plain-text body)
*  host unreachable / timeout → ``CONNECTION_ERROR``
*  body is not JSON        → ``PROTOCOL_ERROR``
*  JSON missing fields     → ``MALFORMED_RESPONSE``

No retries are attempted.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from src.corn_diagnosis.config import settings
from src.corn_diagnosis.schemas.predict import (
    FailureKind,
    PredictionFailure,
    PredictionOutcome,
    PredictionSuccess,
    RemotePrediction,
)
from src.corn_diagnosis.schemas.upload import ImageCandidate

logger = logging.getLogger(__name__)


class PredictionClient:
    """Client for the remote corn-disease classifier."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.endpoint = endpoint or settings.api_endpoint
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._http_client = http_client

    async def classify(self, candidate: ImageCandidate) -> PredictionOutcome:
        """Send *candidate* to the classifier and normalise the result."""
        files = {"file": (candidate.file_name, candidate.data, candidate.media_type)}
        logger.info("Sending %s (%d bytes) to %s", candidate.file_name, candidate.size, self.endpoint)

        try:
            if self._http_client is not None:
                response = await self._http_client.post(self.endpoint, files=files)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.endpoint, files=files)
        except httpx.TimeoutException as exc:
            logger.warning("Request to %s timed out: %s", self.endpoint, exc)
            return PredictionFailure(
                kind=FailureKind.CONNECTION_ERROR,
                message="Error de conexión: el servidor no respondió a tiempo.",
            )
        except httpx.TransportError as exc:
            logger.warning("Cannot reach %s: %s", self.endpoint, exc)
            return PredictionFailure(
                kind=FailureKind.CONNECTION_ERROR,
                message=(
                    "Error de conexión: No se pudo conectar con el servidor. "
                    "Verifique su conexión a internet y que la API esté funcionando."
                ),
            )
        except httpx.RequestError as exc:
            logger.warning("Request to %s failed: %s", self.endpoint, exc)
            return PredictionFailure(
                kind=FailureKind.PROTOCOL_ERROR,
                message=f"Error al analizar la imagen: {exc}",
            )

        logger.info("Response received: %s", response.status_code)
        return parse_response(response)


def parse_response(response: httpx.Response) -> PredictionOutcome:
    """Map an HTTP response from the classifier onto a prediction outcome."""
    if not response.is_success:
        body = response.text
        logger.error("Server error %s: %s", response.status_code, body)
        return PredictionFailure(
            kind=FailureKind.SERVER_ERROR,
            message=f"Error del servidor ({response.status_code}): {body}",
            status_code=response.status_code,
            body=body,
        )

    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error("Response is not valid JSON: %s", exc)
        return PredictionFailure(
            kind=FailureKind.PROTOCOL_ERROR,
            message=f"Error al analizar la imagen: {exc}",
        )

    try:
        remote = RemotePrediction.model_validate(payload)
    except ValidationError as exc:
        logger.error("Unexpected response shape: %s", exc.errors(include_url=False))
        return PredictionFailure(
            kind=FailureKind.MALFORMED_RESPONSE,
            message="Respuesta inválida del servidor",
        )

    return PredictionSuccess(
        predicted_class=remote.predicted_class,
        confidence=remote.confidence,
        probabilities=remote.all_probabilities,
    )
