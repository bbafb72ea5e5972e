"""Service layer – bounded, persisted history of past diagnoses.

The ledger is the only writer of its store entry. Every mutation is written
through immediately; storage failures are logged and never propagated, so
history stays best-effort while the workflow keeps running.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from src.corn_diagnosis.config import UNKNOWN_FILE_NAME, settings
from src.corn_diagnosis.errors import StorageReadError, StorageWriteError
from src.corn_diagnosis.schemas.history import HistoryRecord
from src.corn_diagnosis.schemas.predict import PredictionSuccess
from src.corn_diagnosis.services.ranking_service import display_name
from src.corn_diagnosis.services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[HistoryRecord])


def format_timestamp(epoch_ms: int, fmt: str) -> str:
    """Local-time rendering of *epoch_ms*; the raw number if formatting fails."""
    try:
        return datetime.fromtimestamp(epoch_ms / 1000).strftime(fmt)
    except (ValueError, OverflowError, OSError) as exc:
        logger.warning("Cannot format timestamp %s with %r: %s", epoch_ms, fmt, exc)
        return str(epoch_ms)


class HistoryLedger:
    """Newest-first log of diagnoses, capped at *limit* records."""

    def __init__(
        self,
        store: KeyValueStore,
        key: Optional[str] = None,
        limit: Optional[int] = None,
        timestamp_format: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.key = key or settings.history_key
        self.limit = limit if limit is not None else settings.history_limit
        if self.limit < 1:
            raise ValueError("History limit must be at least 1.")
        self.timestamp_format = timestamp_format or settings.timestamp_format
        self._clock = clock
        self._records: list[HistoryRecord] = []

    @property
    def records(self) -> tuple[HistoryRecord, ...]:
        return tuple(self._records)

    def load(self) -> tuple[HistoryRecord, ...]:
        """Replace the in-memory sequence with the persisted one."""
        self._records = self._read()
        logger.info("Loaded %d history record(s).", len(self._records))
        return self.records

    def _read(self) -> list[HistoryRecord]:
        try:
            raw = self.store.get(self.key)
        except StorageReadError as exc:
            logger.warning("Could not load history: %s", exc)
            return []
        if raw is None:
            return []
        try:
            records = _records_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable history: %s", exc)
            return []
        return records[: self.limit]

    def record(self, outcome: PredictionSuccess, source_file_name: Optional[str] = None) -> HistoryRecord:
        """Prepend a record for *outcome* and persist the whole sequence."""
        record_id = self._next_id()
        record = HistoryRecord(
            id=record_id,
            diagnosis=display_name(outcome.predicted_class),
            confidence=outcome.confidence,
            timestamp=format_timestamp(record_id, self.timestamp_format),
            file_name=source_file_name or UNKNOWN_FILE_NAME,
        )

        self._records.insert(0, record)
        del self._records[self.limit:]
        self._save()
        return record

    def clear(self) -> None:
        """Drop every record. Callers must confirm with the user first."""
        self._records = []
        self._save()
        logger.info("🗑️  History cleared.")

    def _next_id(self) -> int:
        now_ms = int(self._clock() * 1000)
        if self._records:
            # ids stay strictly increasing even if the clock goes backwards
            now_ms = max(now_ms, max(r.id for r in self._records) + 1)
        return now_ms

    def _save(self) -> None:
        payload = _records_adapter.dump_json(self._records, by_alias=True).decode("utf-8")
        try:
            self.store.set(self.key, payload)
        except StorageWriteError as exc:
            logger.warning("Could not save history: %s", exc)
