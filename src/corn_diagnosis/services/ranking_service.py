"""Service layer – ranking of the class probabilities returned by the classifier."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Optional

from src.corn_diagnosis.config import DISPLAY_NAMES
from src.corn_diagnosis.schemas.predict import RankedEntry


def display_name(label: str) -> str:
    """Spanish display name for *label*; unknown labels are returned as-is."""
    return DISPLAY_NAMES.get(label, label)


def parse_percentage(text: str) -> Optional[float]:
    """Parse ``"92.5%"`` / ``" 92.5 "`` → ``92.5``.

    Returns ``None`` for unparseable or non-finite text. Decimal commas
    (``"92,5%"``) are not accepted.
    """
    cleaned = str(text).strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1].rstrip()
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def rank(probabilities: Mapping[str, str]) -> tuple[RankedEntry, ...]:
    """
    Order *probabilities* by descending percentage.

    Unparseable values sort to the bottom instead of failing the ranking.
    The sort is stable, so equal values keep the order of *probabilities*.
    Exactly one entry (the first) is marked ``is_top`` unless the map is empty.
    """
    parsed = [
        (label, text, parse_percentage(text))
        for label, text in probabilities.items()
    ]
    ordered = sorted(
        parsed,
        key=lambda item: item[2] if item[2] is not None else -math.inf,
        reverse=True,
    )
    return tuple(
        RankedEntry(
            label=label,
            display_name=display_name(label),
            percentage=value,
            percentage_text=text,
            is_top=index == 0,
        )
        for index, (label, text, value) in enumerate(ordered)
    )
