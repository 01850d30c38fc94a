"""
Pure scoring helpers for similarity search.

Turns raw nearest-neighbor rows into the caller-facing result: distance
to similarity conversion, threshold filtering, and source curation.
"""

import math
from enum import Enum
from typing import Any


class ThresholdPolicy(str, Enum):
    """How rows below the similarity threshold are handled."""

    COLLECT = "collect"  # keep every row at or above the threshold
    TRUNCATE = "truncate"  # stop at the first row below it


def distance_to_similarity(distance: Any) -> float:
    """
    Convert a vector distance into a similarity score in [0, 1].

    Distances at or below 0 map to 1.0, at or above 1 map to 0.0, and
    anything in between to ``1 - distance``. Missing, non-numeric and NaN
    inputs score 0.0.
    """
    if distance is None or isinstance(distance, bool):
        return 0.0
    try:
        value = float(distance)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    if value <= 0:
        return 1.0
    if value >= 1:
        return 0.0
    return 1.0 - value


def filter_by_threshold(
    rows: list[dict[str, Any]],
    threshold: float,
    policy: ThresholdPolicy = ThresholdPolicy.COLLECT,
) -> list[dict[str, Any]]:
    """
    Keep rows whose ``score`` is >= ``threshold``.

    Rows are expected in nearest-first order; that order is preserved.
    """
    kept: list[dict[str, Any]] = []
    for row in rows:
        if row["score"] < threshold:
            if policy is ThresholdPolicy.TRUNCATE:
                break
            continue
        kept.append(row)
    return kept


def curate_sources(
    rows: list[dict[str, Any]],
) -> tuple[list[str], list[dict[str, Any]]]:
    """
    Build (context_texts, sources) from scored rows.

    Rows with empty metadata carry nothing to cite and are dropped.
    """
    context_texts: list[str] = []
    sources: list[dict[str, Any]] = []
    for row in rows:
        metadata = row.get("metadata") or {}
        if not metadata:
            continue
        text = metadata.get("text", "")
        context_texts.append(text)
        sources.append({**metadata, "text": text, "score": row["score"]})
    return context_texts, sources
