"""Normalization helpers.

Centralizes parsing of loosely typed sensor payload values.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def normalize_timestamp_seconds(value: Any) -> float | None:
    """Normalize sensor timestamps to seconds.

    - Empty/missing -> None
    - Negative -> None
    - Milliseconds (> 1e11) -> seconds
    - :class:`datetime.datetime` -> POSIX seconds
    """

    if value is None or value == "":
        return None
    timestamp = getattr(value, "timestamp", None)
    if callable(timestamp):
        return float(timestamp())
    ts = safe_float(value)
    if ts is None or ts < 0:
        return None
    if ts > 1e11:
        ts /= 1000.0
    return ts
