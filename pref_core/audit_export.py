"""Newton–Raphson step traces as JSON or CSV.

Each event is one estimator iteration for one dichotomy, as emitted by
``irt.estimate_theta`` through the engine's trace hook. The terminal event of
a run carries the stop reason (``converged``, ``flat``, ``max_iter``); earlier
steps leave ``stop`` empty.
"""
from __future__ import annotations

import csv
import io
from typing import Any, Callable, Dict, Iterable, List

from .config import TRACE_FIELDS


def _as_int(val: Any) -> int:
    try:
        return int(val)
    except (TypeError, ValueError):
        return 0


def _as_float(val: Any) -> float:
    try:
        return float(val)
    except (TypeError, ValueError):
        return 0.0


def _as_label(val: Any) -> str:
    return "" if val is None else str(val)


_CASTS: Dict[str, Callable[[Any], Any]] = {
    "dichotomy": _as_label,
    "iteration": _as_int,
    "theta_before": _as_float,
    "theta_after": _as_float,
    "gradient": _as_float,
    "curvature": _as_float,
    "stop": _as_label,
}


def trace_rows(events: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Coerce step events to flat rows over ``TRACE_FIELDS``; unknown keys are dropped."""
    rows = []
    for evt in events:
        evt = evt or {}
        rows.append({key: _CASTS.get(key, _as_label)(evt.get(key)) for key in TRACE_FIELDS})
    return rows


def to_json(events: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    return {"events": trace_rows(events)}


def to_csv(events: Iterable[Dict[str, Any]]) -> str:
    """One CSV row per estimator step, header first, columns in ``TRACE_FIELDS`` order."""
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(TRACE_FIELDS))
    writer.writeheader()
    writer.writerows(trace_rows(events))
    return buf.getvalue()
