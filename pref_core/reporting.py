# pref_core/reporting.py
from __future__ import annotations
import json, math
from pathlib import Path
from typing import Any, Dict, List

from .dichotomies import DICHOTOMY_ORDER
from .engine import type_code
from .types import ScoreReport

# -------- utils: make any object JSON-safe ----------
def _to_basic(x: Any) -> Any:
    if x is None or isinstance(x, (bool, int, str)):
        return x
    if isinstance(x, float):
        return x if math.isfinite(x) else None
    if isinstance(x, dict):
        return {str(k): _to_basic(v) for k, v in x.items()}
    if isinstance(x, (list, tuple, set)):
        return [_to_basic(v) for v in x]
    if hasattr(x, "to_dict"):
        return _to_basic(x.to_dict())
    if hasattr(x, "__dict__"):
        return _to_basic(vars(x))
    return str(x)


def serialize_report(report: ScoreReport) -> Dict[str, Any]:
    """Canonical E-I, S-N, T-F, J-P ordering; ``dichotomyResults`` is the public contract."""
    results = {d: report.results[d].to_dict() for d in DICHOTOMY_ORDER}
    diagnostics = {
        d: {
            "thetaRaw": report.results[d].theta_raw,
            "se": report.results[d].se,
            "answered": report.results[d].n_answered,
            "iterations": report.results[d].iterations,
            "converged": report.results[d].converged,
        }
        for d in DICHOTOMY_ORDER
    }
    out: Dict[str, Any] = {
        "dichotomyResults": results,
        "typeCode": type_code(report),
        "facetScores": dict(report.facet_scores),
        "meta": {
            "paramsVersion": report.params_version,
            "answered": report.answered,
            "omitted": report.omitted,
            "ignored": [
                {"number": i.number, "value": i.value, "reason": i.reason} for i in report.ignored
            ],
            "diagnostics": diagnostics,
        },
    }
    if report.audit_events:
        out["auditEvents"] = list(report.audit_events)
    return _to_basic(out)


def format_summary(report: ScoreReport) -> List[str]:
    lines = [f"Type {type_code(report)}  (params {report.params_version}, "
             f"answered {report.answered}, omitted {report.omitted})"]
    for d in DICHOTOMY_ORDER:
        r = report.results[d]
        lines.append(f"  {d}: {r.preference}  theta={r.theta:+.2f}  PCI={r.pci:2d} ({r.pcc})")
    if report.ignored:
        lines.append(f"  ignored {len(report.ignored)} answer(s)")
    return lines


def write_report(report: ScoreReport, out_path: str) -> str:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(serialize_report(report), f, ensure_ascii=False, indent=2)
    return str(out)
