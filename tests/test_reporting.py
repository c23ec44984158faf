from __future__ import annotations

import json

from pref_core.audit_export import to_csv, to_json, trace_rows
from pref_core.config import TRACE_FIELDS
from pref_core.dichotomies import DICHOTOMY_ORDER
from pref_core.engine import score_answers
from pref_core.reporting import format_summary, serialize_report, write_report
from pref_core.simulate import generate_answers


def test_serialized_report_contract(real_bank, real_table):
    report = score_answers({1: "A", 999: "B"}, real_bank, real_table)
    data = serialize_report(report)

    assert list(data["dichotomyResults"]) == list(DICHOTOMY_ORDER)
    for name, res in data["dichotomyResults"].items():
        assert set(res) == {"preference", "theta", "pci", "pcc", "dichotomyName"}
        assert res["dichotomyName"] == name
    assert data["typeCode"] == "INFJ"
    assert data["meta"]["paramsVersion"] == "form-m-2011-sa"
    assert data["meta"]["ignored"] == [{"number": 999, "value": "B", "reason": "unknown question number"}]
    # infinite standard errors are emitted as null
    assert data["meta"]["diagnostics"]["E-I"]["se"] is None
    json.dumps(data, allow_nan=False)


def test_summary_and_file_output(real_bank, real_table, tmp_path):
    report = score_answers(generate_answers(real_bank, "ISTP"), real_bank, real_table)
    lines = format_summary(report)
    assert lines[0].startswith("Type ISTP")
    assert len(lines) == 5
    assert "PCI=30 (Very Clear)" in lines[1]

    path = write_report(report, str(tmp_path / "out" / "report.json"))
    saved = json.loads(open(path, encoding="utf-8").read())
    assert saved["typeCode"] == "ISTP"


def test_trace_export(synthetic_bank, synthetic_table):
    report = score_answers({1: "A", 5: "B", 9: "A"}, synthetic_bank, synthetic_table, trace=True)
    events = report.audit_events
    assert events and all(e["dichotomy"] == "E-I" for e in events)

    payload = to_json(events)
    assert payload["events"][0]["iteration"] == 1
    text = to_csv(events)
    header, *rows = text.strip().splitlines()
    assert header == "dichotomy,iteration,theta_before,theta_after,gradient,curvature,stop"
    assert len(rows) == len(events)
    assert rows[-1].endswith("converged")


def test_export_normalizes_missing_fields():
    assert to_json([{"dichotomy": "S-N"}])["events"][0] == {
        "dichotomy": "S-N", "iteration": 0, "theta_before": 0.0, "theta_after": 0.0,
        "gradient": 0.0, "curvature": 0.0, "stop": "",
    }


def test_export_drops_keys_outside_the_trace_columns():
    rows = trace_rows([{"dichotomy": "T-F", "iteration": "2", "stop": None, "session": "x"}])
    assert set(rows[0]) == set(TRACE_FIELDS)
    assert rows[0]["iteration"] == 2 and rows[0]["stop"] == ""
