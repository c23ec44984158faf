from __future__ import annotations

import importlib
import json
import sys

import pytest
from fastapi.testclient import TestClient

from tests.conftest import build_synthetic_records


def _reload_app(monkeypatch, **env) -> object:
    for key in ("QUESTION_BANK_PATH", "ITEM_PARAMS_PATH", "PARAMS_DATA_DIR", "STRICT_ANSWERS"):
        monkeypatch.delenv(key, raising=False)
    for key, val in env.items():
        monkeypatch.setenv(key, val)
    if "api.app" in sys.modules:
        importlib.reload(sys.modules["api.app"])
    else:
        import api.app  # noqa: F401
    return sys.modules["api.app"]


@pytest.fixture
def client(monkeypatch):
    app_module = _reload_app(monkeypatch)
    return TestClient(app_module.app)


def test_health_and_params(client):
    health = client.get("/health").json()
    assert health == {"params_version": "form-m-2011-sa", "items": 93, "question_bank": "answer-key"}

    params = client.get("/params").json()
    assert params["dichotomies"] == {"E-I": 21, "S-N": 26, "T-F": 24, "J-P": 22}
    assert params["tieBreakers"] == {"E-I": "I", "S-N": "N", "T-F": "F", "J-P": "P"}
    assert client.get("/").json()["status"] == "ok"


def test_score_empty_answer_set(client):
    resp = client.post("/score", json={"answers": {}})
    assert resp.status_code == 200
    body = resp.json()
    assert body["typeCode"] == "INFP"
    assert body["dichotomyResults"]["J-P"] == {
        "preference": "P", "theta": 0.0, "pci": 1, "pcc": "Slight", "dichotomyName": "J-P",
    }


def test_score_with_answers_and_trace(client):
    resp = client.post("/score", json={"answers": {"1": "A", "2": {"choice": "B"}, "4": None}, "trace": True})
    body = resp.json()
    assert body["dichotomyResults"]["J-P"]["preference"] == "J"
    assert body["dichotomyResults"]["S-N"]["preference"] == "N"
    assert body["meta"]["answered"] == 2
    assert {e["dichotomy"] for e in body["auditEvents"]} == {"J-P", "S-N"}


def test_score_with_inline_question_bank(client):
    questions = [
        {"number": 1, "dichotomy": "J-P", "options": {"A": {"pole": "P"}, "B": {"pole": "J"}}},
        {"number": 2, "dichotomy": "S-N", "options": {"A": {"pole": "S"}, "B": {"pole": "N"}}},
    ]
    body = client.post("/score", json={"answers": {"1": "A", "2": "A"}, "questions": questions}).json()
    assert body["typeCode"] == "ISFP"


def test_invalid_requests_are_422(client):
    strict = client.post("/score", json={"answers": {"500": "A"}, "strict": True})
    assert strict.status_code == 422
    lenient = client.post("/score", json={"answers": {"500": "A"}})
    assert lenient.status_code == 200
    assert lenient.json()["meta"]["ignored"][0]["reason"] == "unknown question number"
    bad_bank = client.post("/score", json={"answers": {}, "questions": [{"number": 1, "dichotomy": "Q-Z"}]})
    assert bad_bank.status_code == 422


def test_inline_bank_parameter_mismatch_is_422(client):
    questions = [{"number": 200, "dichotomy": "E-I", "options": {"A": {"pole": "E"}, "B": {"pole": "I"}}}]
    resp = client.post("/score", json={"answers": {"200": "A"}, "questions": questions})
    assert resp.status_code == 422
    assert "no item parameters" in resp.json()["detail"]

    wrong_dichotomy = [{"number": 1, "dichotomy": "E-I", "options": {"A": {"pole": "E"}, "B": {"pole": "I"}}}]
    assert client.post("/score", json={"answers": {}, "questions": wrong_dichotomy}).status_code == 422


def test_configured_bank_parameter_mismatch_is_500(monkeypatch, tmp_path):
    path = tmp_path / "bank.json"
    bank = [{"number": 1, "dichotomy": "E-I", "options": {"A": {"pole": "E"}, "B": {"pole": "I"}}}]
    path.write_text(json.dumps(bank), encoding="utf-8")
    app_module = _reload_app(monkeypatch, QUESTION_BANK_PATH=str(path))
    resp = TestClient(app_module.app).post("/score", json={"answers": {"1": "A"}})
    assert resp.status_code == 500


def test_reload_params(monkeypatch, tmp_path):
    small = tmp_path / "small.json"
    small.write_text(json.dumps({"version": "small", "items": build_synthetic_records(per_dichotomy=2)}), encoding="utf-8")
    client = TestClient(_reload_app(monkeypatch, PARAMS_DATA_DIR=str(tmp_path)).app)

    ok = client.post("/params/reload", json={"path": "small.json"})
    assert ok.status_code == 200 and ok.json()["items"] == 8
    assert client.post("/score", json={"answers": {"1": "A"}}).json()["meta"]["paramsVersion"] == "small"

    bad = client.post("/params/reload", json={"path": "missing.json"})
    assert bad.status_code == 422
    assert bad.json()["detail"] == "item parameters could not be loaded"
    assert client.get("/health").json()["params_version"] == "small"

    back = client.post("/params/reload", json={})
    assert back.json()["params_version"] == "form-m-2011-sa"


def test_reload_rejects_paths_outside_data_dir(monkeypatch, tmp_path):
    data_dir = tmp_path / "params"
    data_dir.mkdir()
    client = TestClient(_reload_app(monkeypatch, PARAMS_DATA_DIR=str(data_dir)).app)
    for path in ("/etc/passwd", "../outside.json", str(tmp_path / "outside.json")):
        resp = client.post("/params/reload", json={"path": path})
        assert resp.status_code == 403
    assert client.get("/health").json()["params_version"] == "form-m-2011-sa"


def test_reload_paths_disabled_without_data_dir(client):
    resp = client.post("/params/reload", json={"path": "/etc/passwd"})
    assert resp.status_code == 403
    assert "passwd" not in resp.text


def test_configured_question_bank(monkeypatch, tmp_path):
    path = tmp_path / "bank.json"
    from pref_core.item_params import load_item_params
    from pref_core.question_bank import answer_key_bank, bank_to_payload
    payload = bank_to_payload(answer_key_bank(load_item_params()))
    for q in payload:  # reverse option order throughout
        q["options"] = {"A": q["options"]["B"], "B": q["options"]["A"]}
    path.write_text(json.dumps({"MBTI_Form_M": payload}), encoding="utf-8")

    app_module = _reload_app(monkeypatch, QUESTION_BANK_PATH=str(path))
    client = TestClient(app_module.app)
    assert client.get("/health").json()["question_bank"] == str(path)
    body = client.post("/score", json={"answers": {str(n): "A" for n in range(1, 94)}}).json()
    assert body["typeCode"] == "INFP"
    assert body["dichotomyResults"]["E-I"]["pci"] == 30
