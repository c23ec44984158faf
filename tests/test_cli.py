from __future__ import annotations

import json

from app_cli.score_answers import main


def test_simulated_run_writes_outputs(tmp_path, capsys):
    out = tmp_path / "report.json"
    trace = tmp_path / "trace.csv"
    code = main(["--simulate", "ENFJ", "--out", str(out), "--audit-csv", str(trace)])
    printed = capsys.readouterr().out

    assert code == 0
    assert "Type ENFJ" in printed
    assert json.loads(out.read_text(encoding="utf-8"))["typeCode"] == "ENFJ"
    assert trace.read_text(encoding="utf-8").startswith("dichotomy,iteration,")


def test_answers_file(tmp_path, capsys):
    answers = tmp_path / "answers.json"
    answers.write_text(json.dumps({"answers": {"1": {"choice": "B"}, "3": "A", "7": None}}), encoding="utf-8")
    assert main(["--answers", str(answers), "--no-facets"]) == 0
    assert "Type ENFP" in capsys.readouterr().out


def test_input_errors_exit_2(tmp_path):
    assert main(["--answers", str(tmp_path / "missing.json")]) == 2
    assert main(["--simulate", "XXXX"]) == 2
    answers = tmp_path / "answers.json"
    answers.write_text(json.dumps({"999": "A"}), encoding="utf-8")
    assert main(["--answers", str(answers), "--strict"]) == 2
    assert main(["--answers", str(answers)]) == 0


def test_list_shaped_answers_file_exits_2(tmp_path):
    answers = tmp_path / "answers.json"
    answers.write_text(json.dumps(["A", "B", "A"]), encoding="utf-8")
    assert main(["--answers", str(answers)]) == 2
