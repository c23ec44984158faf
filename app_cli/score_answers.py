# app_cli/score_answers.py
from __future__ import annotations
import argparse, json, logging, random, sys
from pathlib import Path
from pref_core.audit_export import to_csv
from pref_core.config import load_config
from pref_core.engine import score_answers
from pref_core.item_params import ItemTableError, load_item_params
from pref_core.question_bank import QuestionBankError, answer_key_bank, load_question_bank
from pref_core.reporting import format_summary, write_report
from pref_core.simulate import generate_answers
from pref_core.validators import AnswerSetError

log = logging.getLogger("pref_core.cli")

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pref-score", description="Score a questionnaire answer set.")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--answers", help="JSON file: {question number: \"A\"|\"B\"|{\"choice\": ..}|null}")
    src.add_argument("--simulate", metavar="TYPE", help="generate answers toward a 4-letter type, e.g. ESTJ")
    p.add_argument("--omit", type=float, default=0.0, help="omission rate for --simulate")
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--bank", help="question bank JSON (default: QUESTION_BANK_PATH or answer-key bank)")
    p.add_argument("--params", help="item parameter JSON (default: packaged dataset)")
    p.add_argument("--strict", action="store_true", help="reject answers the bank cannot score")
    p.add_argument("--no-facets", action="store_true")
    p.add_argument("--out", help="write the JSON report here")
    p.add_argument("--audit-csv", help="write the estimator trace as CSV here")
    return p

def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = build_parser().parse_args(argv)
    cfg = load_config()
    try:
        table = load_item_params(args.params or cfg.get("ITEM_PARAMS_PATH"))
        bank_path = args.bank or cfg.get("QUESTION_BANK_PATH")
        bank = load_question_bank(bank_path) if bank_path else answer_key_bank(table)
        if args.answers:
            answers = json.loads(Path(args.answers).read_text(encoding="utf-8"))
            if isinstance(answers, dict) and isinstance(answers.get("answers"), dict):
                answers = answers["answers"]
        else:
            answers = generate_answers(bank, args.simulate, args.omit, random.Random(args.seed))
        report = score_answers(
            answers, bank, table,
            strict=args.strict or bool(cfg.get("STRICT_ANSWERS")),
            facets=not args.no_facets,
            trace=bool(args.audit_csv),
        )
    except (OSError, ValueError) as exc:  # covers the table/bank/answer errors and bad JSON
        kind = type(exc).__name__ if isinstance(exc, (ItemTableError, QuestionBankError, AnswerSetError)) else "input error"
        log.error("%s: %s", kind, exc)
        return 2
    for line in format_summary(report):
        print(line)
    if args.out:
        print(f"Report saved to: {write_report(report, args.out)}")
    if args.audit_csv:
        Path(args.audit_csv).write_text(to_csv(report.audit_events), encoding="utf-8")
        print(f"Trace saved to: {args.audit_csv}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
