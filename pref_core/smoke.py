from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Tuple

from .config import DEBUG_TRACE, TRACE_FIELDS
from .engine import score_answers, type_code
from .item_params import load_item_params
from .question_bank import answer_key_bank
from .reporting import format_summary
from .simulate import all_omitted, generate_answers


def _maybe_enable_trace() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    if DEBUG_TRACE:
        logging.getLogger("pref_core.engine").setLevel(logging.INFO)


def _cases(bank) -> List[Tuple[str, Dict[Any, Any]]]:
    return [
        ("Strong ESTJ, no omissions", generate_answers(bank, "ESTJ")),
        ("Strong INFP, no omissions", generate_answers(bank, "INFP")),
        ("Mixed ENTP, no omissions", generate_answers(bank, "ENTP")),
        ("ESTJ, 15% omitted", generate_answers(bank, "ESTJ", 0.15, random.Random(15))),
        ("INFP, 30% omitted", generate_answers(bank, "INFP", 0.30, random.Random(30))),
        ("All omitted", all_omitted(bank)),
    ]


def run_smoke() -> List[str]:
    """Score the canonical synthetic respondents and log each summary."""
    _maybe_enable_trace()
    table = load_item_params()
    bank = answer_key_bank(table)
    logging.info("Scoring %d questions with params %s", len(bank), table.version)
    logging.info("Trace fields: %s", ", ".join(TRACE_FIELDS))

    codes: List[str] = []
    for name, answers in _cases(bank):
        report = score_answers(answers, bank, table)
        codes.append(type_code(report))
        logging.info("--- %s ---", name)
        for line in format_summary(report):
            logging.info("%s", line)
    return codes


if __name__ == "__main__":  # pragma: no cover
    run_smoke()
