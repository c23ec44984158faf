"""Synthetic answer sets for smoke runs and tests."""
from __future__ import annotations

import random
from typing import Dict, Optional

from .dichotomies import DICHOTOMY_ORDER, DICHOTOMIES
from .question_bank import QuestionBank


def _targets(type_code: str) -> Dict[str, str]:
    code = str(type_code).strip().upper()
    if len(code) != 4:
        raise ValueError(f"type code must have 4 letters, got {type_code!r}")
    out: Dict[str, str] = {}
    for letter, name in zip(code, DICHOTOMY_ORDER):
        if letter not in DICHOTOMIES[name].poles:
            raise ValueError(f"{letter!r} is not a pole of {name}")
        out[name] = letter
    return out


def generate_answers(
    bank: QuestionBank,
    type_code: str,
    omission_rate: float = 0.0,
    rng: Optional[random.Random] = None,
) -> Dict[int, Optional[Dict[str, str]]]:
    """Answer every question toward ``type_code``; omitted questions map to None."""
    targets = _targets(type_code)
    rnd = rng or random.Random(0)
    answers: Dict[int, Optional[Dict[str, str]]] = {}
    for number, q in bank.items():
        if omission_rate > 0 and rnd.random() < omission_rate:
            answers[number] = None
            continue
        want = targets[q.dichotomy]
        key = next((k for k, o in q.options.items() if o.pole == want), "A")
        answers[number] = {"choice": key}
    return answers


def all_omitted(bank: QuestionBank) -> Dict[int, None]:
    return {number: None for number in bank}
