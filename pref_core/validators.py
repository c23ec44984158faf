from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Tuple
from .types import IgnoredAnswer


class AnswerSetError(ValueError):
    """An answer set references data the question bank does not define."""


def _choice(value: Any) -> Tuple[bool, Optional[str]]:
    """(well_formed, option key or None for an omission)."""
    if value is None:
        return True, None
    if isinstance(value, Mapping):
        if "choice" not in value:
            return False, None
        value = value.get("choice")
        if value is None:
            return True, None
    if isinstance(value, str):
        v = value.strip().upper()
        return (True, v) if v else (True, None)
    return False, None


def normalize_answers(answers: Mapping[Any, Any] | None) -> Tuple[Dict[int, Optional[str]], List[IgnoredAnswer]]:
    """
    Coerce an answer set to {question number: option key | None}.
    Keys may be ints or numeric strings; values may be None, "A"/"B" or {"choice": "A"}.
    Malformed entries are returned separately, in input order; only a
    non-mapping answer set raises ``AnswerSetError``.
    """
    if answers is not None and not isinstance(answers, Mapping):
        raise AnswerSetError("answer set must be an object keyed by question number")
    choices: Dict[int, Optional[str]] = {}
    ignored: List[IgnoredAnswer] = []
    for raw_key, raw_val in (answers or {}).items():
        try:
            number = int(str(raw_key).strip())
        except ValueError:
            ignored.append(IgnoredAnswer(number=raw_key, value=raw_val, reason="malformed question number"))
            continue
        ok, choice = _choice(raw_val)
        if not ok:
            ignored.append(IgnoredAnswer(number=number, value=raw_val, reason="malformed answer value"))
            continue
        choices[number] = choice
    return choices, ignored


def answer_counts(choices: Mapping[int, Optional[str]], bank: Mapping[int, Any]) -> Tuple[int, int]:
    answered = sum(1 for n in bank if choices.get(n) is not None)
    return answered, len(bank) - answered
