"""Adapter for the externally supplied question bank.

Only the scoring-relevant part of each question is read: its number, its
dichotomy and, per option, the ``scoreKey`` saying which pole it endorses.
Question and option text are carried along untouched for callers that want
them but never influence a score.
"""
from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .dichotomies import DICHOTOMIES
from .item_params import ItemParameterTable
from .types import Option, Question

BANK_WRAPPER_KEY = "MBTI_Form_M"
OPTION_KEYS = ("A", "B")


class QuestionBankError(ValueError):
    """The question bank violates its contract."""


QuestionBank = Mapping[int, Question]


def _option(number: int, key: str, raw: Any, dichotomy: str) -> Option:
    if not isinstance(raw, Mapping):
        raise QuestionBankError(f"question {number}: option {key} must be an object")
    d = DICHOTOMIES[dichotomy]
    pole = str(raw.get("pole") or "").strip().upper()
    score_key = raw.get("scoreKey", raw.get("score_key"))
    if score_key is None:
        if pole not in d.poles:
            raise QuestionBankError(
                f"question {number}: option {key} needs a scoreKey or a pole from {d.poles}"
            )
        score_key = 1 if pole == d.positive_pole else 0
    try:
        sk = int(score_key)
    except (TypeError, ValueError):
        raise QuestionBankError(f"question {number}: option {key} scoreKey must be 0 or 1") from None
    if sk not in (0, 1):
        raise QuestionBankError(f"question {number}: option {key} scoreKey must be 0 or 1")
    if pole and pole not in d.poles:
        raise QuestionBankError(f"question {number}: option {key} pole {pole!r} is not in {dichotomy}")
    if pole and (pole == d.positive_pole) != (sk == 1):
        raise QuestionBankError(f"question {number}: option {key} pole {pole} contradicts scoreKey {sk}")
    if not pole:
        pole = d.positive_pole if sk == 1 else d.negative_pole
    text = raw.get("text")
    return Option(key=key, pole=pole, score_key=sk, text=str(text) if text is not None else None)


def _question(raw: Any, position: int) -> Question:
    if not isinstance(raw, Mapping):
        raise QuestionBankError(f"question at position {position} must be an object")
    try:
        number = int(raw.get("number", position + 1))
    except (TypeError, ValueError):
        raise QuestionBankError(f"question at position {position}: number must be an integer") from None
    if number < 1:
        raise QuestionBankError(f"question {number}: numbers are 1-based")
    dichotomy = raw.get("dichotomy")
    if dichotomy not in DICHOTOMIES:
        raise QuestionBankError(f"question {number}: unknown dichotomy {dichotomy!r}")

    opts = raw.get("options")
    if isinstance(opts, list):
        opts = {k: v for k, v in zip(OPTION_KEYS, opts)} if len(opts) == 2 else None
    if not isinstance(opts, Mapping) or len(opts) != 2:
        raise QuestionBankError(f"question {number}: exactly two options are required")
    options = {str(k).upper(): _option(number, str(k).upper(), v, dichotomy) for k, v in opts.items()}
    if {o.score_key for o in options.values()} != {0, 1}:
        raise QuestionBankError(f"question {number}: the two options must endorse opposite poles")

    text = raw.get("question", raw.get("text"))
    return Question(
        number=number,
        dichotomy=str(dichotomy),
        options=MappingProxyType(options),
        text=str(text) if text is not None else None,
    )


def parse_question_bank(payload: Any) -> QuestionBank:
    """Parse a bank given as a list of questions or as ``{"MBTI_Form_M": [...]}``."""

    if isinstance(payload, Mapping):
        payload = payload.get(BANK_WRAPPER_KEY, payload.get("questions"))
    if not isinstance(payload, list):
        raise QuestionBankError(f"question bank must be a list or an object with {BANK_WRAPPER_KEY!r}")
    bank: Dict[int, Question] = {}
    for pos, raw in enumerate(payload):
        q = _question(raw, pos)
        if q.number in bank:
            raise QuestionBankError(f"duplicate question number {q.number}")
        bank[q.number] = q
    return MappingProxyType(dict(sorted(bank.items())))


def load_question_bank(path: str | Path) -> QuestionBank:
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise QuestionBankError(f"cannot read question bank {p}: {exc}") from exc
    except ValueError as exc:
        raise QuestionBankError(f"question bank {p} is not valid JSON: {exc}") from exc
    return parse_question_bank(payload)


def answer_key_bank(table: ItemParameterTable) -> QuestionBank:
    """Text-free bank where option A endorses the positive pole and B the negative one."""

    bank: Dict[int, Question] = {}
    for item in table.items:
        d = DICHOTOMIES[item.dichotomy]
        bank[item.index + 1] = Question(
            number=item.index + 1,
            dichotomy=item.dichotomy,
            options=MappingProxyType({
                "A": Option(key="A", pole=d.positive_pole, score_key=1),
                "B": Option(key="B", pole=d.negative_pole, score_key=0),
            }),
        )
    return MappingProxyType(bank)


def bank_to_payload(bank: QuestionBank, numbers: Optional[Iterable[int]] = None) -> List[Dict[str, Any]]:
    """Inverse of ``parse_question_bank`` for the keys scoring relies on."""

    wanted = list(numbers) if numbers is not None else list(bank)
    return [
        {
            "number": bank[n].number,
            "dichotomy": bank[n].dichotomy,
            "options": {
                k: {"pole": o.pole, "scoreKey": o.score_key, **({"text": o.text} if o.text else {})}
                for k, o in bank[n].options.items()
            },
        }
        for n in wanted
    ]
