# pref_core/engine.py
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional
import logging

from .config import DEBUG_TRACE, TRACE_FIELDS, FACET_SCORES_ENABLED
from .dichotomies import DICHOTOMIES, DICHOTOMY_ORDER
from .item_params import ItemParameterTable, ItemTableError
from .question_bank import QuestionBank
from .scoring import score_dichotomy
from .types import IgnoredAnswer, ItemResponse, ScoreReport
from .validators import AnswerSetError, answer_counts, normalize_answers
from . import irt


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def check_bank(bank: QuestionBank, table: ItemParameterTable) -> None:
    """Every bank question must have a parameter row in the same dichotomy."""
    for number, q in bank.items():
        idx = number - 1
        if not 0 <= idx < len(table):
            raise ItemTableError(f"question {number} has no item parameters (table has {len(table)} items)")
        row = table.item(idx)
        if row.dichotomy != q.dichotomy:
            raise ItemTableError(
                f"question {number} is {q.dichotomy} in the bank but {row.dichotomy} in parameters {table.version}"
            )


def _screen(
    choices: Dict[int, Optional[str]],
    bank: QuestionBank,
    ignored: List[IgnoredAnswer],
) -> Dict[int, str]:
    """Keep answered entries that the bank can score; record the rest."""
    usable: Dict[int, str] = {}
    for number in sorted(choices):
        choice = choices[number]
        q = bank.get(number)
        if q is None:
            ignored.append(IgnoredAnswer(number=number, value=choice, reason="unknown question number"))
            continue
        if choice is None:
            continue
        if choice not in q.options:
            ignored.append(IgnoredAnswer(number=number, value=choice, reason="unknown option"))
            continue
        usable[number] = choice
    return usable


def _responses(
    indices, usable: Mapping[int, str], bank: QuestionBank, table: ItemParameterTable,
) -> List[ItemResponse]:
    out: List[ItemResponse] = []
    for idx in indices:
        choice = usable.get(idx + 1)
        if choice is None:
            continue
        row = table.item(idx)
        u = bank[idx + 1].options[choice].score_key
        out.append(ItemResponse(a=row.a, b=row.b, u=u))
    return out


def score_answers(
    answers: Mapping[Any, Any] | None,
    bank: QuestionBank,
    table: ItemParameterTable,
    *,
    strict: bool = False,
    facets: Optional[bool] = None,
    trace: bool = False,
) -> ScoreReport:
    """
    Score an answer set keyed by 1-based question number.

    Omitted answers (missing or None) are simply left out of the likelihood.
    Entries the bank cannot score are ignored and listed on the report; with
    ``strict`` the first one raises ``AnswerSetError`` instead. Neither the bank
    nor the table is modified.
    """
    check_bank(bank, table)
    choices, ignored = normalize_answers(answers)
    usable = _screen(choices, bank, ignored)
    if ignored:
        if strict:
            first = ignored[0]
            raise AnswerSetError(f"answer {first.number!r}: {first.reason}")
        for entry in ignored:
            log.warning("ignoring answer %r=%r: %s", entry.number, entry.value, entry.reason)

    events: List[Dict[str, object]] = []
    results = {}
    for name in DICHOTOMY_ORDER:
        responses = _responses(table.indices_for(name), usable, bank, table)

        def _hook(evt: Dict[str, object], _name: str = name) -> None:
            evt = {"dichotomy": _name, **evt}
            _emit_trace(**evt)
            if trace:
                events.append(evt)

        est = irt.estimate_theta(responses, on_step=_hook)
        res = score_dichotomy(est, DICHOTOMIES[name])
        results[name] = res
        log.debug(
            "dichotomy %s: n=%d theta=%.4f stop=%s pref=%s pci=%d",
            name, est.n_items, est.theta, est.stop_reason, res.preference, res.pci,
        )

    facet_scores: Dict[str, float] = {}
    if FACET_SCORES_ENABLED if facets is None else facets:
        for name in DICHOTOMY_ORDER:
            for facet in DICHOTOMIES[name].facets:
                indices = table.indices_for_facet(facet)
                if not indices:
                    continue
                est = irt.estimate_theta(_responses(indices, usable, bank, table))
                facet_scores[facet] = round(est.theta, 2)

    answered, omitted = answer_counts(usable, bank)
    return ScoreReport(
        results=results,
        params_version=table.version,
        answered=answered,
        omitted=omitted,
        facet_scores=facet_scores,
        ignored=ignored,
        audit_events=events,
    )


def type_code(report: ScoreReport) -> str:
    return "".join(report.results[d].preference for d in DICHOTOMY_ORDER)
