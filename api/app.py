from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import logging, typing as t
from pathlib import Path

# ---- Engine imports ----
from pref_core.config import load_config, ALLOWED_ORIGINS, AUDIT_EXPORT_ENABLED
from pref_core.dichotomies import DICHOTOMIES, DICHOTOMY_ORDER
from pref_core.engine import score_answers
from pref_core.item_params import ItemTableError, ParameterRegistry
from pref_core.question_bank import (
    QuestionBankError,
    answer_key_bank,
    load_question_bank,
    parse_question_bank,
)
from pref_core.reporting import serialize_report
from pref_core.validators import AnswerSetError

log = logging.getLogger(__name__)

CFG = load_config()
REGISTRY = ParameterRegistry()
_BANK_CACHE: dict[str, t.Any] = {}

app = FastAPI(title="Preference Scorer API")


@app.get("/")
def root():
    return {"status": "ok", "service": "preference-scorer-api"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(ALLOWED_ORIGINS),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class ScoreReq(BaseModel):
    answers: dict[str, t.Any] = {}
    questions: list[dict[str, t.Any]] | None = None
    strict: bool | None = None
    trace: bool = False
    facets: bool | None = None

class ReloadReq(BaseModel):
    path: str | None = None

# ---- Helpers ----
def _configured_bank(table):
    """External bank from QUESTION_BANK_PATH, else the answer-key bank of the table."""
    path = CFG.get("QUESTION_BANK_PATH")
    key = f"{path}|{table.version}"
    bank = _BANK_CACHE.get(key)
    if bank is None:
        bank = load_question_bank(path) if path else answer_key_bank(table)
        _BANK_CACHE.clear()
        _BANK_CACHE[key] = bank
    return bank

# ---- Health ----
@app.get("/health")
def health():
    table = REGISTRY.current()
    return {
        "params_version": table.version,
        "items": len(table),
        "question_bank": CFG.get("QUESTION_BANK_PATH") or "answer-key",
    }


@app.get("/params")
def params():
    table = REGISTRY.current()
    summary = table.summary()
    summary["dichotomyOrder"] = list(DICHOTOMY_ORDER)
    summary["poles"] = {d: list(DICHOTOMIES[d].poles) for d in DICHOTOMY_ORDER}
    summary["tieBreakers"] = {d: DICHOTOMIES[d].tie_breaker for d in DICHOTOMY_ORDER}
    return summary


@app.post("/score")
def score(req: ScoreReq = Body(...)):
    table = REGISTRY.current()  # one snapshot for the whole request
    inline = req.questions is not None
    try:
        bank = parse_question_bank(req.questions) if inline else _configured_bank(table)
        strict = bool(CFG.get("STRICT_ANSWERS")) if req.strict is None else req.strict
        report = score_answers(
            req.answers, bank, table,
            strict=strict,
            facets=req.facets if req.facets is not None else CFG.get("FACET_SCORES_ENABLED"),
            trace=req.trace and AUDIT_EXPORT_ENABLED,
        )
    except (AnswerSetError, QuestionBankError) as exc:
        raise HTTPException(422, str(exc))
    except ItemTableError as exc:
        # a caller-supplied bank that disagrees with the table is the caller's fault
        if inline:
            raise HTTPException(422, str(exc))
        log.error("item parameter fault: %s", exc)
        raise HTTPException(500, f"item parameter fault: {exc}")
    return serialize_report(report)


def _reload_source(requested: str | None) -> str | None:
    """Configured dataset, or a client path confined to PARAMS_DATA_DIR."""
    if not requested:
        return CFG.get("ITEM_PARAMS_PATH")
    data_dir = CFG.get("PARAMS_DATA_DIR")
    if not data_dir:
        raise HTTPException(403, "reload paths are disabled")
    root = Path(data_dir).resolve()
    target = (root / requested).resolve()
    if not target.is_relative_to(root):
        raise HTTPException(403, "reload path is outside the parameter data directory")
    return str(target)


@app.post("/params/reload")
def reload_params(req: ReloadReq = Body(default=ReloadReq())):
    source = _reload_source(req.path)
    try:
        table = REGISTRY.reload(source)
    except ItemTableError as exc:
        log.warning("parameter reload from %s failed: %s", source or "packaged dataset", exc)
        raise HTTPException(422, "item parameters could not be loaded")
    return {"ok": True, "params_version": table.version, "items": len(table)}
