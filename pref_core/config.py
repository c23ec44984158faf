from __future__ import annotations
import os, json, pathlib


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str | None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# latent trait scale; item locations are calibrated inside this range
THETA_MIN: float = -3.0
THETA_MAX: float = 3.0
THETA_START: float = 0.0

NR_MAX_ITER: int = 20
NR_TOL: float = 1e-4
CURVATURE_MIN: float = 1e-7
LOG_EPS: float = 1e-9

PCI_MAX: int = 30
PCC_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (26, "Very Clear"),
    (16, "Clear"),
    (6, "Moderate"),
)
PCC_FLOOR: str = "Slight"

ITEM_PARAMS_PATH: str | None = None
# reload requests may only name files under this directory; unset disables client paths
PARAMS_DATA_DIR: str | None = None
QUESTION_BANK_PATH: str | None = None
STRICT_ANSWERS: bool = False
FACET_SCORES_ENABLED: bool = True
AUDIT_EXPORT_ENABLED: bool = True

ALLOWED_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "dichotomy",
    "iteration",
    "theta_before",
    "theta_after",
    "gradient",
    "curvature",
    "stop",
)
# // env overrides for staging/ops; defaults match the calibrated scale.
NR_MAX_ITER = _env_int("NR_MAX_ITER", NR_MAX_ITER)
NR_TOL = _env_float("NR_TOL", NR_TOL)
CURVATURE_MIN = _env_float("CURVATURE_MIN", CURVATURE_MIN)
ITEM_PARAMS_PATH = _env_str("ITEM_PARAMS_PATH", ITEM_PARAMS_PATH)
PARAMS_DATA_DIR = _env_str("PARAMS_DATA_DIR", PARAMS_DATA_DIR)
QUESTION_BANK_PATH = _env_str("QUESTION_BANK_PATH", QUESTION_BANK_PATH)
STRICT_ANSWERS = _env_bool("STRICT_ANSWERS", STRICT_ANSWERS)
FACET_SCORES_ENABLED = _env_bool("FACET_SCORES_ENABLED", FACET_SCORES_ENABLED)
AUDIT_EXPORT_ENABLED = _env_bool("AUDIT_EXPORT_ENABLED", AUDIT_EXPORT_ENABLED)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
_origins = _env_str("ALLOWED_ORIGINS", None)
if _origins:
    ALLOWED_ORIGINS = tuple(o.strip() for o in _origins.split(",") if o.strip())


def load_config(path: str = "config.json") -> dict:
    """Overlay an optional JSON file with environment values.

    Only the keys consumed by the API and CLI entry points are read here; the
    numeric estimator settings stay module constants.
    """
    cfg: dict = {}
    p = pathlib.Path(path)
    if p.exists():
        try:
            cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            cfg = {}
    cfg.setdefault("ITEM_PARAMS_PATH", ITEM_PARAMS_PATH)
    cfg.setdefault("PARAMS_DATA_DIR", PARAMS_DATA_DIR)
    cfg.setdefault("QUESTION_BANK_PATH", QUESTION_BANK_PATH)
    cfg.setdefault("STRICT_ANSWERS", STRICT_ANSWERS)
    cfg.setdefault("FACET_SCORES_ENABLED", FACET_SCORES_ENABLED)
    e = os.environ
    if e.get("ITEM_PARAMS_PATH"): cfg["ITEM_PARAMS_PATH"] = e.get("ITEM_PARAMS_PATH")
    if e.get("PARAMS_DATA_DIR"): cfg["PARAMS_DATA_DIR"] = e.get("PARAMS_DATA_DIR")
    if e.get("QUESTION_BANK_PATH"): cfg["QUESTION_BANK_PATH"] = e.get("QUESTION_BANK_PATH")
    if e.get("STRICT_ANSWERS"): cfg["STRICT_ANSWERS"] = _env_bool("STRICT_ANSWERS", False)
    if e.get("FACET_SCORES_ENABLED"): cfg["FACET_SCORES_ENABLED"] = _env_bool("FACET_SCORES_ENABLED", True)
    return cfg
