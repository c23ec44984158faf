from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple, Literal
StopReason = Literal["empty","flat","converged","max_iter"]
@dataclass(frozen=True)
class Dichotomy:
    name: str
    poles: Tuple[str, str]
    tie_breaker: str
    positive_facets: Tuple[str, ...] = ()
    negative_facets: Tuple[str, ...] = ()
    @property
    def positive_pole(self) -> str: return self.poles[0]
    @property
    def negative_pole(self) -> str: return self.poles[1]
    @property
    def facets(self) -> Tuple[str, ...]: return self.positive_facets + self.negative_facets
@dataclass(frozen=True)
class ItemParams:
    index: int; dichotomy: str; a: float; b: float
    facet: Optional[str] = None
    flags: Tuple[str, ...] = ()
@dataclass(frozen=True)
class Option:
    key: str; pole: str; score_key: int
    text: Optional[str] = None
@dataclass(frozen=True)
class Question:
    number: int; dichotomy: str
    options: Mapping[str, Option]
    text: Optional[str] = None
@dataclass(frozen=True)
class ItemResponse:
    a: float; b: float; u: int
@dataclass(frozen=True)
class ThetaEstimate:
    theta: float
    iterations: int
    converged: bool
    stop_reason: StopReason
    se: float
    n_items: int
@dataclass(frozen=True)
class DichotomyResult:
    dichotomy_name: str
    preference: str
    theta: float
    pci: int
    pcc: str
    theta_raw: float = 0.0
    se: float = float("inf")
    n_answered: int = 0
    iterations: int = 0
    converged: bool = True
    def to_dict(self) -> Dict[str, object]:
        return {
            "preference": self.preference,
            "theta": self.theta,
            "pci": self.pci,
            "pcc": self.pcc,
            "dichotomyName": self.dichotomy_name,
        }
@dataclass(frozen=True)
class IgnoredAnswer:
    number: object; value: object; reason: str
@dataclass
class ScoreReport:
    results: Dict[str, DichotomyResult]
    params_version: str
    answered: int = 0
    omitted: int = 0
    facet_scores: Dict[str, float] = field(default_factory=dict)
    ignored: List[IgnoredAnswer] = field(default_factory=list)
    audit_events: List[Dict[str, object]] = field(default_factory=list)
