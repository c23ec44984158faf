# pref_core/dichotomies.py
from __future__ import annotations
from types import MappingProxyType
from typing import Mapping, Tuple
from .types import Dichotomy

DICHOTOMY_ORDER: Tuple[str, ...] = ("E-I", "S-N", "T-F", "J-P")

# Tie-breakers lean toward the less socially sanctioned pole (I, N, F, P).
DICHOTOMIES: Mapping[str, Dichotomy] = MappingProxyType({
    "E-I": Dichotomy(
        name="E-I", poles=("E", "I"), tie_breaker="I",
        positive_facets=("Initiating", "Expressive", "Gregarious", "Active", "Enthusiastic"),
        negative_facets=("Receiving", "Contained", "Intimate", "Reflective", "Quiet"),
    ),
    "S-N": Dichotomy(
        name="S-N", poles=("S", "N"), tie_breaker="N",
        positive_facets=("Concrete", "Realistic", "Practical", "Experiential", "Traditional"),
        negative_facets=("Abstract", "Imaginative", "Conceptual", "Theoretical", "Original"),
    ),
    "T-F": Dichotomy(
        name="T-F", poles=("T", "F"), tie_breaker="F",
        positive_facets=("Logical", "Reasonable", "Questioning", "Critical", "Tough"),
        negative_facets=("Empathetic", "Compassionate", "Accommodating", "Accepting", "Tender"),
    ),
    "J-P": Dichotomy(
        name="J-P", poles=("J", "P"), tie_breaker="P",
        positive_facets=("Systematic", "Planful", "Early Starting", "Scheduled", "Methodical"),
        negative_facets=("Casual", "Open-ended", "Pressure Prompted", "Spontaneous", "Emergent"),
    ),
})


def get_dichotomy(name: str) -> Dichotomy:
    try:
        return DICHOTOMIES[name]
    except KeyError:
        raise ValueError(f"unknown dichotomy {name!r}; expected one of {', '.join(DICHOTOMY_ORDER)}") from None
