from __future__ import annotations
from dataclasses import replace
from typing import Union
from .clarity import preference_for, pci_from_theta, pcc_category
from .dichotomies import get_dichotomy
from .types import Dichotomy, DichotomyResult, ThetaEstimate


def _resolve(dichotomy: Union[Dichotomy, str]) -> Dichotomy:
    if isinstance(dichotomy, Dichotomy):
        return dichotomy
    return get_dichotomy(str(dichotomy))


def _reported(theta: float) -> float:
    # + 0.0 folds -0.0 into 0.0
    return round(theta, 2) + 0.0


def score_theta(theta: float, dichotomy: Union[Dichotomy, str]) -> DichotomyResult:
    """Bare theta → preference letter, PCI and PCC with no estimator diagnostics."""
    d = _resolve(dichotomy)
    theta = float(theta)
    pci = pci_from_theta(theta)
    return DichotomyResult(
        dichotomy_name=d.name,
        preference=preference_for(theta, d),
        theta=_reported(theta),
        pci=pci,
        pcc=pcc_category(pci),
        theta_raw=theta,
    )


def score_dichotomy(estimate: ThetaEstimate, dichotomy: Union[Dichotomy, str]) -> DichotomyResult:
    """
    Returns the reported result for one dichotomy.
    Preference and PCI are taken from the full-precision theta; only the
    reported ``theta`` is rounded to 2 decimals.
    """
    return replace(
        score_theta(estimate.theta, dichotomy),
        se=estimate.se,
        n_answered=estimate.n_items,
        iterations=estimate.iterations,
        converged=estimate.converged,
    )
