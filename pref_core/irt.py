"""2PL IRT utilities used by the scoring engine.

This module provides the logistic response model, the log-likelihood of a set
of binary responses, Fisher information, and the Newton–Raphson maximum
likelihood estimator for the person trait level ``theta``.  Nothing here keeps
state between calls, so the functions can be shared freely across concurrent
scoring requests.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from . import config
from .types import ItemResponse, ThetaEstimate

__all__ = [
    "sigma",
    "p_2pl",
    "log_likelihood",
    "item_info",
    "total_info",
    "se_from_info",
    "estimate_theta",
]

StepHook = Callable[[Dict[str, object]], None]


def sigma(x: float) -> float:
    """Return the logistic function ``σ(x) = 1 / (1 + e^{−x})``.

    The implementation guards against overflow for large negative inputs by
    handling the positive and negative halves of the real line separately.
    """

    if x >= 0:
        z = math.exp(-x)
        return 1.0 / (1.0 + z)
    z = math.exp(x)
    return z / (1.0 + z)


def p_2pl(theta: float, a: float, b: float) -> float:
    """Probability of endorsing the positive pole under the 2PL model.

    Parameters
    ----------
    theta: float
        Current estimate of the respondent's trait level.
    a: float
        Item discrimination (slope), strictly positive.
    b: float
        Item location; the trait level at which either pole is equally likely.

    Returns
    -------
    float
        ``σ(a · (theta − b))``
    """

    return sigma(a * (theta - b))


def log_likelihood(theta: float, responses: Iterable[ItemResponse]) -> float:
    """Sum of ``u·ln P + (1−u)·ln(1−P)`` over the observed responses.

    Both ``P`` and ``1 − P`` are floored at ``config.LOG_EPS`` so a saturated
    item never produces ``log(0)``.
    """

    total = 0.0
    for r in responses:
        p = p_2pl(theta, r.a, r.b)
        if r.u:
            total += math.log(max(p, config.LOG_EPS))
        else:
            total += math.log(max(1.0 - p, config.LOG_EPS))
    return total


def item_info(theta: float, a: float, b: float) -> float:
    """Fisher information ``a² · P · (1 − P)`` of a single 2PL item."""

    p = p_2pl(theta, a, b)
    return max((a * a) * p * (1.0 - p), 0.0)


def total_info(theta: float, responses: Iterable[ItemResponse]) -> float:
    return sum(item_info(theta, r.a, r.b) for r in responses)


def se_from_info(info_total: float) -> float:
    """Convert accumulated Fisher information into a standard error."""

    if info_total <= 0.0:
        return float("inf")
    return 1.0 / math.sqrt(info_total)


def _clamp(theta: float) -> float:
    return min(max(theta, config.THETA_MIN), config.THETA_MAX)


def estimate_theta(
    responses: Sequence[ItemResponse],
    on_step: Optional[StepHook] = None,
) -> ThetaEstimate:
    """Maximum-likelihood trait estimate by Newton–Raphson.

    Starting from ``config.THETA_START`` each iteration accumulates the
    gradient ``Σ a(u − P)`` and curvature ``Σ −a²PQ`` of the log-likelihood,
    then steps ``θ − gradient / curvature`` and clamps the result to
    ``[THETA_MIN, THETA_MAX]``.  Iteration stops when the step is below
    ``NR_TOL``, after ``NR_MAX_ITER`` iterations, or early when the curvature
    is flatter than ``CURVATURE_MIN`` (the current θ is kept).

    An empty response list returns θ = 0 without iterating.  ``on_step`` is
    called once per iteration with a trace event; it must not raise.
    """

    n = len(responses)
    if n == 0:
        return ThetaEstimate(
            theta=0.0, iterations=0, converged=True, stop_reason="empty",
            se=float("inf"), n_items=0,
        )

    theta = float(config.THETA_START)
    reason = "max_iter"
    iterations = 0
    for it in range(1, config.NR_MAX_ITER + 1):
        iterations = it
        gradient = 0.0
        curvature = 0.0
        for r in responses:
            p = p_2pl(theta, r.a, r.b)
            q = 1.0 - p
            gradient += r.a * (r.u - p)
            curvature += -(r.a * r.a) * p * q

        if abs(curvature) < config.CURVATURE_MIN:
            reason = "flat"
            _notify(on_step, it, theta, theta, gradient, curvature, reason)
            break

        theta_new = _clamp(theta - gradient / curvature)
        if abs(theta_new - theta) < config.NR_TOL:
            reason = "converged"
            _notify(on_step, it, theta, theta_new, gradient, curvature, reason)
            theta = theta_new
            break

        _notify(on_step, it, theta, theta_new, gradient, curvature, "")
        theta = theta_new

    se = se_from_info(total_info(theta, responses))
    return ThetaEstimate(
        theta=theta,
        iterations=iterations,
        converged=reason in ("converged", "flat"),
        stop_reason=reason,  # type: ignore[arg-type]
        se=se,
        n_items=n,
    )


def _notify(
    hook: Optional[StepHook],
    iteration: int,
    before: float,
    after: float,
    gradient: float,
    curvature: float,
    stop: str,
) -> None:
    if hook is None:
        return
    hook({
        "iteration": iteration,
        "theta_before": before,
        "theta_after": after,
        "gradient": gradient,
        "curvature": curvature,
        "stop": stop,
    })


def _demo_sequence() -> List[float]:
    """Run a developer demo: θ as answers accumulate toward the positive pole."""

    thetas: List[float] = []
    responses: List[ItemResponse] = []
    seq_b = [-1.2, 0.7, -0.4, 1.5, 0.0, -1.8, 1.1, 0.3]
    seq_u = [1, 0, 1, 1, 1, 0, 1, 1]

    print("step |   b   | u | theta    |   SE")
    for idx, (b, u) in enumerate(zip(seq_b, seq_u), start=1):
        responses.append(ItemResponse(a=2.0, b=b, u=u))
        est = estimate_theta(responses)
        thetas.append(est.theta)
        print(f" {idx:2d}  | {b:+.2f} | {u:d} | {est.theta:7.4f} | {est.se:5.4f}")
    return thetas


if __name__ == "__main__":  # pragma: no cover - developer utility
    assert abs(sigma(0.0) - 0.5) < 1e-9
    assert p_2pl(1.0, 1.5, 0.0) > 0.5
    assert abs(item_info(0.0, 1.0, 0.0) - 0.25) < 1e-6
    hist = _demo_sequence()
    print(f"Final θ: {hist[-1]:.4f}")
