"""Point estimates, credible intervals and comparisons of efficacy draws."""

from itertools import permutations
from typing import Iterable

import numpy as np

from vaccine_efficacy.efficacy import EfficacyDraws
from vaccine_efficacy.schemas import (
    Comparison,
    ConvergenceReport,
    CredibleInterval,
    EfficacyReport,
    EfficacySummary,
)


def point_estimate(draws: np.ndarray, method: str = "median") -> float:
    if method == "median":
        return float(np.median(draws))
    if method == "mean":
        return float(np.mean(draws))
    raise ValueError(f"Unsupported point estimate '{method}'. Use 'median' or 'mean'.")


def credible_interval(draws: np.ndarray, prob: float) -> CredibleInterval:
    """
    Central credible interval holding `prob` of the draws.

    The bounds are the `(1 - prob) / 2` and `(1 + prob) / 2` quantiles.
    """
    if not 0.0 < prob < 1.0:
        raise ValueError(f"Interval probability {prob} must lie in (0, 1).")
    lower, upper = np.quantile(draws, [(1.0 - prob) / 2, (1.0 + prob) / 2])
    return CredibleInterval(prob=prob, lower=float(lower), upper=float(upper))


def prob_greater(efficacy: EfficacyDraws, better: str, worse: str) -> float:
    """
    Estimate P(efficacy[better] > efficacy[worse]).

    Draws are compared row by row, so both columns must come from the same
    joint posterior sample. Rows where either value was excluded are dropped.
    """
    paired = efficacy.table[[better, worse]].dropna()
    if paired.empty:
        raise ValueError(f"No paired draws for '{better}' and '{worse}'.")
    return float((paired[better] > paired[worse]).mean())


def summarize_vaccine(
    draws: np.ndarray,
    probs: Iterable[float],
    method: str = "median",
    n_excluded: int = 0,
) -> EfficacySummary:
    return EfficacySummary(
        point_estimate=point_estimate(draws, method),
        mean=float(np.mean(draws)),
        median=float(np.median(draws)),
        sd=float(np.std(draws, ddof=1)) if len(draws) > 1 else 0.0,
        intervals=[credible_interval(draws, p) for p in sorted(probs)],
        n_draws=len(draws),
        n_excluded=n_excluded,
    )


def summarize_efficacy(
    efficacy: EfficacyDraws,
    probs: Iterable[float] = (0.5, 0.9, 0.95),
    method: str = "median",
    convergence: ConvergenceReport | None = None,
) -> EfficacyReport:
    """
    Summarize every vaccine's efficacy and compare each ordered pair.

    Parameters
    ----------
    efficacy : EfficacyDraws
        Paired efficacy draws per vaccine.
    probs : Iterable[float], optional
        Masses of the nested credible intervals.
    method : str, optional
        "median" or "mean"; recorded in the report.
    convergence : ConvergenceReport, optional
        Diagnostics of the sampling run, attached to the report.

    Returns
    -------
    EfficacyReport
    """
    probs = list(probs)
    vaccines = {
        name: summarize_vaccine(
            efficacy.finite(name), probs, method, efficacy.excluded.get(name, 0)
        )
        for name in efficacy.vaccines
    }
    comparisons = [
        Comparison(better=a, worse=b, probability=prob_greater(efficacy, a, b))
        for a, b in permutations(efficacy.vaccines, 2)
    ]
    return EfficacyReport(
        point_estimate_method=method,
        vaccines=vaccines,
        comparisons=comparisons,
        convergence=convergence,
    )
