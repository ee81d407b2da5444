"""Convergence checks for sampling runs."""

import math

import arviz as az
import structlog

from vaccine_efficacy.config import ConvergenceThresholds
from vaccine_efficacy.errors import ConvergenceError
from vaccine_efficacy.sampler import PosteriorDraws
from vaccine_efficacy.schemas import ConvergenceReport

log = structlog.get_logger()


def count_divergences(idata: az.InferenceData) -> int:
    if "sample_stats" not in idata.groups():
        return 0
    stats = idata.sample_stats
    if "diverging" not in stats:
        return 0
    return int(stats["diverging"].sum())


def check_convergence(
    draws: PosteriorDraws,
    thresholds: ConvergenceThresholds | None = None,
) -> ConvergenceReport:
    """
    Compute R-hat, effective sample sizes and divergences for the rates.

    Parameters
    ----------
    draws : PosteriorDraws
        The sampling run to diagnose.
    thresholds : ConvergenceThresholds, optional
        The limits the run is judged against.

    Returns
    -------
    ConvergenceReport
        The diagnostics per variable. `failures` lists every limit that was
        breached; an empty list means the run passed.
    """
    thresholds = thresholds or ConvergenceThresholds()
    summary = az.summary(draws.idata, var_names=["rate"], kind="diagnostics")

    rhat = summary["r_hat"].to_dict()
    ess_bulk = summary["ess_bulk"].to_dict()
    ess_tail = summary["ess_tail"].to_dict()
    divergences = count_divergences(draws.idata)

    failures = []
    for name, value in rhat.items():
        if math.isnan(value):
            failures.append(f"{name}: r_hat undefined (needs at least two chains)")
        elif value > thresholds.rhat_max:
            failures.append(f"{name}: r_hat {value:.3f} > {thresholds.rhat_max}")
    for label, values in (("ess_bulk", ess_bulk), ("ess_tail", ess_tail)):
        for name, value in values.items():
            if math.isnan(value) or value < thresholds.ess_min:
                failures.append(f"{name}: {label} {value:.0f} < {thresholds.ess_min:.0f}")
    if divergences > thresholds.max_divergences:
        failures.append(
            f"{divergences} divergent transitions > {thresholds.max_divergences}"
        )

    report = ConvergenceReport(
        rhat=rhat,
        ess_bulk=ess_bulk,
        ess_tail=ess_tail,
        divergences=divergences,
        failures=failures,
    )
    log.info(
        "diagnostics.checked",
        passed=report.passed,
        max_rhat=max(rhat.values()),
        min_ess_bulk=min(ess_bulk.values()),
        divergences=divergences,
    )
    return report


def require_convergence(
    draws: PosteriorDraws,
    thresholds: ConvergenceThresholds | None = None,
) -> ConvergenceReport:
    """Like `check_convergence`, but raise `ConvergenceError` on failure."""
    report = check_convergence(draws, thresholds)
    if not report.passed:
        log.error("diagnostics.failed", failures=report.failures)
        raise ConvergenceError(
            "Sampler did not converge: " + "; ".join(report.failures), report=report
        )
    return report
