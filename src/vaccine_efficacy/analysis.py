"""The end-to-end efficacy analysis."""

from pathlib import Path
from typing import Any, Mapping, Optional

import structlog

from vaccine_efficacy.config import AnalysisConfig
from vaccine_efficacy.diagnostics import require_convergence
from vaccine_efficacy.efficacy import EfficacyDraws, compute_efficacy
from vaccine_efficacy.errors import InvalidTrialDataError
from vaccine_efficacy.plots import plot_densities, plot_intervals, plot_trace, save_figure
from vaccine_efficacy.pymc_models.binomial_trials import trial_counts
from vaccine_efficacy.sampler import PosteriorDraws, PyMCSampler, Sampler
from vaccine_efficacy.schemas import EfficacyReport
from vaccine_efficacy.summary import summarize_efficacy
from vaccine_efficacy.trials import DEFAULT_TRIALS, validate_trials

log = structlog.get_logger()


class AnalysisResult:
    """Everything produced by one run of `run_analysis`."""

    def __init__(
        self,
        report: EfficacyReport,
        draws: PosteriorDraws,
        efficacy: EfficacyDraws,
        artifacts: list[Path],
        comparison: Optional[float] = None,
    ):
        self.report = report
        self.draws = draws
        self.efficacy = efficacy
        self.artifacts = artifacts
        self.comparison = comparison


def run_analysis(
    trials: Mapping[str, Any] | None = None,
    config: AnalysisConfig | None = None,
    sampler: Sampler | None = None,
) -> AnalysisResult:
    """
    Sample the posterior, check convergence, and summarize vaccine efficacy.

    The run stops at the first failure: invalid trial data, failed
    diagnostics, degenerate efficacy draws or an unwritable output path all
    raise. The trace plot is written before the convergence gate so that a
    failed run still leaves its diagnostics behind.

    Parameters
    ----------
    trials : Mapping[str, Any], optional
        Vaccine name to trial data. Defaults to the published Moderna and
        Pfizer counts.
    config : AnalysisConfig, optional
        Sampling, diagnostics, summary and output settings.
    sampler : Sampler, optional
        Posterior sampler. Defaults to `PyMCSampler`.

    Returns
    -------
    AnalysisResult
    """
    trials = validate_trials(DEFAULT_TRIALS if trials is None else trials)
    config = config or AnalysisConfig()
    sampler = sampler or PyMCSampler()

    # Fail on bad data before any sampling happens
    trial_counts(trials)
    if config.comparison is not None:
        missing = [name for name in config.comparison if name not in trials]
        if missing:
            raise InvalidTrialDataError(
                f"Comparison refers to unknown vaccines: {', '.join(missing)}"
            )

    structlog.contextvars.bind_contextvars(seed=config.sampler.random_seed)
    try:
        draws = sampler.draw_posterior(trials, config.sampler)

        artifacts = []
        if config.output_dir is not None:
            artifacts += save_figure(
                plot_trace(draws), config.output_dir, "trace", config.formats
            )

        convergence = require_convergence(draws, config.convergence)
        efficacy = compute_efficacy(draws.rates, config.placebo_floor)
        report = summarize_efficacy(
            efficacy,
            probs=config.interval_probs,
            method=config.point_estimate,
            convergence=convergence,
        )

        if config.output_dir is not None:
            artifacts += save_figure(
                plot_intervals(report), config.output_dir, "efficacy_intervals", config.formats
            )
            artifacts += save_figure(
                plot_densities(efficacy), config.output_dir, "efficacy_density", config.formats
            )

        comparison = None
        if config.comparison is not None:
            comparison = report.comparison(*config.comparison)
            log.info(
                "analysis.comparison",
                better=config.comparison[0],
                worse=config.comparison[1],
                probability=comparison,
            )

        for name, summary in report.vaccines.items():
            log.info(
                "analysis.efficacy",
                vaccine=name,
                method=report.point_estimate_method,
                estimate=summary.point_estimate,
                excluded=summary.n_excluded,
            )
    finally:
        structlog.contextvars.unbind_contextvars("seed")

    return AnalysisResult(report, draws, efficacy, artifacts, comparison)
