"""CLI command that runs the efficacy analysis."""

import json
from pathlib import Path
from typing import Optional

import click
import structlog
from pydantic import ValidationError

from vaccine_efficacy.analysis import run_analysis
from vaccine_efficacy.cli.cli_types import TrialSpec, VaccinePair
from vaccine_efficacy.config import AnalysisConfig
from vaccine_efficacy.errors import VaccineEfficacyError
from vaccine_efficacy.logging_config import configure_logging
from vaccine_efficacy.sampler import PyMCSampler
from vaccine_efficacy.trials import DEFAULT_TRIALS, load_trials

log = structlog.get_logger()


def make_sampler(progressbar: bool):
    return PyMCSampler(progressbar=progressbar)


@click.command("run")
@click.option(
    "--trials-file",
    type=click.File("r"),
    default=None,
    help="JSON file of trials. Defaults to the published Moderna and Pfizer counts.",
)
@click.option(
    "--trial",
    "trial_specs",
    type=TrialSpec(),
    multiple=True,
    help="Trial in name:n_vaccine:s_vaccine:n_placebo:s_placebo format. "
    "Can be specified multiple times.",
)
@click.option("--seed", type=int, default=None, help="Random seed for the sampler.")
@click.option("--chains", type=click.IntRange(min=1), default=None)
@click.option("--draws", type=click.IntRange(min=1), default=None, help="Draws per chain.")
@click.option("--tune", type=click.IntRange(min=0), default=None, help="Warm-up per chain.")
@click.option("--cores", type=click.IntRange(min=1), default=None)
@click.option(
    "--point-estimate",
    type=click.Choice(["median", "mean"], case_sensitive=False),
    default=None,
)
@click.option(
    "--interval",
    "intervals",
    type=click.FloatRange(0, 1, min_open=True, max_open=True),
    multiple=True,
    help="Credible interval mass. Can be specified multiple times.",
)
@click.option(
    "--compare",
    type=VaccinePair(),
    default=None,
    help="Report P(better > worse) for the pair 'better:worse'.",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the figures.",
)
@click.option(
    "--format",
    "formats",
    multiple=True,
    help="Figure format, e.g. png or svg. Can be specified multiple times.",
)
@click.option("--no-plots", is_flag=True, help="Skip writing figures.")
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON.")
@click.option("--progress", is_flag=True, help="Show the sampler progress bar.")
@click.option("--log-level", default=None, help="Overrides LOG_LEVEL.")
def run_cli(
    trials_file,
    trial_specs,
    seed: Optional[int],
    chains: Optional[int],
    draws: Optional[int],
    tune: Optional[int],
    cores: Optional[int],
    point_estimate: Optional[str],
    intervals: tuple[float],
    compare: Optional[tuple[str, str]],
    output_dir: Optional[Path],
    formats: tuple[str],
    no_plots: bool,
    as_json: bool,
    progress: bool,
    log_level: Optional[str],
):
    """Estimate and compare vaccine efficacy from trial counts."""
    configure_logging(log_level)

    try:
        if trials_file is not None:
            trials = load_trials(trials_file)
        else:
            trials = {} if trial_specs else dict(DEFAULT_TRIALS)
        trials.update(dict(trial_specs))

        config = AnalysisConfig.from_env()
        sampler_overrides = {
            "random_seed": seed,
            "chains": chains,
            "draws": draws,
            "tune": tune,
            "cores": cores,
        }
        updates = {
            "sampler": {
                **config.sampler.model_dump(),
                **{k: v for k, v in sampler_overrides.items() if v is not None},
            }
        }
        if point_estimate:
            updates["point_estimate"] = point_estimate.lower()
        if intervals:
            updates["interval_probs"] = list(intervals)
        if formats:
            updates["formats"] = list(formats)
        if output_dir is not None:
            updates["output_dir"] = output_dir
        if no_plots:
            updates["output_dir"] = None
        if compare is not None:
            updates["comparison"] = compare
        elif config.comparison and not set(config.comparison) <= set(trials):
            updates["comparison"] = None
        config = AnalysisConfig.model_validate({**config.model_dump(), **updates})

        result = run_analysis(trials, config, make_sampler(progress))
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    except VaccineEfficacyError as e:
        log.error("analysis.failed", error=str(e), error_type=type(e).__name__)
        raise click.ClickException(str(e)) from e

    if as_json:
        payload = result.report.model_dump()
        payload["artifacts"] = [str(p) for p in result.artifacts]
        click.echo(json.dumps(payload, indent=2))
        return

    for name, summary in result.report.vaccines.items():
        widest = summary.intervals[-1]
        click.echo(
            f"{name}: {result.report.point_estimate_method} efficacy "
            f"{summary.point_estimate:.1%} "
            f"({widest.prob:.0%} CI {widest.lower:.1%} to {widest.upper:.1%})"
        )
    if result.comparison is not None:
        better, worse = config.comparison
        click.echo(
            f"P({better} efficacy > {worse} efficacy) = {result.comparison:.4f}"
        )
