"""CLI commands for generating synthetic trial data."""

import json
import sys

import click

from vaccine_efficacy.pymc_models.binomial_trials import simulate_trial
from vaccine_efficacy.trials import dump_trials


@click.group("generate")
def generate_cli():
    """Generate synthetic trial data."""
    pass


@generate_cli.command("trial")
@click.option("--name", default="Synthetic", help="Vaccine name for the trial.")
@click.option(
    "--participants", "-n", default=15000, type=click.IntRange(min=1),
    help="Participants per arm.",
)
@click.option(
    "--placebo-participants", default=None, type=click.IntRange(min=1),
    help="Participants in the placebo arm (defaults to --participants).",
)
@click.option(
    "--vaccine-rate", default=0.0004, type=click.FloatRange(0, 1),
    help="True infection probability in the vaccine arm.",
)
@click.option(
    "--placebo-rate", default=0.006, type=click.FloatRange(0, 1),
    help="True infection probability in the placebo arm.",
)
@click.option("--seed", type=int, default=None, help="Random seed.")
@click.option(
    "--output",
    "-o",
    type=click.File("w"),
    default=sys.stdout,
    help="Output file path (defaults to stdout).",
)
def generate_trial(
    name: str,
    participants: int,
    placebo_participants: int | None,
    vaccine_rate: float,
    placebo_rate: float,
    seed: int | None,
    output,
):
    """Simulate a two-arm trial with known infection rates."""
    trial = simulate_trial(
        vaccine_rate=vaccine_rate,
        placebo_rate=placebo_rate,
        n_vaccine=participants,
        n_placebo=placebo_participants,
        random_seed=seed,
    )
    json.dump(dump_trials({name: trial}), output, indent=2)
    if output is not sys.stdout:
        click.echo(f"Successfully generated trial '{name}' to {output.name}", err=True)
