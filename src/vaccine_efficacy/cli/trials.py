"""CLI commands for inspecting trial data."""

import json
import sys

import click

from vaccine_efficacy.errors import InvalidTrialDataError
from vaccine_efficacy.trials import DEFAULT_TRIALS, dump_trials, load_trials


@click.group("trials")
def trials_cli():
    """Show and validate trial data."""
    pass


@trials_cli.command("show")
def show_trials():
    """Print the published trial counts as JSON."""
    click.echo(json.dumps(dump_trials(DEFAULT_TRIALS), indent=2))


@trials_cli.command("validate")
@click.argument("trials_file", type=click.File("r"), default="-")
def validate_trials_file(trials_file):
    """Check a trial file and print its normalized contents."""
    try:
        trials = load_trials(trials_file)
    except InvalidTrialDataError as e:
        raise click.ClickException(str(e)) from e
    click.echo(json.dumps(dump_trials(trials), indent=2))
    if trials_file is not sys.stdin:
        click.echo(f"{len(trials)} trial(s) in {trials_file.name} are valid", err=True)
