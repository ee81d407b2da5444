# ruff: noqa: E402
"""Main CLI command group."""

import warnings

# Suppress the Numba FNV hashing warning, which is not relevant to our use case.
# This must be done before any pymc/numba imports happen.
warnings.filterwarnings(
    "ignore",
    message=".*FNV hashing is not implemented in Numba.*",
    category=UserWarning,
    module="numba.cpython.hashing",
)

import click

from vaccine_efficacy.cli.generate import generate_cli
from vaccine_efficacy.cli.run import run_cli
from vaccine_efficacy.cli.trials import trials_cli

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(context_settings=CONTEXT_SETTINGS)
def cli():
    """vaccine-efficacy command line interface."""
    pass


cli.add_command(run_cli)
cli.add_command(generate_cli)
cli.add_command(trials_cli)


def main():
    """CLI entrypoint."""
    cli()


if __name__ == "__main__":
    main()
