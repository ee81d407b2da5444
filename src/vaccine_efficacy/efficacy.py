"""Vaccine efficacy derived from posterior infection rates."""

from typing import Dict

import numpy as np
import pandas as pd
import structlog

from vaccine_efficacy.errors import DegenerateEfficacyError

log = structlog.get_logger()


def efficacy(vaccine_rate, placebo_rate):
    """
    Relative risk reduction, `1 - vaccine_rate / placebo_rate`.

    Works elementwise on scalars and arrays. A placebo rate of zero gives a
    non-finite result.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return 1.0 - np.divide(vaccine_rate, placebo_rate)


class EfficacyDraws:
    """
    Efficacy draws per vaccine, row-aligned with the posterior draws.

    `table` has one column per vaccine; excluded draws are NaN so that rows
    stay paired across vaccines.
    """

    def __init__(self, table: pd.DataFrame, excluded: Dict[str, int]):
        self.table = table
        self.excluded = excluded

    @property
    def vaccines(self) -> list[str]:
        return list(self.table.columns)

    def finite(self, vaccine: str) -> np.ndarray:
        """The usable draws of one vaccine."""
        return self.table[vaccine].dropna().to_numpy()


def compute_efficacy(rates: pd.DataFrame, placebo_floor: float = 0.0) -> EfficacyDraws:
    """
    Apply the efficacy transform to every posterior draw.

    Parameters
    ----------
    rates : pd.DataFrame
        Rate draws with a column MultiIndex of (vaccine, arm).
    placebo_floor : float, optional
        Draws whose placebo rate is at or below this value are excluded.

    Returns
    -------
    EfficacyDraws
        The efficacy table and the number of excluded draws per vaccine.

    Raises
    ------
    DegenerateEfficacyError
        If no finite draw remains for some vaccine.
    """
    vaccine_rates = rates.xs("vaccine", axis=1, level="arm")
    placebo_rates = rates.xs("placebo", axis=1, level="arm")

    table = pd.DataFrame(
        efficacy(vaccine_rates.to_numpy(), placebo_rates.to_numpy()),
        index=rates.index,
        columns=list(vaccine_rates.columns),
    )
    invalid = (placebo_rates.to_numpy() <= placebo_floor) | ~np.isfinite(table.to_numpy())
    table = table.mask(invalid)

    excluded = {name: int(count) for name, count in zip(table.columns, invalid.sum(axis=0))}
    for name, count in excluded.items():
        if count:
            log.warning("efficacy.excluded_draws", vaccine=name, excluded=count, total=len(table))
        if count == len(table):
            raise DegenerateEfficacyError(
                f"All {count} efficacy draws for '{name}' are non-finite."
            )

    return EfficacyDraws(table, excluded)
