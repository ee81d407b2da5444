import click
from pydantic import ValidationError

from vaccine_efficacy.schemas import TrialArm, VaccineTrial


class TrialSpec(click.ParamType):
    """
    A custom Click parameter type that parses a two-arm trial written as
    `name:n_vaccine:s_vaccine:n_placebo:s_placebo` into a
    `(name, VaccineTrial)` pair.
    """

    name = "trial"

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        parts = [p.strip() for p in str(value).split(":")]
        if len(parts) != 5 or not parts[0]:
            self.fail(
                f"'{value}' is not a valid trial. "
                "Expected 'name:n_vaccine:s_vaccine:n_placebo:s_placebo'.",
                param,
                ctx,
            )
        name, *counts = parts
        try:
            n_vacc, s_vacc, n_plac, s_plac = (int(c) for c in counts)
            trial = VaccineTrial(
                vaccine=TrialArm(n=n_vacc, s=s_vacc),
                placebo=TrialArm(n=n_plac, s=s_plac),
            )
        except ValueError as e:
            # pydantic's ValidationError is a ValueError
            detail = e.errors()[0]["msg"] if isinstance(e, ValidationError) else str(e)
            self.fail(f"Invalid counts in trial '{value}': {detail}", param, ctx)
        return name, trial


class VaccinePair(click.ParamType):
    """Two vaccine names written as `better:worse`."""

    name = "pair"

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        parts = [p.strip() for p in str(value).split(":")]
        if len(parts) != 2 or not all(parts):
            self.fail(f"'{value}' is not a valid pair. Expected 'better:worse'.", param, ctx)
        return tuple(parts)
