"""Posterior sampling of the trial model."""

from typing import Mapping, Protocol

import arviz as az
import pandas as pd
import structlog

from vaccine_efficacy.config import SamplerConfig
from vaccine_efficacy.pymc_models.binomial_trials import ARMS, fit_vaccine_model
from vaccine_efficacy.schemas import VaccineTrial

log = structlog.get_logger()


class PosteriorDraws:
    """
    The pooled, post-warm-up draws of a sampling run.

    Wraps the ArviZ `InferenceData` returned by the sampler and exposes the
    `rate` variable as a flat table with one row per draw and one column per
    (vaccine, arm).
    """

    def __init__(self, idata: az.InferenceData):
        if "rate" not in idata.posterior:
            raise ValueError("Posterior has no 'rate' variable.")
        self.idata = idata
        self._rates = None

    @property
    def vaccines(self) -> list[str]:
        return [str(v) for v in self.idata.posterior["vaccine"].values]

    @property
    def n_chains(self) -> int:
        return self.idata.posterior.sizes["chain"]

    @property
    def n_draws(self) -> int:
        return self.idata.posterior.sizes["draw"]

    @property
    def rates(self) -> pd.DataFrame:
        """Rates indexed by (chain, draw) with (vaccine, arm) columns."""
        if self._rates is None:
            table = self.idata.posterior["rate"].to_series().unstack(["vaccine", "arm"])
            columns = pd.MultiIndex.from_product(
                [self.vaccines, list(ARMS)], names=["vaccine", "arm"]
            )
            self._rates = table.reindex(columns=columns)
        return self._rates


class Sampler(Protocol):
    """Anything that can turn trial data into posterior draws."""

    def draw_posterior(
        self, trials: Mapping[str, VaccineTrial], config: SamplerConfig
    ) -> PosteriorDraws: ...


class PyMCSampler:
    """Draws the posterior with PyMC's NUTS sampler."""

    def __init__(self, progressbar: bool = False):
        self.progressbar = progressbar

    def draw_posterior(
        self, trials: Mapping[str, VaccineTrial], config: SamplerConfig
    ) -> PosteriorDraws:
        log.info(
            "sampler.start",
            vaccines=list(trials),
            chains=config.chains,
            draws=config.draws,
            tune=config.tune,
            seed=config.random_seed,
        )
        idata = fit_vaccine_model(
            trials,
            draws=config.draws,
            tune=config.tune,
            chains=config.chains,
            cores=config.cores,
            random_seed=config.random_seed,
            target_accept=config.target_accept,
            progressbar=self.progressbar,
        )
        draws = PosteriorDraws(idata)
        log.info("sampler.done", total_draws=draws.n_chains * draws.n_draws)
        return draws
