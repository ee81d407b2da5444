import matplotlib

matplotlib.use("Agg")

import arviz as az  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402

from vaccine_efficacy.config import AnalysisConfig, ConvergenceThresholds, SamplerConfig  # noqa: E402
from vaccine_efficacy.pymc_models.binomial_trials import ARMS, trial_counts  # noqa: E402
from vaccine_efficacy.sampler import PosteriorDraws  # noqa: E402


def make_draws(rate: np.ndarray, vaccines, diverging=None) -> PosteriorDraws:
    """Wrap a (chain, draw, vaccine, arm) array of rates as posterior draws."""
    if diverging is None:
        diverging = np.zeros(rate.shape[:2], dtype=bool)
    idata = az.from_dict(
        posterior={"rate": rate},
        sample_stats={"diverging": diverging},
        coords={"vaccine": list(vaccines), "arm": list(ARMS)},
        dims={"rate": ["vaccine", "arm"]},
    )
    return PosteriorDraws(idata)


class ConjugateSampler:
    """
    Draws from the exact Beta(s + 1, n - s + 1) posterior of each arm.

    Stands in for NUTS: same model, deterministic for a seed, and fast.
    """

    def __init__(self):
        self.calls = 0

    def draw_posterior(self, trials, config):
        self.calls += 1
        names, n, s = trial_counts(trials)
        rng = np.random.default_rng(config.random_seed)
        rate = rng.beta(s + 1, n - s + 1, size=(config.chains, config.draws) + n.shape)
        return make_draws(rate, names)


class DivergentSampler(ConjugateSampler):
    """Returns well-mixed draws that nonetheless report divergences."""

    def draw_posterior(self, trials, config):
        draws = super().draw_posterior(trials, config)
        diverging = np.zeros((config.chains, config.draws), dtype=bool)
        diverging[0, :3] = True
        return make_draws(draws.idata.posterior["rate"].values, draws.vaccines, diverging)


@pytest.fixture
def conjugate_sampler():
    return ConjugateSampler()


@pytest.fixture
def divergent_sampler():
    return DivergentSampler()


@pytest.fixture
def fast_config(tmp_path):
    return AnalysisConfig(
        sampler=SamplerConfig(chains=4, draws=1000, tune=0, random_seed=2020),
        convergence=ConvergenceThresholds(rhat_max=1.05, ess_min=100),
        output_dir=tmp_path / "figures",
    )


@pytest.fixture
def make_posterior():
    return make_draws
