"""PyMC models for two-arm vaccine/placebo trials."""

from typing import Any, Mapping

import arviz as az
import numpy as np
import pymc as pm

from vaccine_efficacy.errors import InvalidTrialDataError
from vaccine_efficacy.schemas import TrialArm, VaccineTrial
from vaccine_efficacy.trials import validate_trials

ARMS = ("vaccine", "placebo")


def trial_counts(trials: Mapping[str, Any]) -> tuple[list[str], np.ndarray, np.ndarray]:
    """
    Arrange trial counts as (vaccine, arm) matrices.

    Returns
    -------
    tuple[list[str], np.ndarray, np.ndarray]
        The vaccine names, the participant counts `n` and the infection
        counts `s`, each matrix with one row per vaccine and columns ordered
        as `ARMS`.
    """
    trials = validate_trials(trials)
    names = list(trials)
    n = np.array([[t.vaccine.n, t.placebo.n] for t in trials.values()])
    s = np.array([[t.vaccine.s, t.placebo.s] for t in trials.values()])

    empty = [
        f"{name}/{arm}"
        for i, name in enumerate(names)
        for j, arm in enumerate(ARMS)
        if n[i, j] == 0
    ]
    if empty:
        raise InvalidTrialDataError(
            f"Arms with no participants cannot be modelled: {', '.join(empty)}"
        )
    return names, n, s


def build_vaccine_model(trials: Mapping[str, Any]) -> pm.Model:
    """
    Build a Bayesian binomial model of per-arm infection rates.

    Every arm of every trial gets an independent infection probability with a
    Uniform(0, 1) prior, linked to the observed infections through a binomial
    likelihood.

    Parameters
    ----------
    trials : Mapping[str, Any]
        Vaccine name to `VaccineTrial` (or an equivalent dict).

    Returns
    -------
    pm.Model
        A PyMC model with a `rate` variable of dims ("vaccine", "arm").
    """
    names, n, s = trial_counts(trials)
    coords = {"vaccine": names, "arm": list(ARMS)}

    with pm.Model(coords=coords) as model:
        # Flat prior on each arm's infection probability
        rate = pm.Uniform("rate", lower=0.0, upper=1.0, dims=("vaccine", "arm"))

        # Likelihood of the observed infection counts
        pm.Binomial("infections", n=n, p=rate, observed=s, dims=("vaccine", "arm"))

    return model


def fit_vaccine_model(
    trials: Mapping[str, Any],
    draws: int = 2000,
    tune: int = 1000,
    chains: int = 4,
    cores: int = 1,
    random_seed: int | None = None,
    target_accept: float = 0.9,
    progressbar: bool = False,
) -> az.InferenceData:
    """
    Fit the binomial trial model with NUTS.

    Returns
    -------
    az.InferenceData
        The posterior samples of `rate` (warm-up draws discarded) together
        with the sampler statistics.
    """
    model = build_vaccine_model(trials)
    with model:
        idata = pm.sample(
            draws=draws,
            tune=tune,
            chains=chains,
            cores=cores,
            random_seed=random_seed,
            target_accept=target_accept,
            progressbar=progressbar,
        )

    return idata


def simulate_trial(
    vaccine_rate: float,
    placebo_rate: float,
    n_vaccine: int,
    n_placebo: int | None = None,
    random_seed: int | None = None,
) -> VaccineTrial:
    """
    Generate a synthetic two-arm trial with known infection rates.

    Parameters
    ----------
    vaccine_rate : float
        True infection probability in the vaccine arm.
    placebo_rate : float
        True infection probability in the placebo arm.
    n_vaccine : int
        Participants in the vaccine arm.
    n_placebo : int, optional
        Participants in the placebo arm. Defaults to `n_vaccine`.
    random_seed : int, optional
        A seed for the random number generator.

    Returns
    -------
    VaccineTrial
        The simulated participant and infection counts.
    """
    for rate in (vaccine_rate, placebo_rate):
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"Infection rate {rate} must lie in [0, 1].")
    if n_placebo is None:
        n_placebo = n_vaccine

    rng = np.random.default_rng(random_seed)
    s_vaccine, s_placebo = rng.binomial([n_vaccine, n_placebo], [vaccine_rate, placebo_rate])
    return VaccineTrial(
        vaccine=TrialArm(n=n_vaccine, s=int(s_vaccine)),
        placebo=TrialArm(n=n_placebo, s=int(s_placebo)),
    )
