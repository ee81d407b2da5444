import numpy as np
import pymc as pm
import pytest

from vaccine_efficacy.errors import InvalidTrialDataError
from vaccine_efficacy.pymc_models.binomial_trials import (
    build_vaccine_model,
    fit_vaccine_model,
    simulate_trial,
    trial_counts,
)
from vaccine_efficacy.trials import DEFAULT_TRIALS


def test_trial_counts_are_vaccine_by_arm():
    names, n, s = trial_counts(DEFAULT_TRIALS)
    assert names == ["Moderna", "Pfizer"]
    np.testing.assert_array_equal(n, [[15000, 15000], [21769, 21769]])
    np.testing.assert_array_equal(s, [[5, 90], [8, 162]])


def test_model_has_one_bounded_rate_per_arm():
    model = build_vaccine_model(DEFAULT_TRIALS)

    assert [rv.name for rv in model.free_RVs] == ["rate"]
    assert list(model.coords["vaccine"]) == ["Moderna", "Pfizer"]
    assert list(model.coords["arm"]) == ["vaccine", "placebo"]

    prior = pm.draw(model["rate"], draws=500, random_seed=1)
    assert prior.shape == (500, 2, 2)
    assert ((prior >= 0) & (prior <= 1)).all()


def test_model_rejects_empty_arm():
    trials = {"A": {"vaccine": {"n": 0, "s": 0}, "placebo": {"n": 100, "s": 3}}}
    with pytest.raises(InvalidTrialDataError, match="A/vaccine"):
        build_vaccine_model(trials)


def test_model_rejects_more_infections_than_participants():
    trials = {"A": {"vaccine": {"n": 100, "s": 101}, "placebo": {"n": 100, "s": 3}}}
    with pytest.raises(InvalidTrialDataError):
        build_vaccine_model(trials)


def test_simulate_trial_is_seeded():
    a = simulate_trial(0.001, 0.01, n_vaccine=20000, random_seed=7)
    b = simulate_trial(0.001, 0.01, n_vaccine=20000, random_seed=7)
    assert a == b
    assert a.vaccine.n == a.placebo.n == 20000
    assert 0 <= a.vaccine.s <= a.vaccine.n


def test_simulate_trial_rejects_invalid_rate():
    with pytest.raises(ValueError):
        simulate_trial(1.5, 0.01, n_vaccine=100)


@pytest.mark.slow
def test_zero_infections_gives_posterior_near_but_above_zero():
    trials = {"A": {"vaccine": {"n": 10000, "s": 0}, "placebo": {"n": 10000, "s": 50}}}
    idata = fit_vaccine_model(trials, draws=500, tune=500, chains=2, random_seed=3)

    rate = idata.posterior["rate"].sel(vaccine="A", arm="vaccine").values
    assert (rate > 0).all()
    assert np.median(rate) < 0.001
