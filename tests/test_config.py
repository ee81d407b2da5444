import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from vaccine_efficacy.config import AnalysisConfig, SamplerConfig


def test_defaults():
    config = AnalysisConfig()
    assert config.sampler.random_seed == 2020
    assert config.interval_probs == [0.5, 0.9, 0.95]
    assert config.point_estimate == "median"
    assert config.comparison == ("Pfizer", "Moderna")
    assert config.formats == ["png", "svg"]


def test_from_env(monkeypatch):
    monkeypatch.setenv("VE_SEED", "7")
    monkeypatch.setenv("VE_CHAINS", "3")
    monkeypatch.setenv("VE_DRAWS", "500")
    monkeypatch.setenv("VE_POINT_ESTIMATE", "MEAN")
    monkeypatch.setenv("VE_OUTPUT_DIR", "out")
    monkeypatch.setenv("VE_FORMATS", "pdf, png")

    config = AnalysisConfig.from_env()
    assert config.sampler.random_seed == 7
    assert config.sampler.chains == 3
    assert config.sampler.draws == 500
    assert config.point_estimate == "mean"
    assert config.output_dir == Path("out")
    assert config.formats == ["pdf", "png"]


def test_cores_capped_at_cpu_count():
    assert SamplerConfig(cores=10_000).cores == (os.cpu_count() or 1)


@pytest.mark.parametrize("probs", [[], [0.0], [1.0], [0.5, 1.2]])
def test_interval_probs_must_lie_in_open_unit_interval(probs):
    with pytest.raises(ValidationError):
        AnalysisConfig(interval_probs=probs)


def test_interval_probs_sorted_and_deduplicated():
    assert AnalysisConfig(interval_probs=[0.95, 0.5, 0.95]).interval_probs == [0.5, 0.95]


def test_invalid_point_estimate():
    with pytest.raises(ValidationError):
        AnalysisConfig(point_estimate="mode")
