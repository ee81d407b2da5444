"""Analysis configuration."""

import os
from pathlib import Path
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

PointEstimateMethod = Literal["median", "mean"]


class SamplerConfig(BaseModel):
    """Settings passed through to the MCMC sampler."""

    chains: int = Field(default=4, ge=1)
    draws: int = Field(default=2000, ge=1, description="Retained draws per chain.")
    tune: int = Field(default=1000, ge=0, description="Warm-up draws per chain.")
    cores: int = Field(default=1, ge=1)
    random_seed: int = 2020
    target_accept: float = Field(default=0.9, gt=0.0, lt=1.0)

    @field_validator("cores")
    @classmethod
    def _cap_cores(cls, value: int) -> int:
        return min(value, os.cpu_count() or 1)


class ConvergenceThresholds(BaseModel):
    """Limits a sampling run must satisfy before its draws are summarized."""

    rhat_max: float = Field(default=1.01, gt=1.0)
    ess_min: float = Field(default=400.0, ge=0.0)
    max_divergences: int = Field(default=0, ge=0)


class AnalysisConfig(BaseModel):
    """Everything that controls one analysis run."""

    sampler: SamplerConfig = SamplerConfig()
    convergence: ConvergenceThresholds = ConvergenceThresholds()
    interval_probs: List[float] = [0.5, 0.9, 0.95]
    point_estimate: PointEstimateMethod = "median"
    placebo_floor: float = Field(default=0.0, ge=0.0)
    output_dir: Optional[Path] = Path("figures")
    formats: List[str] = ["png", "svg"]
    # (better, worse): report P(efficacy[better] > efficacy[worse])
    comparison: Optional[Tuple[str, str]] = ("Pfizer", "Moderna")

    @field_validator("interval_probs")
    @classmethod
    def _check_probs(cls, value: List[float]) -> List[float]:
        if not value:
            raise ValueError("At least one interval probability is required.")
        for p in value:
            if not 0.0 < p < 1.0:
                raise ValueError(f"Interval probability {p} must lie in (0, 1).")
        return sorted(set(value))

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        """Build a configuration from `VE_*` environment variables."""
        defaults = SamplerConfig()
        sampler = SamplerConfig(
            chains=int(os.getenv("VE_CHAINS", defaults.chains)),
            draws=int(os.getenv("VE_DRAWS", defaults.draws)),
            tune=int(os.getenv("VE_TUNE", defaults.tune)),
            cores=int(os.getenv("VE_CORES", defaults.cores)),
            random_seed=int(os.getenv("VE_SEED", defaults.random_seed)),
        )
        formats = os.getenv("VE_FORMATS", "png,svg")
        return cls(
            sampler=sampler,
            point_estimate=os.getenv("VE_POINT_ESTIMATE", "median").lower(),
            output_dir=Path(os.getenv("VE_OUTPUT_DIR", "figures")),
            formats=[f.strip() for f in formats.split(",") if f.strip()],
        )
