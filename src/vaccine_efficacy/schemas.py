from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TrialArm(BaseModel):
    """One arm of a trial: participants and observed infections."""

    model_config = ConfigDict(frozen=True)

    n: int = Field(ge=0, description="Number of participants.")
    s: int = Field(ge=0, description="Number of observed infections.")

    @model_validator(mode="after")
    def _check_infections(self):
        if self.s > self.n:
            raise ValueError(
                f"infections (s={self.s}) cannot exceed participants (n={self.n})"
            )
        return self


class VaccineTrial(BaseModel):
    """A two-arm vaccine/placebo trial."""

    model_config = ConfigDict(frozen=True)

    vaccine: TrialArm
    placebo: TrialArm


class CredibleInterval(BaseModel):
    """A central credible interval holding `prob` of the posterior mass."""

    prob: float
    lower: float
    upper: float


class EfficacySummary(BaseModel):
    """Summary statistics of one vaccine's efficacy draws."""

    point_estimate: float
    mean: float
    median: float
    sd: float
    intervals: List[CredibleInterval]
    n_draws: int
    n_excluded: int


class Comparison(BaseModel):
    """Probability that `better` is more effective than `worse`."""

    better: str
    worse: str
    probability: float


class ConvergenceReport(BaseModel):
    """Per-variable convergence diagnostics of a sampling run."""

    rhat: Dict[str, float]
    ess_bulk: Dict[str, float]
    ess_tail: Dict[str, float]
    divergences: int
    failures: List[str] = []

    @property
    def passed(self) -> bool:
        return not self.failures


class EfficacyReport(BaseModel):
    """The full output of an analysis run."""

    point_estimate_method: str
    vaccines: Dict[str, EfficacySummary]
    comparisons: List[Comparison]
    convergence: Optional[ConvergenceReport] = None

    def comparison(self, better: str, worse: str) -> float:
        for item in self.comparisons:
            if item.better == better and item.worse == worse:
                return item.probability
        raise KeyError(f"No comparison of '{better}' against '{worse}'.")
