"""Exceptions raised by the efficacy analysis."""


class VaccineEfficacyError(Exception):
    """Base class for all analysis failures."""


class InvalidTrialDataError(VaccineEfficacyError, ValueError):
    """Trial counts are inconsistent or cannot define a binomial model."""


class ConvergenceError(VaccineEfficacyError):
    """The sampler's chains failed the convergence diagnostics."""

    def __init__(self, message: str, report=None):
        super().__init__(message)
        self.report = report


class DegenerateEfficacyError(VaccineEfficacyError):
    """No finite efficacy draws remain for a vaccine."""


class PlotExportError(VaccineEfficacyError):
    """A figure could not be written to disk."""
