"""Published trial counts and helpers for loading trial data."""

import json
from typing import IO, Any, Dict, Mapping

from pydantic import ValidationError

from vaccine_efficacy.errors import InvalidTrialDataError
from vaccine_efficacy.schemas import TrialArm, VaccineTrial

# Interim phase 3 readouts, November 2020.
MODERNA = VaccineTrial(
    vaccine=TrialArm(n=15000, s=5),
    placebo=TrialArm(n=15000, s=90),
)
PFIZER = VaccineTrial(
    vaccine=TrialArm(n=21769, s=8),
    placebo=TrialArm(n=21769, s=162),
)

DEFAULT_TRIALS: Dict[str, VaccineTrial] = {"Moderna": MODERNA, "Pfizer": PFIZER}


def validate_trials(trials: Mapping[str, Any]) -> Dict[str, VaccineTrial]:
    """
    Coerce a mapping of vaccine name to trial data into validated trials.

    Values may be `VaccineTrial` instances or plain dicts of the form
    ``{"vaccine": {"n": ..., "s": ...}, "placebo": {"n": ..., "s": ...}}``.

    Raises
    ------
    InvalidTrialDataError
        If the mapping is empty or any arm has negative counts or more
        infections than participants.
    """
    if not trials:
        raise InvalidTrialDataError("At least one vaccine trial is required.")

    validated = {}
    for name, trial in trials.items():
        if isinstance(trial, VaccineTrial):
            validated[name] = trial
            continue
        try:
            validated[name] = VaccineTrial.model_validate(trial)
        except ValidationError as e:
            raise InvalidTrialDataError(
                f"Invalid trial data for '{name}': {e}"
            ) from e
    return validated


def load_trials(fp: IO) -> Dict[str, VaccineTrial]:
    """Load trials from a JSON file object."""
    try:
        raw = json.load(fp)
    except json.JSONDecodeError as e:
        raise InvalidTrialDataError(f"Trial file is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise InvalidTrialDataError(
            "Trial file must map vaccine names to trial objects."
        )
    return validate_trials(raw)


def dump_trials(trials: Mapping[str, VaccineTrial]) -> Dict[str, dict]:
    """Return trials in the JSON-serializable trial-file format."""
    return {name: trial.model_dump() for name, trial in trials.items()}
