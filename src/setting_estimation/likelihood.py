from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from slot_mechanics.machine import CounterElement, MachineData
from setting_estimation.observation import Observation
from setting_estimation.trials import resolve_trials


@dataclass(frozen=True)
class ElementContribution:
    """One element's binomial log-likelihood term under one setting."""

    element_id: str
    trials: int
    count: int
    denominator: float
    log_likelihood: float


@dataclass
class SettingLikelihood:
    setting: int
    log_likelihood: float = 0.0
    details: List[ElementContribution] = field(default_factory=list)


def _xlog(k: float, q: float) -> float:
    """
    k * ln(q), with 0 * ln(0) taken as 0.

    ln(0) is -inf whatever the sign of k: a negative k only arises from a
    count above the trial count, which q = 0 makes impossible.
    """
    if k == 0:
        return 0.0
    if q <= 0.0:
        return -math.inf
    return k * math.log(q)


def success_probability(denominator) -> Optional[float]:
    """
    Convert a 1-in-D rate to a probability.

    Returns None for entries outside the model's domain (non-numeric, NaN,
    D <= 0, or 0 < D < 1). D = inf gives 0.0 and D = 1 gives 1.0.
    """
    try:
        denominator = float(denominator)
    except (TypeError, ValueError):
        return None
    if math.isnan(denominator) or denominator < 1.0:
        return None
    return 1.0 / denominator


def binomial_log_likelihood(count: int, trials: int, p: float) -> float:
    """n*ln(p) + (N-n)*ln(1-p), without the binomial coefficient."""
    return _xlog(count, p) + _xlog(trials - count, 1.0 - p)


def _element_contribution(
    element: CounterElement,
    observation: Observation,
    setting: int,
    include_zero_counts: bool = False,
) -> Optional[ElementContribution]:
    if observation.is_ignored(element.id):
        return None

    count = observation.count_of(element.id)
    # an element nobody has counted yet carries no evidence
    if count == 0 and not include_zero_counts:
        return None

    denominator = element.denominator_for(setting)
    if denominator is None:
        return None

    p = success_probability(denominator)
    if p is None:
        return None

    trials = resolve_trials(
        element,
        observation.total_spins,
        observation.normal_spins,
        observation.counts,
    )
    # a zero-trial binomial carries no evidence
    if trials <= 0:
        return None

    return ElementContribution(
        element_id=element.id,
        trials=trials,
        count=count,
        denominator=float(denominator),
        log_likelihood=binomial_log_likelihood(count, trials, p),
    )


def compute_setting_likelihood(
    machine: MachineData,
    observation: Observation,
    setting: int,
    include_zero_counts: bool = False,
) -> SettingLikelihood:
    """
    Sum the contributions of every non-ignored element for one setting.

    Elements with a zero count are left out unless include_zero_counts is
    set, in which case they add N * ln(1 - p).
    """
    result = SettingLikelihood(setting=setting)
    for element in machine.elements:
        contribution = _element_contribution(
            element, observation, setting, include_zero_counts
        )
        if contribution is None:
            continue
        result.details.append(contribution)
        result.log_likelihood += contribution.log_likelihood
    return result


def log_likelihood(
    machine: MachineData,
    observation: Observation,
    setting: int,
    include_zero_counts: bool = False,
) -> float:
    return compute_setting_likelihood(
        machine, observation, setting, include_zero_counts
    ).log_likelihood


def compute_log_likelihoods(
    machine: MachineData,
    observation: Observation,
    include_zero_counts: bool = False,
) -> List[SettingLikelihood]:
    """Per-setting log-likelihoods, in the machine's setting order (repeats dropped)."""
    return [
        compute_setting_likelihood(machine, observation, setting, include_zero_counts)
        for setting in dict.fromkeys(machine.settings)
    ]
