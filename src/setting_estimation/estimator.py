"""
Setting estimation for a machine from a count snapshot.

Pipeline: zero-spin gate -> per-setting log-likelihoods -> log-sum-exp
normalization. The estimator holds no state between calls.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from slot_mechanics.machine import MachineData
from slot_mechanics.rules import EstimationRules, RULES
from setting_estimation.likelihood import SettingLikelihood, compute_log_likelihoods
from setting_estimation.observation import Observation
from setting_estimation.posterior import normalize, uniform_distribution


@dataclass(frozen=True)
class SettingEstimation:
    """Posterior share of one setting, as a percentage (0-100)."""

    setting: int
    percentage: float


def to_mapping(results: Iterable[SettingEstimation]) -> Dict[int, float]:
    return {r.setting: r.percentage for r in results}


class SettingEstimator:
    """Estimates the posterior distribution over a machine's settings."""

    def __init__(self, machine: MachineData, rules: EstimationRules = None):
        self.machine = machine
        self.rules = rules or RULES

    def estimate(self, observation: Observation) -> List[SettingEstimation]:
        """
        Posterior percentage for every setting, in the machine's setting order.

        No spins at all gives the uniform distribution without rounding.
        """
        if observation.total_spins <= 0:
            return self._from_mapping(uniform_distribution(self.settings))

        likelihoods = self.log_likelihoods(observation)
        percentages = normalize(
            {item.setting: item.log_likelihood for item in likelihoods},
            decimals=self.rules.percentage_decimals,
        )
        return self._from_mapping(percentages)

    @property
    def settings(self) -> List[int]:
        """Machine settings in catalog order, each listed once."""
        return list(dict.fromkeys(self.machine.settings))

    def log_likelihoods(self, observation: Observation) -> List[SettingLikelihood]:
        return compute_log_likelihoods(
            self.machine,
            observation,
            include_zero_counts=self.rules.zero_counts_are_evidence,
        )

    def most_likely(self, observation: Observation) -> Optional[SettingEstimation]:
        """Highest-share setting; ties go to the first in setting order."""
        results = self.estimate(observation)
        if not results:
            return None
        return max(results, key=lambda r: r.percentage)

    def _from_mapping(self, percentages: Mapping[int, float]) -> List[SettingEstimation]:
        return [
            SettingEstimation(setting=s, percentage=percentages[s])
            for s in self.settings
        ]


def calculate_estimations(
    machine: MachineData,
    total_spins: int,
    normal_spins: int,
    counts: Mapping[str, int],
    ignored: Iterable[str] = (),
    rules: EstimationRules = None,
) -> List[SettingEstimation]:
    """Functional entry point over SettingEstimator.estimate."""
    observation = Observation(
        total_spins=total_spins,
        normal_spins=normal_spins,
        counts=dict(counts),
        ignored=frozenset(ignored),
    )
    return SettingEstimator(machine, rules).estimate(observation)
