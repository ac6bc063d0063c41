"""
Setting estimation for slot machines.

Estimates, from the counts observed during a session, how likely the
machine is to be running each of its settings.

Key components:
- trials: trial count (denominator) each element is exposed to
- likelihood: per-setting binomial log-likelihood accumulation
- posterior: log-sum-exp normalization to percentages
- estimator: zero-spin gate + likelihood + normalization
- closest: nearest setting for a single element's observed rate
- session: counter state that feeds the estimator
- report: pandas views of tables and results
- validate: catalog validation
- cli: Command-line interface

Usage:
    python -m setting_estimation.cli --machine my-juggler-5 --games 1000 \
      --count grape=177 --count reg=4 --details
"""

from .observation import Observation
from .trials import get_actual_count, resolve_trials
from .likelihood import (
    ElementContribution,
    SettingLikelihood,
    binomial_log_likelihood,
    compute_log_likelihoods,
    log_likelihood,
)
from .posterior import normalize, uniform_distribution
from .estimator import SettingEstimation, SettingEstimator, calculate_estimations, to_mapping
from .closest import closest_setting, observed_denominator
from .session import CounterSession

__version__ = "0.1.0"

__all__ = [
    "Observation",
    "get_actual_count",
    "resolve_trials",
    "ElementContribution",
    "SettingLikelihood",
    "binomial_log_likelihood",
    "compute_log_likelihoods",
    "log_likelihood",
    "normalize",
    "uniform_distribution",
    "SettingEstimation",
    "SettingEstimator",
    "calculate_estimations",
    "to_mapping",
    "closest_setting",
    "observed_denominator",
    "CounterSession",
]
