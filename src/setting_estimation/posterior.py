"""
Posterior normalization of per-setting log-likelihoods.

Uses the log-sum-exp shift: subtracting the maximum log-likelihood before
exponentiating keeps sessions with thousands of spins from underflowing.
"""

from typing import Dict, Mapping, Sequence

import numpy as np

from slot_mechanics.rules import PERCENTAGE_DECIMALS


def uniform_distribution(settings: Sequence[int]) -> Dict[int, float]:
    """Equal share for every setting (unrounded)."""
    if not settings:
        return {}
    share = 100.0 / len(settings)
    return {setting: share for setting in settings}


def relative_likelihoods(log_likelihoods: np.ndarray) -> np.ndarray:
    """
    exp(logL - max(logL)) with NaN treated as -inf.

    Returns an all-zero array when no entry is above -inf.
    """
    values = np.asarray(log_likelihoods, dtype=float).copy()
    values[np.isnan(values)] = -np.inf

    if values.size == 0 or np.all(np.isneginf(values)):
        return np.zeros_like(values)

    # +inf only arises from non-finite input; it takes all the mass
    if np.any(np.isposinf(values)):
        return np.isposinf(values).astype(float)

    return np.exp(values - values.max())


def normalize(
    log_likelihoods: Mapping[int, float],
    decimals: int = PERCENTAGE_DECIMALS,
) -> Dict[int, float]:
    """
    Convert setting -> log-likelihood into setting -> percentage.

    Percentages are rounded to `decimals` places. When every setting is at
    -inf (or the mapping is otherwise degenerate) the result is uniform.
    """
    settings = list(log_likelihoods.keys())
    if not settings:
        return {}

    relative = relative_likelihoods(
        np.array([log_likelihoods[s] for s in settings], dtype=float)
    )
    total = float(relative.sum())

    if total <= 0.0 or not np.isfinite(total):
        return uniform_distribution(settings)

    percentages = relative / total * 100.0
    return {
        setting: round(float(pct), decimals)
        for setting, pct in zip(settings, percentages)
    }
