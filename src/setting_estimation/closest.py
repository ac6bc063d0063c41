from typing import Optional

from slot_mechanics.machine import CounterElement


def observed_denominator(trials: int, occurrences: int) -> float:
    """Empirical 1-in-N rate: trials / max(1, occurrences)."""
    return trials / max(1, occurrences)


def closest_setting(element: CounterElement, actual_denominator: float) -> Optional[int]:
    """
    Setting whose known denominator is nearest the observed one.

    Returns None when the element has no setting difference. Observed rates
    better than the best setting (or worse than the worst) saturate at that
    extreme. Ties go to the setting listed first in the element.
    """
    if not element.has_setting_diff:
        return None

    probs = element.probabilities
    by_denominator = sorted(probs, key=lambda p: p.denominator)
    best = by_denominator[0]  # smallest denominator, high-setting side
    worst = by_denominator[-1]

    if actual_denominator <= best.denominator:
        return best.setting
    if actual_denominator >= worst.denominator:
        return worst.setting

    closest = probs[0].setting
    min_diff = float("inf")
    for prob in probs:
        diff = abs(actual_denominator - prob.denominator)
        if diff < min_diff:
            min_diff = diff
            closest = prob.setting
    return closest
