"""
Trial counts for the per-element binomial model.

An element is exposed either to a number of spins (total, normal phase or
AT phase) or, when it names a denominator element, to that element's count.
"""

from typing import Mapping, Optional

from slot_mechanics.denominator_type import DenominatorType
from slot_mechanics.machine import CounterElement


def get_actual_count(
    element_id: str,
    counts: Mapping[str, int],
    start_counts: Optional[Mapping[str, int]] = None,
) -> int:
    """Count since the start of the session: max(0, current - start)."""
    current = counts.get(element_id, 0)
    start = (start_counts or {}).get(element_id, 0)
    return max(0, current - start)


def resolve_trials(
    element: CounterElement,
    total_spins: int,
    normal_spins: int,
    counts: Optional[Mapping[str, int]] = None,
) -> int:
    """
    Number of trials the element was exposed to.

    Priority:
      1. denominator_element_id -> observed count of that element
      2. NORMAL -> normal_spins
      3. AT     -> max(0, total_spins - normal_spins)
      4. TOTAL or unset -> total_spins
    """
    if element.denominator_element_id:
        return max(0, (counts or {}).get(element.denominator_element_id, 0))

    if element.denominator_type == DenominatorType.NORMAL:
        return max(0, normal_spins)
    elif element.denominator_type == DenominatorType.AT:
        return max(0, total_spins - normal_spins)
    else:
        return max(0, total_spins)
