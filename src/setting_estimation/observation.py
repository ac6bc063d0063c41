from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping


@dataclass(frozen=True)
class Observation:
    """
    Count snapshot handed to the estimator.

    Counts are already offset by the caller (current - start, clamped at 0);
    a missing element id counts as 0. normal_spins has no default; use
    create() to take every spin as a normal-phase spin.
    """

    total_spins: int
    normal_spins: int
    counts: Mapping[str, int] = field(default_factory=dict)
    ignored: FrozenSet[str] = frozenset()

    def count_of(self, element_id: str) -> int:
        return self.counts.get(element_id, 0)

    def is_ignored(self, element_id: str) -> bool:
        return element_id in self.ignored

    @classmethod
    def create(
        cls,
        total_spins: int,
        counts: Dict[str, int] = None,
        *,
        normal_spins: int = None,
        ignored=(),
    ) -> "Observation":
        """Convenience constructor; normal_spins defaults to total_spins."""
        return cls(
            total_spins=total_spins,
            normal_spins=total_spins if normal_spins is None else normal_spins,
            counts=dict(counts or {}),
            ignored=frozenset(ignored),
        )
