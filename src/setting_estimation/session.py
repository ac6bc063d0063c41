"""
Counter session state.

Holds the counts a player taps in during a session and hands a fresh
snapshot to the estimator whenever an estimate is requested. All count
bookkeeping lives here: parent/child coupling, start offsets, and hiding a
parent aggregate once its sub-categories are being counted.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set

from slot_mechanics.machine import CounterElement, MachineData
from slot_mechanics.rules import EstimationRules, RULES
from setting_estimation.closest import closest_setting, observed_denominator
from setting_estimation.estimator import SettingEstimation, SettingEstimator
from setting_estimation.observation import Observation
from setting_estimation.trials import get_actual_count, resolve_trials


@dataclass
class CounterSession:
    machine: Optional[MachineData] = None
    start_games: int = 0
    current_games: int = 0
    normal_games: Optional[int] = None  # None: every spin is a normal-phase spin
    counts: Dict[str, int] = field(default_factory=dict)
    start_counts: Dict[str, int] = field(default_factory=dict)
    ignored: Set[str] = field(default_factory=set)
    minus_mode: bool = False
    show_settings: bool = False
    rules: EstimationRules = RULES

    # ---------- machine selection ----------

    def select_machine(self, machine: MachineData) -> None:
        """Switch machines; a different machine starts from a clean slate."""
        if self.machine is not None and self.machine.id == machine.id:
            return
        self.machine = machine
        self.start_games = 0
        self.current_games = 0
        self.normal_games = None
        self.counts = {el.id: 0 for el in machine.elements}
        self.start_counts = {}
        self.ignored = set()

    def clear_machine(self) -> None:
        self.machine = None

    # ---------- counts ----------

    def update_count(self, element_id: str, delta: int) -> None:
        """Add delta to an element (never below 0); a parent receives the same delta."""
        element = self._require_element(element_id)
        self.counts[element_id] = max(0, self.counts.get(element_id, 0) + delta)

        if element.parent_id:
            parent_count = self.counts.get(element.parent_id, 0) + delta
            self.counts[element.parent_id] = max(0, parent_count)

    def tap(self, element_id: str) -> None:
        self.update_count(element_id, -1 if self.minus_mode else 1)

    def mark_start_counts(self) -> None:
        """Treat the current counts as the session's starting point."""
        self.start_counts = dict(self.counts)

    def reset_counts(self) -> None:
        elements = self.machine.elements if self.machine else ()
        self.counts = {el.id: 0 for el in elements}
        self.start_counts = {}
        self.start_games = 0
        self.current_games = 0
        self.normal_games = None

    def toggle_ignored(self, element_id: str) -> None:
        self._require_element(element_id)
        if element_id in self.ignored:
            self.ignored.discard(element_id)
        else:
            self.ignored.add(element_id)

    # ---------- games ----------

    def update_current_games(self, delta: int) -> None:
        self.current_games = max(self.start_games, self.current_games + delta)

    def set_current_games(self, value: int) -> None:
        self.current_games = max(self.start_games, value)

    def set_start_games(self, value: int) -> None:
        self.start_games = max(0, value)
        self.current_games = max(self.start_games, self.current_games)

    def set_normal_games(self, value: Optional[int]) -> None:
        if value is None:
            self.normal_games = None
        else:
            self.normal_games = min(max(0, value), self.total_games)

    @property
    def total_games(self) -> int:
        return max(0, self.current_games - self.start_games)

    @property
    def normal_phase_games(self) -> int:
        if self.normal_games is None:
            return self.total_games
        return min(self.normal_games, self.total_games)

    # ---------- modes ----------

    def toggle_minus_mode(self) -> None:
        self.minus_mode = not self.minus_mode

    def toggle_show_settings(self) -> None:
        self.show_settings = not self.show_settings

    # ---------- estimation ----------

    def effective_counts(self) -> Dict[str, int]:
        """Counts since the session start, clamped at 0."""
        ids = set(self.counts) | (set(self.machine.element_ids) if self.machine else set())
        return {
            element_id: get_actual_count(element_id, self.counts, self.start_counts)
            for element_id in sorted(ids)
        }

    def effective_ignored(self) -> FrozenSet[str]:
        """
        Explicit ignores plus, when the rules ask for it, every parent
        aggregate that has at least one counted child.
        """
        ignored = set(self.ignored)
        if self.machine is None or not self.rules.exclude_parent_aggregates:
            return frozenset(ignored)

        counts = self.effective_counts()
        for element in self.machine.elements:
            if element.parent_id and counts.get(element.id, 0) > 0:
                ignored.add(element.parent_id)
        return frozenset(ignored)

    def observation(self) -> Observation:
        return Observation(
            total_spins=self.total_games,
            normal_spins=self.normal_phase_games,
            counts=self.effective_counts(),
            ignored=self.effective_ignored(),
        )

    def estimate(self) -> List[SettingEstimation]:
        if self.machine is None:
            share = round(
                100.0 / len(self.rules.default_settings), self.rules.percentage_decimals
            )
            return [
                SettingEstimation(setting=s, percentage=share)
                for s in self.rules.default_settings
            ]
        return SettingEstimator(self.machine, self.rules).estimate(self.observation())

    def closest_settings(self) -> Dict[str, Optional[int]]:
        """Nearest setting per element, judged on that element alone."""
        if self.machine is None:
            return {}
        observation = self.observation()
        result: Dict[str, Optional[int]] = {}
        for element in self.machine.elements:
            trials = resolve_trials(
                element,
                observation.total_spins,
                observation.normal_spins,
                observation.counts,
            )
            if trials <= 0:
                result[element.id] = None
                continue
            actual = observed_denominator(trials, observation.count_of(element.id))
            result[element.id] = closest_setting(element, actual)
        return result

    # ---------- helpers ----------

    def _require_element(self, element_id: str) -> CounterElement:
        if self.machine is None:
            raise ValueError("No machine selected")
        element = self.machine.get_element(element_id)
        if element is None:
            raise ValueError(
                f"Unknown element '{element_id}' for machine {self.machine.id}"
            )
        return element
