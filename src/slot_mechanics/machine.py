from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .denominator_type import DenominatorType


@dataclass(frozen=True)
class SettingProbability:
    """Occurrence rate of an element at one setting, stored as 1-in-N."""

    setting: int
    denominator: float


@dataclass(frozen=True)
class CounterElement:
    """Immutable definition of one countable element (small role or bonus)"""

    id: str
    name: str
    probabilities: Tuple[SettingProbability, ...] = ()
    is_bonus: bool = False
    parent_id: Optional[str] = None
    denominator_type: Optional[DenominatorType] = None
    denominator_element_id: Optional[str] = None

    def denominator_for(self, setting: int) -> Optional[float]:
        """Denominator for a setting, or None if the element has no entry for it."""
        for prob in self.probabilities:
            if prob.setting == setting:
                return prob.denominator
        return None

    @property
    def has_setting_diff(self) -> bool:
        """True unless every setting shares the same denominator."""
        if not self.probabilities:
            return False
        first = self.probabilities[0].denominator
        return any(p.denominator != first for p in self.probabilities)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CounterElement":
        """
        Build an element from its catalog form.

        Accepts either a list of {"setting", "denominator"} entries under
        "probabilities" or a {setting: denominator} mapping under
        "probBySettings".
        """
        if "id" not in data:
            raise ValueError(f"Element without id: {data!r}")
        element_id = str(data["id"])

        raw = data.get("probabilities")
        if raw is None:
            raw = [
                {"setting": setting, "denominator": denominator}
                for setting, denominator in (data.get("probBySettings") or {}).items()
            ]

        probabilities = []
        for entry in raw:
            try:
                probabilities.append(
                    SettingProbability(
                        setting=int(entry["setting"]),
                        denominator=float(entry["denominator"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(
                    f"Invalid probability entry {entry!r} for element {element_id}: {e}"
                ) from e

        return cls(
            id=element_id,
            name=str(data.get("name", element_id)),
            probabilities=tuple(probabilities),
            is_bonus=bool(data.get("isBonus", False)),
            parent_id=data.get("parentId"),
            denominator_type=DenominatorType.parse(data.get("denominatorType")),
            denominator_element_id=data.get("denominatorElementId"),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


@dataclass(frozen=True)
class MachineData:
    """A machine: its candidate settings and the elements counted on it."""

    id: str
    machine_name: str
    settings: Tuple[int, ...]
    elements: Tuple[CounterElement, ...]
    maker: str = ""

    def get_element(self, element_id: str) -> Optional[CounterElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def children_of(self, parent_id: str) -> List[CounterElement]:
        return [el for el in self.elements if el.parent_id == parent_id]

    @property
    def element_ids(self) -> List[str]:
        return [el.id for el in self.elements]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MachineData":
        if "id" not in data:
            raise ValueError(f"Machine without id: {data!r}")
        machine_id = str(data["id"])

        try:
            settings = tuple(int(s) for s in data.get("settings", ()))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid settings for machine {machine_id}: {e}") from e

        try:
            elements = tuple(
                CounterElement.from_dict(el) for el in data.get("elements", ())
            )
        except ValueError as e:
            raise ValueError(f"Machine {machine_id}: {e}") from e

        return cls(
            id=machine_id,
            machine_name=str(data.get("machineName", machine_id)),
            settings=settings,
            elements=elements,
            maker=str(data.get("maker", "")),
        )

    def __str__(self) -> str:
        return f"{self.machine_name} [{self.id}]"
