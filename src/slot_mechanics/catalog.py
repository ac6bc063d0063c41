"""
Static machine catalog.

The catalog is a JSON array of machine definitions, loaded once and treated
as read-only afterwards.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from .machine import MachineData
from .rules import DEFAULT_CATALOG_PATH


def load_machines(path: Union[str, Path] = DEFAULT_CATALOG_PATH) -> List[MachineData]:
    """Load machine definitions from a JSON catalog file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Catalog {path.name} is not valid JSON: {e}") from e

    return parse_machines(raw)


def parse_machines(raw) -> List[MachineData]:
    """Parse already-decoded catalog data (a list of machine dicts)."""
    if not isinstance(raw, list):
        raise ValueError(
            f"Catalog must be a list of machines, got {type(raw).__name__}"
        )
    return [MachineData.from_dict(item) for item in raw]


class MachineCatalog:
    """Read-only view over a list of machines, indexed by id."""

    def __init__(self, machines: List[MachineData]):
        self._machines = list(machines)
        self._by_id: Dict[str, MachineData] = {}
        for machine in self._machines:
            if machine.id in self._by_id:
                raise ValueError(f"Duplicate machine id in catalog: {machine.id}")
            self._by_id[machine.id] = machine

    @classmethod
    def from_file(cls, path: Union[str, Path] = DEFAULT_CATALOG_PATH) -> "MachineCatalog":
        return cls(load_machines(path))

    def get_machine_list(self) -> List[MachineData]:
        return list(self._machines)

    def get_machine_by_id(self, machine_id: str) -> Optional[MachineData]:
        return self._by_id.get(machine_id)

    def __len__(self) -> int:
        return len(self._machines)

    def __iter__(self):
        return iter(self._machines)

    def __contains__(self, machine_id: str) -> bool:
        return machine_id in self._by_id
