from .denominator_type import DenominatorType
from .machine import CounterElement, MachineData, SettingProbability

__all__ = [
    "CounterElement",
    "DenominatorType",
    "MachineData",
    "SettingProbability",
]
