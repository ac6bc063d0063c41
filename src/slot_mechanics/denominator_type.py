from enum import Enum
from typing import Optional


class DenominatorType(Enum):
    TOTAL = "total"
    NORMAL = "normal"  # primary phase (base game)
    AT = "at"  # secondary phase (assist time)

    @classmethod
    def parse(cls, value) -> Optional["DenominatorType"]:
        """
        Parse a catalog value, accepting the phase aliases.

        Unknown values map to None, which the resolver treats as TOTAL.
        """
        if value is None or isinstance(value, DenominatorType):
            return value
        key = str(value).strip()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls(key.lower())
        except ValueError:
            return None


_ALIASES = {
    "primaryPhase": DenominatorType.NORMAL,
    "secondaryPhase": DenominatorType.AT,
}
