from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


DEFAULT_SETTINGS: Tuple[int, ...] = (1, 2, 3, 4, 5, 6)
PERCENTAGE_DECIMALS = 2
DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "machines.json"


@dataclass(frozen=True)
class EstimationRules:
    # Identification
    name: str = "default"

    # Output
    percentage_decimals: int = PERCENTAGE_DECIMALS

    # Likelihood
    zero_counts_are_evidence: bool = False  # uncounted elements add N*ln(1-p)

    # Calling-layer policy
    exclude_parent_aggregates: bool = True  # ignore a parent once any child is counted
    default_settings: Tuple[int, ...] = DEFAULT_SETTINGS  # used when no machine is selected


RULES = EstimationRules(
    percentage_decimals=PERCENTAGE_DECIMALS,
    zero_counts_are_evidence=False,
    exclude_parent_aggregates=True,
    default_settings=DEFAULT_SETTINGS,
)
