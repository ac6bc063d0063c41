"""
Validation of machine catalogs.

Checks catalog data against the assumptions of the estimation model and
reports problems as readable strings. The estimator itself tolerates bad
entries (they contribute no evidence), so validation never raises.

Run directly to validate the bundled catalog:
    python -m setting_estimation.validate [catalog.json]
"""

import math
import sys
from collections import Counter
from pathlib import Path
from typing import Dict, List

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from slot_mechanics.catalog import MachineCatalog
from slot_mechanics.machine import CounterElement, MachineData
from slot_mechanics.rules import DEFAULT_CATALOG_PATH


def _validate_element(element: CounterElement, machine: MachineData) -> List[str]:
    issues = []
    known_ids = set(machine.element_ids)
    settings = set(machine.settings)

    if element.parent_id is not None:
        if element.parent_id == element.id:
            issues.append(f"{element.id}: element is its own parent")
        elif element.parent_id not in known_ids:
            issues.append(f"{element.id}: unknown parent '{element.parent_id}'")

    if element.denominator_element_id is not None:
        if element.denominator_element_id == element.id:
            issues.append(f"{element.id}: element is its own denominator element")
        elif element.denominator_element_id not in known_ids:
            issues.append(
                f"{element.id}: unknown denominator element '{element.denominator_element_id}'"
            )

    seen = Counter(p.setting for p in element.probabilities)
    for setting, n in sorted(seen.items()):
        if n > 1:
            issues.append(f"{element.id}: {n} probability entries for setting {setting}")
        if setting not in settings:
            issues.append(f"{element.id}: probability for unknown setting {setting}")

    for prob in element.probabilities:
        if not math.isfinite(prob.denominator) or prob.denominator <= 1.0:
            issues.append(
                f"{element.id}: denominator {prob.denominator} for setting "
                f"{prob.setting} is out of range (must be finite and > 1)"
            )

    missing = sorted(settings - set(seen))
    if missing:
        issues.append(
            f"{element.id}: no probability for settings {missing} (skipped for those settings)"
        )

    return issues


def validate_machine(machine: MachineData) -> List[str]:
    """Return a list of issues found in a machine definition (empty if valid)."""
    issues = []

    if not machine.settings:
        issues.append("machine has no settings")

    duplicate_settings = sorted(s for s, n in Counter(machine.settings).items() if n > 1)
    if duplicate_settings:
        issues.append(f"duplicate settings: {duplicate_settings}")

    duplicate_ids = sorted(i for i, n in Counter(machine.element_ids).items() if n > 1)
    if duplicate_ids:
        issues.append(f"duplicate element ids: {duplicate_ids}")

    for element in machine.elements:
        issues.extend(_validate_element(element, machine))

    return issues


def validate_catalog(catalog: MachineCatalog) -> Dict[str, List[str]]:
    """Issues per machine id."""
    return {machine.id: validate_machine(machine) for machine in catalog}


def main(argv: List[str] = None) -> int:
    """Validate a catalog file and print a summary."""
    argv = sys.argv[1:] if argv is None else argv
    path = Path(argv[0]) if argv else DEFAULT_CATALOG_PATH

    print(f"=== Validating catalog {path.name} ===")

    try:
        catalog = MachineCatalog.from_file(path)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Could not load catalog: {e}")
        return 1

    results = validate_catalog(catalog)
    failed = 0
    for machine_id, issues in results.items():
        if issues:
            failed += 1
            print(f"❌ {machine_id}: {len(issues)} issue(s)")
            for issue in issues:
                print(f"   - {issue}")
        else:
            print(f"✅ {machine_id}")

    print(f"\n{len(results) - failed}/{len(results)} machines passed")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
