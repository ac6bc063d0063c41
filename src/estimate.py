#!/usr/bin/env python3
"""
Run the setting estimation CLI from a checkout, without installing.

    python src/estimate.py --machine my-juggler-5 --games 1000 --count reg=4
"""

import sys
from pathlib import Path

# Packages live next to this script
sys.path.insert(0, str(Path(__file__).parent))

from setting_estimation.cli import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
