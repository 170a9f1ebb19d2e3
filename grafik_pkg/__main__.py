"""Main entry point for running grafik_pkg as a module.

This allows running Grafik with:
    python -m grafik_pkg "y = 2x + 1"
    python -m grafik_pkg --health-check
    python -m grafik_pkg "x^2 + y^2 = 25" --ascii

This is equivalent to running:
    python -m grafik_pkg.cli
    python grafik.py
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
