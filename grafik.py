#!/usr/bin/env python3
"""
Grafik - 2-D Formula Plotter

Main entry point for the Grafik formula plotter.
This file serves as a thin wrapper that delegates all functionality
to the grafik_pkg package.

Usage:
    python grafik.py "y = 2x + 1"                   # Show axes and branches
    python grafik.py "x^2 + y^2 = 25" --points      # Print sampled points
    python grafik.py "y = sin(x)" --ascii           # ASCII plot
    python grafik.py "y = x^2" -o parabola.png      # Save a PNG
    python grafik.py --help                         # Show help
"""

from __future__ import annotations

import sys
from typing import Optional, List


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for Grafik.

    Delegates all functionality to the grafik_pkg.cli module,
    which handles argument parsing, sampling, and output formatting.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    from grafik_pkg.cli import main_entry

    try:
        return main_entry(sys.argv[1:] if argv is None else argv)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
