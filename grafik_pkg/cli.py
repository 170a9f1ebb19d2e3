from __future__ import annotations

import argparse
import json
from typing import Any

from .config import LOG_LEVEL, LOG_LEVELS, VAR_NAME_RE, VERSION
from .logging_config import get_logger, setup_logging
from .parser import format_number
from .types import AxisPair, DrawOptions, Window

logger = get_logger(__name__)


def _parse_assignment(text: str, flag: str) -> tuple[str, float]:
    """Parse ``NAME=VALUE`` from a command-line flag.

    Raises:
        ValueError: If the text is not a valid name followed by a number
    """
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or not VAR_NAME_RE.match(name):
        raise ValueError(f"{flag} expects NAME=VALUE, got '{text}'")
    try:
        return name, float(value.strip())
    except ValueError:
        raise ValueError(f"{flag} value for {name} must be a number, got '{value.strip()}'")


def _format_point(point: dict[str, float]) -> str:
    return ", ".join(f"{name} = {format_number(value)}" for name, value in point.items())


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running Grafik health check...")
    print("-" * 50)

    try:
        import sympy as sp

        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        checks_failed += 1

    try:
        from .algebra import default_adapter

        value = default_adapter().evaluate("log(100)")
        if isinstance(value, float) and abs(value - 2.0) < 1e-9:
            print("[OK] Basic parsing and evaluation works")
            checks_passed += 1
        else:
            print(f"[FAIL] Evaluation failed: expected 2, got {value}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Evaluation check failed: {e}")
        checks_failed += 1

    try:
        from .formula import build_formula
        from .sampler import sample_points

        points = sample_points(build_formula("x = 3"), Window.default())
        if len(points) == 2:
            print("[OK] Formula sampling works")
            checks_passed += 1
        else:
            print(f"[FAIL] Sampling check failed: {points}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Sampling check failed: {e}")
        checks_failed += 1

    try:
        import numpy

        print(f"[OK] NumPy {numpy.__version__} available")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] NumPy import failed: {e}")
        checks_failed += 1

    try:
        import matplotlib

        print(f"[OK] Matplotlib {matplotlib.__version__} available")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] Matplotlib import failed: {e}")
        checks_failed += 1

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def print_result_pretty(res: dict[str, Any], output_format: str = "human") -> None:
    """Print result in specified format.

    Args:
        res: Result dictionary (from a result object's to_dict())
        output_format: "json" for JSON output, "human" for human-readable
    """
    if output_format == "json":
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return
    if not res.get("ok"):
        print("Error:", res.get("error"))
        return
    if "branches" in res:
        print(f"Horizontal axis: {res['horizontal']}")
        print(f"Vertical axis: {res['vertical']}")
        for axis, name in (("vertical", res["vertical"]), ("horizontal", res["horizontal"])):
            for branch in res["branches"].get(axis, []):
                print(f"  {name} = {branch}")
        for warning in res.get("warnings", []):
            print(f"Warning: {warning}")
    elif "points" in res:
        if not res["points"]:
            print("No points")
        for point in res["points"]:
            print(_format_point(point))
    elif "result" in res:
        print(res["result"])


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for Grafik CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        prog="grafik", description="Resolve, sample and plot 2-D formulas"
    )
    parser.add_argument("formula", nargs="?", help='Formula, e.g. "y = 2x + 1"')
    parser.add_argument(
        "--const",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Substitute a constant into the formula (repeatable)",
    )
    parser.add_argument(
        "--window",
        type=float,
        nargs=4,
        metavar=("HMIN", "HMAX", "VMIN", "VMAX"),
        help="Coordinate window (default: config WINDOW_MIN..WINDOW_MAX on both axes)",
    )
    parser.add_argument("--step", type=float, help="Sampling step")
    parser.add_argument(
        "--probe", type=str, metavar="NAME=VALUE", help="Points where one axis is fixed"
    )
    parser.add_argument("--points", action="store_true", help="Print sampled points")
    parser.add_argument("--ascii", action="store_true", help="Print an ASCII plot")
    parser.add_argument("-o", "--output", type=str, help="Save the plot as an image")
    parser.add_argument(
        "--grid", type=float, nargs=2, metavar=("H", "V"), help="Grid line spacing"
    )
    parser.add_argument(
        "--stretch", type=float, nargs=2, metavar=("H", "V"), help="Axis stretch factors"
    )
    parser.add_argument("--font-size", type=float, help="Tick label font size")
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=list(LOG_LEVELS),
        default=LOG_LEVEL if LOG_LEVEL in LOG_LEVELS else "WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    args = parser.parse_args(argv)
    output_format = args.format

    setup_logging(level=args.log_level, log_file=args.log_file)

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()
    if not args.formula or not args.formula.strip():
        print("Error: Empty input. Please enter a formula, e.g. \"y = 2x + 1\".")
        return 1

    from . import api

    try:
        constants = dict(_parse_assignment(c, "--const") for c in args.const)
        coordinate = dict([_parse_assignment(args.probe, "--probe")]) if args.probe else None
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    window = Window.from_bounds(*args.window) if args.window else None
    options = DrawOptions()
    if args.grid or args.stretch or args.font_size:
        defaults = DrawOptions()
        options = DrawOptions(
            stretch=AxisPair(*args.stretch) if args.stretch else defaults.stretch,
            grid_step=AxisPair(*args.grid) if args.grid else defaults.grid_step,
            font_size=args.font_size or defaults.font_size,
        )

    if args.ascii or args.output:
        result = api.plot(
            args.formula,
            window=window,
            step=args.step,
            constants=constants,
            options=options,
            output=args.output,
            ascii=args.ascii,
            coordinate=coordinate,
        )
    elif coordinate is not None:
        result = api.probe(args.formula, coordinate, constants=constants)
    elif args.points:
        result = api.sample(args.formula, window=window, step=args.step, constants=constants)
    else:
        result = api.resolve(args.formula, constants=constants, step=args.step)

    print_result_pretty(result.to_dict(), output_format)
    if not result.ok:
        logger.debug(
            "Rejected: %s (%s)", result.error, result.code, extra={"formula": args.formula}
        )
        return 1
    return 0


if __name__ == "__main__":
    """Allow running the CLI module directly with python -m grafik_pkg.cli"""
    import sys

    sys.exit(main_entry())
