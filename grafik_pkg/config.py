"""Centralized configuration for Grafik.

This module defines:
- Sampling defaults (step, window bounds, sample limits)
- Numeric tolerances used when deciding whether a value is real
- Input validation limits
- Renderer defaults (font size, ASCII plot size, image resolution)
- Allowed SymPy names and parser transformations
- Regex patterns for preprocessing formula text

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with GRAFIK_)
"""

import os
import re

import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication,
    standard_transformations,
)

try:
    import importlib.metadata

    VERSION = importlib.metadata.version("grafik")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Sampling defaults
DEFAULT_STEP = float(os.getenv("GRAFIK_DEFAULT_STEP", "0.1"))
WINDOW_MIN = float(os.getenv("GRAFIK_WINDOW_MIN", "-10"))
WINDOW_MAX = float(os.getenv("GRAFIK_WINDOW_MAX", "10"))
MAX_SAMPLES = int(
    os.getenv("GRAFIK_MAX_SAMPLES", "200000")
)  # per branch, guards against tiny steps over huge windows

# Numeric tolerance for imaginary part filtering
NUMERIC_TOLERANCE = float(os.getenv("GRAFIK_NUMERIC_TOLERANCE", "1e-10"))
EVALF_PRECISION = int(os.getenv("GRAFIK_EVALF_PRECISION", "15"))

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("GRAFIK_MAX_INPUT_LENGTH", "1000"))  # characters
MAX_EXPRESSION_DEPTH = int(os.getenv("GRAFIK_MAX_EXPRESSION_DEPTH", "100"))

# Renderer defaults
FONT_SIZE = float(os.getenv("GRAFIK_FONT_SIZE", "14"))
ASCII_ROWS = int(os.getenv("GRAFIK_ASCII_ROWS", "20"))
ASCII_COLS = int(os.getenv("GRAFIK_ASCII_COLS", "60"))
PLOT_DPI = int(os.getenv("GRAFIK_PLOT_DPI", "150"))
FIGURE_INCHES = float(os.getenv("GRAFIK_FIGURE_INCHES", "8"))
CURVE_COLOR = os.getenv("GRAFIK_CURVE_COLOR", "red")
GRID_COLOR = os.getenv("GRAFIK_GRID_COLOR", "#dddddd")

# Logging
LOG_LEVEL = os.getenv("GRAFIK_LOG_LEVEL", "WARNING").upper()
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _log10(arg):
    return sp.log(arg, 10)


ALLOWED_SYMPY_NAMES = {
    "pi": sp.pi,
    "PI": sp.pi,
    "e": sp.E,
    "E": sp.E,
    "sqrt": sp.sqrt,
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "log": sp.log,
    "log10": _log10,
    "exp": sp.exp,
    "Abs": sp.Abs,
    "abs": sp.Abs,  # lowercase alias for convenience
}

# Function classes a parsed formula may contain (log10 parses to log(...)/log(10))
ALLOWED_FUNCTIONS = {
    "sqrt",
    "sin",
    "cos",
    "tan",
    "asin",
    "acos",
    "atan",
    "sinh",
    "cosh",
    "tanh",
    "log",
    "exp",
    "Abs",
}

# Names the parser may resolve globally; everything else becomes a Symbol,
# so sympy names such as beta or gamma stay usable as variables.
PARSE_GLOBALS = {
    "Integer": sp.Integer,
    "Float": sp.Float,
    "Rational": sp.Rational,
    "Symbol": sp.Symbol,
    "Function": sp.Function,
    "factorial": sp.factorial,
    "factorial2": sp.factorial2,
}

TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication,
    convert_xor,
)

VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# log -> log10 and ln -> log in a single pass, so rewritten text is never revisited
LOG_REWRITES = {"log": "log10", "ln": "log"}
LOG_TOKEN_REGEX = re.compile(r"\b(log|ln)\b")

SQRT_UNICODE_REGEX = re.compile(r"√\s*\(")
# exponent literals such as 1e3 and 1.5e-3 are numbers, not 1*e3
DIGIT_LETTERS_REGEX = re.compile(
    r"(?<![A-Za-z0-9_.])(\d+(?:\.\d+)?)(?![eE][+-]?\d)\s*([A-Za-z_(])"
)
