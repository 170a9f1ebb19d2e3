"""Formula parsing and preprocessing module.

This module handles:
- Input sanitization and validation
- Lexical rewriting of logarithms (log -> log10, ln -> log)
- Expression preprocessing (unicode symbols, exponents, implicit multiplication)
- Splitting a formula into the two sides of an equation
- SymPy parsing with a whitelist of names and functions
- Number formatting for display
"""

from __future__ import annotations

import re
from functools import lru_cache
from tokenize import TokenError
from typing import Any

import sympy as sp
from sympy import parse_expr

from .config import (
    ALLOWED_FUNCTIONS,
    ALLOWED_SYMPY_NAMES,
    DIGIT_LETTERS_REGEX,
    LOG_REWRITES,
    LOG_TOKEN_REGEX,
    MAX_EXPRESSION_DEPTH,
    MAX_INPUT_LENGTH,
    PARSE_GLOBALS,
    SQRT_UNICODE_REGEX,
    TRANSFORMATIONS,
)
from .logging_config import get_logger
from .types import FormulaSyntaxError, ValidationError

logger = get_logger("parser")

# Basic denylist to avoid dangerous tokens before SymPy parsing
FORBIDDEN_TOKENS = (
    "__",
    "import",
    "lambda",
    "eval",
    "exec",
    "open",
    "os.",
    "sys.",
    "subprocess",
    "builtins",
    "getattr",
    "setattr",
    "delattr",
    "compile",
    "globals",
    "locals",
)

_SUPERSCRIPTS = {
    "⁰": "0",
    "¹": "1",
    "²": "2",
    "³": "3",
    "⁴": "4",
    "⁵": "5",
    "⁶": "6",
    "⁷": "7",
    "⁸": "8",
    "⁹": "9",
    "⁻": "-",
}
_SUPERSCRIPT_REGEX = re.compile(f"([{''.join(_SUPERSCRIPTS)}]+)")


def format_number(val: Any, precision: int = 6) -> str:
    """Format a numeric value with specified precision.

    Args:
        val: Numeric value to format
        precision: Number of significant digits

    Returns:
        Formatted string representation of the number
    """
    try:
        fmt = "{:." + str(int(precision)) + "g}"
        text = fmt.format(float(val))
        return "0" if text == "-0" else text
    except (ValueError, TypeError, OverflowError):
        return str(val)


def is_balanced(input_str: str) -> tuple[bool, int | None]:
    """Check if parentheses/brackets are balanced. Returns (is_balanced, error_position)."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    stack: list[tuple[str, int]] = []  # (char, position)
    for i, char in enumerate(input_str):
        if char in pairs:
            stack.append((char, i))
        elif char in pairs.values():
            if not stack:
                return False, i
            opening, pos = stack.pop()
            if pairs[opening] != char:
                return False, i
    if stack:
        return False, stack[0][1]  # Return position of first unmatched
    return True, None


def rewrite_logarithms(text: str) -> str:
    """Rewrite ``log`` to ``log10`` and ``ln`` to ``log``.

    Both tokens are matched against the original text in one pass, so the
    ``log`` produced from an ``ln`` is never turned into ``log10``.

    >>> rewrite_logarithms("log(x) + ln(x)")
    'log10(x) + log(x)'
    """
    return LOG_TOKEN_REGEX.sub(lambda m: LOG_REWRITES[m.group(1)], text)


def preprocess(input_str: str) -> str:
    """Preprocess formula text for parsing.

    Applies transformations:
    - Validates input length, forbidden tokens and balanced brackets
    - Rewrites logarithms (log -> log10, ln -> log)
    - Standardizes unicode symbols (minus signs, π, ×, √, superscripts)
    - Converts ^ to **
    - Inserts implicit multiplication between numbers and names (2x -> 2*x)

    Raises:
        ValidationError: If input is empty, too long, contains forbidden
                        tokens or has unbalanced parentheses/brackets
    """
    input_str = input_str.strip() if input_str else ""
    if not input_str:
        raise ValidationError("Formula cannot be empty", "EMPTY_INPUT")
    if len(input_str) > MAX_INPUT_LENGTH:
        raise ValidationError(
            f"Formula too long (>{MAX_INPUT_LENGTH} characters)", "TOO_LONG"
        )

    lowered = input_str.lower()
    for tok in FORBIDDEN_TOKENS:
        if tok in lowered:
            logger.warning("Blocked formula containing forbidden token %r", tok)
            raise ValidationError(
                f"Formula contains forbidden token: {tok}", "FORBIDDEN_TOKEN"
            )

    balanced, error_pos = is_balanced(input_str)
    if not balanced:
        raise ValidationError(
            f"Mismatched or unbalanced parentheses/brackets at position {error_pos}",
            "UNBALANCED_PARENS",
        )

    processed_str = rewrite_logarithms(input_str)
    processed_str = processed_str.replace("−", "-").replace("–", "-")
    processed_str = processed_str.replace("π", "pi")
    processed_str = processed_str.replace("×", "*").replace("·", "*")
    processed_str = SQRT_UNICODE_REGEX.sub("sqrt(", processed_str)
    processed_str = _SUPERSCRIPT_REGEX.sub(
        lambda m: "**" + "".join(_SUPERSCRIPTS[c] for c in m.group(1)), processed_str
    )
    processed_str = processed_str.replace("^", "**")
    processed_str = DIGIT_LETTERS_REGEX.sub(r"\1*\2", processed_str)
    return re.sub(r"\s+", " ", processed_str).strip()


def split_equation(preprocessed: str) -> tuple[str, str | None]:
    """Split preprocessed text at its ``=`` into (lhs, rhs); rhs is None for a bare expression."""
    if any(op in preprocessed for op in ("<", ">", "!=", "==")):
        raise ValidationError(
            "Inequalities and comparisons are not supported", "UNSUPPORTED_RELATION"
        )
    parts = preprocessed.split("=")
    if len(parts) > 2:
        raise ValidationError(
            "Invalid formula format: more than one '=' sign", "MULTIPLE_EQUALS"
        )
    if len(parts) == 1:
        return parts[0].strip(), None
    lhs, rhs = parts[0].strip(), parts[1].strip()
    if not lhs or not rhs:
        raise ValidationError(
            "Invalid formula format: both sides of '=' are required", "MISSING_SIDE"
        )
    return lhs, rhs


def _function_name(expr: sp.Basic) -> str:
    func = expr.func
    return getattr(func, "__name__", None) or str(func)


def _validate_expression_tree(expr: Any, depth: int = 0) -> None:
    """Reject function calls outside the whitelist and overly deep trees."""
    if depth > MAX_EXPRESSION_DEPTH:
        raise ValidationError(
            f"Formula too deeply nested (>{MAX_EXPRESSION_DEPTH} levels)", "TOO_DEEP"
        )
    if not isinstance(expr, sp.Basic):
        raise ValidationError(
            f"Expression type '{type(expr).__name__}' not allowed", "FORBIDDEN_TYPE"
        )
    if isinstance(expr, sp.Function):
        name = _function_name(expr)
        if name not in ALLOWED_FUNCTIONS:
            logger.warning("Blocked forbidden function %r", name)
            raise ValidationError(f"Function '{name}' not allowed", "FORBIDDEN_FUNCTION")
    for arg in expr.args:
        _validate_expression_tree(arg, depth + 1)


@lru_cache(maxsize=256)
def parse_preprocessed(expr_str: str) -> sp.Basic:
    """Parse and validate one preprocessed side of a formula."""
    try:
        expr = parse_expr(
            expr_str,
            local_dict=dict(ALLOWED_SYMPY_NAMES),
            global_dict=dict(PARSE_GLOBALS),
            transformations=TRANSFORMATIONS,
        )
    except (
        SyntaxError,
        TokenError,
        TypeError,
        ValueError,
        AttributeError,
        sp.SympifyError,
    ) as exc:
        raise FormulaSyntaxError(f"Could not parse '{expr_str}': {exc}") from exc
    if isinstance(expr, (tuple, list)):
        raise FormulaSyntaxError(f"Could not parse '{expr_str}': unexpected comma")
    _validate_expression_tree(expr)
    if not isinstance(expr, sp.Expr):
        raise FormulaSyntaxError(f"'{expr_str}' is not an algebraic expression")
    return expr


def parse_formula(text: str) -> sp.Basic:
    """Parse raw formula text into a SymPy expression or unevaluated ``Eq``."""
    lhs, rhs = split_equation(preprocess(text))
    left = parse_preprocessed(lhs)
    if rhs is None:
        return left
    return sp.Eq(left, parse_preprocessed(rhs), evaluate=False)
