"""Algebra adapter: the only place the plotting core talks to SymPy.

The formula model and the sampler depend on the ``AlgebraAdapter`` protocol,
so another computer-algebra backend can be swapped in without touching them.
``SympyAdapter`` is the default implementation.
"""

from __future__ import annotations

import math
import re
from typing import Any, List, Mapping, Optional, Protocol, Union

import sympy as sp

from .config import EVALF_PRECISION, NUMERIC_TOLERANCE
from .logging_config import get_logger
from .parser import parse_formula, preprocess
from .types import UnsolvableError

logger = get_logger("algebra")

Bindings = Mapping[str, Union[int, float, str]]


class AlgebraAdapter(Protocol):
    """Narrow interface onto a computer-algebra engine."""

    def parse(self, text: str) -> sp.Basic:
        ...

    def variables(self, expr: sp.Basic, text: Optional[str] = None) -> List[str]:
        ...

    def evaluate(
        self, expr: Union[str, sp.Basic], bindings: Optional[Bindings] = None
    ) -> Union[float, str, None]:
        ...

    def isolate(self, expr: sp.Basic, variable: str) -> List[sp.Expr]:
        ...


def _to_sympy_number(name: str, value: Any) -> sp.Expr:
    """Convert a binding value (number or numeric string) without evaluating text."""
    if isinstance(value, bool):
        raise TypeError(f"Binding for {name} must be numeric, got {value!r}")
    if isinstance(value, str):
        try:
            return sp.Float(value.strip())
        except ValueError:
            raise TypeError(f"Binding for {name} must be numeric, got {value!r}")
    if isinstance(value, int):
        return sp.Integer(value)
    if isinstance(value, float):
        return sp.Float(value)
    if isinstance(value, sp.Expr) and value.is_number:
        return value
    raise TypeError(f"Binding for {name} must be numeric, got {value!r}")


def _appearance_key(text: str, name: str) -> int:
    match = re.search(rf"(?<![A-Za-z0-9_]){re.escape(name)}(?![A-Za-z0-9_])", text)
    return match.start() if match else len(text)


class SympyAdapter:
    """AlgebraAdapter backed by SymPy."""

    def __init__(self, tolerance: float = NUMERIC_TOLERANCE, precision: int = EVALF_PRECISION):
        self.tolerance = tolerance
        self.precision = precision

    def parse(self, text: str) -> sp.Basic:
        """Preprocess and parse formula text; equations become ``Eq``."""
        return parse_formula(text)

    def variables(self, expr: sp.Basic, text: Optional[str] = None) -> List[str]:
        """Free variable names of ``expr``.

        Names are ordered by their first appearance in the preprocessed
        ``text`` when given, otherwise alphabetically. The order is stable for
        a fixed input.
        """
        names = sorted(str(sym) for sym in expr.free_symbols)
        if text:
            order_text = preprocess(text)
            names.sort(key=lambda name: _appearance_key(order_text, name))
        return names

    def evaluate(
        self, expr: Union[str, sp.Basic], bindings: Optional[Bindings] = None
    ) -> Union[float, str, None]:
        """Substitute ``bindings`` into ``expr`` and evaluate numerically.

        Returns:
            A float for a finite real result, None for a non-real, infinite
            or undefined result, and the symbolic string when the expression
            does not reduce to a number.

        Raises:
            TypeError: If a binding value is not numeric
        """
        if isinstance(expr, str):
            expr = self.parse(expr)
        subs = {
            sp.Symbol(name): _to_sympy_number(name, value)
            for name, value in (bindings or {}).items()
        }
        try:
            value = expr.subs(subs) if subs else expr
            if not isinstance(value, sp.Expr):
                return str(value)
            value = value.evalf(self.precision)
            if not value.is_number:
                return str(value)
            if value.has(sp.zoo, sp.nan, sp.oo, -sp.oo):
                return None
            real, imag = value.as_real_imag()
            if abs(float(imag)) > self.tolerance:
                return None
            result = float(real)
        except (TypeError, ValueError, ZeroDivisionError, OverflowError) as exc:
            logger.debug("Evaluation of %s with %s failed: %s", expr, bindings, exc)
            return None
        return result if math.isfinite(result) else None

    def isolate(self, expr: sp.Basic, variable: str) -> List[sp.Expr]:
        """Solve ``expr`` (an equation, or an expression equal to zero) for ``variable``.

        One solve attempt is made; branches containing the imaginary unit are
        dropped.

        Raises:
            UnsolvableError: If SymPy cannot isolate the variable or finds no
                             real branch
        """
        symbol = sp.Symbol(variable)
        try:
            solutions = sp.solve(expr, symbol)
        except (NotImplementedError, ValueError, TypeError) as exc:
            raise UnsolvableError(f"Cannot isolate {variable}: {exc}") from exc

        if isinstance(solutions, dict):
            solutions = [solutions.get(symbol)]
        branches = [
            sp.sympify(sol)
            for sol in solutions
            if sol is not None and not sp.sympify(sol).has(sp.I)
        ]
        if not branches:
            raise UnsolvableError(f"No real solution for {variable}")
        return branches


_DEFAULT_ADAPTER: Optional[SympyAdapter] = None


def default_adapter() -> SympyAdapter:
    """Return the shared SympyAdapter instance."""
    global _DEFAULT_ADAPTER
    if _DEFAULT_ADAPTER is None:
        _DEFAULT_ADAPTER = SympyAdapter()
    return _DEFAULT_ADAPTER
