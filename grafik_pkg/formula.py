"""Formula model: axis classification and per-axis solution branches.

A formula in one or two variables is turned into an immutable ``Formula``
holding which variable is horizontal, which is vertical, and the expressions
giving each axis as a function of the other.

Classification rules (``classify_axes``):

==============  =========================  ==================  ================
free variables  rule                       horizontal          vertical
==============  =========================  ==================  ================
1               named ``x``                ``x``               -
1               named ``y``                -                   ``y``
1               any other name             -                   that variable
2               one named ``x``            ``x``               the other
2               one named ``y``, no ``x``  the other           ``y``
2               neither ``x`` nor ``y``    second enumerated   first enumerated
==============  =========================  ==================  ================

A bare single-variable expression (no ``=``) is solved for its roots like any
other formula, then also read against the missing axis: ``x^2`` plots
``y = x^2`` (plus its root line ``x = 0``) and ``t^2`` plots ``x = t^2``.
An expression without real roots is rejected.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

import sympy as sp
from sympy.logic.boolalg import BooleanAtom

from .algebra import AlgebraAdapter, default_adapter
from .config import ALLOWED_SYMPY_NAMES, DEFAULT_STEP, VAR_NAME_RE
from .logging_config import get_logger
from .types import (
    AxisVariables,
    Branches,
    ConstantBindingError,
    NoVariablesError,
    Point,
    TooManyVariablesError,
    UnresolvedFormulaError,
    UnsolvableError,
    validate_step,
)

logger = get_logger("formula")

DEFAULT_HORIZONTAL = "x"
DEFAULT_VERTICAL = "y"


def _other(names: Sequence[str], taken: str) -> str:
    return next(name for name in names if name != taken)


# (rule name, applies to the enumerated names?, axis assignment)
AXIS_RULES: Tuple[
    Tuple[str, Callable[[Sequence[str]], bool], Callable[[Sequence[str]], AxisVariables]],
    ...,
] = (
    (
        "sole-x",
        lambda names: list(names) == ["x"],
        lambda names: AxisVariables(horizontal="x"),
    ),
    (
        "sole-y",
        lambda names: list(names) == ["y"],
        lambda names: AxisVariables(vertical="y"),
    ),
    (
        "sole-other",
        lambda names: len(names) == 1,
        lambda names: AxisVariables(vertical=names[0]),
    ),
    (
        "pair-x",
        lambda names: len(names) == 2 and "x" in names,
        lambda names: AxisVariables(horizontal="x", vertical=_other(names, "x")),
    ),
    (
        "pair-y",
        lambda names: len(names) == 2 and "y" in names,
        lambda names: AxisVariables(horizontal=_other(names, "y"), vertical="y"),
    ),
    (
        "pair-other",
        lambda names: len(names) == 2,
        lambda names: AxisVariables(horizontal=names[1], vertical=names[0]),
    ),
)


def classify_axes(names: Sequence[str]) -> AxisVariables:
    """Assign enumerated variable names to the horizontal and vertical axes.

    Raises:
        NoVariablesError: If there are no variables
        TooManyVariablesError: If there are more than two variables
    """
    if not names:
        raise NoVariablesError("Formula does not contain any variables")
    if len(names) > 2:
        raise TooManyVariablesError(
            f"Formulas with more than 2 variables are not supported "
            f"(found {', '.join(names)})"
        )
    for rule, applies, assign in AXIS_RULES:
        if applies(names):
            axes = assign(names)
            logger.debug("Variables %s classified by rule %s: %s", names, rule, axes)
            return axes
    raise NoVariablesError(f"No classification rule matches variables {names}")


@dataclass(frozen=True)
class Formula:
    """Immutable, axis-resolved representation of a formula."""

    text: str
    axes: AxisVariables
    branches: Branches
    step: float = DEFAULT_STEP
    constants: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    warnings: Tuple[str, ...] = ()

    @property
    def horizontal_name(self) -> str:
        """Horizontal axis name, ``x`` when the axis is unresolved."""
        return self.axes.horizontal or DEFAULT_HORIZONTAL

    @property
    def vertical_name(self) -> str:
        """Vertical axis name, ``y`` when the axis is unresolved."""
        return self.axes.vertical or DEFAULT_VERTICAL

    @property
    def is_degenerate(self) -> bool:
        """True when only one axis has a variable."""
        return not self.axes.is_complete

    def point(self, horizontal: float, vertical: float) -> Point:
        return {self.horizontal_name: horizontal, self.vertical_name: vertical}

    def describe(self) -> dict[str, list[str]]:
        """Branch expressions as strings, keyed by axis."""
        return {
            "horizontal": [str(b) for b in self.branches.horizontal],
            "vertical": [str(b) for b in self.branches.vertical],
        }

    def __str__(self) -> str:
        return self.text


def _normalize_constants(constants: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    bound: dict[str, Any] = {}
    for name, value in (constants or {}).items():
        if not isinstance(name, str) or not VAR_NAME_RE.match(name):
            raise ConstantBindingError(f"Invalid constant name: {name!r}")
        if name in ALLOWED_SYMPY_NAMES:
            raise ConstantBindingError(f"Constant name '{name}' is reserved")
        if isinstance(value, bool):
            raise ConstantBindingError(f"Constant '{name}' must be numeric, got {value!r}")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ConstantBindingError(f"Constant '{name}' must be numeric, got {value!r}")
        if not math.isfinite(number):
            raise ConstantBindingError(f"Constant '{name}' must be finite, got {value!r}")
        bound[name] = value if isinstance(value, int) else number
    return bound


def _bind_constants(expr: sp.Basic, constants: Mapping[str, Any]) -> sp.Basic:
    names = ", ".join(sorted(constants))
    subs = {sp.Symbol(name): sp.sympify(value) for name, value in constants.items()}
    try:
        bound = expr.subs(subs)
    except (TypeError, ValueError, ZeroDivisionError) as exc:
        raise ConstantBindingError(f"Constants {names} could not be substituted: {exc}") from exc
    if isinstance(bound, BooleanAtom):
        raise ConstantBindingError(
            f"Formula could not be solved with the given constants ({names}): "
            f"it reduces to {bound}"
        )
    if bound.has(sp.zoo, sp.nan):
        raise ConstantBindingError(
            f"Formula is undefined with the given constants ({names})"
        )
    return bound


def _prefixed_axis(expr: sp.Basic, axes: AxisVariables) -> Optional[str]:
    """Axis whose variable the formula is already stated for (``v = rhs``)."""
    if not isinstance(expr, sp.Equality):
        return None
    for axis in ("vertical", "horizontal"):
        name = getattr(axes, axis)
        if name is None:
            continue
        symbol = sp.Symbol(name)
        if expr.lhs == symbol and symbol not in expr.rhs.free_symbols:
            return axis
    return None


def build_formula(
    text: str,
    step: Optional[float] = None,
    constants: Optional[Mapping[str, Any]] = None,
    adapter: Optional[AlgebraAdapter] = None,
) -> Formula:
    """Parse ``text`` and resolve it into a ``Formula``.

    Args:
        text: Formula with one or two variables (e.g. "y = 2x + 1", "x^2 + y^2 = 25")
        step: Default sampling interval for the formula (default: DEFAULT_STEP)
        constants: Values substituted into the formula before classification
        adapter: Algebra backend (default: shared SympyAdapter)

    Returns:
        Resolved Formula

    Raises:
        InvalidStepError: If step is not positive
        ValidationError / FormulaSyntaxError: If the text cannot be parsed
        ConstantBindingError: If the constants cannot be substituted
        NoVariablesError / TooManyVariablesError: If the formula has 0 or >2 variables
        UnresolvedFormulaError: If no branch can be derived for either axis
    """
    adapter = adapter or default_adapter()
    step = validate_step(DEFAULT_STEP if step is None else step)
    bound = _normalize_constants(constants)

    expr = adapter.parse(text)
    if bound:
        expr = _bind_constants(expr, bound)

    axes = classify_axes(adapter.variables(expr, text))
    is_equation = isinstance(expr, sp.Equality)
    prefixed = _prefixed_axis(expr, axes)
    solved: dict[str, List[Any]] = {"horizontal": [], "vertical": []}
    warnings: List[str] = []

    for axis in ("vertical", "horizontal"):
        name = getattr(axes, axis)
        if name is None:
            continue
        if axis == prefixed:
            solved[axis].append(expr.rhs)
            continue
        try:
            solved[axis].extend(adapter.isolate(expr, name))
        except UnsolvableError as exc:
            message = f"Formula could not be solved for {name}"
            logger.warning("%s: %s", message, exc, extra={"formula": text})
            warnings.append(message)

    # bare single-variable expression: the opposite axis equals the expression
    if not is_equation and not axes.is_complete and (solved["horizontal"] or solved["vertical"]):
        if axes.horizontal is not None:
            axes = AxisVariables(horizontal=axes.horizontal, vertical=DEFAULT_VERTICAL)
            solved["vertical"].append(expr)
        else:
            axes = AxisVariables(horizontal=DEFAULT_HORIZONTAL, vertical=axes.vertical)
            solved["horizontal"].append(expr)

    if not solved["horizontal"] and not solved["vertical"]:
        raise UnresolvedFormulaError(
            f"Formula could not be solved for either variable "
            f"({', '.join(axes.names)})"
        )

    formula = Formula(
        text=text,
        axes=axes,
        branches=Branches(
            horizontal=tuple(solved["horizontal"]),
            vertical=tuple(solved["vertical"]),
        ),
        step=step,
        constants=MappingProxyType(dict(bound)),
        warnings=tuple(warnings),
    )
    logger.debug("Resolved %r: axes=%s branches=%s", text, axes, formula.describe())
    return formula
