"""Point probe: the other-axis values of a formula at one fixed coordinate."""

from __future__ import annotations

import math
from typing import List, Mapping, Optional

from .algebra import AlgebraAdapter, default_adapter
from .formula import Formula
from .logging_config import get_logger
from .types import InvalidCoordinateError, Point

logger = get_logger("probe")


def probe_point(
    formula: Formula,
    coordinate: Mapping[str, float],
    adapter: Optional[AlgebraAdapter] = None,
) -> List[Point]:
    """Full points of ``formula`` where one axis is fixed to a value.

    Args:
        formula: Resolved formula
        coordinate: Exactly one axis name mapped to its value, e.g. {"x": 3}
        adapter: Algebra backend (default: shared SympyAdapter)

    Returns:
        One point per branch that evaluates to a real number. Points are not
        clipped to any window.

    Raises:
        InvalidCoordinateError: If the coordinate does not fix exactly one
                                axis of the formula
    """
    adapter = adapter or default_adapter()
    if len(coordinate) != 1:
        raise InvalidCoordinateError(
            f"Coordinate must fix exactly one axis, got {dict(coordinate)!r}"
        )
    (name, raw_value), = coordinate.items()
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        raise InvalidCoordinateError(f"Coordinate value for {name} must be numeric")
    if not math.isfinite(value):
        raise InvalidCoordinateError(f"Coordinate value for {name} must be finite")

    if name == formula.vertical_name:
        branches, fixed_vertical = formula.branches.horizontal, True
    elif name == formula.horizontal_name:
        branches, fixed_vertical = formula.branches.vertical, False
    else:
        raise InvalidCoordinateError(
            f"'{name}' is not an axis of this formula "
            f"({formula.horizontal_name}, {formula.vertical_name})"
        )

    points: List[Point] = []
    for branch in branches:
        result = adapter.evaluate(branch, {name: value})
        if not isinstance(result, float):
            logger.debug("Branch %s has no real value at %s=%s", branch, name, value)
            continue
        if fixed_vertical:
            points.append(formula.point(result, value))
        else:
            points.append(formula.point(value, result))
    return points
