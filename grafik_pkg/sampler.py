"""Point sampler: walks a coordinate window and evaluates formula branches.

All functions are pure: the same (formula, window, step) always produces the
same points, and nothing is cached between calls.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional

from .algebra import AlgebraAdapter, default_adapter
from .config import MAX_SAMPLES
from .formula import Formula
from .logging_config import get_logger
from .types import InvalidStepError, Point, Range, Window, validate_step

logger = get_logger("sampler")

# absorbs float error when (max - min) / step is a whole number
_STEP_EPSILON = 1e-9


def axis_values(rng: Range, step: float) -> List[float]:
    """Sample positions from ``rng.min - step`` to ``rng.max + step`` inclusive.

    Positions are computed from their index rather than by accumulation, so
    long walks do not drift.

    Raises:
        InvalidStepError: If the walk would exceed MAX_SAMPLES positions
    """
    step = validate_step(step)
    intervals = int(math.floor(rng.span / step + _STEP_EPSILON)) + 2
    if intervals + 1 > MAX_SAMPLES:
        raise InvalidStepError(
            f"Step {step:g} is too small for a range of {rng.span:g} "
            f"(more than {MAX_SAMPLES} samples)"
        )
    start = rng.min - step
    return [start + i * step for i in range(intervals + 1)]


def _walk_branch(
    formula: Formula,
    branch: Any,
    along: str,
    positions: List[float],
    bounds: Range,
    step: float,
    adapter: AlgebraAdapter,
) -> List[Point]:
    """Evaluate one branch at every position of the ``along`` axis.

    ``along`` is "horizontal" for vertical branches (y as a function of x) and
    "vertical" for horizontal branches.
    """
    name = formula.horizontal_name if along == "horizontal" else formula.vertical_name
    points: List[Point] = []
    skipped = 0
    for position in positions:
        value = adapter.evaluate(branch, {name: position})
        if not isinstance(value, float):
            skipped += 1
            continue
        if not bounds.contains(value, margin=step):
            continue
        if along == "horizontal":
            points.append(formula.point(position, value))
        else:
            points.append(formula.point(value, position))
    if skipped:
        logger.debug("Skipped %d unsolvable samples of branch %s", skipped, branch)
    return points


def _constant_segments(
    formula: Formula, window: Window, adapter: AlgebraAdapter
) -> List[List[Point]]:
    """Endpoints of the straight lines drawn by a one-variable formula."""
    segments: List[List[Point]] = []
    if formula.axes.horizontal == "x" and formula.branches.horizontal:
        for branch in formula.branches.horizontal:
            value = adapter.evaluate(branch, {})
            if isinstance(value, float):
                segments.append(
                    [
                        formula.point(value, window.vertical.min),
                        formula.point(value, window.vertical.max),
                    ]
                )
    elif formula.axes.vertical and formula.branches.vertical:
        for branch in formula.branches.vertical:
            value = adapter.evaluate(branch, {})
            if isinstance(value, float):
                segments.append(
                    [
                        formula.point(window.horizontal.min, value),
                        formula.point(window.horizontal.max, value),
                    ]
                )
    return segments


def sample_branches(
    formula: Formula,
    window: Window,
    step: Optional[float] = None,
    adapter: Optional[AlgebraAdapter] = None,
) -> List[List[Point]]:
    """Sample each branch of ``formula`` into its own polyline.

    Vertical branches come first (in solver order), then horizontal branches.

    Raises:
        InvalidStepError: If step is not positive
        InvalidWindowError: If min >= max on either axis
    """
    adapter = adapter or default_adapter()
    step = validate_step(formula.step if step is None else step)
    window.validate()

    if formula.is_degenerate:
        return _constant_segments(formula, window, adapter)

    segments: List[List[Point]] = []
    if formula.branches.vertical:
        positions = axis_values(window.horizontal, step)
        for branch in formula.branches.vertical:
            segments.append(
                _walk_branch(
                    formula, branch, "horizontal", positions, window.vertical, step, adapter
                )
            )
    if formula.branches.horizontal:
        positions = axis_values(window.vertical, step)
        for branch in formula.branches.horizontal:
            segments.append(
                _walk_branch(
                    formula, branch, "vertical", positions, window.horizontal, step, adapter
                )
            )
    return segments


def sample_points(
    formula: Formula,
    window: Window,
    step: Optional[float] = None,
    adapter: Optional[AlgebraAdapter] = None,
) -> List[Point]:
    """Ordered point sequence approximating the curve of ``formula`` in ``window``.

    Points of every branch are concatenated without deduplication; points may
    lie up to one step outside the window so clipped lines still meet the
    border.
    """
    return [
        point
        for segment in sample_branches(formula, window, step, adapter)
        for point in segment
    ]
